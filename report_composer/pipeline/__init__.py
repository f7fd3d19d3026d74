"""
Report composition pipeline modules.

Statistics aggregation, region capture, page layout and image bundling.
"""

from .statistics import (
    ColumnStatistic,
    DetailedStatistic,
    aggregate_statistics,
    data_completeness,
    detailed_statistics,
)
from .capture import (
    Captured,
    RasterSnapshot,
    RegionProvider,
    Skipped,
    capture_region,
    capture_section,
    capture_sections,
    forced_visible,
)
from .layout import (
    ImageBlock,
    LayoutDocument,
    PageGeometry,
    TextBlock,
    keep_with_image,
    place,
    scale_to_fit,
)

__all__ = [
    'ColumnStatistic',
    'DetailedStatistic',
    'aggregate_statistics',
    'data_completeness',
    'detailed_statistics',
    'Captured',
    'RasterSnapshot',
    'RegionProvider',
    'Skipped',
    'capture_region',
    'capture_section',
    'capture_sections',
    'forced_visible',
    'ImageBlock',
    'LayoutDocument',
    'PageGeometry',
    'TextBlock',
    'keep_with_image',
    'place',
    'scale_to_fit',
]
