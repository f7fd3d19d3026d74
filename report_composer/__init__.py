"""
Dashboard report composer.

Captures rendered dashboard regions, lays them out on A4 pages and appends a
statistical summary of the dataset, producing a static PDF.
"""

from .composer import (
    ComposedReport,
    ComposerState,
    ReportComposer,
    ReportKind,
    generate_dashboard_report,
    generate_detailed_report,
    output_name,
    write_report,
)
from .core import (
    CaptureUnavailable,
    DEFAULT_SECTIONS,
    EmptyDataset,
    ReportComposerError,
    SectionSpec,
    SerializationFailure,
)

__version__ = "0.1.0"

__all__ = [
    'ComposedReport',
    'ComposerState',
    'ReportComposer',
    'ReportKind',
    'generate_dashboard_report',
    'generate_detailed_report',
    'output_name',
    'write_report',
    'CaptureUnavailable',
    'DEFAULT_SECTIONS',
    'EmptyDataset',
    'ReportComposerError',
    'SectionSpec',
    'SerializationFailure',
]
