#!/usr/bin/env python3
"""
Concrete region providers.

- ImageDirectoryProvider: regions are PNG files exported by the dashboard
- FigureRegionProvider: regions are Plotly figures rendered with Kaleido

Both track visibility per locator; a hidden region refuses to render, as an
on-screen panel collapsed to nothing would.
"""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple

import plotly.graph_objects as go
import plotly.io as pio
from PIL import Image as PILImage

from report_composer.core.errors import CaptureUnavailable
from report_composer.pipeline.capture import RasterSnapshot, RegionProvider

LOGGER = logging.getLogger(__name__)

# ============================================================================
# EXPORT CONFIGURATION
# ============================================================================
DEFAULT_WIDTH = 1400  # pixels
DEFAULT_HEIGHT = 800  # pixels
DEFAULT_SCALE = 2  # Retina quality


def png_dimensions(buffer: bytes) -> Tuple[int, int]:
    """
    Get image dimensions in pixels.

    Raises:
        RuntimeError: If the buffer is not a readable image
    """
    try:
        with PILImage.open(BytesIO(buffer)) as img:
            return img.size
    except Exception as e:
        raise RuntimeError(f"Cannot read image dimensions: {e}") from e


class VisibilityTracking(RegionProvider):
    """Region provider base that keeps a set of hidden locators."""

    def __init__(self, hidden: Optional[Iterable[str]] = None):
        self._hidden: Set[str] = set(hidden or ())

    def hide(self, locator: str) -> None:
        self._hidden.add(locator)

    def is_visible(self, locator: str) -> bool:
        return locator not in self._hidden

    def set_visible(self, locator: str, visible: bool) -> None:
        if visible:
            self._hidden.discard(locator)
        else:
            self._hidden.add(locator)

    def _require_visible(self, locator: str) -> None:
        if not self.is_visible(locator):
            raise CaptureUnavailable(locator, "region is hidden")


# ============================================================================
# PNG DIRECTORY
# ============================================================================
class ImageDirectoryProvider(VisibilityTracking):
    """
    Regions stored as ``<locator>.png`` inside a directory.

    Example:
        >>> provider = ImageDirectoryProvider(Path("exports/dashboard"))
        >>> provider.has_region("kpi-cards")
        True
    """

    def __init__(self, directory: Path, hidden: Optional[Iterable[str]] = None):
        super().__init__(hidden)
        self.directory = Path(directory)

    def _path(self, locator: str) -> Path:
        return self.directory / f"{locator}.png"

    def has_region(self, locator: str) -> bool:
        path = self._path(locator)
        return path.parent == self.directory and path.is_file()

    def snapshot(self, locator: str) -> RasterSnapshot:
        self._require_visible(locator)
        buffer = self._path(locator).read_bytes()
        width, height = png_dimensions(buffer)
        return RasterSnapshot(pixel_width=width, pixel_height=height, pixel_buffer=buffer)


# ============================================================================
# PLOTLY FIGURES
# ============================================================================
class FigureRegionProvider(VisibilityTracking):
    """
    Regions backed by Plotly figures.

    Snapshots render the figure's full layout size (layout width/height, or
    the defaults) multiplied by ``scale``.

    Args:
        figures: Mapping locator -> Figure
        scale: Scale factor (2 = retina)
    """

    def __init__(self, figures: Mapping[str, go.Figure],
                 scale: float = DEFAULT_SCALE,
                 hidden: Optional[Iterable[str]] = None):
        super().__init__(hidden)
        self.figures: Dict[str, go.Figure] = dict(figures)
        self.scale = scale

    def has_region(self, locator: str) -> bool:
        return locator in self.figures

    @staticmethod
    def content_extent(fig: go.Figure) -> Tuple[int, int]:
        width = fig.layout.width or DEFAULT_WIDTH
        height = fig.layout.height or DEFAULT_HEIGHT
        return int(width), int(height)

    def snapshot(self, locator: str) -> RasterSnapshot:
        self._require_visible(locator)
        fig = self.figures[locator]
        width, height = self.content_extent(fig)

        LOGGER.debug("Rendering figure '%s': %dx%d @ scale=%.1f",
                     locator, width, height, self.scale)
        try:
            buffer = pio.to_image(fig, format="png", width=width, height=height,
                                  scale=self.scale)
        except Exception as e:
            raise RuntimeError(f"Plotly export failed: {e}") from e

        px_width, px_height = png_dimensions(buffer)
        return RasterSnapshot(pixel_width=px_width, pixel_height=px_height,
                              pixel_buffer=buffer)
