#!/usr/bin/env python3
"""
Page layout engine.

Places text and image blocks onto fixed-geometry pages, top to bottom,
starting new pages when the cursor would cross the bottom margin. Images are
scaled to fit the remaining width and height while keeping their aspect
ratio.

Coordinates use a top-left origin in layout units (millimetres by default).
Every operation returns a new LayoutDocument; documents are never mutated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Tuple, Union

from report_composer.core.styles import (
    BLOCK_SPACING,
    LINE_HEIGHT,
    MARGIN,
    PAGE_HEIGHT,
    PAGE_WIDTH,
)

LOGGER = logging.getLogger(__name__)

# Float slack when comparing a placed bottom edge to the margin.
_EPS = 1e-6


# ============================================================================
# GEOMETRY & BLOCKS
# ============================================================================
@dataclass(frozen=True)
class PageGeometry:
    """
    Fixed page geometry.

    Attributes:
        width: Page width
        height: Page height
        margin: Margin applied on all four sides
        line_height: Default cursor advance per text line
        block_spacing: Gap left below each placed image
    """
    width: float = PAGE_WIDTH
    height: float = PAGE_HEIGHT
    margin: float = MARGIN
    line_height: float = LINE_HEIGHT
    block_spacing: float = BLOCK_SPACING

    def __post_init__(self):
        if self.width <= 2 * self.margin or self.height <= 2 * self.margin:
            raise ValueError("Margins leave no room for content")
        if self.line_height <= 0:
            raise ValueError("Line height must be positive")

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def bottom(self) -> float:
        """Lowest y a placed element may reach."""
        return self.height - self.margin

    @classmethod
    def from_config(cls, layout_cfg: Mapping[str, Any]) -> "PageGeometry":
        return cls(
            width=float(layout_cfg.get("page_width", PAGE_WIDTH)),
            height=float(layout_cfg.get("page_height", PAGE_HEIGHT)),
            margin=float(layout_cfg.get("margin", MARGIN)),
            line_height=float(layout_cfg.get("line_height", LINE_HEIGHT)),
            block_spacing=float(layout_cfg.get("block_spacing", BLOCK_SPACING)),
        )


@dataclass(frozen=True)
class TextBlock:
    lines: Tuple[str, ...]
    style: str = "body"
    line_height: Optional[float] = None
    spacing_after: float = 0.0
    indent: float = 0.0

    @classmethod
    def of(cls, text: str, style: str = "body", line_height: Optional[float] = None,
           spacing_after: float = 0.0) -> "TextBlock":
        return cls(tuple(text.splitlines() or [""]), style, line_height, spacing_after)


@dataclass(frozen=True)
class ImageBlock:
    pixel_width: int
    pixel_height: int
    payload: bytes = b""
    label: str = ""

    def __post_init__(self):
        if self.pixel_width <= 0 or self.pixel_height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.pixel_width}x{self.pixel_height}"
            )


Block = Union[TextBlock, ImageBlock]


@dataclass(frozen=True)
class Placement:
    """One positioned element on a page."""
    kind: str
    x: float
    y: float
    width: float
    height: float
    text: str = ""
    style: str = "body"
    payload: bytes = field(default=b"", repr=False)
    label: str = ""


Page = Tuple[Placement, ...]


@dataclass(frozen=True)
class LayoutDocument:
    """Pages placed so far plus the cursor on the last page."""
    geometry: PageGeometry
    pages: Tuple[Page, ...]
    y_offset: float

    @classmethod
    def empty(cls, geometry: Optional[PageGeometry] = None) -> "LayoutDocument":
        geometry = geometry or PageGeometry()
        return cls(geometry=geometry, pages=((),), y_offset=geometry.margin)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def remaining_height(self) -> float:
        return self.geometry.bottom - self.y_offset

    def placements(self, kind: Optional[str] = None) -> Tuple[Placement, ...]:
        return tuple(p for page in self.pages for p in page
                     if kind is None or p.kind == kind)

    def page_labels(self) -> Tuple[Tuple[str, ...], ...]:
        """Labels of the images on each page, for membership checks."""
        return tuple(tuple(p.label for p in page if p.kind == "image")
                     for page in self.pages)


# ============================================================================
# PRIMITIVES
# ============================================================================
def scale_to_fit(pixel_width: float, pixel_height: float,
                 available_width: float, available_height: float) -> Tuple[float, float]:
    """
    Scale dimensions by the smaller of the width and height ratios.

    The ratio may exceed 1.0, so small images grow to fill the area.

    Returns:
        (width, height) with the original aspect ratio
    """
    ratio = min(available_width / pixel_width, available_height / pixel_height)
    return pixel_width * ratio, pixel_height * ratio


def new_page(document: LayoutDocument) -> LayoutDocument:
    """Append an empty page and move the cursor to its top margin."""
    return replace(document, pages=document.pages + ((),),
                   y_offset=document.geometry.margin)


def ensure_space(document: LayoutDocument, height: float) -> LayoutDocument:
    """Start a new page unless ``height`` fits above the bottom margin."""
    if document.y_offset + height > document.geometry.bottom + _EPS:
        return new_page(document)
    return document


def keep_with_image(document: LayoutDocument, lead_height: float,
                    block: ImageBlock) -> LayoutDocument:
    """
    Start a new page before a caption of ``lead_height`` if the image that
    follows it would come out smaller here than at the top of a fresh page.
    """
    geometry = document.geometry

    def fitted_height(y_offset: float) -> Optional[float]:
        available_height = geometry.bottom - y_offset
        if available_height <= 0:
            return None
        return scale_to_fit(block.pixel_width, block.pixel_height,
                            geometry.content_width, available_height)[1]

    here = fitted_height(document.y_offset + lead_height)
    fresh = fitted_height(geometry.margin + lead_height)
    if fresh is None:
        return document
    if here is None or here < fresh - _EPS:
        LOGGER.debug("  Moving %s to a new page (%.1f < %.1f)",
                     block.label or "<unlabelled>", here or 0.0, fresh)
        return new_page(document)
    return document


def _append(document: LayoutDocument, placement: Placement,
            advance: float) -> LayoutDocument:
    pages = document.pages[:-1] + (document.pages[-1] + (placement,),)
    return replace(document, pages=pages, y_offset=document.y_offset + advance)


def _fit_image(document: LayoutDocument, block: ImageBlock) -> Optional[Tuple[float, float]]:
    geometry = document.geometry
    available_height = geometry.bottom - document.y_offset
    if available_height <= 0:
        return None
    return scale_to_fit(block.pixel_width, block.pixel_height,
                        geometry.content_width, available_height)


# ============================================================================
# PLACEMENT
# ============================================================================
def place_image(document: LayoutDocument, block: ImageBlock) -> LayoutDocument:
    size = _fit_image(document, block)
    if size is None or document.y_offset + size[1] > document.geometry.bottom + _EPS:
        document = new_page(document)
        size = _fit_image(document, block)

    width, height = size
    LOGGER.debug("  Image %s: %dx%d px -> %.1fx%.1f on page %d",
                 block.label or "<unlabelled>", block.pixel_width, block.pixel_height,
                 width, height, document.page_count)
    placement = Placement(
        kind="image",
        x=document.geometry.margin,
        y=document.y_offset,
        width=width,
        height=height,
        payload=block.payload,
        label=block.label,
    )
    return _append(document, placement, height + document.geometry.block_spacing)


def place_text(document: LayoutDocument, block: TextBlock) -> LayoutDocument:
    geometry = document.geometry
    line_height = block.line_height or geometry.line_height
    for line in block.lines:
        document = ensure_space(document, line_height)
        placement = Placement(
            kind="text",
            x=geometry.margin + block.indent,
            y=document.y_offset,
            width=geometry.content_width - block.indent,
            height=line_height,
            text=line,
            style=block.style,
        )
        document = _append(document, placement, line_height)
    if block.spacing_after:
        document = replace(document, y_offset=document.y_offset + block.spacing_after)
    return document


def place(document: LayoutDocument, block: Block) -> LayoutDocument:
    """
    Place a block at the cursor, paginating as needed.

    Args:
        document: Current layout
        block: TextBlock or ImageBlock

    Returns:
        New LayoutDocument with the block placed
    """
    if isinstance(block, ImageBlock):
        return place_image(document, block)
    if isinstance(block, TextBlock):
        return place_text(document, block)
    raise TypeError(f"Unsupported block type: {type(block).__name__}")
