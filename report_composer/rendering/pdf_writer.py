#!/usr/bin/env python3
"""
PDF drawing surface.

The composer decides every position and size; a DocumentWriter only draws
what it is told at the coordinates it is given. Coordinates are in layout
units with a top-left origin.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Protocol

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from report_composer.core.styles import (
    COLORS,
    FONT_BODY,
    LAYOUT_UNIT,
    MARGIN,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    get_text_style,
)

LOGGER = logging.getLogger(__name__)

# Baseline sits this fraction of the font size below the top of the line box.
_ASCENT = 0.8


class DocumentWriter(Protocol):
    def add_text(self, x: float, y: float, content: str, style: str = "body") -> None: ...

    def add_image(self, x: float, y: float, width: float, height: float,
                  pixel_buffer: bytes) -> None: ...

    def new_page(self) -> None: ...

    def serialize(self) -> bytes: ...


class ReportLabWriter:
    """
    DocumentWriter backed by a ReportLab canvas in memory.

    Args:
        page_width: Page width in layout units
        page_height: Page height in layout units
        unit: Points per layout unit (default: millimetres)
        title: PDF metadata title
        footer: Draw a page-number footer on every page
    """

    def __init__(self,
                 page_width: float = PAGE_WIDTH,
                 page_height: float = PAGE_HEIGHT,
                 unit: float = LAYOUT_UNIT,
                 title: str = "",
                 footer: bool = True):
        self.page_width = page_width
        self.page_height = page_height
        self.unit = unit
        self.footer = footer
        self.page_number = 1
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer,
            pagesize=(page_width * unit, page_height * unit),
        )
        if title:
            self._canvas.setTitle(title)
        self._closed = False

    def _pdf_y(self, y: float) -> float:
        return (self.page_height - y) * self.unit

    def add_text(self, x: float, y: float, content: str, style: str = "body") -> None:
        text_style = get_text_style(style)
        self._canvas.setFont(text_style.font, text_style.size)
        self._canvas.setFillColor(text_style.color)
        self._canvas.drawString(
            x * self.unit,
            self._pdf_y(y) - text_style.size * _ASCENT,
            content,
        )

    def add_image(self, x: float, y: float, width: float, height: float,
                  pixel_buffer: bytes) -> None:
        self._canvas.drawImage(
            ImageReader(BytesIO(pixel_buffer)),
            x * self.unit,
            self._pdf_y(y + height),
            width=width * self.unit,
            height=height * self.unit,
            mask='auto',
        )

    def _draw_footer(self) -> None:
        if not self.footer:
            return
        c = self._canvas
        c.saveState()
        c.setStrokeColor(COLORS['border'])
        c.setLineWidth(0.5)
        footer_y = self._pdf_y(self.page_height - MARGIN / 2)
        c.line(MARGIN * self.unit, footer_y + 12,
               (self.page_width - MARGIN) * self.unit, footer_y + 12)
        c.setFont(FONT_BODY, 8)
        c.setFillColor(COLORS['secondary'])
        c.drawCentredString(self.page_width * self.unit / 2, footer_y,
                            f"Page {self.page_number}")
        c.restoreState()

    def new_page(self) -> None:
        self._draw_footer()
        self._canvas.showPage()
        self.page_number += 1

    def serialize(self) -> bytes:
        """
        Finish the document and return the PDF bytes.

        Raises:
            RuntimeError: If the writer was already serialized
        """
        if self._closed:
            raise RuntimeError("Document already serialized")
        self._draw_footer()
        self._canvas.save()
        self._closed = True
        data = self._buffer.getvalue()
        LOGGER.debug("  Serialized %d pages (%d bytes)", self.page_number, len(data))
        return data
