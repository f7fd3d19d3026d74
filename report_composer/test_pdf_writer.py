#!/usr/bin/env python3
"""
Test the ReportLab drawing surface.

Run with: pytest report_composer/test_pdf_writer.py -v
"""
from io import BytesIO

import pytest
from PIL import Image as PILImage

from report_composer.rendering.pdf_writer import ReportLabWriter


def _png(width, height):
    buffer = BytesIO()
    PILImage.new("RGB", (width, height), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_writer_produces_pdf():
    writer = ReportLabWriter(title="Dashboard Report: Test")
    writer.add_text(20, 20, "Dashboard Report: Test", style="title")
    writer.add_image(20, 40, 170, 85, _png(400, 200))
    writer.new_page()
    writer.add_text(20, 20, "Data Summary", style="summary_heading")
    writer.add_text(20, 35, "x: Avg: 2.00 | Min: 1.00 | Max: 3.00")

    content = writer.serialize()

    assert content.startswith(b"%PDF")
    assert writer.page_number == 2


def test_writer_serializes_once():
    writer = ReportLabWriter(footer=False)
    writer.serialize()
    with pytest.raises(RuntimeError):
        writer.serialize()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
