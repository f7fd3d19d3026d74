#!/usr/bin/env python3
"""
Page geometry and text styles for dashboard reports.

Defines:
- Page dimensions (A4 in millimetres, the unit the layout engine works in)
- Color palette
- Font styles keyed by text block style name
"""
from dataclasses import dataclass

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

# ============================================================================
# PAGE DIMENSIONS
# ============================================================================
LAYOUT_UNIT = mm
PAGE_WIDTH = A4[0] / LAYOUT_UNIT   # 210 mm
PAGE_HEIGHT = A4[1] / LAYOUT_UNIT  # 297 mm
MARGIN = 20.0

LINE_HEIGHT = 6.0
BLOCK_SPACING = 15.0
SUMMARY_RESERVE = 50.0

CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

# ============================================================================
# COLOR PALETTE
# ============================================================================
COLORS = {
    'primary': HexColor('#2c5282'),
    'secondary': HexColor('#646464'),
    'text_dark': HexColor('#000000'),
    'border': HexColor('#bdc3c7'),
}

# ============================================================================
# FONT DEFINITIONS
# ============================================================================
FONT_TITLE = 'Helvetica-Bold'
FONT_HEADING = 'Helvetica-Bold'
FONT_BODY = 'Helvetica'


@dataclass(frozen=True)
class TextStyle:
    """Font, size (pt), color and line advance (layout units) of a text style."""
    font: str
    size: float
    color: HexColor
    line_height: float


TEXT_STYLES = {
    'title': TextStyle(FONT_TITLE, 24, COLORS['primary'], 15.0),
    'meta': TextStyle(FONT_BODY, 12, COLORS['secondary'], 8.0),
    'heading': TextStyle(FONT_HEADING, 16, COLORS['primary'], 10.0),
    'summary_heading': TextStyle(FONT_HEADING, 16, COLORS['primary'], 15.0),
    'body': TextStyle(FONT_BODY, 10, COLORS['text_dark'], LINE_HEIGHT),
    # detailed report
    'report_title': TextStyle(FONT_TITLE, 28, COLORS['primary'], 20.0),
    'subtitle': TextStyle(FONT_BODY, 18, COLORS['secondary'], 10.0),
    'caption': TextStyle(FONT_BODY, 9, COLORS['secondary'], 15.0),
    'column_heading': TextStyle(FONT_HEADING, 12, COLORS['primary'], 8.0),
    'detail': TextStyle(FONT_BODY, 9, COLORS['text_dark'], 5.0),
}


def get_text_style(name: str) -> TextStyle:
    """
    Look up a text style, falling back to body text.

    Args:
        name: Style name (e.g., "heading")

    Returns:
        TextStyle
    """
    return TEXT_STYLES.get(name, TEXT_STYLES['body'])
