"""
Rendering layer: PDF drawing surface and concrete region providers.
"""

from .pdf_writer import DocumentWriter, ReportLabWriter
from .regions import FigureRegionProvider, ImageDirectoryProvider

__all__ = [
    'DocumentWriter',
    'ReportLabWriter',
    'FigureRegionProvider',
    'ImageDirectoryProvider',
]
