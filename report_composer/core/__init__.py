"""
Core definitions for dashboard report composition.
"""

from .errors import (
    CaptureUnavailable,
    EmptyDataset,
    ReportComposerError,
    SerializationFailure,
)
from .section_registry import DEFAULT_SECTIONS, SectionRegistry, SectionSpec

__all__ = [
    'CaptureUnavailable',
    'EmptyDataset',
    'ReportComposerError',
    'SerializationFailure',
    'DEFAULT_SECTIONS',
    'SectionRegistry',
    'SectionSpec',
]
