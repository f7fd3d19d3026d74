#!/usr/bin/env python3
"""
Error taxonomy for dashboard report composition.

Only EmptyDataset and SerializationFailure ever reach the caller.
CaptureUnavailable is raised by the capture layer and converted into a
skipped section outcome before the composer sees it.
"""


class ReportComposerError(RuntimeError):
    """Base class for all composer errors."""


class EmptyDataset(ReportComposerError):
    """Dataset was missing or had no records at entry."""

    def __init__(self, message: str = "No data to export"):
        super().__init__(message)


class CaptureUnavailable(ReportComposerError):
    """A visual region could not be located or snapshotted."""

    def __init__(self, locator: str, reason: str = "region not found"):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Capture unavailable for '{locator}': {reason}")


class SerializationFailure(ReportComposerError):
    """The finished document could not be written out."""
