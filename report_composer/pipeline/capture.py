#!/usr/bin/env python3
"""
Visual capture of dashboard regions.

Resolves a section's region locator to a RasterSnapshot through a
RegionProvider. Hidden regions are forced visible for the duration of the
snapshot and restored afterwards; missing or broken regions produce a
Skipped outcome instead of an exception.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Union

from report_composer.core.errors import CaptureUnavailable
from report_composer.core.section_registry import SectionSpec

LOGGER = logging.getLogger(__name__)


# ============================================================================
# SNAPSHOT & PROVIDER CONTRACT
# ============================================================================
@dataclass(frozen=True)
class RasterSnapshot:
    """PNG-encoded pixels of a region's full content extent."""
    pixel_width: int
    pixel_height: int
    pixel_buffer: bytes

    def __post_init__(self):
        if self.pixel_width <= 0 or self.pixel_height <= 0:
            raise ValueError(
                f"Snapshot dimensions must be positive, got "
                f"{self.pixel_width}x{self.pixel_height}"
            )

    def __repr__(self) -> str:
        return (f"RasterSnapshot({self.pixel_width}x{self.pixel_height}, "
                f"{len(self.pixel_buffer)} bytes)")


class RegionProvider(ABC):
    """
    Source of rendered visual regions.

    Subclasses resolve locators to regions and produce snapshots. The
    composer only touches regions through these four operations.
    """

    @abstractmethod
    def has_region(self, locator: str) -> bool:
        """Return True if the locator resolves to a region."""

    @abstractmethod
    def is_visible(self, locator: str) -> bool:
        """Return the region's current visibility."""

    @abstractmethod
    def set_visible(self, locator: str, visible: bool) -> None:
        """Show or hide the region."""

    @abstractmethod
    def snapshot(self, locator: str) -> RasterSnapshot:
        """Render the region's full content extent to PNG."""


# ============================================================================
# VISIBILITY SCOPE
# ============================================================================
@contextmanager
def forced_visible(provider: RegionProvider, locator: str) -> Iterator[None]:
    """
    Make a region visible for the duration of the block.

    The prior visibility is restored on every exit path.
    """
    was_visible = provider.is_visible(locator)
    if not was_visible:
        LOGGER.debug("    Forcing '%s' visible", locator)
        provider.set_visible(locator, True)
    try:
        yield
    finally:
        if not was_visible:
            provider.set_visible(locator, False)
            LOGGER.debug("    Restored '%s' hidden", locator)


def capture_region(provider: RegionProvider, locator: str) -> RasterSnapshot:
    """
    Snapshot one region.

    Any provider error, whether raised by the lookup, a visibility change or
    the snapshot itself, is reported as CaptureUnavailable.

    Args:
        provider: Region provider
        locator: Region locator

    Returns:
        RasterSnapshot of the region's full content

    Raises:
        CaptureUnavailable: If the region is missing or cannot be rendered
    """
    try:
        if not provider.has_region(locator):
            raise CaptureUnavailable(locator, "region not found")
        with forced_visible(provider, locator):
            return provider.snapshot(locator)
    except CaptureUnavailable:
        raise
    except Exception as e:
        raise CaptureUnavailable(locator, str(e) or type(e).__name__) from e


# ============================================================================
# TAGGED OUTCOMES
# ============================================================================
@dataclass(frozen=True)
class Captured:
    section: SectionSpec
    snapshot: RasterSnapshot


@dataclass(frozen=True)
class Skipped:
    section: SectionSpec
    reason: str


SectionOutcome = Union[Captured, Skipped]


def capture_section(provider: RegionProvider, section: SectionSpec) -> SectionOutcome:
    """Capture a section, turning CaptureUnavailable into a Skipped outcome."""
    try:
        snapshot = capture_region(provider, section.region_locator)
    except CaptureUnavailable as e:
        LOGGER.warning("    [SKIP] %s: %s", section.title, e.reason)
        return Skipped(section=section, reason=e.reason)

    LOGGER.info("    [OK] %s (%dx%d px)", section.title,
                snapshot.pixel_width, snapshot.pixel_height)
    return Captured(section=section, snapshot=snapshot)


def capture_sections(provider: RegionProvider,
                     sections: Sequence[SectionSpec]) -> List[SectionOutcome]:
    """Capture sections one after another, preserving order."""
    return [capture_section(provider, section) for section in sections]
