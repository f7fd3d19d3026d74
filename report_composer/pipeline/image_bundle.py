#!/usr/bin/env python3
"""
PNG bundle export.

Packs captured section snapshots into a single ZIP archive, one
``<locator>_<date>.png`` member per captured section.
"""
from __future__ import annotations

import logging
import zipfile
from datetime import date
from io import BytesIO
from typing import Sequence, Tuple

from report_composer.composer import strip_spreadsheet_suffix
from report_composer.core.errors import SerializationFailure
from report_composer.core.section_registry import SectionSpec
from report_composer.pipeline.capture import (
    Captured,
    RegionProvider,
    SectionOutcome,
    capture_sections,
)

LOGGER = logging.getLogger(__name__)


def bundle_name(base_name: str, day: date) -> str:
    return f"{strip_spreadsheet_suffix(base_name)}_dashboard_images_{day.isoformat()}.zip"


def bundle_outcomes(outcomes: Sequence[SectionOutcome],
                    base_name: str,
                    day: date) -> Tuple[str, bytes]:
    """
    Zip the snapshots of already captured sections.

    Returns:
        (archive name, archive bytes)

    Raises:
        SerializationFailure: If no section was captured
    """
    captured = [o for o in outcomes if isinstance(o, Captured)]
    if not captured:
        raise SerializationFailure("No dashboard sections could be captured")

    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for outcome in captured:
            member = f"{outcome.section.region_locator}_{day.isoformat()}.png"
            archive.writestr(member, outcome.snapshot.pixel_buffer)

    LOGGER.info("  Bundled %d/%d section images", len(captured), len(outcomes))
    return bundle_name(base_name, day), buffer.getvalue()


def export_image_bundle(provider: RegionProvider,
                        sections: Sequence[SectionSpec],
                        base_name: str,
                        day: date) -> Tuple[str, bytes]:
    """Capture ``sections`` and zip whatever could be captured."""
    return bundle_outcomes(capture_sections(provider, sections), base_name, day)
