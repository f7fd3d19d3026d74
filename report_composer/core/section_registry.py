#!/usr/bin/env python3
"""
Section descriptors and registry for dashboard reports.

Provides:
- SectionSpec: one logical visual region to capture and place
- SectionRegistry: ordered collection of sections with enable flags
- DEFAULT_SECTIONS: the three standard dashboard regions
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

LOGGER = logging.getLogger(__name__)


# ============================================================================
# SECTION DESCRIPTOR
# ============================================================================
@dataclass(frozen=True)
class SectionSpec:
    """
    Static descriptor of a dashboard region.

    Attributes:
        id: Unique section identifier (e.g., "kpi-cards")
        title: Heading printed above the captured image
        region_locator: Key the region provider resolves to a visual region
        description: One-line caption used by the detailed report
    """
    id: str
    title: str
    region_locator: str
    description: str = ""

    def __post_init__(self):
        """Validate descriptor."""
        if not self.id:
            raise ValueError("Section id cannot be empty")
        if not self.region_locator:
            raise ValueError(f"Section '{self.id}' has no region locator")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SectionSpec":
        locator = raw.get("region_locator") or raw.get("locator") or raw.get("id", "")
        return cls(
            id=str(raw.get("id", "")),
            title=str(raw.get("title") or raw.get("id", "")),
            region_locator=str(locator),
            description=str(raw.get("description") or ""),
        )


DEFAULT_SECTIONS = (
    SectionSpec("kpi-cards", "Key Performance Indicators", "kpi-cards",
                "Overview of critical business metrics and performance indicators"),
    SectionSpec("charts-section", "Data Visualizations", "charts-section",
                "Comprehensive charts showing data distribution and trends"),
    SectionSpec("statistics-section", "Statistical Analysis", "statistics-section",
                "Detailed statistical breakdown including central tendency and "
                "variability measures"),
)


# ============================================================================
# SECTION REGISTRY
# ============================================================================
@dataclass
class _Entry:
    spec: SectionSpec
    order: int
    enabled: bool = True


class SectionRegistry:
    """
    Ordered registry of report sections.

    Without an explicit ``order`` a section is placed 10 after the largest
    order registered so far; ties are broken by registration order.

    Usage:
        registry = SectionRegistry()
        registry.register(SectionSpec("kpi", "KPIs", "kpi-cards"))
        sections = registry.get_enabled_sections()
    """

    def __init__(self, sections: Optional[Iterable[SectionSpec]] = None):
        self._entries: Dict[str, _Entry] = {}
        for spec in sections or ():
            self.register(spec)

    def register(self, spec: SectionSpec, order: Optional[int] = None,
                 enabled: bool = True) -> None:
        """
        Register a section.

        Args:
            spec: Section descriptor
            order: Sort order (default: largest registered order + 10)
            enabled: Whether the section is included in reports

        Raises:
            ValueError: If the id is already registered or order is negative
        """
        if spec.id in self._entries:
            raise ValueError(f"Section '{spec.id}' already registered")
        if order is None:
            order = max((e.order for e in self._entries.values()), default=0) + 10
        if order < 0:
            raise ValueError("Section order must be non-negative")

        self._entries[spec.id] = _Entry(spec=spec, order=order, enabled=enabled)
        LOGGER.debug("Registered section: %s (order=%d)", spec.id, order)

    def set_enabled(self, section_id: str, enabled: bool) -> None:
        self._entries[section_id].enabled = enabled

    def get_enabled_sections(self) -> List[SectionSpec]:
        """
        Get all enabled sections sorted by order.

        Returns:
            List of SectionSpec
        """
        entries = [e for e in self._entries.values() if e.enabled]
        return [e.spec for e in sorted(entries, key=lambda e: e.order)]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, section_id: str) -> bool:
        return section_id in self._entries


def sections_from_config(cfg: Mapping[str, Any]) -> List[SectionSpec]:
    """
    Build the ordered section list from the ``report.sections`` config key.

    Falls back to DEFAULT_SECTIONS when the key is missing or empty.
    """
    raw = (cfg.get("report") or {}).get("sections") or []
    if not raw:
        return list(DEFAULT_SECTIONS)
    registry = SectionRegistry()
    for item in raw:
        spec = SectionSpec.from_dict(item)
        registry.register(spec, enabled=bool(item.get("enabled", True)))
    return registry.get_enabled_sections()
