# test_foundation.py
"""
Test foundation modules: styles, section registry, errors, configuration.

Run with: pytest report_composer/core/test_foundation.py -v
"""
import pytest

from report_composer.core.config import get_config
from report_composer.core.errors import (
    CaptureUnavailable,
    EmptyDataset,
    ReportComposerError,
    SerializationFailure,
)
from report_composer.core.section_registry import (
    DEFAULT_SECTIONS,
    SectionRegistry,
    SectionSpec,
    sections_from_config,
)
from report_composer.core.styles import (
    CONTENT_WIDTH,
    MARGIN,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    TEXT_STYLES,
    get_text_style,
)


def test_page_is_a4_in_millimetres():
    assert PAGE_WIDTH == pytest.approx(210.0, abs=0.01)
    assert PAGE_HEIGHT == pytest.approx(297.0, abs=0.01)
    assert CONTENT_WIDTH == pytest.approx(PAGE_WIDTH - 2 * MARGIN)


def test_text_styles_defined():
    """Test that every style the composer uses exists."""
    for name in ('title', 'meta', 'heading', 'summary_heading', 'body'):
        assert name in TEXT_STYLES
    assert get_text_style('unknown') is TEXT_STYLES['body']


def test_section_registry():
    """Test section registration and ordering."""
    registry = SectionRegistry()
    registry.register(SectionSpec("charts", "Charts", "charts-section"))
    registry.register(SectionSpec("kpi", "KPIs", "kpi-cards"), order=0)
    registry.register(SectionSpec("stats", "Stats", "statistics-section"))

    assert len(registry) == 3
    assert "kpi" in registry
    assert [s.id for s in registry.get_enabled_sections()] == ["kpi", "charts", "stats"]

    registry.set_enabled("charts", False)
    assert [s.id for s in registry.get_enabled_sections()] == ["kpi", "stats"]

    with pytest.raises(ValueError):
        registry.register(SectionSpec("kpi", "Again", "kpi-cards"))


def test_section_registry_default_order_follows_largest():
    registry = SectionRegistry()
    registry.register(SectionSpec("late", "Late", "late-panel"), order=100)
    registry.register(SectionSpec("next", "Next", "next-panel"))
    registry.register(SectionSpec("first", "First", "first-panel"), order=5)

    assert [s.id for s in registry.get_enabled_sections()] == ["first", "late", "next"]
    with pytest.raises(ValueError):
        registry.register(SectionSpec("neg", "Negative", "neg-panel"), order=-1)


def test_section_spec_validation():
    with pytest.raises(ValueError):
        SectionSpec("", "No id", "somewhere")
    with pytest.raises(ValueError):
        SectionSpec("x", "No locator", "")


def test_error_hierarchy():
    assert issubclass(EmptyDataset, ReportComposerError)
    assert issubclass(SerializationFailure, ReportComposerError)
    err = CaptureUnavailable("kpi-cards", "region is hidden")
    assert err.locator == "kpi-cards"
    assert "region is hidden" in str(err)


def test_config_defaults():
    cfg = get_config(cli_args=[], env={}, reload=True)
    assert cfg["statistics"]["id_column"] == "id"
    assert cfg["statistics"]["max_columns"] == 10
    assert cfg["layout"]["margin"] == 20.0
    assert len(cfg["report"]["sections"]) == 3


def test_config_env_and_cli_overrides():
    env = {
        "RC__STATISTICS__MAX_COLUMNS": "5",
        "REPORT_ID_COLUMN": "row_id",
    }
    cfg = get_config(cli_args=["--set", "layout.margin=15"], env=env, reload=True)

    assert cfg["statistics"]["max_columns"] == 5
    assert isinstance(cfg["statistics"]["max_columns"], int)
    assert cfg["statistics"]["id_column"] == "row_id"
    assert cfg["layout"]["margin"] == 15.0
    assert isinstance(cfg["layout"]["margin"], float)


def test_config_prefix_is_case_insensitive():
    cfg = get_config(cli_args=[], env={"rc__Layout__Margin": "12.5"}, reload=True)
    assert cfg["layout"]["margin"] == 12.5


def test_config_rejects_malformed_override():
    with pytest.raises(ValueError):
        get_config(cli_args=["--set", "layout.margin"], env={}, reload=True)


def test_config_returns_copies():
    cfg = get_config(cli_args=[], env={}, reload=True)
    cfg["statistics"]["id_column"] = "mutated"
    assert get_config(cli_args=[], env={})["statistics"]["id_column"] == "id"


def test_sections_from_config():
    cfg = get_config(cli_args=[], env={}, reload=True)
    assert sections_from_config(cfg) == list(DEFAULT_SECTIONS)
    assert sections_from_config({}) == list(DEFAULT_SECTIONS)

    custom = {"report": {"sections": [
        {"id": "a", "title": "A", "region_locator": "panel-a"},
        {"id": "b", "title": "B", "enabled": False},
        {"id": "c"},
    ]}}
    sections = sections_from_config(custom)
    assert [s.id for s in sections] == ["a", "c"]
    assert sections[1].region_locator == "c"
    assert sections[1].title == "c"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
