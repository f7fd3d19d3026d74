#!/usr/bin/env python3
"""
Test region capture: visibility scoping, tagged outcomes and the concrete
providers.

Run with: pytest report_composer/test_capture.py -v
"""
from io import BytesIO

import plotly.graph_objects as go
import pytest
from PIL import Image as PILImage

from report_composer.core.errors import CaptureUnavailable
from report_composer.core.section_registry import SectionSpec
from report_composer.pipeline.capture import (
    Captured,
    RasterSnapshot,
    Skipped,
    capture_region,
    capture_section,
    capture_sections,
    forced_visible,
)
from report_composer.rendering import regions
from report_composer.rendering.regions import (
    FigureRegionProvider,
    ImageDirectoryProvider,
    VisibilityTracking,
)


def make_png(width: int, height: int) -> bytes:
    buffer = BytesIO()
    PILImage.new("RGB", (width, height), (44, 82, 130)).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeProvider(VisibilityTracking):
    """In-memory regions; ``broken`` locators raise on snapshot."""

    def __init__(self, sizes, hidden=(), broken=()):
        super().__init__(hidden)
        self.sizes = dict(sizes)
        self.broken = set(broken)
        self.visibility_during_snapshot = {}

    def has_region(self, locator):
        return locator in self.sizes

    def snapshot(self, locator):
        self.visibility_during_snapshot[locator] = self.is_visible(locator)
        if locator in self.broken:
            raise RuntimeError("renderer crashed")
        self._require_visible(locator)
        width, height = self.sizes[locator]
        return RasterSnapshot(width, height, make_png(width, height))


def test_forced_visible_restores_hidden_region():
    provider = FakeProvider({"panel": (10, 10)}, hidden=["panel"])

    with forced_visible(provider, "panel"):
        assert provider.is_visible("panel")
    assert not provider.is_visible("panel")


def test_forced_visible_restores_on_error():
    provider = FakeProvider({"panel": (10, 10)}, hidden=["panel"])

    with pytest.raises(KeyError):
        with forced_visible(provider, "panel"):
            raise KeyError("boom")
    assert not provider.is_visible("panel")


def test_forced_visible_leaves_visible_region_alone():
    provider = FakeProvider({"panel": (10, 10)})
    with forced_visible(provider, "panel"):
        pass
    assert provider.is_visible("panel")


def test_capture_hidden_region():
    provider = FakeProvider({"panel": (300, 150)}, hidden=["panel"])

    snapshot = capture_region(provider, "panel")

    assert (snapshot.pixel_width, snapshot.pixel_height) == (300, 150)
    assert provider.visibility_during_snapshot["panel"] is True
    assert not provider.is_visible("panel")


def test_capture_missing_region():
    provider = FakeProvider({})
    with pytest.raises(CaptureUnavailable) as info:
        capture_region(provider, "nowhere")
    assert info.value.locator == "nowhere"


def test_capture_failure_restores_visibility():
    provider = FakeProvider({"panel": (10, 10)}, hidden=["panel"], broken=["panel"])

    with pytest.raises(CaptureUnavailable) as info:
        capture_region(provider, "panel")

    assert "renderer crashed" in info.value.reason
    assert not provider.is_visible("panel")


def test_capture_sections_tags_outcomes_in_order():
    provider = FakeProvider({"a": (10, 10), "c": (20, 10)})
    sections = [SectionSpec(s, s.upper(), s) for s in ("a", "b", "c")]

    outcomes = capture_sections(provider, sections)

    assert [type(o) for o in outcomes] == [Captured, Skipped, Captured]
    assert [o.section.id for o in outcomes] == ["a", "b", "c"]
    assert outcomes[1].reason == "region not found"


def test_capture_section_never_raises():
    provider = FakeProvider({"a": (10, 10)}, broken=["a"])
    outcome = capture_section(provider, SectionSpec("a", "A", "a"))
    assert isinstance(outcome, Skipped)


class FlakyProvider(FakeProvider):
    """Raises ``error`` from ``method`` for one locator."""

    def __init__(self, sizes, method, locator, error, hidden=()):
        super().__init__(sizes, hidden=hidden)
        self.method = method
        self.failing = locator
        self.error = error

    def _maybe_fail(self, method, locator):
        if method == self.method and locator == self.failing:
            raise self.error

    def has_region(self, locator):
        self._maybe_fail("has_region", locator)
        return super().has_region(locator)

    def is_visible(self, locator):
        self._maybe_fail("is_visible", locator)
        return super().is_visible(locator)

    def set_visible(self, locator, visible):
        self._maybe_fail("set_visible", locator)
        super().set_visible(locator, visible)


@pytest.mark.parametrize("method,error", [
    ("has_region", LookupError("selector invalid")),
    ("is_visible", RuntimeError("detached node")),
    ("set_visible", PermissionError("style is read-only")),
])
def test_provider_errors_outside_snapshot_are_typed(method, error):
    provider = FlakyProvider({"a": (10, 10), "b": (10, 10)}, method, "b", error,
                             hidden=["b"])

    with pytest.raises(CaptureUnavailable) as info:
        capture_region(provider, "b")
    assert info.value.locator == "b"
    assert info.value.__cause__ is error

    outcomes = capture_sections(provider, [SectionSpec("a", "A", "a"),
                                           SectionSpec("b", "B", "b")])
    assert [type(o) for o in outcomes] == [Captured, Skipped]
    assert str(error) in outcomes[1].reason


def test_snapshot_rejects_empty_dimensions():
    with pytest.raises(ValueError):
        RasterSnapshot(0, 10, b"")


# ============================================================================
# CONCRETE PROVIDERS
# ============================================================================
def test_image_directory_provider(tmp_path):
    (tmp_path / "kpi-cards.png").write_bytes(make_png(640, 200))
    provider = ImageDirectoryProvider(tmp_path, hidden=["kpi-cards"])

    assert provider.has_region("kpi-cards")
    assert not provider.has_region("charts-section")
    assert not provider.has_region("../kpi-cards")

    snapshot = capture_region(provider, "kpi-cards")
    assert (snapshot.pixel_width, snapshot.pixel_height) == (640, 200)
    assert not provider.is_visible("kpi-cards")


def test_image_directory_provider_unreadable_image(tmp_path):
    (tmp_path / "broken.png").write_bytes(b"not a png")
    provider = ImageDirectoryProvider(tmp_path)

    with pytest.raises(CaptureUnavailable):
        capture_region(provider, "broken")


def test_hidden_region_refuses_direct_snapshot(tmp_path):
    (tmp_path / "panel.png").write_bytes(make_png(10, 10))
    provider = ImageDirectoryProvider(tmp_path, hidden=["panel"])

    with pytest.raises(CaptureUnavailable):
        provider.snapshot("panel")


def test_figure_provider_renders_full_extent(monkeypatch):
    calls = []

    def fake_to_image(fig, format, width, height, scale):
        calls.append((format, width, height, scale))
        return make_png(int(width * scale), int(height * scale))

    monkeypatch.setattr(regions.pio, "to_image", fake_to_image)

    fig = go.Figure(layout=dict(width=300, height=200))
    provider = FigureRegionProvider({"charts-section": fig}, scale=2,
                                    hidden=["charts-section"])

    snapshot = capture_region(provider, "charts-section")

    assert calls == [("png", 300, 200, 2)]
    assert (snapshot.pixel_width, snapshot.pixel_height) == (600, 400)
    assert not provider.is_visible("charts-section")


def test_figure_provider_defaults_and_export_failure(monkeypatch):
    def failing_to_image(*args, **kwargs):
        raise ValueError("kaleido missing")

    monkeypatch.setattr(regions.pio, "to_image", failing_to_image)

    provider = FigureRegionProvider({"chart": go.Figure()})
    assert provider.content_extent(go.Figure()) == (regions.DEFAULT_WIDTH,
                                                     regions.DEFAULT_HEIGHT)

    outcome = capture_section(provider, SectionSpec("chart", "Chart", "chart"))
    assert isinstance(outcome, Skipped)
    assert "kaleido missing" in outcome.reason


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
