#!/usr/bin/env python3
"""
Dashboard Report Composer - Main Orchestrator

Coordinates the export pipeline as an explicit state machine:
1. Aggregate statistics (and place the report header)
2. Capture sections and lay them out, skipping unavailable regions
3. Compose the summary pages
4. Serialize the pages to PDF

Two report kinds share the pipeline: the dashboard report (captured
sections plus a one-line-per-column summary) and the detailed report
(executive summary, key insights, captioned sections, a full statistical
profile per column and recommendations).

Usage:
    composer = ReportComposer(ImageDirectoryProvider(Path("exports")))
    report = composer.compose(records, DEFAULT_SECTIONS, "Sales")
    write_report(report, Path("reports"))
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from report_composer.core.errors import EmptyDataset, SerializationFailure
from report_composer.core.section_registry import DEFAULT_SECTIONS, SectionSpec
from report_composer.core.styles import SUMMARY_RESERVE, get_text_style
from report_composer.pipeline.capture import (
    Captured,
    RegionProvider,
    SectionOutcome,
    Skipped,
    capture_sections,
)
from report_composer.pipeline.layout import (
    ImageBlock,
    LayoutDocument,
    PageGeometry,
    TextBlock,
    ensure_space,
    keep_with_image,
    place,
)
from report_composer.pipeline.statistics import (
    DEFAULT_ID_COLUMN,
    MAX_STATISTICS,
    ColumnStatistic,
    Dataset,
    DetailedStatistic,
    aggregate_statistics,
    data_completeness,
    detailed_statistics,
    summarize_statistics,
    to_frame,
)
from report_composer.rendering.pdf_writer import DocumentWriter, ReportLabWriter

LOGGER = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = (".xlsx", ".xls", ".csv")
DEFAULT_TITLE_TEMPLATE = "Dashboard Report: {base_name}"
DEFAULT_DETAILED_TITLE = "Dashboard Analytics Report"

KEY_INSIGHT_COLUMNS = 5
DETAIL_INDENT = 5.0
RECOMMENDATIONS_RESERVE = 30.0
RECOMMENDATIONS = (
    "• Monitor key metrics regularly to identify trends and anomalies",
    "• Focus on data quality improvement to increase the current score",
    "• Consider setting up automated alerts for critical threshold breaches",
    "• Implement regular data validation checks to maintain accuracy",
    "• Explore correlations between high-performing metrics for optimization opportunities",
)

WriterFactory = Callable[[PageGeometry, str], DocumentWriter]


# ============================================================================
# STATE
# ============================================================================
class ComposerState(Enum):
    IDLE = "idle"
    AGGREGATING = "aggregating"
    CAPTURING_SECTIONS = "capturing_sections"
    COMPOSING_SUMMARY = "composing_summary"
    SERIALIZING = "serializing"
    DONE = "done"
    FAILED = "failed"


class ReportKind(Enum):
    """Report flavour; the value is the artifact name infix."""
    DASHBOARD = "dashboard"
    DETAILED = "detailed_report"


@dataclass(frozen=True)
class CompositionRun:
    """Progress of one export, threaded through every transition."""
    state: ComposerState
    document: LayoutDocument
    kind: ReportKind = ReportKind.DASHBOARD
    statistics: Tuple[ColumnStatistic, ...] = ()
    detailed: Tuple[DetailedStatistic, ...] = ()
    outcomes: Tuple[SectionOutcome, ...] = ()
    record_count: int = 0
    completeness: float = 0.0


@dataclass(frozen=True)
class ComposedReport:
    """Finished export: the PDF bytes and the name to save them under."""
    name: str
    content: bytes
    document: LayoutDocument
    statistics: Tuple[ColumnStatistic, ...]
    outcomes: Tuple[SectionOutcome, ...]
    kind: ReportKind = ReportKind.DASHBOARD
    report_date: Optional[date] = None
    detailed: Tuple[DetailedStatistic, ...] = ()

    @property
    def captured_sections(self) -> Tuple[str, ...]:
        return tuple(o.section.id for o in self.outcomes if isinstance(o, Captured))

    @property
    def skipped_sections(self) -> Tuple[str, ...]:
        return tuple(o.section.id for o in self.outcomes if isinstance(o, Skipped))


# ============================================================================
# NAMING & FORMATTING
# ============================================================================
def output_name(base_name: str, day: date,
                kind: ReportKind = ReportKind.DASHBOARD) -> str:
    """
    Build the artifact name ``<base>_<kind>_<YYYY-MM-DD>.pdf``.

    A trailing spreadsheet extension on ``base_name`` is dropped.

    Example:
        >>> output_name("Sales.xlsx", date(2024, 1, 5))
        'Sales_dashboard_2024-01-05.pdf'
        >>> output_name("Sales", date(2024, 1, 5), ReportKind.DETAILED)
        'Sales_detailed_report_2024-01-05.pdf'
    """
    return f"{strip_spreadsheet_suffix(base_name)}_{kind.value}_{day.isoformat()}.pdf"


def strip_spreadsheet_suffix(base_name: str) -> str:
    name = base_name.strip()
    for suffix in SPREADSHEET_SUFFIXES:
        if name.lower().endswith(suffix):
            name = name[: -len(suffix)]
            break
    return name or "report"


def format_statistic(stat: ColumnStatistic) -> str:
    return (f"{stat.column}: Avg: {stat.average:.2f} | "
            f"Min: {stat.minimum:.2f} | Max: {stat.maximum:.2f}")


def format_insight(stat: DetailedStatistic) -> str:
    return (f"• {stat.column}: Average {stat.mean:.2f}, "
            f"Range {stat.minimum:.2f} - {stat.maximum:.2f}")


def format_detail_lines(stat: DetailedStatistic) -> Tuple[str, str, str]:
    return (
        f"Mean: {stat.mean:.2f} | Median: {stat.median:.2f} | Std Dev: {stat.std_dev:.2f}",
        f"Min: {stat.minimum:.2f} | Max: {stat.maximum:.2f} | Range: {stat.value_range:.2f}",
        f"Total: {stat.total:.2f} | Count: {stat.count} values",
    )


def _default_writer(geometry: PageGeometry, title: str) -> DocumentWriter:
    return ReportLabWriter(page_width=geometry.width, page_height=geometry.height,
                           title=title)


def _lines(style: str, *lines: str, spacing_after: float = 0.0,
           indent: float = 0.0) -> TextBlock:
    """Text block advancing by the style's own line height."""
    return TextBlock(lines=tuple(lines), style=style,
                     line_height=get_text_style(style).line_height,
                     spacing_after=max(0.0, spacing_after), indent=indent)


# ============================================================================
# COMPOSER
# ============================================================================
class ReportComposer:
    """
    Compose a dashboard PDF from a dataset and captured regions.

    Attributes:
        provider: Source of the visual regions
        cfg: Configuration dict (see ``report_composer/config/defaults.yaml``)
        state: Last state reached by ``compose`` or ``compose_detailed``

    Example:
        >>> composer = ReportComposer(provider, cfg=get_config())
        >>> report = composer.compose(records, sections, "Sales")
        >>> report.name
        'Sales_dashboard_2024-01-05.pdf'
    """

    def __init__(self,
                 provider: RegionProvider,
                 writer_factory: Optional[WriterFactory] = None,
                 cfg: Optional[Dict[str, Any]] = None):
        self.provider = provider
        self.writer_factory = writer_factory or _default_writer
        self.cfg = cfg or {}
        self.state = ComposerState.IDLE

        stats_cfg = self.cfg.get("statistics") or {}
        layout_cfg = self.cfg.get("layout") or {}
        report_cfg = self.cfg.get("report") or {}
        self.id_column = str(stats_cfg.get("id_column", DEFAULT_ID_COLUMN))
        self.max_statistics = int(stats_cfg.get("max_columns", MAX_STATISTICS))
        self.geometry = PageGeometry.from_config(layout_cfg)
        self.summary_reserve = float(layout_cfg.get("summary_reserve", SUMMARY_RESERVE))
        self.title_template = str(report_cfg.get("title_template", DEFAULT_TITLE_TEMPLATE))
        self.detailed_title = str(report_cfg.get("detailed_title", DEFAULT_DETAILED_TITLE))

    # ========================================================================
    # PUBLIC API
    # ========================================================================
    def compose(self,
                dataset: Optional[Dataset],
                sections: Sequence[SectionSpec] = DEFAULT_SECTIONS,
                base_name: str = "report",
                report_date: Optional[date] = None,
                generated_at: Optional[datetime] = None) -> ComposedReport:
        """
        Run the dashboard export.

        Args:
            dataset: Records or DataFrame
            sections: Sections to capture, in output order
            base_name: Name the artifact is derived from
            report_date: Date used in the artifact name (default: today, UTC)
            generated_at: Timestamp printed in the header (default: now, local time)

        Returns:
            ComposedReport named ``<base>_dashboard_<date>.pdf``

        Raises:
            EmptyDataset: If the dataset has no records; nothing is captured
            SerializationFailure: If the PDF cannot be written
        """
        return self._run(ReportKind.DASHBOARD, dataset, sections, base_name,
                         report_date, generated_at)

    def compose_detailed(self,
                         dataset: Optional[Dataset],
                         sections: Sequence[SectionSpec] = DEFAULT_SECTIONS,
                         base_name: str = "report",
                         report_date: Optional[date] = None,
                         generated_at: Optional[datetime] = None) -> ComposedReport:
        """
        Run the detailed report export.

        Same arguments, states and failures as ``compose``; the artifact is
        named ``<base>_detailed_report_<date>.pdf``.
        """
        return self._run(ReportKind.DETAILED, dataset, sections, base_name,
                         report_date, generated_at)

    # ========================================================================
    # TRANSITIONS
    # ========================================================================
    def _run(self, kind: ReportKind,
             dataset: Optional[Dataset],
             sections: Sequence[SectionSpec],
             base_name: str,
             report_date: Optional[date],
             generated_at: Optional[datetime]) -> ComposedReport:
        generated_at = generated_at or datetime.now().astimezone()
        day = report_date or generated_at.astimezone(timezone.utc).date()
        source = strip_spreadsheet_suffix(base_name)
        if kind is ReportKind.DETAILED:
            title = self.detailed_title
        else:
            title = self.title_template.format(base_name=source)

        run = CompositionRun(state=ComposerState.IDLE, kind=kind,
                             document=LayoutDocument.empty(self.geometry))
        self._enter(run)

        frame = to_frame(dataset)
        if len(frame.index) == 0:
            self._enter(replace(run, state=ComposerState.FAILED))
            LOGGER.error("Export aborted: dataset is empty")
            noun = "report" if kind is ReportKind.DETAILED else "dashboard"
            raise EmptyDataset(f"Please upload data before exporting the {noun}")

        try:
            LOGGER.info("[1/4] Aggregating statistics...")
            run = self._aggregate(run, frame, title, source, generated_at)

            LOGGER.info("[2/4] Capturing %d sections...", len(sections))
            run = self._capture(run, sections)

            LOGGER.info("[3/4] Composing summary...")
            run = self._compose_summary(run)

            LOGGER.info("[4/4] Serializing...")
            content = self._serialize(run, title)
        except Exception:
            self._enter(replace(run, state=ComposerState.FAILED))
            raise

        run = replace(run, state=ComposerState.DONE)
        self._enter(run)

        name = output_name(base_name, day, kind)
        LOGGER.info("[OK] Export complete: %s (%d pages, %.1f KB)",
                    name, run.document.page_count, len(content) / 1024)
        return ComposedReport(
            name=name,
            content=content,
            document=run.document,
            statistics=run.statistics,
            outcomes=run.outcomes,
            kind=kind,
            report_date=day,
            detailed=run.detailed,
        )

    def _enter(self, run: CompositionRun) -> None:
        LOGGER.debug("  state: %s -> %s", self.state.value, run.state.value)
        self.state = run.state

    def _aggregate(self, run: CompositionRun, frame, title: str, source: str,
                   generated_at: datetime) -> CompositionRun:
        run = replace(run, state=ComposerState.AGGREGATING)
        self._enter(run)

        statistics = tuple(aggregate_statistics(frame, self.id_column, self.max_statistics))
        completeness = data_completeness(frame)
        LOGGER.debug(summarize_statistics(statistics))
        run = replace(run, statistics=statistics, record_count=len(frame.index),
                      completeness=completeness)

        if run.kind is ReportKind.DETAILED:
            run = replace(run, detailed=tuple(detailed_statistics(frame, self.id_column)))
            document = self._detailed_header(run, title, source, generated_at)
        else:
            document = self._dashboard_header(run, title, generated_at)
        return replace(run, document=document)

    def _dashboard_header(self, run: CompositionRun, title: str,
                          generated_at: datetime) -> LayoutDocument:
        meta = get_text_style("meta").line_height
        document = place(run.document, _lines("title", title))
        return place(document, _lines(
            "meta",
            f"Generated: {generated_at:%Y-%m-%d} at {generated_at:%H:%M:%S}",
            f"Total Records: {run.record_count}",
            f"Data completeness: {run.completeness:.1f}%",
            spacing_after=self.geometry.block_spacing - meta,
        ))

    def _detailed_header(self, run: CompositionRun, title: str, source: str,
                         generated_at: datetime) -> LayoutDocument:
        spacing = self.geometry.block_spacing
        metrics = len(run.detailed)

        document = place(run.document, _lines("report_title", title))
        document = place(document, _lines("subtitle", f"Data Source: {source}"))
        document = place(document, _lines(
            "meta",
            f"Generated: {generated_at:%Y-%m-%d} at {generated_at:%H:%M:%S}",
            f"Total Records: {run.record_count}",
            spacing_after=spacing - get_text_style("meta").line_height,
        ))

        document = place(document, _lines("heading", "Executive Summary"))
        document = place(document, _lines(
            "body",
            f"• Dataset contains {run.record_count} records across {metrics} numeric metrics",
            f"• Data quality score: {run.completeness:.1f}% (based on completeness)",
            f"• Analysis performed on {metrics} key performance indicators",
            spacing_after=spacing - get_text_style("body").line_height,
        ))

        document = place(document, _lines("heading", "Key Insights"))
        return place(document, _lines(
            "body",
            *(format_insight(s) for s in run.detailed[:KEY_INSIGHT_COLUMNS]),
            spacing_after=10.0,
        ))

    def _capture(self, run: CompositionRun,
                 sections: Sequence[SectionSpec]) -> CompositionRun:
        run = replace(run, state=ComposerState.CAPTURING_SECTIONS)
        self._enter(run)

        outcomes = tuple(capture_sections(self.provider, sections))
        document = self._reduce_outcomes(run.document, outcomes,
                                         captions=run.kind is ReportKind.DETAILED)

        captured = sum(isinstance(o, Captured) for o in outcomes)
        LOGGER.info("  Captured %d/%d sections", captured, len(outcomes))
        return replace(run, document=document, outcomes=outcomes)

    @staticmethod
    def _reduce_outcomes(document: LayoutDocument,
                         outcomes: Sequence[SectionOutcome],
                         captions: bool = False) -> LayoutDocument:
        for outcome in outcomes:
            if isinstance(outcome, Skipped):
                continue
            section = outcome.section
            snapshot = outcome.snapshot

            lead: List[TextBlock] = [_lines("heading", section.title)]
            if captions and section.description:
                lead.append(_lines("caption", section.description))
            image = ImageBlock(
                pixel_width=snapshot.pixel_width,
                pixel_height=snapshot.pixel_height,
                payload=snapshot.pixel_buffer,
                label=section.id,
            )

            document = keep_with_image(
                document, sum(len(b.lines) * b.line_height for b in lead), image)
            for block in lead:
                document = place(document, block)
            document = place(document, image)
        return document

    def _compose_summary(self, run: CompositionRun) -> CompositionRun:
        run = replace(run, state=ComposerState.COMPOSING_SUMMARY)
        self._enter(run)

        if run.kind is ReportKind.DETAILED:
            document = self._detailed_analysis(run.document, run.detailed)
        else:
            document = ensure_space(run.document, self.summary_reserve)
            document = place(document, _lines("summary_heading", "Data Summary"))
            if run.statistics:
                document = place(document, TextBlock(
                    lines=tuple(format_statistic(s) for s in run.statistics),
                    style="body",
                ))
        return replace(run, document=document)

    def _detailed_analysis(self, document: LayoutDocument,
                           stats: Sequence[DetailedStatistic]) -> LayoutDocument:
        column_height = get_text_style("column_heading").line_height
        detail_height = get_text_style("detail").line_height

        document = ensure_space(document, self.summary_reserve)
        document = place(document, _lines("summary_heading", "Detailed Statistical Analysis"))
        for stat in stats:
            document = ensure_space(document, column_height + 3 * detail_height)
            document = place(document, _lines("column_heading", stat.column))
            document = place(document, _lines(
                "detail", *format_detail_lines(stat),
                spacing_after=10.0 - detail_height, indent=DETAIL_INDENT,
            ))

        document = ensure_space(document, RECOMMENDATIONS_RESERVE)
        document = place(document, _lines("summary_heading", "Recommendations"))
        return place(document, _lines("body", *RECOMMENDATIONS))

    def _serialize(self, run: CompositionRun, title: str) -> bytes:
        run = replace(run, state=ComposerState.SERIALIZING)
        self._enter(run)

        try:
            writer = self.writer_factory(self.geometry, title)
            for index, page in enumerate(run.document.pages):
                if index:
                    writer.new_page()
                for placement in page:
                    if placement.kind == "image":
                        writer.add_image(placement.x, placement.y, placement.width,
                                         placement.height, placement.payload)
                    else:
                        writer.add_text(placement.x, placement.y, placement.text,
                                        placement.style)
            return writer.serialize()
        except Exception as e:
            LOGGER.error("Serialization failed: %s", e, exc_info=True)
            raise SerializationFailure(f"could not write PDF: {e}") from e


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================
def write_report(report: ComposedReport, output_dir: Path) -> Path:
    """Write ``report`` under ``output_dir`` (created if needed) and return the path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / report.name
    output_path.write_bytes(report.content)
    LOGGER.info("  PDF written: %s", output_path)
    return output_path


def _resolve_output_dir(cfg: Dict[str, Any], output_dir: Optional[Path]) -> Path:
    if output_dir is None:
        return Path((cfg.get("report") or {}).get("output_dir", "reports"))
    return Path(output_dir)


def generate_dashboard_report(dataset: Optional[Dataset],
                              provider: RegionProvider,
                              base_name: str,
                              sections: Sequence[SectionSpec] = DEFAULT_SECTIONS,
                              output_dir: Optional[Path] = None,
                              cfg: Optional[Dict[str, Any]] = None,
                              report_date: Optional[date] = None) -> Path:
    """
    Compose a dashboard report and write it to disk.

    Args:
        dataset: Records or DataFrame
        provider: Region provider
        base_name: Artifact base name
        sections: Sections to capture, in order
        output_dir: Output directory (default: ``report.output_dir`` from cfg)
        cfg: Configuration dictionary
        report_date: Date used in the artifact name

    Returns:
        Path to the written PDF
    """
    cfg = cfg or {}
    report = ReportComposer(provider, cfg=cfg).compose(
        dataset, sections, base_name, report_date=report_date)
    return write_report(report, _resolve_output_dir(cfg, output_dir))


def generate_detailed_report(dataset: Optional[Dataset],
                             provider: RegionProvider,
                             base_name: str,
                             sections: Sequence[SectionSpec] = DEFAULT_SECTIONS,
                             output_dir: Optional[Path] = None,
                             cfg: Optional[Dict[str, Any]] = None,
                             report_date: Optional[date] = None) -> Path:
    """Compose a detailed report and write it to disk; see ``generate_dashboard_report``."""
    cfg = cfg or {}
    report = ReportComposer(provider, cfg=cfg).compose_detailed(
        dataset, sections, base_name, report_date=report_date)
    return write_report(report, _resolve_output_dir(cfg, output_dir))
