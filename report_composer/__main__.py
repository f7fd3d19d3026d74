#!/usr/bin/env python3
"""
Command-line entry point.

Usage:
    report-composer records.json --regions exports/dashboard --base-name Sales
    report-composer records.json --regions exports/dashboard --detailed
    python -m report_composer records.json --regions exports/dashboard --images
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from report_composer.composer import ReportComposer, write_report
from report_composer.core.config import get_config
from report_composer.core.errors import EmptyDataset, ReportComposerError
from report_composer.core.section_registry import sections_from_config
from report_composer.pipeline.image_bundle import bundle_outcomes
from report_composer.rendering.regions import ImageDirectoryProvider

LOGGER = logging.getLogger(__name__)


def load_records(path: Path) -> pd.DataFrame:
    """Load a JSON array of records, keeping string values as strings."""
    return pd.read_json(path, orient="records", dtype=False, convert_dates=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="report-composer",
        description="Export dashboard regions and a data summary to PDF",
    )
    parser.add_argument("records", type=Path,
                        help="JSON file holding an array of records")
    parser.add_argument("--regions", type=Path, required=True,
                        help="Directory of exported region PNGs (<locator>.png)")
    parser.add_argument("--base-name", default=None,
                        help="Artifact base name (default: records file stem)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output directory (default: report.output_dir)")
    parser.add_argument("--detailed", action="store_true",
                        help="Export the detailed analytics report instead of the dashboard")
    parser.add_argument("--images", action="store_true",
                        help="Also export a ZIP of the captured region images")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose logging")
    parser.add_argument("--config", help="Alternative YAML config file")
    parser.add_argument("--set", action="append", default=[], metavar="KEY=VALUE",
                        help="Dotted config override (repeatable)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    cfg = get_config(cli_args=argv)
    sections = sections_from_config(cfg)
    composer = ReportComposer(ImageDirectoryProvider(args.regions), cfg=cfg)
    base_name = args.base_name or args.records.stem
    output_dir = args.output or Path(cfg.get("report", {}).get("output_dir", "reports"))

    try:
        records = load_records(args.records)
        if args.detailed:
            report = composer.compose_detailed(records, sections, base_name)
        else:
            report = composer.compose(records, sections, base_name)
        pdf_path = write_report(report, output_dir)
        print(f"✓ Dashboard exported as {pdf_path.name}")
    except EmptyDataset as e:
        print(f"✗ No data: {e}")
        return 1
    except (ReportComposerError, OSError, ValueError) as e:
        LOGGER.debug("Export failed", exc_info=True)
        print(f"✗ Export failed: {e}")
        return 1

    if args.images:
        # the PDF is already written; a missing bundle is reported, not fatal
        try:
            name, content = bundle_outcomes(report.outcomes, base_name, report.report_date)
            (output_dir / name).write_bytes(content)
            print(f"✓ Dashboard images exported as {name}")
        except (ReportComposerError, OSError) as e:
            LOGGER.warning("Image bundle skipped: %s", e)
            print(f"✗ Image export failed: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
