"""
STORMEDA Command Line Interface (CLI)
=====================================

Runs the whole report in one go:

    python -m stormeda.cli --data "repdata_data_StormData.csv.bz2" \
        --event-types "event_types.txt" --out "storm_report.docx"

Steps:
- Load the storm file (and the optional event-type table)
- Run the pipeline (filter, damage multipliers, aggregation, quartiles)
- Write the bar charts and the DOCX report
- Optionally export the per-event-type summary (csv/json/xlsx)

The CLI DOES NOT modify the input files.
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import logging
import os
import sys

from .pipeline import PipelineConfig, analyze_files, export_summary
from .cleaner import DEFAULT_SINCE_YEAR
from .quantiles import DEFAULT_QUANTILE


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stormeda",
        description="Storm Events impact report: most harmful event types by health and economic impact.",
    )
    ap.add_argument("--data", required=True, help="Path to the storm data file (.csv, .csv.bz2, .csv.gz, .xlsx)")
    ap.add_argument("--event-types", default=None, help="Path to the 48-line event-type table")
    ap.add_argument("--out", default="storm_report.docx", help="Path of the DOCX report")
    ap.add_argument("--charts-dir", default=None, help="Directory for the PNG charts (default: <out>_charts)")
    ap.add_argument("--since", type=int, default=DEFAULT_SINCE_YEAR, help="Keep events beginning in this year or later")
    ap.add_argument("--quantile", type=float, default=DEFAULT_QUANTILE, help="Keep event types above this quantile")
    ap.add_argument("--export", default=None, help="Also export the event-type summary (.csv, .json, .xlsx)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def _charts_dir(out_path: str, charts_dir: Optional[str]) -> str:
    if charts_dir:
        return charts_dir
    stem, _ = os.path.splitext(out_path)
    return stem + "_charts"


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the STORMEDA CLI.

    1) Load dataset(s) and run the pipeline
    2) Write charts + report
    3) Optional summary export
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        from .report import DatasetCitation, ReportConfig, generate_docx_report

        print("Loading dataset...")
        config = PipelineConfig(since_year=args.since, quantile=args.quantile)
        result = analyze_files(args.data, args.event_types, config=config)
        print(f"Summarized {len(result.summary)} event types from {args.since} onwards.")

        for metric, qr in result.thresholds.items():
            print(f"  {metric}: {len(qr.retained)} of {qr.population} above {qr.threshold:,.2f}")

        cfg = ReportConfig(
            citation=DatasetCitation(file_name=os.path.basename(args.data)),
            command_log=["stormeda " + " ".join(argv if argv is not None else sys.argv[1:])],
        )
        generate_docx_report(result, args.out, config=cfg, charts_dir=_charts_dir(args.out, args.charts_dir))
        print(f"Report written to {args.out}")

        # only once the report exists
        if args.export:
            export_summary(result.summary, args.export)
            print(f"Exported summary to {args.export}")
    except Exception as e:
        logging.getLogger(__name__).debug("Run failed", exc_info=True)
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
