from __future__ import annotations

"""
STORMEDA report generator
-------------------------
This module renders the bar charts and writes the DOCX narrative report for
one pipeline run (an `AnalysisResult`).

Design goals:
- Keep the pipeline usable even if report dependencies are missing (lazy imports).
- One bar chart per metric, only for metrics where something was retained.
- The document is saved last, so a failure never leaves a half-written report.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import math
import os
import tempfile

from .models import AnalysisResult, QuartileResult

logger = logging.getLogger(__name__)


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "NOAA National Centers for Environmental Information"
    location: str = "Asheville, NC, USA"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Compressed CSV export of the U.S. Storm Data (EVTYPE, BGN_DATE, damage fields)."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Most Harmful Weather Events in the United States"
    subtitle: str = "Storm Events impact report"
    dataset_name: str = "NOAA Storm Data"
    citation: DatasetCitation = field(default_factory=DatasetCitation)
    dpi: int = 200
    # Optional: command line that produced the report
    command_log: Optional[List[str]] = None


METRIC_LABELS: Dict[str, Tuple[str, str]] = {
    # metric -> (chart title, y axis label)
    "FATALITIES": ("Fatalities by Event Type", "Fatalities"),
    "INJURIES": ("Injuries by Event Type", "Injuries"),
    "TOTALPROPDMG": ("Property Damage by Event Type", "Property damage (US$)"),
    "TOTALCROPDMG": ("Crop Damage by Event Type", "Crop damage (US$)"),
    "EconomicImpact": ("Economic Impact by Event Type", "Property + crop damage (US$)"),
    "PopulationImpact": ("Population Impact by Event Type", "Fatalities + injuries"),
}


# thresholded metrics whose top event type is named in the synopsis
SYNOPSIS_PHRASES: List[Tuple[str, str]] = [
    ("FATALITIES", "The most fatalities"),
    ("INJURIES", "The most injuries"),
    ("EconomicImpact", "The largest economic impact"),
]


def _labels(metric: str) -> Tuple[str, str]:
    return METRIC_LABELS.get(metric, (f"{metric} by Event Type", metric))


def _fmt(v: float) -> str:
    """Format a metric value for tables (integers with separators)."""
    if v is None or (isinstance(v, float) and math.isnan(v)):
        return "n/a"
    if float(v).is_integer():
        return f"{int(v):,}"
    return f"{v:,.2f}"


# -----------------------------
# Charts
# -----------------------------

def render_bar_chart(result: QuartileResult, out_dir: str, *, dpi: int = 200) -> Optional[str]:
    """
    Bar chart of the event types retained for one metric, largest first.

    Returns the PNG path, or None when nothing was retained.
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install it with: python -m pip install matplotlib"
        ) from e

    if not result.retained:
        return None

    title, ylabel = _labels(result.metric)
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"top_{result.metric.lower()}.png")

    fig = plt.figure(figsize=(10, 6))
    try:
        plt.bar(result.labels, result.values)
        plt.xticks(rotation=60, ha="right")
        plt.title(title)
        plt.xlabel("Event type")
        plt.ylabel(ylabel)
        plt.tight_layout()
        plt.savefig(path, dpi=dpi)
    finally:
        plt.close(fig)
    logger.debug("Saved chart %s", path)
    return path


def render_all_charts(result: AnalysisResult, out_dir: str, *, dpi: int = 200) -> Dict[str, str]:
    """Render one chart per thresholded metric; metric -> PNG path."""
    paths: Dict[str, str] = {}
    for metric, qr in result.thresholds.items():
        p = render_bar_chart(qr, out_dir, dpi=dpi)
        if p:
            paths[metric] = p
    return paths


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    result: AnalysisResult,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    charts_dir: Optional[str] = None,
) -> str:
    """
    Generate a DOCX report + charts for one pipeline run.

    Charts go to `charts_dir` (a temporary directory when not given).
    """
    config = config or ReportConfig()

    # Lazy imports: only required when a report is written.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    summary = result.summary
    charts_dir = charts_dir or tempfile.mkdtemp(prefix="stormeda_report_")
    chart_paths = render_all_charts(result, charts_dir, dpi=config.dpi)

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(header: List[str], rows: List[List[str]]) -> None:
        t = doc.add_table(rows=1, cols=len(header))
        for i, h in enumerate(header):
            t.rows[0].cells[i].text = h
        for row in rows:
            cells = t.add_row().cells
            for i, v in enumerate(row):
                cells[i].text = v

    _center_title(config.title, 20, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    _kv("Period", f"events beginning in {result.since_year} or later")
    _kv("Event types in scope", str(len(summary)))

    # -----------------------------
    # Synopsis
    # -----------------------------
    doc.add_heading("Synopsis", level=1)
    text = (
        f"This report looks at which types of weather events were most harmful to "
        f"population health and which had the greatest economic consequences, using "
        f"storm records from {result.since_year} onwards. Events are grouped by their "
        f"recorded event-type label and, for every measure, only the event types above "
        f"the {int(round(result.quantile * 100))}th percentile of the event types with a "
        f"non-zero value are shown."
    )
    for metric, phrase in SYNOPSIS_PHRASES:
        leader = _leader(result, metric)
        if leader:
            text += f" {phrase} came from {leader}."
    doc.add_paragraph(text)

    # -----------------------------
    # Data processing
    # -----------------------------
    doc.add_heading("Data processing", level=1)
    doc.add_paragraph(
        "The raw file is read in full and reduced to eight fields: EVTYPE, BGN_DATE, "
        "FATALITIES, INJURIES, PROPDMG, PROPDMGEXP, CROPDMG and CROPDMGEXP. BGN_DATE is "
        "parsed as month/day/year and older records are dropped because event "
        "recording was far less complete in earlier years."
    )
    _table(["Stage", "Rows"], [[name, f"{n:,}"] for name, n in result.stage_counts])

    doc.add_paragraph("")
    doc.add_paragraph(
        "Damage amounts are stored as a magnitude plus a suffix. The suffix is "
        "looked up in the table below; any other suffix is treated as a multiplier of 1."
    )
    _table(["Suffix", "Multiplier"], [[m.suffix, _fmt(m.factor)] for m in result.multipliers])

    unmatched_lines = [
        f"{col}: " + ", ".join(f"'{s}' ({n} rows)" for s, n in counts.items())
        for col, counts in result.unmatched.items() if counts
    ]
    if unmatched_lines:
        doc.add_paragraph("Suffixes outside the table (counted with multiplier 1):")
        for line in unmatched_lines:
            doc.add_paragraph(line, style="List Bullet")

    if result.canonical_labels is not None:
        doc.add_paragraph("")
        doc.add_heading("Event-type labels", level=2)
        doc.add_paragraph(
            f"{result.canonical_labels} of {len(summary)} recorded event-type labels match one of "
            f"the {len(result.event_types)} official event types. Labels are not merged, so "
            f"spellings such as 'TSTM WIND' and 'THUNDERSTORM WIND' are counted separately."
        )

    # -----------------------------
    # Results
    # -----------------------------
    doc.add_heading("Results", level=1)
    for metric, qr in result.thresholds.items():
        title, _ = _labels(metric)
        doc.add_heading(title, level=2)
        q0, q25, q50, q75, q100 = qr.quartiles
        doc.add_paragraph(
            f"{qr.population} event types have a non-zero value. Quartiles: "
            f"min {_fmt(q0)}, 25% {_fmt(q25)}, median {_fmt(q50)}, 75% {_fmt(q75)}, max {_fmt(q100)}."
        )
        if not qr.retained:
            doc.add_paragraph("No event type lies above the threshold.")
            continue
        doc.add_paragraph(
            f"{len(qr.retained)} event types lie above the threshold of {_fmt(qr.threshold)}:"
        )
        _table(["Event type", title.split(" by ")[0]], [[k, _fmt(v)] for k, v in qr.retained])
        if metric in chart_paths:
            doc.add_paragraph("")
            doc.add_picture(chart_paths[metric], width=Inches(6.5))

    # -----------------------------
    # Citation + reproducibility footer
    # -----------------------------
    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")
    if cit.file_note:
        doc.add_paragraph(f"File note: {cit.file_note}")
    doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.location}. {cit.website}.")

    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as stormeda_version
    from datetime import datetime as _dt
    generated_at = _dt.now().isoformat(timespec="seconds")

    doc.add_paragraph(f"STORMEDA version: {stormeda_version}")
    doc.add_paragraph(f"Report generated at: {generated_at}")
    doc.add_paragraph(f"Cutoff year: {result.since_year} | Quantile: {result.quantile}")
    if config.command_log:
        doc.add_paragraph("Command used:")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    logger.info("Report written to %s (%d charts)", out_path, len(chart_paths))
    return out_path


def _leader(result: AnalysisResult, metric: str) -> Optional[str]:
    """Top retained event type for a thresholded `metric` (None if nothing retained)."""
    qr = result.thresholds.get(metric)
    if qr is None or not qr.retained:
        return None
    return qr.labels[0]
