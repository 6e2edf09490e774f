"""
Batch pipeline
==============

This is the heart of the project. One run goes straight through:

1) Load storm records (DataFrame) and, optionally, the event-type table
2) Project to the eight fields and parse BGN_DATE
3) Keep the years from `since_year` on
4) Join the damage multipliers and compute dollar totals
5) Aggregate per EVTYPE
6) Threshold every metric at its upper quartile

The stages are plain functions; `run_pipeline` only chains them and records
how many rows survived each one (reported in the narrative).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import json
import logging

import pandas as pd

from .aggregate import event_type_coverage, summarize_by_event_type
from .cleaner import DEFAULT_SINCE_YEAR, filter_since_year, parse_begin_dates, select_columns
from .damage import DEFAULT_MULTIPLIERS, apply_multipliers, compute_totals, multiplier_table, unmatched_suffixes
from .loader import load_event_types, load_storm_data
from .models import AnalysisResult, EventTypeCode, Multiplier
from .quantiles import DEFAULT_METRICS, DEFAULT_QUANTILE, threshold_all

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Parameters of one run. The defaults reproduce the fixed report."""
    since_year: int = DEFAULT_SINCE_YEAR
    quantile: float = DEFAULT_QUANTILE
    metrics: Sequence[str] = DEFAULT_METRICS
    multipliers: Sequence[Multiplier] = DEFAULT_MULTIPLIERS


def run_pipeline(
    raw: pd.DataFrame,
    *,
    config: Optional[PipelineConfig] = None,
    event_types: Optional[List[EventTypeCode]] = None,
) -> AnalysisResult:
    """Run every stage on an already loaded table."""
    config = config or PipelineConfig()
    counts: List[Tuple[str, int]] = [("Loaded", len(raw))]

    df = parse_begin_dates(select_columns(raw))
    df = filter_since_year(df, config.since_year)
    counts.append((f"Begin year >= {config.since_year}", len(df)))

    table = multiplier_table(config.multipliers)
    unmatched = unmatched_suffixes(df, table)
    df = compute_totals(apply_multipliers(df, table))

    summary = summarize_by_event_type(df)
    counts.append(("Event types", len(summary)))

    thresholds = threshold_all(summary, config.metrics, config.quantile)

    coverage = None
    if event_types:
        coverage = event_type_coverage(summary, event_types)
        logger.info("%d of %d event types match a canonical name", coverage, len(summary))

    return AnalysisResult(
        summary=summary,
        thresholds=thresholds,
        since_year=config.since_year,
        quantile=config.quantile,
        stage_counts=counts,
        multipliers=list(config.multipliers),
        unmatched=unmatched,
        event_types=list(event_types or []),
        canonical_labels=coverage,
    )


def analyze_files(
    data_path: str,
    event_types_path: Optional[str] = None,
    *,
    config: Optional[PipelineConfig] = None,
) -> AnalysisResult:
    """Load the input files and run the pipeline on them."""
    raw = load_storm_data(data_path)
    event_types = load_event_types(event_types_path) if event_types_path else None
    result = run_pipeline(raw, config=config, event_types=event_types)
    result.dataset_path = data_path
    return result


def export_summary(summary: pd.DataFrame, path: str) -> None:
    """Write the per-event-type summary as .csv, .json or .xlsx (by extension)."""
    lower = path.lower()
    if lower.endswith(".csv"):
        summary.to_csv(path, index=False, encoding="utf-8")
    elif lower.endswith(".json"):
        payload = summary.to_dict(orient="records")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
    elif lower.endswith(".xlsx"):
        summary.to_excel(path, index=False, engine="openpyxl")
    else:
        raise ValueError("export path must end in .csv, .json or .xlsx")
    logger.info("Exported %d event types to %s", len(summary), path)
