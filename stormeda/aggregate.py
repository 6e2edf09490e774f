"""
Per event-type aggregation
==========================

One summary row per distinct EVTYPE label. Labels are grouped verbatim:
"TSTM WIND" and "THUNDERSTORM WIND" stay separate groups, and rows with a
missing label form their own group instead of being dropped.
"""

from __future__ import annotations
from typing import Sequence
import logging

import pandas as pd

from .models import EventTypeCode

logger = logging.getLogger(__name__)

SUM_COLUMNS = ["FATALITIES", "INJURIES", "TOTALCROPDMG", "TOTALPROPDMG"]
SUMMARY_COLUMNS = ["EVTYPE"] + SUM_COLUMNS + ["EconomicImpact", "PopulationImpact"]


def add_impacts(summary: pd.DataFrame) -> pd.DataFrame:
    out = summary.copy()
    out["EconomicImpact"] = out["TOTALCROPDMG"] + out["TOTALPROPDMG"]
    out["PopulationImpact"] = out["FATALITIES"] + out["INJURIES"]
    return out


def summarize_by_event_type(df: pd.DataFrame) -> pd.DataFrame:
    """Sum fatalities, injuries and damage totals per EVTYPE."""
    summary = (
        df.groupby("EVTYPE", sort=True, dropna=False)[SUM_COLUMNS]
        .sum()
        .reset_index()
    )
    summary = add_impacts(summary)
    logger.info("Aggregated %d rows into %d event types", len(df), len(summary))
    return summary[SUMMARY_COLUMNS]


def event_type_coverage(summary: pd.DataFrame, event_types: Sequence[EventTypeCode]) -> int:
    """How many summary labels are (case-insensitively) a canonical event name."""
    canonical = {e.name.strip().upper() for e in event_types}
    labels = summary["EVTYPE"].astype(str).str.strip().str.upper()
    return int(labels.isin(canonical).sum())
