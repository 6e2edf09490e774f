"""
Cleaning and date filtering
===========================

Projects the raw table to the eight fields the report uses, parses the
begin date and keeps the recent years only. Nothing else is validated:
counts and damage magnitudes are taken as they are.
"""

from __future__ import annotations
import logging

import pandas as pd

from .loader import REQUIRED_COLUMNS

logger = logging.getLogger(__name__)

# NOAA exports write dates like "4/18/1950 0:00:00"
BGN_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"

DEFAULT_SINCE_YEAR = 2007


def select_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df[REQUIRED_COLUMNS].copy()


def parse_begin_dates(df: pd.DataFrame) -> pd.DataFrame:
    """Parse BGN_DATE (month/day/year time). Unparseable values raise."""
    out = df.copy()
    try:
        out["BGN_DATE"] = pd.to_datetime(out["BGN_DATE"], format=BGN_DATE_FORMAT)
    except ValueError:
        logger.debug("BGN_DATE does not match %s, letting pandas infer", BGN_DATE_FORMAT)
        out["BGN_DATE"] = pd.to_datetime(out["BGN_DATE"])
    return out


def filter_since_year(df: pd.DataFrame, year: int = DEFAULT_SINCE_YEAR) -> pd.DataFrame:
    """Keep rows whose begin date falls on or after January 1st of `year`."""
    keep = df["BGN_DATE"].dt.year >= year
    out = df.loc[keep].reset_index(drop=True)
    logger.info("Kept %d of %d rows from %d onwards", len(out), len(df), year)
    return out
