"""
Dataset loader (compressed CSV -> DataFrame, lookup file -> EventTypeCode list)
===============================================================================

This module reads the NOAA Storm Data export and the canonical event-type
table.

Key ideas:
- The whole storm file is read into memory at once; there is no streaming.
- Column names are matched tolerantly because exports differ in spacing/case,
  but a missing column is still a hard error.
- Damage suffix columns are read as text so "0" stays a lookup key.
"""

from __future__ import annotations
from typing import Dict, List
import logging
import os
import re

import pandas as pd

from .models import EventTypeCode

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "EVTYPE", "BGN_DATE", "FATALITIES", "INJURIES",
    "PROPDMG", "PROPDMGEXP", "CROPDMG", "CROPDMGEXP",
]
SUFFIX_COLUMNS = ["PROPDMGEXP", "CROPDMGEXP"]

# trailing characters of each lookup line that hold the designator code
CODE_WIDTH = 2


class LookupFormatError(ValueError):
    pass


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")


def _canonical_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename tolerant matches of the required columns to their NOAA names."""
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    mapping: Dict[str, str] = {}
    for name in REQUIRED_COLUMNS:
        found = _col(df, name)
        if found != name:
            mapping[found] = name
    if mapping:
        logger.debug("Renaming columns %s", mapping)
        df = df.rename(columns=mapping)
    return df


def load_storm_data(path: str) -> pd.DataFrame:
    """
    Read the storm events file fully into memory.

    Compression (bz2/gz/zip/xz) is inferred from the file extension.
    An .xlsx export is read with openpyxl instead.
    """
    is_xlsx = path.lower().endswith(".xlsx")
    # header only: suffix columns are matched tolerantly, so find their real names first
    if is_xlsx:
        header = pd.read_excel(path, engine="openpyxl", nrows=0)
    else:
        header = pd.read_csv(path, compression="infer", nrows=0)
    text_cols = {_col(header, c): str for c in SUFFIX_COLUMNS}

    if is_xlsx:
        df = pd.read_excel(path, engine="openpyxl", dtype=text_cols)
    else:
        df = pd.read_csv(path, compression="infer", dtype=text_cols, low_memory=False)
    df = _canonical_columns(df)
    logger.info("Loaded %d storm records from %s", len(df), os.path.basename(path))
    return df


def parse_event_type_line(line: str) -> EventTypeCode:
    """Split "<event name><code>" by a fixed offset from the end of the line."""
    s = line.rstrip("\r\n")
    if len(s) <= CODE_WIDTH:
        raise LookupFormatError(f"Lookup line too short for a name and a code: {line!r}")
    return EventTypeCode(name=s[:-CODE_WIDTH].strip(), code=s[-CODE_WIDTH:])


def load_event_types(path: str) -> List[EventTypeCode]:
    """Read the newline-delimited event-type table (48 lines expected)."""
    out: List[EventTypeCode] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            out.append(parse_event_type_line(line))
    if len(out) != 48:
        logger.warning("Event-type table has %d entries (expected 48)", len(out))
    return out
