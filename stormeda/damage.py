"""
Damage normalizer
=================

PROPDMG/CROPDMG are stored as a magnitude plus a one-character suffix
("K" = thousands, "M" = millions, ...). This module turns them into plain
dollar totals.

The multiplier table is joined twice (once per damage column) on the literal
suffix text. Any suffix missing from the table, including blanks and
lower-case letters, falls back to a multiplier of 1.
"""

from __future__ import annotations
from typing import Dict, Sequence
import logging

import pandas as pd

from .models import Multiplier

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLIERS = (
    Multiplier("0", 1.0),
    Multiplier("B", 1e9),
    Multiplier("K", 1e3),
    Multiplier("M", 1e6),
)

# damage column -> (suffix column, multiplier column, total column)
DAMAGE_COLUMNS = {
    "PROPDMG": ("PROPDMGEXP", "PROPMULT", "TOTALPROPDMG"),
    "CROPDMG": ("CROPDMGEXP", "CROPMULT", "TOTALCROPDMG"),
}


def multiplier_table(multipliers: Sequence[Multiplier] = DEFAULT_MULTIPLIERS) -> pd.DataFrame:
    suffixes = [m.suffix for m in multipliers]
    if len(set(suffixes)) != len(suffixes):
        raise ValueError(f"Duplicate suffix in multiplier table: {suffixes}")
    return pd.DataFrame({
        "EXP": pd.Series(suffixes, dtype="object"),
        "MULTIPLIER": [float(m.factor) for m in multipliers],
    })


def apply_multipliers(df: pd.DataFrame, table: pd.DataFrame) -> pd.DataFrame:
    """Left-join the multiplier table by each suffix column; unmatched -> 1."""
    out = df.copy()
    for exp_col, mult_col, _ in DAMAGE_COLUMNS.values():
        # an all-blank column comes back as float NaN and would not merge with text keys
        out[exp_col] = out[exp_col].astype("object")
        lookup = table.rename(columns={"EXP": exp_col, "MULTIPLIER": mult_col})
        out = out.merge(lookup, on=exp_col, how="left")
        out[mult_col] = out[mult_col].fillna(1.0)
    return out


def compute_totals(df: pd.DataFrame) -> pd.DataFrame:
    """Add TOTALPROPDMG and TOTALCROPDMG (magnitude x multiplier)."""
    out = df.copy()
    for dmg_col, (_, mult_col, total_col) in DAMAGE_COLUMNS.items():
        out[total_col] = out[dmg_col] * out[mult_col]
    return out


def unmatched_suffixes(df: pd.DataFrame, table: pd.DataFrame) -> Dict[str, Dict[str, int]]:
    """Non-blank suffixes that are not in the table, with their row counts.

    Informational only: the totals still use a multiplier of 1 for them.
    """
    known = set(table["EXP"])
    out: Dict[str, Dict[str, int]] = {}
    for exp_col, _, _ in DAMAGE_COLUMNS.values():
        s = df[exp_col].dropna().astype(str)
        s = s[(s.str.strip() != "") & ~s.isin(known)]
        counts = {str(k): int(v) for k, v in s.value_counts().sort_index().items()}
        if counts:
            logger.warning("%s: suffixes %s not in multiplier table, using 1", exp_col, sorted(counts))
        out[exp_col] = counts
    return out
