"""
Quartile thresholding
=====================

For each metric separately: drop event types with a zero (or negative) value,
compute the quartile boundaries of what is left and keep the event types
strictly above the upper one.

Because every metric is filtered on its own positive subset, the retained
sets are not comparable in size across metrics. Thresholding a retained set a
second time recomputes the quartiles on the smaller population, so it usually
shrinks again.
"""

from __future__ import annotations
from typing import Dict, Sequence, Tuple
import logging
import math

import numpy as np
import pandas as pd

from .models import QuartileResult

logger = logging.getLogger(__name__)

QUARTILE_LEVELS = (0.0, 0.25, 0.5, 0.75, 1.0)
DEFAULT_QUANTILE = 0.75
DEFAULT_METRICS = ("FATALITIES", "INJURIES", "TOTALPROPDMG", "TOTALCROPDMG", "EconomicImpact")


def quartiles(values: Sequence[float]) -> Tuple[float, float, float, float, float]:
    """0/25/50/75/100th percentiles with linear interpolation (NaN if empty)."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return (math.nan,) * 5
    q = np.quantile(arr, QUARTILE_LEVELS, method="linear")
    return tuple(float(x) for x in q)


def top_quartile(summary: pd.DataFrame, metric: str, q: float = DEFAULT_QUANTILE) -> QuartileResult:
    """Keep event types whose `metric` exceeds the q-quantile of the positive values."""
    if not 0.0 < q < 1.0:
        raise ValueError(f"quantile must be between 0 and 1 (exclusive), got {q}")
    if metric not in summary.columns:
        raise ValueError(f"Unknown metric {metric!r}. Available={list(summary.columns)}")

    positive = summary.loc[summary[metric] > 0, ["EVTYPE", metric]]
    bounds = quartiles(positive[metric].to_numpy())
    if positive.empty:
        threshold = math.nan
        kept = positive
    else:
        threshold = float(np.quantile(positive[metric].to_numpy(dtype=float), q, method="linear"))
        kept = positive.loc[positive[metric] > threshold]
    kept = kept.sort_values(metric, ascending=False, kind="mergesort")

    retained = [(str(k), float(v)) for k, v in zip(kept["EVTYPE"], kept[metric])]
    logger.debug("%s: %d positive, threshold=%s, kept %d", metric, len(positive), threshold, len(retained))
    return QuartileResult(
        metric=metric,
        quartiles=bounds,
        threshold=threshold,
        population=len(positive),
        retained=retained,
    )


def threshold_all(
    summary: pd.DataFrame,
    metrics: Sequence[str] = DEFAULT_METRICS,
    q: float = DEFAULT_QUANTILE,
) -> Dict[str, QuartileResult]:
    return {m: top_quartile(summary, m, q) for m in metrics}
