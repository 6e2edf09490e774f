"""
Data model
==========

The storm records themselves stay in a pandas DataFrame for the whole run;
the small reference tables and the per-metric results are plain dataclasses.
Lookup entries are immutable (`frozen=True`) because they are static
reference data: nothing in the pipeline is allowed to edit them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class EventTypeCode:
    """One canonical event type with its 2-character designator code."""
    name: str
    code: str


@dataclass(frozen=True)
class Multiplier:
    """Magnitude suffix (e.g. "K") and the factor it stands for."""
    suffix: str
    factor: float


@dataclass(frozen=True)
class QuartileResult:
    """Outcome of thresholding one metric at its upper quartile.

    quartiles: boundaries at 0/25/50/75/100 percent (NaN when nothing is positive)
    population: number of event types with a strictly positive value
    retained: (EVTYPE, value) pairs above the threshold, largest first
    """
    metric: str
    quartiles: Tuple[float, float, float, float, float]
    threshold: float
    population: int
    retained: List[Tuple[str, float]]

    @property
    def labels(self) -> List[str]:
        return [k for k, _ in self.retained]

    @property
    def values(self) -> List[float]:
        return [v for _, v in self.retained]


@dataclass
class AnalysisResult:
    """Everything the report and the exports need from one pipeline run."""
    summary: pd.DataFrame
    thresholds: Dict[str, QuartileResult]
    since_year: int
    quantile: float
    # row counts after each stage, in pipeline order
    stage_counts: List[Tuple[str, int]] = field(default_factory=list)
    multipliers: List[Multiplier] = field(default_factory=list)
    # damage column -> {suffix: rows} for suffixes that fell back to 1
    unmatched: Dict[str, Dict[str, int]] = field(default_factory=dict)
    event_types: List[EventTypeCode] = field(default_factory=list)
    canonical_labels: Optional[int] = None
    dataset_path: Optional[str] = None
