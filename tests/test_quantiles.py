import math

import pandas as pd
import pytest

from stormeda.quantiles import (
    DEFAULT_METRICS,
    quartiles,
    threshold_all,
    top_quartile,
)


def _summary(values, metric="INJURIES"):
    return pd.DataFrame({
        "EVTYPE": [f"T{i}" for i in range(len(values))],
        metric: values,
    })


def _retained_frame(result):
    return pd.DataFrame({"EVTYPE": result.labels, result.metric: result.values})


def test_quartiles_linear_interpolation():
    assert quartiles([1, 2, 3, 4, 100]) == (1.0, 2.0, 3.0, 4.0, 100.0)
    assert quartiles([1, 2, 3, 4]) == (1.0, 1.75, 2.5, 3.25, 4.0)


def test_quartiles_empty_is_nan():
    assert all(math.isnan(x) for x in quartiles([]))


def test_strict_threshold_example():
    res = top_quartile(_summary([1, 2, 3, 4, 100]), "INJURIES")
    assert res.threshold == 4.0
    assert res.retained == [("T4", 100.0)]
    assert res.population == 5


def test_zero_values_are_excluded_before_quantiles():
    res = top_quartile(_summary([0, 0, 0, 1, 2, 3, 4, 100]), "INJURIES")
    assert res.population == 5
    assert res.quartiles == (1.0, 2.0, 3.0, 4.0, 100.0)
    assert res.labels == ["T7"]


def test_retained_sorted_descending():
    res = top_quartile(_summary([50, 1, 2, 70, 3, 60, 4, 5]), "INJURIES")
    assert res.values == sorted(res.values, reverse=True)
    assert res.labels[0] == "T3"


def test_ties_at_threshold_are_dropped():
    res = top_quartile(_summary([5, 5, 5, 5]), "INJURIES")
    assert res.threshold == 5.0
    assert res.retained == []


def test_all_zero_metric():
    res = top_quartile(_summary([0, 0]), "INJURIES")
    assert res.population == 0
    assert math.isnan(res.threshold)
    assert res.retained == []


def test_rethresholding_is_not_idempotent():
    first = top_quartile(_summary([1, 2, 3, 4, 100, 200, 300, 400]), "INJURIES")
    assert first.labels == ["T7", "T6"]

    again = top_quartile(_retained_frame(first), "INJURIES")
    assert again.labels == ["T7"]
    assert again.labels != first.labels


def test_invalid_quantile():
    with pytest.raises(ValueError):
        top_quartile(_summary([1, 2]), "INJURIES", q=1.0)


def test_unknown_metric():
    with pytest.raises(ValueError, match="Unknown metric"):
        top_quartile(_summary([1, 2]), "HAILSIZE")


def test_threshold_all_is_per_metric():
    summary = pd.DataFrame({
        "EVTYPE": ["A", "B", "C", "D", "E"],
        "FATALITIES": [0, 0, 1, 2, 9],
        "INJURIES": [1, 2, 3, 4, 100],
        "TOTALPROPDMG": [10.0, 0.0, 0.0, 0.0, 0.0],
        "TOTALCROPDMG": [0.0, 0.0, 0.0, 0.0, 0.0],
        "EconomicImpact": [10.0, 0.0, 0.0, 0.0, 0.0],
    })
    out = threshold_all(summary)
    assert list(out) == list(DEFAULT_METRICS)
    assert out["FATALITIES"].population == 3
    assert out["FATALITIES"].labels == ["E"]
    assert out["INJURIES"].labels == ["E"]
    # a single positive value is its own 75th percentile
    assert out["TOTALPROPDMG"].retained == []
    assert out["TOTALCROPDMG"].population == 0
