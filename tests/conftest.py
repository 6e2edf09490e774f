import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


EVENT_TYPE_LINES = [
    "Astronomical Low Tide Z",
    "Avalanche Z",
    "Flash Flood C",
    "Flood C",
    "Hail C",
    "Heat Z",
    "Thunderstorm Wind C",
    "Tornado C",
]


def _row(evtype, date, fat=0, inj=0, prop=0.0, propexp=None, crop=0.0, cropexp=None, **extra):
    row = {
        "STATE__": 1.0,
        "BGN_DATE": date,
        "EVTYPE": evtype,
        "FATALITIES": fat,
        "INJURIES": inj,
        "PROPDMG": prop,
        "PROPDMGEXP": propexp,
        "CROPDMG": crop,
        "CROPDMGEXP": cropexp,
    }
    row.update(extra)
    return row


@pytest.fixture
def raw_frame():
    """Small storm table: two rows before 2007, the rest after."""
    return pd.DataFrame([
        _row("TORNADO", "4/18/1950 0:00:00", fat=50, inj=300, prop=25.0, propexp="K"),
        _row("FLOOD", "12/31/2006 0:00:00", fat=1, prop=1.0, propexp="B"),
        _row("TORNADO", "5/22/2011 0:00:00", fat=158, inj=1150, prop=2.8, propexp="B"),
        _row("TORNADO", "4/27/2011 0:00:00", fat=44, inj=800, prop=1.5, propexp="B", crop=1.0, cropexp="M"),
        _row("FLOOD", "1/1/2007 0:00:00", prop=5.0, propexp="M", crop=5.0, cropexp="K"),
        _row("FLOOD", "6/1/2008 0:00:00", prop=10.0, propexp="X", crop=2.0, cropexp="M"),
        _row("HAIL", "7/4/2010 0:00:00", inj=2, prop=100.0, propexp="K", crop=20.0, cropexp="k"),
        _row("TSTM WIND", "8/9/2009 0:00:00", fat=1, inj=3, prop=50.0, propexp="0"),
        _row("THUNDERSTORM WIND", "8/10/2009 0:00:00", fat=2, inj=4, prop=0.0),
        _row("HEAT", "7/20/2012 0:00:00", fat=30, inj=100),
    ])


@pytest.fixture
def storm_csv(tmp_path, raw_frame):
    path = tmp_path / "StormData.csv.bz2"
    raw_frame.to_csv(path, index=False, compression="bz2")
    return str(path)


@pytest.fixture
def event_types_file(tmp_path):
    path = tmp_path / "event_types.txt"
    path.write_text("\n".join(EVENT_TYPE_LINES) + "\n", encoding="utf-8")
    return str(path)
