from __future__ import annotations

from typing import Mapping, Optional
from zoneinfo import ZoneInfo

import pandas as pd

from trafdat.preprocessing.binning import SAMPLES_PER_DAY
from trafdat.utils.time import DEFAULT_TZ, period_timestamps


SUMMARY_COLUMNS = ["timestamp", "period", "volume", "speed"]


def daily_summary_frame(
    date: str,
    channels: Mapping[str, Optional[list[Optional[int]]]],
    tz: ZoneInfo = DEFAULT_TZ,
) -> pd.DataFrame:
    """Tabulate decoded 30-second channels for one sensor-day.

    `channels` maps a column name (`volume`, `speed`) to decoded samples; a
    missing channel (None) or missing samples become NA.
    """

    df = pd.DataFrame(
        {
            "timestamp": period_timestamps(date, SAMPLES_PER_DAY, tz),
            "period": range(SAMPLES_PER_DAY),
        }
    )
    for column in SUMMARY_COLUMNS[2:]:
        values = channels.get(column)
        if values is None:
            df[column] = pd.Series([pd.NA] * SAMPLES_PER_DAY, dtype="Int64")
            continue
        padded = list(values[:SAMPLES_PER_DAY]) + [None] * max(0, SAMPLES_PER_DAY - len(values))
        df[column] = pd.array(padded, dtype="Int64")
    return df[SUMMARY_COLUMNS]
