from __future__ import annotations

from datetime import timedelta

import pandas as pd

from trafdat.preprocessing.binning import SAMPLES_PER_DAY
from trafdat.preprocessing.summaries import daily_summary_frame
from trafdat.storage.datasets import is_valid_sample_file, sample_kind_for, sensor_id, vlog_name
from trafdat.storage.samples import SampleWidth, decode_samples, sample_width


def test_decode_byte_samples() -> None:
    assert decode_samples(bytes([5, 0xFF, 0, 127]), "det1.v30") == [5, None, 0, 127]


def test_decode_short_samples_big_endian() -> None:
    assert sample_width("det1.c30") is SampleWidth.SHORT
    assert sample_width("rwis.pr60") is SampleWidth.SHORT
    assert decode_samples(b"\x01\x00\xff\xff\x00\x07\x00", "det1.c30") == [256, None, 7]


def test_file_name_helpers() -> None:
    assert sensor_id("det1.v30") == "det1"
    assert sensor_id("noext") == "noext"
    assert vlog_name("det1.v30") == "det1.vlog"
    assert vlog_name("det1.s30") == "det1.vlog"
    assert sample_kind_for("det1.pt60") is None
    assert is_valid_sample_file("det1.vlog")
    assert not is_valid_sample_file("det1.txt")


def test_daily_summary_frame() -> None:
    volume = [3, None, 0]
    df = daily_summary_frame("20230101", {"volume": volume, "speed": None})
    assert list(df.columns) == ["timestamp", "period", "volume", "speed"]
    assert len(df) == SAMPLES_PER_DAY
    assert df.loc[0, "volume"] == 3
    assert pd.isna(df.loc[1, "volume"])
    assert df.loc[2, "volume"] == 0
    assert df["volume"].iloc[3:].isna().all()
    assert df["speed"].isna().all()
    assert df.loc[2, "timestamp"].strftime("%H:%M:%S") == "00:01:00"
    assert df.loc[0, "timestamp"].utcoffset() == timedelta(hours=-6)
