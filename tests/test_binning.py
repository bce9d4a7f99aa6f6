from __future__ import annotations

import pytest

from trafdat.errors import PeriodOutOfRange, UnresolvedTimestamp
from trafdat.preprocessing.binning import (
    MISSING_DATA,
    SAMPLES_PER_DAY,
    SampleKind,
    bin_30_second_samples,
    channel_bytes,
)
from trafdat.vlog.events import SensorEvent
from trafdat.vlog.reconstruct import read_event_log, reconstruct_stamps


def _stamped(*stamps: int, speed: int | None = None) -> list[SensorEvent]:
    return [SensorEvent(stamp=s, speed=speed) for s in stamps]


def test_volume_counts_and_gap_periods() -> None:
    channel = bin_30_second_samples(_stamped(60000, 61000, 125000), SampleKind.VOLUME)
    assert len(channel) == SAMPLES_PER_DAY
    # Periods before the first event and after the last stay missing.
    assert channel[0] == MISSING_DATA
    assert channel[1] == MISSING_DATA
    assert channel[2] == 2
    assert channel[3] == 0
    assert channel[4] == 1
    assert channel[5] == MISSING_DATA
    assert (channel[5:] == MISSING_DATA).all()


def test_speed_is_rounded_mean() -> None:
    events = [SensorEvent(stamp=0, speed=50), SensorEvent(stamp=1000, speed=61), SensorEvent(stamp=2000)]
    channel = bin_30_second_samples(events, SampleKind.SPEED)
    assert channel[0] == 56


def test_speed_missing_without_speeds() -> None:
    channel = bin_30_second_samples(_stamped(0, 31000), SampleKind.SPEED)
    assert channel[0] == MISSING_DATA
    assert channel[1] == MISSING_DATA


def test_speed_over_limit_is_missing() -> None:
    channel = bin_30_second_samples(_stamped(0, speed=130), SampleKind.SPEED)
    assert channel[0] == MISSING_DATA


def test_volume_over_limit_is_missing() -> None:
    full = bin_30_second_samples(_stamped(*range(0, 128 * 100, 100)), SampleKind.VOLUME)
    assert full[0] == MISSING_DATA
    capped = bin_30_second_samples(_stamped(*range(0, 127 * 100, 100)), SampleKind.VOLUME)
    assert capped[0] == 127


def test_reset_marks_only_current_period_missing() -> None:
    events = [SensorEvent(stamp=0, speed=40), SensorEvent(reset=True), SensorEvent(stamp=40000, speed=40)]
    volume = bin_30_second_samples(events, SampleKind.VOLUME)
    speed = bin_30_second_samples(events, SampleKind.SPEED)
    assert volume[0] == MISSING_DATA
    assert speed[0] == MISSING_DATA
    assert volume[1] == 1
    assert speed[1] == 40


def test_lone_reset_yields_all_missing() -> None:
    events = read_event_log(["*"])
    reconstruct_stamps(events)
    channel = bin_30_second_samples(events, SampleKind.VOLUME)
    assert (channel == MISSING_DATA).all()


def test_unresolved_event_fails_check() -> None:
    events = read_event_log(["10,,,", "10,,00:00:05,"])
    reconstruct_stamps(events)
    with pytest.raises(UnresolvedTimestamp):
        bin_30_second_samples(events, SampleKind.VOLUME)


@pytest.mark.parametrize("stamp", [86_400_000, -1])
def test_period_out_of_range(stamp: int) -> None:
    with pytest.raises(PeriodOutOfRange):
        bin_30_second_samples(_stamped(stamp), SampleKind.VOLUME)


def test_last_period_of_day() -> None:
    channel = bin_30_second_samples(_stamped(86_399_000), SampleKind.VOLUME)
    assert channel[SAMPLES_PER_DAY - 1] == 1


def test_channel_bytes_use_signed_sentinel() -> None:
    data = channel_bytes(_stamped(0, 1000), SampleKind.VOLUME)
    assert len(data) == SAMPLES_PER_DAY
    assert data[0] == 2
    assert data[1] == 0xFF
