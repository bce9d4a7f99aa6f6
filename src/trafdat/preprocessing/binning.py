"""30-second binning of reconstructed vehicle events.

A day is split into 2880 periods of 30 seconds. Sweeping the events in log
order, one accumulator collects the current period; when an event falls into
a later period the accumulator is flushed and advanced one period at a time,
so empty periods between detections become real zero-count samples. Periods
the sweep never reaches keep the missing-data sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import numpy as np

from trafdat.errors import PeriodOutOfRange
from trafdat.utils.time import PERIOD_MS, period_of
from trafdat.vlog.events import SensorEvent


SAMPLES_PER_DAY = 2880
MISSING_DATA = -1
# Samples are stored as signed bytes; anything larger is reported missing.
MAX_SAMPLE = 127


class SampleKind(str, Enum):
    VOLUME = "volume"
    SPEED = "speed"


@dataclass
class PeriodAccumulator:
    period: int = -1
    reset: bool = False
    volume: int = 0
    speed_sum: int = 0
    speed_count: int = 0

    def clear(self, period: int) -> None:
        self.period = period
        self.reset = False
        self.volume = 0
        self.speed_sum = 0
        self.speed_count = 0

    def add_event(self, event: SensorEvent) -> None:
        self.volume += 1
        if event.speed is not None:
            self.speed_sum += event.speed
            self.speed_count += 1

    def volume_sample(self) -> int:
        if self.volume <= MAX_SAMPLE and not self.reset:
            return self.volume
        return MISSING_DATA

    def speed_sample(self) -> int:
        if self.speed_count > 0 and not self.reset:
            speed = (2 * self.speed_sum + self.speed_count) // (2 * self.speed_count)
            if 0 <= speed <= MAX_SAMPLE:
                return speed
        return MISSING_DATA

    def sample(self, kind: SampleKind) -> int:
        if kind is SampleKind.VOLUME:
            return self.volume_sample()
        return self.speed_sample()


def empty_channel() -> np.ndarray:
    return np.full(SAMPLES_PER_DAY, MISSING_DATA, dtype=np.int8)


def check_events(events: Iterable[SensorEvent]) -> None:
    for event in events:
        event.check()


def _period_for(event: SensorEvent) -> int:
    period = period_of(event.stamp, PERIOD_MS)  # type: ignore[arg-type]
    if period < 0 or period >= SAMPLES_PER_DAY:
        raise PeriodOutOfRange(f"stamp {event.stamp} ms maps to period {period}")
    return period


def _flush(channel: np.ndarray, acc: PeriodAccumulator, kind: SampleKind) -> None:
    if 0 <= acc.period < SAMPLES_PER_DAY:
        channel[acc.period] = acc.sample(kind)


def bin_30_second_samples(events: list[SensorEvent], kind: SampleKind) -> np.ndarray:
    """Bin a reconstructed event list into one day of 30-second samples.

    Raises `UnresolvedTimestamp` if any non-reset event still lacks a stamp and
    `PeriodOutOfRange` for stamps outside the day.
    """

    check_events(events)
    channel = empty_channel()
    acc = PeriodAccumulator()
    for event in events:
        if event.reset:
            acc.reset = True
            continue
        period = _period_for(event)
        if acc.period < 0:
            acc.clear(period)
        while period > acc.period:
            _flush(channel, acc, kind)
            acc.clear(acc.period + 1)
        acc.add_event(event)
    if acc.period >= 0:
        _flush(channel, acc, kind)
    return channel


def channel_bytes(events: list[SensorEvent], kind: SampleKind) -> bytes:
    return bin_30_second_samples(events, kind).tobytes()
