"""Timestamp reconstruction for vehicle event logs.

Detectors do not log a full timestamp for every vehicle; many lines only carry
a headway (time since the previous vehicle). Binning needs an absolute stamp
for every non-reset event, so we recover them with three linear sweeps over
the events in logging order:

1. forward: stamp = previous stamp + headway (and headway = stamp - previous)
2. backward: a vehicle's stamp is implied by the next vehicle's stamp/headway
3. interpolation: remaining gaps between two known stamps get a uniform headway

Each pass only fills unresolved fields. `reconstruct_stamps` finishes with
another forward sweep, which derives the headways of stamps filled by the later
passes and rejects stamps that do not advance; reconstructing a log a second
time changes nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from trafdat.vlog.events import SensorEvent, parse_event_line


logger = logging.getLogger(__name__)


def read_event_log(lines: Iterable[str]) -> list[SensorEvent]:
    return [parse_event_line(line) for line in lines]


def _round_div(numerator: int, denominator: int) -> int:
    # Half-up rounding on exact integers (matches Math.round for the archive tools).
    return (2 * numerator + denominator) // (2 * denominator)


def propagate_stamps_forward(events: list[SensorEvent]) -> None:
    last_stamp: Optional[int] = None
    for event in events:
        if event.reset:
            last_stamp = None
            continue
        if last_stamp is not None:
            event.set_previous_stamp(last_stamp)
        last_stamp = event.stamp


def propagate_stamps_backward(events: list[SensorEvent]) -> None:
    next_implied: Optional[int] = None
    for event in reversed(events):
        if event.reset:
            next_implied = None
            continue
        event.set_stamp(next_implied)
        next_implied = event.previous_stamp()


def interpolate_missing_stamps(events: list[SensorEvent]) -> None:
    """Spread a uniform headway across runs of events with no timestamp.

    A run is only filled when it is bounded by known stamps on both sides.
    Resets inside a run count towards its length but get no stamp. Events
    before the first known stamp of the log are left unresolved and will fail
    the binning check.
    """

    stamp: Optional[int] = None
    pending: list[SensorEvent] = []
    for event in events:
        known = event.stamp
        if known is None:
            pending.append(event)
            continue
        if pending:
            if stamp is not None:
                headway = _round_div(known - stamp, len(pending) + 1)
                for missing in pending:
                    if missing.reset:
                        continue
                    missing.set_headway(headway)
                    missing.set_previous_stamp(stamp)
                    stamp = missing.stamp
            else:
                # TODO: fill leading runs backward from the first known stamp.
                logger.debug("Leaving %d leading events without timestamps", len(pending))
            pending.clear()
        stamp = known


def reconstruct_stamps(events: list[SensorEvent]) -> list[SensorEvent]:
    propagate_stamps_forward(events)
    propagate_stamps_backward(events)
    interpolate_missing_stamps(events)
    propagate_stamps_forward(events)
    return events
