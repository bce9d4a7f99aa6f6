"""Vehicle event records parsed from `.vlog` sensor logs.

Each line of a vehicle log describes one detection:

    duration,headway,hh:mm:ss,speed

Every field is optional by position, and a field that fails to parse is left
unresolved instead of rejecting the line. A line holding only `*` marks a
detector reset. Timestamps that are missing here get filled in later by
`trafdat.vlog.reconstruct`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from trafdat.errors import NonPositiveHeadway, UnresolvedTimestamp
from trafdat.utils.time import stamp_ms


RESET_MARKER = "*"

# Headways are logged with whole-second resolution; the previous vehicle can be
# up to 999 ms later than `stamp - headway`.
HEADWAY_ROUNDING_MS = 999

_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_int(value: str) -> Optional[int]:
    if not _INT_RE.fullmatch(value):
        return None
    return int(value)


def parse_stamp(value: str) -> Optional[int]:
    """Parse `hh:mm:ss` into milliseconds since midnight, or None if invalid."""

    parts = value.split(":")
    if len(parts) != 3:
        return None
    hour, minute, second = (parse_int(p) for p in parts)
    if hour is None or minute is None or second is None:
        return None
    if not 0 <= hour <= 23:
        return None
    if not 0 <= minute <= 59:
        return None
    if not 0 <= second <= 59:
        return None
    return stamp_ms(hour, minute, second)


@dataclass
class SensorEvent:
    """One vehicle detection (or reset marker) from a vehicle log.

    `stamp` and `headway` are assign-once: the setters only fill a field that
    is still unresolved, so later reconstruction passes never overwrite what a
    log line (or an earlier pass) already established.
    """

    reset: bool = False
    duration: Optional[int] = None
    headway: Optional[int] = None
    stamp: Optional[int] = None
    speed: Optional[int] = None

    @property
    def is_resolved(self) -> bool:
        return self.reset or self.stamp is not None

    def previous_stamp(self) -> Optional[int]:
        """Latest stamp consistent with the previous vehicle, if derivable."""
        if self.stamp is None or self.headway is None:
            return None
        return self.stamp - self.headway + HEADWAY_ROUNDING_MS

    def set_stamp(self, stamp: Optional[int]) -> None:
        if self.reset or stamp is None:
            return
        if self.stamp is None:
            self.stamp = stamp

    def set_headway(self, headway: int) -> None:
        if self.reset or self.headway is not None:
            return
        if headway <= 0:
            raise NonPositiveHeadway(f"headway {headway} ms for event {self.to_line()!r}")
        self.headway = headway

    def set_previous_stamp(self, previous: int) -> None:
        """Resolve stamp/headway from the stamp of the preceding vehicle."""
        if self.headway is not None:
            self.set_stamp(previous + self.headway)
        if self.stamp is not None:
            self.set_headway(self.stamp - previous)

    def check(self) -> None:
        if not self.is_resolved:
            raise UnresolvedTimestamp(f"event {self.to_line()!r} has no timestamp")

    def to_line(self) -> str:
        if self.reset:
            return RESET_MARKER
        fields = [self.duration, self.headway, self.stamp, self.speed]
        return ",".join("" if f is None else str(f) for f in fields)


def parse_event_line(line: str) -> SensorEvent:
    text = line.strip()
    if text == RESET_MARKER:
        return SensorEvent(reset=True)

    fields = text.split(",")
    event = SensorEvent()
    if len(fields) > 0:
        event.duration = parse_int(fields[0])
    if len(fields) > 1:
        event.headway = parse_int(fields[1])
    if len(fields) > 2:
        event.stamp = parse_stamp(fields[2])
    if len(fields) > 3:
        event.speed = parse_int(fields[3])
    return event
