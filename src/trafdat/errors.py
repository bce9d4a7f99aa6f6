from __future__ import annotations

from dataclasses import dataclass


class TrafdatError(Exception):
    """Base class for archive and vehicle-log failures."""


class VehicleEventError(TrafdatError):
    code = "vehicle_event"


class NonPositiveHeadway(VehicleEventError):
    code = "non_positive_headway"


class UnresolvedTimestamp(VehicleEventError):
    code = "unresolved_timestamp"


class PeriodOutOfRange(VehicleEventError):
    code = "period_out_of_range"


class ArchiveEntryNotFound(TrafdatError, FileNotFoundError):
    code = "not_found"


@dataclass(frozen=True)
class ArchiveErrorInfo:
    code: str
    kind: str
    message: str


def classify_archive_error(exc: Exception) -> ArchiveErrorInfo:
    """Classify archive failures into stable codes for API responses and logs."""

    text = str(exc)

    if isinstance(exc, ArchiveEntryNotFound):
        return ArchiveErrorInfo(code=exc.code, kind="archive", message=f"Archive entry not found: {text}")

    if isinstance(exc, VehicleEventError):
        return ArchiveErrorInfo(code=exc.code, kind="vlog", message=text or exc.code)

    if isinstance(exc, ValueError):
        return ArchiveErrorInfo(code="invalid_request", kind="request", message=text)

    if isinstance(exc, OSError):
        return ArchiveErrorInfo(code="io_error", kind="io", message=text)

    return ArchiveErrorInfo(code="unknown", kind="unknown", message=text)
