from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from trafdat.api.schemas import EmptyReason, ItemsResponse, ReasonCode
from trafdat.errors import VehicleEventError, classify_archive_error
from trafdat.settings import get_config
from trafdat.storage.archive import TrafficArchive
from trafdat.storage.datasets import (
    JSON_EXT,
    is_binned_file,
    is_json_file,
    is_valid_date,
    is_valid_file_name,
    is_valid_sample_file,
    is_valid_year,
)
from trafdat.storage.samples import decode_samples


logger = logging.getLogger(__name__)

router = APIRouter()


def get_archive(district: str) -> TrafficArchive:
    config = get_config()
    if not is_valid_file_name(district):
        raise HTTPException(status_code=400, detail=f"Invalid district: {district!r}")
    return TrafficArchive(base_path=config.archive.base_path, district=district)


def _lines_response(lines: list[str]) -> PlainTextResponse:
    return PlainTextResponse("".join(f"{line}\n" for line in lines))


def _validate_year_date(year: str, date: Optional[str] = None) -> None:
    if not is_valid_year(year):
        raise HTTPException(status_code=400, detail=f"Invalid year: {year!r}")
    if date is not None and (not is_valid_date(date) or not date.startswith(year)):
        raise HTTPException(status_code=400, detail=f"Invalid date for {year}: {date!r}")


def read_sample(archive: TrafficArchive, date: str, name: str) -> bytes:
    """Resolve a sample file, mapping archive failures to HTTP errors."""

    try:
        return archive.resolve(date, name)
    except FileNotFoundError as exc:
        info = classify_archive_error(exc)
        raise HTTPException(status_code=404, detail=info.message) from exc
    except VehicleEventError as exc:
        info = classify_archive_error(exc)
        logger.warning("Failed to bin %s/%s/%s: %s (%s)", archive.district, date, name, info.message, info.code)
        raise HTTPException(status_code=500, detail={"code": info.code, "kind": info.kind, "message": info.message}) from exc


@router.get("/{district}/sensors/{date}", response_model=ItemsResponse[str])
def list_sensors(district: str, date: str) -> ItemsResponse[str]:
    if not is_valid_date(date):
        raise HTTPException(status_code=400, detail=f"Invalid date: {date!r}")
    sensors = get_archive(district).list_sensors(date)
    if not sensors:
        return ItemsResponse[str](
            items=[],
            reason=EmptyReason(
                code=ReasonCode.NO_SENSORS,
                message=f"No sample files archived for {district} on {date}.",
            ),
        )
    return ItemsResponse[str](items=sensors)


@router.get("/{district}/{year}", response_class=PlainTextResponse)
def list_dates(district: str, year: str) -> PlainTextResponse:
    _validate_year_date(year)
    return _lines_response(get_archive(district).list_dates(year))


@router.get("/{district}/{year}/{date}", response_class=PlainTextResponse)
def list_files(district: str, year: str, date: str) -> PlainTextResponse:
    _validate_year_date(year, date)
    return _lines_response(get_archive(district).list_files(date))


@router.get("/{district}/{year}/{date}/{name}")
def get_sample(district: str, year: str, date: str, name: str) -> Response:
    _validate_year_date(year, date)
    max_length = get_config().archive.max_filename_length
    if not is_valid_file_name(name, max_length):
        raise HTTPException(status_code=400, detail=f"Invalid file name: {name!r}")

    archive = get_archive(district)
    if is_json_file(name):
        binned = name[: -len(JSON_EXT)]
        if not is_binned_file(binned):
            raise HTTPException(status_code=400, detail=f"Not a binned sample file: {binned!r}")
        data = read_sample(archive, date, binned)
        return JSONResponse(content=decode_samples(data, binned))

    if not is_valid_sample_file(name):
        raise HTTPException(status_code=400, detail=f"Not a sample file: {name!r}")
    data = read_sample(archive, date, name)
    return Response(content=data, media_type="application/octet-stream")
