from __future__ import annotations

from typing import Optional
from zoneinfo import ZoneInfo

import pandas as pd
from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from trafdat.api.routes_archive import get_archive, read_sample
from trafdat.preprocessing.summaries import daily_summary_frame
from trafdat.settings import get_config
from trafdat.storage.datasets import is_valid_date, is_valid_file_name
from trafdat.storage.samples import decode_samples


router = APIRouter()

_CHANNEL_EXTS = {"volume": ".v30", "speed": ".s30"}


def _csv_response(df: pd.DataFrame, filename: str) -> Response:
    content = df.to_csv(index=False)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/exports/{district}/{date}/{sensor}.csv")
def export_sensor_day_csv(district: str, date: str, sensor: str) -> Response:
    if not is_valid_date(date):
        raise HTTPException(status_code=400, detail=f"Invalid date: {date!r}")
    if not is_valid_file_name(sensor):
        raise HTTPException(status_code=400, detail=f"Invalid sensor: {sensor!r}")

    config = get_config()
    archive = get_archive(district)
    channels: dict[str, Optional[list[Optional[int]]]] = {}
    for column, ext in _CHANNEL_EXTS.items():
        name = f"{sensor}{ext}"
        try:
            channels[column] = decode_samples(read_sample(archive, date, name), name)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
            channels[column] = None

    if all(values is None for values in channels.values()):
        raise HTTPException(status_code=404, detail=f"No volume or speed data for {sensor} on {date}.")

    df = daily_summary_frame(date, channels, tz=ZoneInfo(config.app.timezone))
    return _csv_response(df, filename=f"{sensor}_{date}.csv")
