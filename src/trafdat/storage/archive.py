"""Read access to the per-district traffic sample archive.

Layout under `<base>/<district>/<year>/`:

- `<date>.traffic`: zip container whose entries are sample file names
- `<date>/<name>`: loose sample files
- `<date>/<sensor>.vlog`: raw vehicle event log

A sample request tries the zip container, then the loose file, and finally
(for `.v30`/`.s30` only) bins the sensor's vehicle log on the fly.
"""

from __future__ import annotations

import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from trafdat.errors import ArchiveEntryNotFound
from trafdat.preprocessing.binning import SampleKind, channel_bytes
from trafdat.storage.datasets import (
    TRAFFIC_EXT,
    date_path,
    is_valid_date,
    is_valid_file_name,
    is_valid_sample_file,
    is_valid_year,
    sample_kind_for,
    sensor_id,
    traffic_path,
    vlog_name,
    year_path,
)
from trafdat.vlog.reconstruct import read_event_log, reconstruct_stamps


logger = logging.getLogger(__name__)


def _require_date(date: str) -> None:
    if not is_valid_date(date):
        raise ValueError(f"Invalid archive date: {date!r} (expected yyyyMMdd)")


@dataclass(frozen=True)
class TrafficArchive:
    base_path: Path
    district: str

    @property
    def district_dir(self) -> Path:
        return Path(self.base_path) / self.district

    # -- resolution --------------------------------------------------------

    def resolve(self, date: str, name: str) -> bytes:
        """Return the sample data for `name` on `date`.

        Raises `ArchiveEntryNotFound` when no tier can provide the file.
        """

        _require_date(date)
        if not is_valid_file_name(name):
            raise ArchiveEntryNotFound(name)

        data = self._read_stored(date, name)
        if data is not None:
            return data

        kind = sample_kind_for(name)
        if kind is None:
            raise ArchiveEntryNotFound(name)
        return self._bin_vlog(date, name, kind)

    def _read_stored(self, date: str, name: str) -> Optional[bytes]:
        data = self._read_zip_entry(date, name)
        if data is not None:
            logger.debug("Resolved %s/%s/%s from zip container", self.district, date, name)
            return data
        data = self._read_loose_file(date, name)
        if data is not None:
            logger.debug("Resolved %s/%s/%s from date directory", self.district, date, name)
        return data

    def _read_zip_entry(self, date: str, name: str) -> Optional[bytes]:
        path = traffic_path(self.district_dir, date)
        if not path.is_file():
            return None
        try:
            zf = zipfile.ZipFile(path)
        except (zipfile.BadZipFile, OSError) as exc:
            logger.warning("Unreadable traffic container %s: %s", path, exc)
            return None
        with zf:
            try:
                info = zf.getinfo(name)
            except KeyError:
                return None
            try:
                return zf.read(info)
            except (zipfile.BadZipFile, zlib.error, OSError) as exc:
                logger.warning("Unreadable entry %s in traffic container %s: %s", name, path, exc)
                return None

    def _read_loose_file(self, date: str, name: str) -> Optional[bytes]:
        path = date_path(self.district_dir, date) / name
        try:
            f = path.open("rb")
        except OSError:
            return None
        with f:
            return f.read()

    def _bin_vlog(self, date: str, name: str, kind: SampleKind) -> bytes:
        log_name = vlog_name(name)
        raw = self._read_stored(date, log_name)
        if raw is None:
            raise ArchiveEntryNotFound(name)
        logger.info("Binning %s samples for %s/%s/%s", kind.value, self.district, date, log_name)
        events = read_event_log(raw.decode("utf-8", errors="replace").splitlines())
        reconstruct_stamps(events)
        return channel_bytes(events, kind)

    # -- listing -----------------------------------------------------------

    def list_dates(self, year: str) -> list[str]:
        if not is_valid_year(year):
            raise ValueError(f"Invalid archive year: {year!r} (expected yyyy)")
        path = year_path(self.district_dir, year)
        if not path.is_dir():
            return []
        dates: set[str] = set()
        for entry in path.iterdir():
            date = self._traffic_date(entry)
            if date is not None:
                dates.add(date)
        return sorted(dates)

    @staticmethod
    def _traffic_date(entry: Path) -> Optional[str]:
        name = entry.name
        date = name[:8]
        if not is_valid_date(date):
            return None
        if name == date and entry.is_dir():
            return date
        if name == f"{date}{TRAFFIC_EXT}" and entry.is_file():
            return date
        return None

    def list_files(self, date: str) -> list[str]:
        """Sample file names available for `date`, from both storage forms."""

        _require_date(date)
        names = set(self._zip_names(date))
        path = date_path(self.district_dir, date)
        if path.is_dir():
            names.update(entry.name for entry in path.iterdir() if entry.is_file())
        return sorted(name for name in names if is_valid_sample_file(name))

    def list_sensors(self, date: str) -> list[str]:
        return sorted({sensor_id(name) for name in self.list_files(date)})

    def _zip_names(self, date: str) -> list[str]:
        path = traffic_path(self.district_dir, date)
        if not path.is_file():
            return []
        try:
            with zipfile.ZipFile(path) as zf:
                return zf.namelist()
        except (zipfile.BadZipFile, OSError) as exc:
            logger.warning("Skipping unreadable traffic container %s: %s", path, exc)
            return []
