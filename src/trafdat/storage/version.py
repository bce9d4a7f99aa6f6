from __future__ import annotations

from pathlib import Path
from typing import Optional

from trafdat.storage.datasets import (
    date_path,
    is_valid_date,
    is_valid_year,
    sample_kind_for,
    traffic_path,
    vlog_name,
    year_path,
)


def version_from_paths(candidates: list[Path]) -> Optional[str]:
    existing = [p for p in candidates if p.exists()]
    if not existing:
        return None
    latest = max(existing, key=lambda p: p.stat().st_mtime_ns)
    stat = latest.stat()
    return f"{latest.name}:{int(stat.st_mtime_ns)}:{int(stat.st_size)}"


def archive_version(
    district_dir: Path,
    year: str,
    date: Optional[str] = None,
    name: Optional[str] = None,
) -> Optional[str]:
    """Fingerprint of the files backing an archive listing or sample.

    Changes whenever any of those files (or the directories listing them) is
    modified, so cached responses keyed on it are never served stale.
    """

    if not is_valid_year(year):
        return None
    candidates = [year_path(district_dir, year)]
    if date is not None and is_valid_date(date):
        day_dir = date_path(district_dir, date)
        candidates.append(traffic_path(district_dir, date))
        candidates.append(day_dir)
        if name is not None:
            candidates.append(day_dir / name)
            if sample_kind_for(name) is not None:
                candidates.append(day_dir / vlog_name(name))
    return version_from_paths(candidates)
