from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import pandas as pd

from trafdat.preprocessing.binning import SampleKind


TRAFFIC_EXT = ".traffic"
VLOG_EXT = ".vlog"
JSON_EXT = ".json"
BINNED_EXTS = (".v30", ".c30", ".s30", ".pr60", ".pt60")

_DERIVABLE_KINDS = {
    ".v30": SampleKind.VOLUME,
    ".s30": SampleKind.SPEED,
}

_YEAR_RE = re.compile(r"[0-9]{4}")
_DATE_RE = re.compile(r"[0-9]{8}")


def is_valid_year(year: str) -> bool:
    return bool(_YEAR_RE.fullmatch(year))


def is_valid_date(date: str) -> bool:
    return bool(_DATE_RE.fullmatch(date))


def is_valid_file_name(name: str, max_length: Optional[int] = None) -> bool:
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        return False
    return max_length is None or len(name) <= max_length


def is_binned_file(name: str) -> bool:
    return name.endswith(BINNED_EXTS)


def is_valid_sample_file(name: str) -> bool:
    return is_binned_file(name) or name.endswith(VLOG_EXT)


def is_json_file(name: str) -> bool:
    return name.endswith(JSON_EXT)


def sample_kind_for(name: str) -> Optional[SampleKind]:
    for ext, kind in _DERIVABLE_KINDS.items():
        if name.endswith(ext):
            return kind
    return None


def vlog_name(name: str) -> str:
    """Name of the vehicle log a derivable sample file is computed from."""
    stem, _, _ = name.rpartition(".")
    return f"{stem}{VLOG_EXT}"


def sensor_id(name: str) -> str:
    i = name.find(".")
    return name[:i] if i > 0 else name


def year_path(district_dir: Path, year: str) -> Path:
    return district_dir / year


def date_path(district_dir: Path, date: str) -> Path:
    return year_path(district_dir, date[:4]) / date


def traffic_path(district_dir: Path, date: str) -> Path:
    return year_path(district_dir, date[:4]) / f"{date}{TRAFFIC_EXT}"


def ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def save_csv(df: pd.DataFrame, path: Path) -> Path:
    ensure_parent_dir(path)
    df.to_csv(path, index=False)
    return path
