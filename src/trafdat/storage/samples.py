from __future__ import annotations

from enum import Enum
from typing import Optional

import numpy as np


class SampleWidth(Enum):
    BYTE = np.dtype("i1")
    SHORT = np.dtype(">i2")


_SHORT_EXTS = (".c30", ".pr60")


def sample_width(name: str) -> SampleWidth:
    """Occupancy counts (.c30) and precipitation rate (.pr60) are 16-bit samples."""
    if name.endswith(_SHORT_EXTS):
        return SampleWidth.SHORT
    return SampleWidth.BYTE


def decode_samples(data: bytes, name: str) -> list[Optional[int]]:
    """Decode binned sample data into JSON-ready values (missing -> None).

    A trailing partial sample is ignored.
    """

    dtype = sample_width(name).value
    usable = len(data) - len(data) % dtype.itemsize
    values = np.frombuffer(data[:usable], dtype=dtype)
    return [int(v) if v >= 0 else None for v in values]
