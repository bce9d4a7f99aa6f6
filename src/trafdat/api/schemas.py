from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ReasonCode(str, Enum):
    NO_SENSORS = "no_sensors"


class EmptyReason(BaseModel):
    code: ReasonCode
    message: str
    suggestion: str | None = None


class ItemsResponse(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    reason: EmptyReason | None = None
