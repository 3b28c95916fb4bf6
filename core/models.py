"""
Shared data models for the scan pipeline: Range -> Probe -> Result -> ResultSet.
Results are immutable once built; the ResultSet is the only mutable piece and
only while workers are still reporting in.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Iterable, Iterator, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.config import MAX_PORT, MIN_PORT


class PortStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"

    def __str__(self) -> str:
        return self.value


class ScanTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=MIN_PORT, le=MAX_PORT)


class ScanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=MIN_PORT, le=MAX_PORT)
    status: PortStatus

    @property
    def is_open(self) -> bool:
        return self.status is PortStatus.OPEN


class ScanRange(BaseModel):
    """Inclusive port range handed to a single worker."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=MIN_PORT, le=MAX_PORT)
    end: int = Field(ge=MIN_PORT, le=MAX_PORT)

    @model_validator(mode="after")
    def check_order(self) -> "ScanRange":
        if self.start > self.end:
            raise ValueError("range start must not exceed range end")
        return self

    def __len__(self) -> int:
        return self.end - self.start + 1

    def ports(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))


class ResultSet:
    """
    Append-only collection shared by the workers of one scan.

    Writers go through extend() under a lock. After freeze() the set is
    read-only and belongs to the coordinator.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._items: List[ScanResult] = []
        self._frozen = False

    def extend(self, results: Iterable[ScanResult]) -> None:
        batch = list(results)
        with self._lock:
            if self._frozen:
                raise RuntimeError("result set is frozen; no further writers allowed")
            self._items.extend(batch)

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ScanResult]:
        return iter(list(self._items))

    def results(self) -> List[ScanResult]:
        return list(self._items)

    def sorted_by_port(self) -> List[ScanResult]:
        # sorted() is stable; ports are unique anyway
        return sorted(self._items, key=lambda r: r.port)

    def without_closed(self, results: Iterable[ScanResult] | None = None) -> List[ScanResult]:
        source = self._items if results is None else results
        return [r for r in source if r.is_open]

    def open_count(self) -> int:
        return sum(1 for r in self._items if r.is_open)
