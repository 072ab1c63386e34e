"""Process-wide KPIs for the adapter."""

from __future__ import annotations

import threading

from pydantic import BaseModel, ConfigDict, Field


class KPISnapshot(BaseModel):
    """Point-in-time view of the adapter KPIs."""

    model_config = ConfigDict(populate_by_name=True)

    attended_requests: int = Field(default=0, alias="attendedRequests")


class RequestCounter:
    """Monotonic counter of attended requests. Diagnostic only."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0

    def snapshot(self) -> KPISnapshot:
        return KPISnapshot(attended_requests=self._value)
