"""Storage for per-client rate limit counters.

The limiter talks to a ``RateLimitStore``; the in-memory implementation keeps
records in a process-local dict that is never evicted and is rebuilt empty on
restart. Each process has its own view, so limits are per instance when the
service is scaled out. A shared backend (e.g. Redis) can implement the same
three methods.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class RateLimitRecord:
    """Submission counter for one client identity."""

    client_identity: str
    count: int
    window_reset_at: datetime


class RateLimitStore(Protocol):
    def get(self, client_identity: str) -> RateLimitRecord | None: ...

    def increment(self, client_identity: str) -> RateLimitRecord: ...

    def reset(self, client_identity: str, window_reset_at: datetime) -> RateLimitRecord: ...


class InMemoryRateLimitStore:
    """Dict-backed store for single-instance deployments."""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, client_identity: str) -> RateLimitRecord | None:
        return self._records.get(client_identity)

    def increment(self, client_identity: str) -> RateLimitRecord:
        """Add one to an existing record.

        Raises:
            KeyError: If no record exists; callers create records via reset().
        """
        record = self._records[client_identity]
        updated = replace(record, count=record.count + 1)
        self._records[client_identity] = updated
        return updated

    def reset(self, client_identity: str, window_reset_at: datetime) -> RateLimitRecord:
        """Start a new window holding one submission."""
        record = RateLimitRecord(
            client_identity=client_identity,
            count=1,
            window_reset_at=window_reset_at,
        )
        self._records[client_identity] = record
        return record

    def __len__(self) -> int:
        return len(self._records)
