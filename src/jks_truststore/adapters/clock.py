"""
Clock adapters — the creation time stamped on each keystore entry.

JKS stores every entry's creation time inside the byte stream, so two runs
with the system clock produce different bytes (and different identifiers).
FixedClock pins the time for reproducible artifacts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


class SystemClock:
    """Current UTC wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Always returns the same instant. Naive datetimes are taken as UTC."""

    instant: datetime

    def now(self) -> datetime:
        if self.instant.tzinfo is None:
            return self.instant.replace(tzinfo=UTC)
        return self.instant
