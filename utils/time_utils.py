"""
time helpers:
- parse_expiry() for "15m" / "7d" style durations in configuration
- Clock / FrozenClock so request time is injected rather than read ad hoc
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def parse_expiry(value: str) -> timedelta:
    """Parse "<int><unit>" where unit is one of s, m, h, d.
    """
    value = (value or "").strip()
    unit = value[-1:]
    if unit not in _UNITS:
        raise ValueError(f"Unsupported time unit: {unit or value!r}")
    try:
        amount = int(value[:-1])
    except ValueError:
        raise ValueError(f"Invalid duration: {value!r}")
    if amount <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return amount * _UNITS[unit]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Clock:
    """Wall clock, timezone-aware UTC."""

    def now(self) -> datetime:
        return utcnow()


class FrozenClock(Clock):
    """Clock that only moves when told to (tests, maintenance scripts)."""

    def __init__(self, now: datetime | None = None):
        self._now = now or utcnow()

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
