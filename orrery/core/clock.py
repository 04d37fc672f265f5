# orrery/core/clock.py
"""
Time sources.

Every angle computation reads time through one of these so tests and replays
can inject a deterministic clock:

  SystemClock     wall clock (time.time), carries the fixed local UTC offset
  SimulatedClock  explicitly advanced by a driver; supports rewind
  FrameTimer      frame-delta accumulator over any time source

SimulatedClock's current time is the only shared mutable value here. It has a
single writer at a time (the lock), and readers always see a whole update.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Optional, Protocol, Tuple
import math
import time

from orrery.core.constants import LOCAL_UTC_OFFSET_HOURS
from orrery.core.errors import InvalidConfiguration

__all__ = ["Instant", "TimeSource", "SystemClock", "SimulatedClock", "FrameTimer"]


@dataclass(frozen=True, order=True)
class Instant:
    """Seconds on some time axis (Unix epoch for wall clocks, t=0 for simulated ones)."""
    seconds: float

    def to_utc(self) -> datetime:
        return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=self.seconds)

    def to_local(self, utc_offset_hours: float) -> datetime:
        return self.to_utc().astimezone(timezone(timedelta(hours=utc_offset_hours)))

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Instant":
        if dt.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        return cls(dt.timestamp())


class TimeSource(Protocol):
    def now(self) -> Instant: ...


class SystemClock:
    """Wall clock. `utc_offset_hours` is the fixed offset of the local reference."""

    def __init__(
        self,
        utc_offset_hours: float = LOCAL_UTC_OFFSET_HOURS,
        read: Callable[[], float] = time.time,
    ):
        if not math.isfinite(utc_offset_hours) or abs(utc_offset_hours) > 14.0:
            raise InvalidConfiguration(f"utc offset out of range: {utc_offset_hours}")
        self.utc_offset_hours = float(utc_offset_hours)
        self._read = read

    def now(self) -> Instant:
        return Instant(float(self._read()))

    def local_now(self) -> datetime:
        return self.now().to_local(self.utc_offset_hours)


class SimulatedClock:
    """Clock moved only by `advance`/`set`."""

    def __init__(self, start: float = 0.0):
        self._t = float(start)
        self._lock = Lock()

    def now(self) -> Instant:
        with self._lock:
            return Instant(self._t)

    def advance(self, dt: float) -> Instant:
        """Move by `dt` seconds (negative rewinds)."""
        if not math.isfinite(dt):
            raise ValueError(f"dt must be finite, got {dt!r}")
        with self._lock:
            t = self._t + float(dt)
            if not math.isfinite(t):
                raise ValueError(f"clock would leave the finite range: {self._t!r} + {dt!r}")
            self._t = t
            return Instant(t)

    def set(self, t: float) -> Instant:
        if not math.isfinite(t):
            raise ValueError(f"t must be finite, got {t!r}")
        with self._lock:
            self._t = float(t)
            return Instant(self._t)


class FrameTimer:
    """
    Elapsed-seconds-per-frame over a time source.

    The first `tick()` returns 0.0. Deltas are never dropped, so the sum of
    all ticks always equals the total elapsed time on the source.
    """

    def __init__(self, source: TimeSource):
        self.source = source
        self._last: Optional[Instant] = None
        self.elapsed = 0.0

    def peek(self) -> Tuple[Instant, float]:
        """Current instant and the delta `tick` would return, without consuming it."""
        now = self.source.now()
        delta = 0.0 if self._last is None else now.seconds - self._last.seconds
        if not math.isfinite(delta):
            raise ValueError(f"frame delta must be finite, got {delta!r}")
        return now, delta

    def commit(self, now: Instant, delta: float) -> None:
        self._last = now
        self.elapsed += delta

    def tick(self) -> float:
        now, delta = self.peek()
        self.commit(now, delta)
        return delta

    def reset(self) -> None:
        self._last = None
        self.elapsed = 0.0
