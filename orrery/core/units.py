# orrery/core/units.py
"""
Scale and unit conversions.

Every scene-unit -> kilometre and per-frame -> per-second conversion goes
through here so the calibration constants stay in one auditable place.
Different scenes use different km-per-unit values on purpose.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import math

from orrery.core.constants import (
    TWO_PI,
    SECONDS_PER_DAY,
    NOMINAL_FRAME_RATE_HZ,
    GRAVITATIONAL_CONSTANT,
    wrap_rad,
)
from orrery.core.errors import InvalidConfiguration

__all__ = [
    "CalendarPeriods",
    "orbit_progress_percent",
    "distance_km",
    "per_frame_to_per_second",
    "period_seconds",
    "calendar_periods",
    "gravitational_force_n",
    "seconds_to_days",
]


@dataclass(frozen=True)
class CalendarPeriods:
    day_seconds: Optional[float]        # one full spin
    year_seconds: Optional[float]       # one full orbit
    days_per_year: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def orbit_progress_percent(year_angle: float) -> float:
    """Share of the current orbit completed, in [0, 100)."""
    pct = wrap_rad(year_angle) / TWO_PI * 100.0
    # wrap_rad keeps a < 2π, but a/2π·100 can still round up to 100.0
    return 0.0 if pct >= 100.0 else pct


def distance_km(scene_distance: float, km_per_unit: float) -> float:
    if not math.isfinite(km_per_unit) or km_per_unit <= 0.0:
        raise InvalidConfiguration(f"km_per_unit must be > 0, got {km_per_unit}")
    return float(scene_distance) * float(km_per_unit)


def per_frame_to_per_second(rate_per_frame: float, frame_rate_hz: float = NOMINAL_FRAME_RATE_HZ) -> float:
    if not math.isfinite(frame_rate_hz) or frame_rate_hz <= 0.0:
        raise InvalidConfiguration(f"frame_rate_hz must be > 0, got {frame_rate_hz}")
    return float(rate_per_frame) * float(frame_rate_hz)


def period_seconds(angular_speed: float) -> Optional[float]:
    """Seconds per full turn; None for a body that does not move."""
    w = abs(float(angular_speed))
    if w == 0.0:
        return None
    return TWO_PI / w


def calendar_periods(spin_speed: float, year_speed: float) -> CalendarPeriods:
    """Real periods implied by simulated spin/orbit speeds (rad/s)."""
    day = period_seconds(spin_speed)
    year = period_seconds(year_speed)
    days_per_year = (year / day) if (day and year) else None
    return CalendarPeriods(day_seconds=day, year_seconds=year, days_per_year=days_per_year)


def gravitational_force_n(m1_kg: float, m2_kg: float, distance_km_: float) -> float:
    """F = G·m₁·m₂ / r², r given in km."""
    r_m = float(distance_km_) * 1000.0
    if r_m <= 0.0:
        raise InvalidConfiguration(f"distance must be > 0, got {distance_km_}")
    return GRAVITATIONAL_CONSTANT * float(m1_kg) * float(m2_kg) / (r_m * r_m)


def seconds_to_days(seconds: Optional[float]) -> Optional[float]:
    return None if seconds is None else seconds / SECONDS_PER_DAY
