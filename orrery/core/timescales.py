# orrery/core/timescales.py
# -----------------------------------------------------------------------------
# Clock-driven calendar angles (fixed UTC offset; no leap seconds, no DST)
#
# Public API:
#   build_calendar_angles(instant, utc_offset_hours, equinox_day) -> CalendarAngles
#   instant_from_civil(date_str, time_str, utc_offset_hours)     -> Instant
#
# Guarantees:
#   • day_angle = local seconds-of-day / 86400 · 2π, local = UTC + fixed offset.
#   • year_angle = ((doy − equinox_day + 365) mod 365) / 365.25 · 2π,
#     doy = whole UTC days since Jan 1 of the UTC year (0-based).
#   • year_angle is therefore 0 on the equinox day and steps once per UTC day.
#   • Both angles land in [0, 2π).
#   • Civil inputs are read at the fixed offset; ss == 60 is rejected.
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime, timezone, timedelta
from typing import Tuple, List, Dict, Any
import math
import re

from orrery.core.clock import Instant
from orrery.core.constants import (
    TWO_PI,
    SECONDS_PER_DAY,
    DAYS_PER_YEAR,
    DAYS_PER_CALENDAR_YEAR,
    EQUINOX_DAY_OF_YEAR,
    LOCAL_UTC_OFFSET_HOURS,
)

__all__ = [
    "CalendarAngles",
    "build_calendar_angles",
    "instant_from_civil",
    "day_of_year_utc",
    "day_angle_from_local",
    "year_angle_from_day",
]

# ───────────────────────────── Dataclass ─────────────────────────────

@dataclass(frozen=True)
class CalendarAngles:
    day_angle: float          # rad, 0 at local midnight
    year_angle: float         # rad, 0 on the equinox day
    day_of_year: int          # 0-based, UTC
    day_offset: int           # days since equinox, mod 365
    local_seconds: float      # seconds since local midnight
    utc_offset_hours: float
    local_time: str           # ISO 8601 at the fixed offset
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["warnings"] = list(self.warnings)
        return d

# ───────────────────────────── Parsing helpers ─────────────────────────────

_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})\s*$")
_TIME_RE = re.compile(r"^\s*(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2})(?:\.(?P<f>\d+))?)?\s*$")

def _parse_date_str(date_str: str) -> Tuple[int, int, int]:
    """Parse YYYY-MM-DD and return (iy, im, id)."""
    m = _DATE_RE.match(date_str or "")
    if not m:
        raise ValueError(f"Invalid date_str '{date_str}': expected YYYY-MM-DD")
    iy, im, iday = int(m.group(1)), int(m.group(2)), int(m.group(3))
    datetime(iy, im, iday)  # existence check
    return iy, im, iday

def _parse_time(time_str: str) -> Tuple[int, int, int, int]:
    """
    Parse HH:MM[:SS[.frac]] and return (ih, im, isec, microsecond).
    Leap seconds (ss == 60) are not representable on this clock.
    """
    m = _TIME_RE.match(time_str or "")
    if not m:
        raise ValueError(f"Invalid time_str '{time_str}': expected HH:MM[:SS[.frac]]")
    ih = int(m.group("h")); im = int(m.group("m")); isec = int(m.group("s") or 0)
    if not (0 <= ih <= 23 and 0 <= im <= 59 and 0 <= isec <= 59):
        raise ValueError(f"Invalid time fields: hh={ih}, mm={im}, ss={isec}")
    frac = (m.group("f") or "")[:6].ljust(6, "0")
    return ih, im, isec, int(frac)

# ───────────────────────────── Angle helpers ─────────────────────────────

def _fixed_zone(utc_offset_hours: float) -> timezone:
    if not math.isfinite(utc_offset_hours) or abs(utc_offset_hours) > 14.0:
        raise ValueError(f"utc_offset_hours out of range: {utc_offset_hours}")
    return timezone(timedelta(hours=float(utc_offset_hours)))

def day_of_year_utc(utc_dt: datetime) -> int:
    """Whole UTC days elapsed since Jan 1 00:00 UTC of the same year."""
    start = datetime(utc_dt.year, 1, 1, tzinfo=timezone.utc)
    return int((utc_dt - start) // timedelta(days=1))

def day_angle_from_local(local_dt: datetime) -> Tuple[float, float]:
    """Return (day_angle, seconds since local midnight)."""
    secs = (
        local_dt.hour * 3600
        + local_dt.minute * 60
        + local_dt.second
        + local_dt.microsecond / 1e6
    )
    angle = secs / SECONDS_PER_DAY * TWO_PI
    return (0.0 if angle >= TWO_PI else angle), secs

def year_angle_from_day(day_of_year: int, equinox_day: int = EQUINOX_DAY_OF_YEAR) -> Tuple[float, int]:
    """Return (year_angle, day offset since the equinox)."""
    offset = (int(day_of_year) - int(equinox_day) + DAYS_PER_CALENDAR_YEAR) % DAYS_PER_CALENDAR_YEAR
    return offset / DAYS_PER_YEAR * TWO_PI, offset

# ───────────────────────────── Public API ─────────────────────────────

def build_calendar_angles(
    instant: Instant,
    utc_offset_hours: float = LOCAL_UTC_OFFSET_HOURS,
    equinox_day: int = EQUINOX_DAY_OF_YEAR,
) -> CalendarAngles:
    """Derive day/year angles for a wall-clock instant."""
    warnings: List[str] = []
    zone = _fixed_zone(utc_offset_hours)
    if not (0 <= int(equinox_day) < DAYS_PER_CALENDAR_YEAR):
        raise ValueError(f"equinox_day out of range [0, 365): {equinox_day}")

    utc_dt = instant.to_utc()
    local_dt = utc_dt.astimezone(zone)

    day_angle, local_secs = day_angle_from_local(local_dt)
    doy = day_of_year_utc(utc_dt)
    if doy >= DAYS_PER_CALENDAR_YEAR:
        # Dec 31 of a leap year folds onto Jan 1's offset.
        warnings.append("leap_day_folded")
    year_angle, offset = year_angle_from_day(doy, equinox_day)

    return CalendarAngles(
        day_angle=float(day_angle),
        year_angle=float(year_angle),
        day_of_year=doy,
        day_offset=offset,
        local_seconds=float(local_secs),
        utc_offset_hours=float(utc_offset_hours),
        local_time=local_dt.isoformat(),
        warnings=tuple(warnings),
    )

def instant_from_civil(
    date_str: str,
    time_str: str,
    utc_offset_hours: float = LOCAL_UTC_OFFSET_HOURS,
) -> Instant:
    """Local civil date/time at the fixed offset -> Instant."""
    iy, im, iday = _parse_date_str(date_str)
    ih, imin, isec, micro = _parse_time(time_str)
    local = datetime(iy, im, iday, ih, imin, isec, micro, tzinfo=_fixed_zone(utc_offset_hours))
    try:
        local.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError(f"{date_str} {time_str} at UTC{utc_offset_hours:+g} falls outside years 1..9999 in UTC")
    return Instant.from_datetime(local)
