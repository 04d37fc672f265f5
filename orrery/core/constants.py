# -*- coding: utf-8 -*-
"""
Orrery - core constants & small angle helpers

Purpose
-------
Single source of truth for:
- scene geometry (orbit radii, Earth radius in scene units, Sun placement)
- animation rates as authored per frame (converted to rad/s in units.py)
- calendar alignment (equinox day-of-year, year divisor, local UTC offset)
- calibration constants (km per scene unit, body masses)
- tiny angle helpers (wrap to [0, 2π) / [0, 360))

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Functions are pure; constants are immutable by convention.
"""

from __future__ import annotations
from typing import Dict, Tuple
import math

__all__ = [
    # angles
    "TWO_PI", "HALF_PI", "AXIAL_TILT_DEG", "AXIAL_TILT_RAD",
    # time / calendar
    "SECONDS_PER_DAY", "DAYS_PER_YEAR", "DAYS_PER_CALENDAR_YEAR",
    "EQUINOX_DAY_OF_YEAR", "LOCAL_UTC_OFFSET_HOURS", "NOMINAL_FRAME_RATE_HZ",
    # scene geometry
    "EARTH_RADIUS_UNITS", "SEASONS_ORBIT_RADIUS", "SUN_POSITION_ORBIT_RADIUS",
    "SUN_POSITION_SUN_XYZ", "GRAVITY_MOON_ORBIT_RADIUS",
    # rates
    "SOLAR_SYSTEM_PLANETS", "PLANET_SPEED_SCALE", "PLANET_SPIN_PER_FRAME",
    "SEASONS_YEAR_PER_FRAME", "SEASONS_DAY_PER_FRAME",
    "GRAVITY_MOON_SPEED_RAD_S", "GRAVITY_EARTH_SPIN_PER_FRAME", "GRAVITY_MOON_SPIN_PER_FRAME",
    # calibration
    "KM_PER_AU", "EARTH_MOON_KM", "SUN_POSITION_KM_PER_UNIT", "SEASONS_KM_PER_UNIT",
    "SOLAR_SYSTEM_KM_PER_UNIT", "GRAVITY_KM_PER_UNIT",
    "GRAVITATIONAL_CONSTANT", "EARTH_MASS_KG", "MOON_MASS_KG",
    # reference point
    "MAKKAH_LAT_DEG", "MAKKAH_LON_DEG",
    # helpers
    "wrap_rad", "wrap_deg",
    # version tag
    "CONSTANTS_VERSION",
]

# ── version tag ───────────────────────────────────────────────────────────────
CONSTANTS_VERSION: str = "1.0.0"

# ── angles ────────────────────────────────────────────────────────────────────
TWO_PI: float = 2.0 * math.pi
HALF_PI: float = 0.5 * math.pi

AXIAL_TILT_DEG: float = 23.5
AXIAL_TILT_RAD: float = math.radians(AXIAL_TILT_DEG)

# ── time / calendar ───────────────────────────────────────────────────────────
SECONDS_PER_DAY: float = 86400.0
DAYS_PER_YEAR: float = 365.25           # divisor for the year-angle
DAYS_PER_CALENDAR_YEAR: int = 365       # modulus for the day offset
EQUINOX_DAY_OF_YEAR: int = 79           # 0-based day index of the March equinox
LOCAL_UTC_OFFSET_HOURS: float = 3.0     # Makkah (AST), no DST
NOMINAL_FRAME_RATE_HZ: float = 60.0     # per-frame constants were authored at this rate

# ── scene geometry (scene units) ─────────────────────────────────────────────
EARTH_RADIUS_UNITS: float = 2.0
SEASONS_ORBIT_RADIUS: float = 7.5
SUN_POSITION_ORBIT_RADIUS: float = 8.5
SUN_POSITION_SUN_XYZ: Tuple[float, float, float] = (-6.0, 2.0, 0.0)
GRAVITY_MOON_ORBIT_RADIUS: float = 4.8

# ── animation rates ──────────────────────────────────────────────────────────
# name -> (orbit radius, speed factor). Angular step per frame = factor * PLANET_SPEED_SCALE.
SOLAR_SYSTEM_PLANETS: Dict[str, Tuple[float, float]] = {
    "mercury": (25.0, 0.04),
    "venus": (35.0, 0.03),
    "earth": (50.0, 0.02),
    "mars": (65.0, 0.018),
    "jupiter": (100.0, 0.01),
    "saturn": (140.0, 0.008),
    "uranus": (180.0, 0.006),
    "neptune": (220.0, 0.005),
}
PLANET_SPEED_SCALE: float = 0.01
PLANET_SPIN_PER_FRAME: float = 0.01

SEASONS_YEAR_PER_FRAME: float = 0.0005
SEASONS_DAY_PER_FRAME: float = 0.01

GRAVITY_MOON_SPEED_RAD_S: float = 0.5   # already per second (frame-delta driven)
GRAVITY_EARTH_SPIN_PER_FRAME: float = 0.001
GRAVITY_MOON_SPIN_PER_FRAME: float = 0.005

# ── calibration ──────────────────────────────────────────────────────────────
KM_PER_AU: float = 149_597_870.7
EARTH_MOON_KM: float = 384_400.0

SUN_POSITION_KM_PER_UNIT: float = 17.65e6
SEASONS_KM_PER_UNIT: float = KM_PER_AU / SEASONS_ORBIT_RADIUS
SOLAR_SYSTEM_KM_PER_UNIT: float = KM_PER_AU / SOLAR_SYSTEM_PLANETS["earth"][0]
GRAVITY_KM_PER_UNIT: float = EARTH_MOON_KM / GRAVITY_MOON_ORBIT_RADIUS

GRAVITATIONAL_CONSTANT: float = 6.674_30e-11   # m^3 kg^-1 s^-2
EARTH_MASS_KG: float = 5.972_2e24
MOON_MASS_KG: float = 7.342e22

# ── reference point ──────────────────────────────────────────────────────────
MAKKAH_LAT_DEG: float = 21.4225
MAKKAH_LON_DEG: float = 39.826


# ── tiny angle helpers (no external imports) ──────────────────────────────────
def wrap_rad(x: float) -> float:
    """
    Wrap any angle to [0, 2π).

    Values that land on 2π after floating-point rounding (tiny negatives)
    collapse to 0.0 so the upper bound stays exclusive.
    """
    x = math.fmod(float(x), TWO_PI)
    if x < 0.0:
        x += TWO_PI
    return 0.0 if x >= TWO_PI else x

def wrap_deg(x: float) -> float:
    """
    Wrap any angle to [0, 360).
    """
    x = math.fmod(float(x), 360.0)
    if x < 0.0:
        x += 360.0
    return 0.0 if x >= 360.0 else x
