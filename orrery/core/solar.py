# orrery/core/solar.py
"""
Local solar incidence for a fixed geographic point on a tilted, spinning Earth.

Pipeline (scene frame, Y up):
  1. local point  p = r·(cos φ cos λ, sin φ, cos φ sin λ)
  2. world point  w = T + Tilt · Spin · p
     (spin about the body's own axis; tilt is the static X rotation;
      T is the orbital translation)
  3. normal       n = normalize(Tilt · Spin · p), i.e. w − T without the translation
  4. toward Sun   s = normalize(S − T)
  5. incidence    θ = acos(clamp(n · s, −1, 1))  [deg]

θ ≤ 90° is DAY and θ > 90° is NIGHT. There is no twilight band.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional
import math

from orrery.core.constants import EARTH_RADIUS_UNITS
from orrery.core.errors import InvalidConfiguration
from orrery.core.geometry import (
    Mat3,
    Vec3,
    add,
    dot,
    mat_vec,
    normalize,
    rotation_y,
    sub,
    tilt_matrix,
)

__all__ = [
    "DayPhase",
    "GeoPoint",
    "SolarIncidence",
    "DAY_NIGHT_THRESHOLD_DEG",
    "surface_point",
    "surface_normal",
    "surface_to_world",
    "incidence_angle_deg",
    "classify_daylight",
    "solar_intensity",
    "solar_incidence",
]

DAY_NIGHT_THRESHOLD_DEG: float = 90.0


class DayPhase(str, Enum):
    DAY = "DAY"
    NIGHT = "NIGHT"


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude in radians; east and north positive."""
    latitude: float
    longitude: float
    name: str = ""

    def __post_init__(self) -> None:
        for attr in ("latitude", "longitude"):
            v = getattr(self, attr)
            if not isinstance(v, (int, float)) or not math.isfinite(v):
                raise InvalidConfiguration(f"{attr} must be a finite number, got {v!r}")
        if abs(self.latitude) > math.pi / 2:
            raise InvalidConfiguration(
                f"latitude out of range [-90°, 90°]: {math.degrees(self.latitude):.6f}°"
            )
        if abs(self.longitude) > math.pi:
            raise InvalidConfiguration(
                f"longitude out of range [-180°, 180°]: {math.degrees(self.longitude):.6f}°"
            )

    @classmethod
    def from_degrees(cls, latitude_deg: float, longitude_deg: float, name: str = "") -> "GeoPoint":
        try:
            lat, lon = math.radians(float(latitude_deg)), math.radians(float(longitude_deg))
        except (TypeError, ValueError):
            raise InvalidConfiguration(
                f"latitude/longitude must be numbers, got {latitude_deg!r}, {longitude_deg!r}"
            )
        return cls(lat, lon, name)

    @property
    def latitude_deg(self) -> float:
        return math.degrees(self.latitude)

    @property
    def longitude_deg(self) -> float:
        return math.degrees(self.longitude)


@dataclass(frozen=True)
class SolarIncidence:
    angle_deg: float        # [0, 180]
    phase: DayPhase
    intensity: float        # max(0, cos θ), 0..1

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["phase"] = self.phase.value
        return out


# ───────────────────────── geometry steps ─────────────────────────
def surface_point(geo: GeoPoint, radius: float = EARTH_RADIUS_UNITS) -> Vec3:
    """GeoPoint on a sphere of `radius`, body-local frame."""
    cl = math.cos(geo.latitude)
    return Vec3(
        radius * cl * math.cos(geo.longitude),
        radius * math.sin(geo.latitude),
        radius * cl * math.sin(geo.longitude),
    )


def surface_normal(
    local: Vec3,
    *,
    spin: float,
    tilt: float = 0.0,
    tilt_m: Optional[Mat3] = None,
) -> Vec3:
    """Body-local point after spin and static tilt; the outward normal before translation."""
    spun = mat_vec(rotation_y(spin), local)
    m = tilt_m if tilt_m is not None else tilt_matrix(float(tilt))
    return mat_vec(m, spun)


def surface_to_world(
    local: Vec3,
    *,
    translation: Vec3,
    spin: float,
    tilt: float = 0.0,
    tilt_m: Optional[Mat3] = None,
) -> Vec3:
    """Compose spin, static tilt and orbital translation onto a body-local point."""
    return add(translation, surface_normal(local, spin=spin, tilt=tilt, tilt_m=tilt_m))


def incidence_angle_deg(normal: Vec3, toward_sun: Vec3) -> float:
    """Angle between two directions in degrees, [0, 180]. Inputs need not be unit length."""
    n = normalize(normal, "surface normal")
    s = normalize(toward_sun, "sun direction")
    c = max(-1.0, min(1.0, dot(n, s)))
    return math.degrees(math.acos(c))


def classify_daylight(angle_deg: float) -> DayPhase:
    return DayPhase.NIGHT if angle_deg > DAY_NIGHT_THRESHOLD_DEG else DayPhase.DAY


def solar_intensity(angle_deg: float) -> float:
    return max(0.0, math.cos(math.radians(angle_deg)))


# ───────────────────────── public entry ─────────────────────────
def solar_incidence(
    *,
    earth_position: Vec3,
    sun_position: Vec3,
    spin: float,
    tilt: float,
    geo: GeoPoint,
    radius: float = EARTH_RADIUS_UNITS,
) -> SolarIncidence:
    """Incidence of sunlight at `geo` for the given Earth pose."""
    normal = surface_normal(surface_point(geo, radius), spin=spin, tilt=tilt)
    toward_sun = sub(sun_position, earth_position)
    angle = incidence_angle_deg(normal, toward_sun)
    return SolarIncidence(
        angle_deg=angle,
        phase=classify_daylight(angle),
        intensity=solar_intensity(angle),
    )
