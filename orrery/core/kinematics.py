# orrery/core/kinematics.py
"""
Circular, coplanar orbital kinematics.

A body is a frozen value. Reading a body never changes it; time moves forward
only through `advance(body, elapsed)`, which returns a new body. Angles are
stored unbounded so accumulation is exact in order, and wrapped only where a
bounded value is needed.

    angle(t)      = angle0 + speed · t          (retrograde when speed < 0)
    spin(t)       = spin0  + spin_speed · t
    position(a,r) = (cos a · r, 0, sin a · r)   in the parent's frame
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union
import math

from orrery.core.constants import wrap_rad
from orrery.core.errors import InvalidConfiguration
from orrery.core.geometry import Vec3, add

__all__ = [
    "OrbitalBody",
    "FixedBody",
    "Body",
    "planet_angle",
    "self_rotation_angle",
    "orbit_position",
    "world_position",
    "advance",
]


def _finite(name: str, value: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
    if not math.isfinite(v):
        raise InvalidConfiguration(f"{name} must be finite, got {value!r}")
    return v


@dataclass(frozen=True)
class OrbitalBody:
    name: str
    orbit_radius: float                 # scene units, > 0
    angular_speed: float                # rad per simulated second
    angle: float = 0.0                  # rad, unbounded
    spin_speed: float = 0.0             # rad per simulated second
    spin_angle: float = 0.0             # rad, unbounded
    axial_tilt: float = 0.0             # rad, constant
    parent: str = "sun"

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidConfiguration("body name must be non-empty")
        radius = _finite(f"{self.name}.orbit_radius", self.orbit_radius)
        if radius <= 0.0:
            raise InvalidConfiguration(f"{self.name}: orbit radius must be > 0, got {radius}")
        for attr in ("angular_speed", "angle", "spin_speed", "spin_angle", "axial_tilt"):
            _finite(f"{self.name}.{attr}", getattr(self, attr))

    @property
    def normalized_angle(self) -> float:
        return wrap_rad(self.angle)

    @property
    def normalized_spin(self) -> float:
        return wrap_rad(self.spin_angle)


@dataclass(frozen=True)
class FixedBody:
    """Scene centre (Sun, or Earth in the two-body view): fixed position, optional spin."""
    name: str
    position: Vec3 = Vec3(0.0, 0.0, 0.0)
    spin_speed: float = 0.0
    spin_angle: float = 0.0
    axial_tilt: float = 0.0

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidConfiguration("body name must be non-empty")
        if len(self.position) != 3:
            raise InvalidConfiguration(f"{self.name}: position must have 3 components")
        object.__setattr__(self, "position", Vec3(*(_finite(f"{self.name}.position", c) for c in self.position)))
        for attr in ("spin_speed", "spin_angle", "axial_tilt"):
            _finite(f"{self.name}.{attr}", getattr(self, attr))

    @property
    def normalized_spin(self) -> float:
        return wrap_rad(self.spin_angle)


def planet_angle(body: OrbitalBody, elapsed: float) -> float:
    """Orbit angle after `elapsed` simulated seconds (unbounded)."""
    return body.angle + body.angular_speed * float(elapsed)


Body = Union[OrbitalBody, FixedBody]


def self_rotation_angle(body: Body, elapsed: float) -> float:
    """Spin angle after `elapsed` simulated seconds (unbounded)."""
    return body.spin_angle + body.spin_speed * float(elapsed)


def orbit_position(angle: float, radius: float) -> Vec3:
    """Point on a circular orbit in the parent's local XZ plane."""
    r = _finite("radius", radius)
    if r <= 0.0:
        raise InvalidConfiguration(f"orbit radius must be > 0, got {r}")
    a = float(angle)
    return Vec3(math.cos(a) * r, 0.0, math.sin(a) * r)


def world_position(body: OrbitalBody, parent_position: Vec3) -> Vec3:
    return add(parent_position, orbit_position(body.normalized_angle, body.orbit_radius))


def advance(body: Body, elapsed: float) -> Body:
    """New body with orbit and spin moved by `elapsed` seconds; `body` is untouched."""
    dt = float(elapsed)
    if not math.isfinite(dt):
        raise ValueError(f"elapsed must be finite, got {elapsed!r}")
    if isinstance(body, FixedBody):
        return replace(body, spin_angle=self_rotation_angle(body, dt))
    return replace(
        body,
        angle=planet_angle(body, dt),
        spin_angle=self_rotation_angle(body, dt),
    )
