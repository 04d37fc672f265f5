# orrery/core/geometry.py
"""
Small 3D vector helpers for the scene frame.

Conventions match a Y-up, right-handed scene graph:
- orbits lie in the XZ plane,
- self-rotation is about the body's local +Y axis,
- axial tilt is a static rotation about +X.

Vectors are plain tuples (Vec3 is a NamedTuple) so they compare, hash and
serialize without ceremony.
"""
from __future__ import annotations

from functools import lru_cache
from typing import NamedTuple, Tuple
import math

from orrery.core.errors import DegenerateGeometry

__all__ = [
    "Vec3", "Mat3", "ORIGIN",
    "add", "sub", "scale", "dot", "length", "distance", "normalize",
    "rotation_x", "rotation_y", "mat_vec", "tilt_matrix",
]

_EPS = 1e-12


class Vec3(NamedTuple):
    x: float
    y: float
    z: float

    def to_list(self) -> list:
        return [self.x, self.y, self.z]


Mat3 = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]

ORIGIN = Vec3(0.0, 0.0, 0.0)


def add(a: Vec3, b: Vec3) -> Vec3:
    return Vec3(a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return Vec3(a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(a: Vec3, k: float) -> Vec3:
    return Vec3(a[0] * k, a[1] * k, a[2] * k)


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def length(a: Vec3) -> float:
    return math.hypot(a[0], a[1], a[2])


def distance(a: Vec3, b: Vec3) -> float:
    return length(sub(a, b))


def normalize(a: Vec3, what: str = "vector") -> Vec3:
    """Unit vector along `a`; zero-length input raises DegenerateGeometry."""
    n = length(a)
    if not math.isfinite(n) or n < _EPS:
        raise DegenerateGeometry(f"cannot normalize zero-length {what}")
    return Vec3(a[0] / n, a[1] / n, a[2] / n)


# ───────────────────────── rotations ─────────────────────────
def rotation_x(theta: float) -> Mat3:
    c, s = math.cos(theta), math.sin(theta)
    return (
        (1.0, 0.0, 0.0),
        (0.0, c, -s),
        (0.0, s, c),
    )


def rotation_y(theta: float) -> Mat3:
    c, s = math.cos(theta), math.sin(theta)
    return (
        (c, 0.0, s),
        (0.0, 1.0, 0.0),
        (-s, 0.0, c),
    )


def mat_vec(m: Mat3, v: Vec3) -> Vec3:
    return Vec3(
        m[0][0] * v[0] + m[0][1] * v[1] + m[0][2] * v[2],
        m[1][0] * v[0] + m[1][1] * v[1] + m[1][2] * v[2],
        m[2][0] * v[0] + m[2][1] * v[1] + m[2][2] * v[2],
    )


@lru_cache(maxsize=32)
def tilt_matrix(tilt_rad: float) -> Mat3:
    """Static axial-tilt transform; computed once per distinct tilt value."""
    return rotation_x(float(tilt_rad))
