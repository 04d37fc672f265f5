# orrery/core/scenes.py
"""
Built-in scene definitions.

A SceneConfig is static: bodies with their starting angles and speeds, the
fixed centre, calibration constants and which derived fields the scene
reports. Per-frame animation constants are converted to rad/s here, once.

Scenes
------
solar_system   Sun + eight planets, seeded random start angles        (SPEED)
seasons        tilted Earth on a 7.5-unit orbit; season & progress    (SPEED)
sun_position   Earth posed from the wall clock; Makkah incidence      (CLOCK)
gravity        Moon around a fixed, spinning Earth; force readout     (SPEED)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
import logging
import math
import random

from orrery.core import constants as C
from orrery.core.errors import InvalidConfiguration
from orrery.core.geometry import Vec3
from orrery.core.kinematics import FixedBody, OrbitalBody
from orrery.core.solar import GeoPoint
from orrery.core.units import calendar_periods, per_frame_to_per_second, seconds_to_days

__all__ = [
    "DriveMode",
    "SceneConfig",
    "SCENE_NAMES",
    "build_scene",
    "build_all_scenes",
    "scene_summary",
]

log = logging.getLogger(__name__)


class DriveMode(str, Enum):
    CLOCK = "clock"     # angles re-derived from the wall clock every frame
    SPEED = "speed"     # angles accumulated from elapsed time × speed constants


@dataclass(frozen=True)
class SceneConfig:
    name: str
    mode: DriveMode
    center: FixedBody
    bodies: Tuple[OrbitalBody, ...]
    focus_body: Optional[str] = None        # body whose distance/year-angle is reported
    km_per_unit: Optional[float] = None
    orbit_center: Optional[Vec3] = None     # overrides centre position for its children
    track_season: bool = False
    geo_point: Optional[GeoPoint] = None
    utc_offset_hours: float = C.LOCAL_UTC_OFFSET_HOURS
    equinox_day: int = C.EQUINOX_DAY_OF_YEAR
    masses_kg: Optional[Tuple[float, float]] = None   # (parent, focus) for the force readout
    description: str = ""

    def __post_init__(self) -> None:
        names = [self.center.name] + [b.name for b in self.bodies]
        if len(set(names)) != len(names):
            raise InvalidConfiguration(f"{self.name}: duplicate body names {names}")
        known = {self.center.name}
        for b in self.bodies:
            if b.parent not in known:
                raise InvalidConfiguration(
                    f"{self.name}: body '{b.name}' has unknown or later parent '{b.parent}'"
                )
            known.add(b.name)
        if self.focus_body is not None and self.focus_body not in known:
            raise InvalidConfiguration(f"{self.name}: unknown focus body '{self.focus_body}'")
        if self.km_per_unit is not None and (not math.isfinite(self.km_per_unit) or self.km_per_unit <= 0):
            raise InvalidConfiguration(f"{self.name}: km_per_unit must be > 0, got {self.km_per_unit}")
        if (self.track_season or self.mode is DriveMode.CLOCK) and self.focus_body is None:
            raise InvalidConfiguration(f"{self.name}: a focus body is required for year-angle output")
        if self.geo_point is not None and self.focus_body is None:
            raise InvalidConfiguration(f"{self.name}: geo_point needs a focus body to sit on")

    def body(self, name: str) -> OrbitalBody:
        for b in self.bodies:
            if b.name == name:
                return b
        raise KeyError(name)


# ───────────────────────── config access ─────────────────────────
def _get(cfg: Optional[Mapping[str, Any]], key: str, default: Any) -> Any:
    if not cfg:
        return default
    v = cfg.get(key, None)
    return default if v is None else v


def _scene_cfg(cfg: Optional[Mapping[str, Any]], scene: str) -> Mapping[str, Any]:
    scenes = _get(cfg, "scenes", {}) or {}
    return scenes.get(scene, {}) or {}


def _as_float(name: str, v: Any) -> float:
    try:
        x = float(v)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{name} must be a number, got {v!r}")
    if not math.isfinite(x):
        raise InvalidConfiguration(f"{name} must be finite, got {v!r}")
    return x


# ───────────────────────── builders ─────────────────────────
def _solar_system(cfg: Optional[Mapping[str, Any]]) -> SceneConfig:
    fr = _as_float("frame_rate_hz", _get(cfg, "frame_rate_hz", C.NOMINAL_FRAME_RATE_HZ))
    seed = _get(cfg, "planet_seed", 0)
    rng = random.Random(seed)
    spin = per_frame_to_per_second(C.PLANET_SPIN_PER_FRAME, fr)
    bodies = tuple(
        OrbitalBody(
            name=name,
            orbit_radius=radius,
            angular_speed=per_frame_to_per_second(factor * C.PLANET_SPEED_SCALE, fr),
            angle=rng.random() * C.TWO_PI,
            spin_speed=spin,
        )
        for name, (radius, factor) in C.SOLAR_SYSTEM_PLANETS.items()
    )
    sc = _scene_cfg(cfg, "solar_system")
    return SceneConfig(
        name="solar_system",
        mode=DriveMode.SPEED,
        center=FixedBody("sun"),
        bodies=bodies,
        focus_body="earth",
        km_per_unit=_as_float("km_per_unit", _get(sc, "km_per_unit", C.SOLAR_SYSTEM_KM_PER_UNIT)),
        description="Sun and eight planets on coplanar circular orbits",
    )


def _seasons(cfg: Optional[Mapping[str, Any]]) -> SceneConfig:
    fr = _as_float("frame_rate_hz", _get(cfg, "frame_rate_hz", C.NOMINAL_FRAME_RATE_HZ))
    sc = _scene_cfg(cfg, "seasons")
    earth = OrbitalBody(
        name="earth",
        orbit_radius=C.SEASONS_ORBIT_RADIUS,
        angular_speed=per_frame_to_per_second(C.SEASONS_YEAR_PER_FRAME, fr),
        angle=0.0,  # vernal equinox
        spin_speed=per_frame_to_per_second(C.SEASONS_DAY_PER_FRAME, fr),
        axial_tilt=C.AXIAL_TILT_RAD,
    )
    return SceneConfig(
        name="seasons",
        mode=DriveMode.SPEED,
        center=FixedBody("sun"),
        bodies=(earth,),
        focus_body="earth",
        km_per_unit=_as_float("km_per_unit", _get(sc, "km_per_unit", C.SEASONS_KM_PER_UNIT)),
        track_season=True,
        description="Tilted Earth orbit driving the four seasons",
    )


def _sun_position(cfg: Optional[Mapping[str, Any]]) -> SceneConfig:
    sc = _scene_cfg(cfg, "sun_position")
    gp = _get(cfg, "geo_point", {}) or {}
    geo = GeoPoint.from_degrees(
        _get(gp, "latitude_deg", C.MAKKAH_LAT_DEG),
        _get(gp, "longitude_deg", C.MAKKAH_LON_DEG),
        str(_get(gp, "name", "Makkah")),
    )
    equinox = _get(cfg, "equinox_day_of_year", C.EQUINOX_DAY_OF_YEAR)
    try:
        equinox = int(equinox)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"equinox_day_of_year must be an integer, got {equinox!r}")
    if not (0 <= equinox < C.DAYS_PER_CALENDAR_YEAR):
        raise InvalidConfiguration(f"equinox_day_of_year out of range [0, 365): {equinox}")
    offset = _as_float("utc_offset_hours", _get(cfg, "utc_offset_hours", C.LOCAL_UTC_OFFSET_HOURS))
    if abs(offset) > 14.0:
        raise InvalidConfiguration(f"utc_offset_hours out of range: {offset}")

    sun_xyz = Vec3(*C.SUN_POSITION_SUN_XYZ)
    earth = OrbitalBody(
        name="earth",
        orbit_radius=C.SUN_POSITION_ORBIT_RADIUS,
        angular_speed=0.0,  # posed from the clock, never integrated
        axial_tilt=C.AXIAL_TILT_RAD,
    )
    return SceneConfig(
        name="sun_position",
        mode=DriveMode.CLOCK,
        center=FixedBody("sun", position=sun_xyz),
        bodies=(earth,),
        focus_body="earth",
        km_per_unit=_as_float("km_per_unit", _get(sc, "km_per_unit", C.SUN_POSITION_KM_PER_UNIT)),
        # Earth's orbital plane sits at y=0 under an off-centre Sun.
        orbit_center=Vec3(sun_xyz.x, 0.0, sun_xyz.z),
        track_season=True,
        geo_point=geo,
        utc_offset_hours=offset,
        equinox_day=equinox,
        description=f"Real-time Earth pose and solar angle at {geo.name or 'a fixed point'}",
    )


def _gravity(cfg: Optional[Mapping[str, Any]]) -> SceneConfig:
    fr = _as_float("frame_rate_hz", _get(cfg, "frame_rate_hz", C.NOMINAL_FRAME_RATE_HZ))
    sc = _scene_cfg(cfg, "gravity")
    moon = OrbitalBody(
        name="moon",
        orbit_radius=C.GRAVITY_MOON_ORBIT_RADIUS,
        angular_speed=C.GRAVITY_MOON_SPEED_RAD_S,
        spin_speed=per_frame_to_per_second(C.GRAVITY_MOON_SPIN_PER_FRAME, fr),
        parent="earth",
    )
    return SceneConfig(
        name="gravity",
        mode=DriveMode.SPEED,
        center=FixedBody("earth", spin_speed=per_frame_to_per_second(C.GRAVITY_EARTH_SPIN_PER_FRAME, fr)),
        bodies=(moon,),
        focus_body="moon",
        km_per_unit=_as_float("km_per_unit", _get(sc, "km_per_unit", C.GRAVITY_KM_PER_UNIT)),
        masses_kg=(C.EARTH_MASS_KG, C.MOON_MASS_KG),
        description="Two-body Earth-Moon orbit, F = G·m1·m2 / r²",
    )


_BUILDERS = {
    "solar_system": _solar_system,
    "seasons": _seasons,
    "sun_position": _sun_position,
    "gravity": _gravity,
}

SCENE_NAMES: Tuple[str, ...] = tuple(_BUILDERS)


def build_scene(name: str, cfg: Optional[Mapping[str, Any]] = None) -> SceneConfig:
    """Build one scene; configuration problems surface here, before any frame."""
    try:
        builder = _BUILDERS[name]
    except KeyError:
        raise InvalidConfiguration(f"unknown scene '{name}'", code="unknown_scene")
    scene = builder(cfg)
    log.debug("built scene %s mode=%s bodies=%d", scene.name, scene.mode.value, len(scene.bodies))
    return scene


def build_all_scenes(cfg: Optional[Mapping[str, Any]] = None) -> Dict[str, SceneConfig]:
    return {name: build_scene(name, cfg) for name in SCENE_NAMES}


def scene_summary(scene: SceneConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "name": scene.name,
        "mode": scene.mode.value,
        "description": scene.description,
        "center": scene.center.name,
        "bodies": [
            {
                "name": b.name,
                "parent": b.parent,
                "orbit_radius": b.orbit_radius,
                "angular_speed": b.angular_speed,
                "spin_speed": b.spin_speed,
                "axial_tilt_deg": math.degrees(b.axial_tilt),
            }
            for b in scene.bodies
        ],
        "focus_body": scene.focus_body,
        "km_per_unit": scene.km_per_unit,
    }
    if scene.mode is DriveMode.SPEED and scene.focus_body is not None:
        focus = scene.body(scene.focus_body)
        periods = calendar_periods(focus.spin_speed, focus.angular_speed)
        out["periods"] = {
            **periods.to_dict(),
            "year_days_real_time": seconds_to_days(periods.year_seconds),
        }
    if scene.geo_point is not None:
        out["geo_point"] = {
            "name": scene.geo_point.name,
            "latitude_deg": scene.geo_point.latitude_deg,
            "longitude_deg": scene.geo_point.longitude_deg,
        }
        out["utc_offset_hours"] = scene.utc_offset_hours
        out["equinox_day_of_year"] = scene.equinox_day
    return out
