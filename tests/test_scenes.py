# tests/test_scenes.py
from __future__ import annotations

import math

import pytest

from orrery.core.constants import AXIAL_TILT_RAD, SOLAR_SYSTEM_PLANETS
from orrery.core.errors import InvalidConfiguration
from orrery.core.geometry import Vec3
from orrery.core.kinematics import FixedBody, OrbitalBody
from orrery.core.scenes import (
    SCENE_NAMES,
    DriveMode,
    SceneConfig,
    build_all_scenes,
    build_scene,
    scene_summary,
)


def test_builtin_scene_names() -> None:
    assert SCENE_NAMES == ("solar_system", "seasons", "sun_position", "gravity")
    scenes = build_all_scenes()
    assert set(scenes) == set(SCENE_NAMES)


def test_modes() -> None:
    assert build_scene("sun_position").mode is DriveMode.CLOCK
    for name in ("solar_system", "seasons", "gravity"):
        assert build_scene(name).mode is DriveMode.SPEED


def test_unknown_scene() -> None:
    with pytest.raises(InvalidConfiguration) as ei:
        build_scene("pluto")
    assert ei.value.code == "unknown_scene"


def test_solar_system_layout() -> None:
    s = build_scene("solar_system")
    assert [b.name for b in s.bodies] == list(SOLAR_SYSTEM_PLANETS)
    earth = s.body("earth")
    assert earth.orbit_radius == 50.0
    # 0.02 · 0.01 rad/frame at 60 Hz
    assert earth.angular_speed == pytest.approx(0.012)
    assert earth.spin_speed == pytest.approx(0.6)


def test_solar_system_start_angles_are_seeded() -> None:
    a = build_scene("solar_system", {"planet_seed": 7})
    b = build_scene("solar_system", {"planet_seed": 7})
    c = build_scene("solar_system", {"planet_seed": 8})
    assert [x.angle for x in a.bodies] == [x.angle for x in b.bodies]
    assert [x.angle for x in a.bodies] != [x.angle for x in c.bodies]
    assert all(0.0 <= x.angle < 2 * math.pi for x in a.bodies)


def test_seasons_scene() -> None:
    s = build_scene("seasons")
    earth = s.body("earth")
    assert earth.orbit_radius == 7.5
    assert earth.axial_tilt == pytest.approx(AXIAL_TILT_RAD)
    assert earth.angle == 0.0
    assert s.track_season


def test_sun_position_scene_defaults() -> None:
    s = build_scene("sun_position")
    assert s.center.position == Vec3(-6.0, 2.0, 0.0)
    assert s.orbit_center == Vec3(-6.0, 0.0, 0.0)
    assert s.geo_point is not None
    assert s.geo_point.latitude_deg == pytest.approx(21.4225)
    assert s.utc_offset_hours == 3.0
    assert s.equinox_day == 79
    assert s.km_per_unit == pytest.approx(17.65e6)


def test_sun_position_scene_from_config() -> None:
    cfg = {
        "utc_offset_hours": -5,
        "equinox_day_of_year": 78,
        "geo_point": {"name": "Quito", "latitude_deg": -0.18, "longitude_deg": -78.47},
        "scenes": {"sun_position": {"km_per_unit": 1.0e6}},
    }
    s = build_scene("sun_position", cfg)
    assert s.utc_offset_hours == -5.0
    assert s.equinox_day == 78
    assert s.geo_point.name == "Quito"
    assert s.km_per_unit == 1.0e6


@pytest.mark.parametrize(
    "cfg",
    [
        {"geo_point": {"latitude_deg": 95.0, "longitude_deg": 0.0}},
        {"utc_offset_hours": 20},
        {"equinox_day_of_year": 400},
        {"equinox_day_of_year": "spring"},
        {"scenes": {"sun_position": {"km_per_unit": -1}}},
    ],
)
def test_sun_position_bad_config(cfg) -> None:
    with pytest.raises(InvalidConfiguration):
        build_scene("sun_position", cfg)


def test_gravity_scene() -> None:
    s = build_scene("gravity")
    assert s.center.name == "earth"
    assert s.center.spin_speed == pytest.approx(0.06)
    moon = s.body("moon")
    assert moon.parent == "earth"
    assert moon.orbit_radius == 4.8
    assert moon.angular_speed == 0.5
    assert s.masses_kg is not None


def test_frame_rate_scales_per_frame_constants() -> None:
    s = build_scene("seasons", {"frame_rate_hz": 30})
    assert s.body("earth").spin_speed == pytest.approx(0.3)
    with pytest.raises(InvalidConfiguration):
        build_scene("seasons", {"frame_rate_hz": 0})


# ─────────────────────────────────────────────────────────────────────────────
# SceneConfig validation
# ─────────────────────────────────────────────────────────────────────────────

def _earth(**kw) -> OrbitalBody:
    return OrbitalBody("earth", orbit_radius=1.0, angular_speed=1.0, **kw)


def test_duplicate_names_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        SceneConfig("x", DriveMode.SPEED, FixedBody("sun"), (_earth(), _earth()))


def test_parent_must_come_first() -> None:
    moon = OrbitalBody("moon", orbit_radius=1.0, angular_speed=1.0, parent="earth")
    with pytest.raises(InvalidConfiguration):
        SceneConfig("x", DriveMode.SPEED, FixedBody("sun"), (moon, _earth()))
    SceneConfig("x", DriveMode.SPEED, FixedBody("sun"), (_earth(), moon))


def test_clock_mode_needs_focus() -> None:
    with pytest.raises(InvalidConfiguration):
        SceneConfig("x", DriveMode.CLOCK, FixedBody("sun"), (_earth(),))


def test_unknown_focus_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        SceneConfig("x", DriveMode.SPEED, FixedBody("sun"), (_earth(),), focus_body="mars")


# ─────────────────────────────────────────────────────────────────────────────
# Summaries
# ─────────────────────────────────────────────────────────────────────────────

def test_summary_speed_scene_has_periods() -> None:
    out = scene_summary(build_scene("seasons"))
    assert out["mode"] == "speed"
    assert out["periods"]["days_per_year"] == pytest.approx(20.0)
    assert out["bodies"][0]["axial_tilt_deg"] == pytest.approx(23.5)
    assert "geo_point" not in out


def test_summary_clock_scene_has_geo_point() -> None:
    out = scene_summary(build_scene("sun_position"))
    assert out["mode"] == "clock"
    assert "periods" not in out
    assert out["geo_point"]["name"] == "Makkah"
    assert out["utc_offset_hours"] == 3.0
