# tests/test_solar.py
from __future__ import annotations

import math

import pytest
from hypothesis import assume, given, strategies as st

from orrery.core.constants import AXIAL_TILT_RAD, EARTH_RADIUS_UNITS, MAKKAH_LAT_DEG, MAKKAH_LON_DEG
from orrery.core.errors import DegenerateGeometry, InvalidConfiguration
from orrery.core.geometry import Vec3, length, normalize, scale
from orrery.core.solar import (
    DayPhase,
    GeoPoint,
    classify_daylight,
    incidence_angle_deg,
    solar_incidence,
    solar_intensity,
    surface_normal,
    surface_point,
    surface_to_world,
)

coord = st.floats(min_value=-100.0, max_value=100.0, allow_nan=False, allow_infinity=False)
vectors = st.builds(Vec3, coord, coord, coord).filter(lambda v: length(v) > 1e-3)

# Earth on the -x side of a Sun at the origin: sunlight arrives along +x.
EARTH = Vec3(-8.5, 0.0, 0.0)
SUN = Vec3(0.0, 0.0, 0.0)


# ─────────────────────────────────────────────────────────────────────────────
# GeoPoint
# ─────────────────────────────────────────────────────────────────────────────

def test_geopoint_degrees_round_trip() -> None:
    g = GeoPoint.from_degrees(MAKKAH_LAT_DEG, MAKKAH_LON_DEG, "Makkah")
    assert g.latitude_deg == pytest.approx(21.4225)
    assert g.longitude_deg == pytest.approx(39.826)
    assert g.name == "Makkah"


@pytest.mark.parametrize("lat, lon", [(90.5, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0)])
def test_geopoint_out_of_range(lat: float, lon: float) -> None:
    with pytest.raises(InvalidConfiguration):
        GeoPoint.from_degrees(lat, lon)


def test_geopoint_poles_and_antimeridian_accepted() -> None:
    GeoPoint.from_degrees(90.0, 180.0)
    GeoPoint.from_degrees(-90.0, -180.0)


def test_surface_point_on_sphere() -> None:
    g = GeoPoint.from_degrees(MAKKAH_LAT_DEG, MAKKAH_LON_DEG)
    assert length(surface_point(g)) == pytest.approx(EARTH_RADIUS_UNITS)
    assert surface_point(GeoPoint(0.0, 0.0)) == pytest.approx((2.0, 0.0, 0.0))
    assert surface_point(GeoPoint(math.pi / 2, 0.0)) == pytest.approx((0.0, 2.0, 0.0), abs=1e-12)


# ─────────────────────────────────────────────────────────────────────────────
# Angles & classification
# ─────────────────────────────────────────────────────────────────────────────

def test_threshold_exactly_ninety_is_day() -> None:
    assert classify_daylight(90.0) is DayPhase.DAY
    assert classify_daylight(math.nextafter(90.0, 180.0)) is DayPhase.NIGHT
    assert classify_daylight(0.0) is DayPhase.DAY
    assert classify_daylight(180.0) is DayPhase.NIGHT


def test_intensity_clamped() -> None:
    assert solar_intensity(0.0) == pytest.approx(1.0)
    assert solar_intensity(60.0) == pytest.approx(0.5)
    assert solar_intensity(135.0) == 0.0


def test_zero_vector_is_degenerate() -> None:
    with pytest.raises(DegenerateGeometry) as ei:
        incidence_angle_deg(Vec3(0.0, 0.0, 0.0), Vec3(1.0, 0.0, 0.0))
    assert ei.value.code == "degenerate_geometry"
    with pytest.raises(DegenerateGeometry):
        normalize(Vec3(0.0, 0.0, 0.0))


@given(n=vectors, s=vectors)
def test_incidence_bounded(n: Vec3, s: Vec3) -> None:
    a = incidence_angle_deg(n, s)
    assert 0.0 <= a <= 180.0


@given(n=vectors, k=st.floats(min_value=0.01, max_value=100.0))
def test_incidence_parallel_and_opposite(n: Vec3, k: float) -> None:
    assert incidence_angle_deg(n, scale(n, k)) == pytest.approx(0.0, abs=1e-4)
    assert incidence_angle_deg(n, scale(n, -k)) == pytest.approx(180.0, abs=1e-4)


@given(n=vectors, s=vectors)
def test_incidence_symmetric(n: Vec3, s: Vec3) -> None:
    assume(length(n) > 1e-2 and length(s) > 1e-2)
    assert incidence_angle_deg(n, s) == pytest.approx(incidence_angle_deg(s, n), abs=1e-9)


# ─────────────────────────────────────────────────────────────────────────────
# Surface -> world
# ─────────────────────────────────────────────────────────────────────────────

def test_spin_turns_about_y() -> None:
    p = surface_to_world(Vec3(2.0, 0.0, 0.0), translation=Vec3(0.0, 0.0, 0.0), spin=math.pi / 2)
    assert p == pytest.approx((0.0, 0.0, -2.0), abs=1e-12)


def test_tilt_leans_the_pole() -> None:
    pole = surface_to_world(Vec3(0.0, 2.0, 0.0), translation=Vec3(1.0, 1.0, 1.0), spin=1.0, tilt=AXIAL_TILT_RAD)
    # pole is fixed by spin, then leaned by the tilt about x
    assert pole == pytest.approx(
        (1.0, 1.0 + 2.0 * math.cos(AXIAL_TILT_RAD), 1.0 + 2.0 * math.sin(AXIAL_TILT_RAD))
    )


def test_normal_ignores_translation() -> None:
    local = surface_point(GeoPoint.from_degrees(MAKKAH_LAT_DEG, MAKKAH_LON_DEG))
    n = surface_normal(local, spin=0.7, tilt=AXIAL_TILT_RAD)
    w = surface_to_world(local, translation=Vec3(3.0, -1.0, 2.0), spin=0.7, tilt=AXIAL_TILT_RAD)
    assert tuple(n) == pytest.approx((w.x - 3.0, w.y + 1.0, w.z - 2.0))


def test_incidence_survives_huge_orbit() -> None:
    inc = solar_incidence(
        earth_position=Vec3(-1e300, 0.0, 0.0), sun_position=SUN, spin=0.0, tilt=0.0, geo=GeoPoint(0.0, 0.0)
    )
    assert inc.angle_deg == pytest.approx(0.0, abs=1e-9)
    assert inc.phase is DayPhase.DAY


# ─────────────────────────────────────────────────────────────────────────────
# End-to-end incidence
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("tilt", [0.0, AXIAL_TILT_RAD])
def test_sub_solar_point_is_noon(tilt: float) -> None:
    inc = solar_incidence(
        earth_position=EARTH, sun_position=SUN, spin=0.0, tilt=tilt, geo=GeoPoint(0.0, 0.0)
    )
    assert inc.angle_deg == pytest.approx(0.0, abs=1e-6)
    assert inc.phase is DayPhase.DAY
    assert inc.intensity == pytest.approx(1.0)


@pytest.mark.parametrize("tilt", [0.0, AXIAL_TILT_RAD])
def test_antipode_is_midnight(tilt: float) -> None:
    inc = solar_incidence(
        earth_position=EARTH, sun_position=SUN, spin=0.0, tilt=tilt, geo=GeoPoint(0.0, math.pi)
    )
    assert inc.angle_deg == pytest.approx(180.0, abs=1e-6)
    assert inc.phase is DayPhase.NIGHT
    assert inc.intensity == 0.0


def test_quarter_turn_puts_point_on_terminator() -> None:
    inc = solar_incidence(
        earth_position=EARTH, sun_position=SUN, spin=math.pi / 2, tilt=0.0, geo=GeoPoint(0.0, 0.0)
    )
    assert inc.angle_deg == pytest.approx(90.0, abs=1e-6)


def test_earth_on_sun_is_degenerate() -> None:
    with pytest.raises(DegenerateGeometry):
        solar_incidence(earth_position=SUN, sun_position=SUN, spin=0.0, tilt=0.0, geo=GeoPoint(0.0, 0.0))


def test_incidence_to_dict() -> None:
    inc = solar_incidence(
        earth_position=EARTH, sun_position=SUN, spin=0.0, tilt=0.0, geo=GeoPoint(0.0, math.pi)
    )
    d = inc.to_dict()
    assert d["phase"] == "NIGHT"
    assert set(d) == {"angle_deg", "phase", "intensity"}
