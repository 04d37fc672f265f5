# tests/test_seasons.py
from __future__ import annotations

import math

import pytest
from hypothesis import assume, given, strategies as st

from orrery.core.constants import HALF_PI, TWO_PI, wrap_rad
from orrery.core.seasons import SEASON_ORDER, Season, season
from orrery.core.units import orbit_progress_percent

ANGLES = st.floats(min_value=0.0, max_value=TWO_PI, exclude_max=True, allow_nan=False, allow_infinity=False)


def _clear_of_boundaries(a: float, margin: float = 1e-6) -> bool:
    q = wrap_rad(a) / HALF_PI
    return abs(q - round(q)) * HALF_PI > margin


# ─────────────────────────────────────────────────────────────────────────────
# Quadrant boundaries
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "angle, expected",
    [
        (0.0, Season.SPRING),
        (HALF_PI - 1e-9, Season.SPRING),
        (HALF_PI, Season.SUMMER),
        (math.pi - 1e-9, Season.SUMMER),
        (math.pi, Season.AUTUMN),
        (3 * HALF_PI - 1e-9, Season.AUTUMN),
        (3 * HALF_PI, Season.WINTER),
        (TWO_PI - 1e-9, Season.WINTER),
    ],
)
def test_quadrant_lower_bound_inclusive(angle: float, expected: Season) -> None:
    assert season(angle) is expected


def test_full_turn_is_spring_again() -> None:
    assert season(TWO_PI) is Season.SPRING
    assert season(-1e-9) is Season.WINTER


def test_equinox_and_half_orbit() -> None:
    assert season(0.0) is Season.SPRING
    assert orbit_progress_percent(0.0) == 0.0
    assert season(math.pi) is Season.AUTUMN
    assert orbit_progress_percent(math.pi) == pytest.approx(50.0)


def test_enum_values_serialize_as_names() -> None:
    assert [s.value for s in SEASON_ORDER] == ["SPRING", "SUMMER", "AUTUMN", "WINTER"]


# ─────────────────────────────────────────────────────────────────────────────
# Properties
# ─────────────────────────────────────────────────────────────────────────────

@given(a=ANGLES, k=st.integers(min_value=-50, max_value=50))
def test_periodic_in_full_turns(a: float, k: int) -> None:
    assume(_clear_of_boundaries(a))
    assert season(a + k * TWO_PI) is season(a)


@given(a=ANGLES)
def test_partition_matches_quadrant_index(a: float) -> None:
    assume(_clear_of_boundaries(a))
    idx = int(a // HALF_PI)
    assert season(a) is SEASON_ORDER[idx]


@given(
    a=st.floats(min_value=0.0, max_value=6.28, allow_nan=False),
    b=st.floats(min_value=0.0, max_value=6.28, allow_nan=False),
)
def test_progress_monotonic_within_one_orbit(a: float, b: float) -> None:
    lo, hi = sorted((a, b))
    assert orbit_progress_percent(lo) <= orbit_progress_percent(hi)


@given(a=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False))
def test_progress_in_half_open_range(a: float) -> None:
    p = orbit_progress_percent(a)
    assert 0.0 <= p < 100.0
