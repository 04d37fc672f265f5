# orrery/core/seasons.py
"""Year-angle -> season quadrant. Angle 0 is the vernal equinox."""
from __future__ import annotations

from enum import Enum
import math

from orrery.core.constants import HALF_PI, wrap_rad

__all__ = ["Season", "season", "SEASON_ORDER"]


class Season(str, Enum):
    SPRING = "SPRING"
    SUMMER = "SUMMER"
    AUTUMN = "AUTUMN"
    WINTER = "WINTER"


SEASON_ORDER = (Season.SPRING, Season.SUMMER, Season.AUTUMN, Season.WINTER)


def season(year_angle: float) -> Season:
    """
    Quadrants are inclusive-lower / exclusive-upper:
    [0, π/2) SPRING, [π/2, π) SUMMER, [π, 3π/2) AUTUMN, [3π/2, 2π) WINTER.
    """
    a = wrap_rad(year_angle)
    if a < HALF_PI:
        return Season.SPRING
    if a < math.pi:
        return Season.SUMMER
    if a < 3.0 * HALF_PI:
        return Season.AUTUMN
    return Season.WINTER
