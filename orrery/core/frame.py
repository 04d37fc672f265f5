# orrery/core/frame.py
"""
Frame state aggregation.

Two separate steps, never merged:

  advance_state(state, elapsed) -> SceneState     explicit, once per real tick
  compose_frame(scene, state, instant) -> FrameState   pure read

compose_frame may be called any number of times (speculatively, for a frame
that is later dropped) without moving a single angle.

CLOCK scenes ignore the integrated angles of their focus body and pose it
from the instant instead (day-angle from local time, year-angle from the
UTC day-of-year). SPEED scenes read the integrated state as-is.

Simulation wraps both steps around a time source for hosts that want
`tick()`; its state and clock each have a single writer (a lock).
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from threading import Lock
from typing import Any, Dict, Optional, Tuple
import logging
import math

from orrery.core.clock import FrameTimer, Instant, SimulatedClock, TimeSource
from orrery.core.errors import DegenerateGeometry
from orrery.core.constants import wrap_rad
from orrery.core.geometry import Vec3, distance
from orrery.core.kinematics import FixedBody, OrbitalBody, advance, world_position
from orrery.core.scenes import DriveMode, SceneConfig
from orrery.core.seasons import Season, season
from orrery.core.solar import SolarIncidence, solar_incidence
from orrery.core.timescales import CalendarAngles, build_calendar_angles
from orrery.core.units import distance_km, gravitational_force_n, orbit_progress_percent

__all__ = [
    "SceneState",
    "BodyState",
    "FrameState",
    "initial_state",
    "advance_state",
    "compose_frame",
    "Simulation",
]

log = logging.getLogger(__name__)


# ───────────────────────── state & snapshot types ─────────────────────────
@dataclass(frozen=True)
class SceneState:
    center: FixedBody
    bodies: Tuple[OrbitalBody, ...]
    elapsed: float = 0.0


@dataclass(frozen=True)
class BodyState:
    name: str
    parent: Optional[str]
    position: Vec3
    rotation_angle: float               # rad, [0, 2π)
    orbit_angle: Optional[float] = None  # rad, [0, 2π); None for the centre

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "parent": self.parent,
            "position": self.position.to_list(),
            "rotation_angle": self.rotation_angle,
            "orbit_angle": self.orbit_angle,
        }


@dataclass(frozen=True)
class FrameState:
    scene: str
    mode: DriveMode
    instant: Instant
    elapsed: float
    bodies: Tuple[BodyState, ...]
    year_angle: Optional[float] = None
    season: Optional[Season] = None
    orbit_progress_percent: Optional[float] = None
    distance_km: Optional[float] = None
    solar: Optional[SolarIncidence] = None
    gravitational_force_n: Optional[float] = None
    calendar: Optional[CalendarAngles] = None

    def body(self, name: str) -> BodyState:
        for b in self.bodies:
            if b.name == name:
                return b
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scene": self.scene,
            "mode": self.mode.value,
            "instant": self.instant.seconds,
            "elapsed": self.elapsed,
            "bodies": [b.to_dict() for b in self.bodies],
            "year_angle": self.year_angle,
            "season": self.season.value if self.season is not None else None,
            "orbit_progress_percent": self.orbit_progress_percent,
            "distance_km": self.distance_km,
            "solar": self.solar.to_dict() if self.solar is not None else None,
            "gravitational_force_n": self.gravitational_force_n,
            "calendar": self.calendar.to_dict() if self.calendar is not None else None,
        }


# ───────────────────────── state transitions ─────────────────────────
def initial_state(scene: SceneConfig) -> SceneState:
    return SceneState(center=scene.center, bodies=scene.bodies, elapsed=0.0)


def advance_state(state: SceneState, elapsed: float) -> SceneState:
    """Move every body by `elapsed` simulated seconds (negative rewinds)."""
    dt = float(elapsed)
    if not math.isfinite(dt):
        raise ValueError(f"elapsed must be finite, got {elapsed!r}")
    return SceneState(
        center=advance(state.center, dt),
        bodies=tuple(advance(b, dt) for b in state.bodies),
        elapsed=state.elapsed + dt,
    )


def _clock_pose(scene: SceneConfig, state: SceneState, cal: CalendarAngles) -> Tuple[OrbitalBody, ...]:
    return tuple(
        replace(b, angle=cal.year_angle, spin_angle=cal.day_angle) if b.name == scene.focus_body else b
        for b in state.bodies
    )


# ───────────────────────── aggregation ─────────────────────────
def compose_frame(scene: SceneConfig, state: SceneState, instant: Instant) -> FrameState:
    """
    Build the snapshot for `instant`. Pure: `state` and `scene` are not touched.

    Raises DegenerateGeometry when a direction cannot be normalized; the
    caller decides whether to drop the frame or stop.
    """
    cal: Optional[CalendarAngles] = None
    bodies = state.bodies
    if scene.mode is DriveMode.CLOCK:
        cal = build_calendar_angles(instant, scene.utc_offset_hours, scene.equinox_day)
        bodies = _clock_pose(scene, state, cal)

    center = state.center
    positions: Dict[str, Vec3] = {center.name: center.position}
    snapshots = [
        BodyState(
            name=center.name,
            parent=None,
            position=center.position,
            rotation_angle=wrap_rad(center.spin_angle),
        )
    ]
    for b in bodies:
        if b.parent == center.name and scene.orbit_center is not None:
            anchor = scene.orbit_center
        else:
            anchor = positions[b.parent]
        pos = world_position(b, anchor)
        positions[b.name] = pos
        snapshots.append(
            BodyState(
                name=b.name,
                parent=b.parent,
                position=pos,
                rotation_angle=b.normalized_spin,
                orbit_angle=b.normalized_angle,
            )
        )

    year_angle = None
    season_ = None
    progress = None
    dist_km = None
    solar: Optional[SolarIncidence] = None
    force = None

    if scene.focus_body is not None:
        focus = next(b for b in bodies if b.name == scene.focus_body)
        focus_pos = positions[focus.name]
        parent_pos = positions[focus.parent]
        year_angle = focus.normalized_angle

        if scene.track_season:
            season_ = season(year_angle)
            progress = orbit_progress_percent(year_angle)

        sep = distance(focus_pos, parent_pos)
        if scene.km_per_unit is not None:
            dist_km = distance_km(sep, scene.km_per_unit)
            if scene.masses_kg is not None:
                force = gravitational_force_n(scene.masses_kg[0], scene.masses_kg[1], dist_km)

        if scene.geo_point is not None:
            solar = solar_incidence(
                earth_position=focus_pos,
                sun_position=parent_pos,
                spin=focus.normalized_spin,
                tilt=focus.axial_tilt,
                geo=scene.geo_point,
            )

    return FrameState(
        scene=scene.name,
        mode=scene.mode,
        instant=instant,
        elapsed=state.elapsed,
        bodies=tuple(snapshots),
        year_angle=year_angle,
        season=season_,
        orbit_progress_percent=progress,
        distance_km=dist_km,
        solar=solar,
        gravitational_force_n=force,
        calendar=cal,
    )


# ───────────────────────── driver ─────────────────────────
class Simulation:
    """
    One scene, one time source, one state.

    tick()      read the clock delta, advance (SPEED only), compose
    step(dt)    advance by an explicit delta, then compose
    frame()     compose without advancing
    """

    def __init__(self, scene: SceneConfig, clock: Optional[TimeSource] = None):
        self.scene = scene
        self.clock: TimeSource = clock if clock is not None else SimulatedClock()
        self.timer = FrameTimer(self.clock)
        self.timer.tick()  # prime: the first real tick then sees the delta since construction
        self._state = initial_state(scene)
        self._lock = Lock()
        self.frames = 0

    @property
    def state(self) -> SceneState:
        with self._lock:
            return self._state

    def _compose(self, state: SceneState) -> FrameState:
        try:
            frame = compose_frame(self.scene, state, self.clock.now())
        except DegenerateGeometry as e:
            log.warning("scene %s: degenerate frame at elapsed=%.6f: %s",
                        self.scene.name, state.elapsed, e)
            raise
        with self._lock:
            self.frames += 1
        return frame

    def tick(self) -> FrameState:
        with self._lock:
            now, dt = self.timer.peek()
            state = self._state
            if self.scene.mode is DriveMode.SPEED and dt != 0.0:
                state = advance_state(state, dt)
            # nothing is committed unless the advance succeeded
            self.timer.commit(now, dt)
            self._state = state
        return self._compose(state)

    def step(self, dt: float) -> FrameState:
        with self._lock:
            if self.scene.mode is DriveMode.SPEED:
                self._state = advance_state(self._state, dt)
            state = self._state
        log.debug("scene %s stepped dt=%s elapsed=%s", self.scene.name, dt, state.elapsed)
        return self._compose(state)

    def frame(self) -> FrameState:
        return self._compose(self.state)

    def reset(self) -> None:
        with self._lock:
            self._state = initial_state(self.scene)
            self.timer.reset()
            self.timer.tick()
            self.frames = 0
