# orrery/api/routes.py
"""
Orrery - JSON API routes
- Scenes: list, frame at an instant, live simulation advance/reset
- Season lookup for a year-angle
- One-off solar incidence for a lat/lon and Earth pose
- Ops: /api/health, /api/config

Notes:
- SPEED scenes keep one live Simulation each, driven by a SimulatedClock
  that only moves on POST .../advance.
- CLOCK scenes read the wall clock at the configured fixed UTC offset;
  they cannot be advanced (409).
- GET .../frame never touches the live simulation when `t` or `date` is given.
"""

from __future__ import annotations

import logging
import math
from threading import Lock
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request

from orrery.version import VERSION
from orrery.core.clock import Instant, SimulatedClock, SystemClock
from orrery.core.constants import CONSTANTS_VERSION
from orrery.core.frame import FrameState, Simulation, advance_state, compose_frame, initial_state
from orrery.core.geometry import ORIGIN
from orrery.core.kinematics import orbit_position
from orrery.core.errors import DegenerateGeometry, InvalidConfiguration
from orrery.core.scenes import SCENE_NAMES, DriveMode, SceneConfig, scene_summary
from orrery.core.seasons import season
from orrery.core.solar import GeoPoint, solar_incidence
from orrery.core.units import orbit_progress_percent
from orrery.core.validators import (
    ValidationError,
    parse_advance_payload,
    parse_civil_instant,
    parse_incidence_payload,
    parse_number,
)
from orrery.utils.metrics import GAUGE_SIM_ELAPSED, MET_FRAMES, MET_WARNINGS

log = logging.getLogger(__name__)
api = Blueprint("api", __name__)

SCENES_EXT_KEY = "orrery.scenes"
_EXT_KEY = "orrery.simulations"
_registry_lock = Lock()


# ───────────────────────── helpers ─────────────────────────
def _json_error(code: str, details: Any = None, http: int = 400):
    out: Dict[str, Any] = {"ok": False, "error": code}
    if details is not None:
        out["details"] = details
    return jsonify(out), http


def _cfg():
    return getattr(current_app, "cfg", None) or {}


def _scenes() -> Dict[str, SceneConfig]:
    """Scenes built once by the app factory."""
    return current_app.extensions[SCENES_EXT_KEY]


def _scene(name: str) -> SceneConfig:
    """Unknown names raise InvalidConfiguration(code="unknown_scene"), served as 404."""
    key = str(name).strip().lower().replace("-", "_")
    try:
        return _scenes()[key]
    except KeyError:
        raise InvalidConfiguration(f"unknown scene '{name}'", code="unknown_scene")


def _simulation(scene: SceneConfig) -> Simulation:
    """Live simulation per scene, created on first use and kept on the app."""
    with _registry_lock:
        sims: Dict[str, Simulation] = current_app.extensions.setdefault(_EXT_KEY, {})
        sim = sims.get(scene.name)
        if sim is None:
            if scene.mode is DriveMode.CLOCK:
                clock = SystemClock(scene.utc_offset_hours)
            else:
                clock = SimulatedClock()
            sim = Simulation(scene, clock)
            sims[scene.name] = sim
            log.info("started simulation for scene %s (%s)", scene.name, scene.mode.value)
        return sim


def _frame_payload(frame: FrameState) -> Dict[str, Any]:
    MET_FRAMES.labels(scene=frame.scene).inc()
    if frame.calendar is not None:
        for w in frame.calendar.warnings:
            MET_WARNINGS.labels(kind=w).inc()
    return {"ok": True, "frame": frame.to_dict()}


def _frame_at(scene: SceneConfig, args) -> Tuple[FrameState, str]:
    """Frame for the query args, plus where its instant came from."""
    if scene.mode is DriveMode.SPEED:
        t = parse_number(args.get("t"), "t", required=False)
        if t is None:
            return _simulation(scene).frame(), "live"
        state = advance_state(initial_state(scene), t)
        return compose_frame(scene, state, Instant(t)), "elapsed"

    if args.get("date") is not None or args.get("time") is not None:
        instant = parse_civil_instant(args.get("date"), args.get("time"), scene.utc_offset_hours)
        return compose_frame(scene, initial_state(scene), instant), "civil"
    return _simulation(scene).frame(), "clock"


# ───────────────────────── health / ops ─────────────────────────
@api.get("/api/health")
def health():
    return jsonify({"ok": True, "status": "up", "version": VERSION}), 200


@api.get("/api/config")
def config_info():
    cfg = _cfg()
    return jsonify(
        {
            "ok": True,
            "config": dict(cfg),
            "scenes": list(SCENE_NAMES),
            "constants_version": CONSTANTS_VERSION,
            "version": VERSION,
        }
    ), 200


# ───────────────────────── scenes ─────────────────────────
@api.get("/api/scenes")
def list_scenes():
    scenes = _scenes()
    return jsonify({"ok": True, "scenes": [scene_summary(scenes[n]) for n in SCENE_NAMES]}), 200


@api.get("/api/scenes/<name>")
def get_scene(name: str):
    scene = _scene(name)
    return jsonify({"ok": True, "scene": scene_summary(scene)}), 200


@api.get("/api/scenes/<name>/frame")
def scene_frame(name: str):
    scene = _scene(name)
    try:
        frame, source = _frame_at(scene, request.args)
    except ValidationError as e:
        return _json_error("validation_error", e.errors(), 400)
    out = _frame_payload(frame)
    out["source"] = source
    return jsonify(out), 200


@api.post("/api/scenes/<name>/advance")
def advance_scene(name: str):
    scene = _scene(name)
    if scene.mode is DriveMode.CLOCK:
        return _json_error("clock_driven_scene", {"scene": scene.name, "mode": scene.mode.value}, 409)
    try:
        dt = parse_advance_payload(request.get_json(force=True, silent=True))
    except ValidationError as e:
        return _json_error("validation_error", e.errors(), 400)

    sim = _simulation(scene)
    clock: SimulatedClock = sim.clock  # type: ignore[assignment]
    before = clock.now()
    try:
        clock.advance(dt)
    except ValueError as e:
        return _json_error("validation_error", [{"loc": ["dt"], "msg": str(e), "type": "value_error.range"}], 400)
    try:
        frame = sim.tick()
    except DegenerateGeometry:
        raise
    except ValueError as e:
        # tick committed nothing; put the clock back so later ticks stay usable
        clock.set(before.seconds)
        log.warning("advance of %s by %r rejected: %s", scene.name, dt, e)
        return _json_error("validation_error", [{"loc": ["dt"], "msg": str(e), "type": "value_error.range"}], 400)
    GAUGE_SIM_ELAPSED.labels(scene=scene.name).set(frame.elapsed)
    log.debug("advanced %s by %.6f s -> elapsed %.6f", scene.name, dt, frame.elapsed)
    return jsonify(_frame_payload(frame)), 200


@api.post("/api/scenes/<name>/reset")
def reset_scene(name: str):
    scene = _scene(name)
    sim = _simulation(scene)
    if isinstance(sim.clock, SimulatedClock):
        sim.clock.set(0.0)
    sim.reset()
    GAUGE_SIM_ELAPSED.labels(scene=scene.name).set(0.0)
    log.info("reset simulation for scene %s", scene.name)
    return jsonify(_frame_payload(sim.frame())), 200


# ───────────────────────── season / incidence ─────────────────────────
@api.get("/api/season")
def season_endpoint():
    try:
        angle = float(parse_number(request.args.get("angle"), "angle"))
    except ValidationError as e:
        return _json_error("validation_error", e.errors(), 400)
    return jsonify(
        {
            "ok": True,
            "year_angle": angle,
            "season": season(angle).value,
            "orbit_progress_percent": orbit_progress_percent(angle),
        }
    ), 200


@api.post("/api/solar-incidence")
def solar_incidence_endpoint():
    """
    Incidence at a lat/lon for an Earth posed by (year_angle, day_angle) on a
    circular orbit around a Sun at the origin.
    """
    try:
        p = parse_incidence_payload(request.get_json(force=True, silent=True))
    except ValidationError as e:
        return _json_error("validation_error", e.errors(), 400)

    geo = GeoPoint.from_degrees(p["latitude"], p["longitude"])
    earth = orbit_position(p["year_angle"], p["orbit_radius"])
    inc = solar_incidence(
        earth_position=earth,
        sun_position=ORIGIN,
        spin=p["day_angle"],
        tilt=math.radians(p["tilt_deg"]),
        geo=geo,
    )
    return jsonify(
        {
            "ok": True,
            "incidence": inc.to_dict(),
            "season": season(p["year_angle"]).value,
            "earth_position": earth.to_list(),
            "input": p,
        }
    ), 200
