# orrery/utils/metrics.py
from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Gauge, Histogram

# Names are part of the dashboards; keep them stable.
MET_REQUESTS: Final = Counter("orrery_api_requests_total", "API requests", ["route"])
REQ_LATENCY: Final = Histogram("orrery_request_seconds", "API request latency", ["route"])
MET_FRAMES: Final = Counter("orrery_frames_composed_total", "Frame snapshots composed", ["scene"])
MET_DEGENERATE: Final = Counter("orrery_degenerate_frames_total", "Frames dropped on degenerate geometry", ["scene"])
MET_WARNINGS: Final = Counter("orrery_warning_total", "Non-fatal warnings", ["kind"])
GAUGE_APP_UP: Final = Gauge("orrery_app_up", "1 if app is running")
GAUGE_SIM_ELAPSED: Final = Gauge("orrery_simulation_elapsed_seconds", "Simulated seconds per live scene", ["scene"])


def seed(routes, scenes) -> None:
    """Create zero-valued series so dashboards see every label from the start."""
    for route in routes:
        MET_REQUESTS.labels(route=route).inc(0)
        REQ_LATENCY.labels(route=route).observe(0.0)
    for scene in scenes:
        MET_FRAMES.labels(scene=scene).inc(0)
        MET_DEGENERATE.labels(scene=scene).inc(0)
    MET_WARNINGS.labels(kind="leap_day_folded").inc(0)
    GAUGE_APP_UP.set(1.0)
