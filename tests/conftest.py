# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the orrery suite.

- Registers Hypothesis profiles for local dev and CI.
- Freezes the process TZ to UTC; all civil times go through a fixed offset anyway.
- Provides a Flask test client over a fresh app (fresh live simulations) per test.
"""

import os
from pathlib import Path

import pytest
from hypothesis import settings, HealthCheck

ROOT = Path(__file__).resolve().parent.parent
DEFAULTS_YAML = ROOT / "config" / "defaults.yaml"


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,           # avoid flaky timeouts on slower runners
        max_examples=60,         # fast local runs
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=200,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="session", autouse=True)
def freeze_tz_env():
    """Process TZ is UTC so nothing can pick up the runner's local zone."""
    prev = os.environ.get("TZ")
    os.environ["TZ"] = "UTC"
    try:
        yield
    finally:
        if prev is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = prev


@pytest.fixture(autouse=True)
def clean_orrery_env(monkeypatch):
    for name in ("ORRERY_CONFIG", "ORRERY_UTC_OFFSET_HOURS", "ORRERY_PLANET_SEED", "ORRERY_GEO_POINT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cfg():
    from orrery.utils.config import load_config
    return load_config(str(DEFAULTS_YAML))


@pytest.fixture
def app(cfg):
    from orrery.main import create_app
    app = create_app(cfg)
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
