# orrery/core/errors.py
from __future__ import annotations

__all__ = ["OrreryError", "InvalidConfiguration", "DegenerateGeometry"]


class OrreryError(ValueError):
    """Base error; carries a stable machine-readable code for the API layer."""
    code = "orrery_error"

    def __init__(self, message: str, code: str | None = None):
        if code is not None:
            self.code = code
        super().__init__(f"{self.code}: {message}")


class InvalidConfiguration(OrreryError):
    """Bad scene setup (radius, GeoPoint range, non-finite constants). Raised at build time."""
    code = "invalid_configuration"


class DegenerateGeometry(OrreryError):
    """A per-frame vector could not be normalized (zero length)."""
    code = "degenerate_geometry"
