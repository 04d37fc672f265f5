# orrery/core/validators.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple, Union

from orrery.core.clock import Instant
from orrery.core.constants import AXIAL_TILT_DEG, SUN_POSITION_ORBIT_RADIUS
from orrery.core.timescales import instant_from_civil

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured request error; routes serialize `.errors()` into the 400 body."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]]):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
            super().__init__(details)
        elif isinstance(details, dict):
            self._details = [details]
            super().__init__(details.get("msg", "validation_error"))
        elif isinstance(details, list):
            self._details = details
            super().__init__(self._details[0]["msg"] if self._details else "validation_error")
        else:
            self._details = [{"loc": [], "msg": "validation_error", "type": "value_error"}]
            super().__init__("validation_error")

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


# ───────────────────────── helpers ─────────────────────────

def _err(loc: List[str] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}

def _as_float(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        x = float(v)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(x):
        return None
    return x


# ───────────────────────── atomic parsers ─────────────────────────

def parse_number(v: Any, key: str, *, required: bool = True, default: Optional[float] = None) -> Optional[float]:
    if v is None or (isinstance(v, str) and v.strip() == ""):
        if required:
            raise ValidationError(_err(key, f"{key} is required", "value_error.missing"))
        return default
    x = _as_float(v)
    if x is None:
        raise ValidationError(_err(key, f"{key} must be a finite number", "type_error.float"))
    return x

def parse_latlon(lat: Any, lon: Any, lat_key="latitude", lon_key="longitude") -> Tuple[float, float]:
    lat_f = _as_float(lat); lon_f = _as_float(lon)
    if lat_f is None or lon_f is None:
        raise ValidationError(_err([lat_key, lon_key], "latitude/longitude must be finite numbers", "type_error.float"))
    if not (-90.0 <= lat_f <= 90.0):
        raise ValidationError(_err(lat_key, "latitude must be between -90 and 90"))
    if not (-180.0 <= lon_f <= 180.0):
        raise ValidationError(_err(lon_key, "longitude must be between -180 and 180"))
    return float(lat_f), float(lon_f)


# ───────────────────────── payload parsers ─────────────────────────

def parse_advance_payload(data: Dict[str, Any]) -> float:
    """{"dt": seconds} -> dt. Negative rewinds."""
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return float(parse_number(data.get("dt"), "dt"))

def parse_incidence_payload(data: Dict[str, Any]) -> Dict[str, float]:
    """
    Body for a one-off solar incidence:
      latitude, longitude            degrees (required)
      year_angle, day_angle          radians (default 0)
      tilt_deg                       degrees (default 23.5)
      orbit_radius                   scene units (default 8.5)
    """
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    lat, lon = parse_latlon(data.get("latitude"), data.get("longitude"))
    out = {
        "latitude": lat,
        "longitude": lon,
        "year_angle": float(parse_number(data.get("year_angle"), "year_angle", required=False, default=0.0)),
        "day_angle": float(parse_number(data.get("day_angle"), "day_angle", required=False, default=0.0)),
        "tilt_deg": float(parse_number(data.get("tilt_deg"), "tilt_deg", required=False, default=AXIAL_TILT_DEG)),
        "orbit_radius": float(parse_number(data.get("orbit_radius"), "orbit_radius", required=False, default=SUN_POSITION_ORBIT_RADIUS)),
    }
    if not (-90.0 <= out["tilt_deg"] <= 90.0):
        raise ValidationError(_err("tilt_deg", "tilt_deg must be between -90 and 90"))
    if out["orbit_radius"] <= 0.0:
        raise ValidationError(_err("orbit_radius", "orbit_radius must be > 0"))
    return out

def parse_civil_instant(date_s: Any, time_s: Any, utc_offset_hours: float) -> Instant:
    """Local civil date + time at the fixed offset; time defaults to midnight."""
    errs: List[Dict[str, Any]] = []
    if not isinstance(date_s, str) or not date_s.strip():
        errs.append(_err("date", "required string YYYY-MM-DD", "value_error.missing"))
    if time_s is not None and not isinstance(time_s, str):
        errs.append(_err("time", "time must be a string HH:MM[:SS[.frac]]"))
    if errs:
        raise ValidationError(errs)
    try:
        return instant_from_civil(date_s, time_s or "00:00", utc_offset_hours)
    except ValueError as e:
        raise ValidationError(_err(["date", "time"], str(e), "value_error.datetime"))
