# orrery/utils/config.py
import os
import json
import logging
from typing import Optional

import yaml

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/defaults.yaml"


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.planet_seed and cfg['planet_seed'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value

def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj

def _load_json_if(path):
    if not path:
        return {}
    if not os.path.exists(path):
        log.warning("optional config file not found: %s", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f) or {}

def _env_number(name, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}")

def _apply_env(data):
    offset = _env_number("ORRERY_UTC_OFFSET_HOURS", float)
    if offset is not None:
        data["utc_offset_hours"] = offset
    seed = _env_number("ORRERY_PLANET_SEED", int)
    if seed is not None:
        data["planet_seed"] = seed

    geo_path = os.getenv("ORRERY_GEO_POINT")
    if geo_path:
        geo = _load_json_if(geo_path)
        if geo:
            data["geo_point"] = geo
    return data

def load_config(path: str):
    """
    Load YAML config from `path` and apply environment overrides:
      - ORRERY_UTC_OFFSET_HOURS  (overrides config['utc_offset_hours'])
      - ORRERY_PLANET_SEED       (overrides config['planet_seed'])
      - ORRERY_GEO_POINT         (path to a JSON object replacing config['geo_point'])
    Returns an AttrDict for convenient access.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config root must be a mapping: {path}")
    return _to_attr(_apply_env(data))

def load_config_or_defaults(path: Optional[str] = None):
    """Like load_config, but a missing file yields env-only settings."""
    path = path or os.environ.get("ORRERY_CONFIG", DEFAULT_CONFIG_PATH)
    try:
        return load_config(path)
    except FileNotFoundError:
        log.warning("config file %s not found; using built-in defaults", path)
        return _to_attr(_apply_env({}))
