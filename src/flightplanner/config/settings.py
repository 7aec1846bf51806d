# src/flightplanner/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/flightplanner/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `FLIGHTPLANNER_ROUTES_PATH`, `FLIGHTPLANNER_LOG_LEVEL`)
- an external YAML file via `FLIGHTPLANNER_CONFIG_PATH`

Design rule:
- Tuning knobs (snap threshold, coordinate precision) live in YAML, not in planning code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from flightplanner.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `flightplanner.config`."""
    text = resources.files("flightplanner.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "Flight Planner"
    log_level: str = "INFO"


class DataSettings(BaseModel):
    # Local paths are resolved against the project root; http(s) URLs are fetched.
    routes_path: str = "data/flight_routes.geojson"
    graph_path: str | None = None
    edge_geometry_path: str | None = None
    http_timeout_seconds: float = 15


class NetworkSettings(BaseModel):
    # Decimal places used for node identity (6 -> 1e-6 degrees).
    coordinate_precision: int = Field(6, ge=0, le=9)


class PlannerSettings(BaseModel):
    snap_max_distance_km: float = Field(0.5, gt=0)
    cruise_speed_kmh: float = Field(160.0, gt=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    planner: PlannerSettings = Field(default_factory=PlannerSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload."""
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("FLIGHTPLANNER_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    for env_name, key in (
        ("FLIGHTPLANNER_ROUTES_PATH", "routes_path"),
        ("FLIGHTPLANNER_GRAPH_PATH", "graph_path"),
        ("FLIGHTPLANNER_EDGE_GEOMETRY_PATH", "edge_geometry_path"),
    ):
        value = os.getenv(env_name)
        if value:
            data.setdefault("data", {})[key] = value

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("FLIGHTPLANNER_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
