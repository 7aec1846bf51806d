"""
Per-session settings overrides (safe subset).

The map UI can send `settings_overrides` when it opens a planning session, e.g. a
wider snap threshold for a sparse route network. Only whitelisted keys are merged
onto the current settings, and the result is re-validated with Pydantic so ranges
still hold.

Data source paths and coordinate precision are not overridable: they are shared
by every session and fixed at load time.
"""

from __future__ import annotations

from typing import Any, Mapping

from flightplanner.config.settings import Settings

# True opens the whole subtree; a nested dict restricts it to the listed keys.
ALLOWED_SETTINGS_OVERRIDES_TREE: dict[str, Any] = {
    "planner": {"snap_max_distance_km": True, "cruise_speed_kmh": True},
}


def _merge_allowed(
    base: Mapping[str, Any],
    overrides: Mapping[str, Any],
    allowed: Mapping[str, Any] | bool,
    path: tuple[str, ...] = (),
) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        key_path = (*path, key)
        rule = True if allowed is True else allowed.get(key)
        if rule is None:
            raise ValueError(f"settings_overrides contains a disallowed key: '{'.'.join(key_path)}'")
        if rule is not True and not isinstance(value, Mapping):
            raise ValueError(f"settings_overrides key '{'.'.join(key_path)}' must be a mapping")

        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = _merge_allowed(current, value, rule, key_path)
        else:
            merged[key] = value
    return merged


def apply_settings_overrides(settings: Settings, overrides: Mapping[str, Any] | None) -> Settings:
    """Return a new validated Settings with the whitelisted overrides applied."""
    if not overrides:
        return settings
    payload = _merge_allowed(settings.model_dump(mode="python"), overrides, ALLOWED_SETTINGS_OVERRIDES_TREE)
    return Settings.model_validate(payload)
