"""
Configuration service for load building settings.
"""
import os
from typing import Optional


_OVERRIDES: dict[str, float] = {}

_DEFAULTS = {
    "SKID_DEFAULT_HEIGHT_FT": 0.5,
    "SKID_DEFAULT_DENSITY": 40.0,
    "MIN_WEIGHT_CAPACITY_LBS": 1000.0,
    "INVENTORY_TRUCK_LENGTH_FT": 100.0,
    "INVENTORY_TRUCK_WIDTH_FT": 100.0,
    "INVENTORY_WEIGHT_CAPACITY_LBS": 100000.0,
    "PLACEHOLDER_TRUCK_LENGTH_FT": 53.0,
    "PLACEHOLDER_TRUCK_WIDTH_FT": 8.5,
    "PLACEHOLDER_WEIGHT_CAPACITY_LBS": 48000.0,
}


def _get_float(name: str) -> float:
    if name in _OVERRIDES:
        return _OVERRIDES[name]

    env_value = os.getenv(name)
    if env_value:
        try:
            return float(env_value)
        except ValueError:
            return _DEFAULTS[name]

    return _DEFAULTS[name]


def set_override(name: str, value: Optional[float]) -> None:
    """Override a numeric setting in memory (None removes the override)."""
    if name not in _DEFAULTS:
        raise KeyError(f"Unknown setting: {name}")
    if value is None:
        _OVERRIDES.pop(name, None)
    else:
        _OVERRIDES[name] = float(value)


def clear_overrides() -> None:
    _OVERRIDES.clear()


def get_skid_default_height() -> float:
    return _get_float("SKID_DEFAULT_HEIGHT_FT")


def get_skid_default_density() -> float:
    """Material density in lbs per cubic foot (wood)."""
    return _get_float("SKID_DEFAULT_DENSITY")


def get_min_weight_capacity() -> float:
    return _get_float("MIN_WEIGHT_CAPACITY_LBS")


def get_inventory_truck_info() -> dict[str, float]:
    return {
        "length": _get_float("INVENTORY_TRUCK_LENGTH_FT"),
        "width": _get_float("INVENTORY_TRUCK_WIDTH_FT"),
        "weight_capacity": _get_float("INVENTORY_WEIGHT_CAPACITY_LBS"),
    }


def get_placeholder_truck_info() -> dict[str, float]:
    """Defaults for a truck load started before the loader enters real truck details."""
    return {
        "length": _get_float("PLACEHOLDER_TRUCK_LENGTH_FT"),
        "width": _get_float("PLACEHOLDER_TRUCK_WIDTH_FT"),
        "weight_capacity": _get_float("PLACEHOLDER_WEIGHT_CAPACITY_LBS"),
    }


def get_weight_unit() -> str:
    return os.getenv("WEIGHT_UNIT", "lbs")


def get_dimension_unit() -> str:
    return os.getenv("DIMENSION_UNIT", "ft")
