"""
Skid weight, truck space utilization and overweight calculations.

These helpers never touch the database. They accept a Load model or any object
exposing ``skids``, ``truck_length``, ``truck_width``, ``weight_capacity`` and
``total_weight`` attributes.
"""
import math
from typing import Any, Optional

from core.exceptions import InvalidDimension
from services.config_service import (
    get_dimension_unit,
    get_skid_default_density,
    get_skid_default_height,
    get_weight_unit,
)


def _as_number(value: Any) -> float:
    """Coerce a numeric input, treating missing, non-numeric and NaN values as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def calculate_skid_weight(
    width: Any,
    length: Any,
    height: Optional[float] = None,
    density: Optional[float] = None,
) -> float:
    """Weight in pounds of a skid from its footprint (ft), height (ft) and density (lbs/ft3)."""
    width_value = _as_number(width)
    length_value = _as_number(length)
    if width_value <= 0 or length_value <= 0:
        raise InvalidDimension("Width and length must be positive numbers")

    height_value = get_skid_default_height() if height is None else height
    density_value = get_skid_default_density() if density is None else density

    volume = width_value * length_value * height_value
    return round(volume * density_value, 2)


def compute_space_utilization(load: Any) -> dict:
    skids = getattr(load, "skids", None) or []
    total_area = sum(
        _as_number(getattr(skid, "width", None)) * _as_number(getattr(skid, "length", None))
        for skid in skids
    )

    truck_length = _as_number(getattr(load, "truck_length", None))
    truck_width = _as_number(getattr(load, "truck_width", None))
    truck_area = truck_length * truck_width if truck_length > 0 and truck_width > 0 else 0.0

    percentage = (total_area / truck_area) * 100 if truck_area > 0 else 0.0

    return {
        "total_area": total_area,
        "truck_area": truck_area,
        "percentage": percentage,
        "formatted_percentage": f"{percentage:.1f}%",
    }


def is_overweight(load: Any) -> bool:
    capacity = _as_number(getattr(load, "weight_capacity", None))
    total_weight = _as_number(getattr(load, "total_weight", None))
    if capacity <= 0 or total_weight <= 0:
        return False
    return total_weight > capacity


def calculate_percentage(part: Any, whole: Any, decimals: int = 1) -> float:
    whole_value = _as_number(whole)
    if not whole_value:
        return 0.0
    return round((_as_number(part) / whole_value) * 100, decimals)


def format_weight(weight: Any, decimals: int = 2) -> str:
    if weight is None:
        return ""
    return f"{_as_number(weight):.{decimals}f} {get_weight_unit()}"


def format_dimension(value: Any, decimals: int = 2) -> str:
    if value is None:
        return ""
    return f"{_as_number(value):.{decimals}f} {get_dimension_unit()}"
