"""
inventory/filters.py -- Build a CarFilters value from raw query parameters.

Only names in the allow-list below are read; anything else in the mapping
(page, limit, sort, typos, tracking params) is ignored without error.

Text parameters become case-insensitive substring predicates. Empty or
whitespace-only values count as "not provided". Numeric and enum parameters
are parsed and range-checked; every violation is collected and reported in a
single BadRequest so the client can fix them all at once.

build_filters() is pure: the same input always yields an equal CarFilters.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime, timezone

from core.errors import BadRequest, FieldError
from inventory.models import CarFilters, CarStatus

MIN_YEAR = 1900

# wire name -> CarFilters attribute
_TEXT_PARAMS: dict[str, str] = {
    "brand": "brand",
    "carModel": "car_model",
    "fuelType": "fuel_type",
    "transmission": "transmission",
    "color": "color",
}


def current_year() -> int:
    return datetime.now(timezone.utc).year


def _clean(raw: Mapping[str, str], name: str) -> str | None:
    value = raw.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_price(value: str | None, name: str, label: str, errors: list[FieldError]) -> float | None:
    if value is None:
        return None
    try:
        price = float(value)
    except ValueError:
        errors.append(FieldError(name, f"{label} must be a number"))
        return None
    if not math.isfinite(price):
        errors.append(FieldError(name, f"{label} must be a number"))
        return None
    if price < 0:
        errors.append(FieldError(name, f"{label} cannot be negative"))
        return None
    return price


def build_filters(raw: Mapping[str, str]) -> CarFilters:
    """Parse the allow-listed filter parameters in raw into a CarFilters.

    Raises BadRequest with one FieldError per violated rule:
      year      -- not an integer, or outside 1900..current year
      minPrice  -- not a number, or negative
      maxPrice  -- not a number, or negative
      minPrice > maxPrice
      status    -- not one of available, sold, reserved
    """
    errors: list[FieldError] = []
    text = {attr: _clean(raw, name) for name, attr in _TEXT_PARAMS.items()}

    year: int | None = None
    raw_year = _clean(raw, "year")
    if raw_year is not None:
        try:
            year = int(raw_year)
        except ValueError:
            errors.append(FieldError("year", "Year must be an integer"))
        else:
            if not MIN_YEAR <= year <= current_year():
                errors.append(FieldError("year", f"Year must be between {MIN_YEAR} and {current_year()}"))
                year = None

    min_price = _parse_price(_clean(raw, "minPrice"), "minPrice", "Minimum price", errors)
    max_price = _parse_price(_clean(raw, "maxPrice"), "maxPrice", "Maximum price", errors)
    if min_price is not None and max_price is not None and min_price > max_price:
        errors.append(FieldError("minPrice", "Minimum price cannot be greater than maximum price"))

    status: CarStatus | None = None
    raw_status = _clean(raw, "status")
    if raw_status is not None:
        try:
            status = CarStatus(raw_status)
        except ValueError:
            allowed = ", ".join(s.value for s in CarStatus)
            errors.append(FieldError("status", f"Status must be one of: {allowed}"))

    if errors:
        raise BadRequest("Invalid filter parameters", errors)

    return CarFilters(year=year, min_price=min_price, max_price=max_price, status=status, **text)
