"""
inventory/schemas.py -- Typed create and partial-update payloads for car records.

Request bodies arrive as plain JSON objects with camelCase keys. They are
validated here with Pydantic v2 models rather than in the route layer so the
same rules apply whether a car is written over HTTP or by code calling
inventory.service directly.

Rules shared by create and update:
  - text fields are stripped and must be non-empty
  - year is an integer in 1900..current year
  - price and mileage are non-negative numbers
  - status is one of available | sold | reserved
  - unknown keys are rejected (extra="forbid")

CarCreate requires every text and numeric field; status defaults to
available and features/images default to empty lists.

CarPatch has one optional field per attribute. parse_patch() first drops
keys whose value is None or a blank string -- a cleared field is left
untouched, never written as empty -- and raises the terminal "No valid
fields provided for update" error when nothing remains.

Pydantic collects every violation in one pass. _to_field_errors() maps them
onto FieldError entries with wire names and readable messages.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from core.errors import BadRequest, FieldError
from inventory.filters import MIN_YEAR, current_year
from inventory.models import Car, CarStatus

NO_VALID_FIELDS = "No valid fields provided for update"

_TEXT_MAX = 100

# Human labels for "is required" / "cannot be empty" messages.
_LABELS: dict[str, str] = {
    "brand": "Brand",
    "carModel": "Model",
    "color": "Color",
    "fuelType": "Fuel type",
    "transmission": "Transmission",
    "year": "Year",
    "price": "Price",
    "mileage": "Mileage",
    "status": "Status",
    "features": "Features",
    "images": "Images",
}

# Field-specific messages for range and type violations.
_RULE_MESSAGES: dict[str, str] = {
    "price": "Price must be a non-negative number",
    "mileage": "Mileage must be a non-negative number",
    "status": "Status must be one of: " + ", ".join(s.value for s in CarStatus),
}


def _year_message() -> str:
    return f"Year must be an integer between {MIN_YEAR} and {current_year()}"


class _CarFields(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="forbid",
        str_strip_whitespace=True,
    )

    @field_validator("year", check_fields=False)
    @classmethod
    def year_not_in_future(cls, value: Optional[int]) -> Optional[int]:
        # The upper bound moves every January, so it cannot be a static Field(le=...).
        if value is not None and value > current_year():
            raise ValueError(_year_message())
        return value


class CarCreate(_CarFields):
    """Body of POST /cars."""

    brand: str = Field(min_length=1, max_length=_TEXT_MAX)
    car_model: str = Field(min_length=1, max_length=_TEXT_MAX)
    year: int = Field(ge=MIN_YEAR)
    price: float = Field(ge=0, allow_inf_nan=False)
    mileage: float = Field(ge=0, allow_inf_nan=False)
    color: str = Field(min_length=1, max_length=_TEXT_MAX)
    fuel_type: str = Field(min_length=1, max_length=_TEXT_MAX)
    transmission: str = Field(min_length=1, max_length=_TEXT_MAX)
    status: CarStatus = CarStatus.available
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    def to_car(self) -> Car:
        return Car(**self.model_dump())


class CarPatch(_CarFields):
    """Body of PUT /cars/{id}. Every field optional; absent means unchanged."""

    brand: Optional[str] = Field(default=None, min_length=1, max_length=_TEXT_MAX)
    car_model: Optional[str] = Field(default=None, min_length=1, max_length=_TEXT_MAX)
    year: Optional[int] = Field(default=None, ge=MIN_YEAR)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    mileage: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    color: Optional[str] = Field(default=None, min_length=1, max_length=_TEXT_MAX)
    fuel_type: Optional[str] = Field(default=None, min_length=1, max_length=_TEXT_MAX)
    transmission: Optional[str] = Field(default=None, min_length=1, max_length=_TEXT_MAX)
    status: Optional[CarStatus] = None
    features: Optional[list[str]] = None
    images: Optional[list[str]] = None

    def changes(self) -> dict[str, Any]:
        """Return the set fields as {snake_case_name: value}."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Parsing entry points
# ---------------------------------------------------------------------------


def parse_create(payload: Mapping[str, Any]) -> Car:
    """Validate a create body and return an unsaved Car. Raises BadRequest."""
    if not isinstance(payload, Mapping):
        raise BadRequest("Request body must be a JSON object")
    try:
        body = CarCreate.model_validate(dict(payload))
    except ValidationError as exc:
        errors = _to_field_errors(exc)
        missing = [e.field for e in errors if e.message.endswith(" is required")]
        message = f"Missing required fields: {', '.join(missing)}" if missing else "Invalid car data"
        raise BadRequest(message, errors) from exc
    return body.to_car()


def parse_patch(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial update body and return {snake_case_name: value}.

    Keys mapped to None or to a blank string (empty or whitespace only) are
    dropped before validation. If no keys remain the call fails with
    NO_VALID_FIELDS, independent of any field rule.
    """
    if not isinstance(payload, Mapping):
        raise BadRequest("Request body must be a JSON object")
    present = {key: value for key, value in payload.items() if not _blank(value)}
    if not present:
        raise BadRequest(NO_VALID_FIELDS)
    try:
        body = CarPatch.model_validate(present)
    except ValidationError as exc:
        raise BadRequest("Invalid car data", _to_field_errors(exc)) from exc
    return body.changes()


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_field_errors(exc: ValidationError) -> list[FieldError]:
    """Collapse Pydantic errors into one FieldError per offending field.

    Pydantic reports locations with the alias (camelCase) because the models
    validate by alias. List item errors (features.0) are reported against the
    list field.
    """
    result: list[FieldError] = []
    seen: set[str] = set()
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        name = str(loc[0])
        if name in seen:
            continue
        seen.add(name)
        result.append(FieldError(name, _message_for(name, err)))
    return result


def _message_for(name: str, err: dict) -> str:
    kind = err.get("type", "")
    label = _LABELS.get(name, name)
    if kind == "missing":
        return f"{label} is required"
    if kind == "extra_forbidden":
        return f"Unknown field: {name}"
    if kind == "string_too_short":
        return f"{label} cannot be empty"
    if kind == "string_too_long":
        return f"{label} must be at most {_TEXT_MAX} characters"
    if name == "year":
        return _year_message()
    if name in _RULE_MESSAGES:
        return _RULE_MESSAGES[name]
    return f"{label}: {err.get('msg', 'invalid value')}"
