"""
inventory/models.py -- Domain types for car records and list queries.

These are pure data containers with zero logic beyond trivial derived values.
Parsing and validation live in inventory/filters.py, inventory/pagination.py
and inventory/schemas.py; persistence lives in inventory/store.py.

Field names are snake_case here. The camelCase wire names (carModel,
fuelType, createdAt) belong to the API layer and to the query parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CarStatus(str, Enum):
    available = "available"
    sold = "sold"
    reserved = "reserved"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


@dataclass
class Car:
    """A vehicle listing.

    id, created_at and updated_at are assigned by the store; they are empty
    before the record is first written. status transitions freely between
    the three CarStatus values -- there is no enforced workflow.
    """

    brand: str
    car_model: str
    year: int
    price: float
    mileage: float
    color: str
    fuel_type: str
    transmission: str
    status: CarStatus = CarStatus.available
    features: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    id: str = ""
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, set by store on every write


@dataclass(frozen=True)
class CarFilters:
    """Conjunctive list filter. None means "not provided".

    Text fields are case-insensitive substring matches; year and status are
    exact; min_price/max_price bound price inclusively.
    """

    brand: Optional[str] = None
    car_model: Optional[str] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    color: Optional[str] = None
    year: Optional[int] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    status: Optional[CarStatus] = None


@dataclass(frozen=True)
class PaginationOptions:
    page: int = 1
    limit: int = 10
    sort_by: str = "createdAt"
    sort_order: SortOrder = SortOrder.desc

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageMeta:
    total: int
    page: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass
class CarPage:
    """One page of list results plus counts over the whole filtered set."""

    data: list[Car]
    meta: PageMeta
