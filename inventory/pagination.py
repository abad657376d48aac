"""
inventory/pagination.py -- Page/limit/sort normalization and page metadata.

normalize() turns raw query strings into a PaginationOptions. Missing or
empty values take the defaults (page 1, limit 10, createdAt, desc). Values
that are present but invalid are a client error; nothing is clamped.

compute_meta() derives totalPages/hasNext/hasPrev from a total match count.
The total is counted over the filtered set before offset/limit, so it
reflects every match, not just the returned page.

resort_page() reproduces the legacy ``sort=price`` query parameter: it
re-orders only the page already fetched, by ascending price. It does not
touch the underlying query order (that is sortBy/sortOrder).
"""

from __future__ import annotations

from core.errors import BadRequest, FieldError
from inventory.models import Car, PageMeta, PaginationOptions, SortOrder

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Largest offset SQLite can bind (signed 64-bit INTEGER).
MAX_OFFSET = 2**63 - 1
DEFAULT_SORT_BY = "createdAt"

# Wire names accepted by sortBy. inventory/store.py maps each to a column.
SORTABLE_FIELDS: frozenset[str] = frozenset(
    {
        "createdAt",
        "updatedAt",
        "brand",
        "carModel",
        "year",
        "price",
        "mileage",
        "color",
        "fuelType",
        "transmission",
        "status",
    }
)


def _blank(value: str | None) -> bool:
    return value is None or str(value).strip() == ""


def _parse_int(value: str, name: str, errors: list[FieldError]) -> int | None:
    try:
        return int(str(value).strip())
    except ValueError:
        errors.append(FieldError(name, f"{name} must be an integer"))
        return None


def normalize(
    raw_page: str | None = None,
    raw_limit: str | None = None,
    raw_sort_by: str | None = None,
    raw_sort_order: str | None = None,
) -> PaginationOptions:
    """Validate raw pagination parameters and fill in defaults.

    Raises BadRequest listing every violation:
      page < 1, limit outside 1..100, a page whose offset exceeds
      MAX_OFFSET, sortBy not a sortable field,
      sortOrder not exactly "asc" or "desc".
    """
    errors: list[FieldError] = []

    page = DEFAULT_PAGE
    if not _blank(raw_page):
        parsed = _parse_int(raw_page, "page", errors)
        if parsed is not None:
            if parsed < 1:
                errors.append(FieldError("page", "Page number must be greater than 0"))
            else:
                page = parsed

    limit = DEFAULT_LIMIT
    if not _blank(raw_limit):
        parsed = _parse_int(raw_limit, "limit", errors)
        if parsed is not None:
            if not 1 <= parsed <= MAX_LIMIT:
                errors.append(FieldError("limit", f"Limit must be between 1 and {MAX_LIMIT}"))
            else:
                limit = parsed

    if (page - 1) * limit > MAX_OFFSET:
        errors.append(FieldError("page", "Page number is too large"))

    sort_by = DEFAULT_SORT_BY
    if not _blank(raw_sort_by):
        candidate = raw_sort_by.strip()
        if candidate not in SORTABLE_FIELDS:
            errors.append(FieldError("sortBy", f"sortBy must be one of: {', '.join(sorted(SORTABLE_FIELDS))}"))
        else:
            sort_by = candidate

    sort_order = SortOrder.desc
    if not _blank(raw_sort_order):
        try:
            sort_order = SortOrder(raw_sort_order.strip())
        except ValueError:
            errors.append(FieldError("sortOrder", 'Sort order must be either "asc" or "desc"'))

    if errors:
        raise BadRequest("Invalid pagination parameters", errors)

    return PaginationOptions(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def compute_meta(total: int, page: int, limit: int) -> PageMeta:
    """Return page metadata for total matches at the given page and limit.

    totalPages = ceil(total / limit), which is 0 when total is 0, so hasNext
    is False for an empty result. hasPrev is page > 1 regardless of total.
    """
    total_pages = -(-total // limit) if total > 0 else 0
    return PageMeta(
        total=total,
        page=page,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def resort_page(cars: list[Car], sort: str | None) -> list[Car]:
    """Apply the legacy post-fetch ``sort`` parameter to one page of results.

    Only ``sort=price`` has an effect (ascending, stable). Any other value
    returns the page unchanged.
    """
    # TODO: sort=price orders the current page only, not the whole result set;
    # fold it into sortBy=price once API clients have migrated.
    if sort == "price":
        return sorted(cars, key=lambda car: car.price)
    return cars
