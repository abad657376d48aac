"""
api/routes/cars.py -- Car inventory routes for the REST API.

Routes:
  POST   /cars           -- create a car            (admin, manager)
  GET    /cars           -- filtered, paginated list (any authenticated role)
  GET    /cars/{car_id}  -- one car                  (any authenticated role)
  PUT    /cars/{car_id}  -- partial update           (admin, manager)
  DELETE /cars/{car_id}  -- permanent delete         (admin)

Handlers stay thin: authentication is a router-level dependency, role checks
and payload validation happen in inventory.service, and every response goes
through api.envelope. Bodies are taken as raw JSON (Body(...)) so validation
errors come back in the same field-error format whether they were caught by
inventory.schemas or anywhere else.

GET /cars query parameters:
  brand, carModel, fuelType, transmission, color   substring, case-insensitive
  year, status                                      exact
  minPrice, maxPrice                                inclusive range
  page, limit, sortBy, sortOrder                    pagination
  sort=price                                        re-sorts the returned page only
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from api.envelope import success
from api.limiter import limiter
from api.models import CarOut, PaginationMeta
from auth.dependencies import get_current_principal
from auth.models import Principal
from inventory.filters import build_filters
from inventory.pagination import normalize, resort_page
from inventory.service import CarInventory

# Every car route requires a resolved principal. Role checks differ per
# action and live in inventory.service.
router = APIRouter(dependencies=[Depends(get_current_principal)])


def _inventory(request: Request) -> CarInventory:
    return request.app.state.inventory


# ---------------------------------------------------------------------------
# POST /cars
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.post("/cars", status_code=201)
def create_car(
    request: Request,
    payload: Any = Body(...),
    principal: Principal = Depends(get_current_principal),
) -> JSONResponse:
    """Create a car. Missing or invalid fields are reported together."""
    car = _inventory(request).create(payload, principal)
    return success(201, "Car created successfully", CarOut.from_car(car))


# ---------------------------------------------------------------------------
# GET /cars
# ---------------------------------------------------------------------------


@limiter.limit("120/minute")
@router.get("/cars")
def list_cars(request: Request, principal: Principal = Depends(get_current_principal)) -> JSONResponse:
    params = request.query_params
    filters = build_filters(params)
    options = normalize(params.get("page"), params.get("limit"), params.get("sortBy"), params.get("sortOrder"))
    page = _inventory(request).list(filters, options, principal)
    cars = resort_page(page.data, params.get("sort"))
    return success(
        200,
        "Cars retrieved successfully",
        [CarOut.from_car(c) for c in cars],
        PaginationMeta.from_meta(page.meta),
    )


# ---------------------------------------------------------------------------
# /cars/{car_id}
# ---------------------------------------------------------------------------


@limiter.limit("120/minute")
@router.get("/cars/{car_id}")
def get_car(request: Request, car_id: str, principal: Principal = Depends(get_current_principal)) -> JSONResponse:
    car = _inventory(request).get(car_id, principal)
    return success(200, "Car retrieved successfully", CarOut.from_car(car))


@limiter.limit("30/minute")
@router.put("/cars/{car_id}")
def update_car(
    request: Request,
    car_id: str,
    payload: Any = Body(...),
    principal: Principal = Depends(get_current_principal),
) -> JSONResponse:
    """Apply the non-empty fields of payload. Returns the updated record."""
    car = _inventory(request).update(car_id, payload, principal)
    return success(200, "Car updated successfully", CarOut.from_car(car))


@limiter.limit("30/minute")
@router.delete("/cars/{car_id}")
def delete_car(request: Request, car_id: str, principal: Principal = Depends(get_current_principal)) -> JSONResponse:
    _inventory(request).delete(car_id, principal)
    return success(200, "Car deleted successfully")
