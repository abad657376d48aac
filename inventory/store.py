"""
inventory/store.py -- SQLAlchemy-backed persistence layer for car records.

Uses SQLAlchemy Core (not ORM) so the dataclasses in inventory/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. CarStore is the repository; _row_to_car
is the mapper. Route and service code never touches SQL directly.

Consistency: every create/update/delete is one statement against one row,
so each write is atomic on its own. There are no multi-row transactions and
no in-process locks. list_cars() counts and then fetches in two statements;
a concurrent write between them can make total and the page disagree
slightly. That is accepted.

Security: all queries use bound parameters. Sort columns come from a fixed
map, never from raw input. Substring filters escape LIKE wildcards.

Usage:
    store = CarStore()                                # settings.database_url
    store = CarStore("postgresql://user:pw@host/db")  # PostgreSQL
    car_id = store.create_car(car)
    cars, total = store.list_cars(CarFilters(brand="toy"), PaginationOptions())
    store.update_car(car_id, {"price": 9500.0})
    store.delete_car(car_id)
    store.close()
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    Column,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    and_,
    create_engine,
    event,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine

from core.config import get_settings
from inventory.models import Car, CarFilters, CarStatus, PaginationOptions, SortOrder

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_cars = Table(
    "cars",
    metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex
    Column("brand", String(100), nullable=False),
    Column("car_model", String(100), nullable=False),
    Column("year", Integer, nullable=False),
    Column("price", Float, nullable=False),
    Column("mileage", Float, nullable=False),
    Column("color", String(100), nullable=False),
    Column("fuel_type", String(100), nullable=False),
    Column("transmission", String(100), nullable=False),
    Column("status", String(20), nullable=False, server_default=CarStatus.available.value),
    Column("features", Text, nullable=False, server_default="[]"),  # JSON array serialized as text
    Column("images", Text, nullable=False, server_default="[]"),  # JSON array, like features
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Indexes for the common list queries: brand/model search, price range, status.
Index("ix_cars_brand_car_model", _cars.c.brand, _cars.c.car_model)
Index("ix_cars_price", _cars.c.price)
Index("ix_cars_status", _cars.c.status)

# sortBy wire name -> column
_SORT_COLUMNS = {
    "createdAt": _cars.c.created_at,
    "updatedAt": _cars.c.updated_at,
    "brand": _cars.c.brand,
    "carModel": _cars.c.car_model,
    "year": _cars.c.year,
    "price": _cars.c.price,
    "mileage": _cars.c.mileage,
    "color": _cars.c.color,
    "fuelType": _cars.c.fuel_type,
    "transmission": _cars.c.transmission,
    "status": _cars.c.status,
}

_JSON_COLUMNS = ("features", "images")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _serialize(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert domain values to column values (enums to str, lists to JSON)."""
    values = dict(fields)
    for name in _JSON_COLUMNS:
        if name in values:
            values[name] = json.dumps(list(values[name]))
    if "status" in values:
        values["status"] = CarStatus(values["status"]).value
    return values


def _filter_clauses(filters: CarFilters) -> list:
    """Translate a CarFilters into a list of SQL conditions (ANDed by the caller)."""
    clauses = []
    for name in ("brand", "car_model", "fuel_type", "transmission", "color"):
        value = getattr(filters, name)
        if value:
            clauses.append(_cars.c[name].icontains(value, autoescape=True))
    if filters.year is not None:
        clauses.append(_cars.c.year == filters.year)
    if filters.min_price is not None:
        clauses.append(_cars.c.price >= filters.min_price)
    if filters.max_price is not None:
        clauses.append(_cars.c.price <= filters.max_price)
    if filters.status is not None:
        clauses.append(_cars.c.status == filters.status.value)
    return clauses


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes. Set per-connection because SQLite PRAGMAs are not
    inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CarStore:
    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # SQLite requires check_same_thread=False when used from FastAPI's
            # threadpool where the same connection may be accessed across threads.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def create_car(self, car: Car) -> str:
        """Insert a new car and return its assigned ID.

        id, created_at and updated_at on the passed Car are ignored; the
        store assigns all three.
        """
        car_id = _new_id()
        now = _now_iso()
        values = _serialize(
            {
                "brand": car.brand,
                "car_model": car.car_model,
                "year": car.year,
                "price": car.price,
                "mileage": car.mileage,
                "color": car.color,
                "fuel_type": car.fuel_type,
                "transmission": car.transmission,
                "status": car.status,
                "features": car.features,
                "images": car.images,
            }
        )
        with self.engine.connect() as conn:
            conn.execute(_cars.insert().values(id=car_id, created_at=now, updated_at=now, **values))
            conn.commit()
        return car_id

    def get_car(self, car_id: str) -> Optional[Car]:
        """Fetch a single car by ID. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_cars.select().where(_cars.c.id == car_id)).fetchone()
        return _row_to_car(row) if row is not None else None

    def list_cars(self, filters: CarFilters, options: PaginationOptions) -> tuple[list[Car], int]:
        """Return (page of matching cars, total matches before paging).

        Filters combine with AND. Rows are ordered by options.sort_by in
        options.sort_order, with id as a tie-breaker so paging is stable.
        """
        clauses = _filter_clauses(filters)
        column = _SORT_COLUMNS[options.sort_by]
        order = column.asc() if options.sort_order is SortOrder.asc else column.desc()
        tiebreak = _cars.c.id.asc() if options.sort_order is SortOrder.asc else _cars.c.id.desc()

        count_stmt = select(func.count()).select_from(_cars)
        page_stmt = _cars.select().order_by(order, tiebreak).offset(options.offset).limit(options.limit)
        if clauses:
            count_stmt = count_stmt.where(and_(*clauses))
            page_stmt = page_stmt.where(and_(*clauses))
        with self.engine.connect() as conn:
            total = conn.execute(count_stmt).scalar() or 0
            rows = conn.execute(page_stmt).fetchall()
        return [_row_to_car(r) for r in rows], total

    def update_car(self, car_id: str, fields: dict[str, Any]) -> bool:
        """Apply fields (snake_case names) to an existing car and bump updated_at.

        Accepts any subset of: brand, car_model, year, price, mileage, color,
        fuel_type, transmission, status, features, images. Lists are
        serialized to JSON before writing.

        Returns True if a row was updated, False if car_id was not found.
        """
        values = _serialize(fields)
        values["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_cars.update().where(_cars.c.id == car_id).values(**values))
            conn.commit()
        return result.rowcount > 0

    def delete_car(self, car_id: str) -> bool:
        """Permanently delete a car. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_cars.delete().where(_cars.c.id == car_id))
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_car(row) -> Car:
    return Car(
        id=row.id,
        brand=row.brand,
        car_model=row.car_model,
        year=row.year,
        price=row.price,
        mileage=row.mileage,
        color=row.color,
        fuel_type=row.fuel_type,
        transmission=row.transmission,
        status=CarStatus(row.status),
        features=json.loads(row.features) if row.features else [],
        images=json.loads(row.images) if row.images else [],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
