"""Unit tests for inventory/store.py -- CarStore persistence and list queries.

Covers:
- create assigns a 32-char hex id and timestamps; lists round-trip as JSON
- get/update/delete on existing and missing ids
- every filter kind, combined with AND
- substring filters treat LIKE wildcards literally
- total counts all matches, not just the returned page
- sorting by allow-listed column, both directions, with stable paging
"""

import re

import pytest

from inventory.models import Car, CarFilters, CarStatus, PaginationOptions, SortOrder
from inventory.store import CarStore


def _car(**overrides) -> Car:
    fields = dict(
        brand="Toyota",
        car_model="Camry",
        year=2021,
        price=15000.0,
        mileage=30000.0,
        color="Red",
        fuel_type="Petrol",
        transmission="Automatic",
    )
    fields.update(overrides)
    return Car(**fields)


@pytest.fixture
def stocked(car_store: CarStore) -> CarStore:
    """Five cars with distinct brands, prices and years."""
    car_store.create_car(_car(brand="Toyota", car_model="Corolla", year=2018, price=9000, color="White"))
    car_store.create_car(_car(brand="Honda", car_model="Civic", year=2020, price=12000, fuel_type="Hybrid"))
    car_store.create_car(_car(brand="Ford", car_model="Focus", year=2015, price=6000, transmission="Manual"))
    car_store.create_car(_car(brand="Toyota", car_model="Prius", year=2022, price=24000, status=CarStatus.sold))
    car_store.create_car(_car(brand="BMW", car_model="X5", year=2021, price=52000, status=CarStatus.reserved))
    return car_store


def _list(store: CarStore, **kwargs) -> tuple[list[Car], int]:
    options = kwargs.pop("options", PaginationOptions(limit=100))
    return store.list_cars(CarFilters(**kwargs), options)


class TestCrud:
    def test_create_assigns_identity_and_timestamps(self, car_store: CarStore) -> None:
        car_id = car_store.create_car(_car(features=["GPS", "Sunroof"], images=["a.jpg"]))
        assert re.fullmatch(r"[0-9a-f]{32}", car_id)
        car = car_store.get_car(car_id)
        assert car is not None
        assert car.id == car_id
        assert car.created_at and car.created_at == car.updated_at
        assert car.features == ["GPS", "Sunroof"]
        assert car.images == ["a.jpg"]
        assert car.status is CarStatus.available

    def test_get_twice_is_identical(self, car_store: CarStore) -> None:
        car_id = car_store.create_car(_car())
        assert car_store.get_car(car_id) == car_store.get_car(car_id)

    def test_get_missing(self, car_store: CarStore) -> None:
        assert car_store.get_car("0" * 32) is None

    def test_update_applies_fields_and_bumps_updated_at(self, car_store: CarStore) -> None:
        car_id = car_store.create_car(_car())
        before = car_store.get_car(car_id)
        assert car_store.update_car(car_id, {"price": 14000.0, "status": CarStatus.reserved, "features": ["ABS"]})
        after = car_store.get_car(car_id)
        assert after.price == 14000.0
        assert after.status is CarStatus.reserved
        assert after.features == ["ABS"]
        assert after.brand == before.brand
        assert after.created_at == before.created_at
        assert after.updated_at >= before.updated_at

    def test_update_missing(self, car_store: CarStore) -> None:
        assert car_store.update_car("f" * 32, {"price": 1.0}) is False

    def test_delete(self, car_store: CarStore) -> None:
        car_id = car_store.create_car(_car())
        assert car_store.delete_car(car_id) is True
        assert car_store.get_car(car_id) is None
        assert car_store.delete_car(car_id) is False

    def test_ping(self, car_store: CarStore) -> None:
        assert car_store.ping() is True


class TestFilters:
    def test_no_filters_returns_everything(self, stocked: CarStore) -> None:
        cars, total = _list(stocked)
        assert total == 5
        assert len(cars) == 5

    def test_brand_substring_case_insensitive(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, brand="toy")
        assert total == 2
        assert {c.brand for c in cars} == {"Toyota"}

    def test_exact_year(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, year=2021)
        assert total == 1
        assert cars[0].brand == "BMW"

    def test_price_range_inclusive(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, min_price=9000, max_price=24000)
        assert total == 3
        assert sorted(c.price for c in cars) == [9000, 12000, 24000]

    def test_status(self, stocked: CarStore) -> None:
        cars, _total = _list(stocked, status=CarStatus.sold)
        assert [c.car_model for c in cars] == ["Prius"]

    def test_filters_combine_with_and(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, brand="Toyota", status=CarStatus.available)
        assert total == 1
        assert cars[0].car_model == "Corolla"

    def test_other_text_fields(self, stocked: CarStore) -> None:
        assert _list(stocked, fuel_type="hyb")[1] == 1
        assert _list(stocked, transmission="MAN")[1] == 1
        assert _list(stocked, color="whi")[1] == 1
        assert _list(stocked, car_model="x5")[1] == 1

    def test_like_wildcards_are_literal(self, stocked: CarStore) -> None:
        assert _list(stocked, brand="%")[1] == 0
        assert _list(stocked, brand="_")[1] == 0


class TestPagingAndSorting:
    def test_total_counts_all_matches(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, options=PaginationOptions(page=1, limit=2))
        assert total == 5
        assert len(cars) == 2

    def test_last_partial_page(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, options=PaginationOptions(page=3, limit=2))
        assert total == 5
        assert len(cars) == 1

    def test_page_past_the_end_is_empty(self, stocked: CarStore) -> None:
        cars, total = _list(stocked, options=PaginationOptions(page=9, limit=2))
        assert cars == []
        assert total == 5

    def test_sort_by_price_ascending(self, stocked: CarStore) -> None:
        cars, _ = _list(stocked, options=PaginationOptions(limit=100, sort_by="price", sort_order=SortOrder.asc))
        assert [c.price for c in cars] == [6000, 9000, 12000, 24000, 52000]

    def test_sort_by_year_descending(self, stocked: CarStore) -> None:
        cars, _ = _list(stocked, options=PaginationOptions(limit=100, sort_by="year", sort_order=SortOrder.desc))
        assert [c.year for c in cars] == [2022, 2021, 2020, 2018, 2015]

    def test_pages_do_not_overlap(self, stocked: CarStore) -> None:
        seen: list[str] = []
        for page in (1, 2, 3):
            cars, _ = _list(stocked, options=PaginationOptions(page=page, limit=2, sort_by="brand"))
            seen.extend(c.id for c in cars)
        assert len(seen) == 5
        assert len(set(seen)) == 5
