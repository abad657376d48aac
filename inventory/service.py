"""
inventory/service.py -- The CRUD contract for car records.

CarInventory sits between the HTTP routes and CarStore. It owns the
ordering of checks for every operation:

    role gate (auth.policy) -> payload validation (inventory.schemas)
        -> store call -> NotFound if the id did not resolve

Reads (list, get) go through the same gate; every role may read, so for
them the gate only asserts that a principal was resolved.

status moves freely between available, sold and reserved on update. There
is no transition graph.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from auth.models import Principal
from auth.policy import Action, authorize
from core.errors import NotFound
from inventory.models import Car, CarFilters, CarPage, PaginationOptions
from inventory.pagination import compute_meta
from inventory.schemas import parse_create, parse_patch
from inventory.store import CarStore

logger = logging.getLogger("carinventory.inventory")

CAR_NOT_FOUND = "Car not found"


class CarInventory:
    def __init__(self, store: CarStore) -> None:
        self.store = store

    def create(self, payload: Mapping[str, Any], principal: Principal) -> Car:
        """Validate payload and store a new car. admin and manager only."""
        authorize(principal, Action.create)
        car = parse_create(payload)
        car_id = self.store.create_car(car)
        logger.info("Car %s created by user %s", car_id, principal.id)
        return self._get_or_raise(car_id)

    def list(self, filters: CarFilters, options: PaginationOptions, principal: Principal) -> CarPage:
        """Return one page of cars matching every provided filter."""
        authorize(principal, Action.read)
        cars, total = self.store.list_cars(filters, options)
        return CarPage(data=cars, meta=compute_meta(total, options.page, options.limit))

    def get(self, car_id: str, principal: Principal) -> Car:
        authorize(principal, Action.read)
        return self._get_or_raise(car_id)

    def update(self, car_id: str, payload: Mapping[str, Any], principal: Principal) -> Car:
        """Apply a partial update and return the post-update record. admin and manager only.

        Keys set to None or "" are ignored. A payload with nothing left after
        that fails with "No valid fields provided for update".
        """
        authorize(principal, Action.update)
        changes = parse_patch(payload)
        if not self.store.update_car(car_id, changes):
            raise NotFound(CAR_NOT_FOUND)
        logger.info("Car %s updated by user %s (%s)", car_id, principal.id, ", ".join(sorted(changes)))
        return self._get_or_raise(car_id)

    def delete(self, car_id: str, principal: Principal) -> None:
        """Permanently remove a car. admin only."""
        authorize(principal, Action.delete)
        if not self.store.delete_car(car_id):
            raise NotFound(CAR_NOT_FOUND)
        logger.info("Car %s deleted by user %s", car_id, principal.id)

    def _get_or_raise(self, car_id: str) -> Car:
        car = self.store.get_car(car_id)
        if car is None:
            raise NotFound(CAR_NOT_FOUND)
        return car
