"""In-memory implementation of the StudioStore.

Keeps records as plain documents, the way they are laid out in a document
database. Used by tests and for running the services without a database.
"""

import copy
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from studio.domain import (
    ClassRef,
    ClassSummary,
    ConsumptionEntry,
    Order,
    Participant,
    ProductType,
    StatusClassPass,
    User,
    YogaClass,
)
from studio.domain.errors import ConcurrentUpdateError, StoreError, ValidationError
from studio.stores import records
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


class InMemoryStudioStore(StudioStore):
    """Dictionary-backed studio store."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.orders: dict[str, dict[str, Any]] = {}
        self.classes: dict[str, dict[str, Any]] = {}
        self.last_updated: datetime | None = None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = copy.deepcopy((self.users, self.orders, self.classes, self.last_updated))
        try:
            yield
        except BaseException:
            self.users, self.orders, self.classes, self.last_updated = snapshot
            raise

    # Users

    def _load_orders(self, user_id: str, order_ids: list[str]) -> list[Order]:
        orders = []
        for order_id in order_ids:
            data = self.orders.get(order_id)
            if data is None:
                continue
            try:
                orders.append(records.order_from_record(order_id, data))
            except ValidationError as exc:
                logger.warning("Skipping order %s of user %s: %s", order_id, user_id, exc)
        return orders

    def get_user(self, user_id: str) -> User | None:
        data = self.users.get(user_id)
        if data is None:
            return None
        order_ids = records.order_ids_from_user_record(user_id, data)
        return records.user_from_record(user_id, data, self._load_orders(user_id, order_ids))

    def list_users(self) -> list[User]:
        users = [self.get_user(user_id) for user_id in self.users]
        return sorted(
            (u for u in users if u is not None),
            key=lambda u: (u.surname.casefold(), u.first_name.casefold()),
        )

    def create_user(
        self,
        user_id: str,
        first_name: str,
        surname: str,
        is_member: bool = False,
        cid: str = "",
        email: str = "",
    ) -> None:
        if user_id in self.users:
            raise StoreError("create_user", user_id, "user already exists")
        self.users[user_id] = {
            "login": user_id,
            "cid": cid,
            "firstName": first_name,
            "surname": surname,
            "email": email,
            "isMember": is_member,
            "orders": [],
        }

    def _user_record(self, operation: str, user_id: str) -> dict[str, Any]:
        data = self.users.get(user_id)
        if data is None:
            raise StoreError(operation, user_id, "user not found")
        return data

    def set_member(self, user_id: str, is_member: bool) -> None:
        self._user_record("set_member", user_id)["isMember"] = is_member

    def attach_order(self, user_id: str, order_id: str) -> None:
        orders = self._user_record("attach_order", user_id).setdefault("orders", [])
        if order_id not in orders:
            orders.append(order_id)

    # Orders

    def get_order(self, order_id: str) -> Order | None:
        data = self.orders.get(order_id)
        if data is None:
            return None
        return records.order_from_record(order_id, data)

    def get_user_orders(self, user_id: str) -> list[Order]:
        user = self.get_user(user_id)
        return list(user.orders) if user is not None else []

    def create_order(self, order: Order) -> None:
        if order.id in self.orders:
            raise StoreError("create_order", order.id, "order already exists")
        self.orders[order.id] = records.order_to_record(order)

    def _write_order(
        self, operation: str, order_id: str, expected_version: int, status: StatusClassPass
    ) -> dict[str, Any]:
        data = self.orders.get(order_id)
        if data is None:
            raise StoreError(operation, order_id, "order not found")
        actual = data.get("version", 0)
        if actual != expected_version:
            raise ConcurrentUpdateError(operation, order_id, expected_version, actual)
        data["version"] = actual + 1
        data["statusClassPass"] = status.value
        return data

    def add_order_class(
        self,
        order_id: str,
        entry: ConsumptionEntry,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        data = self._write_order("add_order_class", order_id, expected_version, status)
        data["classes"].append(records.entry_to_record(entry))
        return data["version"]

    def remove_order_class(
        self,
        order_id: str,
        class_ref: ClassRef,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        data = self._write_order("remove_order_class", order_id, expected_version, status)
        data["classes"] = [c for c in data["classes"] if c.get("classRef") != class_ref.value]
        return data["version"]

    def replace_order_class(
        self,
        order_id: str,
        entry: ConsumptionEntry,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        data = self._write_order("replace_order_class", order_id, expected_version, status)
        data["classes"] = [
            c for c in data["classes"] if c.get("classRef") != entry.class_ref.value
        ] + [records.entry_to_record(entry)]
        return data["version"]

    def set_order_status(
        self, order_id: str, status: StatusClassPass, expected_version: int
    ) -> int:
        return self._write_order("set_order_status", order_id, expected_version, status)["version"]

    # Classes

    def get_class(self, class_ref: ClassRef) -> YogaClass | None:
        data = self.classes.get(class_ref.value)
        if data is None:
            return None

        participants: list[Participant] = []
        for user_id, participant in data.get("participants", {}).items():
            user = self.get_user(user_id)
            if user is None:
                continue
            try:
                participants.append(records.participant_from_record(user_id, participant, user))
            except ValidationError as exc:
                logger.warning("Skipping participant %s of class %s: %s", user_id, class_ref, exc)
        return records.class_from_record(class_ref.value, data, participants)

    def list_classes(self) -> list[ClassSummary]:
        summaries = []
        for class_id in self.classes:
            try:
                summaries.append(ClassSummary(ref=ClassRef.from_string(class_id)))
            except ValueError:
                logger.warning("Skipping class with malformed id %r", class_id)
        return sorted(summaries, key=lambda c: c.ref)

    def save_class(
        self, class_ref: ClassRef, valid_tickets: tuple[ProductType, ...], notes: str
    ) -> None:
        data = self.classes.setdefault(class_ref.value, {"participants": {}})
        data["validTickets"] = records.valid_tickets_to_record(valid_tickets)
        data["notes"] = notes

    def _class_record(self, operation: str, class_ref: ClassRef) -> dict[str, Any]:
        data = self.classes.get(class_ref.value)
        if data is None:
            raise StoreError(operation, class_ref.value, "class not found")
        return data

    def set_class_notes(self, class_ref: ClassRef, notes: str) -> None:
        self._class_record("set_class_notes", class_ref)["notes"] = notes

    def add_participant(self, class_ref: ClassRef, user_id: str) -> None:
        data = self._class_record("add_participant", class_ref)
        data.setdefault("participants", {}).setdefault(
            user_id, {"attended": False, "missingClassPass": False}
        )

    def _participant_record(
        self, operation: str, class_ref: ClassRef, user_id: str
    ) -> dict[str, Any]:
        participants = self._class_record(operation, class_ref).get("participants", {})
        if user_id not in participants:
            raise StoreError(operation, f"{class_ref.value}/{user_id}", "participant not found")
        return participants[user_id]

    def set_participant_attended(self, class_ref: ClassRef, user_id: str, attended: bool) -> None:
        record = self._participant_record("set_participant_attended", class_ref, user_id)
        record["attended"] = attended

    def set_participant_missing_class_pass(
        self, class_ref: ClassRef, user_id: str, missing: bool
    ) -> None:
        record = self._participant_record("set_participant_missing_class_pass", class_ref, user_id)
        record["missingClassPass"] = missing

    # Synchronisation with the point of sale

    def get_last_updated(self) -> datetime | None:
        return self.last_updated

    def set_last_updated(self, moment: datetime) -> None:
        self.last_updated = moment
