"""Django ORM implementation of the StudioStore.

Rows are converted to the stored record shape and go through the same
validation as any other store (see studio.stores.records).
"""

import logging
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from django.db import DatabaseError, transaction
from django.db.models import F, Max

from studio import models
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

SALES_SYNC_KEY = "sales"


def _order_record(row: models.Order) -> dict[str, Any]:
    return {
        "productId": row.product_id,
        "productLineId": row.product_line_id,
        "numTotal": row.num_total,
        "classes": [
            {"classRef": c.yoga_class_id, "ticked": c.ticked} for c in row.consumptions.all()
        ],
        "statusClassPass": row.status_class_pass,
        "version": row.version,
    }


def _user_record(row: models.Customer) -> dict[str, Any]:
    return {
        "firstName": row.first_name,
        "surname": row.surname,
        "isMember": row.is_member,
        "orders": [o.id for o in row.orders.all()],
    }


class DjangoStudioStore(StudioStore):
    """Relational studio store using Django ORM."""

    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()

    # Users

    def _to_user(self, row: models.Customer) -> User:
        orders = []
        for order_row in row.orders.all():
            try:
                orders.append(records.order_from_record(order_row.id, _order_record(order_row)))
            except ValidationError as exc:
                logger.warning("Skipping order %s of user %s: %s", order_row.id, row.login, exc)
        return records.user_from_record(row.login, _user_record(row), orders)

    def _customers(self):
        return models.Customer.objects.prefetch_related("orders__consumptions")

    def get_user(self, user_id: str) -> User | None:
        row = self._customers().filter(login=user_id).first()
        return self._to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        return [self._to_user(row) for row in self._customers().order_by("surname", "first_name")]

    def create_user(
        self,
        user_id: str,
        first_name: str,
        surname: str,
        is_member: bool = False,
        cid: str = "",
        email: str = "",
    ) -> None:
        try:
            with transaction.atomic():
                models.Customer.objects.create(
                    login=user_id,
                    first_name=first_name,
                    surname=surname,
                    is_member=is_member,
                    cid=cid,
                    email=email,
                )
        except DatabaseError as exc:
            raise StoreError("create_user", user_id, str(exc)) from exc

    def set_member(self, user_id: str, is_member: bool) -> None:
        try:
            updated = models.Customer.objects.filter(login=user_id).update(is_member=is_member)
        except DatabaseError as exc:
            raise StoreError("set_member", user_id, str(exc)) from exc
        if not updated:
            raise StoreError("set_member", user_id, "user not found")

    def attach_order(self, user_id: str, order_id: str) -> None:
        try:
            with transaction.atomic():
                if not models.Customer.objects.filter(login=user_id).exists():
                    raise StoreError("attach_order", user_id, "user not found")
                row = models.Order.objects.select_for_update().filter(pk=order_id).first()
                if row is None:
                    raise StoreError("attach_order", order_id, "order not found")
                if row.customer_id == user_id:
                    return
                last = models.Order.objects.filter(customer_id=user_id).aggregate(
                    last=Max("attached_seq")
                )["last"]
                row.customer_id = user_id
                row.attached_seq = (last or 0) + 1
                row.save(update_fields=["customer", "attached_seq"])
        except DatabaseError as exc:
            raise StoreError("attach_order", order_id, str(exc)) from exc

    # Orders

    def get_order(self, order_id: str) -> Order | None:
        row = models.Order.objects.prefetch_related("consumptions").filter(pk=order_id).first()
        if row is None:
            return None
        return records.order_from_record(row.id, _order_record(row))

    def get_user_orders(self, user_id: str) -> list[Order]:
        user = self.get_user(user_id)
        return list(user.orders) if user is not None else []

    def create_order(self, order: Order) -> None:
        try:
            with transaction.atomic():
                row = models.Order.objects.create(
                    id=order.id,
                    product_id=order.product_id,
                    product_line_id=order.product_line_id,
                    num_total=order.num_total,
                    status_class_pass=order.status_class_pass.value,
                    version=order.version,
                )
                models.OrderClass.objects.bulk_create(
                    models.OrderClass(order=row, yoga_class_id=e.class_ref.value, ticked=e.ticked)
                    for e in order.classes
                )
        except DatabaseError as exc:
            raise StoreError("create_order", order.id, str(exc)) from exc

    def _bump_version(
        self, operation: str, order_id: str, expected_version: int, status: StatusClassPass
    ) -> int:
        """Write the status if the order is still at ``expected_version``."""
        updated = models.Order.objects.filter(pk=order_id, version=expected_version).update(
            version=F("version") + 1,
            status_class_pass=status.value,
        )
        if not updated:
            actual = (
                models.Order.objects.filter(pk=order_id).values_list("version", flat=True).first()
            )
            if actual is None:
                raise StoreError(operation, order_id, "order not found")
            raise ConcurrentUpdateError(operation, order_id, expected_version, actual)
        return expected_version + 1

    def add_order_class(
        self,
        order_id: str,
        entry: ConsumptionEntry,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        try:
            with transaction.atomic():
                version = self._bump_version("add_order_class", order_id, expected_version, status)
                models.OrderClass.objects.create(
                    order_id=order_id,
                    yoga_class_id=entry.class_ref.value,
                    ticked=entry.ticked,
                )
        except DatabaseError as exc:
            raise StoreError("add_order_class", order_id, str(exc)) from exc
        return version

    def remove_order_class(
        self,
        order_id: str,
        class_ref: ClassRef,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        try:
            with transaction.atomic():
                version = self._bump_version(
                    "remove_order_class", order_id, expected_version, status
                )
                models.OrderClass.objects.filter(
                    order_id=order_id, yoga_class_id=class_ref.value
                ).delete()
        except DatabaseError as exc:
            raise StoreError("remove_order_class", order_id, str(exc)) from exc
        return version

    def replace_order_class(
        self,
        order_id: str,
        entry: ConsumptionEntry,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        try:
            with transaction.atomic():
                version = self._bump_version(
                    "replace_order_class", order_id, expected_version, status
                )
                models.OrderClass.objects.update_or_create(
                    order_id=order_id,
                    yoga_class_id=entry.class_ref.value,
                    defaults={"ticked": entry.ticked},
                )
        except DatabaseError as exc:
            raise StoreError("replace_order_class", order_id, str(exc)) from exc
        return version

    def set_order_status(
        self, order_id: str, status: StatusClassPass, expected_version: int
    ) -> int:
        try:
            return self._bump_version("set_order_status", order_id, expected_version, status)
        except DatabaseError as exc:
            raise StoreError("set_order_status", order_id, str(exc)) from exc

    # Classes

    def get_class(self, class_ref: ClassRef) -> YogaClass | None:
        row = models.YogaClass.objects.filter(pk=class_ref.value).first()
        if row is None:
            return None

        participants: list[Participant] = []
        for p in row.participants.select_related("customer"):
            user = self.get_user(p.customer_id)
            if user is None:
                continue
            participants.append(
                records.participant_from_record(
                    p.customer_id,
                    {"attended": p.attended, "missingClassPass": p.missing_class_pass},
                    user,
                )
            )
        return records.class_from_record(
            row.id,
            {"validTickets": row.valid_tickets, "notes": row.notes},
            participants,
        )

    def list_classes(self) -> list[ClassSummary]:
        summaries = []
        for class_id in models.YogaClass.objects.values_list("id", flat=True):
            try:
                summaries.append(ClassSummary(ref=ClassRef.from_string(class_id)))
            except ValueError:
                logger.warning("Skipping class with malformed id %r", class_id)
        return sorted(summaries, key=lambda c: c.ref)

    def save_class(
        self, class_ref: ClassRef, valid_tickets: tuple[ProductType, ...], notes: str
    ) -> None:
        try:
            models.YogaClass.objects.update_or_create(
                pk=class_ref.value,
                defaults={
                    "valid_tickets": records.valid_tickets_to_record(valid_tickets),
                    "notes": notes,
                },
            )
        except DatabaseError as exc:
            raise StoreError("save_class", class_ref.value, str(exc)) from exc

    def set_class_notes(self, class_ref: ClassRef, notes: str) -> None:
        try:
            updated = models.YogaClass.objects.filter(pk=class_ref.value).update(notes=notes)
        except DatabaseError as exc:
            raise StoreError("set_class_notes", class_ref.value, str(exc)) from exc
        if not updated:
            raise StoreError("set_class_notes", class_ref.value, "class not found")

    def add_participant(self, class_ref: ClassRef, user_id: str) -> None:
        try:
            models.Participant.objects.get_or_create(
                yoga_class_id=class_ref.value, customer_id=user_id
            )
        except DatabaseError as exc:
            raise StoreError("add_participant", f"{class_ref.value}/{user_id}", str(exc)) from exc

    def _update_participant(
        self, operation: str, class_ref: ClassRef, user_id: str, **fields: bool
    ) -> None:
        record_id = f"{class_ref.value}/{user_id}"
        try:
            updated = models.Participant.objects.filter(
                yoga_class_id=class_ref.value, customer_id=user_id
            ).update(**fields)
        except DatabaseError as exc:
            raise StoreError(operation, record_id, str(exc)) from exc
        if not updated:
            raise StoreError(operation, record_id, "participant not found")

    def set_participant_attended(self, class_ref: ClassRef, user_id: str, attended: bool) -> None:
        self._update_participant(
            "set_participant_attended", class_ref, user_id, attended=attended
        )

    def set_participant_missing_class_pass(
        self, class_ref: ClassRef, user_id: str, missing: bool
    ) -> None:
        self._update_participant(
            "set_participant_missing_class_pass", class_ref, user_id, missing_class_pass=missing
        )

    # Synchronisation with the point of sale

    def get_last_updated(self) -> datetime | None:
        state = models.SyncState.objects.filter(pk=SALES_SYNC_KEY).first()
        return state.last_updated if state is not None else None

    def set_last_updated(self, moment: datetime) -> None:
        try:
            models.SyncState.objects.update_or_create(
                pk=SALES_SYNC_KEY, defaults={"last_updated": moment}
            )
        except DatabaseError as exc:
            raise StoreError("set_last_updated", SALES_SYNC_KEY, str(exc)) from exc
