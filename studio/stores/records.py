"""Conversion between stored records and domain models.

Records are the document shape orders, users and classes are stored in
(camelCase keys, references by id). Building a domain object checks every
required field and raises ValidationError naming the record and the field.
"""

from collections.abc import Mapping
from typing import Any

from studio.domain import (
    ClassRef,
    ConsumptionEntry,
    Order,
    Participant,
    ProductType,
    StatusClassPass,
    User,
    YogaClass,
)
from studio.domain.errors import ValidationError


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require(data: Mapping[str, Any], record: str, record_id: str, field: str, check) -> Any:
    value = data.get(field)
    if not check(value):
        raise ValidationError(record, record_id, field)
    return value


def _class_ref(value: Any, record: str, record_id: str, field: str) -> ClassRef:
    if not isinstance(value, str):
        raise ValidationError(record, record_id, field)
    try:
        return ClassRef.from_string(value)
    except ValueError as exc:
        raise ValidationError(record, record_id, field) from exc


# Orders


def entry_to_record(entry: ConsumptionEntry) -> dict[str, Any]:
    return {"classRef": entry.class_ref.value, "ticked": entry.ticked}


def order_from_record(order_id: str, data: Mapping[str, Any]) -> Order:
    product_id = _require(data, "Order", order_id, "productId", _is_int)
    product_line_id = _require(data, "Order", order_id, "productLineId", _is_int)
    num_total = _require(data, "Order", order_id, "numTotal", _is_int)
    classes = _require(data, "Order", order_id, "classes", lambda v: isinstance(v, list))
    status = _require(data, "Order", order_id, "statusClassPass", lambda v: isinstance(v, str))
    version = data.get("version", 0)
    if not _is_int(version):
        raise ValidationError("Order", order_id, "version")

    entries = []
    for item in classes:
        if not isinstance(item, Mapping) or not isinstance(item.get("ticked"), bool):
            raise ValidationError("Order", order_id, "classes")
        entries.append(
            ConsumptionEntry(
                class_ref=_class_ref(item.get("classRef"), "Order", order_id, "classes"),
                ticked=item["ticked"],
            )
        )

    try:
        return Order(
            id=order_id,
            product_id=product_id,
            product_line_id=product_line_id,
            num_total=num_total,
            classes=tuple(entries),
            status_class_pass=StatusClassPass.from_string(status),
            version=version,
        )
    except ValueError as exc:
        raise ValidationError("Order", order_id, "numTotal") from exc


def order_to_record(order: Order) -> dict[str, Any]:
    return {
        "productId": order.product_id,
        "productLineId": order.product_line_id,
        "numTotal": order.num_total,
        "classes": [entry_to_record(e) for e in order.classes],
        "statusClassPass": order.status_class_pass.value,
        "version": order.version,
    }


# Users


def order_ids_from_user_record(user_id: str, data: Mapping[str, Any]) -> list[str]:
    orders = _require(data, "User", user_id, "orders", lambda v: isinstance(v, list))
    return [str(order_id) for order_id in orders]


def user_from_record(user_id: str, data: Mapping[str, Any], orders: list[Order]) -> User:
    first_name = _require(data, "User", user_id, "firstName", lambda v: isinstance(v, str))
    surname = _require(data, "User", user_id, "surname", lambda v: isinstance(v, str))
    is_member = _require(data, "User", user_id, "isMember", lambda v: isinstance(v, bool))
    order_ids_from_user_record(user_id, data)
    return User(
        id=user_id,
        first_name=first_name,
        surname=surname,
        is_member=is_member,
        orders=tuple(orders),
    )


# Classes


def valid_tickets_from_record(class_id: str, data: Mapping[str, Any]) -> tuple[ProductType, ...]:
    raw = _require(data, "Class", class_id, "validTickets", lambda v: isinstance(v, list))
    tickets = []
    for item in raw:
        if (
            not isinstance(item, Mapping)
            or not _is_int(item.get("productId"))
            or not _is_int(item.get("productLineId"))
        ):
            raise ValidationError("Class", class_id, "validTickets")
        tickets.append(ProductType(item["productId"], item["productLineId"]))
    return tuple(tickets)


def valid_tickets_to_record(
    tickets: tuple[ProductType, ...] | list[ProductType],
) -> list[dict[str, int]]:
    return [{"productId": t.product_id, "productLineId": t.product_line_id} for t in tickets]


def class_from_record(
    class_id: str, data: Mapping[str, Any], participants: list[Participant]
) -> YogaClass:
    ref = _class_ref(class_id, "Class", class_id, "id")
    valid_tickets = valid_tickets_from_record(class_id, data)
    notes = _require(data, "Class", class_id, "notes", lambda v: isinstance(v, str))
    return YogaClass(
        ref=ref,
        participants=tuple(sorted(participants, key=lambda p: p.user.surname.casefold())),
        valid_tickets=valid_tickets,
        notes=notes,
    )


def participant_from_record(
    participant_id: str, data: Mapping[str, Any], user: User
) -> Participant:
    attended = _require(
        data, "Participant", participant_id, "attended", lambda v: isinstance(v, bool)
    )
    missing = _require(
        data, "Participant", participant_id, "missingClassPass", lambda v: isinstance(v, bool)
    )
    return Participant(id=participant_id, user=user, attended=attended, missing_class_pass=missing)
