"""Builders for domain objects and seeded stores used across the tests."""

from datetime import datetime, timedelta

from studio.domain import (
    DEFAULT_CATALOG,
    ClassRef,
    ConsumptionEntry,
    Order,
    ProductType,
    StatusClassPass,
    User,
)
from studio.stores.interfaces import StudioStore

PASS = DEFAULT_CATALOG.ten_class_pass
SINGLE_MEMBER = DEFAULT_CATALOG.single_class_member
SINGLE = DEFAULT_CATALOG.single_class_non_member
MEMBERSHIP = DEFAULT_CATALOG.membership

BASE = datetime(2025, 1, 6, 18, 0)


def ref(day: int) -> ClassRef:
    """Class ``day`` days after the first Monday of 2025, at 18:00."""
    return ClassRef.from_datetime(BASE + timedelta(days=day))


def make_pass(
    order_id: str,
    used: int = 0,
    first_day: int = 0,
    unticked_last: int = 0,
    status: StatusClassPass | None = None,
    num_total: int = 10,
) -> Order:
    """A 10-class pass used on consecutive days, the last few unticked."""
    entries = tuple(
        ConsumptionEntry(class_ref=ref(first_day + i), ticked=i < used - unticked_last)
        for i in range(used)
    )
    order = Order(
        id=order_id,
        product_id=PASS.product_id,
        product_line_id=PASS.product_line_id,
        num_total=num_total,
        classes=entries,
    )
    return order.with_status(status or order.calculate_status_class_pass())


def make_ticket(
    order_id: str, product: ProductType = SINGLE, used_on: int | None = None, num_total: int = 1
) -> Order:
    entries = () if used_on is None else (ConsumptionEntry(class_ref=ref(used_on)),)
    return Order(
        id=order_id,
        product_id=product.product_id,
        product_line_id=product.product_line_id,
        num_total=num_total,
        classes=entries,
    )


def make_user(*orders: Order, user_id: str = "alice", surname: str = "Smith") -> User:
    return User(id=user_id, first_name=user_id.capitalize(), surname=surname, orders=orders)


def seed_user(store: StudioStore, user: User) -> None:
    """Write a user, its orders and the classes they were used for."""
    for order in user.orders:
        for entry in order.classes:
            if store.get_class(entry.class_ref) is None:
                store.save_class(entry.class_ref, DEFAULT_CATALOG.default_tickets, "")
    store.create_user(user.id, user.first_name, user.surname, user.is_member)
    for order in user.orders:
        store.create_order(order)
        store.attach_order(user.id, order.id)


def seed_class(
    store: StudioStore,
    class_ref: ClassRef,
    participants: dict[str, tuple[bool, bool]] | None = None,
    valid_tickets: tuple[ProductType, ...] = DEFAULT_CATALOG.default_tickets,
    notes: str = "",
) -> None:
    """Write a class and its roster as ``{user_id: (attended, missing_class_pass)}``."""
    store.save_class(class_ref, valid_tickets, notes)
    for user_id, (attended, missing) in (participants or {}).items():
        store.add_participant(class_ref, user_id)
        store.set_participant_attended(class_ref, user_id, attended)
        store.set_participant_missing_class_pass(class_ref, user_id, missing)
