"""Attendance reconciliation.

Pure functions that decide how a user's orders change when attendance or the
missing-pass flag of a participant is toggled. They never persist anything:
each returns a ``ReconciliationResult`` listing every order it touched, in the
order the writes must be applied.
"""

from dataclasses import dataclass
from enum import Enum

from studio.domain.errors import ConsumptionEntryNotFoundError, NoCurrentTicketError
from studio.domain.models import ConsumptionEntry, Order, User, YogaClass
from studio.domain.value_objects import (
    DEFAULT_CATALOG,
    ClassRef,
    StatusClassPass,
    TicketCatalog,
)


class ChangeKind(Enum):
    ADD_CLASS = "add_class"
    REMOVE_CLASS = "remove_class"
    REPLACE_CLASS = "replace_class"
    SET_STATUS = "set_status"


@dataclass(frozen=True)
class OrderChange:
    """A single write to apply to one order.

    ``entry`` is the consumption entry added, removed or written for the
    class-level kinds and None for a status-only change.
    """

    kind: ChangeKind
    before: Order
    after: Order
    entry: ConsumptionEntry | None = None

    @property
    def order_id(self) -> str:
        return self.after.id


@dataclass(frozen=True)
class ReconciliationResult:
    user: User
    changes: tuple[OrderChange, ...] = ()
    ticket: Order | None = None

    @property
    def touched_orders(self) -> tuple[Order, ...]:
        return tuple(change.after for change in self.changes)

    @property
    def touched_order_ids(self) -> frozenset[str]:
        return frozenset(change.order_id for change in self.changes)


def _status_change(order: Order, status: StatusClassPass) -> OrderChange:
    return OrderChange(kind=ChangeKind.SET_STATUS, before=order, after=order.with_status(status))


def _finish(user: User, changes: list[OrderChange], ticket: Order | None) -> ReconciliationResult:
    updated = {change.order_id: change.after for change in changes}
    orders = tuple(updated.get(order.id, order) for order in user.orders)
    return ReconciliationResult(
        user=user.with_orders(orders), changes=tuple(changes), ticket=ticket
    )


def mark_attended(
    user: User, yoga_class: YogaClass, catalog: TicketCatalog = DEFAULT_CATALOG
) -> ReconciliationResult:
    """Charge the class to the user's current ticket.

    Raises:
        NoCurrentTicketError: If no order can pay for the class.
    """
    current = user.get_current_ticket(yoga_class.ref, yoga_class.valid_tickets, catalog)
    if current is None:
        raise NoCurrentTicketError(user.id, yoga_class.id)

    changes: list[OrderChange] = []
    ticket = current
    if not current.uses_class(yoga_class.ref):
        ticket = current.with_class_added(yoga_class.ref, ticked=True, catalog=catalog)
        changes.append(
            OrderChange(
                kind=ChangeKind.ADD_CLASS,
                before=current,
                after=ticket,
                entry=ticket.entry_for(yoga_class.ref),
            )
        )

    # A fresh tick on a later order settles older exhausted passes.
    for order in user.orders:
        if order.id == ticket.id:
            continue
        if order.status_class_pass == StatusClassPass.MISSING_TICKS and order.is_older(ticket):
            changes.append(_status_change(order, StatusClassPass.ALL_TICKED))

    return _finish(user, changes, ticket)


def mark_not_attended(
    user: User, class_ref: ClassRef, catalog: TicketCatalog = DEFAULT_CATALOG
) -> ReconciliationResult:
    """Refund the class to whichever order paid for it.

    Passes that were settled by a later tick and whose own last class is
    unticked go back to missing ticks.
    """
    changes: list[OrderChange] = []
    for order in user.orders:
        entry = order.entry_for(class_ref)
        if entry is not None:
            changes.append(
                OrderChange(
                    kind=ChangeKind.REMOVE_CLASS,
                    before=order,
                    after=order.with_class_removed(class_ref, catalog),
                    entry=entry,
                )
            )
        elif (
            order.status_class_pass == StatusClassPass.ALL_TICKED
            and order.last_entry is not None
            and not order.last_entry.ticked
        ):
            changes.append(_status_change(order, StatusClassPass.MISSING_TICKS))

    return _finish(user, changes, None)


def set_pass_missing(
    user: User,
    yoga_class: YogaClass,
    missing: bool,
    catalog: TicketCatalog = DEFAULT_CATALOG,
) -> ReconciliationResult:
    """Record whether the pass could be ticked at this class.

    Raises:
        NoCurrentTicketError: If no order can pay for the class.
        ConsumptionEntryNotFoundError: If the selected order was not charged
            for the class.
    """
    current = user.get_current_ticket(yoga_class.ref, yoga_class.valid_tickets, catalog)
    if current is None:
        raise NoCurrentTicketError(user.id, yoga_class.id)
    if not current.uses_class(yoga_class.ref):
        raise ConsumptionEntryNotFoundError(current.id, yoga_class.id)

    ticket = current.with_entry_ticked(yoga_class.ref, ticked=not missing, catalog=catalog)
    changes = [
        OrderChange(
            kind=ChangeKind.REPLACE_CLASS,
            before=current,
            after=ticket,
            entry=ticket.entry_for(yoga_class.ref),
        )
    ]

    for order in user.orders:
        if order.id == ticket.id or not order.is_older(ticket):
            continue
        last = order.last_entry
        if not missing and order.status_class_pass == StatusClassPass.MISSING_TICKS:
            changes.append(_status_change(order, StatusClassPass.ALL_TICKED))
        elif (
            missing
            and order.status_class_pass == StatusClassPass.ALL_TICKED
            and last is not None
            and (not last.ticked or last.class_ref == yoga_class.ref)
        ):
            changes.append(_status_change(order, StatusClassPass.MISSING_TICKS))

    return _finish(user, changes, ticket)
