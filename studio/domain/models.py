"""Domain models representing persisted state.

These are pure domain objects: every mutation returns a new instance.
Django ORM models are in studio/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Self

from studio.domain.value_objects import (
    DEFAULT_CATALOG,
    ClassRef,
    ProductType,
    StatusClassPass,
    TicketCatalog,
)


@dataclass(frozen=True)
class ConsumptionEntry:
    """One class paid for by an order.

    ``ticked`` records that the paper or app pass was marked at the class.
    """

    class_ref: ClassRef
    ticked: bool = True


@dataclass(frozen=True)
class Order:
    """Ledger of a purchased ticket or multi-class pass."""

    id: str
    product_id: int
    product_line_id: int
    num_total: int
    classes: tuple[ConsumptionEntry, ...] = ()
    status_class_pass: StatusClassPass = StatusClassPass.NOT_APPLICABLE
    version: int = 0

    def __post_init__(self) -> None:
        if self.num_total < 0:
            raise ValueError("Order capacity cannot be negative")
        object.__setattr__(self, "classes", self.sort_classes(self.classes))

    @staticmethod
    def sort_classes(entries: Iterable[ConsumptionEntry]) -> tuple[ConsumptionEntry, ...]:
        """Order entries from the earliest class to the latest."""
        return tuple(sorted(entries, key=lambda entry: entry.class_ref))

    @property
    def product_type(self) -> ProductType:
        return ProductType(self.product_id, self.product_line_id)

    @property
    def last_entry(self) -> ConsumptionEntry | None:
        return self.classes[-1] if self.classes else None

    @property
    def is_full(self) -> bool:
        return len(self.classes) == self.num_total

    @property
    def has_capacity(self) -> bool:
        return len(self.classes) < self.num_total

    def is_class_pass(self, catalog: TicketCatalog = DEFAULT_CATALOG) -> bool:
        return catalog.is_class_pass(self.product_type)

    def accepted_by(self, valid_tickets: Iterable[ProductType]) -> bool:
        return self.product_type in set(valid_tickets)

    def entry_for(self, class_ref: ClassRef) -> ConsumptionEntry | None:
        for entry in self.classes:
            if entry.class_ref == class_ref:
                return entry
        return None

    def uses_class(self, class_ref: ClassRef) -> bool:
        return self.entry_for(class_ref) is not None

    def calculate_status_class_pass(
        self, catalog: TicketCatalog = DEFAULT_CATALOG
    ) -> StatusClassPass:
        """Derive the pass status from the product type and the ledger.

        Once the pass is full only the latest class is checked: if it was
        ticked, every earlier class on the pass is considered ticked too.
        """
        if not self.is_class_pass(catalog):
            return StatusClassPass.NOT_APPLICABLE
        if len(self.classes) < self.num_total:
            return StatusClassPass.IN_USE
        if self.classes and self.classes[-1].ticked:
            return StatusClassPass.ALL_TICKED
        return StatusClassPass.MISSING_TICKS

    def number_missing_ticks(self) -> int:
        """Count unticked classes since the most recent ticked one."""
        if self.status_class_pass not in (
            StatusClassPass.IN_USE,
            StatusClassPass.MISSING_TICKS,
        ):
            return 0

        missing = 0
        for entry in reversed(self.classes):
            if entry.ticked:
                break
            missing += 1
        return missing

    def is_older(self, other: "Order") -> bool:
        """True if this order's latest class is strictly before other's."""
        if not self.classes or not other.classes:
            return False
        return ClassRef.compare(self.classes[-1].class_ref, other.classes[-1].class_ref) < 0

    # Mutations

    def with_status(self, status: StatusClassPass) -> Self:
        return replace(self, status_class_pass=status)

    def with_recalculated_status(self, catalog: TicketCatalog = DEFAULT_CATALOG) -> Self:
        return self.with_status(self.calculate_status_class_pass(catalog))

    def with_class_added(
        self, class_ref: ClassRef, ticked: bool = True, catalog: TicketCatalog = DEFAULT_CATALOG
    ) -> Self:
        entry = ConsumptionEntry(class_ref=class_ref, ticked=ticked)
        return replace(self, classes=self.classes + (entry,)).with_recalculated_status(catalog)

    def with_class_removed(
        self, class_ref: ClassRef, catalog: TicketCatalog = DEFAULT_CATALOG
    ) -> Self:
        remaining = tuple(e for e in self.classes if e.class_ref != class_ref)
        return replace(self, classes=remaining).with_recalculated_status(catalog)

    def with_entry_ticked(
        self, class_ref: ClassRef, ticked: bool, catalog: TicketCatalog = DEFAULT_CATALOG
    ) -> Self:
        entries = tuple(
            ConsumptionEntry(class_ref=e.class_ref, ticked=ticked)
            if e.class_ref == class_ref
            else e
            for e in self.classes
        )
        return replace(self, classes=entries).with_recalculated_status(catalog)


@dataclass(frozen=True)
class User:
    """A studio customer and the orders they own."""

    id: str
    first_name: str
    surname: str
    is_member: bool = False
    orders: tuple[Order, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}".strip()

    def get_order(self, order_id: str) -> Order | None:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def with_orders(self, orders: Iterable[Order]) -> Self:
        return replace(self, orders=tuple(orders))

    def get_current_ticket(
        self,
        class_ref: ClassRef,
        valid_tickets: Iterable[ProductType],
        catalog: TicketCatalog = DEFAULT_CATALOG,
    ) -> Order | None:
        """Pick the order that pays for ``class_ref``, or None.

        A full order that already lists the class wins, so that selecting again
        for the same class returns the order it was charged to. Otherwise the
        accepted orders with capacity left are considered, 10-class passes
        first, and the most used one is drained before a fresh one is started.
        """
        accepted = set(valid_tickets)

        for order in self.orders:
            if order.product_type in accepted and order.is_full and order.uses_class(class_ref):
                return order

        candidates = [o for o in self.orders if o.product_type in accepted and o.has_capacity]
        if not candidates:
            return None

        candidates.sort(key=lambda o: not o.is_class_pass(catalog))
        return max(candidates, key=lambda o: len(o.classes))

    def total_missing_ticks(self) -> int:
        return sum(order.number_missing_ticks() for order in self.orders)


@dataclass(frozen=True)
class Participant:
    """A user on the roster of one class.

    ``missing_class_pass`` only means something while ``attended`` is true.
    """

    id: str
    user: User
    attended: bool = False
    missing_class_pass: bool = False


@dataclass(frozen=True)
class ClassSummary:
    """General information of a class, without its roster."""

    ref: ClassRef

    @property
    def id(self) -> str:
        return self.ref.value

    @property
    def time(self) -> datetime:
        return self.ref.starts_at


@dataclass(frozen=True)
class YogaClass:
    """Domain representation of a class with its roster."""

    ref: ClassRef
    participants: tuple[Participant, ...] = ()
    valid_tickets: tuple[ProductType, ...] = ()
    notes: str = ""

    @property
    def id(self) -> str:
        return self.ref.value

    @property
    def time(self) -> datetime:
        return self.ref.starts_at

    def get_participant(self, user_id: str) -> Participant | None:
        for participant in self.participants:
            if participant.id == user_id:
                return participant
        return None

    def with_participant(self, participant: Participant) -> Self:
        """Replace the participant with the same id, or append it."""
        if self.get_participant(participant.id) is None:
            return replace(self, participants=self.participants + (participant,))
        return replace(
            self,
            participants=tuple(
                participant if p.id == participant.id else p for p in self.participants
            ),
        )

    def with_notes(self, notes: str) -> Self:
        return replace(self, notes=notes)


@dataclass(frozen=True)
class Customer:
    """Customer details attached to a sale."""

    login: str
    first_name: str = ""
    surname: str = ""
    cid: str = ""
    email: str = ""


@dataclass(frozen=True)
class Sale:
    """A sale reported by the point-of-sale API."""

    order_number: str
    sold_at: datetime
    product_id: int
    product_line_id: int
    quantity: int
    customer: Customer
    price: float = 0.0

    @property
    def product_type(self) -> ProductType:
        return ProductType(self.product_id, self.product_line_id)


@dataclass(frozen=True)
class RosterRow:
    """One line of a class roster export."""

    login: str
    first_name: str = ""
    surname: str = ""
    cid: str = ""
    email: str = ""
