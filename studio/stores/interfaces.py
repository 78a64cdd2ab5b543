"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every write raises
StoreError on failure; order writes raise ConcurrentUpdateError when the
stored version differs from ``expected_version``.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from studio.domain import (
    ClassRef,
    ClassSummary,
    ConsumptionEntry,
    Order,
    ProductType,
    StatusClassPass,
    User,
    YogaClass,
)


class StudioStore(ABC):
    """Interface for studio persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager committing the enclosed writes together."""
        ...

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> User | None:
        """Return a user with their orders, or None if not found.

        Malformed order records are left out of the user's orders.
        """
        ...

    @abstractmethod
    def list_users(self) -> list[User]:
        """Return all users ordered by surname."""
        ...

    @abstractmethod
    def create_user(
        self,
        user_id: str,
        first_name: str,
        surname: str,
        is_member: bool = False,
        cid: str = "",
        email: str = "",
    ) -> None:
        ...

    @abstractmethod
    def set_member(self, user_id: str, is_member: bool) -> None:
        ...

    @abstractmethod
    def attach_order(self, user_id: str, order_id: str) -> None:
        """Add the order to the user's orders unless it is already there."""
        ...

    # Orders

    @abstractmethod
    def get_order(self, order_id: str) -> Order | None:
        """Return an order by ID, or None if not found."""
        ...

    @abstractmethod
    def get_user_orders(self, user_id: str) -> list[Order]:
        """Return the orders owned by a user, empty if the user is unknown."""
        ...

    @abstractmethod
    def create_order(self, order: Order) -> None:
        ...

    @abstractmethod
    def add_order_class(
        self,
        order_id: str,
        entry: ConsumptionEntry,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        """Append a consumption entry and write the status. Returns the new version."""
        ...

    @abstractmethod
    def remove_order_class(
        self,
        order_id: str,
        class_ref: ClassRef,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        """Remove the entry for the class and write the status."""
        ...

    @abstractmethod
    def replace_order_class(
        self,
        order_id: str,
        entry: ConsumptionEntry,
        status: StatusClassPass,
        expected_version: int,
    ) -> int:
        """Overwrite the entry for the class and write the status."""
        ...

    @abstractmethod
    def set_order_status(
        self, order_id: str, status: StatusClassPass, expected_version: int
    ) -> int:
        ...

    # Classes

    @abstractmethod
    def get_class(self, class_ref: ClassRef) -> YogaClass | None:
        """Return a class with its participants sorted by surname, or None."""
        ...

    @abstractmethod
    def list_classes(self) -> list[ClassSummary]:
        """Return all classes ordered by start time."""
        ...

    @abstractmethod
    def save_class(
        self, class_ref: ClassRef, valid_tickets: tuple[ProductType, ...], notes: str
    ) -> None:
        """Create the class, or overwrite its valid tickets and notes."""
        ...

    @abstractmethod
    def set_class_notes(self, class_ref: ClassRef, notes: str) -> None:
        ...

    @abstractmethod
    def add_participant(self, class_ref: ClassRef, user_id: str) -> None:
        """Put a user on the roster, not attended and with their pass.

        A user already on the roster keeps their flags.
        """
        ...

    @abstractmethod
    def set_participant_attended(self, class_ref: ClassRef, user_id: str, attended: bool) -> None:
        ...

    @abstractmethod
    def set_participant_missing_class_pass(
        self, class_ref: ClassRef, user_id: str, missing: bool
    ) -> None:
        ...

    # Synchronisation with the point of sale

    @abstractmethod
    def get_last_updated(self) -> datetime | None:
        """Return when sales were last imported."""
        ...

    @abstractmethod
    def set_last_updated(self, moment: datetime) -> None:
        ...
