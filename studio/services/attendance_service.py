"""Attendance service - all attendance business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every transition computes its order changes with the pure functions in
studio.domain.reconciliation, then writes them and the participant flag
inside a single ``store.atomic()`` block. An order that changed since it was
read makes the store refuse the write; the transition is then recomputed from
fresh state, up to ``MAX_ATTEMPTS`` times. The returned state is read back
from the store, never taken from the in-memory computation.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from studio.domain import ClassRef, Order, Participant, TicketCatalog, User, YogaClass
from studio.domain import reconciliation
from studio.domain.errors import (
    ClassNotFoundError,
    ConcurrentUpdateError,
    InvalidClassIdError,
    ParticipantNotFoundError,
    StoreError,
    UserNotFoundError,
)
from studio.domain.reconciliation import ChangeKind, OrderChange, ReconciliationResult
from studio.domain.value_objects import DEFAULT_CATALOG
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


def parse_class_id(class_id: str) -> ClassRef:
    try:
        return ClassRef.from_string(class_id)
    except ValueError as exc:
        raise InvalidClassIdError(class_id) from exc


@dataclass(frozen=True)
class AttendanceResult:
    """State after a transition, re-read from the store."""

    yoga_class: YogaClass
    user: User
    touched_orders: tuple[Order, ...] = ()

    @property
    def participant(self) -> Participant | None:
        return self.yoga_class.get_participant(self.user.id)


class AttendanceService:
    """Service for marking attendance and pass ticks."""

    def __init__(
        self,
        store: StudioStore,
        catalog: TicketCatalog | None = None,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self._store = store
        self._catalog = catalog or DEFAULT_CATALOG
        self._max_attempts = max_attempts

    # Reads

    def _get_class(self, class_id: str) -> YogaClass:
        yoga_class = self._store.get_class(parse_class_id(class_id))
        if yoga_class is None:
            raise ClassNotFoundError(class_id)
        return yoga_class

    def _get_user(self, user_id: str) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _get_participant(self, class_id: str, user_id: str) -> tuple[YogaClass, Participant]:
        yoga_class = self._get_class(class_id)
        participant = yoga_class.get_participant(user_id)
        if participant is None:
            raise ParticipantNotFoundError(class_id, user_id)
        return yoga_class, participant

    def select_ticket(self, user_id: str, class_id: str) -> Order | None:
        """Return the order that would pay for the class, or None."""
        yoga_class = self._get_class(class_id)
        user = self._get_user(user_id)
        return user.get_current_ticket(yoga_class.ref, yoga_class.valid_tickets, self._catalog)

    def total_missing_ticks(self, user_id: str) -> int:
        return self._get_user(user_id).total_missing_ticks()

    # Transitions

    def set_attendance(self, class_id: str, user_id: str, attended: bool) -> AttendanceResult:
        """Mark a participant as attended or not and charge or refund their ticket.

        Raises:
            InvalidClassIdError: If the class_id is not a valid class id.
            ClassNotFoundError: If the class does not exist.
            ParticipantNotFoundError: If the user is not on the roster.
            NoCurrentTicketError: If attending and no order can pay for the class.
            ConcurrentUpdateError: If an order kept changing while the
                transition was being saved.
            StoreError: If a write fails. Nothing from the transition is kept.
        """
        return self._retrying(lambda: self._set_attendance(class_id, user_id, attended))

    def _set_attendance(self, class_id: str, user_id: str, attended: bool) -> AttendanceResult:
        yoga_class, participant = self._get_participant(class_id, user_id)
        if participant.attended == attended:
            return AttendanceResult(yoga_class=yoga_class, user=participant.user)

        if attended:
            result = reconciliation.mark_attended(participant.user, yoga_class, self._catalog)
        else:
            result = reconciliation.mark_not_attended(
                participant.user, yoga_class.ref, self._catalog
            )

        try:
            with self._store.atomic():
                self._apply(result.changes)
                self._store.set_participant_attended(yoga_class.ref, user_id, attended)
        except ConcurrentUpdateError:
            raise
        except StoreError as exc:
            logger.error(
                "Attendance of %s in class %s not saved: %s", user_id, yoga_class.id, exc
            )
            raise

        logger.info(
            "Set attendance of %s in class %s to %s (orders touched: %s)",
            user_id,
            yoga_class.id,
            attended,
            ", ".join(sorted(result.touched_order_ids)) or "none",
        )
        return self._reload(yoga_class.ref, user_id, result)

    def set_pass_missing(self, class_id: str, user_id: str, missing: bool) -> AttendanceResult:
        """Record whether the participant's pass could be ticked at the class.

        Raises:
            InvalidClassIdError: If the class_id is not a valid class id.
            ClassNotFoundError: If the class does not exist.
            ParticipantNotFoundError: If the user is not on the roster.
            NoCurrentTicketError: If no order can pay for the class.
            ConsumptionEntryNotFoundError: If the selected order was not
                charged for the class.
            ConcurrentUpdateError: If an order kept changing while the
                transition was being saved.
            StoreError: If a write fails. Nothing from the transition is kept.
        """
        return self._retrying(lambda: self._set_pass_missing(class_id, user_id, missing))

    def _set_pass_missing(self, class_id: str, user_id: str, missing: bool) -> AttendanceResult:
        yoga_class, participant = self._get_participant(class_id, user_id)
        if participant.missing_class_pass == missing:
            return AttendanceResult(yoga_class=yoga_class, user=participant.user)

        result = reconciliation.set_pass_missing(
            participant.user, yoga_class, missing, self._catalog
        )

        try:
            with self._store.atomic():
                self._apply(result.changes)
                self._store.set_participant_missing_class_pass(yoga_class.ref, user_id, missing)
        except ConcurrentUpdateError:
            raise
        except StoreError as exc:
            logger.error(
                "Missing pass of %s in class %s not saved: %s", user_id, yoga_class.id, exc
            )
            raise

        logger.info(
            "Set missing pass of %s in class %s to %s on order %s",
            user_id,
            yoga_class.id,
            missing,
            result.ticket.id if result.ticket else "-",
        )
        return self._reload(yoga_class.ref, user_id, result)

    # Persistence

    def _retrying(self, transition: Callable[[], AttendanceResult]) -> AttendanceResult:
        """Run a transition again from fresh state when an order changed under it."""
        attempt = 1
        while True:
            try:
                return transition()
            except ConcurrentUpdateError as exc:
                if attempt >= self._max_attempts:
                    logger.error("Giving up after %d attempts: %s", attempt, exc)
                    raise
                logger.warning("Concurrent update, retrying (attempt %d): %s", attempt, exc)
                attempt += 1

    def _apply(self, changes: tuple[OrderChange, ...]) -> None:
        for change in changes:
            self._apply_change(change)

    def _apply_change(self, change: OrderChange) -> None:
        order = change.after
        version = change.before.version
        if change.kind == ChangeKind.ADD_CLASS:
            self._store.add_order_class(order.id, change.entry, order.status_class_pass, version)
        elif change.kind == ChangeKind.REMOVE_CLASS:
            self._store.remove_order_class(
                order.id, change.entry.class_ref, order.status_class_pass, version
            )
        elif change.kind == ChangeKind.REPLACE_CLASS:
            self._store.replace_order_class(
                order.id, change.entry, order.status_class_pass, version
            )
        else:
            self._store.set_order_status(order.id, order.status_class_pass, version)
        logger.debug(
            "Order %s: %s -> %s", order.id, change.kind.value, order.status_class_pass.value
        )

    def _reload(
        self, class_ref: ClassRef, user_id: str, result: ReconciliationResult
    ) -> AttendanceResult:
        yoga_class = self._get_class(class_ref.value)
        user = self._get_user(user_id)
        touched = tuple(o for o in user.orders if o.id in result.touched_order_ids)
        return AttendanceResult(yoga_class=yoga_class, user=user, touched_orders=touched)
