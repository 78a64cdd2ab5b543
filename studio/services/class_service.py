"""Class service - class catalog, rosters and notes."""

import logging
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable

from studio.domain import (
    ClassRef,
    ClassSummary,
    ProductType,
    RosterRow,
    TicketCatalog,
    YogaClass,
)
from studio.domain.errors import (
    ClassNotFoundError,
    InvalidClassIdError,
    StoreError,
    UserNotFoundError,
)
from studio.domain.value_objects import DEFAULT_CATALOG
from studio.services.attendance_service import parse_class_id
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


class ClassPeriod(Enum):
    ALL = "all"
    PAST = "past"
    WEEK = "week"
    FUTURE = "future"


def week_bounds(today: date) -> tuple[datetime, datetime]:
    """Return the start of the ISO week containing today and the start of the next one."""
    monday = today - timedelta(days=today.weekday())
    start = datetime.combine(monday, time.min)
    return start, start + timedelta(days=7)


class ClassService:
    """Service for class catalog operations."""

    def __init__(self, store: StudioStore, catalog: TicketCatalog | None = None) -> None:
        self._store = store
        self._catalog = catalog or DEFAULT_CATALOG

    def list_classes(
        self, period: ClassPeriod = ClassPeriod.ALL, today: date | None = None
    ) -> list[ClassSummary]:
        """Return classes ordered by start time.

        Past classes started before this week's Monday, future classes start
        after this week's Sunday.
        """
        classes = self._store.list_classes()
        if period == ClassPeriod.ALL:
            return classes

        start, end = week_bounds(today or date.today())
        if period == ClassPeriod.PAST:
            return [c for c in classes if c.time < start]
        if period == ClassPeriod.WEEK:
            return [c for c in classes if start <= c.time < end]
        return [c for c in classes if c.time >= end]

    def get_class(self, class_id: str) -> YogaClass:
        """Return a class with its roster.

        Raises:
            InvalidClassIdError: If the class_id is not a valid class id.
            ClassNotFoundError: If the class does not exist.
        """
        yoga_class = self._store.get_class(parse_class_id(class_id))
        if yoga_class is None:
            raise ClassNotFoundError(class_id)
        return yoga_class

    def update_notes(self, class_id: str, notes: str) -> YogaClass:
        yoga_class = self.get_class(class_id)
        if yoga_class.notes == notes:
            return yoga_class

        self._store.set_class_notes(yoga_class.ref, notes)
        logger.info("Updated notes of class %s", yoga_class.id)
        return yoga_class.with_notes(notes)

    def add_participant(self, class_id: str, user_id: str) -> YogaClass:
        """Put an existing user on the roster of a class.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        yoga_class = self.get_class(class_id)
        if yoga_class.get_participant(user_id) is not None:
            return yoga_class
        if self._store.get_user(user_id) is None:
            raise UserNotFoundError(user_id)

        self._store.add_participant(yoga_class.ref, user_id)
        logger.info("Added %s to class %s", user_id, yoga_class.id)
        return self.get_class(class_id)

    def create_class(
        self,
        class_time: str,
        valid_tickets: Iterable[ProductType] | None = None,
        notes: str = "",
        roster: Iterable[RosterRow] = (),
    ) -> YogaClass:
        """Create a class from its time (``YYYY-MM-DD HH:mm``) and roster.

        If the class already exists its valid tickets are replaced and the
        notes are appended to the existing ones. Roster users unknown to the
        studio are created as non-members without orders. Users already on
        the roster keep their attendance.
        """
        try:
            ref = ClassRef.from_input(class_time)
        except ValueError as exc:
            raise InvalidClassIdError(class_time) from exc

        tickets = tuple(valid_tickets) if valid_tickets else self._catalog.default_tickets
        existing = self._store.get_class(ref)
        if existing is not None and existing.notes and notes:
            notes = f"{existing.notes}\n{notes}"
        elif existing is not None and not notes:
            notes = existing.notes
        on_roster = {p.id for p in existing.participants} if existing is not None else set()

        try:
            with self._store.atomic():
                self._store.save_class(ref, tickets, notes)
                for row in roster:
                    login = row.login.strip()
                    if not login or login in on_roster:
                        continue
                    if self._store.get_user(login) is None:
                        self._store.create_user(
                            login,
                            first_name=row.first_name,
                            surname=row.surname,
                            is_member=False,
                            cid=row.cid,
                            email=row.email,
                        )
                    self._store.add_participant(ref, login)
                    on_roster.add(login)
        except StoreError as exc:
            logger.error("Class %s not created: %s", ref, exc)
            raise

        logger.info("Saved class %s with %d participants", ref, len(on_roster))
        return self.get_class(ref.value)
