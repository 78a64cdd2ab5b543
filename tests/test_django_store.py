"""Integration tests for the Django ORM store.

Run with: pytest tests/test_django_store.py -v
"""

from datetime import datetime, timezone

import pytest

from studio.domain import ConsumptionEntry, StatusClassPass
from studio.domain.errors import ConcurrentUpdateError, StoreError
from studio.services.attendance_service import AttendanceService
from tests.factories import (
    SINGLE,
    make_pass,
    make_ticket,
    make_user,
    ref,
    seed_class,
    seed_user,
)


class TestDjangoStudioStore:
    """Tests for DjangoStudioStore."""

    def test_user_round_trip(self, django_store):
        """A seeded user reads back equal, orders and ticks included."""
        user = make_user(make_pass("p1", used=10, unticked_last=2), make_ticket("s1", used_on=12))
        seed_user(django_store, user)
        assert django_store.get_user("alice") == user

    def test_unknown_user(self, django_store):
        """Unknown user reads as None with no orders."""
        assert django_store.get_user("nobody") is None
        assert django_store.get_user_orders("nobody") == []

    def test_duplicate_user_is_a_store_error(self, django_store):
        """Creating an existing login raises StoreError and keeps one row."""
        seed_user(django_store, make_user())
        with pytest.raises(StoreError):
            django_store.create_user("alice", "Alice", "Smith")
        assert len(django_store.list_users()) == 1

    def test_list_users_by_surname(self, django_store):
        """list_users sorts by surname."""
        seed_user(django_store, make_user(user_id="alice", surname="Smith"))
        seed_user(django_store, make_user(user_id="bob", surname="Adams"))
        assert [u.id for u in django_store.list_users()] == ["bob", "alice"]

    def test_orders_keep_attachment_order(self, django_store):
        """A user's orders come back in the order they were attached, not by id."""
        seed_user(django_store, make_user(make_ticket("999"), make_ticket("1000")))
        user = django_store.get_user("alice")

        assert [o.id for o in user.orders] == ["999", "1000"]
        assert user.get_current_ticket(ref(5), (SINGLE,)).id == "999"

    def test_attaching_again_keeps_position(self, django_store):
        """Re-attaching an order to its owner does not move it to the end."""
        seed_user(django_store, make_user(make_ticket("b"), make_ticket("a")))
        django_store.attach_order("alice", "b")
        assert [o.id for o in django_store.get_user_orders("alice")] == ["b", "a"]

    def test_set_member(self, django_store):
        """set_member updates the membership flag."""
        seed_user(django_store, make_user())
        django_store.set_member("alice", True)
        assert django_store.get_user("alice").is_member is True

    def test_add_order_class_bumps_version(self, django_store):
        """add_order_class writes the entry and returns the new version."""
        seed_user(django_store, make_user(make_pass("p1", used=2)))
        seed_class(django_store, ref(5))

        version = django_store.add_order_class(
            "p1", ConsumptionEntry(ref(5)), StatusClassPass.IN_USE, expected_version=0
        )

        order = django_store.get_order("p1")
        assert version == 1
        assert order.version == 1
        assert order.entry_for(ref(5)) == ConsumptionEntry(ref(5), ticked=True)

    def test_stale_version_is_rejected(self, django_store):
        """A stale expected_version raises ConcurrentUpdateError and writes nothing."""
        seed_user(django_store, make_user(make_pass("p1", used=2)))
        with pytest.raises(ConcurrentUpdateError) as excinfo:
            django_store.set_order_status("p1", StatusClassPass.ALL_TICKED, expected_version=3)

        assert excinfo.value.actual_version == 0
        assert django_store.get_order("p1").status_class_pass == StatusClassPass.IN_USE

    def test_missing_order_is_not_a_conflict(self, django_store):
        """Writing to a missing order is a plain StoreError."""
        with pytest.raises(StoreError) as excinfo:
            django_store.set_order_status("nope", StatusClassPass.IN_USE, expected_version=0)
        assert not isinstance(excinfo.value, ConcurrentUpdateError)

    def test_replace_and_remove_order_class(self, django_store):
        """Each versioned write bumps the version once."""
        seed_user(django_store, make_user(make_pass("p1", used=3)))
        django_store.replace_order_class(
            "p1", ConsumptionEntry(ref(2), ticked=False), StatusClassPass.IN_USE, 0
        )
        django_store.remove_order_class("p1", ref(0), StatusClassPass.IN_USE, 1)

        order = django_store.get_order("p1")
        assert order.classes == (ConsumptionEntry(ref(1)), ConsumptionEntry(ref(2), ticked=False))
        assert order.version == 2

    def test_atomic_rolls_back(self, django_store):
        """An exception inside atomic() undoes the writes."""
        seed_user(django_store, make_user(make_pass("p1", used=2)))
        with pytest.raises(RuntimeError):
            with django_store.atomic():
                django_store.set_order_status("p1", StatusClassPass.ALL_TICKED, 0)
                raise RuntimeError("boom")
        assert django_store.get_order("p1").version == 0

    def test_class_roster(self, django_store):
        """get_class returns notes and participant flags."""
        seed_user(django_store, make_user())
        seed_class(django_store, ref(1), {"alice": (True, True)}, notes="Bring mats")

        yoga_class = django_store.get_class(ref(1))
        participant = yoga_class.get_participant("alice")
        assert yoga_class.notes == "Bring mats"
        assert participant.attended is True
        assert participant.missing_class_pass is True

    def test_adding_participant_again_keeps_flags(self, django_store):
        """add_participant leaves an existing participant alone."""
        seed_user(django_store, make_user())
        seed_class(django_store, ref(1), {"alice": (True, False)})
        django_store.add_participant(ref(1), "alice")
        assert django_store.get_class(ref(1)).get_participant("alice").attended is True

    def test_update_unknown_participant(self, django_store):
        """Flag updates for someone off the roster raise StoreError."""
        seed_class(django_store, ref(1))
        with pytest.raises(StoreError):
            django_store.set_participant_attended(ref(1), "alice", True)

    def test_list_classes_sorted(self, django_store):
        """list_classes returns classes by start time."""
        for day in (7, 1, 3):
            seed_class(django_store, ref(day))
        assert [c.ref for c in django_store.list_classes()] == [ref(1), ref(3), ref(7)]

    def test_last_updated(self, django_store):
        """The sync timestamp starts empty and reads back as written."""
        assert django_store.get_last_updated() is None
        moment = datetime(2025, 1, 6, 9, 30, tzinfo=timezone.utc)
        django_store.set_last_updated(moment)
        assert django_store.get_last_updated() == moment


def test_attendance_is_persisted_in_the_database(django_store):
    """A full attendance transition commits every order change to the database."""
    seed_user(
        django_store,
        make_user(
            make_pass("old", used=10, first_day=-20, unticked_last=1),
            make_pass("cur", used=1),
        ),
    )
    seed_class(django_store, ref(5), {"alice": (False, False)})

    result = AttendanceService(django_store).set_attendance(ref(5).value, "alice", True)

    assert {o.id for o in result.touched_orders} == {"old", "cur"}
    assert django_store.get_order("old").status_class_pass == StatusClassPass.ALL_TICKED
    assert django_store.get_order("cur").entry_for(ref(5)) is not None
    assert django_store.get_class(ref(5)).get_participant("alice").attended is True
