"""Unit tests for stored record validation.

Run with: pytest tests/test_records.py -v
"""

import logging

import pytest

from studio.domain import StatusClassPass
from studio.domain.errors import ErrorCode, ValidationError
from studio.stores import records
from tests.factories import PASS, make_pass, make_user, ref, seed_class, seed_user


def order_record(**overrides):
    data = {
        "productId": PASS.product_id,
        "productLineId": PASS.product_line_id,
        "numTotal": 10,
        "classes": [{"classRef": ref(0).value, "ticked": True}],
        "statusClassPass": "inUse",
    }
    data.update(overrides)
    return data


class TestOrderRecord:
    def test_parses_order(self):
        """A valid record becomes an Order at version 0."""
        order = records.order_from_record("o1", order_record())
        assert order.product_type == PASS
        assert order.status_class_pass == StatusClassPass.IN_USE
        assert order.version == 0

    def test_write_then_read_keeps_the_order(self):
        """order_to_record output parses back to the same order."""
        order = make_pass("o1", used=10, unticked_last=2)
        assert records.order_from_record("o1", records.order_to_record(order)) == order

    @pytest.mark.parametrize(
        "field,value",
        [
            ("productId", "47764"),
            ("productLineId", None),
            ("numTotal", True),
            ("classes", {}),
            ("statusClassPass", 3),
            ("version", "1"),
        ],
    )
    def test_invalid_field(self, field, value):
        """Wrongly typed fields raise ValidationError naming the field."""
        with pytest.raises(ValidationError) as excinfo:
            records.order_from_record("o1", order_record(**{field: value}))
        assert excinfo.value.code == ErrorCode.VALIDATION_ERROR
        assert excinfo.value.field == field

    def test_missing_field(self):
        """Missing required fields raise ValidationError naming the field."""
        data = order_record()
        del data["numTotal"]
        with pytest.raises(ValidationError) as excinfo:
            records.order_from_record("o1", data)
        assert excinfo.value.field == "numTotal"

    @pytest.mark.parametrize(
        "entry",
        [
            {"classRef": "2025-01-06", "ticked": True},
            {"classRef": ref(0).value},
            {"classRef": ref(0).value, "ticked": "yes"},
            "202501061800",
        ],
    )
    def test_invalid_consumption_entry(self, entry):
        """Malformed consumption entries are reported on classes."""
        with pytest.raises(ValidationError) as excinfo:
            records.order_from_record("o1", order_record(classes=[entry]))
        assert excinfo.value.field == "classes"

    def test_unknown_status_is_not_applicable(self):
        """Unknown stored statuses decode as NOT_APPLICABLE."""
        order = records.order_from_record("o1", order_record(statusClassPass="expired"))
        assert order.status_class_pass == StatusClassPass.NOT_APPLICABLE


class TestUserRecord:
    def test_invalid_membership_flag(self):
        """isMember must be a boolean."""
        data = {"firstName": "Alice", "surname": "Smith", "isMember": "no", "orders": []}
        with pytest.raises(ValidationError) as excinfo:
            records.user_from_record("alice", data, [])
        assert excinfo.value.field == "isMember"

    def test_orders_must_be_a_list(self):
        """The orders field of a user must be a list."""
        with pytest.raises(ValidationError):
            records.order_ids_from_user_record("alice", {"orders": "o1"})


class TestClassRecord:
    def test_invalid_valid_tickets(self):
        """validTickets entries must be product id pairs."""
        with pytest.raises(ValidationError) as excinfo:
            records.valid_tickets_from_record(ref(0).value, {"validTickets": [{"productId": 1}]})
        assert excinfo.value.field == "validTickets"

    def test_invalid_class_id(self):
        """A class record under a malformed id is rejected."""
        with pytest.raises(ValidationError) as excinfo:
            records.class_from_record("tomorrow", {"validTickets": [], "notes": ""}, [])
        assert excinfo.value.field == "id"


class TestMalformedRecordsInStore:
    def test_malformed_order_is_skipped(self, store, caplog):
        """A malformed order is logged and left out of the user."""
        seed_user(store, make_user(make_pass("p1", used=2)))
        store.orders["bad"] = order_record(numTotal="ten")
        store.attach_order("alice", "bad")

        with caplog.at_level(logging.WARNING, logger="studio.stores.memory_store"):
            user = store.get_user("alice")

        assert [o.id for o in user.orders] == ["p1"]
        assert "bad" in caplog.text

    def test_malformed_participant_is_skipped(self, store):
        """A malformed participant is left out of the roster."""
        seed_user(store, make_user())
        seed_user(store, make_user(user_id="bob", surname="Adams"))
        seed_class(store, ref(1), {"alice": (False, False), "bob": (False, False)})
        store.classes[ref(1).value]["participants"]["bob"]["attended"] = "maybe"

        assert [p.id for p in store.get_class(ref(1)).participants] == ["alice"]

    def test_malformed_class_id_is_not_listed(self, store):
        """Classes stored under malformed ids are not listed."""
        seed_class(store, ref(1))
        store.classes["someday"] = {"validTickets": [], "notes": "", "participants": {}}
        assert [c.ref for c in store.list_classes()] == [ref(1)]
