"""Unit tests for domain primitives and the order ledger.

These test invariants that must hold at construction time and after every
mutation.
Run with: pytest tests/test_domain.py -v
"""

from datetime import datetime

import pytest

from studio.domain import (
    DEFAULT_CATALOG,
    ClassRef,
    ConsumptionEntry,
    Order,
    ProductType,
    StatusClassPass,
)
from tests.factories import (
    MEMBERSHIP,
    PASS,
    SINGLE,
    SINGLE_MEMBER,
    make_pass,
    make_ticket,
    make_user,
    ref,
)


class TestClassRef:
    """Tests for ClassRef value object."""

    def test_decodes_start_time(self):
        """starts_at decodes the YYYYMMDDHHmm id."""
        assert ClassRef("202503141830").starts_at == datetime(2025, 3, 14, 18, 30)

    @pytest.mark.parametrize(
        "value", ["20250314183", "2025031418300", "2025-03-1418", "202513011800"]
    )
    def test_rejects_malformed_ids(self, value):
        """Wrong length, non-digits and impossible dates raise ValueError."""
        with pytest.raises(ValueError):
            ClassRef(value)

    def test_compare_is_positive_when_first_is_later(self):
        """compare returns seconds, positive when the first class is later."""
        assert ClassRef.compare(ClassRef("202503141900"), ClassRef("202503141830")) == 1800
        assert ClassRef.compare(ClassRef("202503141830"), ClassRef("202503141900")) < 0
        assert ClassRef.compare(ClassRef("202503141830"), ClassRef("202503141830")) == 0

    def test_orders_across_year_boundary(self):
        """December sorts before the following January."""
        december = ClassRef("202412311900")
        january = ClassRef("202501010800")
        assert december < january
        assert sorted([january, december]) == [december, january]

    def test_from_input(self):
        """from_input parses the coordinator input format."""
        assert ClassRef.from_input("2025-03-14 18:30") == ClassRef("202503141830")

    def test_from_input_rejects_other_formats(self):
        """from_input rejects other date formats."""
        with pytest.raises(ValueError):
            ClassRef.from_input("14/03/2025 18:30")


class TestStatusClassPass:
    def test_decodes_stored_values(self):
        """Stored status strings decode to their members."""
        assert StatusClassPass.from_string("allTicked") == StatusClassPass.ALL_TICKED
        assert StatusClassPass.from_string("missingTicks") == StatusClassPass.MISSING_TICKS
        assert StatusClassPass.from_string("inUse") == StatusClassPass.IN_USE

    def test_unknown_value_is_not_applicable(self):
        """Unknown status strings decode as NOT_APPLICABLE."""
        assert StatusClassPass.from_string("whatever") == StatusClassPass.NOT_APPLICABLE


class TestTicketCatalog:
    def test_capacity_for_products(self):
        """Passes hold 10 classes, memberships none, anything else one."""
        assert DEFAULT_CATALOG.capacity_for(PASS) == 10
        assert DEFAULT_CATALOG.capacity_for(MEMBERSHIP) == 0
        assert DEFAULT_CATALOG.capacity_for(SINGLE) == 1

    def test_capacity_matches_pass_on_product_id_only(self):
        """An older product line of the pass still holds 10 classes."""
        older_line = ProductType(PASS.product_id, 1)
        assert DEFAULT_CATALOG.capacity_for(older_line) == 10

    def test_default_tickets(self):
        """Classes accept the pass and both single tickets by default."""
        assert DEFAULT_CATALOG.default_tickets == (PASS, SINGLE_MEMBER, SINGLE)


class TestOrderLedger:
    """Tests for the Order ledger."""

    def test_classes_are_sorted_on_construction(self):
        """Entries are sorted chronologically on construction."""
        order = Order(
            id="o1",
            product_id=PASS.product_id,
            product_line_id=PASS.product_line_id,
            num_total=10,
            classes=(ConsumptionEntry(ref(5)), ConsumptionEntry(ref(1)), ConsumptionEntry(ref(3))),
        )
        assert [e.class_ref for e in order.classes] == [ref(1), ref(3), ref(5)]

    def test_classes_stay_sorted_after_adding_earlier_class(self):
        """Adding an earlier class keeps the ledger sorted."""
        order = make_pass("o1", used=3, first_day=10).with_class_added(ref(2))
        assert [e.class_ref for e in order.classes] == [ref(2), ref(10), ref(11), ref(12)]

    def test_negative_capacity_rejected(self):
        """Negative num_total raises ValueError."""
        with pytest.raises(ValueError):
            make_ticket("o1", num_total=-1)

    def test_status_not_applicable_for_single_ticket(self):
        """Single tickets are never class passes."""
        order = make_ticket("o1", used_on=1)
        assert order.calculate_status_class_pass() == StatusClassPass.NOT_APPLICABLE

    def test_status_in_use_while_not_full(self):
        """A pass with room left is in use."""
        assert make_pass("o1", used=9).calculate_status_class_pass() == StatusClassPass.IN_USE

    def test_status_all_ticked_when_full_and_last_ticked(self):
        """A full pass with its last class ticked is all ticked."""
        assert make_pass("o1", used=10).calculate_status_class_pass() == StatusClassPass.ALL_TICKED

    def test_status_missing_ticks_when_full_and_last_unticked(self):
        """A full pass with its last class unticked has missing ticks."""
        order = make_pass("o1", used=10, unticked_last=1)
        assert order.calculate_status_class_pass() == StatusClassPass.MISSING_TICKS

    def test_status_only_checks_last_slot(self):
        """Only the latest class decides the status of a full pass."""
        entries = tuple(ConsumptionEntry(ref(i), ticked=(i == 9)) for i in range(10))
        order = Order("o1", PASS.product_id, PASS.product_line_id, 10, entries)
        assert order.calculate_status_class_pass() == StatusClassPass.ALL_TICKED

    def test_status_is_a_function_of_state(self):
        """Status derives from the ledger, not the stored status or input order."""
        entries = tuple(ConsumptionEntry(ref(i), ticked=i < 8) for i in range(10))
        a = Order("o1", PASS.product_id, PASS.product_line_id, 10, entries, StatusClassPass.IN_USE)
        b = Order(
            "o1",
            PASS.product_id,
            PASS.product_line_id,
            10,
            entries[::-1],
            StatusClassPass.ALL_TICKED,
        )
        assert a.calculate_status_class_pass() == b.calculate_status_class_pass()

    def test_missing_ticks_counts_back_to_last_ticked(self):
        """Missing ticks count back from the end to the latest ticked class."""
        order = make_pass("o1", used=7, unticked_last=3)
        assert order.status_class_pass == StatusClassPass.IN_USE
        assert order.number_missing_ticks() == 3

    def test_missing_ticks_on_full_pass(self):
        """A full pass with missing ticks counts them too."""
        order = make_pass("o1", used=10, unticked_last=2)
        assert order.number_missing_ticks() == 2

    @pytest.mark.parametrize(
        "order",
        [
            make_pass("o1", used=10, unticked_last=4, status=StatusClassPass.ALL_TICKED),
            make_ticket("o2", used_on=1),
        ],
    )
    def test_missing_ticks_zero_when_settled_or_not_a_pass(self, order):
        """Settled passes and single tickets have no missing ticks."""
        assert order.number_missing_ticks() == 0

    def test_is_older(self):
        """is_older compares the latest classes strictly."""
        older = make_pass("o1", used=10, first_day=0)
        newer = make_pass("o2", used=3, first_day=10)
        assert older.is_older(newer)
        assert not newer.is_older(older)
        assert not older.is_older(older)

    def test_empty_order_is_never_older(self):
        """An empty ledger on either side is never older."""
        assert not make_pass("o1").is_older(make_pass("o2", used=1))
        assert not make_pass("o1", used=1).is_older(make_pass("o2"))

    def test_remove_class_recomputes_status(self):
        """Removing a class from a full pass puts it back in use."""
        order = make_pass("o1", used=10).with_class_removed(ref(4))
        assert len(order.classes) == 9
        assert order.status_class_pass == StatusClassPass.IN_USE

    def test_with_entry_ticked(self):
        """Unticking the last class of a full pass gives missing ticks."""
        order = make_pass("o1", used=10).with_entry_ticked(ref(9), ticked=False)
        assert order.entry_for(ref(9)) == ConsumptionEntry(ref(9), ticked=False)
        assert order.status_class_pass == StatusClassPass.MISSING_TICKS

    def test_mutations_return_new_orders(self):
        """Mutations leave the original order unchanged."""
        order = make_pass("o1", used=2)
        order.with_class_added(ref(20))
        assert len(order.classes) == 2


class TestTicketSelection:
    """Tests for User.get_current_ticket."""

    def test_no_accepted_ticket(self):
        """A user with only a membership has no ticket."""
        user = make_user(make_ticket("m1", product=MEMBERSHIP, num_total=0))
        assert user.get_current_ticket(ref(1), DEFAULT_CATALOG.default_tickets) is None

    def test_full_orders_are_not_selected(self):
        """Full orders are skipped for a class they do not list."""
        user = make_user(make_pass("p1", used=10), make_ticket("s1", used_on=0))
        assert user.get_current_ticket(ref(20), DEFAULT_CATALOG.default_tickets) is None

    def test_ticket_type_must_be_accepted(self):
        """Orders of a type the class does not accept are skipped."""
        user = make_user(make_ticket("s1"))
        assert user.get_current_ticket(ref(1), (PASS,)) is None

    def test_prefers_class_pass(self):
        """A class pass wins over a single ticket."""
        user = make_user(make_ticket("s1"), make_pass("p1", used=0))
        assert user.get_current_ticket(ref(1), DEFAULT_CATALOG.default_tickets).id == "p1"

    def test_drains_most_used_pass_first(self):
        """The most used pass is drained before a fresh one is started."""
        user = make_user(
            make_pass("fresh"), make_pass("half", used=5), make_pass("few", used=2, first_day=20)
        )
        assert user.get_current_ticket(ref(30), (PASS,)).id == "half"

    def test_ties_keep_order(self):
        """Ties go to the order listed first."""
        user = make_user(make_ticket("s1"), make_ticket("s2"))
        assert user.get_current_ticket(ref(1), (SINGLE,)).id == "s1"

    def test_reselects_full_order_already_used_for_class(self):
        """A full order that lists the class is selected again for it."""
        full = make_pass("full", used=10)
        user = make_user(make_pass("next", used=3, first_day=20), full)
        assert user.get_current_ticket(ref(9), (PASS,)).id == "full"

    def test_total_missing_ticks(self):
        """total_missing_ticks sums over every order."""
        user = make_user(
            make_pass("p1", used=10, unticked_last=2),
            make_pass("p2", used=4, first_day=10, unticked_last=1),
            make_ticket("s1", used_on=30),
        )
        assert user.total_missing_ticks() == 3
