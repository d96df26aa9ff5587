"""Tests for the order aggregate and its line items."""

import pytest

from conftest import make_order
from domain.models import LineItem, OrderAggregate, parse_quantity, parse_timestamp


class TestLineItem:
    def test_total_follows_count_and_price(self):
        item = LineItem(item_id=1, name="Lace", count=3, price=2.5)
        assert item.total == 7.5

        item.count = 4
        assert item.total == 10

        item.price = "1.25"
        assert item.total == 5

    def test_unset_values_count_as_zero(self):
        item = LineItem(item_id=1)
        assert item.count is None
        assert item.price is None
        assert item.total == 0

        item.count = 5
        assert item.total == 0

        item.price = 2
        item.count = ""
        assert item.count is None
        assert item.total == 0

    def test_total_cannot_be_assigned(self):
        item = LineItem(item_id=1, count=1, price=1)
        with pytest.raises(AttributeError):
            item.total = 99

    @pytest.mark.parametrize("bad", [-1, "-2", "abc", float("nan"), True])
    def test_invalid_quantities_are_rejected(self, bad):
        with pytest.raises(ValueError):
            LineItem(item_id=1, count=bad)

    def test_parse_quantity_keeps_integers(self):
        assert parse_quantity("2") == 2
        assert isinstance(parse_quantity("2"), int)
        assert parse_quantity(" 2.5 ") == 2.5
        assert parse_quantity(None) is None


class TestLineItemOperations:
    def test_new_order_starts_with_one_empty_item(self):
        order = OrderAggregate()
        assert len(order.products) == 1
        assert order.products[0].id == 1
        assert order.grand_total == 0

    def test_add_uses_max_id_plus_one(self):
        order = OrderAggregate(products=[LineItem(item_id=1), LineItem(item_id=3)])
        item = order.add_line_item()
        assert item.id == 4
        assert [p.id for p in order.products] == [1, 3, 4]

    def test_add_after_removing_last_id(self):
        order = make_order(products=(("A", 1, 1), ("B", 1, 1), ("C", 1, 1)))
        order.remove_line_item(3)
        assert order.add_line_item().id == 3

    def test_remove_is_noop_on_single_item(self):
        order = make_order(products=(("A", 2, 5),))
        assert order.remove_line_item(1) is False
        assert len(order.products) == 1
        assert order.grand_total == 10

    def test_remove_unknown_id_changes_nothing(self):
        order = make_order()
        assert order.remove_line_item(42) is False
        assert len(order.products) == 2

    def test_remove_updates_grand_total(self):
        order = make_order()
        assert order.remove_line_item(1) is True
        assert order.grand_total == 3

    def test_update_recomputes_with_other_field(self):
        order = make_order()
        order.update_line_item(2, "count", "4")
        assert order.products[1].total == 12
        assert order.grand_total == 22

        order.update_line_item(2, "price", "")
        assert order.products[1].total == 0
        assert order.grand_total == 10

    def test_update_name_only(self):
        order = make_order()
        order.update_line_item(1, "name", "Silk")
        assert order.products[0].name == "Silk"
        assert order.grand_total == 13

    def test_update_unknown_item_returns_none(self):
        order = make_order()
        assert order.update_line_item(9, "count", 1) is None
        assert order.grand_total == 13

    def test_update_rejects_derived_fields(self):
        order = make_order()
        with pytest.raises(ValueError):
            order.update_line_item(1, "total", 100)

    def test_products_view_is_read_only(self):
        order = make_order()
        assert isinstance(order.products, tuple)

    def test_grand_total_equals_sum_after_edits(self):
        order = OrderAggregate()
        order.update_line_item(1, "count", 3)
        order.update_line_item(1, "price", 1.5)
        second = order.add_line_item()
        order.update_line_item(second.id, "count", 2)
        order.update_line_item(second.id, "price", 7)
        third = order.add_line_item()
        order.update_line_item(third.id, "count", 1)
        order.remove_line_item(1)

        expected = sum((p.count or 0) * (p.price or 0) for p in order.products)
        assert order.grand_total == expected == 14


class TestPaymentFields:
    def test_full_payment_clears(self):
        order = make_order()
        assert order.grand_total == 13

        order.set_amount_paid(13)
        assert order.payment_status == "cleared"
        assert order.balance_due == 0

    def test_partial_payment_stays_pending(self):
        order = make_order()
        order.set_amount_paid(5)
        assert order.payment_status == "pending"
        assert order.balance_due == 8

    def test_lowering_amount_returns_to_pending(self):
        order = make_order(amount_paid=13)
        assert order.payment_status == "cleared"
        order.set_amount_paid(12)
        assert order.payment_status == "pending"

    def test_overpayment_gives_negative_balance(self):
        order = make_order(amount_paid=20)
        assert order.balance_due == -7

    def test_half_bill_ignores_amount_for_balance(self):
        order = make_order(bill_mode="half")
        order.set_amount_paid(5)
        assert order.balance_due == 13
        assert order.payment_status == "pending"

    def test_clear_payment_sets_amount_and_status(self):
        for start in (0, 5, 13):
            order = make_order(amount_paid=start)
            order.clear_payment()
            assert order.amount_paid == order.grand_total == 13
            assert order.payment_status == "cleared"

    def test_clear_payment_is_idempotent(self):
        once = make_order(amount_paid=4)
        once.clear_payment()

        twice = make_order(amount_paid=4)
        twice.clear_payment()
        twice.clear_payment()

        assert once.to_dict() == twice.to_dict()

    def test_half_bill_persist_resets_payment(self):
        order = make_order(amount_paid=13)
        assert order.payment_status == "cleared"

        order.set_bill_mode("half")
        order.prepare_for_persist()

        assert order.amount_paid == 0
        assert order.payment_status == "pending"

    def test_invalid_bill_mode(self):
        order = make_order()
        with pytest.raises(ValueError):
            order.set_bill_mode("quarter")

    def test_switching_to_full_bill_rederives_status(self):
        order = make_order(bill_mode="half")
        order.set_amount_paid(13)
        assert order.payment_status == "pending"

        order.set_bill_mode("full")

        assert order.payment_status == "cleared"
        assert order.balance_due == 0

    def test_switching_to_full_bill_with_partial_amount_stays_pending(self):
        order = make_order(bill_mode="half")
        order.set_amount_paid(5)

        order.set_bill_mode("full")

        assert order.payment_status == "pending"
        assert order.balance_due == 8

    def test_reselecting_full_bill_keeps_status(self):
        order = make_order(amount_paid=4)
        order.clear_payment()
        order.update_line_item(1, "count", 5)
        assert order.payment_status == "cleared"

        order.set_bill_mode("full")

        assert order.payment_status == "cleared"

    def test_zero_total_order_is_pending_untouched_and_after_amount_edit(self):
        order = OrderAggregate()
        assert order.grand_total == 0
        assert order.payment_status == "pending"

        order.set_amount_paid(0)
        assert order.payment_status == "pending"
        assert order.to_dict()["paymentStatus"] == "pending"

    def test_zero_total_order_keeps_explicit_clear(self):
        order = OrderAggregate()
        order.clear_payment()

        order.prepare_for_persist()

        assert (order.amount_paid, order.payment_status) == (0, "cleared")

    def test_adding_items_keeps_cleared_when_already_paid_in_full(self):
        order = make_order(amount_paid=13)
        order.update_line_item(1, "count", 1)
        assert order.grand_total == 8
        assert order.payment_status == "cleared"

    def test_display_name_fallback(self):
        assert OrderAggregate().display_name == "Unnamed Client"
        assert OrderAggregate().client_name == ""


class TestWireFormat:
    def test_round_trip(self):
        order = make_order(order_id="7", amount_paid=5)
        restored = OrderAggregate.from_dict(order.to_dict())

        assert restored.id == "7"
        assert restored.grand_total == order.grand_total
        assert restored.products == order.products
        assert restored.payment_status == order.payment_status
        assert restored.timestamp == order.timestamp

    def test_round_trip_keeps_unset_values(self):
        order = OrderAggregate(timestamp=5)
        order.add_line_item()
        restored = OrderAggregate.from_dict(order.to_dict())
        assert restored.products == order.products
        assert restored.products[0].count is None

    def test_field_names_on_the_wire(self):
        record = make_order(order_id="7").to_dict()
        assert set(record) == {
            "id", "clientName", "products", "grandTotal", "amountPaid",
            "paymentStatus", "billMode", "timestamp",
        }
        assert record["products"][0] == {"id": 1, "name": "A", "count": 2, "price": 5, "total": 10}

    def test_draft_has_no_id(self):
        assert "id" not in make_order().to_dict()

    def test_half_bill_written_without_payment(self):
        order = make_order(amount_paid=13, bill_mode="half")
        record = order.to_dict()
        assert record["amountPaid"] == 0
        assert record["paymentStatus"] == "pending"

    def test_stale_grand_total_is_not_trusted(self):
        record = {
            "id": "x",
            "clientName": "Ravi",
            "products": [{"id": 1, "name": "A", "count": "3", "price": "2", "total": 999}],
            "grandTotal": 1000,
            "timestamp": 10,
        }
        order = OrderAggregate.from_dict(record)
        assert order.grand_total == 6
        assert order.products[0].total == 6
        assert order.bill_mode == "full"
        assert order.payment_status == "pending"
        assert order.amount_paid == 0

    def test_record_without_products_gets_one_empty_line(self):
        order = OrderAggregate.from_dict({"id": "x", "timestamp": 1})
        assert len(order.products) == 1
        assert order.grand_total == 0

    def test_copy_is_independent(self):
        order = make_order(order_id="1")
        clone = order.copy()
        clone.update_line_item(1, "count", 10)
        assert order.grand_total == 13
        assert clone.grand_total == 53


class TestTimestamps:
    def test_numeric_and_string_timestamps(self):
        assert parse_timestamp(1715000000000) == 1715000000000
        assert parse_timestamp("1715000000000") == 1715000000000

    def test_iso_timestamp(self):
        assert parse_timestamp("1970-01-01T00:00:01Z") == 1000

    def test_unreadable_timestamp_is_zero(self):
        assert parse_timestamp(None) == 0
        assert parse_timestamp("yesterday") == 0

    def test_timestamp_is_read_only(self):
        order = OrderAggregate(timestamp=123)
        with pytest.raises(AttributeError):
            order.timestamp = 456
