"""
Tests for the persistence layer: validation, snapshots, cascades and range fetches.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from stylematrix import store
from stylematrix.errors import ValidationError
from stylematrix.models import Transaction, TransactionItem
from stylematrix.timezone import UTC, local_day_bounds, local_month_bounds


class TestCreateTransaction:
    def test_totals_and_snapshots(self, employees, services, make_sale):
        tx = make_sale(employees["sara"], "cash",
                       {services["haircut"].id: 2, services["shampoo"].id: 1}, tips="10")
        assert tx.subtotal == Decimal("145.00")
        assert tx.tips == Decimal("10.00")
        assert tx.total == Decimal("155.00")
        assert tx.total_ok
        names = [(i.service_name, i.price, i.quantity) for i in tx.items]
        assert names == [("Haircut", Decimal("50.00"), 2), ("Shampoo", Decimal("45.00"), 1)]

    def test_instant_is_stored_in_whole_seconds(self, employees, services, make_sale):
        tx = make_sale(employees["sara"], "card", {services["beard"].id: 1},
                       at=datetime(2024, 3, 9, 21, 30, 15, 500000, tzinfo=UTC))
        fresh = store.get_transaction(tx.id)
        assert fresh.transaction_date == datetime(2024, 3, 9, 21, 30, 15, tzinfo=UTC)

    def test_later_price_change_keeps_snapshot(self, employees, services, make_sale):
        tx = make_sale(employees["sara"], "cash", {services["haircut"].id: 1})
        store.update_service(services["haircut"].id, "Haircut", "80", "service")
        assert store.get_transaction(tx.id).items[0].price == Decimal("50.00")

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"employee_id": None}, "Please select an employee"),
            ({"lines": {}}, "Please select at least one service"),
            ({"payment_method": "cheque"}, "Please select a payment method"),
            ({"tips": "-1"}, "Tips must be a non-negative amount"),
            ({"tips": "abc"}, "Tips must be a non-negative amount"),
            ({"lines": {9999: 1}}, "Selected service no longer exists"),
        ],
    )
    def test_validation(self, employees, services, kwargs, message):
        args = {
            "employee_id": employees["sara"].id,
            "payment_method": "cash",
            "lines": {services["haircut"].id: 1},
            "tips": 0,
        }
        args.update(kwargs)
        with pytest.raises(ValidationError) as exc:
            store.create_transaction(**args)
        assert exc.value.message == message
        assert Transaction.query.count() == 0

    def test_quantity_below_one(self, employees, services):
        with pytest.raises(ValidationError) as exc:
            store.create_transaction(employees["sara"].id, "cash", {services["haircut"].id: 0})
        assert exc.value.message == "Quantity must be at least 1"

    def test_inactive_employee_cannot_sell(self, employees, services):
        store.set_employee_active(employees["omar"].id, False)
        with pytest.raises(ValidationError):
            store.create_transaction(employees["omar"].id, "cash", {services["haircut"].id: 1})


class TestDeleteTransaction:
    def test_cascades_to_items(self, employees, services, make_sale):
        tx = make_sale(employees["sara"], "cash", {services["haircut"].id: 1, services["beard"].id: 1})
        assert TransactionItem.query.count() == 2
        assert store.delete_transaction(tx.id) is True
        assert Transaction.query.count() == 0
        assert TransactionItem.query.count() == 0

    def test_missing(self, app):
        assert store.delete_transaction(12345) is False


class TestFetchTransactions:
    def test_local_day_window(self, employees, services, make_sale):
        line = {services["haircut"].id: 1}
        late = make_sale(employees["sara"], "cash", line, at=datetime(2024, 3, 9, 19, 59, 59, tzinfo=UTC))
        early = make_sale(employees["sara"], "cash", line, at=datetime(2024, 3, 9, 20, 0, 0, tzinfo=UTC))
        rows = store.fetch_transactions(*local_day_bounds(date(2024, 3, 10)))
        assert [t.id for t in rows] == [early.id]
        rows = store.fetch_transactions(*local_day_bounds(date(2024, 3, 9)))
        assert [t.id for t in rows] == [late.id]

    def test_month_window_ordering(self, employees, services, make_sale):
        line = {services["haircut"].id: 1}
        a = make_sale(employees["sara"], "cash", line, at=datetime(2024, 2, 29, 20, 0, tzinfo=UTC))  # 1 Mar local
        b = make_sale(employees["omar"], "card", line, at=datetime(2024, 3, 15, 8, 0, tzinfo=UTC))
        make_sale(employees["omar"], "card", line, at=datetime(2024, 3, 31, 20, 0, tzinfo=UTC))  # 1 Apr local
        start, end = local_month_bounds(2024, 2)
        assert [t.id for t in store.fetch_transactions(start, end, newest_first=False)] == [a.id, b.id]
        assert [t.id for t in store.fetch_transactions(start, end)] == [b.id, a.id]
        assert len(store.fetch_transaction_instants(start, end)) == 2


class TestEmployees:
    def test_create_and_update(self, app):
        e = store.create_employee("  Lina ", "050 123 4567")
        assert e.name == "Lina"
        assert e.is_active
        store.update_employee(e.id, "Lina K", "050 123 4567")
        assert store.list_employees()[0].name == "Lina K"

    def test_created_at_is_filled_by_the_database(self, employees, services, admin_user):
        assert employees["sara"].created_at is not None
        assert services["haircut"].created_at is not None
        assert admin_user.created_at is not None

    @pytest.mark.parametrize("phone", ["", "12345", "call me", "050-12a-4567"])
    def test_rejects_bad_phone(self, app, phone):
        with pytest.raises(ValidationError) as exc:
            store.create_employee("Lina", phone)
        assert exc.value.field == "phone"

    def test_deactivate_hides_from_active_list(self, employees):
        store.set_employee_active(employees["omar"].id, False)
        assert [e.name for e in store.list_employees(active_only=True)] == ["Sara"]
        assert len(store.list_employees()) == 2

    def test_rename_changes_history(self, employees, services, make_sale):
        tx = make_sale(employees["sara"], "cash", {services["haircut"].id: 1})
        store.update_employee(employees["sara"].id, "Sarah", "+971 50 123 4567")
        assert store.get_transaction(tx.id).employee_name == "Sarah"


class TestServices:
    @pytest.mark.parametrize("price", ["0", "-5", "", "free"])
    def test_rejects_non_positive_price(self, app, price):
        with pytest.raises(ValidationError) as exc:
            store.create_service("Haircut", price, "service")
        assert exc.value.message == "Please enter a valid price"

    def test_rejects_unknown_category(self, app):
        with pytest.raises(ValidationError):
            store.create_service("Gift card", "100", "voucher")

    def test_list_by_category(self, services):
        assert [s.name for s in store.list_services("product")] == ["Shampoo"]

    def test_delete_keeps_item_snapshots(self, employees, services, make_sale):
        tx = make_sale(employees["sara"], "cash", {services["beard"].id: 1})
        assert store.delete_service(services["beard"].id) is True
        item = store.get_transaction(tx.id).items[0]
        assert item.service_id is None
        assert item.service_name == "Beard Trim"


class TestUsers:
    def test_lookup_is_case_insensitive(self, admin_user):
        assert store.find_user_by_email("ADMIN@example.com").id == admin_user.id
        assert store.find_user_by_email("") is None

    def test_rejects_bad_email(self, app):
        with pytest.raises(ValidationError):
            store.create_user("not-an-email", "pw")

    def test_password_check(self, admin_user):
        assert admin_user.check_password("AdminPassword123")
        assert not admin_user.check_password("wrong")
