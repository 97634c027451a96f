"""
Tests for transaction classification and user attribution.
"""

import pytest

from expenseman.ledger.classifier import (
    UNKNOWN_USER,
    TransactionKind,
    attribute_user,
    classify,
    classify_transactions,
    collect_categories,
    split_payments_and_expenses,
)
from expenseman.models.entities import PaymentMode, Transaction


def make_tx(**fields) -> Transaction:
    fields.setdefault("id", "1")
    return Transaction(**fields)


class TestClassify:
    """Tests for payment/expense classification."""

    @pytest.mark.parametrize("type_cell", ["Payment", "payment", "Client Payment"])
    def test_payment_keyword(self, type_cell):
        result = classify(make_tx(type=type_cell))
        assert result.kind == TransactionKind.PAYMENT
        assert result.is_payment is True
        assert result.is_labour_payment is False

    def test_everything_else_is_expense(self):
        result = classify(make_tx(type="Expense", category="Cement"))
        assert result.kind == TransactionKind.EXPENSE
        assert result.is_labour_payment is False

    def test_labour_payment_category(self):
        result = classify(make_tx(type="Expense", category="Labour Payment - June"))
        assert result.kind == TransactionKind.EXPENSE
        assert result.is_labour_payment is True

    def test_payment_type_wins_over_labour_category(self):
        """Test that a payment is never flagged as a labour payment."""
        result = classify(make_tx(type="Payment", category="Labour Payment"))
        assert result.is_payment is True
        assert result.is_labour_payment is False


class TestAttributeUser:
    """Tests for operator attribution."""

    def test_explicit_column_wins(self):
        assert attribute_user("Gulshan", "paid by rohit") == "Gulshan"

    def test_description_hint(self):
        assert attribute_user("", "Cash given by Rohit") == "Rohit"
        assert attribute_user("", "gulshan bought sand") == "Gulshan"

    def test_no_hint_is_unknown(self):
        assert attribute_user("", "Cement delivery") == UNKNOWN_USER
        assert attribute_user("  ", "") == UNKNOWN_USER


class TestSplit:
    """Tests for turning classified rows into entities."""

    def test_payment_mapping(self):
        items = classify_transactions([make_tx(
            date="2024-01-05", type="Payment", amount=5000,
            description="Initial deposit", site_name="SiteA",
            party_name="ClientX", user="Rohit",
        )])
        payments, expenses = split_payments_and_expenses(items)

        assert expenses == []
        [payment] = payments
        assert payment.site == "SiteA"
        assert payment.mode == PaymentMode.CASH
        assert payment.remarks == "Initial deposit"
        assert payment.user == "Rohit"

    def test_payment_site_falls_back_to_party(self):
        items = classify_transactions([make_tx(type="Payment", party_name="ClientX")])
        [payment], _ = split_payments_and_expenses(items)
        assert payment.site == "ClientX"

    def test_expense_mapping(self):
        items = classify_transactions([make_tx(
            type="Expense", amount=1200, category="Cement", description="10 bags",
        )])
        payments, [expense] = split_payments_and_expenses(items)

        assert payments == []
        assert expense.category == "Cement"
        assert expense.amount == 1200
        assert expense.user == UNKNOWN_USER

    def test_order_is_preserved(self):
        txs = [
            make_tx(id="1", type="Expense"),
            make_tx(id="2", type="Payment"),
            make_tx(id="3", type="Expense"),
        ]
        payments, expenses = split_payments_and_expenses(classify_transactions(txs))
        assert [p.id for p in payments] == ["2"]
        assert [e.id for e in expenses] == ["1", "3"]


class TestCollectCategories:
    """Tests for category discovery."""

    def test_distinct_first_seen_order(self):
        txs = [
            make_tx(category="Cement"),
            make_tx(category="Sand"),
            make_tx(category="Cement"),
            make_tx(category=""),
        ]
        categories = collect_categories(txs)
        assert [c.name for c in categories] == ["Cement", "Sand"]
        assert [c.id for c in categories] == ["1", "2"]

    def test_payment_rows_contribute(self):
        categories = collect_categories([make_tx(type="Payment", category="Advance")])
        assert [c.name for c in categories] == ["Advance"]
