"""
Tests for the sheet-to-snapshot pipeline.

These run the whole ledger (parse -> classify -> reconcile -> aggregate)
on in-memory tab data.
"""

from expenseman.ledger.pipeline import build_snapshot, snapshot_counts
from expenseman.models.entities import Habit, PaymentMode, Task


class TestBuildSnapshot:
    """End-to-end tests for build_snapshot."""

    def test_client_deposit(self):
        """A Payment row becomes a Cash payment, client history and user balance."""
        tabs = {
            "Main": [
                ["Date", "Type", "Amount"],
                ["2024-01-05", "Payment", "5000", "", "Initial deposit",
                 "", "SiteA", "ClientX", "Rohit"],
            ],
            "Labour": [],
            "Parties": [["Name"], ["ClientX", "", "SiteA", "0", "0"]],
        }
        snapshot = build_snapshot(tabs, known_users=["Rohit", "Gulshan"])

        [payment] = snapshot.payments
        assert payment.date == "2024-01-05"
        assert payment.site == "SiteA"
        assert payment.amount == 5000
        assert payment.mode == PaymentMode.CASH
        assert payment.remarks == "Initial deposit"
        assert payment.user == "Rohit"

        [client] = snapshot.clients
        assert [h.amount for h in client.payment_history] == [5000]

        rohit = next(b for b in snapshot.user_balances if b.user == "Rohit")
        assert rohit.total_payments == 5000
        assert rohit.balance == 5000

    def test_labour_wage_overrides_sheet(self, sheet_tabs):
        snapshot = build_snapshot(sheet_tabs)

        [john] = snapshot.labours
        assert john.paid == 1200
        assert john.balance == 2800

    def test_client_balance_comes_from_sheet(self, sheet_tabs):
        snapshot = build_snapshot(sheet_tabs)

        [client] = snapshot.clients
        assert client.total_paid == 5000
        assert client.balance == 20000

    def test_expenses_and_categories(self, sheet_tabs):
        snapshot = build_snapshot(sheet_tabs)

        assert [e.amount for e in snapshot.expenses] == [1200, 2500]
        assert [c.name for c in snapshot.expense_categories] == ["Labour Payment", "Cement"]
        assert snapshot.expenses[1].user == "Gulshan"

    def test_sites(self, sheet_tabs):
        snapshot = build_snapshot(sheet_tabs)
        assert [s.payment_status for s in snapshot.sites] == ["Partial", "Pending"]

    def test_missing_tabs_are_empty(self):
        snapshot = build_snapshot({})
        assert snapshot_counts(snapshot) == {
            "payments": 0,
            "expenses": 0,
            "sites": 0,
            "labours": 0,
            "clients": 0,
            "expense_categories": 0,
            "user_balances": 0,
            "tasks": 0,
            "habits": 0,
        }

    def test_local_collections_pass_through(self, sheet_tabs):
        tasks = [Task(id="t1", title="Order steel")]
        habits = [Habit(id="h1", name="Site visit", streak=4)]

        snapshot = build_snapshot(sheet_tabs, tasks=tasks, habits=habits)

        assert snapshot.tasks == tasks
        assert snapshot.habits == habits

    def test_idempotent(self, sheet_tabs):
        """Identical input gives an identical snapshot."""
        first = build_snapshot(sheet_tabs, known_users=["Rohit"])
        second = build_snapshot(sheet_tabs, known_users=["Rohit"])
        assert first.model_dump_json() == second.model_dump_json()

    def test_sum_law(self, sheet_tabs):
        snapshot = build_snapshot(sheet_tabs, known_users=["Rohit", "Gulshan"])

        assert sum(b.total_payments for b in snapshot.user_balances) == sum(
            p.amount for p in snapshot.payments
        )
        assert sum(b.total_expenses for b in snapshot.user_balances) == sum(
            e.amount for e in snapshot.expenses
        )
