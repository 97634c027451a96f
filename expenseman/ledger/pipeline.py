"""
Sheet-to-Snapshot Pipeline

parse -> classify -> build histories -> reconcile -> aggregate.

Everything here is pure: given the same tab data it always produces the
same Snapshot. All I/O (fetching tabs, reading local stores) happens in
the orchestrator before this is called.
"""

from typing import Iterable, Mapping, Optional, Sequence

from expenseman.ledger.balances import aggregate_user_balances
from expenseman.ledger.classifier import (
    classify_transactions,
    collect_categories,
    split_payments_and_expenses,
)
from expenseman.ledger.history import build_histories
from expenseman.ledger.parser import (
    RawRow,
    parse_labour_tab,
    parse_main_tab,
    parse_parties_tab,
    parse_sites_tab,
)
from expenseman.ledger.reconciler import reconcile_clients, reconcile_labours
from expenseman.models.entities import Habit, Snapshot, Task
from expenseman.services.sheets.interface import (
    LABOUR_TAB,
    MAIN_TAB,
    PARTIES_TAB,
    SITES_TAB,
)


def build_snapshot(
    tabs: Mapping[str, Sequence[RawRow]],
    tasks: Optional[Iterable[Task]] = None,
    habits: Optional[Iterable[Habit]] = None,
    known_users: Optional[Iterable[str]] = None,
) -> Snapshot:
    """
    Build a complete Snapshot from raw tab rows.

    Args:
        tabs: Tab name -> rows (header row included). Missing tabs
              are treated as empty.
        tasks: Local tasks, passed through untouched
        habits: Local habits, passed through untouched
        known_users: Operators that always get a balance row
    """
    transactions = parse_main_tab(tabs.get(MAIN_TAB, []))
    classified = classify_transactions(transactions)
    payments, expenses = split_payments_and_expenses(classified)
    histories = build_histories(classified)

    labours = reconcile_labours(parse_labour_tab(tabs.get(LABOUR_TAB, [])), histories)
    clients = reconcile_clients(parse_parties_tab(tabs.get(PARTIES_TAB, [])), histories)
    sites = parse_sites_tab(tabs.get(SITES_TAB, []))

    return Snapshot(
        payments=payments,
        expenses=expenses,
        sites=sites,
        labours=labours,
        clients=clients,
        expense_categories=collect_categories(transactions),
        user_balances=aggregate_user_balances(payments, expenses, known_users),
        tasks=list(tasks or []),
        habits=list(habits or []),
    )


def snapshot_counts(snapshot: Snapshot) -> dict[str, int]:
    """Collection sizes, for logging."""
    return {
        "payments": len(snapshot.payments),
        "expenses": len(snapshot.expenses),
        "sites": len(snapshot.sites),
        "labours": len(snapshot.labours),
        "clients": len(snapshot.clients),
        "expense_categories": len(snapshot.expense_categories),
        "user_balances": len(snapshot.user_balances),
        "tasks": len(snapshot.tasks),
        "habits": len(snapshot.habits),
    }
