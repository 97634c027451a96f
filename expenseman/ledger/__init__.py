"""
Ledger package: turns raw sheet rows into reconciled entities.

Nothing in here does I/O.
"""

from expenseman.ledger.balances import aggregate_user_balances
from expenseman.ledger.classifier import (
    UNKNOWN_USER,
    Classification,
    ClassifiedTransaction,
    TransactionKind,
    attribute_user,
    classify,
    classify_transactions,
    collect_categories,
    split_payments_and_expenses,
)
from expenseman.ledger.history import (
    PaymentHistories,
    build_histories,
    sorted_history,
)
from expenseman.ledger.parser import (
    LabourRow,
    PartyRow,
    parse_amount,
    parse_date,
    parse_labour_tab,
    parse_main_tab,
    parse_parties_tab,
    parse_sites_tab,
)
from expenseman.ledger.pipeline import build_snapshot, snapshot_counts
from expenseman.ledger.reconciler import reconcile_clients, reconcile_labours

__all__ = [
    "UNKNOWN_USER",
    "Classification",
    "ClassifiedTransaction",
    "LabourRow",
    "PartyRow",
    "PaymentHistories",
    "TransactionKind",
    "aggregate_user_balances",
    "attribute_user",
    "build_histories",
    "build_snapshot",
    "classify",
    "classify_transactions",
    "collect_categories",
    "parse_amount",
    "parse_date",
    "parse_labour_tab",
    "parse_main_tab",
    "parse_parties_tab",
    "parse_sites_tab",
    "reconcile_clients",
    "reconcile_labours",
    "snapshot_counts",
    "sorted_history",
    "split_payments_and_expenses",
]
