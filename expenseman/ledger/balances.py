"""
Balance Aggregator

Per-operator totals: how much each person recorded as received and as
spent. Known operators are always listed, even with no transactions.
"""

from typing import Iterable, Optional

from expenseman.ledger.classifier import UNKNOWN_USER
from expenseman.models.entities import Expense, Payment, UserBalance


def aggregate_user_balances(
    payments: Iterable[Payment],
    expenses: Iterable[Expense],
    known_users: Optional[Iterable[str]] = None,
) -> list[UserBalance]:
    """
    Sum payments and expenses per user.

    Output order is first appearance: known users first, then anyone
    else in the order their first payment/expense was seen.
    """
    totals: dict[str, dict] = {}

    def bucket(user: Optional[str]) -> dict:
        key = user or UNKNOWN_USER
        return totals.setdefault(key, {
            "total_payments": 0.0,
            "total_expenses": 0.0,
            "transaction_count": 0,
        })

    for user in known_users or ():
        bucket(user)

    for payment in payments:
        entry = bucket(payment.user)
        entry["total_payments"] += payment.amount
        entry["transaction_count"] += 1

    for expense in expenses:
        entry = bucket(expense.user)
        entry["total_expenses"] += expense.amount
        entry["transaction_count"] += 1

    return [
        UserBalance(
            user=user,
            total_payments=entry["total_payments"],
            total_expenses=entry["total_expenses"],
            balance=entry["total_payments"] - entry["total_expenses"],
            transaction_count=entry["transaction_count"],
        )
        for user, entry in totals.items()
    ]
