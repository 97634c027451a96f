"""
Transaction Classifier

Decides what a Main-tab row means: money in (Payment) or money out
(Expense), and whether an expense is a wage paid to a labourer.

DESIGN DECISION: Classification is keyword matching on free-text cells,
kept here as pure functions. The sheet has no structured "kind" column,
so the words people actually type ("Payment", "Labour Payment - June")
are the only signal. Keeping the heuristics in one place means the
fetch and sync code never has to know about them.
"""

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from expenseman.models.entities import (
    Expense,
    ExpenseCategory,
    Payment,
    PaymentMode,
    Transaction,
)


UNKNOWN_USER = "Unknown"

PAYMENT_KEYWORD = "payment"
LABOUR_PAYMENT_KEYWORD = "labour payment"

# Operator name -> description fragments that point to them.
# Checked in order; the first match wins.
USER_HINTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Rohit", ("rohit", "r.")),
    ("Gulshan", ("gulshan", "g.")),
)


class TransactionKind(str, Enum):
    PAYMENT = "payment"
    EXPENSE = "expense"


class Classification(BaseModel):
    """
    Tagged result of classifying one transaction.

    is_labour_payment is only ever True for expenses.
    """
    model_config = ConfigDict(frozen=True)

    kind: TransactionKind
    is_labour_payment: bool = False

    @property
    def is_payment(self) -> bool:
        return self.kind == TransactionKind.PAYMENT


class ClassifiedTransaction(BaseModel):
    """A transaction together with its classification and operator."""
    model_config = ConfigDict(frozen=True)

    transaction: Transaction
    classification: Classification
    user: str


def classify(transaction: Transaction) -> Classification:
    """
    Classify a transaction.

    1. type contains "payment" -> Payment
    2. otherwise Expense, flagged as a labour payment when the
       category contains "labour payment"
    """
    if PAYMENT_KEYWORD in transaction.type.lower():
        return Classification(kind=TransactionKind.PAYMENT)

    return Classification(
        kind=TransactionKind.EXPENSE,
        is_labour_payment=LABOUR_PAYMENT_KEYWORD in transaction.category.lower(),
    )


def attribute_user(user_cell: str, description: str) -> str:
    """
    Work out which operator entered a transaction.

    The explicit user column wins. Without it, the description is
    scanned for name hints. This is a best-effort guess and can be
    wrong ("Mr. Sharma" contains "r.").
    """
    if user_cell and user_cell.strip():
        return user_cell.strip()

    text = (description or "").lower()
    for user, hints in USER_HINTS:
        if any(hint in text for hint in hints):
            return user
    return UNKNOWN_USER


def classify_transactions(
    transactions: Iterable[Transaction],
) -> list[ClassifiedTransaction]:
    """Classify and attribute every transaction, preserving order."""
    return [
        ClassifiedTransaction(
            transaction=tx,
            classification=classify(tx),
            user=attribute_user(tx.user, tx.description),
        )
        for tx in transactions
    ]


def to_payment(item: ClassifiedTransaction) -> Payment:
    tx = item.transaction
    return Payment(
        id=tx.id,
        date=tx.date,
        site=tx.site_name or tx.party_name,
        amount=tx.amount,
        # The sheet has no payment-mode column
        mode=PaymentMode.CASH,
        remarks=tx.description,
        user=item.user,
    )


def to_expense(item: ClassifiedTransaction) -> Expense:
    tx = item.transaction
    return Expense(
        id=tx.id,
        date=tx.date,
        category=tx.category,
        amount=tx.amount,
        description=tx.description,
        user=item.user,
    )


def split_payments_and_expenses(
    items: Iterable[ClassifiedTransaction],
) -> tuple[list[Payment], list[Expense]]:
    """Turn classified transactions into the published entity lists."""
    payments: list[Payment] = []
    expenses: list[Expense] = []
    for item in items:
        if item.classification.is_payment:
            payments.append(to_payment(item))
        else:
            expenses.append(to_expense(item))
    return payments, expenses


def collect_categories(transactions: Iterable[Transaction]) -> list[ExpenseCategory]:
    """
    Distinct non-empty categories in first-seen order.

    Payments count too: any row with a category contributes it.
    """
    seen: dict[str, None] = {}
    for tx in transactions:
        if tx.category:
            seen.setdefault(tx.category, None)
    return [
        ExpenseCategory(id=str(i), name=name)
        for i, name in enumerate(seen, start=1)
    ]
