"""
Payment History Builder

Collects, per client and per labourer, the list of payments that the
Main tab records for them. The Labour and Parties tabs are reconciled
against these lists afterwards.

A transaction lands in at most one bucket:
- Payments with a party name go to that client's history
- Labour-payment expenses with a labour name go to that labourer's history
- Everything else contributes to no history at all
"""

from typing import Iterable

from pydantic import BaseModel, Field

from expenseman.ledger.classifier import ClassifiedTransaction
from expenseman.models.entities import PaymentHistory


class PaymentHistories(BaseModel):
    """Both history mappings; lists are in sheet row order."""
    client: dict[str, list[PaymentHistory]] = Field(default_factory=dict)
    labour: dict[str, list[PaymentHistory]] = Field(default_factory=dict)

    def for_client(self, name: str) -> list[PaymentHistory]:
        return list(self.client.get(name, []))

    def for_labour(self, name: str) -> list[PaymentHistory]:
        return list(self.labour.get(name, []))


def _history_entry(item: ClassifiedTransaction) -> PaymentHistory:
    tx = item.transaction
    return PaymentHistory(
        id=tx.id,
        date=tx.date,
        amount=tx.amount,
        site=tx.site_name or None,
        description=tx.description,
        user=item.user,
    )


def build_histories(items: Iterable[ClassifiedTransaction]) -> PaymentHistories:
    """One pass over classified rows; no sorting is done here."""
    histories = PaymentHistories()

    for item in items:
        tx = item.transaction
        if item.classification.is_payment:
            if tx.party_name:
                histories.client.setdefault(tx.party_name, []).append(
                    _history_entry(item)
                )
        elif item.classification.is_labour_payment:
            if tx.labour_name:
                histories.labour.setdefault(tx.labour_name, []).append(
                    _history_entry(item)
                )

    return histories


def total_amount(entries: Iterable[PaymentHistory]) -> float:
    return sum((entry.amount for entry in entries), 0.0)


def sorted_history(entries: Iterable[PaymentHistory]) -> list[PaymentHistory]:
    """Newest first, for display. Undated entries go last."""
    entries = list(entries)
    dated = [e for e in entries if e.date]
    undated = [e for e in entries if not e.date]
    return sorted(dated, key=lambda e: e.date, reverse=True) + undated
