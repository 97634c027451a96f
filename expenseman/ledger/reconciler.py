"""
Entity Reconciler

Merges the Labour and Parties tabs with the payment histories rebuilt
from the Main tab.

DESIGN DECISION: The Main tab is the ledger; the other tabs are lists
of people. Whatever the Labour/Parties tabs declare as "Paid" is
overridden by the sum of actual ledger entries, so the dashboard can
never disagree with its own transaction list.

NOTE: Labour balance is recomputed (salary - paid) but client balance
is read straight from the sheet. The asymmetry matches how the sheet
has always been read and is kept until the owner confirms which
behaviour they want.
"""

from typing import Iterable

from expenseman.ledger.history import PaymentHistories, total_amount
from expenseman.ledger.parser import LabourRow, PartyRow
from expenseman.models.entities import Client, Labour


def reconcile_labours(
    rows: Iterable[LabourRow],
    histories: PaymentHistories,
) -> list[Labour]:
    """Labour: paid = sum(history), balance = salary - paid."""
    labours = []
    for row in rows:
        if not row.name:
            continue
        history = histories.for_labour(row.name)
        paid = total_amount(history)
        labours.append(Labour(
            id=row.id,
            name=row.name,
            role=row.role,
            salary=row.salary,
            paid=paid,
            balance=row.salary - paid,
            payment_history=history,
        ))
    return labours


def reconcile_clients(
    rows: Iterable[PartyRow],
    histories: PaymentHistories,
) -> list[Client]:
    """Clients: total_paid = sum(history), balance from the sheet."""
    clients = []
    for row in rows:
        if not row.name:
            continue
        history = histories.for_client(row.name)
        clients.append(Client(
            id=row.id,
            name=row.name,
            contact=row.contact,
            site_name=row.site_name or None,
            total_paid=total_amount(history),
            balance=row.balance,
            payment_history=history,
        ))
    return clients
