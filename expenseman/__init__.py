"""
ExpenseMan - Source Package

Sync engine for a small construction business dashboard. A Google Sheet
is the ledger; this package fetches it, reconciles labour and client
balances against the transaction log, and publishes one consistent
snapshot for the UI and the chat assistant.

DESIGN PRINCIPLES:
1. The sheet is the source of truth
2. A failed sync never replaces good data
3. Every sync and every edit is auditable
4. Storage and sheet access are swappable
"""

__version__ = "1.0.0"
__author__ = "ExpenseMan Team"
