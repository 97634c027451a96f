"""
Data Models Package

This package contains all Pydantic models used by ExpenseMan.
All data flowing out of the sync engine conforms to these schemas.
"""

from expenseman.models.entities import (
    Client,
    ConnectionStatus,
    ConnectionTestResult,
    Expense,
    ExpenseCategory,
    Habit,
    HabitFrequency,
    Labour,
    Payment,
    PaymentHistory,
    PaymentMode,
    SheetCredentials,
    Site,
    Snapshot,
    SyncState,
    Task,
    TaskPriority,
    TaskStatus,
    Transaction,
    UserBalance,
)
from expenseman.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entities
    "Client",
    "ConnectionStatus",
    "ConnectionTestResult",
    "Expense",
    "ExpenseCategory",
    "Habit",
    "HabitFrequency",
    "Labour",
    "Payment",
    "PaymentHistory",
    "PaymentMode",
    "SheetCredentials",
    "Site",
    "Snapshot",
    "SyncState",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Transaction",
    "UserBalance",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
