"""
Core Data Models for ExpenseMan

These models define the typed entities the sync engine publishes.
They are designed to:
1. Replace positional sheet rows with named, typed fields
2. Be serializable for the chat assistant and local storage
3. Make the published state immutable from the consumer side

DESIGN DECISION: Everything derived from the sheet is rebuilt on every
sync cycle. Ids of sheet-derived entities are positional (row index), so
they are only stable for as long as the sheet's row order is.
Tasks and habits never come from the sheet; they live in a local store.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class PaymentMode(str, Enum):
    """How a payment was received."""
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class HabitFrequency(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"


class ConnectionStatus(str, Enum):
    """
    Sync engine connection state.

    idle -> loading -> connected | error, and back to loading on every
    refresh trigger.
    """
    IDLE = "idle"
    LOADING = "loading"
    CONNECTED = "connected"
    ERROR = "error"


# =============================================================================
# SHEET-DERIVED ENTITIES
# =============================================================================

class Transaction(BaseModel):
    """
    One Main-tab row after parsing.

    This is an intermediate record: the classifier turns it into a
    Payment or an Expense (and possibly a history entry).
    """
    id: str
    date: str = ""
    type: str = ""
    amount: float = 0.0
    category: str = ""
    description: str = ""
    labour_name: str = ""
    site_name: str = ""
    party_name: str = ""
    user: str = ""


class Payment(BaseModel):
    """Money received, usually against a site or a party."""
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    site: str
    amount: float
    mode: PaymentMode = PaymentMode.CASH
    remarks: str = ""
    user: Optional[str] = None


class Expense(BaseModel):
    """Money spent."""
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    category: str
    amount: float
    description: str = ""
    user: Optional[str] = None


class ExpenseCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)


class PaymentHistory(BaseModel):
    """A single payment made to a labourer or received from a client."""
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    amount: float
    site: Optional[str] = None
    task: Optional[str] = None
    description: str = ""
    user: Optional[str] = None


class Labour(BaseModel):
    """
    A labourer on the Labour tab.

    paid and balance are always recomputed from payment_history;
    the sheet's own Paid/Balance columns are ignored.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    role: str = ""
    salary: float = 0.0
    paid: float = 0.0
    balance: float = 0.0
    payment_history: list[PaymentHistory] = Field(default_factory=list)


class Client(BaseModel):
    """
    A party on the Parties tab.

    total_paid is recomputed from payment_history, balance is taken
    from the sheet as-is.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., min_length=1)
    contact: str = ""
    site_name: Optional[str] = None
    total_paid: float = 0.0
    balance: float = 0.0
    payment_history: list[PaymentHistory] = Field(default_factory=list)


class Site(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    site_name: str = Field(..., min_length=1)
    progress: float = 0.0
    payment_status: str = "Pending"
    start_date: str = ""
    end_date: str = ""
    project_value: float = 0.0


class UserBalance(BaseModel):
    """Per-operator totals across all payments and expenses."""
    model_config = ConfigDict(frozen=True)

    user: str
    total_payments: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    transaction_count: int = 0


# =============================================================================
# LOCAL-ONLY ENTITIES
# =============================================================================

class Task(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    title: str = Field(..., min_length=1, max_length=200)
    deadline: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM


class Habit(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    name: str = Field(..., min_length=1, max_length=200)
    frequency: HabitFrequency = HabitFrequency.DAILY
    streak: int = Field(default=0, ge=0)


# =============================================================================
# PUBLISHED STATE
# =============================================================================

class Snapshot(BaseModel):
    """
    The complete set of published entities.

    CRITICAL: A Snapshot is built completely before it is published.
    Consumers never see one that is half-way through a sync cycle.
    """
    model_config = ConfigDict(frozen=True)

    payments: list[Payment] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    sites: list[Site] = Field(default_factory=list)
    labours: list[Labour] = Field(default_factory=list)
    clients: list[Client] = Field(default_factory=list)
    expense_categories: list[ExpenseCategory] = Field(default_factory=list)
    user_balances: list[UserBalance] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    habits: list[Habit] = Field(default_factory=list)


class SyncState(BaseModel):
    """What external consumers read: data plus connection state."""
    model_config = ConfigDict(frozen=True)

    snapshot: Snapshot = Field(default_factory=Snapshot)
    connection_status: ConnectionStatus = ConnectionStatus.IDLE
    last_sync: Optional[datetime] = None
    error: Optional[str] = None


class SheetCredentials(BaseModel):
    """Location and access key of the source spreadsheet."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    sheet_url: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.sheet_url and self.api_key)


class ConnectionTestResult(BaseModel):
    """Outcome of a read-only connection probe."""
    success: bool
    message: str
    sheet_titles: list[str] = Field(default_factory=list)
