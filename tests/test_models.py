"""
Tests for ExpenseMan

Test strategy:
1. Unit tests for individual components (models, parser, classifier)
2. Integration tests for flows (with a fake sheet source)
3. No real API calls in tests (use fakes and mocks)
"""

import pytest
from uuid import uuid4

from pydantic import ValidationError

from expenseman.models.entities import (
    ConnectionStatus,
    Habit,
    HabitFrequency,
    Payment,
    PaymentMode,
    SheetCredentials,
    Snapshot,
    SyncState,
    Task,
    TaskPriority,
    TaskStatus,
)
from expenseman.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestEntityModels:
    """Tests for sheet-derived and local entity models."""

    def test_payment_defaults_to_cash(self):
        """Test that a Payment without a mode is Cash."""
        payment = Payment(id="1", date="2024-01-05", site="SiteA", amount=5000)
        assert payment.mode == PaymentMode.CASH
        assert payment.mode.value == "Cash"
        assert payment.user is None

    def test_task_defaults(self):
        """Test Task default status and priority."""
        task = Task(id="t1", title="Order cement")
        assert task.status == TaskStatus.PENDING
        assert task.priority == TaskPriority.MEDIUM

    def test_task_strips_whitespace(self):
        """Test that whitespace is stripped from task title."""
        task = Task(id="t1", title="  Order cement  ")
        assert task.title == "Order cement"

    def test_task_rejects_empty_title(self):
        """Test that an empty title is rejected."""
        with pytest.raises(ValidationError):
            Task(id="t1", title="   ")

    def test_habit_rejects_negative_streak(self):
        """Test that negative streaks are rejected."""
        with pytest.raises(ValidationError):
            Habit(id="h1", name="Site visit", streak=-1)

    def test_habit_frequency_values(self):
        """Test habit frequency string values."""
        assert HabitFrequency("Daily") == HabitFrequency.DAILY
        assert Habit(id="h1", name="Site visit").frequency == HabitFrequency.DAILY


class TestPublishedState:
    """Tests for Snapshot / SyncState immutability."""

    def test_empty_state_is_idle(self):
        """Test that a fresh state is idle with an empty snapshot."""
        state = SyncState()
        assert state.connection_status == ConnectionStatus.IDLE
        assert state.snapshot.payments == []
        assert state.last_sync is None
        assert state.error is None

    def test_snapshot_is_frozen(self):
        """Test that a published snapshot cannot be reassigned."""
        snapshot = Snapshot()
        with pytest.raises(ValidationError):
            snapshot.payments = []

    def test_entities_are_frozen(self):
        """Test that entities inside a snapshot cannot be edited in place."""
        payment = Payment(id="2", date="2024-01-05", site="Greenview", amount=5000)
        habit = Habit(id="h1", name="Site visit")
        snapshot = Snapshot(payments=[payment], habits=[habit])

        with pytest.raises(ValidationError):
            snapshot.payments[0].amount = 1
        with pytest.raises(ValidationError):
            snapshot.habits[0].streak = 5
        assert payment.amount == 5000
        assert habit.model_copy(update={"streak": 5}).streak == 5

    def test_state_copy_leaves_original(self):
        """Test that model_copy produces a new state without touching the old one."""
        state = SyncState()
        newer = state.model_copy(update={"connection_status": ConnectionStatus.LOADING})
        assert state.connection_status == ConnectionStatus.IDLE
        assert newer.connection_status == ConnectionStatus.LOADING

    def test_credentials_configured_needs_both_values(self):
        """Test SheetCredentials.is_configured."""
        assert SheetCredentials().is_configured is False
        assert SheetCredentials(sheet_url="https://x", api_key="").is_configured is False
        assert SheetCredentials(sheet_url="https://x", api_key="k").is_configured is True

    def test_credentials_whitespace_only_is_not_configured(self):
        """Test that blank-looking credentials count as missing."""
        creds = SheetCredentials(sheet_url="   ", api_key="  ")
        assert creds.is_configured is False


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SYNC_STARTED,
            description="Sync cycle started",
        )
        assert event.event_type == AuditEventType.SYNC_STARTED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None
        assert event.timestamp is not None

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion to log dict."""
        event = AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            description="Sync failed",
            error_message="Main: boom",
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "sync_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "Main: boom"
        assert "timestamp" in log_dict

    def test_builder_sync_started_manual_is_user_action(self):
        """Test AuditEventBuilder.sync_started."""
        correlation_id = uuid4()

        manual = AuditEventBuilder.sync_started(correlation_id, "manual")
        timer = AuditEventBuilder.sync_started(correlation_id, "timer")

        assert manual.event_type == AuditEventType.SYNC_STARTED
        assert manual.correlation_id == correlation_id
        assert manual.is_user_action is True
        assert timer.is_user_action is False

    def test_builder_tab_fetch_failed(self):
        """Test AuditEventBuilder.tab_fetch_failed."""
        event = AuditEventBuilder.tab_fetch_failed(uuid4(), "Labour", "HTTP 403")
        assert event.event_type == AuditEventType.TAB_FETCH_FAILED
        assert event.entity_id == "Labour"
        assert event.error_message == "HTTP 403"
        assert event.severity == AuditSeverity.WARNING

    def test_builder_mutation_failed(self):
        """Test AuditEventBuilder.mutation_failed."""
        event = AuditEventBuilder.mutation_failed("tasks", "update", "not found", "t1")
        assert event.event_type == AuditEventType.MUTATION_FAILED
        assert event.entity_type == "tasks"
        assert event.entity_id == "t1"
        assert event.details == {"operation": "update"}
        assert event.is_user_action is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
