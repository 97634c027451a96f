"""
Audit Models for ExpenseMan

Every sync cycle, connection probe and local mutation is recorded.
This provides:
1. A trail of when data was last refreshed and why it failed
2. Debugging information for sheets that parse oddly
3. A record of who changed local data

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Sync cycle
    SYNC_STARTED = "sync_started"
    SYNC_COMPLETED = "sync_completed"
    SYNC_FAILED = "sync_failed"
    SYNC_SKIPPED = "sync_skipped"
    TAB_FETCH_FAILED = "tab_fetch_failed"

    # Connection
    CONNECTION_TEST_PASSED = "connection_test_passed"
    CONNECTION_TEST_FAILED = "connection_test_failed"
    CREDENTIALS_CHANGED = "credentials_changed"

    # Polling
    POLLING_STARTED = "polling_started"
    POLLING_STOPPED = "polling_stopped"

    # Local mutations
    ENTITY_ADDED = "entity_added"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"
    MUTATION_FAILED = "mutation_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'sync', 'tasks', 'payments')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - all events of one sync cycle share an id
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.sync_started(correlation_id, trigger="timer")
        event = AuditEventBuilder.entity_added("tasks", task_id)
    """

    @staticmethod
    def sync_started(correlation_id: UUID, trigger: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_STARTED,
            entity_type="sync",
            correlation_id=correlation_id,
            description=f"Sync cycle started ({trigger})",
            details={"trigger": trigger},
            is_user_action=trigger == "manual",
        )

    @staticmethod
    def sync_completed(
        correlation_id: UUID,
        counts: dict[str, int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            entity_type="sync",
            correlation_id=correlation_id,
            description="Sync cycle completed",
            details=counts,
        )

    @staticmethod
    def sync_failed(correlation_id: UUID, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="sync",
            correlation_id=correlation_id,
            description="Sync cycle failed, previous data kept",
            error_message=error_message,
        )

    @staticmethod
    def sync_skipped(correlation_id: UUID, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="sync",
            correlation_id=correlation_id,
            description=f"Sync skipped: {reason}",
        )

    @staticmethod
    def tab_fetch_failed(
        correlation_id: UUID,
        tab: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAB_FETCH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="tab",
            entity_id=tab,
            correlation_id=correlation_id,
            description=f"Failed to fetch tab {tab}",
            error_message=error_message,
        )

    @staticmethod
    def connection_tested(success: bool, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.CONNECTION_TEST_PASSED
                if success
                else AuditEventType.CONNECTION_TEST_FAILED
            ),
            severity=AuditSeverity.INFO if success else AuditSeverity.WARNING,
            entity_type="connection",
            description=message[:500],
            is_user_action=True,
        )

    @staticmethod
    def credentials_changed(configured: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CREDENTIALS_CHANGED,
            entity_type="connection",
            description=(
                "Sheet credentials updated"
                if configured
                else "Sheet credentials cleared"
            ),
            details={"configured": configured},
            is_user_action=True,
        )

    @staticmethod
    def polling_started(interval_seconds: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.POLLING_STARTED,
            entity_type="sync",
            description=f"Polling every {interval_seconds:g}s",
            details={"interval_seconds": interval_seconds},
        )

    @staticmethod
    def polling_stopped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.POLLING_STOPPED,
            entity_type="sync",
            description="Polling stopped",
        )

    @staticmethod
    def entity_added(collection: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_ADDED,
            entity_type=collection,
            entity_id=entity_id,
            description=f"Added to {collection}",
            is_user_action=True,
        )

    @staticmethod
    def entity_updated(
        collection: str,
        entity_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_UPDATED,
            entity_type=collection,
            entity_id=entity_id,
            description=f"Updated {collection} entry",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def entity_deleted(collection: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            entity_type=collection,
            entity_id=entity_id,
            description=f"Deleted from {collection}",
            is_user_action=True,
        )

    @staticmethod
    def mutation_failed(
        collection: str,
        operation: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            entity_id=entity_id,
            description=f"{operation.capitalize()} on {collection} failed",
            error_message=error_message,
            details={"operation": operation},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
