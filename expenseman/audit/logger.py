"""
Audit Logger

DESIGN DECISION: Every sync cycle and every local mutation is logged.
This provides:
1. A record of when the dashboard data was last refreshed
2. The exact reason a refresh failed (per tab)
3. A history of local edits

The audit logger:
- Is async so it fits into the sync pipeline
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace all events of one sync cycle
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from expenseman.models.audit import AuditEvent, AuditEventBuilder
from expenseman.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for display in the dashboard), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expenseman.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_sync_started(self, correlation_id: UUID, trigger: str) -> None:
        await self.log(AuditEventBuilder.sync_started(correlation_id, trigger))

    async def log_sync_completed(
        self,
        correlation_id: UUID,
        counts: dict[str, int],
    ) -> None:
        await self.log(AuditEventBuilder.sync_completed(correlation_id, counts))

    async def log_sync_failed(self, correlation_id: UUID, error_message: str) -> None:
        await self.log(AuditEventBuilder.sync_failed(correlation_id, error_message))

    async def log_sync_skipped(self, correlation_id: UUID, reason: str) -> None:
        await self.log(AuditEventBuilder.sync_skipped(correlation_id, reason))

    async def log_tab_fetch_failed(
        self,
        correlation_id: UUID,
        tab: str,
        error_message: str,
    ) -> None:
        """Log a single tab that could not be fetched."""
        await self.log(
            AuditEventBuilder.tab_fetch_failed(correlation_id, tab, error_message)
        )

    async def log_connection_tested(self, success: bool, message: str) -> None:
        await self.log(AuditEventBuilder.connection_tested(success, message))

    async def log_credentials_changed(self, configured: bool) -> None:
        await self.log(AuditEventBuilder.credentials_changed(configured))

    async def log_polling_started(self, interval_seconds: float) -> None:
        await self.log(AuditEventBuilder.polling_started(interval_seconds))

    async def log_polling_stopped(self) -> None:
        await self.log(AuditEventBuilder.polling_stopped())

    async def log_entity_added(self, collection: str, entity_id: str) -> None:
        await self.log(AuditEventBuilder.entity_added(collection, entity_id))

    async def log_entity_updated(
        self,
        collection: str,
        entity_id: str,
        fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.entity_updated(collection, entity_id, fields))

    async def log_entity_deleted(self, collection: str, entity_id: str) -> None:
        await self.log(AuditEventBuilder.entity_deleted(collection, entity_id))

    async def log_mutation_failed(
        self,
        collection: str,
        operation: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> None:
        """Log a rejected add/update/delete."""
        await self.log(
            AuditEventBuilder.mutation_failed(
                collection, operation, error_message, entity_id
            )
        )

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a sync cycle and pass it through every
    event the cycle produces.
    """
    return uuid4()
