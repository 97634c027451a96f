"""
Sync Orchestrator for ExpenseMan

This module ties together the sheet source, the ledger pipeline and the
local stores, and owns the one piece of shared state: the published
SyncState.

Flows:
1. Sync cycle (fetch 4 tabs -> parse -> classify -> reconcile -> aggregate -> publish)
2. Connection probe (metadata + required tabs, never touches state)
3. Local mutations (store confirms -> snapshot updated)

DESIGN DECISION: The orchestrator is the ONLY writer of SyncState.
- A new snapshot is built entirely in local variables and published
  with a single assignment, so readers never see half a sync.
- A failed cycle never replaces good data; it only sets the error.
- Tasks and habits always come from their local store, never the sheet.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel

from expenseman.agents import BusinessAssistant
from expenseman.audit import AuditLogger, create_correlation_id
from expenseman.config import get_settings
from expenseman.ledger import build_snapshot, snapshot_counts
from expenseman.models.entities import (
    Client,
    ConnectionStatus,
    ConnectionTestResult,
    Expense,
    ExpenseCategory,
    Habit,
    Labour,
    Payment,
    SheetCredentials,
    Site,
    Snapshot,
    SyncState,
    Task,
)
from expenseman.services.sheets import (
    REQUIRED_TABS,
    ConfigurationError,
    GoogleSheetsSource,
    NetworkError,
    SheetSource,
    TabFetchResult,
    TransportError,
    extract_spreadsheet_id,
    require_spreadsheet_id,
    sheet_titles,
)
from expenseman.services.storage import (
    CollectionStore,
    InMemoryAuditStorage,
    InMemoryCollectionStore,
    JsonFileCollectionStore,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)

IDLE_MESSAGE = "Configure Google Sheet in Settings"
INVALID_URL_MESSAGE = "Invalid Sheet URL"


class Collection(str, Enum):
    """Snapshot collections that accept add/update/delete."""
    PAYMENTS = "payments"
    EXPENSES = "expenses"
    SITES = "sites"
    LABOURS = "labours"
    CLIENTS = "clients"
    EXPENSE_CATEGORIES = "expense_categories"
    TASKS = "tasks"
    HABITS = "habits"


COLLECTION_MODELS: dict[Collection, type[BaseModel]] = {
    Collection.PAYMENTS: Payment,
    Collection.EXPENSES: Expense,
    Collection.SITES: Site,
    Collection.LABOURS: Labour,
    Collection.CLIENTS: Client,
    Collection.EXPENSE_CATEGORIES: ExpenseCategory,
    Collection.TASKS: Task,
    Collection.HABITS: Habit,
}

# Rebuilt from the sheet on every successful sync
SHEET_COLLECTIONS = (
    Collection.PAYMENTS,
    Collection.EXPENSES,
    Collection.SITES,
    Collection.LABOURS,
    Collection.CLIENTS,
    Collection.EXPENSE_CATEGORIES,
)


StateListener = Callable[[SyncState], None]


class SyncOrchestrator:
    """
    Drives sync cycles and publishes the result.

    Lifecycle:
        orchestrator = SyncOrchestrator(...)
        await orchestrator.start()     # first sync + periodic polling
        orchestrator.refresh()         # manual trigger, fire-and-forget
        state = orchestrator.state     # read the published snapshot
        await orchestrator.stop()      # cancel polling

    or ``async with SyncOrchestrator(...) as orchestrator: ...``.

    Overlapping cycles are allowed; the last one to publish wins. A cycle
    whose credentials were replaced while it ran publishes nothing.
    """

    def __init__(
        self,
        source: Optional[SheetSource] = None,
        credentials: Optional[SheetCredentials] = None,
        task_store: Optional[CollectionStore] = None,
        habit_store: Optional[CollectionStore] = None,
        audit_logger: Optional[AuditLogger] = None,
        poll_interval_seconds: Optional[float] = None,
        known_users: Optional[list[str]] = None,
        cell_range: Optional[str] = None,
    ):
        settings = get_settings()
        sheets_settings = settings.google_sheets
        sync_settings = settings.sync

        self._source = source or GoogleSheetsSource()
        self._credentials = credentials or SheetCredentials(
            sheet_url=sheets_settings.sheet_url,
            api_key=sheets_settings.api_key,
        )
        self._audit_logger = audit_logger or AuditLogger()
        self._poll_interval = poll_interval_seconds or sync_settings.poll_interval_seconds
        self._known_users = (
            known_users if known_users is not None else sync_settings.known_users_list
        )
        self._cell_range = cell_range or sheets_settings.cell_range

        self._stores: dict[Collection, CollectionStore] = {
            collection: InMemoryCollectionStore(
                COLLECTION_MODELS[collection], name=collection.value
            )
            for collection in SHEET_COLLECTIONS
        }
        self._stores[Collection.TASKS] = task_store or InMemoryCollectionStore(
            Task, name=Collection.TASKS.value
        )
        self._stores[Collection.HABITS] = habit_store or InMemoryCollectionStore(
            Habit, name=Collection.HABITS.value
        )

        self._state = SyncState()
        self._listeners: list[StateListener] = []
        self._running = False
        self._poll_task: Optional[asyncio.Task] = None
        self._cycles: set[asyncio.Task] = set()
        # Bumped on every credentials change; a cycle started under an
        # older generation never publishes.
        self._generation = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        """The current published state (immutable)."""
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._state.snapshot

    @property
    def credentials(self) -> SheetCredentials:
        return self._credentials

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def add_listener(self, listener: StateListener) -> None:
        """Call ``listener(state)`` after every publish."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, **changes: Any) -> SyncState:
        """Swap in a new state. Only place _state changes after __init__."""
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("state_listener_failed")
        return self._state

    # ------------------------------------------------------------------
    # Sync cycle
    # ------------------------------------------------------------------

    async def sync_once(self, trigger: str = "manual") -> SyncState:
        """
        Run one complete sync cycle and return the published state.

        Never raises for sheet or parsing problems: failures end up in
        ``state.error`` with ``connection_status == ERROR`` and the
        previous snapshot left in place.
        """
        correlation_id = create_correlation_id()
        credentials = self._credentials
        generation = self._generation

        if not credentials.is_configured:
            snapshot = await self._with_local_collections(self._state.snapshot)
            if self._is_stale(generation, correlation_id):
                return self._state
            await self._audit_logger.log_sync_skipped(
                correlation_id, "credentials not configured"
            )
            return self._publish(
                snapshot=snapshot,
                connection_status=ConnectionStatus.IDLE,
                error=IDLE_MESSAGE,
            )

        await self._audit_logger.log_sync_started(correlation_id, trigger)
        if self._is_stale(generation, correlation_id):
            return self._state
        self._publish(connection_status=ConnectionStatus.LOADING, error=None)

        try:
            spreadsheet_id = require_spreadsheet_id(credentials.sheet_url)
        except ConfigurationError as e:
            return await self._fail(correlation_id, str(e), generation)

        try:
            results = await self._fetch_all_tabs(
                spreadsheet_id, credentials.api_key, correlation_id
            )
            failures = [result for result in results if not result.ok]
            if failures:
                message = "Failed to fetch " + "; ".join(
                    f"{result.tab}: {result.error}" for result in failures
                )
                return await self._fail(correlation_id, message, generation)

            snapshot = build_snapshot(
                {result.tab: result.rows for result in results},
                tasks=await self._stores[Collection.TASKS].list(),
                habits=await self._stores[Collection.HABITS].list(),
                known_users=self._known_users,
            )
        except Exception as e:
            logger.exception("sync_cycle_crashed", correlation_id=str(correlation_id))
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return await self._fail(correlation_id, f"Sync failed: {e}", generation)

        if self._is_stale(generation, correlation_id):
            return self._state

        for collection in SHEET_COLLECTIONS:
            self._stores[collection].replace_all(getattr(snapshot, collection.value))

        state = self._publish(
            snapshot=snapshot,
            connection_status=ConnectionStatus.CONNECTED,
            last_sync=datetime.now(timezone.utc),
            error=None,
        )
        await self._audit_logger.log_sync_completed(
            correlation_id, snapshot_counts(snapshot)
        )
        return state

    async def _fetch_tab(
        self,
        spreadsheet_id: str,
        api_key: str,
        tab: str,
        correlation_id: UUID,
    ) -> TabFetchResult:
        """Fetch one tab; an error is captured, never raised."""
        try:
            rows = await self._source.fetch_values(
                spreadsheet_id, api_key, f"{tab}!{self._cell_range}"
            )
        except TransportError as e:
            error = str(e) or "Fetch failed"
        except Exception as e:
            logger.exception("tab_fetch_crashed", tab=tab, correlation_id=str(correlation_id))
            error = f"{type(e).__name__}: {e}"
        else:
            return TabFetchResult(tab=tab, rows=rows)

        await self._audit_logger.log_tab_fetch_failed(correlation_id, tab, error)
        return TabFetchResult(tab=tab, error=error)

    async def _fetch_all_tabs(
        self,
        spreadsheet_id: str,
        api_key: str,
        correlation_id: UUID,
    ) -> list[TabFetchResult]:
        """Fetch every tab concurrently and wait for all of them."""
        return list(await asyncio.gather(*(
            self._fetch_tab(spreadsheet_id, api_key, tab, correlation_id)
            for tab in REQUIRED_TABS
        )))

    def _is_stale(self, generation: int, correlation_id: UUID) -> bool:
        """True once the credentials a cycle started with have been replaced."""
        if generation == self._generation:
            return False
        logger.info("sync_result_discarded", correlation_id=str(correlation_id))
        return True

    async def _fail(self, correlation_id: UUID, message: str, generation: int) -> SyncState:
        await self._audit_logger.log_sync_failed(correlation_id, message)
        if self._is_stale(generation, correlation_id):
            return self._state
        return self._publish(connection_status=ConnectionStatus.ERROR, error=message)

    async def _with_local_collections(self, snapshot: Snapshot) -> Snapshot:
        return snapshot.model_copy(update={
            "tasks": await self._stores[Collection.TASKS].list(),
            "habits": await self._stores[Collection.HABITS].list(),
        })

    # ------------------------------------------------------------------
    # Triggers and polling
    # ------------------------------------------------------------------

    def _spawn_cycle(self, trigger: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.sync_once(trigger))
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    def refresh(self) -> asyncio.Task:
        """
        Trigger one sync cycle without waiting for it.

        Returns the task so callers may await it if they want to.
        """
        return self._spawn_cycle("manual")

    async def _poll_loop(self) -> None:
        trigger = "mount"
        while True:
            # Shielded: stopping the poller must not cancel a running cycle
            await asyncio.shield(self._spawn_cycle(trigger))
            trigger = "timer"
            await asyncio.sleep(self._poll_interval)

    async def _start_polling(self) -> None:
        if not self._credentials.is_configured:
            await self.sync_once(trigger="mount")
            return
        self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())
        await self._audit_logger.log_polling_started(self._poll_interval)

    async def _stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        await self._audit_logger.log_polling_stopped()

    async def start(self) -> None:
        """
        Mount: sync immediately, then every poll interval.

        Without credentials this publishes the idle state and does not
        poll until credentials are supplied.
        """
        if self._running:
            return
        self._running = True
        await self._start_polling()

    async def stop(self) -> None:
        """Tear down: cancel the periodic timer and let running cycles finish."""
        self._running = False
        await self._stop_polling()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)

    async def __aenter__(self) -> "SyncOrchestrator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def update_credentials(self, sheet_url: str, api_key: str) -> None:
        """
        Replace the sheet location/key.

        When running, polling restarts so the new sheet is loaded right
        away (or the engine drops to idle if the credentials were cleared).
        """
        credentials = SheetCredentials(sheet_url=sheet_url, api_key=api_key)
        if credentials == self._credentials:
            return
        self._credentials = credentials
        self._generation += 1
        await self._audit_logger.log_credentials_changed(credentials.is_configured)

        if self._running:
            await self._stop_polling()
            await self._start_polling()
        elif self._cycles:
            # Older in-flight cycles discard their results
            self._spawn_cycle("credentials")

    # ------------------------------------------------------------------
    # Connection probe
    # ------------------------------------------------------------------

    async def test_connection(
        self,
        credentials: Optional[SheetCredentials] = None,
    ) -> ConnectionTestResult:
        """
        Check that the sheet is reachable and has every required tab.

        Read-only: the published state is not touched.
        """
        result = await self._probe(credentials or self._credentials)
        await self._audit_logger.log_connection_tested(result.success, result.message)
        return result

    async def _probe(self, credentials: SheetCredentials) -> ConnectionTestResult:
        if not credentials.is_configured:
            return ConnectionTestResult(
                success=False,
                message="Google Sheet URL and API key are both required",
            )

        spreadsheet_id = extract_spreadsheet_id(credentials.sheet_url)
        if spreadsheet_id is None:
            return ConnectionTestResult(
                success=False,
                message=f"{INVALID_URL_MESSAGE}: expected a link containing /spreadsheets/d/<id>",
            )

        try:
            metadata = await self._source.fetch_metadata(spreadsheet_id, credentials.api_key)
        except NetworkError as e:
            return ConnectionTestResult(
                success=False,
                message=f"Could not reach Google Sheets: {e}",
            )
        except TransportError as e:
            return ConnectionTestResult(success=False, message=_http_failure_message(e))

        titles = sheet_titles(metadata)
        missing = [tab for tab in REQUIRED_TABS if tab not in titles]
        if missing:
            return ConnectionTestResult(
                success=False,
                message=f"Connected, but the sheet is missing required tabs: {', '.join(missing)}",
                sheet_titles=titles,
            )

        title = metadata.get("properties", {}).get("title", "spreadsheet")
        return ConnectionTestResult(
            success=True,
            message=f"Connected to '{title}' with all required tabs",
            sheet_titles=titles,
        )

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def _replace_collection(self, collection: Collection, items: list) -> None:
        snapshot = self._state.snapshot.model_copy(update={collection.value: items})
        self._publish(snapshot=snapshot)

    async def add_entity(self, collection: Collection, data: dict[str, Any]) -> BaseModel:
        """
        Add an item through the collection's store, then publish it.

        Raises:
            MutationError: The store rejected the item (state unchanged)
        """
        try:
            item = await self._stores[collection].add(data)
        except StorageError as e:
            await self._audit_logger.log_mutation_failed(collection.value, "add", str(e))
            raise

        current = getattr(self._state.snapshot, collection.value)
        self._replace_collection(collection, [*current, item])
        await self._audit_logger.log_entity_added(collection.value, item.id)
        return item

    async def update_entity(
        self,
        collection: Collection,
        item_id: str,
        updates: dict[str, Any],
    ) -> BaseModel:
        """
        Update an item through the collection's store, then publish it.

        Raises:
            NotFoundError: No item with this id
            MutationError: The update did not validate
        """
        try:
            updated = await self._stores[collection].update(item_id, updates)
        except StorageError as e:
            await self._audit_logger.log_mutation_failed(
                collection.value, "update", str(e), item_id
            )
            raise

        current = getattr(self._state.snapshot, collection.value)
        self._replace_collection(
            collection,
            [updated if item.id == item_id else item for item in current],
        )
        await self._audit_logger.log_entity_updated(
            collection.value, item_id, sorted(updates)
        )
        return updated

    async def delete_entity(self, collection: Collection, item_id: str) -> None:
        """
        Delete an item through the collection's store, then publish.

        Raises:
            NotFoundError: No item with this id
        """
        try:
            deleted = await self._stores[collection].delete(item_id)
            if not deleted:
                raise NotFoundError(f"{collection.value} item not found: {item_id}")
        except StorageError as e:
            await self._audit_logger.log_mutation_failed(
                collection.value, "delete", str(e), item_id
            )
            raise

        current = getattr(self._state.snapshot, collection.value)
        self._replace_collection(
            collection,
            [item for item in current if item.id != item_id],
        )
        await self._audit_logger.log_entity_deleted(collection.value, item_id)

    async def increment_habit_streak(self, habit_id: str) -> Habit:
        """Add one to a habit's streak."""
        habit = next(
            (h for h in self._state.snapshot.habits if h.id == habit_id),
            None,
        )
        if habit is None:
            await self._audit_logger.log_mutation_failed(
                Collection.HABITS.value, "update", "habit not found", habit_id
            )
            raise NotFoundError(f"habits item not found: {habit_id}")
        return await self.update_entity(
            Collection.HABITS, habit_id, {"streak": habit.streak + 1}
        )


def _http_failure_message(error: TransportError) -> str:
    """User-facing text for an HTTP error from the metadata probe."""
    status = error.status_code
    if status in (401, 403):
        return (
            f"Access denied (HTTP {status}): the API key is invalid or the "
            "Google Sheets API is not enabled for it"
        )
    if status == 404:
        return (
            "Spreadsheet not found (HTTP 404): check the URL and make sure the "
            "sheet is shared with anyone who has the link"
        )
    if status is None:
        return f"Connection failed: {error}"
    return f"Connection failed (HTTP {status}): {error}"


def create_app_components(
    data_dir: Optional[str] = None,
) -> tuple[SyncOrchestrator, BusinessAssistant]:
    """
    Factory function to create the sync engine and chat assistant.

    Tasks and habits are persisted as JSON under ``data_dir``
    (defaults to the SYNC_DATA_DIR setting).

    Returns:
        (orchestrator, assistant)
    """
    settings = get_settings().sync
    base = settings.data_path if data_dir is None else Path(data_dir)

    orchestrator = SyncOrchestrator(
        task_store=JsonFileCollectionStore(Task, base / "tasks.json", name="tasks"),
        habit_store=JsonFileCollectionStore(Habit, base / "habits.json", name="habits"),
        audit_logger=AuditLogger(InMemoryAuditStorage()),
    )
    return orchestrator, BusinessAssistant()
