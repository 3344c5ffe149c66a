from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, Optional, Tuple

from config.settings import Settings, get_settings
from db.repos.activities_repo import ActivitiesRepo
from db.repos.contacts_repo import ContactsRepo
from models.connection import Connection, SourceInfo, parse_connection
from models.sync_result import BatchSyncResult, SyncOutcome
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import ApplyMergePolicy, MatchContact, RecordActivity
from ports.repos import ActivitiesRepoPort, ContactsRepoPort
from services.activity_recorder import ActivityRecorder
from services.contact_matcher import ContactMatcher
from services.contact_merger import ContactMerger
from services.errors import PayloadValidationError


logger = logging.getLogger(__name__)


class KeyedLocks:
    """Per-key mutexes, dropped once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, Tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._guard:
                lock, users = self._locks[key]
                if users <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every ConnectionSync in the process (one is built per request)
_SYNC_LOCKS = KeyedLocks()


class ConnectionSync:
    """Drives match -> create/merge -> activity for one or many connections."""

    def __init__(
        self,
        contacts: ContactsRepoPort,
        activities: ActivitiesRepoPort,
        lead_source: str = "LINKEDIN_OUTREACH",
        initial_lead_status: str = "NEW",
        clock: Optional[Callable[[], str]] = None,
        locks: Optional[KeyedLocks] = None,
    ) -> None:
        self.matcher = ContactMatcher(contacts)
        self.merger = ContactMerger(contacts, lead_source, initial_lead_status, clock)
        self.recorder = ActivityRecorder(activities)
        self.pipeline = Pipeline([
            MatchContact(self.matcher),
            ApplyMergePolicy(self.merger),
            RecordActivity(self.recorder),
        ])
        self.locks = locks if locks is not None else _SYNC_LOCKS

    def sync_one(
        self,
        organization_id: str,
        connection: Connection,
        force_update: bool = False,
        source: Optional[SourceInfo] = None,
        event_timestamp: Optional[str] = None,
    ) -> SyncOutcome:
        def _ctx() -> RunContext:
            return RunContext(
                organization_id=organization_id,
                connection=connection,
                force_update=force_update,
                source=source,
                event_timestamp=event_timestamp,
            )

        with self.locks.hold((organization_id, connection.urn_id)):
            ctx = self.pipeline.run(_ctx())
            if ctx.outcome is not None and ctx.outcome.conflict:
                # Another process created the contact first; merge into it
                logger.info(
                    "Retrying sync after create conflict",
                    extra={"step": "sync", "status": "retry", "org_id": organization_id},
                )
                ctx = self.pipeline.run(_ctx())

        outcome = ctx.outcome or SyncOutcome.skipped("Sync produced no outcome")
        logger.info(
            f"Sync completed: {outcome.action.value} (contact_id: {outcome.contact_id})",
            extra={
                "step": "sync",
                "status": outcome.action.value,
                "org_id": organization_id,
                "contact_id": outcome.contact_id or "-",
                "match_type": outcome.match_type.value if outcome.match_type else "-",
                "error": outcome.error or "-",
            },
        )
        return outcome

    def run_batch(self, organization_id: str, connections: Iterable[Any], force_update: bool = False) -> BatchSyncResult:
        """Sync records one at a time; a failing record only skips itself."""
        result = BatchSyncResult()
        for raw in connections:
            try:
                connection = raw if isinstance(raw, Connection) else parse_connection(raw)
                outcome = self.sync_one(organization_id, connection, force_update=force_update)
            except PayloadValidationError as exc:
                outcome = SyncOutcome.skipped(f"Invalid connection: {exc.summary()}")
            except Exception as exc:
                logger.error(
                    f"Batch item failed: {exc}",
                    extra={"step": "batch", "status": "skipped", "org_id": organization_id, "error": str(exc)},
                )
                outcome = SyncOutcome.skipped(str(exc) or "Unknown error")
            result.add(outcome)

        logger.info(
            f"Batch sync completed: {result.created} created, {result.updated} updated, {result.skipped} skipped",
            extra={"step": "batch", "status": "done", "org_id": organization_id},
        )
        return result


def build_connection_sync(
    conn: sqlite3.Connection,
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], str]] = None,
) -> ConnectionSync:
    settings = settings or get_settings()
    return ConnectionSync(
        ContactsRepo(conn),
        ActivitiesRepo(conn),
        lead_source=settings.lead_source,
        initial_lead_status=settings.initial_lead_status,
        clock=clock,
    )
