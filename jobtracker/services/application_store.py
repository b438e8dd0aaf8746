"""Canonical in-memory collection of applications with debounced write-through."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime
from typing import Any

from jobtracker.config import settings
from jobtracker.db import DuckDBKeyValueStore
from jobtracker.models.application import (
    Application,
    ApplicationDraft,
    CvVersion,
    check_choices,
    generate_id,
    resolve_field_name,
)
from jobtracker.services import csv_codec
from jobtracker.services.persistence import PersistenceGateway

logger = logging.getLogger(__name__)


class ApplicationStore:
    """Owns the application list and schedules saves after mutations.

    Every mutation swaps in a new list, so readers never see a half-applied
    change. Saves are debounced: each mutation restarts the timer, and the
    save that eventually runs uses whatever the collection holds at that
    moment. A save already in flight is never cancelled; saves are
    serialized by a lock.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        debounce_seconds: float | None = None,
        csv_dialect: csv_codec.Dialect | None = None,
        on_save_failure: Callable[[str], None] | None = None,
    ) -> None:
        self._gateway = gateway
        self._debounce = settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self._csv_dialect = csv_dialect or settings.csv_dialect
        self._on_save_failure = on_save_failure
        self._applications: list[Application] = []
        self._loading = False
        self._loaded = False
        self._timer: asyncio.TimerHandle | None = None
        self._save_lock = asyncio.Lock()
        self._save_tasks: set[asyncio.Task] = set()
        self.save_warning: str | None = None

    # ----- read access -----

    @property
    def applications(self) -> tuple[Application, ...]:
        return tuple(self._applications)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def last_sync(self) -> datetime | None:
        return self._gateway.last_sync

    @property
    def has_pending_save(self) -> bool:
        return self._timer is not None

    def get(self, app_id: str) -> Application | None:
        for app in self._applications:
            if app.id == app_id:
                return app
        return None

    def __len__(self) -> int:
        return len(self._applications)

    # ----- loading -----

    async def load(self) -> None:
        """Replace the collection with the saved state. No save is scheduled for this."""
        self._loading = True
        try:
            loaded = await self._gateway.load()
        finally:
            self._loading = False
        self._applications = self._with_unique_ids(loaded)
        self._loaded = True
        logger.info("Application store ready with %d applications", len(self._applications))

    def _with_unique_ids(self, applications: list[Application]) -> list[Application]:
        seen: set[str] = set()
        result = []
        for app in applications:
            if not app.id or app.id in seen:
                new_id = self._fresh_id(seen)
                logger.warning("Reassigning duplicate or missing id %r -> %s", app.id, new_id)
                app = app.model_copy(update={"id": new_id})
            seen.add(app.id)
            result.append(app)
        return result

    def _fresh_id(self, taken: set[str] | None = None) -> str:
        taken = taken if taken is not None else {app.id for app in self._applications}
        new_id = generate_id()
        while new_id in taken:
            new_id = generate_id()
        return new_id

    # ----- mutations -----

    def _replace(self, applications: list[Application]) -> None:
        self._applications = applications
        self._schedule_persist()

    def add(self, draft: ApplicationDraft) -> Application | None:
        """Append a new application; drafts without company and position are ignored.

        Raises InvalidFieldError when status, location, platform or CV version
        is not one of the known values.
        """
        if not draft.is_creatable():
            logger.debug("Ignoring draft without company/position")
            return None
        today = date.today()
        data = draft.model_dump()
        data.update(
            id=self._fresh_id(),
            date_applied=draft.date_applied or today,
            cv_version=draft.cv_version or CvVersion.SUPPORT.value,
            last_update=today,
        )
        app = Application.model_validate(data)
        check_choices(app)
        self._replace([*self._applications, app])
        logger.info("Added application %s: %s at %s", app.id, app.position, app.company)
        return app

    def update_field(self, app_id: str, field: str, value: Any) -> Application | None:
        """Set one field and re-stamp ``last_update``. Unknown ids are ignored."""
        resolve_field_name(field)
        for index, app in enumerate(self._applications):
            if app.id == app_id:
                updated = app.with_field(field, value)
                applications = list(self._applications)
                applications[index] = updated
                self._replace(applications)
                logger.debug("Updated %s on application %s", field, app_id)
                return updated
        logger.debug("update_field: no application with id %s", app_id)
        return None

    def delete(self, app_id: str) -> bool:
        """Remove an application. Callers confirm with the user beforehand."""
        remaining = [app for app in self._applications if app.id != app_id]
        if len(remaining) == len(self._applications):
            return False
        self._replace(remaining)
        logger.info("Deleted application %s", app_id)
        return True

    def import_batch(self, records: Iterable[ApplicationDraft]) -> int:
        """Append records with fresh ids. No deduplication against existing entries."""
        today = date.today()
        taken = {app.id for app in self._applications}
        imported = []
        for record in records:
            data = record.model_dump()
            data["id"] = self._fresh_id(taken)
            data["last_update"] = data.get("last_update") or today
            taken.add(data["id"])
            imported.append(Application.model_validate(data))
        if imported:
            self._replace([*self._applications, *imported])
        logger.info("Imported %d applications", len(imported))
        return len(imported)

    def import_csv(self, text: str) -> int:
        return self.import_batch(csv_codec.decode(text, self._csv_dialect))

    def export_csv(self) -> str:
        return csv_codec.encode(self._applications, self._csv_dialect)

    # ----- persistence -----

    def _schedule_persist(self) -> None:
        if self._loading:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; save not scheduled")
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self._debounce, self._start_persist)

    def _start_persist(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self.persist())
        self._save_tasks.add(task)
        task.add_done_callback(self._save_tasks.discard)

    async def persist(self) -> bool | None:
        """Save the current collection. Returns None when the save was skipped."""
        if self._loading:
            logger.debug("Skipping save while loading")
            return None
        async with self._save_lock:
            snapshot = list(self._applications)
            # An empty list right after startup would overwrite data not yet loaded.
            if not snapshot:
                logger.debug("Skipping save of empty collection")
                return None
            ok = await self._gateway.save(snapshot)

        if ok:
            self.save_warning = None
            return True

        self.save_warning = settings.save_failure_message
        logger.warning("Save failed; in-memory applications are kept. %s", self.save_warning)
        if self._on_save_failure is not None:
            try:
                self._on_save_failure(self.save_warning)
            except Exception:
                logger.exception("Save failure callback raised")
        return False

    async def flush(self) -> bool | None:
        """Run a pending debounced save now and wait for saves in flight."""
        result = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            result = await self.persist()
        if self._save_tasks:
            await asyncio.gather(*self._save_tasks, return_exceptions=True)
        return result


application_store = ApplicationStore(
    PersistenceGateway(DuckDBKeyValueStore(), settings.storage_key)
)


def get_application_store() -> ApplicationStore:
    return application_store
