"""Loads and saves the whole application collection as a single JSON blob."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Protocol

from pydantic import ValidationError

from jobtracker.models.application import Application

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...


class PersistenceGateway:
    """Serializes ``{"applications": [...], "lastSync": ...}`` to a key/value store.

    Loading never fails: a missing or unreadable blob yields an empty list.
    Saving reports failure as ``False`` instead of raising.
    """

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self._key = key
        self.last_sync: datetime | None = None

    async def load(self) -> list[Application]:
        try:
            blob = await self._store.get(self._key)
        except Exception as e:
            logger.warning("Could not read saved applications: %s", e)
            return []
        if blob is None:
            logger.info("No saved applications under %r", self._key)
            return []
        return self._parse(blob)

    def _parse(self, blob: str) -> list[Application]:
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            logger.warning("Saved applications are corrupt, starting empty: %s", e)
            return []
        if not isinstance(data, dict) or not isinstance(data.get("applications"), list):
            logger.warning("Saved applications have an unexpected shape, starting empty")
            return []

        applications = []
        for raw in data["applications"]:
            try:
                applications.append(Application.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping unreadable saved application: %s", e)

        last_sync = data.get("lastSync")
        if isinstance(last_sync, str):
            try:
                self.last_sync = datetime.fromisoformat(last_sync.replace("Z", "+00:00"))
            except ValueError:
                logger.debug("Ignoring invalid lastSync %r", last_sync)
        logger.info("Loaded %d applications (last sync %s)", len(applications), self.last_sync)
        return applications

    def serialize(self, applications: Sequence[Application], synced_at: datetime) -> str:
        return json.dumps(
            {
                "applications": [app.model_dump(mode="json", by_alias=True) for app in applications],
                "lastSync": synced_at.isoformat(),
            }
        )

    async def save(self, applications: Sequence[Application]) -> bool:
        synced_at = datetime.now(timezone.utc)
        try:
            await self._store.set(self._key, self.serialize(applications, synced_at))
        except Exception as e:
            logger.error("Failed to save %d applications: %s", len(applications), e)
            return False
        self.last_sync = synced_at
        logger.debug("Saved %d applications", len(applications))
        return True
