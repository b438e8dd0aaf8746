"""Dashboard endpoints: statistics and follow-up reminders."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from jobtracker.models.application import Application
from jobtracker.models.stats import ApplicationStats
from jobtracker.services.application_store import ApplicationStore, get_application_store
from jobtracker.services.query_engine import compute_stats, follow_ups_due, status_counts

router = APIRouter(prefix="/api", tags=["views"])


@router.get("/stats", response_model=ApplicationStats)
async def get_stats(store: ApplicationStore = Depends(get_application_store)) -> ApplicationStats:
    return compute_stats(store.applications)


@router.get("/stats/status-counts")
async def get_status_counts(store: ApplicationStore = Depends(get_application_store)) -> dict:
    """Counts shown next to each option of the status filter."""
    return {"All": len(store), **status_counts(store.applications)}


@router.get("/follow-ups", response_model=list[Application])
async def get_follow_ups(
    store: ApplicationStore = Depends(get_application_store),
) -> list[Application]:
    return follow_ups_due(store.applications)


@router.get("/sync")
async def get_sync_status(store: ApplicationStore = Depends(get_application_store)) -> dict:
    """Load/save state, including the warning shown after a failed save."""
    return {
        "loaded": store.is_loaded,
        "pendingSave": store.has_pending_save,
        "lastSync": store.last_sync.isoformat() if store.last_sync else None,
        "warning": store.save_warning,
    }
