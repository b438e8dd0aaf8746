"""Application CRUD endpoints used by the tracker UI."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, ValidationError

from jobtracker.models.application import (
    Application,
    ApplicationDraft,
    InvalidFieldError,
    new_draft,
)
from jobtracker.models.stats import ALL, SortKey, SortOrder, ViewQuery
from jobtracker.services.application_store import ApplicationStore, get_application_store
from jobtracker.services.query_engine import query_view

router = APIRouter(prefix="/api/applications", tags=["applications"])


class FieldUpdate(BaseModel):
    field: str
    value: Any = None


@router.get("/", response_model=list[Application])
async def list_applications(
    status: str = ALL,
    platform: str = ALL,
    search: str = "",
    sort_by: SortKey = Query("dateApplied", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    store: ApplicationStore = Depends(get_application_store),
) -> list[Application]:
    """Filtered, searched and sorted applications for the table."""
    query = ViewQuery(
        filter_status=status,
        filter_platform=platform,
        search_term=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return query_view(store.applications, query)


@router.get("/draft", response_model=ApplicationDraft)
async def get_draft() -> ApplicationDraft:
    return new_draft()


@router.post("/", response_model=Application | None)
async def add_application(
    draft: ApplicationDraft, store: ApplicationStore = Depends(get_application_store)
) -> Application | None:
    """Returns null when company or position is missing."""
    try:
        return store.add(draft)
    except InvalidFieldError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{app_id}", response_model=Application)
async def get_application(
    app_id: str, store: ApplicationStore = Depends(get_application_store)
) -> Application:
    app = store.get(app_id)
    if app is None:
        raise HTTPException(status_code=404, detail=f"Application {app_id} not found")
    return app


@router.patch("/{app_id}", response_model=Application)
async def update_application_field(
    app_id: str, update: FieldUpdate, store: ApplicationStore = Depends(get_application_store)
) -> Application:
    try:
        app = store.update_field(app_id, update.field, update.value)
    except (InvalidFieldError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    if app is None:
        raise HTTPException(status_code=404, detail=f"Application {app_id} not found")
    return app


@router.delete("/{app_id}", status_code=204, response_class=Response)
async def delete_application(
    app_id: str,
    confirm: bool = False,
    store: ApplicationStore = Depends(get_application_store),
) -> Response:
    if not confirm:
        raise HTTPException(status_code=400, detail="Deletion must be confirmed (confirm=true)")
    if not store.delete(app_id):
        raise HTTPException(status_code=404, detail=f"Application {app_id} not found")
    return Response(status_code=204)
