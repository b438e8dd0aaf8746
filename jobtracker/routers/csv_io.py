"""CSV export and import endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from jobtracker.services.application_store import ApplicationStore, get_application_store
from jobtracker.services.csv_codec import export_filename

router = APIRouter(prefix="/api/csv", tags=["csv"])


@router.get("/export")
async def export_csv(store: ApplicationStore = Depends(get_application_store)) -> Response:
    return Response(
        content=store.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/import")
async def import_csv(
    request: Request, store: ApplicationStore = Depends(get_application_store)
) -> dict:
    """Import raw CSV text from the request body. Duplicates are not detected."""
    text = (await request.body()).decode("utf-8-sig", errors="replace")
    return {"imported": store.import_csv(text)}
