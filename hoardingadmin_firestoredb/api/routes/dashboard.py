from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ...context import AdminContext
from ...utils.time_now import TimeManager
from ..dependencies import get_context, require_admin, respond

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats")
async def dashboard_stats(context: AdminContext = Depends(get_context)):
    return respond(await context.dashboard.get_dashboard_stats())


@router.get("/data")
async def all_data(context: AdminContext = Depends(get_context)):
    return respond(await context.dashboard.fetch_all_data())


@router.get("/search")
async def search(q: str = Query(..., min_length=1), context: AdminContext = Depends(get_context)):
    return respond(await context.dashboard.search(q))


@router.get("/backup", dependencies=[Depends(require_admin)])
async def backup(context: AdminContext = Depends(get_context)):
    response = respond(await context.dashboard.export_backup_json())
    filename = f"firestore_all_data_{TimeManager.get_utc_now().date().isoformat()}.json"
    return Response(
        content=response.data,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
