from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ...context import AdminContext
from ...reports.export import ExportFormat, export_bookings_report, export_rows
from ...utils.booking_filters import CalendarFilterCriteria
from ...utils.error_codes import ErrorCodes
from ..dependencies import get_context, respond
from .bookings import calendar_filters

router = APIRouter(prefix="/reports", tags=["Reports"])

REPORT_SECTIONS = {
    "monthly-revenue": "monthly_revenue",
    "location-performance": "location_performance",
    "booking-trends": "booking_trends",
    "status-distribution": "status_distribution",
}


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(content=content, media_type=media_type, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.get("")
async def report_data(context: AdminContext = Depends(get_context)):
    return respond(await context.reports.get_report_data())


@router.get("/bookings/export")
async def export_bookings(
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    criteria: CalendarFilterCriteria = Depends(calendar_filters),
    context: AdminContext = Depends(get_context),
):
    bookings = respond(await context.reports.get_bookings_report(criteria)).data
    return _download(*export_bookings_report(bookings, export_format))


@router.get("/{section}/export")
async def export_section(section: str, export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"), context: AdminContext = Depends(get_context)):
    if section not in REPORT_SECTIONS:
        raise HTTPException(status_code=ErrorCodes.NOT_FOUND, detail="Unknown report")

    report = respond(await context.reports.get_report_data()).data
    rows = [item.model_dump() for item in getattr(report, REPORT_SECTIONS[section])]
    if not rows:
        raise HTTPException(status_code=ErrorCodes.BAD_REQUEST, detail="No data to export")
    return _download(*export_rows(rows, export_format, section.replace("-", "_")))
