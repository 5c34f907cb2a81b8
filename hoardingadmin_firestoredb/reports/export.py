"""
File exports for the reports screen.

Rows are plain dicts with display headers as keys. CSV and XLSX go through pandas
(openpyxl writes the workbook), PDF through fpdf2, JSON through the standard library.
"""

import io
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from fpdf import FPDF
from fpdf.fonts import FontFace

from ..schemas.booking import EnrichedBooking
from ..utils.time_now import TimeManager

PDF_TITLE = "SunPublicity"
PDF_HEADER_FILL = (66, 133, 244)
BOOKINGS_SHEET = "Bookings"

BOOKING_REPORT_COLUMNS = ["Client Name", "Hoarding Name", "Location", "Price", "Start Date", "End Date", "Status"]
# short headings so the table fits a portrait page
PDF_BOOKING_COLUMNS = ["Client", "Hoarding", "Location", "Price", "Start", "End", "Status"]

Rows = List[Dict[str, Any]]


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"
    PDF = "pdf"
    JSON = "json"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.PDF: "application/pdf",
    ExportFormat.JSON: "application/json",
}


def _display_date(value: Optional[datetime]) -> str:
    local = TimeManager.to_business_time(value)
    return local.strftime("%d/%m/%Y") if local else ""


def bookings_report_rows(bookings: Iterable[EnrichedBooking]) -> Rows:
    rows = []
    for booking in bookings:
        start = booking.start_date or booking.created_at
        rows.append(
            {
                "Client Name": booking.customer_name,
                "Hoarding Name": booking.hoarding_title,
                "Location": booking.hoarding_address,
                "Price": booking.amount,
                "Start Date": _display_date(start),
                "End Date": _display_date(booking.end_date or start),
                "Status": booking.status,
            }
        )
    return rows


def _frame(rows: Rows, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    if columns is None and rows:
        columns = list(rows[0].keys())
    return pd.DataFrame(rows, columns=columns)


def to_csv(rows: Rows, columns: Optional[Sequence[str]] = None) -> bytes:
    return _frame(rows, columns).to_csv(index=False).encode("utf-8")


def to_xlsx(rows: Rows, sheet_name: str = BOOKINGS_SHEET, columns: Optional[Sequence[str]] = None) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        _frame(rows, columns).to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def _latin1(value: Any) -> str:
    # the core PDF fonts only cover latin-1
    return str(value if value is not None else "").encode("latin-1", "replace").decode("latin-1")


def to_pdf(rows: Rows, headings: Optional[Sequence[str]] = None, title: str = PDF_TITLE, generated_at: Optional[datetime] = None) -> bytes:
    columns = list(rows[0].keys()) if rows else list(headings or [])
    headings = list(headings or columns)
    generated_at = TimeManager.to_business_time(generated_at or TimeManager.get_utc_now())

    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=20)
    pdf.set_text_color(40, 40, 40)
    pdf.cell(text=_latin1(title), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", size=10)
    pdf.cell(text=f"Generated on: {generated_at.strftime('%d/%m/%Y, %H:%M:%S')}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    pdf.set_font("Helvetica", size=8)
    headings_style = FontFace(emphasis="BOLD", color=255, fill_color=PDF_HEADER_FILL)
    with pdf.table(headings_style=headings_style) as table:
        heading_row = table.row()
        for heading in headings:
            heading_row.cell(_latin1(heading))
        for row in rows:
            table_row = table.row()
            for column in columns:
                table_row.cell(_latin1(row.get(column)))
    return bytes(pdf.output())


def to_json(data: Any) -> bytes:
    return json.dumps(data, indent=2, default=str).encode("utf-8")


def export_bookings_report(bookings: Iterable[EnrichedBooking], export_format: ExportFormat, now: Optional[datetime] = None) -> Tuple[bytes, str, str]:
    """Bookings report as (content, media type, file name)."""
    export_format = ExportFormat(export_format)
    rows = bookings_report_rows(bookings)
    now = now or TimeManager.get_utc_now()
    filename = f"bookings_report_{TimeManager.to_business_time(now).date().isoformat()}.{export_format.value}"

    if export_format == ExportFormat.CSV:
        content = to_csv(rows, BOOKING_REPORT_COLUMNS)
    elif export_format == ExportFormat.XLSX:
        content = to_xlsx(rows, BOOKINGS_SHEET, BOOKING_REPORT_COLUMNS)
    elif export_format == ExportFormat.PDF:
        content = to_pdf(rows, PDF_BOOKING_COLUMNS, generated_at=now)
    else:
        content = to_json(rows)
    return content, MEDIA_TYPES[export_format], filename


def export_rows(rows: Rows, export_format: ExportFormat, name: str) -> Tuple[bytes, str, str]:
    """Any report section (monthly revenue, locations, ...) as (content, media type, file name)."""
    export_format = ExportFormat(export_format)
    filename = f"{name}.{export_format.value}"
    if export_format == ExportFormat.CSV:
        content = to_csv(rows)
    elif export_format == ExportFormat.XLSX:
        content = to_xlsx(rows, sheet_name=name[:31])
    elif export_format == ExportFormat.PDF:
        content = to_pdf(rows)
    else:
        content = to_json(rows)
    return content, MEDIA_TYPES[export_format], filename
