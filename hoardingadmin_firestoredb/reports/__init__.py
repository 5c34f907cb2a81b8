from .builder import (
    ReportsBuilder,
    booking_trends,
    build_report,
    location_performance,
    monthly_revenue,
    status_distribution,
)
from .export import (
    BOOKING_REPORT_COLUMNS,
    ExportFormat,
    bookings_report_rows,
    export_bookings_report,
    export_rows,
    to_csv,
    to_json,
    to_pdf,
    to_xlsx,
)

__all__ = [
    "BOOKING_REPORT_COLUMNS",
    "ExportFormat",
    "ReportsBuilder",
    "booking_trends",
    "bookings_report_rows",
    "build_report",
    "export_bookings_report",
    "export_rows",
    "location_performance",
    "monthly_revenue",
    "status_distribution",
    "to_csv",
    "to_json",
    "to_pdf",
    "to_xlsx",
]
