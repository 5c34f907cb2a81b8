import io
import json

import pandas as pd

from hoardingadmin_firestoredb.reports import (
    BOOKING_REPORT_COLUMNS,
    ExportFormat,
    booking_trends,
    bookings_report_rows,
    export_bookings_report,
    export_rows,
    location_performance,
    monthly_revenue,
    status_distribution,
)
from hoardingadmin_firestoredb.schemas.booking import Booking
from hoardingadmin_firestoredb.schemas.hoarding import Hoarding
from hoardingadmin_firestoredb.utils.booking_filters import CalendarFilterCriteria

from .conftest import utc

NOW = utc(2026, 10, 17, 6, 0)


async def enriched(context):
    return (await context.bookings.get_enriched_bookings()).data


async def test_monthly_revenue_groups_paid_bookings(context, seeded):
    bookings = (await context.bookings.get_all_bookings()).data

    months = monthly_revenue(bookings, NOW)

    assert [(m.month, m.revenue, m.bookings) for m in months] == [("Oct", 1000, 1)]


def test_monthly_revenue_merges_years_and_sorts_by_month():
    bookings = [
        Booking(id="a", amount=300, payment_status="Paid", created_at=utc(2025, 10, 3)),
        Booking(id="b", amount=200, payment_status="paid", created_at=utc(2026, 10, 3)),
        Booking(id="c", amount=50, payment_status="Paid", created_at=utc(2026, 3, 9)),
        Booking(id="d", amount=999, payment_status="Unpaid", created_at=utc(2026, 4, 9)),
    ]

    months = monthly_revenue(bookings, NOW)

    assert [(m.month, m.revenue) for m in months] == [("Mar", 50), ("Oct", 500)]


def test_monthly_revenue_without_paid_bookings():
    october = monthly_revenue([], NOW)
    february = monthly_revenue([], utc(2026, 2, 10))

    assert [m.month for m in october] == ["May", "Jun", "Jul", "Aug", "Sep", "Oct"]
    assert all(m.revenue == 0 for m in october)
    assert [m.month for m in february] == ["Jan", "Feb"]


def test_location_performance():
    hoardings = [
        Hoarding(id="h1", location="Bangalore"),
        Hoarding(id="h2"),
        Hoarding(id="h3", location="Bangalore"),
        Hoarding(id="h4", location="Chennai"),
    ]
    bookings = [
        Booking(id="b1", hoarding_id="h1", amount=1000, payment_status="Paid"),
        Booking(id="b2", hoarding_id="h4", amount=1500, payment_status="Paid"),
        Booking(id="b3", hoarding_id="h3", amount=700),
        Booking(id="b4", hoarding_id="gone", amount=400, payment_status="Paid"),
    ]

    result = location_performance(hoardings, bookings)

    assert [(item.location, item.hoardings, item.revenue) for item in result] == [
        ("Chennai", 1, 1500),
        ("Bangalore", 2, 1000),
        ("Unknown", 1, 0),
    ]


def test_location_performance_keeps_top_five():
    hoardings = [Hoarding(id=f"h{i}", location=f"City {i}") for i in range(7)]
    bookings = [Booking(id=f"b{i}", hoarding_id=f"h{i}", amount=100 * i, payment_status="Paid") for i in range(7)]

    result = location_performance(hoardings, bookings)

    assert [item.location for item in result] == ["City 6", "City 5", "City 4", "City 3", "City 2"]


async def test_booking_trends(context, seeded):
    bookings = (await context.bookings.get_all_bookings()).data

    trends = booking_trends(bookings, now=utc(2026, 10, 28))

    assert [(trend.week, trend.bookings) for trend in trends] == [("Week 1", 1), ("Week 2", 2), ("Week 3", 0), ("Week 4", 0)]


async def test_status_distribution(context, seeded):
    bookings = (await context.bookings.get_all_bookings()).data

    slices = status_distribution(bookings)

    assert [(s.name, s.value) for s in slices] == [("Pending", 1), ("Approved", 2), ("Rejected", 0)]
    assert slices[1].color == "#10b981"


async def test_report_data(context, seeded):
    response = await context.reports.get_report_data()
    report = response.data

    assert response.status
    assert len(report.booking_trends) == 4
    assert [(item.location, item.revenue) for item in report.location_performance] == [("Bangalore", 1000), ("Unknown", 0)]
    assert "monthlyRevenue" in report.model_dump(by_alias=True)


async def test_bookings_report_with_calendar_filters(context, seeded):
    everything = await context.reports.get_bookings_report()
    asha = await context.reports.get_bookings_report(CalendarFilterCriteria(client_name="asha"))
    approved_mega = await context.reports.get_bookings_report(CalendarFilterCriteria(hoarding_name="NH48 Mega Board", status="approved"))

    assert len(everything.data) == 3
    assert [b.id for b in asha.data] == ["b2", "b1"]
    assert sorted(b.id for b in approved_mega.data) == ["b1", "b3"]


async def test_bookings_report_rows(context, seeded):
    rows = bookings_report_rows(await enriched(context))
    by_client = {row["Hoarding Name"] + "/" + row["Client Name"]: row for row in rows}

    b1 = by_client["NH48 Mega Board/Asha Rao"]
    assert list(b1) == BOOKING_REPORT_COLUMNS
    assert (b1["Start Date"], b1["End Date"], b1["Price"], b1["Status"]) == ("12/10/2026", "20/10/2026", 1000, "Approved")
    b3 = by_client["NH48 Mega Board/Ravi Kumar"]
    assert b3["Start Date"] == b3["End Date"] == "05/10/2026"


async def test_export_csv(context, seeded):
    content, media_type, filename = export_bookings_report(await enriched(context), ExportFormat.CSV, now=NOW)

    lines = content.decode("utf-8").splitlines()
    assert lines[0] == "Client Name,Hoarding Name,Location,Price,Start Date,End Date,Status"
    assert len(lines) == 4
    assert media_type.startswith("text/csv")
    assert filename == "bookings_report_2026-10-17.csv"


def test_export_csv_of_nothing_keeps_header():
    content, _, _ = export_bookings_report([], "csv", now=NOW)
    assert content.decode("utf-8").strip() == ",".join(BOOKING_REPORT_COLUMNS)


async def test_export_xlsx(context, seeded):
    content, media_type, filename = export_bookings_report(await enriched(context), ExportFormat.XLSX, now=NOW)

    assert content[:2] == b"PK"
    assert filename.endswith(".xlsx")
    frame = pd.read_excel(io.BytesIO(content), sheet_name="Bookings")
    assert list(frame.columns) == BOOKING_REPORT_COLUMNS
    assert sorted(frame["Client Name"]) == ["Asha Rao", "Asha Rao", "Ravi Kumar"]


async def test_export_pdf(context, seeded):
    content, media_type, filename = export_bookings_report(await enriched(context), ExportFormat.PDF, now=NOW)

    assert content.startswith(b"%PDF")
    assert media_type == "application/pdf"
    assert filename == "bookings_report_2026-10-17.pdf"


async def test_export_json(context, seeded):
    content, media_type, _ = export_bookings_report(await enriched(context), ExportFormat.JSON, now=NOW)

    rows = json.loads(content)
    assert len(rows) == 3
    assert set(rows[0]) == set(BOOKING_REPORT_COLUMNS)
    assert media_type == "application/json"


def test_export_rows_for_report_sections():
    rows = [month.model_dump(by_alias=True) for month in monthly_revenue([], NOW)]

    csv_content, _, csv_name = export_rows(rows, ExportFormat.CSV, "monthly_revenue")
    pdf_content, _, _ = export_rows(rows, ExportFormat.PDF, "monthly_revenue")

    assert csv_name == "monthly_revenue.csv"
    assert csv_content.decode("utf-8").splitlines()[0] == "month,revenue,bookings"
    assert pdf_content.startswith(b"%PDF")
