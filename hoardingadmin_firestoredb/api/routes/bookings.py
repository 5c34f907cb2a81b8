from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ...context import AdminContext
from ...utils.booking_filters import BookingFilterCriteria, CalendarFilterCriteria, filter_calendar_bookings
from ...utils.calendar_status import bookings_on, day_status, month_overview
from ...utils.error_codes import ErrorCodes
from ...utils.standard_response import StandardResponse
from ..dependencies import PageParams, get_context, respond, respond_page

router = APIRouter(prefix="/bookings", tags=["Bookings"])


class StatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    payment_status: str


def booking_filters(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None, alias="paymentStatus"),
    date_filter: str = Query("all", alias="dateFilter"),
) -> BookingFilterCriteria:
    try:
        return BookingFilterCriteria(search=search, status=status, payment_status=payment_status, date_filter=date_filter)
    except ValidationError:
        raise HTTPException(status_code=ErrorCodes.BAD_REQUEST, detail=f"Invalid date filter: {date_filter}")


def calendar_filters(
    client_name: Optional[str] = Query(None, alias="clientName"),
    hoarding_name: Optional[str] = Query(None, alias="hoardingName"),
    location: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
) -> CalendarFilterCriteria:
    return CalendarFilterCriteria(client_name=client_name, hoarding_name=hoarding_name, location=location, status=status)


async def _calendar_inputs(context: AdminContext, criteria: CalendarFilterCriteria):
    bookings_response = respond(await context.bookings.get_enriched_bookings())
    hoardings_response = respond(await context.hoardings.get_all_hoardings())
    return filter_calendar_bookings(bookings_response.data, criteria), len(hoardings_response.data)


@router.get("")
async def list_bookings(
    criteria: BookingFilterCriteria = Depends(booking_filters),
    params: PageParams = Depends(),
    context: AdminContext = Depends(get_context),
):
    return respond_page(await context.bookings.get_enriched_bookings(criteria), params)


@router.get("/calendar")
async def calendar_month(
    year: int = Query(..., ge=1970),
    month: int = Query(..., ge=1, le=12),
    criteria: CalendarFilterCriteria = Depends(calendar_filters),
    context: AdminContext = Depends(get_context),
):
    bookings, total_hoardings = await _calendar_inputs(context, criteria)
    overview = month_overview(bookings, year, month, total_hoardings)
    return StandardResponse.success(data=overview, message="Calendar fetched successfully")


@router.get("/calendar/{day}")
async def calendar_day(day: date, criteria: CalendarFilterCriteria = Depends(calendar_filters), context: AdminContext = Depends(get_context)):
    bookings, total_hoardings = await _calendar_inputs(context, criteria)
    data = {"status": day_status(bookings, day, total_hoardings), "bookings": bookings_on(bookings, day)}
    return StandardResponse.success(data=data, message="Day fetched successfully")


@router.get("/{booking_id}")
async def get_booking(booking_id: str, context: AdminContext = Depends(get_context)):
    booking = respond(await context.bookings.get_booking(booking_id)).data
    enriched = await context.bookings.enrich([booking])
    return StandardResponse.success(data=enriched[0], message="Booking retrieved successfully")


@router.patch("/{booking_id}/status")
async def update_status(booking_id: str, update: StatusUpdate, context: AdminContext = Depends(get_context)):
    return respond(await context.bookings.update_status(booking_id, update.status))


@router.patch("/{booking_id}/payment-status")
async def update_payment_status(booking_id: str, update: PaymentStatusUpdate, context: AdminContext = Depends(get_context)):
    return respond(await context.bookings.update_payment_status(booking_id, update.payment_status))
