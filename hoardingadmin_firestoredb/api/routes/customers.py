from fastapi import APIRouter, Depends, Query

from ...context import AdminContext
from ...utils.booking_filters import BookingFilterCriteria
from ...utils.pagination import paginate
from ...utils.standard_response import StandardResponse
from ..dependencies import PageParams, get_context, respond
from .bookings import booking_filters

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("")
async def list_customers(
    criteria: BookingFilterCriteria = Depends(booking_filters),
    include_without_bookings: bool = Query(False, alias="includeWithoutBookings"),
    include_bookings: bool = Query(False, alias="includeBookings"),
    params: PageParams = Depends(),
    context: AdminContext = Depends(get_context),
):
    response = respond(await context.customers.get_customer_aggregates(criteria, include_without_bookings))
    page = paginate(response.data, params.page, params.per_page)
    items = [customer.to_api(include_bookings=include_bookings) for customer in page.items]
    return StandardResponse.success(data=page.model_copy(update={"items": items}), message=response.message)


@router.get("/{customer_id}")
async def get_customer(customer_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.customers.get_customer(customer_id))


@router.get("/{customer_id}/bookings")
async def booking_history(customer_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.customers.get_booking_history(customer_id))
