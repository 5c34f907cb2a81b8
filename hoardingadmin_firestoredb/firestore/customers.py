from typing import Optional

from ..utils.booking_filters import BookingFilterCriteria, filter_customers
from ..utils.customer_aggregator import aggregate_customers, merge_customer_directory
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_it import time_it
from .bookings import BookingSystem
from .users import FirestoreUsersDB


class FirestoreCustomersDB:
    """Customer views derived from bookings. Nothing is stored; every call recomputes."""

    _instance = None

    def __init__(self, bookings_db: Optional[BookingSystem] = None, users_db: Optional[FirestoreUsersDB] = None):
        self.bookings_db = bookings_db or BookingSystem.shared()
        self.users_db = users_db or self.bookings_db.users_db

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    @time_it
    async def get_customer_aggregates(self, criteria: Optional[BookingFilterCriteria] = None, include_without_bookings: bool = False) -> StandardResponse:
        try:
            response = await self.bookings_db.get_enriched_bookings()
            if not response.status:
                return response

            aggregates = aggregate_customers(response.data)
            if include_without_bookings:
                users_response = await self.users_db.get_customers()
                if not users_response.status:
                    return users_response
                aggregates = merge_customer_directory(aggregates, users_response.data)

            if criteria is not None:
                aggregates = filter_customers(aggregates, criteria)
            return StandardResponse.success(data=aggregates, message="Customers fetched successfully")
        except Exception as e:
            return self._handle_error(e, "building customer aggregates")

    async def get_customer(self, customer_id: str) -> StandardResponse:
        response = await self.get_customer_aggregates(include_without_bookings=True)
        if not response.status:
            return response
        for aggregate in response.data:
            if aggregate.customer_id == customer_id:
                return StandardResponse.success(data=aggregate, message="Customer retrieved successfully")
        return StandardResponse.not_found("Customer not found")

    async def get_booking_history(self, customer_id: str) -> StandardResponse:
        """A customer's enriched bookings, latest start date first."""
        try:
            if not customer_id:
                return StandardResponse.bad_request("Customer ID is required")

            response = await self.bookings_db.get_bookings_by_user(customer_id)
            if not response.status:
                return response

            enriched = await self.bookings_db.enrich(response.data)
            dated = [booking for booking in enriched if booking.start_date is not None]
            undated = [booking for booking in enriched if booking.start_date is None]
            history = sorted(dated, key=lambda booking: booking.start_date, reverse=True) + undated
            return StandardResponse.success(data=history, message="Booking history fetched successfully")
        except Exception as e:
            return self._handle_error(e, f"fetching booking history of '{customer_id}'")
