from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..schemas.booking import BookingStatus, EnrichedBooking, PaymentStatus
from ..schemas.customer import CustomerAggregate
from ..schemas.hoarding import Hoarding
from .time_now import TimeManager

ALL = "all"


class DateFilter(str, Enum):
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"


def _is_unset(value: Optional[str]) -> bool:
    return value is None or value.strip() == "" or value.strip().lower() == ALL


class BookingFilterCriteria(BaseModel):
    """Filters shared by the bookings and customers screens. Unset or "all" means no restriction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search: Optional[str] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    date_filter: DateFilter = DateFilter.ALL

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return None if _is_unset(value) else BookingStatus.normalize(value)

    @field_validator("payment_status", mode="before")
    @classmethod
    def _payment_status(cls, value):
        return None if _is_unset(value) else PaymentStatus.normalize(value)

    @field_validator("date_filter", mode="before")
    @classmethod
    def _date_filter(cls, value):
        if isinstance(value, DateFilter):
            return value
        return DateFilter.ALL if _is_unset(value) else str(value).strip().lower()


def _contains(term: str, *values: Any) -> bool:
    return any(value is not None and term in str(value).lower() for value in values)


def _matches_date(booking: EnrichedBooking, date_filter: DateFilter, now: datetime) -> bool:
    if date_filter == DateFilter.UPCOMING:
        return booking.start_date is not None and booking.start_date > now
    if date_filter == DateFilter.PAST:
        return booking.end_date is not None and booking.end_date < now
    return True


def booking_matches(booking: EnrichedBooking, criteria: BookingFilterCriteria, now: Optional[datetime] = None, search: bool = True) -> bool:
    now = now or TimeManager.get_utc_now()

    if search and criteria.search:
        term = criteria.search.strip().lower()
        if term and not _contains(term, booking.customer_name, booking.hoarding_title, booking.customer_email, booking.id):
            return False
    if criteria.status and booking.status != criteria.status:
        return False
    if criteria.payment_status and booking.payment_status != criteria.payment_status:
        return False
    return _matches_date(booking, criteria.date_filter, now)


def filter_bookings(bookings: Iterable[EnrichedBooking], criteria: BookingFilterCriteria, now: Optional[datetime] = None) -> List[EnrichedBooking]:
    """AND-compose search, status, payment status and date predicates over a booking list."""
    now = now or TimeManager.get_utc_now()
    return [booking for booking in bookings if booking_matches(booking, criteria, now)]


def filter_customers(customers: Iterable[CustomerAggregate], criteria: BookingFilterCriteria, now: Optional[datetime] = None) -> List[CustomerAggregate]:
    """
    Narrow customer aggregates.

    The search term runs over the customer's name, email, phone and id. Status, payment
    and date predicates keep a customer when at least one of their bookings satisfies all
    of them together.
    """
    now = now or TimeManager.get_utc_now()
    term = (criteria.search or "").strip().lower()
    booking_level = bool(criteria.status or criteria.payment_status or criteria.date_filter != DateFilter.ALL)

    result = []
    for customer in customers:
        if term and not _contains(term, customer.name, customer.email, customer.phone, customer.customer_id):
            continue
        if booking_level and not any(booking_matches(b, criteria, now, search=False) for b in customer.bookings):
            continue
        result.append(customer)
    return result


class HoardingFilterCriteria(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    availability: str = ALL
    category: Optional[str] = None
    min_rating: float = 0
    trending: bool = False


def filter_hoardings(hoardings: Iterable[Hoarding], criteria: HoardingFilterCriteria) -> List[Hoarding]:
    term = (criteria.search or "").strip().lower()
    availability = (criteria.availability or ALL).lower()

    result = []
    for hoarding in hoardings:
        if term and not _contains(term, hoarding.title, hoarding.location, hoarding.description):
            continue
        if criteria.min_price is not None and hoarding.price < criteria.min_price:
            continue
        if criteria.max_price is not None and hoarding.price > criteria.max_price:
            continue
        if availability != ALL and hoarding.availability != (availability == "available"):
            continue
        if not _is_unset(criteria.category) and hoarding.resolved_category != criteria.category:
            continue
        if criteria.min_rating > 0 and hoarding.rating < criteria.min_rating:
            continue
        if criteria.trending and not hoarding.trending:
            continue
        result.append(hoarding)
    return result


class CalendarFilterCriteria(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    client_name: Optional[str] = None
    hoarding_name: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return None if _is_unset(value) else BookingStatus.normalize(value)


def filter_calendar_bookings(bookings: Iterable[EnrichedBooking], criteria: CalendarFilterCriteria) -> List[EnrichedBooking]:
    client = (criteria.client_name or "").strip().lower()

    result = []
    for booking in bookings:
        if client and client not in booking.customer_name.lower():
            continue
        if not _is_unset(criteria.hoarding_name) and booking.hoarding_title != criteria.hoarding_name:
            continue
        if not _is_unset(criteria.location) and booking.hoarding_address != criteria.location:
            continue
        if criteria.status and booking.status != criteria.status:
            continue
        result.append(booking)
    return result
