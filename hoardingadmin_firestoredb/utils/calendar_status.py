import calendar
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..schemas.booking import EnrichedBooking
from .time_now import TimeManager

FULLY_BOOKED = "Fully Booked"
PARTIAL = "Partial"
AVAILABLE = "Available"
PARTIAL_THRESHOLD = 3


class DayStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day: date
    label: str
    available: int
    booked: int


def _local_day(value: Optional[datetime]) -> Optional[date]:
    local = TimeManager.to_business_time(value)
    return local.date() if local else None


def booking_span(booking: EnrichedBooking) -> Optional[tuple]:
    """First and last calendar day a booking occupies, in business time."""
    start = _local_day(booking.start_date) or _local_day(booking.created_at)
    if start is None:
        return None
    end = _local_day(booking.end_date) or start
    return start, max(start, end)


def bookings_on(bookings: Iterable[EnrichedBooking], day: date) -> List[EnrichedBooking]:
    result = []
    for booking in bookings:
        span = booking_span(booking)
        if span and span[0] <= day <= span[1]:
            result.append(booking)
    return result


def day_status(bookings: Iterable[EnrichedBooking], day: date, total_hoardings: int) -> DayStatus:
    booked = len(bookings_on(bookings, day))
    available = max(0, (total_hoardings or 1) - booked)

    if available == 0:
        label = FULLY_BOOKED
    elif available < PARTIAL_THRESHOLD:
        label = PARTIAL
    else:
        label = AVAILABLE
    return DayStatus(day=day, label=label, available=available, booked=booked)


def month_overview(bookings: Iterable[EnrichedBooking], year: int, month: int, total_hoardings: int) -> Dict[str, DayStatus]:
    """Availability label for every day of a month, keyed by ISO date."""
    bookings = list(bookings)
    days_in_month = calendar.monthrange(year, month)[1]
    overview = {}
    for day_number in range(1, days_in_month + 1):
        day = date(year, month, day_number)
        overview[day.isoformat()] = day_status(bookings, day, total_hoardings)
    return overview
