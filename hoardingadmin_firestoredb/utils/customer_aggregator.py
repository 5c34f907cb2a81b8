from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..schemas.booking import NOT_AVAILABLE, UNKNOWN_USER, EnrichedBooking
from ..schemas.customer import UNKNOWN_CUSTOMER_ID, CustomerAggregate
from ..schemas.user import User, UserRole

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def booking_timestamp(booking: EnrichedBooking) -> Optional[datetime]:
    """When the booking was made: createdAt, or startDate for documents written without it."""
    return booking.created_at or booking.start_date


def _sort_key(aggregate: CustomerAggregate):
    timestamp = aggregate.last_booking_at
    return (timestamp is not None, timestamp or _EPOCH)


def aggregate_customers(bookings: Iterable[EnrichedBooking]) -> List[CustomerAggregate]:
    """
    Group enriched bookings by customer.

    Each aggregate holds the customer's bookings in input order, the summed amounts,
    per-status counts and the most recent booking timestamp. Bookings without a customer
    reference are grouped under "unknown". Aggregates come back most recently active first;
    customers without any timestamp go last and ties keep their first-seen order.
    """
    aggregates: Dict[str, CustomerAggregate] = {}

    for booking in bookings:
        customer_id = booking.user_id or UNKNOWN_CUSTOMER_ID
        aggregate = aggregates.get(customer_id)
        if aggregate is None:
            aggregate = CustomerAggregate(
                customer_id=customer_id,
                name=booking.customer_name,
                email=booking.customer_email,
                phone=booking.customer_phone,
            )
            aggregates[customer_id] = aggregate

        aggregate.bookings.append(booking)
        aggregate.total_spend += booking.amount
        aggregate.status_counts[booking.status] = aggregate.status_counts.get(booking.status, 0) + 1

        timestamp = booking_timestamp(booking)
        if timestamp is not None and (aggregate.last_booking_at is None or timestamp > aggregate.last_booking_at):
            aggregate.last_booking_at = timestamp

    # sorted() is stable with reverse=True, so equal keys keep insertion order
    return sorted(aggregates.values(), key=_sort_key, reverse=True)


def merge_customer_directory(aggregates: List[CustomerAggregate], users: Iterable[Any]) -> List[CustomerAggregate]:
    """Append registered non-admin users that have no bookings yet as empty aggregates."""
    merged = list(aggregates)
    known_ids = {aggregate.customer_id for aggregate in aggregates}

    for entry in users:
        user = entry if isinstance(entry, User) else User.model_validate(entry)
        if user.role == UserRole.ADMIN.value or not user.id or user.id in known_ids:
            continue
        merged.append(
            CustomerAggregate(
                customer_id=user.id,
                name=user.display_label or UNKNOWN_USER,
                email=user.email or NOT_AVAILABLE,
                phone=user.phone or user.phone_number or NOT_AVAILABLE,
            )
        )
        known_ids.add(user.id)

    return merged
