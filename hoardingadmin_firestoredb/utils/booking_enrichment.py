import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from ..schemas.booking import NOT_AVAILABLE, UNKNOWN_HOARDING, UNKNOWN_USER, Booking, EnrichedBooking
from .logger import logger

Resolver = Callable[[str], Awaitable[Optional[Any]]]


def _as_mapping(entity: Union[Mapping[str, Any], BaseModel, None]) -> Dict[str, Any]:
    if entity is None:
        return {}
    if isinstance(entity, BaseModel):
        return entity.model_dump(by_alias=True)
    return dict(entity)


def _first_text(*values: Any) -> Optional[str]:
    for value in values:
        if value is not None and str(value).strip():
            return str(value)
    return None


def enrich_booking(booking: Booking, user: Any = None, hoarding: Any = None) -> EnrichedBooking:
    """
    Attach customer and hoarding display fields to a booking.

    `user` and `hoarding` are the resolved documents (dicts or models) or None when the
    reference could not be resolved. Display fields always carry a value: unresolved or
    empty references fall back to "Unknown User", "Unknown Hoarding" and "N/A".
    """
    user_data = _as_mapping(user)
    hoarding_data = _as_mapping(hoarding)

    return EnrichedBooking(
        **booking.model_dump(),
        customer_name=_first_text(user_data.get("name"), user_data.get("displayName")) or UNKNOWN_USER,
        customer_email=_first_text(user_data.get("email")) or NOT_AVAILABLE,
        customer_phone=_first_text(user_data.get("phone"), user_data.get("phoneNumber")) or NOT_AVAILABLE,
        hoarding_title=_first_text(hoarding_data.get("title")) or UNKNOWN_HOARDING,
        hoarding_address=_first_text(hoarding_data.get("location"), hoarding_data.get("address")) or NOT_AVAILABLE,
        category_name=_first_text(hoarding_data.get("categoryName"), hoarding_data.get("category")),
    )


async def _resolve_many(ids: Iterable[str], resolver: Resolver, kind: str) -> Dict[str, Any]:
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        return {}

    results = await asyncio.gather(*(resolver(entity_id) for entity_id in unique_ids), return_exceptions=True)

    resolved = {}
    for entity_id, result in zip(unique_ids, results):
        if isinstance(result, Exception):
            logger.warning(f"⚠️ Could not resolve {kind} '{entity_id}': {str(result)}")
            continue
        if result is not None:
            resolved[entity_id] = result
    return resolved


async def enrich_bookings(bookings: List[Booking], resolve_user: Resolver, resolve_hoarding: Resolver) -> List[EnrichedBooking]:
    """Enrich a list of bookings, looking each referenced user and hoarding up once per call."""
    users, hoardings = await asyncio.gather(
        _resolve_many((b.user_id for b in bookings if b.user_id), resolve_user, "user"),
        _resolve_many((b.hoarding_id for b in bookings if b.hoarding_id), resolve_hoarding, "hoarding"),
    )

    return [enrich_booking(booking, users.get(booking.user_id), hoardings.get(booking.hoarding_id)) for booking in bookings]
