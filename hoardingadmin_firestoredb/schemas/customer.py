from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from .booking import NOT_AVAILABLE, UNKNOWN_USER, EnrichedBooking

UNKNOWN_CUSTOMER_ID = "unknown"


class CustomerAggregate(BaseModel):
    """Per-customer rollup of enriched bookings. Derived, never stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer_id: str = UNKNOWN_CUSTOMER_ID
    name: str = UNKNOWN_USER
    email: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE
    bookings: List[EnrichedBooking] = Field(default_factory=list)
    total_spend: float = 0
    last_booking_at: Optional[datetime] = None
    status_counts: Dict[str, int] = Field(default_factory=dict)

    @computed_field
    @property
    def total_bookings(self) -> int:
        return len(self.bookings)

    def to_api(self, include_bookings: bool = True) -> dict:
        exclude = None if include_bookings else {"bookings"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
