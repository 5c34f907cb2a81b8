from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator, model_validator

from ..utils.time_now import TimeManager
from .document import FirestoreDocument

UNKNOWN_USER = "Unknown User"
UNKNOWN_HOARDING = "Unknown Hoarding"
NOT_AVAILABLE = "N/A"


class BookingStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def normalize(cls, value: Any) -> str:
        """Canonical capitalization for known statuses; unknown values are kept verbatim."""
        if value is None or str(value).strip() == "":
            return cls.PENDING.value
        text = str(value).strip()
        for status in cls:
            if status.value.lower() == text.lower():
                return status.value
        return text


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"

    @classmethod
    def normalize(cls, value: Any) -> str:
        # older documents use "Unpaid" for the pending state
        if value is None or str(value).strip().lower() in ("", "pending", "unpaid"):
            return cls.PENDING.value
        text = str(value).strip()
        if text.lower() == "paid":
            return cls.PAID.value
        return text


class Booking(FirestoreDocument):
    user_id: Optional[str] = None
    hoarding_id: Optional[str] = None
    amount: float = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: str = BookingStatus.PENDING.value
    payment_status: str = PaymentStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_amount(cls, data: Any) -> Any:
        # totalPrice wins over amount when it is set, same as the booking screens
        if isinstance(data, dict):
            data = dict(data)
            total_price = data.pop("totalPrice", None) or data.pop("total_price", None)
            if total_price:
                data["amount"] = total_price
        return data

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> float:
        try:
            return float(value) if value not in (None, "") else 0.0
        except (TypeError, ValueError):
            return 0.0

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Optional[datetime]:
        return TimeManager.to_datetime(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return BookingStatus.normalize(value)

    @field_validator("payment_status", mode="before")
    @classmethod
    def _normalize_payment_status(cls, value: Any) -> str:
        return PaymentStatus.normalize(value)

    @field_validator("user_id", "hoarding_id", mode="before")
    @classmethod
    def _blank_reference_is_none(cls, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value)


class EnrichedBooking(Booking):
    """Booking with display fields resolved from the referenced user and hoarding."""

    customer_name: str = UNKNOWN_USER
    customer_email: str = NOT_AVAILABLE
    customer_phone: str = NOT_AVAILABLE
    hoarding_title: str = UNKNOWN_HOARDING
    hoarding_address: str = NOT_AVAILABLE
    category_name: Optional[str] = None
