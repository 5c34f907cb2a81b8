from enum import Enum
from typing import Optional

from ..schemas.booking import BookingStatus, PaymentStatus
from .config import STATUS_TRANSITION_POLICY
from .logger import logger
from .standard_response import StandardResponse

_STATUS_VALUES = {status.value for status in BookingStatus}
_PAYMENT_VALUES = {status.value for status in PaymentStatus}

_STRICT_TRANSITIONS = {
    (BookingStatus.PENDING.value, BookingStatus.APPROVED.value),
    (BookingStatus.PENDING.value, BookingStatus.REJECTED.value),
}


class TransitionPolicy(str, Enum):
    """
    How booking status changes are checked.

    PERMISSIVE lets an admin move a booking between any two statuses, including
    Approved to Rejected directly. STRICT only allows decisions on Pending bookings;
    writing the current value again is allowed under both.
    """

    PERMISSIVE = "permissive"
    STRICT = "strict"

    @classmethod
    def from_config(cls, value: Optional[str] = None) -> "TransitionPolicy":
        raw = value or STATUS_TRANSITION_POLICY
        try:
            return cls(raw.strip().lower())
        except ValueError:
            logger.warning(f"⚠️ Unknown status transition policy '{raw}', falling back to '{cls.PERMISSIVE.value}'")
            return cls.PERMISSIVE


def validate_status_transition(current: Optional[str], target: Optional[str], policy: TransitionPolicy = TransitionPolicy.PERMISSIVE) -> Optional[StandardResponse]:
    """Return a failure response when the move is not allowed, None otherwise."""
    if target is None or str(target).strip() == "":
        return StandardResponse.bad_request("Status is required")

    target_value = BookingStatus.normalize(target)
    if target_value not in _STATUS_VALUES:
        return StandardResponse.bad_request(f"Invalid status '{target}'. Allowed values: {', '.join(sorted(_STATUS_VALUES))}")

    current_value = BookingStatus.normalize(current)
    if current_value == target_value or policy == TransitionPolicy.PERMISSIVE:
        return None

    if (current_value, target_value) not in _STRICT_TRANSITIONS:
        return StandardResponse.conflict(f"Cannot change booking status from {current_value} to {target_value}")
    return None


def validate_payment_status(target: Optional[str]) -> Optional[StandardResponse]:
    if target is None or str(target).strip() == "":
        return StandardResponse.bad_request("Payment status is required")
    if PaymentStatus.normalize(target) not in _PAYMENT_VALUES:
        return StandardResponse.bad_request(f"Invalid payment status '{target}'. Allowed values: {', '.join(sorted(_PAYMENT_VALUES))}")
    return None
