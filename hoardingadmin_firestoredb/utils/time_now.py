from datetime import date, datetime, timezone
from typing import Any, Optional

import pytz
from dateutil import parser as date_parser

from .config import BUSINESS_TIMEZONE

BUSINESS_TZ = pytz.timezone(BUSINESS_TIMEZONE)


class TimeManager:

    @staticmethod
    def get_time_now() -> datetime:
        """Current time in the business time zone."""
        return datetime.now(BUSINESS_TZ)

    @staticmethod
    def get_time_now_isoformat() -> str:
        return TimeManager.get_time_now().isoformat()

    @staticmethod
    def get_utc_now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def to_datetime(value: Any) -> Optional[datetime]:
        """
        Normalize anything the store hands back as a timestamp into an aware UTC datetime.

        Firestore returns DatetimeWithNanoseconds (a datetime subclass); documents written
        by other clients may hold ISO strings, epoch seconds/milliseconds or plain dates.
        Returns None when the value cannot be interpreted.
        """
        if value is None or value == "":
            return None
        try:
            if isinstance(value, datetime):
                parsed = value
            elif isinstance(value, date):
                parsed = datetime(value.year, value.month, value.day)
            elif isinstance(value, (int, float)):
                seconds = value / 1000 if value > 1e11 else value
                parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
            elif isinstance(value, str):
                parsed = date_parser.isoparse(value)
            elif isinstance(value, dict) and "seconds" in value:
                parsed = datetime.fromtimestamp(value["seconds"] + value.get("nanoseconds", 0) / 1e9, tz=timezone.utc)
            else:
                return None
        except (ValueError, OverflowError, OSError, TypeError):
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def to_business_time(value: Any) -> Optional[datetime]:
        parsed = TimeManager.to_datetime(value)
        return parsed.astimezone(BUSINESS_TZ) if parsed else None

    def convert_str_to_iso_date(self, date_str: str) -> Optional[datetime]:
        """Parse YYYY-MM-DDTHH:MM:SS(.fff)Z style strings, None when invalid."""
        try:
            return TimeManager.to_datetime(date_parser.isoparse(date_str))
        except (ValueError, TypeError):
            return None
