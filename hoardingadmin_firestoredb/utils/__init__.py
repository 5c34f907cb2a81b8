"""
Utilities module.

Configuration, logging, response envelopes and time helpers live here, next to the
booking core (enrichment, customer aggregation, filtering, status policy), calendar
availability, CDN uploads and the hoardings migration.

Only the leaf helpers are re-exported; the booking core modules import the schemas,
which import this package, so import them from their own modules.
"""

from .error_codes import ErrorCodes
from .logger import logger
from .standard_response import StandardResponse
from .time_it import time_it
from .time_now import TimeManager

__all__ = [
    "ErrorCodes",
    "StandardResponse",
    "TimeManager",
    "logger",
    "time_it",
]
