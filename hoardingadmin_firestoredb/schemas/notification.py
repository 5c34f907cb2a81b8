from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .document import FirestoreDocument


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationCategory(str, Enum):
    CONTACT = "contact"
    BOOKING = "booking"
    SYSTEM = "system"


class Notification(FirestoreDocument):
    type: str = NotificationType.INFO.value
    category: str = NotificationCategory.SYSTEM.value
    title: str = ""
    message: str = ""
    read: bool = False
    created_at: Optional[datetime] = None
    action_type: Optional[str] = None
    action_path: Optional[str] = None
    action_data: Optional[Dict[str, Any]] = None
    source_collection: Optional[str] = None
    source_id: Optional[str] = None


class NotificationInput(BaseModel):
    """A notification to store. `id` makes the write idempotent, e.g. contact_msg_{messageId}."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    type: NotificationType = NotificationType.INFO
    category: NotificationCategory = NotificationCategory.SYSTEM
    title: str
    message: str = ""
    action_type: Optional[str] = None
    action_path: Optional[str] = None
    action_data: Optional[Dict[str, Any]] = None
    source_collection: Optional[str] = None
    source_id: Optional[str] = None
