from datetime import datetime
from typing import Optional

from .document import FirestoreDocument


class ContactMessage(FirestoreDocument):
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str = ""
    read: bool = False
    created_at: Optional[datetime] = None
