from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .document import FirestoreDocument


class MediaItem(FirestoreDocument):
    title: str = ""
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    image_path: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MediaInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    image_path: Optional[str] = None
