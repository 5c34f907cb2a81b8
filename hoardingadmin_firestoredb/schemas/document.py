from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..utils.time_now import TimeManager


class FirestoreDocument(BaseModel):
    """
    Base for every stored document.

    Fields are snake_case in Python and camelCase in Firestore and on the API.
    Unknown fields are dropped on read; writes are partial updates so they survive in the store.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = ""

    @field_validator("created_at", "updated_at", mode="before", check_fields=False)
    @classmethod
    def _parse_timestamps(cls, value: Any) -> Optional[datetime]:
        return TimeManager.to_datetime(value)

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]], **extra: Any):
        return cls.model_validate({**(data or {}), **extra, "id": doc_id})

    @classmethod
    def from_snapshot(cls, snapshot, **extra: Any):
        return cls.from_document(snapshot.id, snapshot.to_dict(), **extra)

    def to_firestore(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"id"}, exclude_none=True)

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
