from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .document import FirestoreDocument

DEFAULT_VISIBILITY_SCORE = 85
DEFAULT_CATEGORY_ICON = "billboard"


class BookingRate(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Category(FirestoreDocument):
    """A hoarding category. The document id is the category name."""

    name: str = ""
    icon: str = DEFAULT_CATEGORY_ICON
    active: bool = True
    order: Optional[int] = None
    created_at: Optional[datetime] = None

    @field_validator("active", mode="before")
    @classmethod
    def _default_active(cls, value):
        return True if value is None else value


class CategoryInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    icon: str = DEFAULT_CATEGORY_ICON
    active: bool = True
    order: int = 0


class Hoarding(FirestoreDocument):
    title: str = ""
    location: Optional[str] = None
    address: Optional[str] = None
    size: Optional[str] = None
    price: float = 0
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    availability: bool = True
    rating: float = 0
    views: int = 0
    visibility_score: int = DEFAULT_VISIBILITY_SCORE
    booking_rate: str = BookingRate.MEDIUM.value
    tags: List[str] = Field(default_factory=list)
    trending: bool = False
    image_url: Optional[str] = None
    category: Optional[str] = None
    category_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("price", "rating", mode="before")
    @classmethod
    def _parse_float(cls, value: Any) -> float:
        try:
            return float(value) if value not in (None, "") else 0.0
        except (TypeError, ValueError):
            return 0.0

    @field_validator("views", "visibility_score", mode="before")
    @classmethod
    def _parse_int(cls, value: Any, info) -> int:
        default = DEFAULT_VISIBILITY_SCORE if info.field_name == "visibility_score" else 0
        try:
            return int(value) if value not in (None, "") else default
        except (TypeError, ValueError):
            return default

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _parse_coordinate(cls, value: Any) -> Optional[float]:
        try:
            return float(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            return None

    @field_validator("availability", mode="before")
    @classmethod
    def _availability(cls, value: Any) -> bool:
        # only an explicit false marks a hoarding as unavailable
        return value is not False

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        if not value:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return [str(tag) for tag in value]

    @property
    def resolved_category(self) -> Optional[str]:
        return self.category_name or self.category

    @property
    def display_address(self) -> Optional[str]:
        return self.location or self.address


class HoardingInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    location: str = ""
    size: str = ""
    price: Any = None
    category: str = ""
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    availability: bool = True
    rating: float = 0
    views: int = 0
    visibility_score: int = DEFAULT_VISIBILITY_SCORE
    booking_rate: BookingRate = BookingRate.MEDIUM
    tags: List[str] = Field(default_factory=list)
    trending: bool = False
    image_url: Optional[str] = None
