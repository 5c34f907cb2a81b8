from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .document import FirestoreDocument


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class User(FirestoreDocument):
    name: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    phone_number: Optional[str] = None
    role: str = UserRole.USER.value
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value):
        return value or UserRole.USER.value

    @field_validator("active", mode="before")
    @classmethod
    def _default_active(cls, value):
        # profiles created before the flag existed count as active
        return True if value is None else value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def display_label(self) -> Optional[str]:
        return self.name or self.display_name


class UserInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    email: str
    phone: Optional[str] = None
    role: UserRole = UserRole.USER
    active: bool = True


class UserUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    active: Optional[bool] = None
