from typing import Any, NoReturn, Optional

from fastapi import HTTPException
from pydantic import BaseModel

from .error_codes import ErrorCodes


class StandardResponse(BaseModel):
    """Envelope returned by every data-access operation."""

    status: bool
    code: int = ErrorCodes.SUCCESS
    message: str = ""
    data: Any = None
    error_message: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None, message: str = "Success", code: int = ErrorCodes.SUCCESS) -> "StandardResponse":
        return cls(status=True, code=code, message=message, data=data)

    @classmethod
    def failure(cls, code: int = ErrorCodes.INTERNAL_SERVER_ERROR, error_message: str = "", data: Any = None) -> "StandardResponse":
        return cls(status=False, code=code, message="Failure", data=data, error_message=error_message)

    @classmethod
    def not_found(cls, error_message: str = "Not found") -> "StandardResponse":
        return cls.failure(ErrorCodes.NOT_FOUND, error_message)

    @classmethod
    def bad_request(cls, error_message: str = "Bad request") -> "StandardResponse":
        return cls.failure(ErrorCodes.BAD_REQUEST, error_message)

    @classmethod
    def conflict(cls, error_message: str = "Conflict") -> "StandardResponse":
        return cls.failure(ErrorCodes.CONFLICT, error_message)

    @classmethod
    def unauthorized(cls, error_message: str = "Unauthorized") -> "StandardResponse":
        return cls.failure(ErrorCodes.UNAUTHORIZED, error_message)

    @classmethod
    def forbidden(cls, error_message: str = "Forbidden") -> "StandardResponse":
        return cls.failure(ErrorCodes.FORBIDDEN, error_message)

    @classmethod
    def internal_error(cls, error_message: str = "Internal server error") -> "StandardResponse":
        return cls.failure(ErrorCodes.INTERNAL_SERVER_ERROR, error_message)

    @staticmethod
    def raise_http_exception(code: int, error_message: str) -> NoReturn:
        raise HTTPException(status_code=code, detail=error_message)

    def raise_for_status(self) -> "StandardResponse":
        """Turn a failed response into an HTTPException, pass successful ones through."""
        if not self.status:
            self.raise_http_exception(self.code, self.error_message or self.message)
        return self

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
