from fastapi import HTTPException
from google.api_core import exceptions as google_exceptions


class ErrorCodes:
    SUCCESS = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503

    @staticmethod
    def get_http_status_code(error: Exception) -> int:
        """Map an exception raised by the store or the API layer to an HTTP status code."""
        if isinstance(error, HTTPException):
            return error.status_code
        if isinstance(error, google_exceptions.GoogleAPICallError) and error.code:
            return int(error.code)
        if isinstance(error, (ValueError, KeyError)):
            return ErrorCodes.BAD_REQUEST
        if isinstance(error, PermissionError):
            return ErrorCodes.FORBIDDEN
        return ErrorCodes.INTERNAL_SERVER_ERROR
