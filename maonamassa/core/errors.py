# maonamassa/core/errors.py
"""
Error taxonomy of the API.

Every error is an HTTPException carrying a machine-checkable `code`
plus optional extra fields. `api_error_handler` renders them as:

    {"error": "<code>", "message": "<human readable>", ...extra}
"""
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class ApiError(HTTPException):
    code = "Error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(
        self,
        message: str | None = None,
        headers: dict[str, str] | None = None,
        **extra: Any,
    ):
        super().__init__(
            status_code=type(self).status_code,
            detail=message or self.default_message,
            headers=headers,
        )
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.detail, **self.extra}


class Unauthenticated(ApiError):
    code = "Unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: str | None = None, **extra: Any):
        super().__init__(
            message, headers={"WWW-Authenticate": "Bearer"}, **extra
        )


class InvalidCredentials(ApiError):
    code = "InvalidCredentials"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Incorrect email or password"


class Forbidden(ApiError):
    code = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to perform this operation"


class NotFound(ApiError):
    code = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class DuplicateIdentity(ApiError):
    code = "DuplicateIdentity"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Email already exists"


class AlreadyRated(ApiError):
    code = "AlreadyRated"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Contract has already been rated"


class InvalidCredentialFormat(ApiError):
    code = "InvalidCredentialFormat"
    default_message = "Email and password are required"


class MissingParameter(ApiError):
    code = "MissingParameter"
    default_message = "Missing required parameter"


class InvalidParameter(ApiError):
    code = "InvalidParameter"
    default_message = "Invalid parameter"


class InvalidStatus(ApiError):
    code = "InvalidStatus"
    default_message = "Invalid status"


class InvalidTransition(ApiError):
    code = "InvalidTransition"
    default_message = "Invalid status transition"


class InvalidRating(ApiError):
    code = "InvalidRating"
    default_message = "Rating must be between 1 and 5"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as a flat JSON body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )
