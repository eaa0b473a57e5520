from __future__ import annotations

from typing import Any

UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
INVALID_INPUT = "INVALID_INPUT"
VALIDATION_ERROR = "VALIDATION_ERROR"
UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
REDIS_UNAVAILABLE = "REDIS_UNAVAILABLE"


class APIError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


def unauthorized(message: str = "Authentication required") -> APIError:
    return APIError(code=UNAUTHORIZED, message=message, status_code=401)


def forbidden(required_scope: str) -> APIError:
    return APIError(
        code=FORBIDDEN,
        message="No sufficient scope",
        status_code=403,
        details={"required_scope": required_scope},
    )
