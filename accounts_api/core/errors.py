"""
Error taxonomy for the API.

Every classified failure is an ``ApiError`` carrying an ``ErrorKind``. The kind
fixes the HTTP status and the default machine-readable code; the dispatch
layer renders any ``ApiError`` the same way, keyed on its kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Closed set of failure classes: (HTTP status, default code)."""

    VALIDATION = (400, "VALIDATION_ERROR")
    UNAUTHORIZED = (401, "UNAUTHORIZED")
    FORBIDDEN = (403, "FORBIDDEN")
    NOT_FOUND = (404, "RESOURCE_NOT_FOUND")
    CONFLICT = (409, "RESOURCE_CONFLICT")
    SERVER = (500, "SERVER_ERROR")

    @property
    def status(self) -> int:
        return self.value[0]

    @property
    def code(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class FieldError:
    """A single violated constraint on a request field."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


class ApiError(Exception):
    """A classified failure that maps onto one HTTP error response."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        errors: Optional[list[FieldError]] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = errors
        self.code = code or kind.code

    @property
    def status(self) -> int:
        return self.kind.status

    @classmethod
    def validation(cls, errors: list[FieldError]) -> "ApiError":
        return cls(ErrorKind.VALIDATION, "Validation error", errors=errors)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized access") -> "ApiError":
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str = "Access forbidden") -> "ApiError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def not_found(cls, resource: str = "Resource") -> "ApiError":
        return cls(ErrorKind.NOT_FOUND, f"{resource} not found")

    @classmethod
    def conflict(cls, resource: str = "Resource") -> "ApiError":
        return cls(ErrorKind.CONFLICT, f"{resource} already exists")

    @classmethod
    def server(cls, message: str = "Internal server error") -> "ApiError":
        return cls(ErrorKind.SERVER, message)

    def to_response(self) -> dict[str, Any]:
        """Build the JSON error envelope; ``errors`` only for validation."""
        body: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "code": self.code,
        }
        if self.kind is ErrorKind.VALIDATION and self.errors is not None:
            body["errors"] = [error.to_dict() for error in self.errors]
        return body

    def __repr__(self) -> str:
        return f"ApiError({self.kind.name}, {self.message!r}, code={self.code!r})"


def default_code(status: int) -> str:
    """Machine code used for statuses outside the taxonomy."""
    return f"ERROR_{status}"
