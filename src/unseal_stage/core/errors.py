"""Typed domain failures surfaced by the core services.

Every error carries a stable ``code`` for clients, a coarse ``kind`` used for
HTTP mapping and a short human-readable message.
"""

from __future__ import annotations

from enum import StrEnum

from fastapi import status


class ErrorKind(StrEnum):
    """Error taxonomy shared by all services."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


class ErrorCode(StrEnum):
    """Machine-readable reasons reported alongside an error kind."""

    SELF_PAIR = "SelfPair"
    FUTURE_DATE = "FutureDate"
    EMPTY_CONTENT = "EmptyContent"
    CONTENT_TOO_LONG = "ContentTooLong"
    PAST_UNLOCK_DATE = "PastUnlockDate"
    STILL_SEALED = "StillSealed"
    ALREADY_PAIRED = "AlreadyPaired"
    ALREADY_ACCEPTED = "AlreadyAccepted"
    NO_PARTNER = "NoPartner"
    UNAUTHORIZED = "Unauthorized"
    NOT_FOUND = "NotFound"
    UNAVAILABLE = "Unavailable"


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class UnsealError(Exception):
    """Base class for recoverable domain failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def status_code(self) -> int:
        """HTTP status matching the error kind."""
        return _STATUS_BY_KIND[self.kind]

    def to_payload(self) -> dict[str, str]:
        """Return the JSON body rendered for API clients."""
        return {"detail": self.message, "code": self.code.value, "kind": self.kind.value}


class ValidationError(UnsealError):
    """Input rejected before touching stored state."""

    kind = ErrorKind.VALIDATION


class ConflictError(UnsealError):
    """Request clashes with the current pairing or message state."""

    kind = ErrorKind.CONFLICT


class AuthorizationError(UnsealError):
    """Caller is not allowed to act on the resource."""

    kind = ErrorKind.AUTHORIZATION

    def __init__(self, message: str = "Not allowed for this user") -> None:
        super().__init__(ErrorCode.UNAUTHORIZED, message)


class NotFoundError(UnsealError):
    """Resource was deleted or never existed."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(ErrorCode.NOT_FOUND, message)


class StoreUnavailableError(UnsealError):
    """The backing store failed transiently; callers should retry with backoff."""

    kind = ErrorKind.UNAVAILABLE

    def __init__(self, message: str = "Store temporarily unavailable") -> None:
        super().__init__(ErrorCode.UNAVAILABLE, message)


__all__ = [
    "AuthorizationError",
    "ConflictError",
    "ErrorCode",
    "ErrorKind",
    "NotFoundError",
    "StoreUnavailableError",
    "UnsealError",
    "ValidationError",
]
