"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from unseal_stage.core.security import decode_subject
from unseal_stage.core.settings import settings
from unseal_stage.db.session import get_db
from unseal_stage.services import MessageStore, PartnershipManager, RequestContext

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _resolve_zone(name: str | None) -> ZoneInfo:
    """Return the caller's timezone, falling back to the configured default.

    Raises:
        HTTPException: If the header names an unknown timezone
    """
    if not name:
        return settings.default_zone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown timezone: {name}",
        ) from err


def get_request_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    x_timezone: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Build the per-request context from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        x_timezone: Optional IANA timezone name deciding the caller's "today"

    Returns:
        RequestContext for the authenticated user

    Raises:
        HTTPException: If the token is invalid or carries no subject
    """
    try:
        subject = decode_subject(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return RequestContext(user_id=subject, zone=_resolve_zone(x_timezone))


def get_partnership_manager(db: SessionDep) -> PartnershipManager:
    """Return a partnership manager bound to the request session."""
    return PartnershipManager(db)


def get_message_store(db: SessionDep) -> MessageStore:
    """Return a message store bound to the request session."""
    return MessageStore(db)


# Type aliases for injected dependencies
ContextDep = Annotated[RequestContext, Depends(get_request_context)]
PartnershipsDep = Annotated[PartnershipManager, Depends(get_partnership_manager)]
MessagesDep = Annotated[MessageStore, Depends(get_message_store)]
