"""Transaction helpers that translate store failures into domain errors."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from unseal_stage.core.errors import StoreUnavailableError, UnsealError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors() -> Iterator[None]:
    """Re-raise transient driver failures as ``StoreUnavailableError``."""
    try:
        yield
    except (OperationalError, DBAPIError) as exc:
        if isinstance(exc, IntegrityError):
            raise
        logger.warning("Store unavailable: %s", exc)
        raise StoreUnavailableError() from exc


@contextmanager
def atomic(db: Session, *, on_integrity_error: UnsealError | None = None) -> Iterator[Session]:
    """Run a unit of work and commit it, rolling back on any failure.

    Args:
        db: Session bound to the current request.
        on_integrity_error: Domain error raised instead of a constraint violation.

    Raises:
        UnsealError: Whatever the body raised, or ``on_integrity_error``.
        StoreUnavailableError: If the store failed while reading or committing.
    """
    try:
        with store_errors():
            yield db
            db.commit()
    except IntegrityError as exc:
        db.rollback()
        if on_integrity_error is None:
            raise
        raise on_integrity_error from exc
    except Exception:
        db.rollback()
        raise
