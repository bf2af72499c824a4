# src/unseal_stage/models/__init__.py
"""SQLAlchemy models for the Unseal application."""

from .message import SealedMessage
from .partnership import (
    PARTNERSHIP_STATUS_ACCEPTED,
    PARTNERSHIP_STATUS_PENDING,
    Partnership,
    PartnershipMember,
)

__all__ = [
    "SealedMessage",
    "Partnership", "PartnershipMember",
    "PARTNERSHIP_STATUS_PENDING", "PARTNERSHIP_STATUS_ACCEPTED",
]
