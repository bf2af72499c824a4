# src/unseal_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .message import MessageCreate, MessageDatesResponse, MessageResponse
from .partnership import (
    PairingStatusResponse,
    PartnerRequestAccept,
    PartnerRequestCreate,
    PartnerResponse,
    PartnershipResponse,
    RelationshipStatsResponse,
)

__all__ = [
    "MessageCreate", "MessageDatesResponse", "MessageResponse",
    "PairingStatusResponse", "PartnerRequestAccept", "PartnerRequestCreate",
    "PartnerResponse", "PartnershipResponse", "RelationshipStatsResponse",
]
