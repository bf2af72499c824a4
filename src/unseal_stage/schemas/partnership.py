"""Partnership-related Pydantic schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PartnerRequestCreate(BaseModel):
    """Schema for sending a pairing request to another user."""

    partner_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Invite code (user id) of the user to pair with",
    )


class PartnerRequestAccept(BaseModel):
    """Schema for accepting a pending pairing request."""

    relationship_date: date = Field(
        ...,
        description="Date the relationship began; must not be in the future",
    )


class PartnershipResponse(BaseModel):
    """Schema for partnership rows returned by the API."""

    id: int
    user_a: str
    user_b: str
    status: Literal["pending", "accepted"]
    relationship_date: date | None
    current_streak: int
    last_streak_date: date | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PartnerResponse(BaseModel):
    """Partner lookup result; ``partner_id`` is null until a request is accepted."""

    partner_id: str | None


class PairingStatusResponse(BaseModel):
    """Single view of where the caller stands in the pairing lifecycle."""

    state: Literal["unpaired", "request_sent", "request_received", "paired"]
    partner_id: str | None = None
    partnership: PartnershipResponse | None = None


class RelationshipStatsResponse(BaseModel):
    """Aggregate numbers shown on the partner screen."""

    total_messages: int
    current_streak: int
    relationship_date: date | None
    days_together: int
