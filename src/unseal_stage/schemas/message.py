"""Sealed message Pydantic schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    """Schema for sealing a new message to the caller's partner."""

    content: str = Field(..., description="Message text, revealed on the unlock date")
    unlock_date: date = Field(..., description="Calendar date the partner can open it")


class MessageResponse(BaseModel):
    """A message as seen by the requesting user.

    ``content`` is null when the caller is the receiver and the message is
    still locked.
    """

    id: int
    sender: str
    receiver: str
    content: str | None
    unlock_date: date
    opened: bool
    created_at: datetime
    opened_at: datetime | None = None
    state: Literal["locked", "unlockable", "opened"]
    locked: bool
    is_sender: bool


class MessageDatesResponse(BaseModel):
    """Unlock dates the caller has already used toward their partner."""

    dates: list[date]
