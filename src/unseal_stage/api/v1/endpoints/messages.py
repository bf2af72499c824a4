# src/unseal_stage/api/v1/endpoints/messages.py
"""Sealed message endpoints for the Unseal API."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, status

from unseal_stage.core.errors import ConflictError, ErrorCode
from unseal_stage.schemas.message import MessageCreate, MessageDatesResponse, MessageResponse
from unseal_stage.services import MessageView

from ..dependencies import ContextDep, MessagesDep, PartnershipsDep

router = APIRouter(prefix="/messages", tags=["messages"])


def _serialize_message(view: MessageView) -> MessageResponse:
    """Convert a viewer projection into its API payload."""
    data = asdict(view)
    data["state"] = view.state.value
    return MessageResponse(**data)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
async def create_message(
    payload: MessageCreate,
    ctx: ContextDep,
    messages: MessagesDep,
    partnerships: PartnershipsDep,
) -> MessageResponse:
    """Seal a message to the caller's partner."""
    partner_id = partnerships.get_partner_id(ctx)
    if partner_id is None:
        raise ConflictError(ErrorCode.NO_PARTNER, "You need a partner to send messages")
    view = messages.create_message(ctx, partner_id, payload.content, payload.unlock_date)
    return _serialize_message(view)


@router.get("/", response_model=list[MessageResponse])
async def list_messages(ctx: ContextDep, messages: MessagesDep) -> list[MessageResponse]:
    """Return every message the caller sent or received."""
    return [_serialize_message(view) for view in messages.get_user_messages(ctx)]


@router.get("/today", response_model=MessageResponse | None)
async def get_todays_message(ctx: ContextDep, messages: MessagesDep) -> MessageResponse | None:
    """Return the message the caller can unseal today, if any."""
    view = messages.get_todays_message(ctx)
    return _serialize_message(view) if view else None


@router.get("/dates", response_model=MessageDatesResponse)
async def get_message_dates(
    ctx: ContextDep,
    messages: MessagesDep,
    partnerships: PartnershipsDep,
) -> MessageDatesResponse:
    """Return unlock dates already booked toward the caller's partner."""
    partner_id = partnerships.get_partner_id(ctx)
    if partner_id is None:
        raise ConflictError(ErrorCode.NO_PARTNER, "You need a partner to send messages")
    return MessageDatesResponse(dates=messages.get_message_dates_for_sender(ctx, partner_id))


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(message_id: int, ctx: ContextDep, messages: MessagesDep) -> MessageResponse:
    """Return a single message the caller is party to."""
    return _serialize_message(messages.get_message(ctx, message_id))


@router.put("/{message_id}/opened", response_model=MessageResponse)
async def mark_message_opened(
    message_id: int,
    ctx: ContextDep,
    messages: MessagesDep,
) -> MessageResponse:
    """Unseal a due message addressed to the caller."""
    return _serialize_message(messages.mark_as_opened(ctx, message_id))
