# src/unseal_stage/api/v1/endpoints/partners.py
"""Pairing endpoints for the Unseal API."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Response, status

from unseal_stage.schemas.partnership import (
    PairingStatusResponse,
    PartnerRequestAccept,
    PartnerRequestCreate,
    PartnerResponse,
    PartnershipResponse,
    RelationshipStatsResponse,
)

from ..dependencies import ContextDep, PartnershipsDep

router = APIRouter(prefix="/partners", tags=["partners"])


@router.post(
    "/requests",
    status_code=status.HTTP_201_CREATED,
    response_model=PartnershipResponse,
)
async def send_partner_request(
    payload: PartnerRequestCreate,
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> PartnershipResponse:
    """Invite another user, identified by their code, to pair."""
    partnership = partnerships.send_request(ctx, payload.partner_id)
    return PartnershipResponse.model_validate(partnership)


@router.get("/requests/pending", response_model=PartnershipResponse | None)
async def get_pending_request(
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> PartnershipResponse | None:
    """Return the request waiting for the caller's answer, if any."""
    partnership = partnerships.get_pending_request(ctx)
    return PartnershipResponse.model_validate(partnership) if partnership else None


@router.get("/requests/sent", response_model=PartnershipResponse | None)
async def get_sent_request(
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> PartnershipResponse | None:
    """Return the request the caller sent that is still pending, if any."""
    partnership = partnerships.get_sent_request(ctx)
    return PartnershipResponse.model_validate(partnership) if partnership else None


@router.post("/requests/{partnership_id}/accept", response_model=PartnershipResponse)
async def accept_partner_request(
    partnership_id: int,
    payload: PartnerRequestAccept,
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> PartnershipResponse:
    """Accept a pending request addressed to the caller."""
    partnership = partnerships.accept_request(ctx, partnership_id, payload.relationship_date)
    return PartnershipResponse.model_validate(partnership)


@router.delete("/requests/{partnership_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_partner_request(
    partnership_id: int,
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> Response:
    """Decline a received request or withdraw a sent one."""
    partnerships.cancel_request(ctx, partnership_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=PartnerResponse)
async def get_partner(ctx: ContextDep, partnerships: PartnershipsDep) -> PartnerResponse:
    """Return the caller's partner once paired."""
    return PartnerResponse(partner_id=partnerships.get_partner_id(ctx))


@router.get("/status", response_model=PairingStatusResponse)
async def get_pairing_status(
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> PairingStatusResponse:
    """Return the caller's pairing state in a single call."""
    pairing = partnerships.get_pairing_status(ctx)
    return PairingStatusResponse(
        state=pairing.state.value,
        partner_id=pairing.partner_id,
        partnership=(
            PartnershipResponse.model_validate(pairing.partnership)
            if pairing.partnership
            else None
        ),
    )


@router.get("/stats", response_model=RelationshipStatsResponse)
async def get_relationship_stats(
    ctx: ContextDep,
    partnerships: PartnershipsDep,
) -> RelationshipStatsResponse:
    """Return message totals, streak and time together."""
    return RelationshipStatsResponse(**asdict(partnerships.get_relationship_stats(ctx)))
