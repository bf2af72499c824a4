"""Pairing lifecycle: requests, acceptance, partner lookup and stats."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from unseal_stage.core.errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from unseal_stage.db.transaction import atomic, store_errors
from unseal_stage.models import (
    PARTNERSHIP_STATUS_ACCEPTED,
    PARTNERSHIP_STATUS_PENDING,
    Partnership,
    PartnershipMember,
    SealedMessage,
)
from unseal_stage.services.context import RequestContext

logger = logging.getLogger(__name__)

__all__ = [
    "PairingState",
    "PairingStatus",
    "PartnershipManager",
    "RelationshipStats",
    "pair_filter",
]


class PairingState(StrEnum):
    """Where a user stands in the pairing lifecycle."""

    UNPAIRED = "unpaired"
    REQUEST_SENT = "request_sent"
    REQUEST_RECEIVED = "request_received"
    PAIRED = "paired"


@dataclass(frozen=True)
class PairingStatus:
    """Pairing state together with the row it was derived from."""

    state: PairingState
    partnership: Partnership | None = None
    partner_id: str | None = None


@dataclass(frozen=True)
class RelationshipStats:
    """Aggregates for an accepted partnership; zeroed when unpaired."""

    total_messages: int = 0
    current_streak: int = 0
    relationship_date: date | None = None
    days_together: int = 0


def pair_filter(user_id: str, partner_id: str):
    """SQL criterion matching messages exchanged in either direction."""
    return or_(
        and_(SealedMessage.sender == user_id, SealedMessage.receiver == partner_id),
        and_(SealedMessage.sender == partner_id, SealedMessage.receiver == user_id),
    )


class PartnershipManager:
    """Owns the partnership rows and every transition between their states."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _find_for_user(self, user_id: str) -> Partnership | None:
        return self.db.scalars(
            select(Partnership)
            .join(PartnershipMember, PartnershipMember.partnership_id == Partnership.id)
            .where(PartnershipMember.user_id == user_id)
        ).first()

    def _get(self, partnership_id: int) -> Partnership:
        partnership = self.db.get(Partnership, partnership_id)
        if partnership is None:
            raise NotFoundError("Partner request not found")
        return partnership

    def get_partnership(self, ctx: RequestContext) -> Partnership | None:
        """Return the caller's partnership in any status."""
        with store_errors():
            return self._find_for_user(ctx.user_id)

    def send_request(self, ctx: RequestContext, to_user: str) -> Partnership:
        """Create a pending request from the caller to ``to_user``.

        Raises:
            ValidationError: ``SelfPair`` if the caller targets themselves.
            ConflictError: ``AlreadyPaired`` if either user already has a partnership.
        """
        from_user = ctx.user_id
        to_user = to_user.strip()
        if not to_user or to_user == from_user:
            raise ValidationError(ErrorCode.SELF_PAIR, "You cannot pair with yourself")

        already_paired = ConflictError(ErrorCode.ALREADY_PAIRED, "Already paired or request pending")
        with atomic(self.db, on_integrity_error=already_paired):
            if self._find_for_user(from_user) is not None:
                raise ConflictError(
                    ErrorCode.ALREADY_PAIRED,
                    "You already have a partner or a pending request",
                )
            if self._find_for_user(to_user) is not None:
                raise ConflictError(
                    ErrorCode.ALREADY_PAIRED,
                    "That user already has a partner or a pending request",
                )

            partnership = Partnership(
                user_a=from_user,
                user_b=to_user,
                status=PARTNERSHIP_STATUS_PENDING,
                current_streak=0,
                created_at=ctx.now,
            )
            partnership.members = [
                PartnershipMember(user_id=from_user),
                PartnershipMember(user_id=to_user),
            ]
            self.db.add(partnership)
            self.db.flush()

        logger.info("Partner request %s sent from %s to %s", partnership.id, from_user, to_user)
        return partnership

    def get_pending_request(self, ctx: RequestContext) -> Partnership | None:
        """Return the pending request addressed to the caller, if any."""
        with store_errors():
            return self.db.scalars(
                select(Partnership).where(
                    Partnership.user_b == ctx.user_id,
                    Partnership.status == PARTNERSHIP_STATUS_PENDING,
                )
            ).first()

    def get_sent_request(self, ctx: RequestContext) -> Partnership | None:
        """Return the pending request the caller sent, if any."""
        with store_errors():
            return self.db.scalars(
                select(Partnership).where(
                    Partnership.user_a == ctx.user_id,
                    Partnership.status == PARTNERSHIP_STATUS_PENDING,
                )
            ).first()

    def accept_request(
        self,
        ctx: RequestContext,
        partnership_id: int,
        relationship_date: date,
    ) -> Partnership:
        """Accept a pending request addressed to the caller.

        The authorisation check and the status change are one conditional
        UPDATE, so two concurrent accepts cannot both succeed.

        Raises:
            ValidationError: ``FutureDate`` if ``relationship_date`` is after today.
            NotFoundError: If the request no longer exists.
            AuthorizationError: If the caller is not the recipient.
            ConflictError: If the request was already accepted.
        """
        if relationship_date > ctx.today:
            raise ValidationError(
                ErrorCode.FUTURE_DATE,
                "Relationship date cannot be in the future",
            )

        with atomic(self.db):
            result = self.db.execute(
                update(Partnership)
                .where(
                    Partnership.id == partnership_id,
                    Partnership.user_b == ctx.user_id,
                    Partnership.status == PARTNERSHIP_STATUS_PENDING,
                )
                .values(status=PARTNERSHIP_STATUS_ACCEPTED, relationship_date=relationship_date)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                partnership = self._get(partnership_id)
                if partnership.user_b != ctx.user_id:
                    logger.warning(
                        "User %s tried to accept partner request %s", ctx.user_id, partnership_id
                    )
                    raise AuthorizationError("Only the invited partner can accept this request")
                raise ConflictError(ErrorCode.ALREADY_ACCEPTED, "Request was already accepted")
            partnership = self._get(partnership_id)
            self.db.refresh(partnership)

        logger.info("Partner request %s accepted by %s", partnership_id, ctx.user_id)
        return partnership

    def cancel_request(self, ctx: RequestContext, partnership_id: int) -> None:
        """Delete a pending request; used both to decline and to withdraw.

        Raises:
            NotFoundError: If the request does not exist.
            AuthorizationError: If the caller is not part of it.
            ConflictError: If the partnership was already accepted.
        """
        with atomic(self.db):
            partnership = self.db.scalars(
                select(Partnership).where(Partnership.id == partnership_id).with_for_update()
            ).first()
            if partnership is None:
                raise NotFoundError("Partner request not found")
            if not partnership.involves(ctx.user_id):
                logger.warning(
                    "User %s tried to cancel partner request %s", ctx.user_id, partnership_id
                )
                raise AuthorizationError("This request does not involve you")
            if partnership.is_accepted:
                raise ConflictError(
                    ErrorCode.ALREADY_ACCEPTED,
                    "Accepted partnerships cannot be cancelled",
                )
            self.db.delete(partnership)

        logger.info("Partner request %s cancelled by %s", partnership_id, ctx.user_id)

    def get_partner_id(self, ctx: RequestContext) -> str | None:
        """Return the partner's id once the partnership is accepted."""
        partnership = self.get_partnership(ctx)
        if partnership is None or not partnership.is_accepted:
            return None
        return partnership.other_user(ctx.user_id)

    def get_accepted_between(self, user_id: str, partner_id: str) -> Partnership | None:
        """Return the accepted partnership joining exactly these two users."""
        with store_errors():
            return self.db.scalars(
                select(Partnership).where(
                    Partnership.status == PARTNERSHIP_STATUS_ACCEPTED,
                    or_(
                        and_(Partnership.user_a == user_id, Partnership.user_b == partner_id),
                        and_(Partnership.user_a == partner_id, Partnership.user_b == user_id),
                    ),
                )
            ).first()

    def get_pairing_status(self, ctx: RequestContext) -> PairingStatus:
        """Classify the caller as unpaired, waiting on either side, or paired."""
        partnership = self.get_partnership(ctx)
        if partnership is None:
            return PairingStatus(PairingState.UNPAIRED)
        if partnership.is_accepted:
            return PairingStatus(
                PairingState.PAIRED,
                partnership,
                partnership.other_user(ctx.user_id),
            )
        if partnership.user_a == ctx.user_id:
            return PairingStatus(PairingState.REQUEST_SENT, partnership)
        return PairingStatus(PairingState.REQUEST_RECEIVED, partnership)

    def get_relationship_stats(self, ctx: RequestContext) -> RelationshipStats:
        """Return message count, streak and relationship date for the caller's pair."""
        partnership = self.get_partnership(ctx)
        if partnership is None or not partnership.is_accepted:
            return RelationshipStats()

        partner_id = partnership.other_user(ctx.user_id)
        with store_errors():
            total = self.db.scalar(
                select(func.count())
                .select_from(SealedMessage)
                .where(pair_filter(ctx.user_id, partner_id))
            ) or 0

        days_together = 0
        if partnership.relationship_date is not None:
            days_together = max(0, (ctx.today - partnership.relationship_date).days)

        return RelationshipStats(
            total_messages=total,
            current_streak=partnership.current_streak,
            relationship_date=partnership.relationship_date,
            days_together=days_together,
        )
