"""Sealed message storage, unlock gating and per-viewer projection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from unseal_stage.core.errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from unseal_stage.core.settings import settings
from unseal_stage.db.transaction import atomic, store_errors
from unseal_stage.models import SealedMessage
from unseal_stage.services.context import RequestContext
from unseal_stage.services.partnership import PartnershipManager
from unseal_stage.services.streak import StreakCalculator

logger = logging.getLogger(__name__)

__all__ = ["MessageState", "MessageStore", "MessageView", "message_state"]


class MessageState(StrEnum):
    """Lifecycle of a sealed message from the receiver's point of view."""

    LOCKED = "locked"
    UNLOCKABLE = "unlockable"
    OPENED = "opened"


def message_state(message: SealedMessage, today: date) -> MessageState:
    """Return the state of ``message`` on the given calendar day."""
    if message.opened:
        return MessageState.OPENED
    if message.unlock_date > today:
        return MessageState.LOCKED
    return MessageState.UNLOCKABLE


@dataclass(frozen=True)
class MessageView:
    """A message as one particular user is allowed to see it."""

    id: int
    sender: str
    receiver: str
    content: str | None
    unlock_date: date
    opened: bool
    created_at: datetime
    opened_at: datetime | None
    state: MessageState
    locked: bool
    is_sender: bool

    @classmethod
    def for_viewer(cls, message: SealedMessage, viewer_id: str, today: date) -> MessageView:
        """Project ``message`` for ``viewer_id``; senders always see their own words."""
        state = message_state(message, today)
        is_sender = message.sender == viewer_id
        locked = not is_sender and state is MessageState.LOCKED
        return cls(
            id=message.id,
            sender=message.sender,
            receiver=message.receiver,
            content=None if locked else message.content,
            unlock_date=message.unlock_date,
            opened=message.opened,
            created_at=message.created_at,
            opened_at=message.opened_at,
            state=state,
            locked=locked,
            is_sender=is_sender,
        )


class MessageStore:
    """Creates, lists and opens sealed messages between accepted partners."""

    def __init__(
        self,
        db: Session,
        partnerships: PartnershipManager | None = None,
        streaks: StreakCalculator | None = None,
    ) -> None:
        self.db = db
        self.partnerships = partnerships or PartnershipManager(db)
        self.streaks = streaks or StreakCalculator(db)

    def _view(self, ctx: RequestContext, message: SealedMessage) -> MessageView:
        return MessageView.for_viewer(message, ctx.user_id, ctx.today)

    def create_message(
        self,
        ctx: RequestContext,
        receiver_id: str,
        content: str,
        unlock_date: date,
    ) -> MessageView:
        """Seal a message to the caller's accepted partner and update the streak.

        Raises:
            ValidationError: Blank or oversized content, or an unlock date in the past.
            ConflictError: ``NoPartner`` if sender and receiver are not paired.
        """
        if not content or not content.strip():
            raise ValidationError(ErrorCode.EMPTY_CONTENT, "Message cannot be empty")
        if len(content) > settings.message_max_length:
            raise ValidationError(
                ErrorCode.CONTENT_TOO_LONG,
                f"Message is longer than {settings.message_max_length} characters",
            )
        if unlock_date < ctx.today:
            raise ValidationError(
                ErrorCode.PAST_UNLOCK_DATE,
                "Unlock date cannot be in the past",
            )

        with atomic(self.db):
            if self.partnerships.get_accepted_between(ctx.user_id, receiver_id) is None:
                raise ConflictError(ErrorCode.NO_PARTNER, "You need a partner to send messages")

            message = SealedMessage(
                sender=ctx.user_id,
                receiver=receiver_id,
                content=content,
                unlock_date=unlock_date,
                opened=False,
                created_at=ctx.now,
            )
            self.db.add(message)
            self.db.flush()
            self.streaks.update_streak(ctx.user_id, receiver_id, ctx.now)

        logger.info(
            "Message %s sealed by %s until %s", message.id, ctx.user_id, unlock_date.isoformat()
        )
        return self._view(ctx, message)

    def get_todays_message(self, ctx: RequestContext) -> MessageView | None:
        """Return the earliest due, unopened message addressed to the caller."""
        with store_errors():
            message = self.db.scalars(
                select(SealedMessage)
                .where(
                    SealedMessage.receiver == ctx.user_id,
                    SealedMessage.unlock_date <= ctx.today,
                    SealedMessage.opened.is_(False),
                )
                .order_by(SealedMessage.unlock_date.asc(), SealedMessage.created_at.asc())
                .limit(1)
            ).first()
        return self._view(ctx, message) if message is not None else None

    def get_user_messages(self, ctx: RequestContext) -> list[MessageView]:
        """Return every message the caller sent or received, latest unlock first."""
        with store_errors():
            messages = self.db.scalars(
                select(SealedMessage)
                .where(
                    or_(
                        SealedMessage.sender == ctx.user_id,
                        SealedMessage.receiver == ctx.user_id,
                    )
                )
                .order_by(SealedMessage.unlock_date.desc(), SealedMessage.created_at.desc())
            ).all()
        return [self._view(ctx, message) for message in messages]

    def get_message_dates_for_sender(self, ctx: RequestContext, receiver_id: str) -> list[date]:
        """Return unlock dates the caller already booked toward ``receiver_id``.

        Advisory only: duplicates are not rejected by :meth:`create_message`.
        """
        with store_errors():
            dates = self.db.scalars(
                select(SealedMessage.unlock_date)
                .where(
                    SealedMessage.sender == ctx.user_id,
                    SealedMessage.receiver == receiver_id,
                )
                .distinct()
                .order_by(SealedMessage.unlock_date.asc())
            ).all()
        return list(dates)

    def get_message(self, ctx: RequestContext, message_id: int) -> MessageView:
        """Return one message the caller is party to."""
        with store_errors():
            message = self.db.get(SealedMessage, message_id)
        if message is None or ctx.user_id not in (message.sender, message.receiver):
            raise NotFoundError("Message not found")
        return self._view(ctx, message)

    def mark_as_opened(self, ctx: RequestContext, message_id: int) -> MessageView:
        """Flip ``opened`` to True for a due message addressed to the caller.

        Calling it again on an opened message changes nothing.

        Raises:
            NotFoundError: If the message does not exist.
            AuthorizationError: If the caller is not the receiver.
            ValidationError: ``StillSealed`` if the unlock date has not arrived.
        """
        with atomic(self.db):
            message = self.db.scalars(
                select(SealedMessage).where(SealedMessage.id == message_id).with_for_update()
            ).first()
            if message is None:
                raise NotFoundError("Message not found")
            if message.receiver != ctx.user_id:
                logger.warning("User %s tried to open message %s", ctx.user_id, message_id)
                raise AuthorizationError("Only the receiver can open this message")
            if not message.opened:
                if message.unlock_date > ctx.today:
                    raise ValidationError(
                        ErrorCode.STILL_SEALED,
                        "This message is still sealed",
                    )
                message.opened = True
                message.opened_at = ctx.now
                logger.info("Message %s opened by %s", message_id, ctx.user_id)

        return self._view(ctx, message)
