"""Mutual daily-engagement streak kept on the partnership row."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from unseal_stage.core.settings import settings
from unseal_stage.db.time import day_bounds, local_date
from unseal_stage.models import PARTNERSHIP_STATUS_ACCEPTED, Partnership, SealedMessage
from unseal_stage.services.partnership import pair_filter

logger = logging.getLogger(__name__)


class StreakCalculator:
    """Advance a pair's streak when both partners have written on the same day.

    A missed day is never zeroed here; the streak simply stops growing until
    both partners write again, at which point it restarts from 1.
    """

    def __init__(self, db: Session, zone: ZoneInfo | None = None) -> None:
        self.db = db
        self.zone = zone or settings.store_zone

    def update_streak(self, user_id: str, partner_id: str, now: datetime) -> Partnership | None:
        """Recompute the streak for the pair after a message was written.

        Runs inside the caller's transaction and does not commit. The
        partnership row is locked first so two messages landing together
        cannot both read the same starting value.

        Args:
            user_id: Author of the message that was just created.
            partner_id: Receiver of that message.
            now: Moment of creation; its store-local date is "today".

        Returns:
            The pair's accepted partnership, or None if there is none.
        """
        partnership = self.db.scalars(
            select(Partnership)
            .where(
                Partnership.status == PARTNERSHIP_STATUS_ACCEPTED,
                or_(
                    and_(Partnership.user_a == user_id, Partnership.user_b == partner_id),
                    and_(Partnership.user_a == partner_id, Partnership.user_b == user_id),
                ),
            )
            .with_for_update()
        ).first()
        if partnership is None:
            return None

        today = local_date(now, self.zone)
        start, end = day_bounds(today, self.zone)
        senders = set(
            self.db.scalars(
                select(SealedMessage.sender)
                .where(
                    pair_filter(user_id, partner_id),
                    SealedMessage.created_at >= start,
                    SealedMessage.created_at < end,
                )
                .distinct()
            )
        )
        if user_id not in senders or partner_id not in senders:
            return partnership

        yesterday = today - timedelta(days=1)
        if partnership.last_streak_date == yesterday:
            new_streak = partnership.current_streak + 1
        elif partnership.last_streak_date == today:
            new_streak = partnership.current_streak
        else:
            new_streak = 1

        if new_streak != partnership.current_streak or partnership.last_streak_date != today:
            logger.info(
                "Streak for partnership %s: %d -> %d",
                partnership.id,
                partnership.current_streak,
                new_streak,
            )
        partnership.current_streak = new_streak
        partnership.last_streak_date = today
        self.db.flush()
        return partnership
