"""Explicit per-request identity and clock handed to every core operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from unseal_stage.core.settings import settings
from unseal_stage.db.time import local_date, utcnow


@dataclass(frozen=True)
class RequestContext:
    """Who is calling and when.

    ``now`` is normalised to UTC; ``zone`` is the caller's timezone and decides
    which calendar day counts as their "today".
    """

    user_id: str
    now: datetime = field(default_factory=utcnow)
    zone: ZoneInfo = field(default_factory=lambda: settings.default_zone)

    def __post_init__(self) -> None:
        now = self.now if self.now.tzinfo is not None else self.now.replace(tzinfo=UTC)
        object.__setattr__(self, "now", now.astimezone(UTC))

    @property
    def today(self) -> date:
        """The caller's local calendar date."""
        return local_date(self.now, self.zone)
