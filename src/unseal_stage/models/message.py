"""Models describing sealed messages exchanged between partners."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from unseal_stage.db.time import utcnow
from unseal_stage.db.session import Base
from unseal_stage.models.partnership import USER_ID_LENGTH


class SealedMessage(Base):
    """A note from ``sender`` to ``receiver`` that unlocks on ``unlock_date``.

    ``opened`` only ever moves from False to True, and ``unlock_date`` is never
    changed after insert.
    """

    __tablename__ = "sealed_message"
    __table_args__ = (
        Index("ix_sealed_message_receiver_unlock", "receiver", "unlock_date"),
        Index("ix_sealed_message_pair_created", "sender", "receiver", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender: Mapped[str] = mapped_column(String(USER_ID_LENGTH), nullable=False, index=True)
    receiver: Mapped[str] = mapped_column(String(USER_ID_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    unlock_date: Mapped[date] = mapped_column(Date, nullable=False)
    opened: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
