"""Models describing the pairing between two users."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from unseal_stage.db.session import Base
from unseal_stage.db.time import utcnow

PARTNERSHIP_STATUS_PENDING = "pending"
PARTNERSHIP_STATUS_ACCEPTED = "accepted"

USER_ID_LENGTH = 128


class Partnership(Base):
    """Relationship between a requester (``user_a``) and a recipient (``user_b``).

    Rows are created ``pending`` and either become ``accepted`` (terminal) or
    are deleted while still pending.
    """

    __tablename__ = "partnership"
    __table_args__ = (
        CheckConstraint("user_a <> user_b", name="ck_partnership_distinct_users"),
        CheckConstraint(
            "status IN ('pending', 'accepted')",
            name="ck_partnership_status",
        ),
        CheckConstraint("current_streak >= 0", name="ck_partnership_streak_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_a: Mapped[str] = mapped_column(String(USER_ID_LENGTH), nullable=False, index=True)
    user_b: Mapped[str] = mapped_column(String(USER_ID_LENGTH), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=PARTNERSHIP_STATUS_PENDING,
    )
    # When the real-world relationship began; chosen by the accepting user.
    relationship_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_streak_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    members: Mapped[list[PartnershipMember]] = relationship(
        "PartnershipMember",
        back_populates="partnership",
        cascade="all, delete-orphan",
    )

    @property
    def is_accepted(self) -> bool:
        """Return True once the recipient has accepted the request."""
        return self.status == PARTNERSHIP_STATUS_ACCEPTED

    def involves(self, user_id: str) -> bool:
        """Return True if ``user_id`` is either side of the partnership."""
        return user_id in (self.user_a, self.user_b)

    def other_user(self, user_id: str) -> str:
        """Return the participant that is not ``user_id``."""
        return self.user_b if user_id == self.user_a else self.user_a


class PartnershipMember(Base):
    """Join table holding one row per paired user.

    The primary key on ``user_id`` means a user can sit in at most one
    partnership, pending or accepted.
    """

    __tablename__ = "partnership_member"

    user_id: Mapped[str] = mapped_column(String(USER_ID_LENGTH), primary_key=True)
    partnership_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("partnership.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    partnership: Mapped[Partnership] = relationship("Partnership", back_populates="members")
