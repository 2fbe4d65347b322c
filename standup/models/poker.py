"""Planning poker models – rounds and the votes cast in them."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from standup.database import Base
from standup.utils.dates import utcnow


class RoundStatus(str, enum.Enum):
    VOTING = "VOTING"
    REVEALED = "REVEALED"


class PokerRound(Base):
    """The most recently created round of a room is its current round."""
    __tablename__ = "poker_rounds"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[RoundStatus] = mapped_column(Enum(RoundStatus), default=RoundStatus.VOTING)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class PokerVote(Base):
    __tablename__ = "poker_votes"
    __table_args__ = (
        UniqueConstraint("round_id", "participant_id", name="uq_vote_round_participant"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    round_id: Mapped[int] = mapped_column(
        ForeignKey("poker_rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[str] = mapped_column(String(4), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
