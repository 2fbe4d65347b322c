"""Impediment model – a participant's daily GREEN/YELLOW/RED status."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from standup.database import Base
from standup.utils.dates import utcnow


class ImpedimentStatus(str, enum.Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


ACTIVE_STATUSES = (ImpedimentStatus.YELLOW, ImpedimentStatus.RED)


class Impediment(Base):
    __tablename__ = "impediments"
    __table_args__ = (
        UniqueConstraint("participant_id", "date", name="uq_impediment_participant_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    room_id: Mapped[int] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )

    # Local calendar day, stored as that date's UTC midnight.
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    status: Mapped[ImpedimentStatus] = mapped_column(Enum(ImpedimentStatus), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(100))
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
