"""
Daily impediment tracker.

One entry per participant per local calendar day. YELLOW and RED entries
stay "active" until resolved; yesterday's active entries are offered back
as a carry-over prompt.
"""

import datetime as dt
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from standup.errors import not_found
from standup.models.impediment import ACTIVE_STATUSES, Impediment, ImpedimentStatus
from standup.services.roster import get_room_participant
from standup.utils.dates import day_start_utc, previous_day, today_local, utcnow

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 100


def normalize_description(status: ImpedimentStatus, description: Optional[str]) -> Optional[str]:
    """GREEN never carries a description; others are cut to 100 characters."""
    if status == ImpedimentStatus.GREEN or description is None:
        return None
    return description[:MAX_DESCRIPTION_LENGTH]


async def _write_day(
    session: AsyncSession,
    room_id: int,
    participant_id: int,
    day: dt.date,
    status: ImpedimentStatus,
    description: Optional[str],
) -> Impediment:
    date = day_start_utc(day)
    result = await session.execute(
        select(Impediment).where(
            Impediment.participant_id == participant_id,
            Impediment.date == date,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        entry = Impediment(room_id=room_id, participant_id=participant_id, date=date)
        session.add(entry)

    entry.status = status
    entry.description = normalize_description(status, description)
    if status in ACTIVE_STATUSES:
        # Re-raising an impediment makes it active again.
        entry.resolved_at = None

    await session.flush()
    return entry


async def upsert(
    session: AsyncSession,
    room_id: int,
    participant_id: int,
    status: ImpedimentStatus,
    description: Optional[str] = None,
    day: Optional[dt.date] = None,
) -> Impediment:
    """Set a participant's status for ``day`` (today by default), overwriting any earlier write."""
    await get_room_participant(session, room_id, participant_id)
    return await _write_day(session, room_id, participant_id, day or today_local(), status, description)


async def find_active(session: AsyncSession, room_id: int, participant_id: int) -> Optional[Impediment]:
    result = await session.execute(
        select(Impediment)
        .where(
            Impediment.room_id == room_id,
            Impediment.participant_id == participant_id,
            Impediment.resolved_at.is_(None),
            Impediment.status.in_(ACTIVE_STATUSES),
        )
        .order_by(Impediment.date.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def resolve(session: AsyncSession, room_id: int, participant_id: int) -> Impediment:
    """
    Close the participant's latest active impediment and mark today GREEN.

    Both writes happen in the caller's transaction: the old entry gets
    ``resolved_at`` and today's entry becomes GREEN with no description.
    """
    await get_room_participant(session, room_id, participant_id)

    active = await find_active(session, room_id, participant_id)
    if active is None:
        raise not_found("No active impediment for this participant")

    active.resolved_at = utcnow()
    await session.flush()

    today = await _write_day(session, room_id, participant_id, today_local(), ImpedimentStatus.GREEN, None)
    logger.info(f"Impediment {active.id} resolved for participant {participant_id}")
    return today


async def list_for_date(session: AsyncSession, room_id: int, day: Optional[dt.date] = None) -> dict:
    """
    Entries of ``day`` keyed by participant, plus the previous day's still
    active entries as the carry-over prompt list.
    """
    day = day or today_local()

    result = await session.execute(
        select(Impediment).where(
            Impediment.room_id == room_id,
            Impediment.date == day_start_utc(day),
        )
    )
    entries = list(result.scalars().all())

    result = await session.execute(
        select(Impediment)
        .where(
            Impediment.room_id == room_id,
            Impediment.date == day_start_utc(previous_day(day)),
            Impediment.resolved_at.is_(None),
            Impediment.status.in_(ACTIVE_STATUSES),
        )
        .order_by(Impediment.created_at)
    )
    previous_active = list(result.scalars().all())

    return {
        "today_by_participant": {e.participant_id: e for e in entries},
        "previous_day_active": previous_active,
    }
