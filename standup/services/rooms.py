"""Room lifecycle – create, look up, describe and delete rooms."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from standup.errors import conflict, not_found
from standup.models.impediment import Impediment
from standup.models.participant import Participant
from standup.models.participant_claim import ParticipantClaim
from standup.models.poker import PokerRound, PokerVote
from standup.models.room import Room
from standup.models.spin_history import SpinHistory

logger = logging.getLogger(__name__)


async def get_room_by_slug(session: AsyncSession, slug: str) -> Room:
    result = await session.execute(select(Room).where(Room.slug == slug))
    room = result.scalar_one_or_none()
    if not room:
        raise not_found("Room not found")
    return room


async def create_room(session: AsyncSession, name: str, slug: str, passcode_hash: str) -> Room:
    existing = await session.execute(select(Room.id).where(Room.slug == slug))
    if existing.scalar_one_or_none() is not None:
        raise conflict("A room with this slug already exists")

    room = Room(name=name, slug=slug, passcode_hash=passcode_hash)
    try:
        async with session.begin_nested():
            session.add(room)
    except IntegrityError:
        raise conflict("A room with this slug already exists")

    logger.info(f"Room created: {slug}")
    return room


async def get_room_counts(session: AsyncSession, room_id: int) -> dict:
    """Participant and spin-history counts for the public room summary."""
    participants = await session.execute(
        select(func.count(Participant.id)).where(Participant.room_id == room_id)
    )
    spins = await session.execute(
        select(func.count(SpinHistory.id)).where(SpinHistory.room_id == room_id)
    )
    return {
        "participants": participants.scalar() or 0,
        "spin_history": spins.scalar() or 0,
    }


async def delete_room(session: AsyncSession, room_id: int) -> None:
    """Irreversibly delete a room and everything it owns, children first."""
    round_ids = select(PokerRound.id).where(PokerRound.room_id == room_id)
    await session.execute(delete(PokerVote).where(PokerVote.round_id.in_(round_ids)))
    await session.execute(delete(PokerRound).where(PokerRound.room_id == room_id))
    await session.execute(delete(ParticipantClaim).where(ParticipantClaim.room_id == room_id))
    await session.execute(delete(Impediment).where(Impediment.room_id == room_id))
    await session.execute(delete(SpinHistory).where(SpinHistory.room_id == room_id))
    await session.execute(delete(Participant).where(Participant.room_id == room_id))
    await session.execute(delete(Room).where(Room.id == room_id))
    logger.info(f"Room {room_id} deleted")
