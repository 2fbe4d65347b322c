"""Attendance & roster – who is in the room, present, and poker-enabled."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from standup.errors import forbidden, not_found
from standup.models.impediment import Impediment
from standup.models.participant import Participant
from standup.models.participant_claim import ParticipantClaim
from standup.models.poker import PokerVote
from standup.models.spin_history import SpinHistory

logger = logging.getLogger(__name__)


async def get_room_participant(session: AsyncSession, room_id: int, participant_id: int) -> Participant:
    """
    Load a participant that must belong to ``room_id``.

    Unknown ids are NOT_FOUND; a participant of another room is FORBIDDEN.
    """
    participant = await session.get(Participant, participant_id)
    if not participant:
        raise not_found("Participant not found")
    if participant.room_id != room_id:
        raise forbidden("Participant does not belong to this room")
    return participant


async def list_participants(session: AsyncSession, room_id: int) -> list[Participant]:
    result = await session.execute(
        select(Participant)
        .where(Participant.room_id == room_id)
        .order_by(Participant.created_at, Participant.id)
    )
    return list(result.scalars().all())


async def add_participant(
    session: AsyncSession,
    room_id: int,
    name: str,
    poker_enabled: bool = False,
) -> Participant:
    participant = Participant(
        room_id=room_id,
        name=name.strip(),
        is_present=True,
        poker_enabled=poker_enabled,
        win_count=0,
    )
    session.add(participant)
    await session.flush()
    return participant


async def toggle_presence(session: AsyncSession, room_id: int, participant_id: int) -> Participant:
    participant = await get_room_participant(session, room_id, participant_id)
    participant.is_present = not participant.is_present
    await session.flush()
    return participant


async def set_poker_enabled(
    session: AsyncSession, room_id: int, participant_id: int, enabled: bool
) -> Participant:
    participant = await get_room_participant(session, room_id, participant_id)
    participant.poker_enabled = enabled
    await session.flush()
    return participant


async def remove_participant(session: AsyncSession, room_id: int, participant_id: int) -> None:
    """Hard delete, together with the participant's claims, votes, impediments and wins."""
    participant = await get_room_participant(session, room_id, participant_id)

    await session.execute(delete(ParticipantClaim).where(ParticipantClaim.participant_id == participant.id))
    await session.execute(delete(PokerVote).where(PokerVote.participant_id == participant.id))
    await session.execute(delete(Impediment).where(Impediment.participant_id == participant.id))
    await session.execute(delete(SpinHistory).where(SpinHistory.participant_id == participant.id))
    await session.delete(participant)
    await session.flush()
    logger.info(f"Participant {participant_id} removed from room {room_id}")
