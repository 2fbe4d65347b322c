"""
Estimation round state machine (planning poker).

A round starts in VOTING and moves to REVEALED once every poker-enabled
participant has voted. Votes are upserted while VOTING and frozen after.
The only way back to VOTING is ``reset_voting``, which also discards the
round's votes. Creating a round trims the room to the newest
``POKER_ROUND_RETENTION`` rounds.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from standup.config import settings
from standup.errors import AppError, ErrorCode, forbidden, not_found, unauthorized, validation_error
from standup.models.participant import Participant
from standup.models.poker import PokerRound, PokerVote, RoundStatus
from standup.services.claims import has_valid_claim
from standup.utils.poker_stats import ALL_VOTE_VALUES, VoteStats, calculate_stats

logger = logging.getLogger(__name__)


# ── Rounds ──

async def get_current_round(session: AsyncSession, room_id: int) -> Optional[PokerRound]:
    result = await session.execute(
        select(PokerRound)
        .where(PokerRound.room_id == room_id)
        .order_by(PokerRound.created_at.desc(), PokerRound.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_or_create_current_round(session: AsyncSession, room_id: int) -> PokerRound:
    current = await get_current_round(session, room_id)
    if current is None:
        current = PokerRound(room_id=room_id, status=RoundStatus.VOTING)
        session.add(current)
        await session.flush()
    return current


async def get_room_round(session: AsyncSession, room_id: int, round_id: int) -> PokerRound:
    result = await session.execute(
        select(PokerRound).where(PokerRound.id == round_id, PokerRound.room_id == room_id)
    )
    poker_round = result.scalar_one_or_none()
    if not poker_round:
        raise not_found("Round not found")
    return poker_round


async def get_votes(session: AsyncSession, round_id: int) -> list[PokerVote]:
    result = await session.execute(select(PokerVote).where(PokerVote.round_id == round_id))
    return list(result.scalars().all())


async def new_round(session: AsyncSession, room_id: int) -> PokerRound:
    """Always open a fresh VOTING round, then purge rounds beyond the retention cap."""
    poker_round = PokerRound(room_id=room_id, status=RoundStatus.VOTING)
    session.add(poker_round)
    await session.flush()

    stale = await session.execute(
        select(PokerRound.id)
        .where(PokerRound.room_id == room_id)
        .order_by(PokerRound.created_at.desc(), PokerRound.id.desc())
        .offset(settings.POKER_ROUND_RETENTION)
    )
    stale_ids = list(stale.scalars().all())
    if stale_ids:
        await session.execute(delete(PokerVote).where(PokerVote.round_id.in_(stale_ids)))
        await session.execute(delete(PokerRound).where(PokerRound.id.in_(stale_ids)))
        logger.info(f"Room {room_id}: purged {len(stale_ids)} old poker rounds")

    return poker_round


async def reset_voting(session: AsyncSession, room_id: int) -> PokerRound:
    """Drop every vote of the current round and force it back to VOTING."""
    current = await get_current_round(session, room_id)
    if current is None:
        raise not_found("No round found")

    await session.execute(delete(PokerVote).where(PokerVote.round_id == current.id))
    current.status = RoundStatus.VOTING
    await session.flush()
    return current


# ── Votes ──

async def cast_vote(
    session: AsyncSession,
    room_id: int,
    round_id: int,
    participant_id: int,
    session_id: str,
    value: str,
    now: Optional[datetime] = None,
) -> PokerVote:
    """Record (or overwrite) a participant's vote in a round that is still VOTING."""
    poker_round = await get_room_round(session, room_id, round_id)
    if poker_round.status != RoundStatus.VOTING:
        raise AppError(ErrorCode.INVALID_STATE, "Round has already been revealed")

    if not await has_valid_claim(session, room_id, participant_id, session_id, now=now):
        raise unauthorized("Invalid or expired claim")

    participant = await session.get(Participant, participant_id)
    if not participant or participant.room_id != room_id or not participant.poker_enabled:
        raise forbidden("Participant is not enabled for poker")

    if value not in ALL_VOTE_VALUES:
        raise validation_error("Invalid vote value")

    vote = await _find_vote(session, round_id, participant_id)
    if vote is None:
        vote = PokerVote(round_id=round_id, participant_id=participant_id, value=value)
        try:
            async with session.begin_nested():
                session.add(vote)
        except IntegrityError:
            # Same participant voted concurrently; last write wins.
            vote = await _find_vote(session, round_id, participant_id)
            if vote is None:
                raise
            vote.value = value
    else:
        vote.value = value

    await session.flush()
    return vote


async def _find_vote(session: AsyncSession, round_id: int, participant_id: int) -> Optional[PokerVote]:
    result = await session.execute(
        select(PokerVote).where(
            PokerVote.round_id == round_id,
            PokerVote.participant_id == participant_id,
        )
    )
    return result.scalar_one_or_none()


# ── Reveal ──

async def eligible_participant_ids(session: AsyncSession, room_id: int) -> set[int]:
    result = await session.execute(
        select(Participant.id).where(
            Participant.room_id == room_id,
            Participant.poker_enabled.is_(True),
        )
    )
    return set(result.scalars().all())


async def reveal(session: AsyncSession, room_id: int, round_id: int) -> tuple[PokerRound, bool, VoteStats]:
    """
    Flip a round to REVEALED once every poker-enabled participant has voted.

    Returns ``(round, already_revealed, stats)``. Revealing twice is not
    an error. Missing votes fail with INCOMPLETE_VOTES.
    """
    poker_round = await get_room_round(session, room_id, round_id)
    votes = await get_votes(session, round_id)
    stats = calculate_stats([v.value for v in votes])

    if poker_round.status == RoundStatus.REVEALED:
        return poker_round, True, stats

    missing = await eligible_participant_ids(session, room_id) - {v.participant_id for v in votes}
    if missing:
        raise AppError(ErrorCode.INCOMPLETE_VOTES, "Not every eligible participant has voted")

    poker_round.status = RoundStatus.REVEALED
    await session.flush()
    logger.info(f"Room {room_id}: round {round_id} revealed with {len(votes)} votes")
    return poker_round, False, stats


# ── Read model ──

async def get_poker_state(session: AsyncSession, room_id: int) -> dict:
    """
    Snapshot for polling clients.

    Vote values are only included once the round is REVEALED; before that
    each eligible participant just reports ``has_voted``.
    """
    current = await get_or_create_current_round(session, room_id)
    votes = {v.participant_id: v.value for v in await get_votes(session, current.id)}

    result = await session.execute(
        select(Participant)
        .where(Participant.room_id == room_id)
        .order_by(Participant.created_at, Participant.id)
    )
    participants = list(result.scalars().all())
    eligible = [p for p in participants if p.poker_enabled]
    revealed = current.status == RoundStatus.REVEALED

    return {
        "round": current,
        "participants": participants,
        "vote_summary": [
            {
                "participant_id": p.id,
                "has_voted": p.id in votes,
                "value": votes.get(p.id) if revealed else None,
            }
            for p in eligible
        ],
        "eligible_count": len(eligible),
        "stats": calculate_stats(list(votes.values())) if revealed else None,
    }
