"""Draw engine – uniform roulette among present participants."""

import logging
import random
from typing import Optional, Sequence, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from standup.config import settings
from standup.errors import AppError, ErrorCode
from standup.models.participant import Participant
from standup.models.spin_history import SpinHistory

logger = logging.getLogger(__name__)

T = TypeVar("T")

_rng = random.SystemRandom()


def pick_winner(candidates: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Every candidate has probability 1/N; ``randrange`` is uniform over [0, N)."""
    if not candidates:
        raise AppError(ErrorCode.NO_PRESENT_PARTICIPANTS, "There are no present participants to draw from")
    return candidates[(rng or _rng).randrange(len(candidates))]


async def spin(
    session: AsyncSession,
    room_id: int,
    rng: Optional[random.Random] = None,
) -> tuple[Participant, SpinHistory]:
    """
    Draw a winner, append it to the history and bump its ``win_count``.

    Both writes share the caller's transaction. With nobody present this
    fails with NO_PRESENT_PARTICIPANTS before anything is written.
    """
    result = await session.execute(
        select(Participant)
        .where(Participant.room_id == room_id, Participant.is_present.is_(True))
        .order_by(Participant.id)
    )
    present = list(result.scalars().all())
    winner = pick_winner(present, rng)

    entry = SpinHistory(room_id=room_id, participant_id=winner.id)
    session.add(entry)

    await session.execute(
        update(Participant)
        .where(Participant.id == winner.id)
        .values(win_count=Participant.win_count + 1)
    )
    await session.flush()
    await session.refresh(winner)

    logger.info(f"Room {room_id} spin: participant {winner.id} wins ({winner.win_count} total)")
    return winner, entry


async def get_history(
    session: AsyncSession,
    room_id: int,
    limit: int = settings.HISTORY_DEFAULT_LIMIT,
) -> list[tuple[SpinHistory, Participant]]:
    """Most recent spins first, at most ``HISTORY_MAX_LIMIT`` rows."""
    limit = min(limit, settings.HISTORY_MAX_LIMIT)
    result = await session.execute(
        select(SpinHistory, Participant)
        .join(Participant, SpinHistory.participant_id == Participant.id)
        .where(SpinHistory.room_id == room_id)
        .order_by(SpinHistory.created_at.desc(), SpinHistory.id.desc())
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()]


async def reset(session: AsyncSession, room_id: int) -> None:
    """Clear the room's draw history and zero every win count."""
    await session.execute(delete(SpinHistory).where(SpinHistory.room_id == room_id))
    await session.execute(
        update(Participant).where(Participant.room_id == room_id).values(win_count=0)
    )
    logger.info(f"Room {room_id} roulette reset")
