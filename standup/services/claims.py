"""
Identity claim registry.

A claim binds a browser ``session_id`` to one participant of a room for
``CLAIM_TTL_HOURS``, so two browsers cannot vote as the same person. The
(room, participant) pair is unique in the store; expiry is checked at use
and expired claims are only reaped when someone claims in that room.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from standup.config import settings
from standup.errors import AppError, ErrorCode
from standup.models.participant_claim import ParticipantClaim
from standup.services.roster import get_room_participant
from standup.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


def _is_expired(claim: ParticipantClaim, now: datetime) -> bool:
    return as_utc(claim.expires_at) <= now


async def _find_claim(session: AsyncSession, room_id: int, participant_id: int) -> Optional[ParticipantClaim]:
    result = await session.execute(
        select(ParticipantClaim).where(
            ParticipantClaim.room_id == room_id,
            ParticipantClaim.participant_id == participant_id,
        )
    )
    return result.scalar_one_or_none()


def _renew_or_conflict(
    claim: ParticipantClaim, session_id: str, now: datetime, expires_at: datetime
) -> ParticipantClaim:
    if not _is_expired(claim, now) and claim.session_id != session_id:
        logger.info(
            f"Claim conflict on participant {claim.participant_id} in room {claim.room_id}"
        )
        raise AppError(ErrorCode.NAME_TAKEN, "Name already in use in this room")
    claim.session_id = session_id
    claim.expires_at = expires_at
    return claim


async def claim(
    session: AsyncSession,
    room_id: int,
    participant_id: int,
    session_id: str,
    now: Optional[datetime] = None,
) -> ParticipantClaim:
    """Create, renew or take over the claim on a participant; NAME_TAKEN if held by another session."""
    now = now or utcnow()
    expires_at = now + timedelta(hours=settings.CLAIM_TTL_HOURS)

    await get_room_participant(session, room_id, participant_id)

    # Garbage-collect expired claims of this room on the access path.
    await session.execute(
        delete(ParticipantClaim).where(
            ParticipantClaim.room_id == room_id,
            ParticipantClaim.expires_at <= now,
        )
        .execution_options(synchronize_session="fetch")
    )

    existing = await _find_claim(session, room_id, participant_id)
    if existing:
        result = _renew_or_conflict(existing, session_id, now, expires_at)
        await session.flush()
        return result

    new_claim = ParticipantClaim(
        room_id=room_id,
        participant_id=participant_id,
        session_id=session_id,
        expires_at=expires_at,
    )
    try:
        async with session.begin_nested():
            session.add(new_claim)
    except IntegrityError:
        # Another first-time claim committed between our lookup and insert.
        existing = await _find_claim(session, room_id, participant_id)
        if existing is None:
            raise
        result = _renew_or_conflict(existing, session_id, now, expires_at)
        await session.flush()
        return result

    return new_claim


async def has_valid_claim(
    session: AsyncSession,
    room_id: int,
    participant_id: int,
    session_id: str,
    now: Optional[datetime] = None,
) -> bool:
    """True iff an unexpired claim for the participant is held by exactly ``session_id``."""
    existing = await _find_claim(session, room_id, participant_id)
    if existing is None:
        return False
    return existing.session_id == session_id and not _is_expired(existing, now or utcnow())
