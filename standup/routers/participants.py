"""Participants router – roster management and the roulette draw."""

from fastapi import APIRouter, Depends, Query, status

from standup.config import settings
from standup.database import Store, get_store
from standup.models.room import Room
from standup.routers.auth import get_authorized_room, get_room
from standup.schemas.participant import (
    ParticipantCreate,
    ParticipantOut,
    ParticipantRef,
    SpinHistoryOut,
    SpinResultOut,
    WinnerOut,
)
from standup.services import draw, roster
from standup.utils.responses import success_response

router = APIRouter(prefix="/api/rooms/{slug}", tags=["participants"])


# ═══════════════════════════════════════════════════════════════
#  Roster
# ═══════════════════════════════════════════════════════════════

@router.get("/participants")
async def list_participants(room: Room = Depends(get_room), store: Store = Depends(get_store)):
    participants = await store.run(roster.list_participants, room.id)
    return success_response([ParticipantOut.model_validate(p).dump() for p in participants])


@router.post("/participants", status_code=status.HTTP_201_CREATED)
async def add_participant(
    body: ParticipantCreate,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    participant = await store.run(roster.add_participant, room.id, body.name, body.poker_enabled)
    return success_response(ParticipantOut.model_validate(participant).dump())


@router.patch("/participants/{participant_id}")
async def toggle_presence(
    participant_id: int,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    """Flip a participant between present and absent."""
    participant = await store.run(roster.toggle_presence, room.id, participant_id)
    return success_response(ParticipantOut.model_validate(participant).dump())


@router.delete("/participants/{participant_id}")
async def remove_participant(
    participant_id: int,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    await store.run(roster.remove_participant, room.id, participant_id)
    return success_response({"ok": True})


# ═══════════════════════════════════════════════════════════════
#  Roulette
# ═══════════════════════════════════════════════════════════════

@router.post("/spin")
async def spin(room: Room = Depends(get_authorized_room), store: Store = Depends(get_store)):
    """Draw a winner uniformly among present participants."""
    winner, entry = await store.run(draw.spin, room.id)
    result = SpinResultOut(
        winner=WinnerOut.model_validate(winner),
        spin_history=SpinHistoryOut(
            id=entry.id,
            participant_id=entry.participant_id,
            created_at=entry.created_at,
            participant=ParticipantRef.model_validate(winner),
        ),
    )
    return success_response(result.dump())


@router.get("/history")
async def history(
    room: Room = Depends(get_room),
    store: Store = Depends(get_store),
    limit: int = Query(settings.HISTORY_DEFAULT_LIMIT, ge=1),
):
    """Most recent spins first; ``limit`` is capped at HISTORY_MAX_LIMIT."""
    rows = await store.run(draw.get_history, room.id, limit)
    return success_response([
        SpinHistoryOut(
            id=entry.id,
            participant_id=entry.participant_id,
            created_at=entry.created_at,
            participant=ParticipantRef.model_validate(participant),
        ).dump()
        for entry, participant in rows
    ])


@router.post("/reset")
async def reset(room: Room = Depends(get_authorized_room), store: Store = Depends(get_store)):
    """Clear the draw history and zero every win count."""
    await store.run(draw.reset, room.id)
    return success_response({"ok": True})
