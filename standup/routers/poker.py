"""
Planning poker router.

Every route needs the room-session cookie. ``claim`` and ``vote`` also take
a per-browser ``sessionId`` that binds the caller to one participant.
"""

from fastapi import APIRouter, Depends

from standup.database import Store, get_store
from standup.models.room import Room
from standup.routers.auth import get_authorized_room
from standup.schemas.participant import PokerEnabledUpdate
from standup.schemas.poker import (
    ClaimIn,
    PokerParticipantOut,
    RevealIn,
    RoundOut,
    VoteIn,
    VoteSummaryOut,
)
from standup.services import claims, poker, roster
from standup.utils.dates import as_utc
from standup.utils.responses import success_response

router = APIRouter(prefix="/api/rooms/{slug}/poker", tags=["poker"])


@router.get("")
async def poker_state(room: Room = Depends(get_authorized_room), store: Store = Depends(get_store)):
    """Current round, roster and vote summary (values hidden until revealed)."""
    state = await store.run(poker.get_poker_state, room.id)
    stats = state["stats"]
    return success_response({
        "round": RoundOut.model_validate(state["round"]).dump(),
        "participants": [PokerParticipantOut.model_validate(p).dump() for p in state["participants"]],
        "voteSummary": [VoteSummaryOut(**v).dump() for v in state["vote_summary"]],
        "eligibleCount": state["eligible_count"],
        "stats": stats.to_dict() if stats else None,
    })


@router.post("/new-round")
async def new_round(room: Room = Depends(get_authorized_room), store: Store = Depends(get_store)):
    poker_round = await store.run(poker.new_round, room.id)
    return success_response({"round": RoundOut.model_validate(poker_round).dump()})


@router.post("/reset")
async def reset_voting(room: Room = Depends(get_authorized_room), store: Store = Depends(get_store)):
    """Discard the current round's votes and reopen it for voting."""
    await store.run(poker.reset_voting, room.id)
    return success_response({"success": True})


@router.post("/reveal")
async def reveal(
    body: RevealIn,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    poker_round, already_revealed, stats = await store.run(poker.reveal, room.id, body.round_id)
    data = {
        "success": True,
        "round": RoundOut.model_validate(poker_round).dump(),
        "stats": stats.to_dict(),
    }
    if already_revealed:
        data["alreadyRevealed"] = True
    return success_response(data)


@router.post("/vote")
async def vote(
    body: VoteIn,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    await store.run(
        poker.cast_vote,
        room.id,
        body.round_id,
        body.participant_id,
        body.session_id,
        body.value,
    )
    return success_response({"success": True})


@router.post("/claim")
async def claim(
    body: ClaimIn,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    """Bind this browser's ``sessionId`` to a participant for CLAIM_TTL_HOURS."""
    participant_claim = await store.run(claims.claim, room.id, body.participant_id, body.session_id)
    return success_response({
        "claim": {
            "id": participant_claim.id,
            "expiresAt": as_utc(participant_claim.expires_at).isoformat(),
        }
    })


@router.patch("/participants/{participant_id}")
async def set_poker_enabled(
    participant_id: int,
    body: PokerEnabledUpdate,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    participant = await store.run(roster.set_poker_enabled, room.id, participant_id, body.poker_enabled)
    return success_response({
        "id": participant.id,
        "name": participant.name,
        "pokerEnabled": participant.poker_enabled,
    })
