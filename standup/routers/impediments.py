"""Impediments router – daily GREEN/YELLOW/RED status per participant."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from standup.database import Store, get_store
from standup.models.room import Room
from standup.routers.auth import get_authorized_room, get_room
from standup.schemas.impediment import ImpedimentOut, ImpedimentResolve, ImpedimentUpsert
from standup.services import impediments
from standup.utils.responses import success_response

router = APIRouter(prefix="/api/rooms/{slug}/impediments", tags=["impediments"])


@router.get("")
async def list_impediments(
    room: Room = Depends(get_room),
    store: Store = Depends(get_store),
    date: Optional[dt.date] = Query(None),
):
    """Entries for ``date`` (default today) and yesterday's unresolved ones."""
    listing = await store.run(impediments.list_for_date, room.id, date)
    return success_response({
        "todayByParticipant": {
            str(participant_id): {
                "id": entry.id,
                "status": entry.status.value,
                "description": entry.description,
            }
            for participant_id, entry in listing["today_by_participant"].items()
        },
        "previousDayActive": [
            ImpedimentOut.model_validate(entry).dump() for entry in listing["previous_day_active"]
        ],
    })


@router.post("", status_code=status.HTTP_201_CREATED)
async def upsert_impediment(
    body: ImpedimentUpsert,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    entry = await store.run(
        impediments.upsert,
        room.id,
        body.participant_id,
        body.status,
        body.description,
        body.date,
    )
    return success_response(ImpedimentOut.model_validate(entry).dump())


@router.post("/resolve")
async def resolve_impediment(
    body: ImpedimentResolve,
    room: Room = Depends(get_authorized_room),
    store: Store = Depends(get_store),
):
    """Resolve the latest active impediment and mark today GREEN."""
    await store.run(impediments.resolve, room.id, body.participant_id)
    return success_response({"ok": True})
