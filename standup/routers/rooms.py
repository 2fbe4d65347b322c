"""Rooms router – create, describe and delete rooms."""

from fastapi import APIRouter, Depends, status

from standup.database import Store, get_store
from standup.models.room import Room
from standup.routers.auth import get_authorized_room, get_room, hash_passcode
from standup.schemas.room import RoomCounts, RoomCreate, RoomDetailOut, RoomOut
from standup.services import rooms as room_service
from standup.utils.responses import success_response

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_room(body: RoomCreate, store: Store = Depends(get_store)):
    """Create a room; the passcode is stored only as a bcrypt hash."""
    passcode_hash = await hash_passcode(body.passcode)
    room = await store.run(room_service.create_room, body.name, body.slug, passcode_hash)
    return success_response(RoomOut.model_validate(room).dump())


@router.get("/{slug}")
async def read_room(room: Room = Depends(get_room), store: Store = Depends(get_store)):
    """Public room metadata and counts. No session required."""
    counts = await store.run(room_service.get_room_counts, room.id)
    detail = RoomDetailOut(
        **RoomOut.model_validate(room).model_dump(),
        count=RoomCounts(**counts),
    )
    return success_response(detail.dump())


@router.delete("/{slug}")
async def delete_room(room: Room = Depends(get_authorized_room), store: Store = Depends(get_store)):
    """Delete the room and everything in it. Irreversible."""
    await store.run(room_service.delete_room, room.id)
    return success_response({"ok": True})
