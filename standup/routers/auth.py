"""
Authentication router – room passcode → signed room-session cookie.

Endpoints:
    POST /api/rooms/{slug}/auth           → check passcode, set session cookie
    GET  /api/rooms/{slug}/check-session  → 200 if the cookie is valid for this room
    POST /api/rooms/{slug}/logout         → clear the session cookie
"""

import asyncio
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from fastapi import APIRouter, Depends, Request, Response
from jose import JWTError, jwt
from pwdlib import PasswordHash
from pwdlib.hashers.bcrypt import BcryptHasher

from standup.config import settings
from standup.database import Store, get_store
from standup.errors import AppError, ErrorCode, unauthorized
from standup.models.room import Room
from standup.schemas.room import RoomAuth
from standup.services.rooms import get_room_by_slug
from standup.utils.dates import utcnow
from standup.utils.responses import success_response

router = APIRouter(prefix="/api/rooms/{slug}", tags=["auth"])

COOKIE_KEY = settings.SESSION_COOKIE_NAME
SESSION_MAX_AGE = settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60

# ═══════════════════════════════════════════════════════════════
#  Passcode hashing (bcrypt, fixed cost)
# ═══════════════════════════════════════════════════════════════

_password_hash = PasswordHash((BcryptHasher(rounds=settings.PASSCODE_HASH_ROUNDS),))


async def hash_passcode(passcode: str) -> str:
    # bcrypt is CPU-bound; run it off the event loop.
    return await asyncio.to_thread(_password_hash.hash, passcode)


async def verify_passcode(passcode: str, passcode_hash: str) -> bool:
    return await asyncio.to_thread(_password_hash.verify, passcode, passcode_hash)


# ═══════════════════════════════════════════════════════════════
#  Room session tokens
# ═══════════════════════════════════════════════════════════════

class RoomSession(NamedTuple):
    room_id: int
    exp: int


def create_room_session(room_id: int, now: Optional[datetime] = None) -> str:
    """Create a signed JWT scoped to one room, valid for SESSION_EXPIRE_DAYS."""
    issued = now or utcnow()
    claims = {
        "roomId": room_id,
        "iat": issued,
        "exp": issued + timedelta(days=settings.SESSION_EXPIRE_DAYS),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_room_session(token: str) -> Optional[RoomSession]:
    """Decode and check the signature and expiry. Returns None when invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return RoomSession(room_id=int(payload["roomId"]), exp=int(payload["exp"]))
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def require_room_session(token: Optional[str], room_id: int) -> RoomSession:
    """
    Authorize ``token`` for ``room_id``.

    Missing, malformed, expired and other-room tokens all fail the same
    way so the caller learns nothing about which check failed.
    """
    session = verify_room_session(token) if token else None
    if (
        session is None
        or session.room_id != room_id
        or session.exp <= utcnow().timestamp()
    ):
        raise unauthorized()
    return session


def _set_session_cookie(response: Response, token: str) -> Response:
    """Attach the room-session cookie to a response."""
    response.set_cookie(
        key=COOKIE_KEY,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=SESSION_MAX_AGE,
        path="/",
    )
    return response


def _clear_session_cookie(response: Response) -> Response:
    response.delete_cookie(
        key=COOKIE_KEY,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    return response


# ═══════════════════════════════════════════════════════════════
#  Dependencies
# ═══════════════════════════════════════════════════════════════

async def get_room(slug: str, store: Store = Depends(get_store)) -> Room:
    """Resolve the ``{slug}`` path parameter to a Room, or 404."""
    return await store.run(get_room_by_slug, slug)


async def get_authorized_room(request: Request, room: Room = Depends(get_room)) -> Room:
    """The room, once the request's session cookie is verified for it."""
    require_room_session(request.cookies.get(COOKIE_KEY), room.id)
    return room


# ═══════════════════════════════════════════════════════════════
#  Routes
# ═══════════════════════════════════════════════════════════════

@router.post("/auth")
async def authenticate(
    body: RoomAuth,
    response: Response,
    room: Room = Depends(get_room),
):
    """Exchange the room passcode for a 7-day session cookie."""
    if not await verify_passcode(body.passcode, room.passcode_hash):
        raise AppError(ErrorCode.UNAUTHORIZED, "Incorrect passcode")

    _set_session_cookie(response, create_room_session(room.id))
    return success_response({"ok": True})


@router.get("/check-session")
async def check_session(room: Room = Depends(get_authorized_room)):
    return success_response({"authenticated": True})


@router.post("/logout")
async def logout(slug: str, response: Response):
    """Clear the session cookie."""
    _clear_session_cookie(response)
    return success_response({"ok": True})
