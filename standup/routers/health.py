"""Health router – trivial store connectivity probes (200 / 503 only)."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from standup.database import Store, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


async def _probe(store: Store) -> bool:
    try:
        await store.ping()
        return True
    except Exception as e:
        logger.warning(f"Database health probe failed: {e}")
        return False


@router.get("/health/db")
async def database_health(store: Store = Depends(get_store)):
    if await _probe(store):
        return JSONResponse({"ok": True, "database": "connected"}, status_code=200)
    return JSONResponse({"ok": False, "database": "unavailable"}, status_code=503)


@router.get("/cron/keepalive")
async def keepalive(store: Store = Depends(get_store)):
    if await _probe(store):
        return JSONResponse({"ok": True}, status_code=200)
    return JSONResponse({"ok": False}, status_code=503)
