"""
Stand-up Room – FastAPI application entry-point.

Run with:
    uvicorn standup.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from standup.config import settings
from standup.database import create_store, engine, init_database
from standup.errors import STATUS_CODES, AppError, ErrorCode, database_unavailable

# ── Import routers ──
from standup.routers import auth, health, impediments, participants, poker, rooms
from standup.utils.responses import error_response, log_structured_error
from standup.utils.retry import is_database_connection_error

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables and the store on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_database(engine)
    app.state.store = create_store()
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Stand-up room coordinator: attendance, roulette draw, planning poker and impediments.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))


# ── Error envelopes ──
def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(messages) or "Invalid request"


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(error_response(exc.code.value, exc.message), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        error_response(ErrorCode.VALIDATION_ERROR.value, _validation_message(exc)),
        status_code=STATUS_CODES[ErrorCode.VALIDATION_ERROR],
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    context = f"{request.method} {request.url.path}"
    if is_database_connection_error(exc):
        error = database_unavailable()
    else:
        error = AppError(ErrorCode.INTERNAL_ERROR, "Internal server error")
    log_structured_error(error.code.value, error.message, context=context, raw=repr(exc))
    return JSONResponse(error_response(error.code.value, error.message), status_code=error.status_code)


# ── Register API routers ──
app.include_router(rooms.router)
app.include_router(auth.router)
app.include_router(participants.router)
app.include_router(poker.router)
app.include_router(impediments.router)
app.include_router(health.router)
