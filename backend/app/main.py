from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.errors import (
    AlreadyRegistered, AuthExpired, DeadlinePassed, FetchFailure, NotRegistered,
    ParticipationError, RegistrationClosed, StaleAggregation, SubmissionValidationError,
)
from app.logging_setup import configure_logging
from app.routes.system import router as system_router
from app.routes.participation import router as participation_router
from app.routes.pending import router as pending_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha, demo_mode=settings.demo_mode)
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API: reconciled hackathon participation state",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_router)
app.include_router(participation_router)
app.include_router(pending_router)

STATUS_FOR_ERROR: dict[type[ParticipationError], int] = {
    AuthExpired: 401,
    NotRegistered: 403,
    DeadlinePassed: 400,
    RegistrationClosed: 400,
    AlreadyRegistered: 409,
    StaleAggregation: 409,
    SubmissionValidationError: 422,
    FetchFailure: 502,
}

@app.exception_handler(ParticipationError)
async def participation_error_handler(request: Request, exc: ParticipationError):
    status = STATUS_FOR_ERROR.get(type(exc), 500)
    headers = None
    if isinstance(exc, AuthExpired):
        # Clients tear the session down on this header; nothing else forces a logout.
        log.info("session_teardown", path=request.url.path)
        headers = {"X-Session-Expired": "1", "WWW-Authenticate": "Bearer"}
    else:
        log.info("participation_error", code=exc.code, status=status, path=request.url.path)
    return JSONResponse(status_code=status, content={"detail": exc.message, "code": exc.code}, headers=headers)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
