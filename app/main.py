# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Yaad API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import asyncio
import json
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agents.reminder_parser import ParseError
from app.config import settings
from app.websocket import websocket_manager, WEBSOCKET_CHANNEL
from app.exceptions import (
    YaadException,
    yaad_exception_handler,
    validation_exception_handler,
)
from app.routers import health, reminders, contacts, history, voices, voice, calls, scheduler
from app.auth import routes as auth_routes
from app.websocket import routes as websocket_routes
from app.websocket import transcription as transcription_routes
from lib.utils import ApplicationError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Global handles for the Redis listener task
_redis_listener_task = None
_shutdown_event = None


async def redis_pubsub_listener():
    """
    Background task that listens to Redis pub/sub and broadcasts to WebSockets.

    Bridges the status callback (and Celery workers) with WebSocket clients:
    1. Subscribe to the channel publish_event() writes to
    2. Forward each event to the sockets of the user it belongs to
    """
    logger.info("Starting Redis pub/sub listener for WebSocket broadcasts")

    redis_client = aioredis.from_url(settings.REDIS_URL)
    pubsub = redis_client.pubsub()

    try:
        await pubsub.subscribe(WEBSOCKET_CHANNEL)

        async for message in pubsub.listen():
            if _shutdown_event and _shutdown_event.is_set():
                break

            if message["type"] != "message":
                continue

            try:
                data = json.loads(message["data"])
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON in Redis message: {e}")
                continue

            user_id = data.pop("user_id", None)
            if user_id:
                await websocket_manager.broadcast(user_id, data)

    except asyncio.CancelledError:
        logger.info("Redis pub/sub listener cancelled")
    except aioredis.RedisError as e:
        logger.error(f"Redis pub/sub listener error: {e}")
    finally:
        await pubsub.aclose()
        await redis_client.aclose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log config, start the Redis listener
    - Shutdown: stop the Redis listener
    """
    global _redis_listener_task, _shutdown_event

    logger.info(f"Starting Yaad API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    _shutdown_event = asyncio.Event()
    _redis_listener_task = asyncio.create_task(redis_pubsub_listener())

    yield

    logger.info("Shutting down Yaad API")

    _shutdown_event.set()
    _redis_listener_task.cancel()
    try:
        await _redis_listener_task
    except asyncio.CancelledError:
        pass


# Create FastAPI application
app = FastAPI(
    title="Yaad API",
    description="""
## Reminder Calls, Spoken in a Familiar Voice

Yaad schedules phone calls that speak a short reminder to someone you care
about, in a preset voice or a voice cloned from your own recording.

### How It Works

1. **Create a Reminder** - who to call, what to say, when, how often
2. **The Scheduler Calls** - every minute, due reminders are called and
   repeating ones move to their next occurrence
3. **Follow the Outcome** - answered, voicemail, missed or failed, live over
   `WS /ws/calls`

### Voice Dictation

Stream audio to `WS /ws/transcribe`, then send the transcript to
`POST /api/v1/voice/parse` to get a reminder draft.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify Supabase JWT tokens"},
        {"name": "Reminders", "description": "Create and manage reminder calls"},
        {"name": "Contacts", "description": "Saved recipients"},
        {"name": "Call History", "description": "Call attempts and outcomes"},
        {"name": "Voices", "description": "Clone, preview and delete a familiar voice"},
        {"name": "Voice Input", "description": "Turn dictation into reminder drafts"},
        {"name": "Calls", "description": "Place calls and receive Twilio callbacks"},
        {"name": "Scheduler", "description": "Trigger the due-reminder sweep"},
        {"name": "WebSocket", "description": "Call status updates and the transcription relay"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(YaadException)
async def handle_yaad_exception(request: Request, exc: YaadException):
    """Handle custom Yaad exceptions."""
    return await yaad_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(ParseError)
async def handle_parse_error(request: Request, exc: ParseError):
    """Voice parser failures keep their own status (400 empty, 502 model)."""
    content = {"detail": exc.message, "code": exc.code}
    if exc.suggestion:
        content["suggestion"] = exc.suggestion
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    """Provider and database client errors that escaped a service."""
    logger.error(f"Client error: {exc}")
    return JSONResponse(status_code=502, content=exc.to_dict())


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])

app.include_router(health.router, prefix="/api/v1", tags=["Health"])

app.include_router(reminders.router, prefix="/api/v1/reminders", tags=["Reminders"])

app.include_router(contacts.router, prefix="/api/v1/contacts", tags=["Contacts"])

app.include_router(history.router, prefix="/api/v1/history", tags=["Call History"])

app.include_router(voices.router, prefix="/api/v1/voices", tags=["Voices"])

app.include_router(voice.router, prefix="/api/v1/voice", tags=["Voice Input"])

app.include_router(calls.router, prefix="/api/v1/calls", tags=["Calls"])

app.include_router(scheduler.router, prefix="/api/v1/scheduler", tags=["Scheduler"])

# WebSocket endpoints (call status updates, transcription relay)
app.include_router(websocket_routes.router, tags=["WebSocket"])
app.include_router(transcription_routes.router, tags=["WebSocket"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Yaad API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
