"""
Main FastAPI application for the StudySync backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studysync.config import settings
from studysync.database import close_db, init_db
from studysync.routers import (
    ai,
    flashcards,
    health,
    news_feed,
    notes,
    projects,
    resources,
    schedules,
    study_sessions,
    timers,
    todos,
    tools,
)
from studysync.services.gemini import GeminiService
from studysync.services.timer_registry import timer_registry

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _check_database() -> bool:
    """Initialise DB tables and verify the connection.  Returns True on success."""
    try:
        await init_db()
        logger.info("✓ Database connection OK")
        return True
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise


async def _check_gemini() -> bool:
    """
    Verify the Gemini API key works.  Never raises; AI endpoints fall back to
    "try again" messages while Gemini is unavailable.
    """
    gemini = GeminiService()
    if not gemini.api_key:
        logger.warning("⚠ GEMINI_API_KEY is not set; AI features will return fallback messages")
        return False
    if await gemini.check_health():
        logger.info("✓ Gemini reachable (model %s)", settings.GEMINI_MODEL)
        return True
    logger.warning("⚠ Gemini unreachable or key rejected; AI features will return fallback messages")
    return False


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting StudySync backend …")
    logger.info("=" * 60)

    # 1 - Database (required; raises on failure)
    await _check_database()

    # 2 - Gemini (optional; logs warnings but continues)
    await _check_gemini()

    # 3 - Upload directory
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    logger.info("✓ Upload directory: %s", os.path.abspath(settings.UPLOAD_DIR))

    logger.info("=" * 60)
    logger.info("  StudySync backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # server is running

    logger.info("Shutting down StudySync backend …")
    # Running timers do not survive a restart; stop their pending ticks
    timer_registry.clear()
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="StudySync API",
    description=(
        "**StudySync** - student productivity backend.\n\n"
        "Notes, todos, flashcards, projects, schedules and study sessions, "
        "an AI study assistant, file tools, and server-side countdown timers.\n\n"
        "Key endpoints:\n"
        "- `POST /api/timers` - create a pomodoro / break timer\n"
        "- `POST /api/timers/{id}/start` - start counting down\n"
        "- `GET  /api/study-sessions/stats` - study time totals\n"
        "- `POST /api/chat` - ask the AI assistant\n"
        "- `POST /api/convert-document` - convert pdf / docx / txt\n"
        "- `GET  /api/schedules/export.ics` - export your schedule\n"
    ),
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip health-check polling and timer snapshots the frontend polls every second
    path = request.url.path
    polled = path in ("/api/health", "/api/health/", "/") or (
        request.method == "GET" and path.startswith("/api/timers")
    )
    if not polled:
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,         prefix="/api/health",         tags=["Health"])
app.include_router(notes.router,          prefix="/api/notes",          tags=["Notes"])
app.include_router(todos.router,          prefix="/api/todos",          tags=["Todos"])
app.include_router(flashcards.router,     prefix="/api/flashcards",     tags=["Flashcards"])
app.include_router(projects.router,       prefix="/api/projects",       tags=["Projects"])
app.include_router(schedules.router,      prefix="/api/schedules",      tags=["Schedules"])
app.include_router(study_sessions.router, prefix="/api/study-sessions", tags=["Study Sessions"])
app.include_router(news_feed.router,      prefix="/api/news-feed",      tags=["News Feed"])
app.include_router(timers.router,         prefix="/api/timers",         tags=["Timers"])
app.include_router(ai.router,             prefix="/api",                tags=["AI"])
app.include_router(tools.router,          prefix="/api",                tags=["Tools"])
app.include_router(resources.router,      prefix="/api",                tags=["Resources"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root: returns basic service info."""
    return {
        "name": "StudySync API",
        "version": API_VERSION,
        "description": "Student Productivity Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "notes": "/api/notes",
            "todos": "/api/todos",
            "flashcards": "/api/flashcards",
            "projects": "/api/projects",
            "schedules": "/api/schedules",
            "study_sessions": "/api/study-sessions",
            "news_feed": "/api/news-feed",
            "timers": "/api/timers",
            "chat": "/api/chat",
            "ai": "/api/ai",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "studysync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
