"""
Main FastAPI application for the WordWise backend.
Handles CORS, request logging middleware, error handlers, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import close_db, init_db
from app.routers import documents, exports, generation, health, projects, slides, templates, users
from app.services.openai_client import OpenAIChatService

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _check_database() -> bool:
    """Initialise DB tables, seed templates and verify the connection.  Returns True on success."""
    try:
        await init_db()
        logger.info("✓ Database connection OK")
        return True
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise


async def _check_llm() -> dict:
    """
    Verify the OpenAI-compatible endpoint is configured and reachable.
    Returns a dict with status info.  Never raises - warnings are logged instead.
    """
    result = {"configured": settings.llm_configured, "reachable": False}
    if not result["configured"]:
        logger.warning("⚠ OPENAI_API_KEY not set - grammar checking and generation will return 500")
        return result

    try:
        result["reachable"] = await OpenAIChatService().check_health()
    except Exception as exc:
        logger.error("✗ LLM endpoint check failed (%s)", exc)

    if result["reachable"]:
        logger.info("✓ LLM endpoint reachable at %s", settings.OPENAI_BASE_URL)
        logger.info("  ✓ Models: %s (grammar), %s (generation)", settings.OPENAI_MODEL, settings.OPENAI_FAST_MODEL)
    else:
        logger.warning("⚠ LLM endpoint %s not reachable - AI features may fail", settings.OPENAI_BASE_URL)
    return result


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting WordWise backend …")
    logger.info("=" * 60)

    # 1 - Database (required; raises on failure)
    await _check_database()

    # 2 - LLM (optional; logs warnings but continues)
    await _check_llm()

    if settings.ALLOW_DEMO_USER:
        logger.warning("⚠ Demo user enabled - requests without X-User-Id act as %s", settings.DEMO_USER_ID)

    logger.info("=" * 60)
    logger.info("  WordWise backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down WordWise backend …")
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="WordWise API",
    description=(
        "**WordWise AI** - writing assistant and Instagram carousel studio.\n\n"
        "Write documents, check grammar, turn writing into carousel slides "
        "with an LLM, and export carousels as PDF, PNG or ZIP.\n\n"
        "Key endpoints:\n"
        "- `POST /api/documents/check-grammar` - grammar/spelling/style check\n"
        "- `POST /api/documents/{id}/carousel` - document to carousel project\n"
        "- `POST /api/generate-slides` - LLM slide generation\n"
        "- `POST /api/recommend-template` - template recommendation\n"
        "- `POST /api/projects/{id}/export-pdf` - PDF export\n"
        "- `POST /api/projects/{id}/export-zip` - ZIP export\n"
    ),
    version="1.0.0",
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
    expose_headers=[
        "Content-Disposition",
        "X-Export-Type",
        "X-Export-Warning",
        "X-Images-Generated",
        "X-Slides-Count",
        "X-Process-Time",
    ],
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

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Errors raised by routes go out as ``{"error": detail}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are client errors (400), not 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": f"{location}: {message}" if location else message,
            "details": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                for e in errors
            ],
        },
    )


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
            "error": "Internal server error",
            "details": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,      prefix="/api/health",    tags=["Health"])
app.include_router(documents.router,   prefix="/api/documents", tags=["Documents"])
app.include_router(projects.router,    prefix="/api/projects",  tags=["Projects"])
app.include_router(exports.router,     prefix="/api/projects",  tags=["Exports"])
app.include_router(slides.router,      prefix="/api/slides",    tags=["Slides"])
app.include_router(templates.router,   prefix="/api/templates", tags=["Templates"])
app.include_router(users.router,       prefix="/api/user",      tags=["User"])
app.include_router(generation.router,  prefix="/api",           tags=["Generation"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root - returns basic service info."""
    return {
        "name": "WordWise API",
        "version": "1.0.0",
        "description": "AI writing assistant and Instagram carousel backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "documents": "/api/documents",
            "projects": "/api/projects",
            "slides": "/api/slides",
            "templates": "/api/templates",
            "user": "/api/user",
            "generation": "/api/generate-slides",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
