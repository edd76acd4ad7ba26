from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy import text
import structlog
from app.core.cache import ResponseCache
from app.core.config import settings
from app.core.errors import AppError
from app.core.logging import configure_logging
from app.api.v1.router import api_router
from app.db.session import engine, Base, get_db_session, wait_for_database
from app.services.bootstrap import run_bootstrap
from app.services.media_service import PLACEHOLDER_SVG
from app.db import models  # noqa: F401  registers tables on Base.metadata

configure_logging(settings)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info("Starting RuzMovie API", environment=settings.environment, debug=settings.debug)

    wait_for_database(engine, settings.db_connect_retries)

    if settings.auto_create_tables:
        # Production deployments run: alembic upgrade head
        Base.metadata.create_all(bind=engine)

    if settings.bootstrap_on_startup:
        db = get_db_session()
        try:
            run_bootstrap(db, settings)
        finally:
            db.close()

    logger.info("Application started", port=settings.port)

    yield

    # Shutdown
    logger.info("Shutting down RuzMovie API")
    engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Video sharing platform: uploads, streaming, subscriptions and engagement",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Response caches shared by all requests
app.state.profile_cache = ResponseCache(settings.profile_cache_ttl_seconds)
app.state.video_cache = ResponseCache(settings.video_cache_ttl_seconds)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.api_v1_prefix)


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Domain errors raised by services"""
    return error_response(exc.status_code, exc.message, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first validation problem as a 400"""
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request")

    first = errors[0]
    if first.get("type") == "missing":
        field = first.get("loc", ["field"])[-1]
        message = f"{field} is required"
    else:
        message = str(first.get("msg", "Invalid request"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
    return error_response(400, message)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return error_response(500, "Internal server error")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "success": True,
        "data": {
            "name": settings.app_name,
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs",
        },
    }


@app.get("/health")
@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    health = {
        "status": "healthy",
        "database": "unknown",
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        health["database"] = "connected"
    except Exception as e:
        logger.warning("Health check database ping failed", error=str(e))
        health["database"] = "unreachable"
        health["status"] = "degraded"

    return {"success": True, "data": health}


@app.get("/placeholder-thumbnail.jpg")
async def placeholder_thumbnail():
    """Generated placeholder for videos without a thumbnail"""
    return Response(
        content=PLACEHOLDER_SVG,
        media_type="image/svg+xml",
        headers={"Cache-Control": "public, max-age=86400"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
