"""ResiLinked Backend API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .database import create_db_client
from .errors import APIError, api_error_handler
from .logging_config import get_logger, setup_logging
from .rate_limit import limiter
from .routes import jobs_router, notifications_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    setup_logging(settings.log_level)
    if getattr(app.state, "db", None) is None:
        app.state.db = create_db_client(settings)
    logger.info(f"Starting ResiLinked Backend API (debug={settings.debug})")
    yield
    # Shutdown
    logger.info("Shutting down ResiLinked Backend API")


app = FastAPI(
    title="ResiLinked Backend API",
    description="Barangay job marketplace: posting, matching and hiring",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Error responses
app.add_exception_handler(APIError, api_error_handler)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "alert": "Something went wrong. Please try again.",
        },
    )


# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(jobs_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": "resilinked-backend",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health")
async def health():
    """Detailed health check with actual database verification."""
    db_status = "disconnected"
    try:
        db = app.state.db
        # Simple query to verify connection
        db.table("jobs").select("id").limit(1).execute()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)[:50]}"

    overall_status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": overall_status,
        "database": db_status,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
