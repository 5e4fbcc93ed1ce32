"""
Document Relay - FastAPI Main Application
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.orm import Session
from typing import Optional
import structlog
import time

from docrelay.config import settings
from docrelay.core.errors import RelayError
from docrelay.database import Base, app_engine, get_app_db_context, ensure_database_directory
from docrelay.connections.connection_manager import connection_manager
from docrelay.services.project_registry import ProjectRegistry, parse_connection_credentials
from docrelay import models  # noqa: F401 - registers tables on Base.metadata

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


def bootstrap_default_project(db: Session, credentials: Optional[str]) -> Optional[str]:
    """Register the default credential blob if its project is not known yet."""
    if not credentials:
        return None

    parsed = parse_connection_credentials(credentials)
    registry = ProjectRegistry(db)
    if registry.get(parsed["project_id"]) is None:
        registry.create("default", parsed)
        logger.info("default_project_bootstrapped", project_id=parsed["project_id"])
    return parsed["project_id"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info(
        "application_startup",
        version=settings.APP_VERSION,
        auth_mode=settings.AUTH_MODE,
        multi_project=settings.MULTI_PROJECT
    )

    if not settings.ADMIN_SECRET_KEY:
        logger.warning("admin_secret_not_set", detail="admin endpoints will reject every request")

    try:
        ensure_database_directory(settings.DATABASE_URL)
        Base.metadata.create_all(bind=app_engine)
        with get_app_db_context() as db:
            bootstrap_default_project(db, settings.DEFAULT_PROJECT_CREDENTIALS)
        logger.info("database_initialized")
    except Exception as e:
        logger.warning("database_init_failed", error=str(e))
        logger.info("waiting_for_configuration")

    yield

    # Shutdown
    connection_manager.close_all()
    logger.info("application_shutdown")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Credential-gatekeeping relay for multi-project document databases",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add request timing to response headers."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Exception handlers
@app.exception_handler(RelayError)
async def relay_exception_handler(request: Request, exc: RelayError):
    """Map relay errors to their status and ``{error, details?}`` body."""
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            error=exc.error,
            error_type=type(exc).__name__,
            path=request.url.path
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors."""
    logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
    content = {"error": "Invalid request body"}
    if settings.DEBUG:
        content["details"] = str(exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    content = {"error": "An internal server error occurred."}
    if settings.DEBUG:
        content["details"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# Health check endpoint
@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "app": settings.APP_NAME
    }


@app.get("/", tags=["System"])
async def root():
    """Root endpoint."""
    return {
        "message": "Document Relay API",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }


# Import and include routers
from docrelay.api import proxy, keys, projects, status as relay_status  # noqa: E402

app.include_router(proxy.router, prefix="/api/proxy", tags=["Proxy"])
app.include_router(keys.router, prefix="/api/admin/keys", tags=["Admin: Keys"])
app.include_router(projects.router, prefix="/api/admin/projects", tags=["Admin: Projects"])
app.include_router(relay_status.router, prefix="/api/admin/status", tags=["Admin: Status"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "docrelay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
