"""JIRA API Gateway - FastAPI Application."""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from . import __version__
from .api import jira
from .api.schemas import HealthResponse, ServiceInfoResponse
from .config import get_settings
from .core.exceptions import GatewayError
from .core.logging import (
    setup_logging,
    get_logger,
    set_request_id,
    clear_context,
    log_event,
    LogEvent,
)
from .db.database import engine
from .db.models import Base
from .services.integration import JiraIntegrationStore, get_integration_store
from .services.jira_api import ErrorResponse

settings = get_settings()

# Setup structured logging
setup_logging(
    log_level=settings.log_level,
    service_name="jira-gateway",
    environment=settings.environment,
    json_output=settings.log_json,
    log_file=settings.log_file,
)

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.is_production():
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all HTTP requests with structured logging."""

    async def dispatch(self, request: Request, call_next):
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        start_time = time.time()

        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            # Skip health check to reduce noise
            if request.url.path != "/health":
                logger.info(
                    f"{request.method} {request.url.path} - {response.status_code}",
                    extra={
                        "http_method": request.method,
                        "http_path": request.url.path,
                        "http_status": response.status_code,
                        "http_duration_ms": round(duration_ms, 2),
                    },
                )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"{request.method} {request.url.path} - Error: {str(e)}",
                exc_info=True,
                extra={
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "http_duration_ms": round(duration_ms, 2),
                },
            )
            raise
        finally:
            clear_context()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log_event(
        LogEvent.SYSTEM_STARTUP,
        f"JIRA API gateway starting up (version {settings.app_version})",
        environment=settings.environment,
    )
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")
    yield
    log_event(LogEvent.SYSTEM_SHUTDOWN, "JIRA API gateway shutting down")


app = FastAPI(
    title=settings.app_name,
    description="Relays JIRA user search and issue assignment on behalf of platform users",
    version=__version__,
    docs_url="/docs" if not settings.is_production() else None,
    redoc_url="/redoc" if not settings.is_production() else None,
    lifespan=lifespan,
)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    """Render gateway errors as structured status and message payloads."""
    level = "ERROR" if exc.status_code >= 500 else "WARNING"
    log_event(
        LogEvent.SYSTEM_ERROR if exc.status_code >= 500 else LogEvent.REQUEST_REJECTED,
        exc.message,
        level=level,
        error_type=type(exc).__name__,
        component=exc.component,
        http_path=request.url.path,
    )
    payload = ErrorResponse(status=exc.status_code, message=exc.message, solution=exc.solution)
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report missing or malformed request parameters as bad requests."""
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    payload = ErrorResponse(status=400, message=f"Invalid request parameters: {', '.join(fields)}")
    return JSONResponse(status_code=400, content=payload.model_dump(exclude_none=True))


# Request logging middleware (runs first, logs request details)
app.add_middleware(RequestLoggingMiddleware)

# Security headers middleware (add first so it runs last)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "PUT", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
    max_age=600,
)

app.include_router(jira.router, prefix="/v1/jira/rest/api", tags=["JIRA API"])


@app.get("/", response_model=ServiceInfoResponse)
async def root():
    """API root endpoint."""
    return ServiceInfoResponse(
        name=settings.app_name,
        version=__version__,
        docs="/docs" if not settings.is_production() else None,
    )


@app.get("/health", response_model=HealthResponse)
def health_check(store: JiraIntegrationStore = Depends(get_integration_store)):
    """Health check endpoint reporting whether the integration is bootstrapped."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        integration_configured=store.get_settings() is not None,
    )
