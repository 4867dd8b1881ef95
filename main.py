"""
Office Hours Queue - FastAPI Application
Main application entry point with logging, monitoring and HTTP hardening.
"""

import time
import uuid
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client import CONTENT_TYPE_LATEST
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from officehours.config.settings import get_settings
from officehours.api.router import api_router
from officehours.security.middleware import SecurityHeadersMiddleware, RateLimitMiddleware
from officehours.utils.logging import setup_logging
from officehours.utils.health import health_check
from officehours.models.database import init_database, close_database

# Initialize settings
settings = get_settings()

# Setup structured logging
setup_logging()
logger = structlog.get_logger(__name__)

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.ENVIRONMENT,
    )

# Prometheus metrics, on a private registry so reloads don't collide
metrics_registry = CollectorRegistry()

REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=metrics_registry
)
REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration',
    ['method', 'endpoint'],
    registry=metrics_registry
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting Office Hours Queue API", version=settings.VERSION)
    
    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize application", error=str(e))
        raise
    
    yield
    
    logger.info("Shutting down Office Hours Queue API")
    
    try:
        await close_database()
    except Exception as e:
        logger.error("Error during shutdown", error=str(e))


# Initialize FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Office hours queue: students ask, course staff answer",
    version=settings.VERSION,
    docs_url="/api/docs" if not settings.is_production else None,
    redoc_url="/api/redoc" if not settings.is_production else None,
    openapi_url="/api/openapi.json" if not settings.is_production else None,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RateLimitMiddleware)

# Trusted Host Middleware for production
if settings.is_production:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)


def _route_template(request: Request) -> str:
    """Path template for metric labels, so ids don't explode cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Structured request logging with trace IDs and timing."""
    trace_id = str(uuid.uuid4())
    request.state.trace_id = trace_id
    
    start_time = time.time()
    
    logger.info(
        "HTTP request started",
        trace_id=trace_id,
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "HTTP request failed",
            trace_id=trace_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    
    process_time = time.time() - start_time
    endpoint = _route_template(request)
    
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code
    ).inc()
    REQUEST_DURATION.labels(
        method=request.method,
        endpoint=endpoint
    ).observe(process_time)
    
    user = getattr(request.state, "user", None)
    logger.info(
        "HTTP request completed",
        trace_id=trace_id,
        status_code=response.status_code,
        user_id=user.id if user else None,
        response_time_ms=round(process_time * 1000, 2),
    )
    
    response.headers["X-Trace-ID"] = trace_id
    
    return response


# Health Check Endpoint
@app.get("/health", tags=["health"])
async def health_endpoint():
    """
    Health check endpoint for monitoring systems.
    Returns system status and dependencies health.
    """
    health_status = await health_check()
    status_code = 200 if health_status["healthy"] else 503
    
    return JSONResponse(
        content={
            "status": "healthy" if health_status["healthy"] else "unhealthy",
            "timestamp": health_status["timestamp"],
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "checks": health_status["checks"]
        },
        status_code=status_code,
    )


# Metrics endpoint for Prometheus
@app.get("/metrics", tags=["monitoring"])
async def metrics_endpoint():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(metrics_registry),
        media_type=CONTENT_TYPE_LATEST
    )


app.include_router(api_router, prefix="/api")


# Root endpoint
@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Office Hours Queue API",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "docs_url": "/api/docs" if not settings.is_production else None,
    }


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler with structured logging."""
    trace_id = getattr(request.state, "trace_id", "unknown")
    
    logger.error(
        "Unhandled exception",
        trace_id=trace_id,
        error=str(exc),
        error_type=type(exc).__name__,
        url=str(request.url),
        method=request.method,
    )
    
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "trace_id": trace_id,
            "timestamp": time.time(),
        }
    )


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_config=None,  # Use our custom logging
    )
