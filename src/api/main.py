"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance.
It handles:
1. Application initialization
2. Router registration
3. Middleware configuration (audit logging, CORS headers and preflights)
4. Exception handlers (service, routing and validation errors, catch-all)
5. Startup/shutdown of the store connection and the LLM client

Run with: uvicorn src.api.main:app --reload
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.config import get_settings
from src.core.exceptions import GENERIC_ERROR_MESSAGE, ServiceException, ValidationError
from src.core.logging_config import setup_logging, get_logger
from src.core.middleware import AuditMiddleware, CORSHeadersMiddleware
from src.api.routes import responses_router, chat_router, health_router
from src.api.routes.health import APP_VERSION
from src.database.connection import StoreConnection
from src.database.store import OrderedStore
from src.llm.client import LLMClient
from src.services.chat_relay import ChatRelay
from src.services.survey_repository import SurveyRepository


# Initialize logging before anything else
settings = get_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup opens the store and builds the repository and relay;
    shutdown releases the LLM client and the store pool.
    """
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
    logger.info(f"LLM Model: {settings.llm_model}")

    connection = StoreConnection(settings.database_url)
    connection.open()
    llm_client = LLMClient(settings)

    app.state.store_connection = connection
    app.state.survey_repository = SurveyRepository(
        OrderedStore(connection),
        delete_batch_size=settings.delete_batch_size,
    )
    app.state.chat_relay = ChatRelay(llm_client)

    yield  # Application runs here

    logger.info(f"Shutting down {settings.app_name}")
    try:
        await llm_client.close()
    except Exception as e:
        logger.error(f"Error closing LLM client: {e}")
    connection.close()


app = FastAPI(
    title="Onboarding Survey & Chat Relay API",
    description="""
    Edge service for the onboarding flow.

    - **Survey responses**: store, list, aggregate and delete free-form answers
    - **Chat relay**: stream LLM completions as server-sent events
    """,
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ============================================================
# Middleware Configuration (last added runs first)
# ============================================================

if settings.enable_audit_logging:
    app.add_middleware(AuditMiddleware)
    logger.info("Audit logging middleware enabled")

app.add_middleware(CORSHeadersMiddleware, allow_origin=settings.cors_allow_origin)


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException):
    """Convert service errors to ``{"error": message}`` bodies."""
    log_fn = logger.warning if isinstance(exc, ValidationError) else logger.error
    log_fn(
        f"{exc.error_code} on {request.method} {request.url.path}: "
        f"{exc.message} ({exc.details or 'no details'})"
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (404, 405) in the same ``{"error": ...}`` shape."""
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed query or path parameters."""
    logger.warning(f"Invalid parameters on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid query parameters"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions globally.

    This runs outside the middleware stack, so the CORS header is set here.
    """
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_ERROR_MESSAGE},
        headers={"Access-Control-Allow-Origin": settings.cors_allow_origin},
    )


# ============================================================
# Routers
# ============================================================

app.include_router(health_router)
app.include_router(responses_router)
app.include_router(chat_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "Onboarding Survey & Chat Relay API",
        "version": APP_VERSION,
        "documentation": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development()
    )
