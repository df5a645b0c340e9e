"""
Health Check Routes - System health and monitoring endpoints.

These endpoints are used for:
1. Load balancer health checks
2. Container liveness/readiness probes
3. Quick system status verification
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from src.api.dependencies import get_store_connection
from src.core.logging_config import get_logger
from src.database.connection import StoreConnection
from src.models.chat import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)

APP_VERSION = "0.1.0"


@router.get("", response_model=HealthResponse, summary="Health check endpoint")
async def health_check() -> HealthResponse:
    """
    Report that the process is up.

    Does not touch the store or the completion API.
    """
    logger.debug("Health check requested")

    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        timestamp=datetime.utcnow()
    )


@router.get("/ready", response_model=HealthResponse, summary="Readiness check endpoint")
def readiness_check(
    connection: StoreConnection = Depends(get_store_connection),
) -> HealthResponse:
    """
    Report whether the store answers a trivial query.

    The completion API is not probed; a probe would cost a request.
    """
    store_ok = connection.check_connection()
    logger.debug(f"Readiness check requested: store={store_ok}")

    return HealthResponse(
        status="ready" if store_ok else "degraded",
        version=APP_VERSION,
        store=store_ok,
        timestamp=datetime.utcnow()
    )
