"""
HTTP Middleware - Request auditing and CORS headers.

AuditMiddleware logs every request with its status and duration.
CORSHeadersMiddleware stamps the allow-origin header on every response,
including errors and event streams, and answers preflights itself.
"""
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.core.logging_config import get_logger

logger = get_logger(__name__)

ALLOW_METHODS = "GET, POST, DELETE, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization, Accept"


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging all requests and responses.
    
    For event streams the duration covers time-to-headers, not the
    whole stream.
    """
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log audit information."""
        start_time = time.time()
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"REQUEST FAILED: {method} {path} "
                f"client={client_ip} duration={duration:.3f}s error={e}"
            )
            raise
        
        duration = time.time() - start_time
        self._log_request(method, path, response.status_code, duration, client_ip)
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response
    
    def _log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        client_ip: str,
    ) -> None:
        """Log request details at a level matching the status code."""
        if path.startswith("/health"):
            logger.debug(f"HEALTH: {path} status={status_code} duration={duration:.3f}s")
            return
        
        if status_code >= 500:
            log_fn = logger.error
        elif status_code >= 400:
            log_fn = logger.warning
        else:
            log_fn = logger.info
        
        log_fn(
            f"REQUEST: {method} {path} "
            f"status={status_code} duration={duration:.3f}s client={client_ip}"
        )


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds Access-Control-Allow-Origin to every response.

    OPTIONS requests on any path get a 204 with the fixed allow-lists and
    never reach the router, so unknown paths still 404 for other methods.
    """
    
    def __init__(self, app: ASGIApp, allow_origin: str = "*"):
        super().__init__(app)
        self.allow_origin = allow_origin
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=preflight_headers(self.allow_origin))
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = self.allow_origin
        return response


def preflight_headers(allow_origin: str) -> dict:
    """Headers for a CORS preflight (OPTIONS) response."""
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
