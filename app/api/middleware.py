"""API middleware: correlation ID, device context, request audit."""

import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.context import correlation_id_ctx, device_id_ctx

logger = logging.getLogger(__name__)

DEVICE_HEADER = "X-Device-ID"
CORRELATION_HEADER = "X-Correlation-ID"

# Reachable without a device id (health checks, docs).
DEVICE_EXEMPT_PATHS = frozenset({"/health", "/metrics", "/docs", "/openapi.json", "/redoc"})
MAX_DEVICE_ID_LENGTH = 128


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class DeviceContextMiddleware(BaseHTTPMiddleware):
    """Extract X-Device-ID (the kiosk making the request); 400 if missing or malformed."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in DEVICE_EXEMPT_PATHS:
            request.state.device_id = None
            return await call_next(request)
        device_id = (request.headers.get(DEVICE_HEADER) or "").strip()
        if not device_id:
            return JSONResponse(
                status_code=400,
                content={"detail": "X-Device-ID header is required"},
            )
        if len(device_id) > MAX_DEVICE_ID_LENGTH or not device_id.isprintable():
            return JSONResponse(
                status_code=400,
                content={"detail": "X-Device-ID header is malformed"},
            )
        request.state.device_id = device_id
        device_id_ctx.set(device_id)
        return await call_next(request)


class RequestAuditMiddleware(BaseHTTPMiddleware):
    """After response: log one structured line per request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        logger.info(
            "request_audit",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
            },
        )
        return response
