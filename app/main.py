# app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from app.api.dependencies import close_resources
from app.api.middleware import (
    CorrelationIdMiddleware,
    DeviceContextMiddleware,
    RequestAuditMiddleware,
)
from app.api.routers import device_identity, drafts, health, session
from app.application.exceptions import ApplicationError
from app.config.logging import configure_logging
from app.config.settings import get_settings
from app.domain.exceptions import DomainError, ErrorCode
from app.security.exceptions import DeviceOwnershipError, EncryptionError

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)

_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INVALID_REPORT_TYPE: 422,
    ErrorCode.MISSING_REQUIRED_FIELDS: 422,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.DEVICE_UNSUPPORTED: 409,
    ErrorCode.POSITION_UNAVAILABLE: 409,
    ErrorCode.TIMEOUT: 409,
    ErrorCode.DRAFT_NOT_READY: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.FILE_TOO_LARGE: 413,
    ErrorCode.INVALID_MEDIA_TYPE: 415,
    ErrorCode.DRAFT_NOT_FOUND: 404,
    ErrorCode.AUTHENTICATION_FAILED: 401,
    ErrorCode.DESTINATION_MISSING: 503,
    ErrorCode.TRANSPORT_FAILURE: 502,
    ErrorCode.UNEXPECTED_ERROR: 500,
}


def _error_response(code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(code, 500),
        content={"detail": message, "code": code.value},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_resources()


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> DeviceContext -> RequestAudit.
app.add_middleware(RequestAuditMiddleware)
app.add_middleware(DeviceContextMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return _error_response(exc.code, exc.message)


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    if exc.code == ErrorCode.UNEXPECTED_ERROR:
        logger.error("unexpected_application_error", extra={"error": exc.message})
    return _error_response(exc.code, exc.message)


@app.exception_handler(DeviceOwnershipError)
async def device_ownership_error_handler(request, exc: DeviceOwnershipError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(EncryptionError)
async def encryption_error_handler(request, exc: EncryptionError):
    logger.error("encryption_error", extra={"error": exc.message})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": ErrorCode.UNEXPECTED_ERROR.value},
    )


# Routers: /health, /metrics, /drafts, /session, /device/identity
app.include_router(health.router)
app.include_router(drafts.router, prefix="/drafts")
app.include_router(session.router, prefix="/session")
app.include_router(device_identity.router, prefix="/device/identity")
