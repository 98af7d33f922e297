"""FastAPI application entrypoint for the gateway registry service."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError

from .config import get_settings
from .db import init_db
from .errors import DomainError, error_response
from .observability import configure_logging, log_event
from .routes.devices import device_types_router
from .routes.devices import router as devices_router
from .routes.gateways import router as gateways_router
from .routes.health import router as health_router

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger("gateway_registry")


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Initialize persistence during application startup."""
    init_db()
    log_event(logger, "service_started", service=settings.service_name, version=settings.service_version)
    yield


app = FastAPI(title=settings.service_name, version=settings.service_version, lifespan=lifespan)
app.include_router(health_router)
app.include_router(gateways_router, prefix=settings.api_prefix)
app.include_router(devices_router, prefix=settings.api_prefix)
app.include_router(device_types_router, prefix=settings.api_prefix)


@app.exception_handler(DomainError)
async def handle_domain_error(request: Request, exc: DomainError):
    log_event(
        logger,
        "domain_error",
        level=logging.ERROR if exc.status_code >= 500 else logging.WARNING,
        method=request.method,
        path=request.url.path,
        code=exc.kind,
        error=exc.message,
    )
    return error_response(status_code=exc.status_code, code=exc.kind, message=exc.message)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", [])),
            "issue": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    return error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="BAD_REQUEST",
        message="Validation failed.",
        details=details,
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="INTERNAL_ERROR",
        message="Internal server error",
    )
