"""Wiring of repositories and services for request handlers."""

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from .audit import AuditLogRecorder
from .config import Settings, get_settings
from .db import get_db_session
from .pagination import DEFAULT_LIMIT, DEFAULT_PAGE, PaginationParams
from .repositories import DeviceRepository, GatewayLogRepository, GatewayRepository
from .services.device_service import DeviceService
from .services.gateway_service import GatewayService


def build_gateway_service(session: Session, settings: Settings) -> GatewayService:
    return GatewayService(
        gateways=GatewayRepository(session),
        devices=DeviceRepository(session),
        audit=AuditLogRecorder(GatewayLogRepository(session)),
        max_devices_per_gateway=settings.max_devices_per_gateway,
    )


def build_device_service(session: Session) -> DeviceService:
    return DeviceService(DeviceRepository(session))


def get_gateway_service(
    session: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> GatewayService:
    return build_gateway_service(session, settings)


def get_device_service(session: Session = Depends(get_db_session)) -> DeviceService:
    return build_device_service(session)


def get_device_repository(session: Session = Depends(get_db_session)) -> DeviceRepository:
    return DeviceRepository(session)


def get_pagination(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
) -> PaginationParams | None:
    """Pagination requested by the caller, or None to list everything."""

    if page is None and limit is None:
        return None
    return PaginationParams(
        page=DEFAULT_PAGE if page is None else page,
        limit=DEFAULT_LIMIT if limit is None else limit,
    )
