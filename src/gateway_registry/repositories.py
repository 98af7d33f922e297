"""SQLAlchemy persistence for gateways, devices and the gateway audit trail."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .errors import ConflictError, InternalError
from .models import DeviceType, Gateway, GatewayLog, PeripheralDevice
from .pagination import StoreQuery
from .ports import IDeviceRepository, IGatewayLogRepository, IGatewayRepository
from .schemas import CreateDeviceRequest, CreateGatewayRequest

# Column name found in the driver's message -> conflict message.
UNIQUE_COLUMN_MESSAGES = {
    "serial_number": "Serial number already exists",
    "ipv4_address": "IP address already exists",
    "uid": "Device UID already exists",
}


def translate_integrity_error(exc: IntegrityError) -> Exception:
    """Map a store-level constraint violation onto the domain taxonomy."""

    text = str(exc.orig).lower()
    if "unique" in text or "duplicate" in text:
        for column, message in UNIQUE_COLUMN_MESSAGES.items():
            if column in text:
                return ConflictError(message)
        return ConflictError("Record already exists")
    return InternalError("Record violates storage constraints")


class _SqlRepository:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _storage(self) -> Iterator[Session]:
        """Run session work; a failure rolls back and surfaces as a domain error."""

        try:
            yield self.session
        except IntegrityError as exc:
            self.session.rollback()
            raise translate_integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Storage operation failed") from exc

    def _count(self, stmt) -> int:
        with self._storage() as session:
            return int(session.scalar(select(func.count()).select_from(stmt.subquery())) or 0)


class GatewayRepository(_SqlRepository, IGatewayRepository):
    """Repository for gateways."""

    def _select(self):
        return (
            select(Gateway)
            .options(selectinload(Gateway.devices))
            .execution_options(populate_existing=True)
        )

    def list(self, query: StoreQuery | None = None) -> list[Gateway]:
        stmt = self._select().order_by(Gateway.created_at, Gateway.id)
        if query is not None:
            stmt = stmt.offset(query.offset).limit(query.limit)
        with self._storage() as session:
            return list(session.scalars(stmt))

    def count(self) -> int:
        return self._count(select(Gateway.id))

    def find_by_id(self, gateway_id: str) -> Gateway | None:
        with self._storage() as session:
            return session.scalar(self._select().where(Gateway.id == gateway_id))

    def find_by_serial_number(self, serial_number: str) -> Gateway | None:
        with self._storage() as session:
            return session.scalar(select(Gateway).where(Gateway.serial_number == serial_number))

    def find_by_ip_address(self, ipv4_address: str) -> Gateway | None:
        with self._storage() as session:
            return session.scalar(select(Gateway).where(Gateway.ipv4_address == ipv4_address))

    def create(self, data: CreateGatewayRequest) -> Gateway:
        gateway = Gateway(**data.model_dump())
        with self._storage() as session:
            session.add(gateway)
            session.commit()
            session.refresh(gateway)
        return gateway

    def update(self, gateway_id: str, changes: dict[str, Any]) -> Gateway | None:
        with self._storage() as session:
            gateway = session.get(Gateway, gateway_id)
            if gateway is None:
                return None
            for field, value in changes.items():
                setattr(gateway, field, value)
            gateway.updated_at = datetime.now(tz=timezone.utc)
            session.commit()
            session.refresh(gateway)
        return gateway

    def delete(self, gateway_id: str) -> bool:
        with self._storage() as session:
            session.execute(
                update(PeripheralDevice).where(PeripheralDevice.gateway_id == gateway_id).values(gateway_id=None)
            )
            session.execute(delete(GatewayLog).where(GatewayLog.gateway_id == gateway_id))
            result = session.execute(delete(Gateway).where(Gateway.id == gateway_id))
            session.commit()
        return result.rowcount > 0

    def device_count(self, gateway_id: str) -> int:
        return self._count(select(PeripheralDevice.id).where(PeripheralDevice.gateway_id == gateway_id))


class DeviceRepository(_SqlRepository, IDeviceRepository):
    """Repository for peripheral devices."""

    def list(self, query: StoreQuery | None = None) -> list[PeripheralDevice]:
        stmt = select(PeripheralDevice).order_by(PeripheralDevice.created_at, PeripheralDevice.id)
        if query is not None:
            stmt = stmt.offset(query.offset).limit(query.limit)
        with self._storage() as session:
            return list(session.scalars(stmt))

    def count(self) -> int:
        return self._count(select(PeripheralDevice.id))

    def find_by_id(self, device_id: str) -> PeripheralDevice | None:
        with self._storage() as session:
            return session.get(PeripheralDevice, device_id, populate_existing=True)

    def find_by_uid(self, uid: int) -> PeripheralDevice | None:
        with self._storage() as session:
            return session.scalar(select(PeripheralDevice).where(PeripheralDevice.uid == uid))

    def find_by_gateway_id(self, gateway_id: str) -> list[PeripheralDevice]:
        stmt = (
            select(PeripheralDevice)
            .where(PeripheralDevice.gateway_id == gateway_id)
            .order_by(PeripheralDevice.created_at, PeripheralDevice.id)
        )
        with self._storage() as session:
            return list(session.scalars(stmt))

    def create(self, data: CreateDeviceRequest, gateway_id: str | None = None) -> PeripheralDevice:
        device = PeripheralDevice(**data.model_dump(), gateway_id=gateway_id)
        with self._storage() as session:
            session.add(device)
            session.commit()
            session.refresh(device)
        return device

    def update(self, device_id: str, changes: dict[str, Any]) -> PeripheralDevice | None:
        with self._storage() as session:
            device = session.get(PeripheralDevice, device_id)
            if device is None:
                return None
            for field, value in changes.items():
                setattr(device, field, value)
            session.commit()
            session.refresh(device)
        return device

    def delete(self, device_id: str) -> bool:
        with self._storage() as session:
            result = session.execute(delete(PeripheralDevice).where(PeripheralDevice.id == device_id))
            session.commit()
        return result.rowcount > 0

    def attach_to_gateway(self, device_id: str, gateway_id: str) -> bool:
        return self._set_gateway(device_id, gateway_id)

    def detach_from_gateway(self, device_id: str) -> bool:
        return self._set_gateway(device_id, None)

    def _set_gateway(self, device_id: str, gateway_id: str | None) -> bool:
        with self._storage() as session:
            result = session.execute(
                update(PeripheralDevice).where(PeripheralDevice.id == device_id).values(gateway_id=gateway_id)
            )
            session.commit()
        return result.rowcount > 0

    def device_type_exists(self, device_type_id: int) -> bool:
        with self._storage() as session:
            return session.get(DeviceType, device_type_id) is not None

    def list_device_types(self) -> list[DeviceType]:
        with self._storage() as session:
            return list(session.scalars(select(DeviceType).order_by(DeviceType.id)))


class GatewayLogRepository(_SqlRepository, IGatewayLogRepository):
    """Append-only store for gateway audit entries."""

    def append(self, gateway_id: str, action: str, details: dict[str, Any]) -> None:
        with self._storage() as session:
            session.add(GatewayLog(gateway_id=gateway_id, action=action, details=details))
            session.commit()
