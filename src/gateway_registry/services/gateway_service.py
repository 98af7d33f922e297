"""Gateway lifecycle and device attach/detach rules."""

from __future__ import annotations

from datetime import datetime, timezone

from ..audit import AuditLogRecorder, GatewayAction
from ..errors import BadRequestError, ConflictError, InternalError, NotFoundError
from ..models import Gateway, PeripheralDevice
from ..pagination import PaginationParams, to_store_query
from ..ports import IDeviceRepository, IGatewayRepository
from ..schemas import CreateDeviceRequest, CreateGatewayRequest, UpdateGatewayRequest

DEFAULT_MAX_DEVICES_PER_GATEWAY = 10


class GatewayService:
    """Orchestrates gateway CRUD and the devices attached to each gateway.

    Checks run in a fixed order and the first failure wins: existence,
    then the device cap, then uniqueness. Uniqueness checks here are a
    fast path; the store's unique constraints raise the same
    ``ConflictError`` when two requests race past them. The device cap is
    only checked here and can be overshot by concurrent attaches.
    """

    def __init__(
        self,
        gateways: IGatewayRepository,
        devices: IDeviceRepository,
        audit: AuditLogRecorder,
        max_devices_per_gateway: int = DEFAULT_MAX_DEVICES_PER_GATEWAY,
    ) -> None:
        if max_devices_per_gateway < 1:
            raise ValueError("max_devices_per_gateway must be positive")
        self._gateways = gateways
        self._devices = devices
        self._audit = audit
        self.max_devices_per_gateway = max_devices_per_gateway

    def list_gateways(self, pagination: PaginationParams | None = None) -> tuple[list[Gateway], int]:
        query = to_store_query(pagination.page, pagination.limit) if pagination else None
        return self._gateways.list(query), self._gateways.count()

    def get_gateway(self, gateway_id: str) -> Gateway:
        gateway = self._gateways.find_by_id(gateway_id)
        if gateway is None:
            raise NotFoundError("Gateway not found")
        return gateway

    def create_gateway(self, data: CreateGatewayRequest) -> Gateway:
        self._ensure_unique_serial_number(data.serial_number)
        self._ensure_unique_ip_address(data.ipv4_address)

        gateway = self._gateways.create(data)
        self._audit.record(
            gateway.id,
            GatewayAction.CREATED,
            {
                "serial_number": data.serial_number,
                "name": data.name,
                "ipv4_address": data.ipv4_address,
                "status": data.status,
            },
        )
        return gateway

    def update_gateway(self, gateway_id: str, data: UpdateGatewayRequest) -> Gateway:
        self.get_gateway(gateway_id)

        changes = data.changes()
        if "ipv4_address" in changes:
            self._ensure_unique_ip_address(changes["ipv4_address"], exclude_id=gateway_id)

        gateway = self._gateways.update(gateway_id, changes)
        if gateway is None:
            raise InternalError("Failed to update gateway")

        self._audit.record(gateway_id, GatewayAction.UPDATED, {"changes": changes})
        return gateway

    def delete_gateway(self, gateway_id: str) -> None:
        gateway = self.get_gateway(gateway_id)
        serial_number = gateway.serial_number
        detached = [device.id for device in gateway.devices]

        if not self._gateways.delete(gateway_id):
            raise InternalError("Failed to delete gateway")

        self._audit.record(
            gateway_id,
            GatewayAction.DELETED,
            {
                "serial_number": serial_number,
                "detached_devices": detached,
                "deleted_at": datetime.now(tz=timezone.utc).isoformat(),
            },
        )

    def attach_device(self, gateway_id: str, data: CreateDeviceRequest) -> PeripheralDevice:
        self.get_gateway(gateway_id)

        if self._gateways.device_count(gateway_id) >= self.max_devices_per_gateway:
            raise BadRequestError(
                f"Gateway has reached maximum device limit ({self.max_devices_per_gateway})"
            )

        self._ensure_unique_uid(data.uid)
        self._ensure_device_type(data.device_type_id)

        device = self._devices.create(data, gateway_id=gateway_id)
        self._audit.record(
            gateway_id,
            GatewayAction.DEVICE_ATTACHED,
            {"device_id": device.id, "device_uid": data.uid, "vendor": data.vendor},
        )
        return device

    def detach_device(self, gateway_id: str, device_id: str) -> None:
        self.get_gateway(gateway_id)

        device = self._devices.find_by_id(device_id)
        if device is None:
            raise NotFoundError("Device not found")
        if device.gateway_id != gateway_id:
            raise BadRequestError("Device is not attached to this gateway")

        uid = device.uid
        if not self._devices.detach_from_gateway(device_id):
            raise InternalError("Failed to detach device")

        self._audit.record(
            gateway_id,
            GatewayAction.DEVICE_DETACHED,
            {"device_id": device_id, "device_uid": uid},
        )

    def _ensure_unique_serial_number(self, serial_number: str) -> None:
        if self._gateways.find_by_serial_number(serial_number) is not None:
            raise ConflictError("Serial number already exists")

    def _ensure_unique_ip_address(self, ipv4_address: str, exclude_id: str | None = None) -> None:
        existing = self._gateways.find_by_ip_address(ipv4_address)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("IP address already exists")

    def _ensure_unique_uid(self, uid: int) -> None:
        if self._devices.find_by_uid(uid) is not None:
            raise ConflictError("Device UID already exists")

    def _ensure_device_type(self, device_type_id: int) -> None:
        if not self._devices.device_type_exists(device_type_id):
            raise NotFoundError("Device type not found")
