"""Standalone device management, independent of any gateway."""

from __future__ import annotations

from ..errors import ConflictError, InternalError, NotFoundError
from ..models import PeripheralDevice
from ..pagination import PaginationParams, to_store_query
from ..ports import IDeviceRepository
from ..schemas import CreateDeviceRequest, UpdateDeviceRequest


class DeviceService:
    """CRUD for peripheral devices with global uid uniqueness."""

    def __init__(self, devices: IDeviceRepository) -> None:
        self._devices = devices

    def list_devices(self, pagination: PaginationParams | None = None) -> tuple[list[PeripheralDevice], int]:
        query = to_store_query(pagination.page, pagination.limit) if pagination else None
        return self._devices.list(query), self._devices.count()

    def get_device(self, device_id: str) -> PeripheralDevice:
        device = self._devices.find_by_id(device_id)
        if device is None:
            raise NotFoundError("Device not found")
        return device

    def create_device(self, data: CreateDeviceRequest, gateway_id: str | None = None) -> PeripheralDevice:
        if self._devices.find_by_uid(data.uid) is not None:
            raise ConflictError("Device UID already exists")
        self._ensure_device_type(data.device_type_id)
        return self._devices.create(data, gateway_id=gateway_id)

    def update_device(self, device_id: str, data: UpdateDeviceRequest) -> PeripheralDevice:
        self.get_device(device_id)

        changes = data.changes()
        if "uid" in changes:
            owner = self._devices.find_by_uid(changes["uid"])
            if owner is not None and owner.id != device_id:
                raise ConflictError("Device UID already exists")
        if "device_type_id" in changes:
            self._ensure_device_type(changes["device_type_id"])

        device = self._devices.update(device_id, changes)
        if device is None:
            raise InternalError("Failed to update device")
        return device

    def delete_device(self, device_id: str) -> None:
        self.get_device(device_id)
        if not self._devices.delete(device_id):
            raise InternalError("Failed to delete device")

    def _ensure_device_type(self, device_type_id: int) -> None:
        if not self._devices.device_type_exists(device_type_id):
            raise NotFoundError("Device type not found")
