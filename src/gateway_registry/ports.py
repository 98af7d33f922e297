"""Port interfaces for gateway and device persistence.

The services only talk to storage through these abstract interfaces.
The SQLAlchemy implementations live in ``repositories``; tests and other
stores can provide their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import Gateway, PeripheralDevice
from .pagination import StoreQuery
from .schemas import CreateDeviceRequest, CreateGatewayRequest


class IGatewayRepository(ABC):
    """Port for gateway data access."""

    @abstractmethod
    def list(self, query: StoreQuery | None = None) -> list[Gateway]:
        """Return gateways with their devices and device types loaded.

        Args:
            query: Offset/limit window, or None for the whole collection
        """
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def find_by_id(self, gateway_id: str) -> Gateway | None:
        ...

    @abstractmethod
    def find_by_serial_number(self, serial_number: str) -> Gateway | None:
        ...

    @abstractmethod
    def find_by_ip_address(self, ipv4_address: str) -> Gateway | None:
        ...

    @abstractmethod
    def create(self, data: CreateGatewayRequest) -> Gateway:
        """Persist a new gateway.

        Raises:
            ConflictError: serial number or IP address taken at the store level
        """
        ...

    @abstractmethod
    def update(self, gateway_id: str, changes: dict[str, Any]) -> Gateway | None:
        """Apply changes and refresh ``updated_at``.

        Returns:
            The updated gateway, or None when no row matched
        """
        ...

    @abstractmethod
    def delete(self, gateway_id: str) -> bool:
        """Delete a gateway, orphan its devices and drop its log entries.

        Returns:
            True when a gateway row was removed
        """
        ...

    @abstractmethod
    def device_count(self, gateway_id: str) -> int:
        ...


class IDeviceRepository(ABC):
    """Port for peripheral device data access."""

    @abstractmethod
    def list(self, query: StoreQuery | None = None) -> list[PeripheralDevice]:
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def find_by_id(self, device_id: str) -> PeripheralDevice | None:
        ...

    @abstractmethod
    def find_by_uid(self, uid: int) -> PeripheralDevice | None:
        ...

    @abstractmethod
    def find_by_gateway_id(self, gateway_id: str) -> list[PeripheralDevice]:
        ...

    @abstractmethod
    def create(self, data: CreateDeviceRequest, gateway_id: str | None = None) -> PeripheralDevice:
        """Persist a new device, attached to ``gateway_id`` when given.

        Raises:
            ConflictError: uid taken at the store level
        """
        ...

    @abstractmethod
    def update(self, device_id: str, changes: dict[str, Any]) -> PeripheralDevice | None:
        ...

    @abstractmethod
    def delete(self, device_id: str) -> bool:
        ...

    @abstractmethod
    def attach_to_gateway(self, device_id: str, gateway_id: str) -> bool:
        ...

    @abstractmethod
    def detach_from_gateway(self, device_id: str) -> bool:
        ...

    @abstractmethod
    def device_type_exists(self, device_type_id: int) -> bool:
        ...


class IGatewayLogRepository(ABC):
    """Port for the append-only gateway audit trail."""

    @abstractmethod
    def append(self, gateway_id: str, action: str, details: dict[str, Any]) -> None:
        ...
