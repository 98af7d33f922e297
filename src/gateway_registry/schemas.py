"""Pydantic schemas for HTTP request and response models."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .pagination import Page

GatewayStatus = Literal["active", "inactive", "decommissioned"]
DeviceStatus = Literal["online", "offline", "maintenance"]

IPV4_PATTERN = r"^(\d{1,3}\.){3}\d{1,3}$"
MAX_UID = 2**63 - 1


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PartialUpdate(ApiModel):
    """Update payload where every field is optional.

    Only fields the caller actually sent end up in ``changes()``; an
    omitted field and an explicit ``null`` are told apart.
    """

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("must not be null")
    return value


class CreateGatewayRequest(ApiModel):
    serial_number: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    ipv4_address: str = Field(pattern=IPV4_PATTERN)
    status: GatewayStatus = "active"
    location: str | None = Field(default=None, max_length=255)


class UpdateGatewayRequest(PartialUpdate):
    # Serial numbers are immutable, so they are rejected as an unknown field.
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=255)
    ipv4_address: str | None = Field(default=None, pattern=IPV4_PATTERN)
    status: GatewayStatus | None = None
    location: str | None = Field(default=None, max_length=255)

    @field_validator("name", "ipv4_address", "status", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class CreateDeviceRequest(ApiModel):
    uid: int = Field(gt=0, le=MAX_UID)
    vendor: str = Field(min_length=1, max_length=100)
    status: DeviceStatus = "offline"
    device_type_id: int = Field(gt=0)


class UpdateDeviceRequest(PartialUpdate):
    uid: int | None = Field(default=None, gt=0, le=MAX_UID)
    vendor: str | None = Field(default=None, min_length=1, max_length=100)
    status: DeviceStatus | None = None
    device_type_id: int | None = Field(default=None, gt=0)

    @field_validator("uid", "vendor", "status", "device_type_id", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class DetachDeviceRequest(ApiModel):
    device_id: UUID


class DeviceTypeItem(ApiModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None


class DeviceResponseItem(ApiModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    uid: int
    vendor: str
    status: DeviceStatus
    device_type_id: int
    device_type: DeviceTypeItem | None = None
    gateway_id: str | None
    created_at: datetime
    last_seen_at: datetime | None


class GatewayResponseItem(ApiModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    serial_number: str
    name: str
    ipv4_address: str
    status: GatewayStatus
    location: str | None
    devices: list[DeviceResponseItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PaginationMeta(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def from_page(cls, page: Page) -> "PaginationMeta":
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_previous=page.has_previous,
        )


class GatewayResponse(ApiModel):
    data: GatewayResponseItem


class ListGatewaysResponse(ApiModel):
    data: list[GatewayResponseItem]
    count: int
    pagination: PaginationMeta | None = None


class DeviceResponse(ApiModel):
    data: DeviceResponseItem


class ListDevicesResponse(ApiModel):
    data: list[DeviceResponseItem]
    count: int
    pagination: PaginationMeta | None = None


class ListDeviceTypesResponse(ApiModel):
    data: list[DeviceTypeItem]


class MessageResponse(ApiModel):
    message: str


class HealthResponse(ApiModel):
    status: Literal["ok"] = "ok"
    service: str
    version: str
    timestamp: datetime


class ErrorDetail(ApiModel):
    field: str
    issue: str


class ErrorBody(ApiModel):
    code: str
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(ApiModel):
    error: ErrorBody
