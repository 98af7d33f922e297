"""Standalone device routes and the device-type catalog."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ..dependencies import get_device_repository, get_device_service, get_pagination
from ..observability import log_event
from ..pagination import PaginationParams, to_response
from ..repositories import DeviceRepository
from ..schemas import (
    CreateDeviceRequest,
    DeviceResponse,
    DeviceResponseItem,
    DeviceTypeItem,
    ErrorResponse,
    ListDevicesResponse,
    ListDeviceTypesResponse,
    MessageResponse,
    PaginationMeta,
    UpdateDeviceRequest,
)
from ..services.device_service import DeviceService

router = APIRouter(prefix="/devices", tags=["devices"])
device_types_router = APIRouter(prefix="/device-types", tags=["device-types"])
logger = logging.getLogger("gateway_registry")

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("", response_model=ListDevicesResponse)
def list_devices(
    pagination: PaginationParams | None = Depends(get_pagination),
    service: DeviceService = Depends(get_device_service),
) -> ListDevicesResponse:
    devices, total = service.list_devices(pagination)
    meta = None
    if pagination is not None:
        meta = PaginationMeta.from_page(to_response(devices, total, pagination.page, pagination.limit))
    return ListDevicesResponse(
        data=[DeviceResponseItem.model_validate(device) for device in devices],
        count=len(devices),
        pagination=meta,
    )


@router.post(
    "",
    response_model=DeviceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, 409: {"model": ErrorResponse}},
)
def create_device(payload: CreateDeviceRequest, service: DeviceService = Depends(get_device_service)) -> DeviceResponse:
    device = service.create_device(payload)
    log_event(logger, "device_created", device_id=device.id, uid=device.uid)
    return DeviceResponse(data=DeviceResponseItem.model_validate(device))


@router.get("/{device_id}", response_model=DeviceResponse, responses=NOT_FOUND)
def get_device(device_id: UUID, service: DeviceService = Depends(get_device_service)) -> DeviceResponse:
    device = service.get_device(str(device_id))
    return DeviceResponse(data=DeviceResponseItem.model_validate(device))


@router.put(
    "/{device_id}",
    response_model=DeviceResponse,
    responses={**NOT_FOUND, 409: {"model": ErrorResponse}},
)
def update_device(
    device_id: UUID,
    payload: UpdateDeviceRequest,
    service: DeviceService = Depends(get_device_service),
) -> DeviceResponse:
    device = service.update_device(str(device_id), payload)
    log_event(logger, "device_updated", device_id=device.id, fields=sorted(payload.changes()))
    return DeviceResponse(data=DeviceResponseItem.model_validate(device))


@router.delete("/{device_id}", response_model=MessageResponse, responses=NOT_FOUND)
def delete_device(device_id: UUID, service: DeviceService = Depends(get_device_service)) -> MessageResponse:
    service.delete_device(str(device_id))
    log_event(logger, "device_deleted", device_id=str(device_id))
    return MessageResponse(message="Device deleted successfully")


@device_types_router.get("", response_model=ListDeviceTypesResponse)
def list_device_types(repo: DeviceRepository = Depends(get_device_repository)) -> ListDeviceTypesResponse:
    return ListDeviceTypesResponse(
        data=[DeviceTypeItem.model_validate(device_type) for device_type in repo.list_device_types()]
    )
