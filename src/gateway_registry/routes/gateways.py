"""Gateway routes, including attaching and detaching devices."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ..dependencies import get_gateway_service, get_pagination
from ..observability import log_event
from ..pagination import PaginationParams, to_response
from ..schemas import (
    CreateDeviceRequest,
    CreateGatewayRequest,
    DetachDeviceRequest,
    DeviceResponse,
    DeviceResponseItem,
    ErrorResponse,
    GatewayResponse,
    GatewayResponseItem,
    ListGatewaysResponse,
    MessageResponse,
    PaginationMeta,
    UpdateGatewayRequest,
)
from ..services.gateway_service import GatewayService

router = APIRouter(prefix="/gateways", tags=["gateways"])
logger = logging.getLogger("gateway_registry")

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("", response_model=ListGatewaysResponse)
def list_gateways(
    pagination: PaginationParams | None = Depends(get_pagination),
    service: GatewayService = Depends(get_gateway_service),
) -> ListGatewaysResponse:
    gateways, total = service.list_gateways(pagination)
    meta = None
    if pagination is not None:
        meta = PaginationMeta.from_page(to_response(gateways, total, pagination.page, pagination.limit))
    return ListGatewaysResponse(
        data=[GatewayResponseItem.model_validate(gateway) for gateway in gateways],
        count=len(gateways),
        pagination=meta,
    )


@router.post(
    "",
    response_model=GatewayResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def create_gateway(
    payload: CreateGatewayRequest,
    service: GatewayService = Depends(get_gateway_service),
) -> GatewayResponse:
    gateway = service.create_gateway(payload)
    log_event(logger, "gateway_created", gateway_id=gateway.id, serial_number=gateway.serial_number)
    return GatewayResponse(data=GatewayResponseItem.model_validate(gateway))


@router.get("/{gateway_id}", response_model=GatewayResponse, responses=NOT_FOUND)
def get_gateway(gateway_id: UUID, service: GatewayService = Depends(get_gateway_service)) -> GatewayResponse:
    gateway = service.get_gateway(str(gateway_id))
    return GatewayResponse(data=GatewayResponseItem.model_validate(gateway))


@router.put(
    "/{gateway_id}",
    response_model=GatewayResponse,
    responses={**NOT_FOUND, 409: {"model": ErrorResponse}},
)
def update_gateway(
    gateway_id: UUID,
    payload: UpdateGatewayRequest,
    service: GatewayService = Depends(get_gateway_service),
) -> GatewayResponse:
    gateway = service.update_gateway(str(gateway_id), payload)
    log_event(logger, "gateway_updated", gateway_id=gateway.id, fields=sorted(payload.changes()))
    return GatewayResponse(data=GatewayResponseItem.model_validate(gateway))


@router.delete("/{gateway_id}", response_model=MessageResponse, responses=NOT_FOUND)
def delete_gateway(gateway_id: UUID, service: GatewayService = Depends(get_gateway_service)) -> MessageResponse:
    service.delete_gateway(str(gateway_id))
    log_event(logger, "gateway_deleted", gateway_id=str(gateway_id))
    return MessageResponse(message="Gateway deleted successfully")


@router.post(
    "/{gateway_id}/devices",
    response_model=DeviceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def attach_device(
    gateway_id: UUID,
    payload: CreateDeviceRequest,
    service: GatewayService = Depends(get_gateway_service),
) -> DeviceResponse:
    device = service.attach_device(str(gateway_id), payload)
    log_event(logger, "device_attached", gateway_id=str(gateway_id), device_id=device.id, uid=device.uid)
    return DeviceResponse(data=DeviceResponseItem.model_validate(device))


@router.delete(
    "/{gateway_id}/devices",
    response_model=MessageResponse,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse}},
)
def detach_device(
    gateway_id: UUID,
    payload: DetachDeviceRequest,
    service: GatewayService = Depends(get_gateway_service),
) -> MessageResponse:
    service.detach_device(str(gateway_id), str(payload.device_id))
    log_event(logger, "device_detached", gateway_id=str(gateway_id), device_id=str(payload.device_id))
    return MessageResponse(message="Device detached from gateway successfully")
