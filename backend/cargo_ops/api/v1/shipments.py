"""Shipment endpoints: booking, lookup, status changes, tracking history."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.api.errors import http_error
from cargo_ops.dependencies import get_db, get_shipment_service
from cargo_ops.errors import CargoOpsError
from cargo_ops.schemas.shipment import (
    ShipmentCreateRequest,
    ShipmentResponse,
    StatusUpdateRequest,
    TrackingEventResponse,
    TrackingHistoryResponse,
)
from cargo_ops.shipment_workflow.service import ShipmentService

router = APIRouter()


@router.post("", response_model=ShipmentResponse, status_code=201)
async def create_shipment(
    request: ShipmentCreateRequest,
    db: AsyncSession = Depends(get_db),
    service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentResponse:
    """Book a shipment under a new AWB."""
    try:
        shipment = await service.create_shipment(db, request)
    except CargoOpsError as e:
        raise http_error(e) from e
    return ShipmentResponse.model_validate(shipment)


@router.get("/{awb}", response_model=ShipmentResponse)
async def get_shipment(
    awb: str,
    db: AsyncSession = Depends(get_db),
    service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentResponse:
    try:
        shipment = await service.get_by_awb(db, awb)
    except CargoOpsError as e:
        raise http_error(e) from e
    return ShipmentResponse.model_validate(shipment)


@router.post("/{shipment_id}/status", response_model=ShipmentResponse)
async def update_shipment_status(
    shipment_id: uuid.UUID,
    request: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    service: ShipmentService = Depends(get_shipment_service),
) -> ShipmentResponse:
    """Move a shipment to a new status if the transition is legal."""
    try:
        shipment = await service.update_status(
            db,
            shipment_id,
            request.status,
            actor=request.actor,
            location=request.location,
            notes=request.notes,
            hub_id=request.hub_id,
        )
    except CargoOpsError as e:
        raise http_error(e) from e
    return ShipmentResponse.model_validate(shipment)


@router.get("/{awb}/tracking", response_model=TrackingHistoryResponse)
async def get_tracking_history(
    awb: str,
    db: AsyncSession = Depends(get_db),
    service: ShipmentService = Depends(get_shipment_service),
) -> TrackingHistoryResponse:
    try:
        events = await service.get_tracking_history(db, awb)
    except CargoOpsError as e:
        raise http_error(e) from e
    return TrackingHistoryResponse(
        awb_number=awb.strip().upper(),
        events=[TrackingEventResponse.model_validate(e) for e in events],
    )
