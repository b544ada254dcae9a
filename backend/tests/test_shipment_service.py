"""Tests for shipment booking, status updates and tracking history."""

import uuid

import pytest

from cargo_ops.config import Settings
from cargo_ops.errors import (
    CargoOpsError,
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    UnknownStatusError,
)
from cargo_ops.models.shipment import ShipmentStatus
from cargo_ops.schemas.shipment import ShipmentCreateRequest
from cargo_ops.shipment_workflow.service import ShipmentService


def make_service() -> ShipmentService:
    return ShipmentService(Settings(database_url="sqlite+aiosqlite:///test.db"))


@pytest.mark.asyncio
async def test_create_shipment_normalises_awb(db_session, hubs):
    origin, destination = hubs
    service = make_service()
    shipment = await service.create_shipment(db_session, ShipmentCreateRequest(
        awb_number=" tac10000001 ",
        origin_hub_id=origin.id,
        destination_hub_id=destination.id,
        consignee_name="Thoiba Singh",
        package_count=2,
        total_weight=12.5,
    ))
    assert shipment.awb_number == "TAC10000001"
    assert shipment.status == ShipmentStatus.CREATED

    history = await service.get_tracking_history(db_session, "TAC10000001")
    assert [e.event_code for e in history] == ["CREATED"]


@pytest.mark.asyncio
async def test_create_shipment_rejects_bad_awb(db_session):
    with pytest.raises(CargoOpsError) as exc_info:
        await make_service().create_shipment(db_session, ShipmentCreateRequest(awb_number="TAC12"))
    assert exc_info.value.code == "AWB_INVALID_FORMAT"


@pytest.mark.asyncio
async def test_create_shipment_rejects_duplicate(db_session):
    service = make_service()
    await service.create_shipment(db_session, ShipmentCreateRequest(awb_number="TAC10000002"))
    with pytest.raises(ConflictError):
        await service.create_shipment(db_session, ShipmentCreateRequest(awb_number="tac10000002"))


@pytest.mark.asyncio
async def test_get_by_awb_not_found(db_session):
    with pytest.raises(NotFoundError):
        await make_service().get_by_awb(db_session, "TAC99999999")


@pytest.mark.asyncio
async def test_update_status_records_event(db_session, make_shipment):
    shipment = await make_shipment(status=ShipmentStatus.CREATED)
    service = make_service()

    updated = await service.update_status(
        db_session, shipment.id, "pickup_scheduled", actor="dispatcher", notes="Slot 10-12",
    )
    assert updated.status == ShipmentStatus.PICKUP_SCHEDULED

    history = await service.get_tracking_history(db_session, shipment.awb_number)
    assert len(history) == 1
    assert history[0].event_code == "PICKUP_SCHEDULED"
    assert history[0].actor == "dispatcher"
    assert history[0].notes == "Slot 10-12"


@pytest.mark.asyncio
async def test_update_status_walks_full_pipeline(db_session, make_shipment):
    shipment = await make_shipment(status=ShipmentStatus.CREATED)
    service = make_service()
    path = [
        ShipmentStatus.PICKUP_SCHEDULED,
        ShipmentStatus.PICKED_UP,
        ShipmentStatus.RECEIVED_AT_ORIGIN,
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.RECEIVED_AT_DEST,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
    ]
    for status in path:
        shipment = await service.update_status(db_session, shipment.id, status)

    assert shipment.status == ShipmentStatus.DELIVERED
    history = await service.get_tracking_history(db_session, shipment.awb_number)
    assert [e.event_code for e in history] == [s.value for s in path]


@pytest.mark.asyncio
async def test_illegal_transition_does_not_mutate(db_session, make_shipment):
    shipment = await make_shipment(status=ShipmentStatus.CREATED)
    service = make_service()

    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        await service.update_status(db_session, shipment.id, ShipmentStatus.DELIVERED)
    assert exc_info.value.details["allowed"] == ["CANCELLED", "PICKUP_SCHEDULED"]

    await db_session.refresh(shipment)
    assert shipment.status == ShipmentStatus.CREATED
    assert await service.get_tracking_history(db_session, shipment.awb_number) == []


@pytest.mark.asyncio
async def test_terminal_status_is_final(db_session, make_shipment):
    shipment = await make_shipment(status=ShipmentStatus.DELIVERED)
    with pytest.raises(InvalidStatusTransitionError):
        await make_service().update_status(db_session, shipment.id, ShipmentStatus.RTO)


@pytest.mark.asyncio
async def test_unknown_status_string(db_session, make_shipment):
    shipment = await make_shipment(status=ShipmentStatus.CREATED)
    with pytest.raises(UnknownStatusError):
        await make_service().update_status(db_session, shipment.id, "VANISHED")


@pytest.mark.asyncio
async def test_update_status_unknown_shipment(db_session):
    with pytest.raises(NotFoundError):
        await make_service().update_status(db_session, uuid.uuid4(), ShipmentStatus.PICKED_UP)
