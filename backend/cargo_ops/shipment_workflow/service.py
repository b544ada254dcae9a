"""ShipmentService: booking, status changes and tracking history.

Every accepted status change writes exactly one tracking event. The status
write is conditional on the status that was validated, so two concurrent
requests cannot both apply a transition from the same starting point.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.config import Settings
from cargo_ops.errors import (
    CargoOpsError,
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from cargo_ops.models.shipment import Shipment, ShipmentStatus
from cargo_ops.models.tracking import TrackingEvent, TrackingEventSource
from cargo_ops.scanning.parser import is_valid_awb, normalize_awb
from cargo_ops.schemas.shipment import ShipmentCreateRequest
from cargo_ops.shipment_workflow.transitions import (
    allowed_transitions,
    is_valid_transition,
    parse_shipment_status,
)

logger = logging.getLogger(__name__)


class ShipmentService:
    def __init__(self, settings: Settings):
        self.settings = settings

    async def create_shipment(self, db: AsyncSession, data: ShipmentCreateRequest) -> Shipment:
        awb = normalize_awb(data.awb_number)
        if not is_valid_awb(awb):
            raise CargoOpsError(
                f'AWB "{data.awb_number}" does not match required format TAC + 8 digits',
                code="AWB_INVALID_FORMAT",
            )

        existing = await self.find_by_awb(db, awb)
        if existing is not None:
            raise ConflictError(f"Shipment {awb} already exists", details={"awb_number": awb})

        shipment = Shipment(
            id=uuid.uuid4(),
            awb_number=awb,
            status=ShipmentStatus.CREATED,
            origin_hub_id=data.origin_hub_id,
            destination_hub_id=data.destination_hub_id,
            customer_id=data.customer_id,
            sender_name=data.sender_name,
            consignee_name=data.consignee_name,
            consignee_phone=data.consignee_phone,
            package_count=data.package_count,
            total_weight=data.total_weight,
            payment_mode=data.payment_mode,
            service_level=data.service_level.value,
        )
        try:
            async with db.begin_nested():
                db.add(shipment)
                await db.flush()
        except IntegrityError as e:
            raise ConflictError(f"Shipment {awb} already exists", details={"awb_number": awb}) from e

        db.add(TrackingEvent(
            id=uuid.uuid4(),
            shipment_id=shipment.id,
            awb_number=awb,
            event_code=ShipmentStatus.CREATED.value,
            hub_id=data.origin_hub_id,
            source=TrackingEventSource.SYSTEM,
            actor=data.created_by,
            event_time=datetime.now(timezone.utc),
        ))
        await db.flush()
        await db.refresh(shipment)

        logger.info("Booked shipment %s", awb)
        return shipment

    async def find_by_awb(self, db: AsyncSession, awb: str) -> Shipment | None:
        result = await db.execute(
            select(Shipment)
            .where(Shipment.awb_number == normalize_awb(awb))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_awb(self, db: AsyncSession, awb: str) -> Shipment:
        shipment = await self.find_by_awb(db, awb)
        if shipment is None:
            raise NotFoundError("Shipment", normalize_awb(awb))
        return shipment

    async def update_status(
        self,
        db: AsyncSession,
        shipment_id: uuid.UUID,
        new_status: ShipmentStatus | str,
        *,
        actor: str | None = None,
        location: str | None = None,
        notes: str | None = None,
        hub_id: uuid.UUID | None = None,
    ) -> Shipment:
        """Apply a user-requested status change and record it as a tracking event.

        Raises UnknownStatusError for an unrecognised status string and
        InvalidStatusTransitionError when the move is illegal from the stored
        status, including when another writer changed it first.
        """
        target = parse_shipment_status(new_status)

        shipment = await db.get(Shipment, shipment_id, populate_existing=True)
        if shipment is None:
            raise NotFoundError("Shipment", shipment_id)

        current = shipment.status
        if not is_valid_transition(current, target):
            allowed = sorted(s.value for s in allowed_transitions(current))
            raise InvalidStatusTransitionError(
                f"Cannot move shipment {shipment.awb_number} from {current.value} to {target.value}",
                details={"current": current.value, "requested": target.value, "allowed": allowed},
            )

        result = await db.execute(
            update(Shipment)
            .where(Shipment.id == shipment_id, Shipment.status == current)
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStatusTransitionError(
                f"Shipment {shipment.awb_number} changed status concurrently; reload and retry",
                details={"expected": current.value, "requested": target.value},
            )

        db.add(TrackingEvent(
            id=uuid.uuid4(),
            shipment_id=shipment.id,
            awb_number=shipment.awb_number,
            event_code=target.value,
            hub_id=hub_id,
            source=TrackingEventSource.MANUAL,
            actor=actor,
            location=location,
            notes=notes,
            event_time=datetime.now(timezone.utc),
        ))
        await db.flush()
        await db.refresh(shipment)

        logger.info("Shipment %s: %s -> %s", shipment.awb_number, current.value, target.value)
        return shipment

    async def get_tracking_history(self, db: AsyncSession, awb: str) -> list[TrackingEvent]:
        """Tracking events for ``awb`` in chronological order."""
        shipment = await self.get_by_awb(db, awb)
        result = await db.execute(
            select(TrackingEvent)
            .where(TrackingEvent.shipment_id == shipment.id)
            .order_by(TrackingEvent.event_time.asc(), TrackingEvent.id.asc())
        )
        return list(result.scalars().all())
