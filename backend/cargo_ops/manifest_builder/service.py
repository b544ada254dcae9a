"""ManifestBuilder: create manifest -> scan shipments -> close/depart/arrive.

Scan flow:
1. Parse the raw scan (malformed input raises ScanFormatError)
2. Drop scanner bursts inside the debounce window
3. Lock the manifest row and require it to be editable (OPEN/BUILDING)
4. Resolve the shipment and run membership, destination and status checks
5. Insert the manifest item; the unique index makes repeat scans duplicates

Lifecycle steps take the same row lock, then flip the manifest conditionally
on its stored status and bulk-update its shipments in one savepoint. Tracking
events follow in a separate savepoint and are best-effort: losing them is
logged, never fatal.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.config import Settings
from cargo_ops.errors import (
    CargoOpsError,
    ManifestNotEditableError,
    ManifestTransitionError,
    NotFoundError,
)
from cargo_ops.manifest_builder.lifecycle import (
    ARRIVE,
    CLOSE,
    DEPART,
    INITIAL_STATUSES,
    RECONCILE,
    LifecycleStep,
    generate_manifest_number,
    is_editable,
)
from cargo_ops.manifest_builder.repository import ManifestRepository
from cargo_ops.models.manifest import Manifest, ManifestItem, ManifestType, ScanSource
from cargo_ops.models.shipment import Shipment
from cargo_ops.models.tracking import TrackingEvent, TrackingEventSource
from cargo_ops.scanning.debounce import ScanDebouncer
from cargo_ops.scanning.parser import MANIFEST, SHIPMENT, generate_manifest_qr_payload, parse_scan_input
from cargo_ops.schemas.manifest import ManifestCreateRequest
from cargo_ops.schemas.scan import ScanResponse
from cargo_ops.shipment_workflow.transitions import MANIFESTABLE_STATUSES

logger = logging.getLogger(__name__)

MIN_FLIGHT_NUMBER_LENGTH = 3
MIN_VEHICLE_NUMBER_LENGTH = 4


@dataclass
class ManifestTransitionResult:
    manifest: Manifest
    shipments_updated: int
    tracking_events_created: int


class ManifestBuilder:
    """Orchestrates manifest building over a ManifestRepository."""

    def __init__(
        self,
        settings: Settings,
        debouncer: ScanDebouncer | None = None,
        repository_factory: Callable[[AsyncSession], ManifestRepository] = ManifestRepository,
        clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings
        self.debouncer = debouncer or ScanDebouncer(window_ms=settings.scan_debounce_ms)
        self._repository_factory = repository_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ── Creation and lookup ──

    async def create_manifest(self, db: AsyncSession, request: ManifestCreateRequest) -> Manifest:
        if request.from_hub_id == request.to_hub_id:
            raise CargoOpsError("Origin and destination hubs must differ", code="INVALID_ROUTE")
        if request.status not in INITIAL_STATUSES:
            raise CargoOpsError(
                f"A manifest cannot be created in status {request.status.value}",
                code="INVALID_INITIAL_STATUS",
            )

        flight_number = (request.flight_number or "").strip().upper() or None
        vehicle_number = (request.vehicle_number or "").strip().upper() or None
        if request.type == ManifestType.AIR and len(flight_number or "") < MIN_FLIGHT_NUMBER_LENGTH:
            raise CargoOpsError("Flight number is required for AIR manifests", code="FLIGHT_NUMBER_REQUIRED")
        if request.type == ManifestType.TRUCK and len(vehicle_number or "") < MIN_VEHICLE_NUMBER_LENGTH:
            raise CargoOpsError("Vehicle number is required for TRUCK manifests", code="VEHICLE_NUMBER_REQUIRED")

        repo = self._repository_factory(db)
        for hub_id in (request.from_hub_id, request.to_hub_id):
            if await repo.get_hub(hub_id) is None:
                raise NotFoundError("Hub", hub_id)

        year = self._clock().year
        manifest_no = generate_manifest_number(year, await repo.last_manifest_no(year))
        manifest = Manifest(
            id=uuid.uuid4(),
            manifest_no=manifest_no,
            type=request.type,
            status=request.status,
            from_hub_id=request.from_hub_id,
            to_hub_id=request.to_hub_id,
            total_shipments=0,
            total_packages=0,
            total_weight=0.0,
            flight_number=flight_number,
            flight_date=request.flight_date,
            airline_code=request.airline_code,
            vehicle_number=vehicle_number,
            driver_name=request.driver_name,
            driver_phone=request.driver_phone,
            notes=request.notes,
            created_by=request.created_by,
        )
        manifest = await repo.add_manifest(manifest)
        logger.info("Created %s manifest %s", request.type.value, manifest_no)
        return manifest

    async def get_manifest(self, db: AsyncSession, manifest_id: uuid.UUID) -> Manifest:
        manifest = await self._repository_factory(db).get_manifest(manifest_id)
        if manifest is None:
            raise NotFoundError("Manifest", manifest_id)
        return manifest

    async def list_items(self, db: AsyncSession, manifest_id: uuid.UUID) -> list[tuple[ManifestItem, Shipment]]:
        await self.get_manifest(db, manifest_id)
        return await self._repository_factory(db).list_items(manifest_id)

    async def find_by_scan(self, db: AsyncSession, raw: str) -> Manifest:
        """Resolve a scanned manifest label (QR envelope or bare number) to its manifest."""
        token = parse_scan_input(raw)
        if token.kind != MANIFEST:
            raise CargoOpsError(f"Expected a manifest code, got a {token.kind} code", code="INVALID_SCAN_TYPE")

        repo = self._repository_factory(db)
        manifest = None
        if token.manifest_id:
            try:
                manifest = await repo.get_manifest(uuid.UUID(token.manifest_id))
            except ValueError:
                manifest = None
        if manifest is None and token.manifest_no:
            manifest = await repo.get_manifest_by_no(token.manifest_no)
        if manifest is None:
            raise NotFoundError("Manifest", token.manifest_no or token.manifest_id)
        return manifest

    async def qr_payload(self, db: AsyncSession, manifest: Manifest) -> str:
        repo = self._repository_factory(db)
        from_hub = await repo.get_hub(manifest.from_hub_id)
        to_hub = await repo.get_hub(manifest.to_hub_id)
        return generate_manifest_qr_payload(
            str(manifest.id),
            manifest.manifest_no,
            from_hub.code if from_hub else "",
            to_hub.code if to_hub else "",
        )

    # ── Membership ──

    async def scan_shipment(
        self,
        db: AsyncSession,
        manifest_id: uuid.UUID,
        raw: str,
        *,
        staff_id: str,
        scan_source: ScanSource = ScanSource.MANUAL,
        validate_destination: bool | None = None,
        validate_status: bool | None = None,
    ) -> ScanResponse:
        """Add the scanned shipment to the manifest.

        Repeat scans of a shipment already on this manifest succeed with
        duplicate=True. Business rejections come back as success=False;
        malformed input, a missing manifest and a non-editable manifest raise.
        """
        token = parse_scan_input(raw)
        if token.kind != SHIPMENT:
            return _rejected("INVALID_SCAN_TYPE", f"Expected a shipment barcode, got a {token.kind} code")

        if not self.debouncer.allow((str(manifest_id), staff_id)):
            logger.debug("Debounced scan %s on manifest %s by %s", token.awb, manifest_id, staff_id)
            return _rejected("DEBOUNCED", "Scan ignored: too soon after the previous scan", awb=token.awb)

        if validate_destination is None:
            validate_destination = self.settings.scan_validate_destination
        if validate_status is None:
            validate_status = self.settings.scan_validate_status

        repo = self._repository_factory(db)
        manifest = await repo.lock_manifest(manifest_id)
        if manifest is None:
            raise NotFoundError("Manifest", manifest_id)
        if not is_editable(manifest.status):
            raise ManifestNotEditableError(
                f"Manifest {manifest.manifest_no} is {manifest.status.value}; "
                "shipments can only be added while it is OPEN or BUILDING",
                details={"manifest_no": manifest.manifest_no, "status": manifest.status.value},
            )

        shipment = await repo.find_shipment_by_awb(token.awb)
        if shipment is None:
            return _rejected("SHIPMENT_NOT_FOUND", f"Shipment {token.awb} not found", awb=token.awb)

        existing = await repo.find_item(manifest.id, shipment.id)
        if existing is not None:
            return _duplicate(shipment, existing)

        other = await repo.find_open_membership(shipment.id, exclude_manifest_id=manifest.id)
        if other is not None:
            return _rejected(
                "ALREADY_IN_MANIFEST",
                f"Shipment {shipment.awb_number} is already on manifest {other.manifest_no}",
                shipment=shipment,
            )

        if validate_destination and shipment.destination_hub_id != manifest.to_hub_id:
            return _rejected(
                "DESTINATION_MISMATCH",
                f"Shipment {shipment.awb_number} is not bound for this manifest's destination",
                shipment=shipment,
            )

        if validate_status and shipment.status not in MANIFESTABLE_STATUSES:
            return _rejected(
                "INVALID_STATUS",
                f"Shipment {shipment.awb_number} cannot be manifested in status {shipment.status.value}",
                shipment=shipment,
            )

        item, created = await repo.insert_manifest_item(ManifestItem(
            id=uuid.uuid4(),
            manifest_id=manifest.id,
            shipment_id=shipment.id,
            scanned_by=staff_id,
            scan_source=scan_source,
        ))
        if not created:
            return _duplicate(shipment, item)

        await repo.set_shipment_manifest(shipment.id, manifest.id)
        await repo.refresh_totals(manifest)

        logger.info("Scanned %s onto manifest %s", shipment.awb_number, manifest.manifest_no)
        return ScanResponse(
            success=True,
            duplicate=False,
            awb_number=shipment.awb_number,
            consignee_name=shipment.consignee_name,
            shipment_id=shipment.id,
            manifest_item_id=item.id,
            current_status=shipment.status,
        )

    async def remove_shipment(self, db: AsyncSession, manifest_id: uuid.UUID, shipment_id: uuid.UUID) -> Manifest:
        repo = self._repository_factory(db)
        manifest = await repo.lock_manifest(manifest_id)
        if manifest is None:
            raise NotFoundError("Manifest", manifest_id)
        if not is_editable(manifest.status):
            raise ManifestNotEditableError(
                f"Manifest {manifest.manifest_no} is {manifest.status.value}; "
                "shipments can only be removed while it is OPEN or BUILDING",
                details={"manifest_no": manifest.manifest_no, "status": manifest.status.value},
            )

        if not await repo.delete_manifest_item(manifest.id, shipment_id):
            raise NotFoundError("Manifest item", shipment_id)
        await repo.set_shipment_manifest(shipment_id, None)
        await repo.refresh_totals(manifest)

        logger.info("Removed shipment %s from manifest %s", shipment_id, manifest.manifest_no)
        return manifest

    # ── Lifecycle ──

    async def close_manifest(
        self, db: AsyncSession, manifest_id: uuid.UUID, actor: str | None = None
    ) -> ManifestTransitionResult:
        return await self._advance(db, manifest_id, CLOSE, actor)

    async def depart_manifest(
        self, db: AsyncSession, manifest_id: uuid.UUID, actor: str | None = None
    ) -> ManifestTransitionResult:
        return await self._advance(db, manifest_id, DEPART, actor)

    async def arrive_manifest(
        self, db: AsyncSession, manifest_id: uuid.UUID, actor: str | None = None
    ) -> ManifestTransitionResult:
        return await self._advance(db, manifest_id, ARRIVE, actor)

    async def reconcile_manifest(
        self, db: AsyncSession, manifest_id: uuid.UUID, actor: str | None = None
    ) -> ManifestTransitionResult:
        return await self._advance(db, manifest_id, RECONCILE, actor)

    async def _advance(
        self,
        db: AsyncSession,
        manifest_id: uuid.UUID,
        step: LifecycleStep,
        actor: str | None,
    ) -> ManifestTransitionResult:
        repo = self._repository_factory(db)
        manifest = await repo.lock_manifest(manifest_id)
        if manifest is None:
            raise NotFoundError("Manifest", manifest_id)

        now = self._clock()
        values = {step.timestamp_field: now}
        if step is CLOSE:
            values["closed_by"] = actor

        shipments: list[Shipment] = []
        shipments_updated = 0
        async with repo.atomic():
            changed = await repo.update_manifest_status(manifest.id, step.allowed_from, step.target, **values)
            if not changed:
                allowed = ", ".join(sorted(s.value for s in step.allowed_from))
                raise ManifestTransitionError(
                    f"Cannot {step.name} manifest {manifest.manifest_no}: "
                    f"status is {manifest.status.value}, expected one of {allowed}",
                    details={"manifest_no": manifest.manifest_no, "status": manifest.status.value},
                )
            if step.shipment_status is not None:
                shipments = await repo.list_manifest_shipments(manifest.id)
                shipments_updated = await repo.bulk_update_shipments(
                    [s.id for s in shipments], step.shipment_status
                )
            if step is CLOSE:
                await repo.refresh_totals(manifest)

        manifest = await repo.reload(manifest)
        logger.info(
            "Manifest %s -> %s (%d shipments updated)",
            manifest.manifest_no, step.target.value, shipments_updated,
        )

        events_created = 0
        if step.event_action and shipments:
            events_created = await self._record_tracking(repo, manifest, step, shipments, actor, now)

        return ManifestTransitionResult(
            manifest=manifest,
            shipments_updated=shipments_updated,
            tracking_events_created=events_created,
        )

    async def _record_tracking(
        self,
        repo: ManifestRepository,
        manifest: Manifest,
        step: LifecycleStep,
        shipments: list[Shipment],
        actor: str | None,
        now: datetime,
    ) -> int:
        hub_id = getattr(manifest, step.event_hub_field)
        meta = {
            "manifest_id": str(manifest.id),
            "manifest_no": manifest.manifest_no,
            "action": step.event_action,
        }
        events = [
            TrackingEvent(
                id=uuid.uuid4(),
                shipment_id=s.id,
                awb_number=s.awb_number,
                event_code=step.shipment_status.value,
                hub_id=hub_id,
                source=TrackingEventSource.SYSTEM,
                actor=actor,
                notes=f"{step.event_action} {manifest.manifest_no}",
                meta=dict(meta),
                event_time=now,
            )
            for s in shipments
        ]
        try:
            async with repo.atomic():
                return await repo.insert_tracking_events(events)
        except Exception:
            logger.warning(
                "Tracking events for manifest %s (%s) were not recorded",
                manifest.manifest_no, step.event_action, exc_info=True,
            )
            return 0


def _rejected(code: str, message: str, *, awb: str | None = None, shipment: Shipment | None = None) -> ScanResponse:
    logger.debug("Scan rejected (%s): %s", code, message)
    return ScanResponse(
        success=False,
        error=code,
        message=message,
        awb_number=shipment.awb_number if shipment else awb,
        shipment_id=shipment.id if shipment else None,
        current_status=shipment.status if shipment else None,
    )


def _duplicate(shipment: Shipment, item: ManifestItem) -> ScanResponse:
    return ScanResponse(
        success=True,
        duplicate=True,
        awb_number=shipment.awb_number,
        consignee_name=shipment.consignee_name,
        message=f"Shipment {shipment.awb_number} is already on this manifest",
        shipment_id=shipment.id,
        manifest_item_id=item.id,
        current_status=shipment.status,
    )
