"""Persistence for manifests, their items and the shipments on them.

Wraps the caller's AsyncSession; never commits. Atomic sections run inside
SAVEPOINTs so a failure rolls back only that section and leaves the outer
request transaction usable.

Every membership change and lifecycle step starts with lock_manifest(), which
holds the manifest row lock until the request transaction ends. Scans and
close therefore serialise per manifest: a scan that waited behind a close sees
the new status, and totals are recomputed by one writer at a time.
"""

import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.errors import ConflictError
from cargo_ops.manifest_builder.lifecycle import EDITABLE_STATUSES
from cargo_ops.models.hub import Hub
from cargo_ops.models.manifest import Manifest, ManifestItem, ManifestStatus
from cargo_ops.models.shipment import Shipment, ShipmentStatus
from cargo_ops.models.tracking import TrackingEvent

logger = logging.getLogger(__name__)


class ManifestRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """All-or-nothing section; rolls back to the savepoint on any error."""
        async with self.db.begin_nested():
            yield

    # ── Manifests ──

    async def get_manifest(self, manifest_id: uuid.UUID) -> Manifest | None:
        return await self.db.get(Manifest, manifest_id, populate_existing=True)

    async def lock_manifest(self, manifest_id: uuid.UUID) -> Manifest | None:
        """Load the manifest under SELECT ... FOR UPDATE (a no-op on SQLite)."""
        result = await self.db.execute(
            select(Manifest)
            .where(Manifest.id == manifest_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_manifest_by_no(self, manifest_no: str) -> Manifest | None:
        result = await self.db.execute(
            select(Manifest)
            .where(Manifest.manifest_no == manifest_no)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def last_manifest_no(self, year: int) -> str | None:
        result = await self.db.execute(
            select(Manifest.manifest_no)
            .where(Manifest.manifest_no.like(f"MNF-{year}-%"))
            .order_by(Manifest.manifest_no.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def add_manifest(self, manifest: Manifest) -> Manifest:
        try:
            async with self.db.begin_nested():
                self.db.add(manifest)
                await self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Manifest number {manifest.manifest_no} already exists",
                details={"manifest_no": manifest.manifest_no},
            ) from e
        await self.db.refresh(manifest)
        return manifest

    async def reload(self, manifest: Manifest) -> Manifest:
        await self.db.refresh(manifest)
        return manifest

    async def update_manifest_status(
        self,
        manifest_id: uuid.UUID,
        allowed_from: Iterable[ManifestStatus],
        target: ManifestStatus,
        **values,
    ) -> bool:
        """Move the manifest to ``target`` only if its stored status is in ``allowed_from``.

        Returns False when no row matched, i.e. the precondition failed.
        """
        result = await self.db.execute(
            update(Manifest)
            .where(Manifest.id == manifest_id, Manifest.status.in_(list(allowed_from)))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def refresh_totals(self, manifest: Manifest) -> Manifest:
        """Recompute shipment, package and weight totals from current membership."""
        row = (await self.db.execute(
            select(
                func.count(ManifestItem.id),
                func.coalesce(func.sum(Shipment.package_count), 0),
                func.coalesce(func.sum(Shipment.total_weight), 0.0),
            )
            .select_from(ManifestItem)
            .join(Shipment, Shipment.id == ManifestItem.shipment_id)
            .where(ManifestItem.manifest_id == manifest.id)
        )).one()
        manifest.total_shipments = int(row[0])
        manifest.total_packages = int(row[1])
        manifest.total_weight = float(row[2])
        await self.db.flush()
        await self.db.refresh(manifest)
        return manifest

    async def get_hub(self, hub_id: uuid.UUID) -> Hub | None:
        return await self.db.get(Hub, hub_id)

    # ── Shipments and membership ──

    async def find_shipment_by_awb(self, awb: str) -> Shipment | None:
        result = await self.db.execute(
            select(Shipment)
            .where(Shipment.awb_number == awb)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_item(self, manifest_id: uuid.UUID, shipment_id: uuid.UUID) -> ManifestItem | None:
        result = await self.db.execute(
            select(ManifestItem).where(
                ManifestItem.manifest_id == manifest_id,
                ManifestItem.shipment_id == shipment_id,
            )
        )
        return result.scalar_one_or_none()

    async def find_open_membership(
        self,
        shipment_id: uuid.UUID,
        exclude_manifest_id: uuid.UUID | None = None,
    ) -> Manifest | None:
        """An editable manifest, other than ``exclude_manifest_id``, already holding the shipment."""
        query = (
            select(Manifest)
            .join(ManifestItem, ManifestItem.manifest_id == Manifest.id)
            .where(
                ManifestItem.shipment_id == shipment_id,
                Manifest.status.in_(list(EDITABLE_STATUSES)),
            )
            .limit(1)
        )
        if exclude_manifest_id is not None:
            query = query.where(Manifest.id != exclude_manifest_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def insert_manifest_item(self, item: ManifestItem) -> tuple[ManifestItem, bool]:
        """Insert ``item``; returns (item, created).

        A unique-index violation on (manifest_id, shipment_id) means another
        scan got there first, so the existing row comes back with created=False.
        """
        try:
            async with self.db.begin_nested():
                self.db.add(item)
                await self.db.flush()
        except IntegrityError:
            existing = await self.find_item(item.manifest_id, item.shipment_id)
            if existing is None:
                raise
            logger.debug("Manifest item insert collided for shipment %s", item.shipment_id)
            return existing, False
        await self.db.refresh(item)
        return item, True

    async def delete_manifest_item(self, manifest_id: uuid.UUID, shipment_id: uuid.UUID) -> bool:
        item = await self.find_item(manifest_id, shipment_id)
        if item is None:
            return False
        await self.db.delete(item)
        await self.db.flush()
        return True

    async def set_shipment_manifest(self, shipment_id: uuid.UUID, manifest_id: uuid.UUID | None) -> None:
        await self.db.execute(
            update(Shipment)
            .where(Shipment.id == shipment_id)
            .values(manifest_id=manifest_id)
            .execution_options(synchronize_session=False)
        )

    async def list_items(self, manifest_id: uuid.UUID) -> list[tuple[ManifestItem, Shipment]]:
        result = await self.db.execute(
            select(ManifestItem, Shipment)
            .join(Shipment, Shipment.id == ManifestItem.shipment_id)
            .where(ManifestItem.manifest_id == manifest_id)
            .order_by(ManifestItem.scanned_at.asc(), Shipment.awb_number.asc())
            .execution_options(populate_existing=True)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def list_manifest_shipments(self, manifest_id: uuid.UUID) -> list[Shipment]:
        result = await self.db.execute(
            select(Shipment)
            .join(ManifestItem, ManifestItem.shipment_id == Shipment.id)
            .where(ManifestItem.manifest_id == manifest_id)
            .order_by(Shipment.awb_number.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def bulk_update_shipments(self, shipment_ids: list[uuid.UUID], status: ShipmentStatus) -> int:
        if not shipment_ids:
            return 0
        result = await self.db.execute(
            update(Shipment)
            .where(Shipment.id.in_(shipment_ids))
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # ── Tracking ──

    async def insert_tracking_events(self, events: list[TrackingEvent]) -> int:
        if not events:
            return 0
        self.db.add_all(events)
        await self.db.flush()
        return len(events)
