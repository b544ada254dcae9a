"""ORM models for manifests and their shipment membership (manifest items)."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from cargo_ops.models.base import Base, TimestampMixin


class ManifestStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    BUILDING = "BUILDING"
    CLOSED = "CLOSED"
    DEPARTED = "DEPARTED"
    ARRIVED = "ARRIVED"
    RECONCILED = "RECONCILED"


class ManifestType(str, enum.Enum):
    AIR = "AIR"
    TRUCK = "TRUCK"


class ScanSource(str, enum.Enum):
    CAMERA = "CAMERA"
    MANUAL = "MANUAL"
    BARCODE_SCANNER = "BARCODE_SCANNER"


class Manifest(Base, TimestampMixin):
    __tablename__ = "manifests"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    manifest_no: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    type: Mapped[ManifestType] = mapped_column(
        SAEnum(ManifestType, name="manifest_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status: Mapped[ManifestStatus] = mapped_column(
        SAEnum(ManifestStatus, name="manifest_status", values_callable=lambda e: [m.value for m in e]),
        default=ManifestStatus.OPEN,
        nullable=False,
    )
    from_hub_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("hubs.id"), nullable=False)
    to_hub_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("hubs.id"), nullable=False)

    total_shipments: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_packages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_weight: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # AIR
    flight_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    flight_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    airline_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    # TRUCK
    vehicle_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    driver_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    driver_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    closed_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    departed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    arrived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reconciled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ManifestItem(Base):
    __tablename__ = "manifest_items"
    __table_args__ = (
        UniqueConstraint("manifest_id", "shipment_id", name="uq_manifest_items_manifest_shipment"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    manifest_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("manifests.id", ondelete="CASCADE"), index=True, nullable=False
    )
    shipment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("shipments.id"), index=True, nullable=False
    )
    scanned_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    scan_source: Mapped[ScanSource] = mapped_column(
        SAEnum(ScanSource, name="scan_source", values_callable=lambda e: [m.value for m in e]),
        default=ScanSource.MANUAL,
        nullable=False,
    )
    scanned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
