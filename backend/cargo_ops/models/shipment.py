"""ORM model for shipments, keyed by AWB number."""

import enum
import uuid

from sqlalchemy import Enum as SAEnum, Float, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from cargo_ops.models.base import Base, TimestampMixin


class ShipmentStatus(str, enum.Enum):
    CREATED = "CREATED"
    PICKUP_SCHEDULED = "PICKUP_SCHEDULED"
    PICKED_UP = "PICKED_UP"
    RECEIVED_AT_ORIGIN = "RECEIVED_AT_ORIGIN"
    LOADED_FOR_LINEHAUL = "LOADED_FOR_LINEHAUL"
    IN_TRANSIT = "IN_TRANSIT"
    RECEIVED_AT_DEST = "RECEIVED_AT_DEST"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RTO = "RTO"
    EXCEPTION = "EXCEPTION"


class ServiceLevel(str, enum.Enum):
    STANDARD = "STANDARD"
    EXPRESS = "EXPRESS"


class Shipment(Base, TimestampMixin):
    __tablename__ = "shipments"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    awb_number: Mapped[str] = mapped_column(String(11), unique=True, index=True, nullable=False)
    status: Mapped[ShipmentStatus] = mapped_column(
        SAEnum(ShipmentStatus, name="shipment_status", values_callable=lambda e: [m.value for m in e]),
        default=ShipmentStatus.CREATED,
        nullable=False,
    )
    origin_hub_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hubs.id"), nullable=True
    )
    destination_hub_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hubs.id"), nullable=True
    )
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customers.id"), nullable=True
    )
    manifest_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("manifests.id"), nullable=True
    )
    sender_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    consignee_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    consignee_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    package_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total_weight: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    payment_mode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    service_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
