"""ORM model for shipment tracking events (append-only)."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, JSON, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from cargo_ops.models.base import Base


class TrackingEventSource(str, enum.Enum):
    SCAN = "SCAN"
    MANUAL = "MANUAL"
    SYSTEM = "SYSTEM"
    API = "API"


class TrackingEvent(Base):
    __tablename__ = "tracking_events"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shipment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("shipments.id"), index=True, nullable=False
    )
    awb_number: Mapped[str] = mapped_column(String(11), index=True, nullable=False)
    event_code: Mapped[str] = mapped_column(String(50), nullable=False)
    hub_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("hubs.id"), nullable=True)
    source: Mapped[TrackingEventSource] = mapped_column(
        SAEnum(TrackingEventSource, name="tracking_event_source", values_callable=lambda e: [m.value for m in e]),
        default=TrackingEventSource.SYSTEM,
        nullable=False,
    )
    actor: Mapped[str | None] = mapped_column(String(200), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    event_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
