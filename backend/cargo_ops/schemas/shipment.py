import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from cargo_ops.models.shipment import ServiceLevel, ShipmentStatus
from cargo_ops.models.tracking import TrackingEventSource


class ShipmentCreateRequest(BaseModel):
    awb_number: str
    origin_hub_id: uuid.UUID | None = None
    destination_hub_id: uuid.UUID | None = None
    customer_id: uuid.UUID | None = None
    sender_name: str | None = None
    consignee_name: str | None = None
    consignee_phone: str | None = None
    package_count: int = Field(default=1, ge=1)
    total_weight: float = Field(default=0.0, ge=0)
    payment_mode: str | None = None
    service_level: ServiceLevel = ServiceLevel.STANDARD
    created_by: str = "system"


class ShipmentResponse(BaseModel):
    id: uuid.UUID
    awb_number: str
    status: ShipmentStatus
    origin_hub_id: uuid.UUID | None = None
    destination_hub_id: uuid.UUID | None = None
    customer_id: uuid.UUID | None = None
    manifest_id: uuid.UUID | None = None
    sender_name: str | None = None
    consignee_name: str | None = None
    package_count: int
    total_weight: float
    payment_mode: str | None = None
    service_level: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class StatusUpdateRequest(BaseModel):
    status: str
    actor: str = "user"
    location: str | None = None
    notes: str | None = None
    hub_id: uuid.UUID | None = None


class TrackingEventResponse(BaseModel):
    id: uuid.UUID
    awb_number: str
    event_code: str
    hub_id: uuid.UUID | None = None
    source: TrackingEventSource
    actor: str | None = None
    location: str | None = None
    notes: str | None = None
    meta: dict | None = None
    event_time: datetime | None = None

    model_config = {"from_attributes": True}


class TrackingHistoryResponse(BaseModel):
    awb_number: str
    events: list[TrackingEventResponse]
