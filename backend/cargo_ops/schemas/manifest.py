import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from cargo_ops.models.manifest import ManifestStatus, ManifestType, ScanSource


class ManifestCreateRequest(BaseModel):
    type: ManifestType
    from_hub_id: uuid.UUID
    to_hub_id: uuid.UUID
    status: ManifestStatus = ManifestStatus.OPEN
    flight_number: str | None = None
    flight_date: str | None = None
    airline_code: str | None = None
    vehicle_number: str | None = None
    driver_name: str | None = None
    driver_phone: str | None = None
    notes: str | None = None
    created_by: str = "user"


class ManifestResponse(BaseModel):
    id: uuid.UUID
    manifest_no: str
    type: ManifestType
    status: ManifestStatus
    from_hub_id: uuid.UUID
    to_hub_id: uuid.UUID
    total_shipments: int
    total_packages: int
    total_weight: float
    flight_number: str | None = None
    flight_date: str | None = None
    airline_code: str | None = None
    vehicle_number: str | None = None
    driver_name: str | None = None
    driver_phone: str | None = None
    notes: str | None = None
    created_by: str | None = None
    closed_by: str | None = None
    closed_at: datetime | None = None
    departed_at: datetime | None = None
    arrived_at: datetime | None = None
    reconciled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ManifestItemResponse(BaseModel):
    id: uuid.UUID
    manifest_id: uuid.UUID
    shipment_id: uuid.UUID
    awb_number: str
    consignee_name: str | None = None
    package_count: int
    total_weight: float
    scanned_by: str | None = None
    scan_source: ScanSource
    scanned_at: datetime | None = None


class ManifestItemListResponse(BaseModel):
    manifest_id: uuid.UUID
    items: list[ManifestItemResponse]
    total: int


class ManifestTransitionRequest(BaseModel):
    actor: str = "user"


class ManifestTransitionResponse(BaseModel):
    manifest: ManifestResponse
    shipments_updated: int
    tracking_events_created: int


class ManifestLookupRequest(BaseModel):
    raw: str


class ManifestLookupResponse(BaseModel):
    manifest: ManifestResponse
    qr_payload: str = Field(description="Compact JSON envelope encoded on the manifest label")
