import uuid
from typing import Any

from pydantic import BaseModel

from cargo_ops.models.manifest import ScanSource
from cargo_ops.models.shipment import ShipmentStatus


class ScanParseRequest(BaseModel):
    raw: str


class ScanTokenResponse(BaseModel):
    kind: str
    raw: str
    awb: str | None = None
    manifest_id: str | None = None
    manifest_no: str | None = None
    package_id: str | None = None
    route: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = {"from_attributes": True}


class ManifestScanRequest(BaseModel):
    """A scan taken at a loading station. None for a toggle means use the configured default."""
    raw: str
    staff_id: str
    scan_source: ScanSource = ScanSource.MANUAL
    validate_destination: bool | None = None
    validate_status: bool | None = None


class ScanResponse(BaseModel):
    """Outcome of scanning a shipment into a manifest.

    Business rejections come back with success=False and an error code;
    a repeat scan of an already-loaded shipment is success=True, duplicate=True.
    """
    success: bool
    duplicate: bool = False
    awb_number: str | None = None
    consignee_name: str | None = None
    error: str | None = None
    message: str | None = None
    shipment_id: uuid.UUID | None = None
    manifest_item_id: uuid.UUID | None = None
    current_status: ShipmentStatus | None = None
