from cargo_ops.schemas.health import HealthResponse
from cargo_ops.schemas.invoice import InvoiceCreateRequest, InvoiceFinancials, InvoiceResponse
from cargo_ops.schemas.manifest import ManifestCreateRequest, ManifestResponse
from cargo_ops.schemas.scan import ManifestScanRequest, ScanResponse
from cargo_ops.schemas.shipment import ShipmentCreateRequest, ShipmentResponse
from cargo_ops.schemas.validation import ValidationIssue, ValidationResult

__all__ = [
    "HealthResponse",
    "InvoiceCreateRequest",
    "InvoiceFinancials",
    "InvoiceResponse",
    "ManifestCreateRequest",
    "ManifestResponse",
    "ManifestScanRequest",
    "ScanResponse",
    "ShipmentCreateRequest",
    "ShipmentResponse",
    "ValidationIssue",
    "ValidationResult",
]
