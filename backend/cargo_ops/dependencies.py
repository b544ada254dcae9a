from cargo_ops.config import settings
from cargo_ops.database import get_db
from cargo_ops.invoicing.service import InvoiceService
from cargo_ops.manifest_builder.service import ManifestBuilder
from cargo_ops.scanning.debounce import ScanDebouncer
from cargo_ops.shipment_workflow.service import ShipmentService

# Re-export get_db for use in Depends()
get_db = get_db

# One throttle per process so the window spans requests from the same station
scan_debouncer = ScanDebouncer(window_ms=settings.scan_debounce_ms)


def get_shipment_service() -> ShipmentService:
    return ShipmentService(settings)


def get_manifest_builder() -> ManifestBuilder:
    return ManifestBuilder(settings, debouncer=scan_debouncer)


def get_invoice_service() -> InvoiceService:
    return InvoiceService(settings)
