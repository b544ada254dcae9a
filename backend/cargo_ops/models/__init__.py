from cargo_ops.models.base import Base, TimestampMixin
from cargo_ops.models.hub import Hub
from cargo_ops.models.invoice import Customer, CustomerTier, Invoice, PaymentMode
from cargo_ops.models.manifest import (
    Manifest,
    ManifestItem,
    ManifestStatus,
    ManifestType,
    ScanSource,
)
from cargo_ops.models.shipment import ServiceLevel, Shipment, ShipmentStatus
from cargo_ops.models.tracking import TrackingEvent, TrackingEventSource

__all__ = [
    "Base",
    "TimestampMixin",
    "Hub",
    "Customer",
    "CustomerTier",
    "Invoice",
    "PaymentMode",
    "Manifest",
    "ManifestItem",
    "ManifestStatus",
    "ManifestType",
    "ScanSource",
    "Shipment",
    "ServiceLevel",
    "ShipmentStatus",
    "TrackingEvent",
    "TrackingEventSource",
]
