from cargo_ops.scanning.debounce import ScanDebouncer
from cargo_ops.scanning.parser import (
    ScanToken,
    generate_manifest_qr_payload,
    generate_shipment_qr_payload,
    is_valid_awb,
    normalize_awb,
    parse_scan_input,
)

__all__ = [
    "ScanDebouncer",
    "ScanToken",
    "generate_manifest_qr_payload",
    "generate_shipment_qr_payload",
    "is_valid_awb",
    "normalize_awb",
    "parse_scan_input",
]
