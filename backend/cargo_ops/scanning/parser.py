"""Scan parser. Classifies raw barcode/QR text into a ScanToken.

Recognised shapes, tried in order:
1. JSON envelope (v1): {"v":1,"awb":"TAC12345678"} or
   {"v":1,"type":"manifest"|"package"|"shipment", ...}
2. Bare AWB: TAC + 8 digits (any case)
3. Bare manifest number: MNF-YYYY-NNNNNN or MAN-YYYYMMDD-HHMMSS (any case)

Parsing is deterministic: the same input always yields an equal token.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any

from cargo_ops.errors import ScanFormatError

AWB_RE = re.compile(r"^TAC\d{8}$", re.IGNORECASE)
MANIFEST_NO_RE = re.compile(r"^MNF-\d{4}-\d{6}$", re.IGNORECASE)
LEGACY_MANIFEST_NO_RE = re.compile(r"^MAN-\d{8}-\d{6}$", re.IGNORECASE)

SCAN_PAYLOAD_VERSION = 1

SHIPMENT = "shipment"
MANIFEST = "manifest"
PACKAGE = "package"


@dataclass(frozen=True)
class ScanToken:
    kind: str
    raw: str
    awb: str | None = None
    manifest_id: str | None = None
    manifest_no: str | None = None
    package_id: str | None = None
    route: str | None = None
    metadata: dict[str, Any] | None = field(default=None, compare=True, hash=False)


def is_valid_awb(text: str | None) -> bool:
    return bool(text) and AWB_RE.match(text) is not None


def normalize_awb(text: str) -> str:
    return text.strip().upper()


def _preview(text: str) -> str:
    return text[:20] + ("..." if len(text) > 20 else "")


def parse_scan_input(raw: str) -> ScanToken:
    """Parse raw scan text into a ScanToken.

    Raises ScanFormatError for empty input, malformed or unsupported JSON
    envelopes and anything matching none of the recognised shapes.
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        raise ScanFormatError("Empty scan input")

    if trimmed.startswith("{"):
        return _parse_envelope(trimmed)

    if AWB_RE.match(trimmed):
        return ScanToken(kind=SHIPMENT, raw=trimmed, awb=trimmed.upper())

    if MANIFEST_NO_RE.match(trimmed) or LEGACY_MANIFEST_NO_RE.match(trimmed):
        return ScanToken(kind=MANIFEST, raw=trimmed, manifest_no=trimmed.upper())

    raise ScanFormatError(f"Invalid scan format: {_preview(trimmed)}")


def _parse_envelope(trimmed: str) -> ScanToken:
    try:
        payload = json.loads(trimmed)
    except json.JSONDecodeError:
        raise ScanFormatError("Invalid JSON in scan input") from None

    # bool is an int subclass; {"v": true} is not version 1
    version = payload.get("v")
    if type(version) is not int or version != SCAN_PAYLOAD_VERSION:
        raise ScanFormatError("Unsupported scan payload version")

    metadata = payload.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise ScanFormatError("Scan metadata must be an object")

    kind = payload.get("type")

    if kind == MANIFEST:
        manifest_id = _opt_str(payload.get("id"))
        manifest_no = _opt_str(payload.get("manifestNo"))
        if not manifest_id and not manifest_no:
            raise ScanFormatError("Manifest scan requires id or manifestNo")
        return ScanToken(
            kind=MANIFEST,
            raw=trimmed,
            manifest_id=manifest_id,
            manifest_no=manifest_no.upper() if manifest_no else None,
            route=_opt_str(payload.get("route")),
            metadata=metadata,
        )

    if kind == PACKAGE:
        package_id = _opt_str(payload.get("packageId"))
        if not package_id:
            raise ScanFormatError("Package scan requires packageId")
        awb = _opt_str(payload.get("awb"))
        if awb is not None and not is_valid_awb(awb):
            raise ScanFormatError("Invalid AWB format in payload")
        return ScanToken(
            kind=PACKAGE,
            raw=trimmed,
            package_id=package_id,
            awb=awb.upper() if awb else None,
            metadata=metadata,
        )

    if kind in (None, SHIPMENT):
        awb = _opt_str(payload.get("awb"))
        if awb:
            if not is_valid_awb(awb):
                raise ScanFormatError("Invalid AWB format in payload")
            return ScanToken(kind=SHIPMENT, raw=trimmed, awb=awb.upper(), metadata=metadata)

    raise ScanFormatError("Invalid scan payload structure")


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ScanFormatError("Invalid scan payload structure")
    value = value.strip()
    return value or None


# ── QR payload generation ──


def generate_manifest_qr_payload(
    manifest_id: str,
    manifest_no: str,
    from_hub_code: str,
    to_hub_code: str,
) -> str:
    """Compact v1 envelope printed on manifest labels."""
    payload = {
        "v": SCAN_PAYLOAD_VERSION,
        "type": MANIFEST,
        "id": str(manifest_id),
        "manifestNo": manifest_no,
        "route": f"{from_hub_code}-{to_hub_code}",
    }
    return json.dumps(payload, separators=(",", ":"))


def generate_shipment_qr_payload(awb: str) -> str:
    payload = {"v": SCAN_PAYLOAD_VERSION, "awb": awb.upper()}
    return json.dumps(payload, separators=(",", ":"))
