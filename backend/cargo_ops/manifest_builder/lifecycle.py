"""Manifest status machine and the side effects tied to each lifecycle step.

Membership may only change while a manifest is OPEN or BUILDING. From CLOSED
onward a manifest moves strictly forward, and each forward step fans out to
every shipment on it.
"""

import re
from dataclasses import dataclass

from cargo_ops.models.manifest import ManifestStatus
from cargo_ops.models.shipment import ShipmentStatus

M = ManifestStatus

MANIFEST_STATUS_TRANSITIONS: dict[ManifestStatus, frozenset[ManifestStatus]] = {
    M.DRAFT: frozenset({M.BUILDING, M.OPEN, M.CLOSED}),
    M.OPEN: frozenset({M.BUILDING, M.CLOSED}),
    M.BUILDING: frozenset({M.OPEN, M.CLOSED}),
    M.CLOSED: frozenset({M.DEPARTED}),
    M.DEPARTED: frozenset({M.ARRIVED}),
    M.ARRIVED: frozenset({M.RECONCILED}),
    M.RECONCILED: frozenset(),
}

EDITABLE_STATUSES = frozenset({M.OPEN, M.BUILDING})

# Statuses a manifest may be created in
INITIAL_STATUSES = frozenset({M.DRAFT, M.OPEN, M.BUILDING})

MANIFEST_NO_PATTERN = re.compile(r"^MNF-(\d{4})-(\d{6})$")


def can_transition(current: ManifestStatus, target: ManifestStatus) -> bool:
    return target in MANIFEST_STATUS_TRANSITIONS.get(current, frozenset())


def is_editable(status: ManifestStatus) -> bool:
    return status in EDITABLE_STATUSES


def sources_of(target: ManifestStatus) -> frozenset[ManifestStatus]:
    """Every status from which ``target`` is reachable in one step."""
    return frozenset(s for s, targets in MANIFEST_STATUS_TRANSITIONS.items() if target in targets)


def generate_manifest_number(year: int, last_manifest_no: str | None = None) -> str:
    """Next MNF-YYYY-NNNNNN number; restarts at 000001 each year."""
    if last_manifest_no:
        match = MANIFEST_NO_PATTERN.match(last_manifest_no)
        if match and int(match.group(1)) == year:
            return f"MNF-{year}-{int(match.group(2)) + 1:06d}"
    return f"MNF-{year}-000001"


@dataclass(frozen=True)
class LifecycleStep:
    """One forward lifecycle move and what it does to the shipments aboard."""

    name: str
    target: ManifestStatus
    timestamp_field: str
    shipment_status: ShipmentStatus | None = None
    event_action: str | None = None
    # which end of the route the tracking events are attributed to
    event_hub_field: str = "from_hub_id"

    @property
    def allowed_from(self) -> frozenset[ManifestStatus]:
        return sources_of(self.target)


CLOSE = LifecycleStep(
    name="close",
    target=M.CLOSED,
    timestamp_field="closed_at",
    shipment_status=ShipmentStatus.LOADED_FOR_LINEHAUL,
    event_action="MANIFEST_CLOSED",
)
DEPART = LifecycleStep(
    name="depart",
    target=M.DEPARTED,
    timestamp_field="departed_at",
    shipment_status=ShipmentStatus.IN_TRANSIT,
    event_action="MANIFEST_DEPARTED",
)
ARRIVE = LifecycleStep(
    name="arrive",
    target=M.ARRIVED,
    timestamp_field="arrived_at",
    shipment_status=ShipmentStatus.RECEIVED_AT_DEST,
    event_action="MANIFEST_ARRIVED",
    event_hub_field="to_hub_id",
)
RECONCILE = LifecycleStep(
    name="reconcile",
    target=M.RECONCILED,
    timestamp_field="reconciled_at",
)
