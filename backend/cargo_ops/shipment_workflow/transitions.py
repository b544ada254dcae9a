"""Shipment status machine. Pure functions, no DB dependency.

EXCEPTION is a detour reachable from every mid-flow status and resolvable
into either leg of the pipeline or to cancellation. RTO re-enters the flow
at origin only. DELIVERED and CANCELLED are terminal.

LOADED_FOR_LINEHAUL is written only by the manifest lifecycle (close), so it
has no entry in the table and every user-requested transition from or to it
is rejected.
"""

from cargo_ops.errors import UnknownStatusError
from cargo_ops.models.shipment import ShipmentStatus

S = ShipmentStatus

SHIPMENT_STATUS_TRANSITIONS: dict[ShipmentStatus, frozenset[ShipmentStatus]] = {
    S.CREATED: frozenset({S.PICKUP_SCHEDULED, S.CANCELLED}),
    S.PICKUP_SCHEDULED: frozenset({S.PICKED_UP, S.CANCELLED}),
    S.PICKED_UP: frozenset({S.RECEIVED_AT_ORIGIN, S.EXCEPTION}),
    S.RECEIVED_AT_ORIGIN: frozenset({S.IN_TRANSIT, S.EXCEPTION}),
    S.IN_TRANSIT: frozenset({S.RECEIVED_AT_DEST, S.EXCEPTION}),
    S.RECEIVED_AT_DEST: frozenset({S.OUT_FOR_DELIVERY, S.EXCEPTION}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED, S.RTO, S.EXCEPTION}),
    S.DELIVERED: frozenset(),
    S.CANCELLED: frozenset(),
    S.RTO: frozenset({S.RECEIVED_AT_ORIGIN}),
    S.EXCEPTION: frozenset({S.RECEIVED_AT_ORIGIN, S.RECEIVED_AT_DEST, S.CANCELLED}),
}

TERMINAL_STATUSES = frozenset(s for s, targets in SHIPMENT_STATUS_TRANSITIONS.items() if not targets)

# Statuses a shipment may be in when it is scanned onto a manifest
MANIFESTABLE_STATUSES = frozenset({S.CREATED, S.PICKED_UP, S.RECEIVED_AT_ORIGIN})


def _coerce(value) -> ShipmentStatus | None:
    if isinstance(value, ShipmentStatus):
        return value
    if isinstance(value, str):
        try:
            return ShipmentStatus(value)
        except ValueError:
            return None
    return None


def is_valid_transition(current, new) -> bool:
    """Return True if ``current -> new`` is a legal shipment transition.

    Total over its inputs: None, unknown strings and any other type yield False.
    """
    frm = _coerce(current)
    to = _coerce(new)
    if frm is None or to is None:
        return False
    return to in SHIPMENT_STATUS_TRANSITIONS.get(frm, frozenset())


def allowed_transitions(current) -> frozenset[ShipmentStatus]:
    frm = _coerce(current)
    if frm is None:
        return frozenset()
    return SHIPMENT_STATUS_TRANSITIONS.get(frm, frozenset())


def is_terminal(status) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def parse_shipment_status(raw: str | ShipmentStatus) -> ShipmentStatus:
    """Map a raw status string from storage or a request onto the enum.

    Raises UnknownStatusError rather than passing an unrecognised value through.
    """
    status = _coerce(raw.strip().upper() if isinstance(raw, str) else raw)
    if status is None:
        raise UnknownStatusError(f"Unknown shipment status: {raw!r}")
    return status
