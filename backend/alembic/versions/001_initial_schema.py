"""Initial schema: hubs, customers, shipments, manifests, manifest items, tracking, invoices

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SHIPMENT_STATUSES = (
    "CREATED", "PICKUP_SCHEDULED", "PICKED_UP", "RECEIVED_AT_ORIGIN", "LOADED_FOR_LINEHAUL",
    "IN_TRANSIT", "RECEIVED_AT_DEST", "OUT_FOR_DELIVERY", "DELIVERED", "CANCELLED", "RTO", "EXCEPTION",
)
MANIFEST_STATUSES = ("DRAFT", "OPEN", "BUILDING", "CLOSED", "DEPARTED", "ARRIVED", "RECONCILED")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "hubs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(10), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "customers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column(
            "tier",
            sa.Enum("STANDARD", "PREMIUM", "ENTERPRISE", name="customer_tier"),
            nullable=False,
            server_default="STANDARD",
        ),
        sa.Column("gstin", sa.String(15), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "manifests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("manifest_no", sa.String(32), nullable=False),
        sa.Column("type", sa.Enum("AIR", "TRUCK", name="manifest_type"), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*MANIFEST_STATUSES, name="manifest_status"),
            nullable=False,
            server_default="OPEN",
        ),
        sa.Column("from_hub_id", UUID(as_uuid=True), sa.ForeignKey("hubs.id"), nullable=False),
        sa.Column("to_hub_id", UUID(as_uuid=True), sa.ForeignKey("hubs.id"), nullable=False),
        sa.Column("total_shipments", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_packages", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_weight", sa.Float, nullable=False, server_default="0"),
        sa.Column("flight_number", sa.String(20), nullable=True),
        sa.Column("flight_date", sa.String(10), nullable=True),
        sa.Column("airline_code", sa.String(10), nullable=True),
        sa.Column("vehicle_number", sa.String(20), nullable=True),
        sa.Column("driver_name", sa.String(200), nullable=True),
        sa.Column("driver_phone", sa.String(20), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_by", sa.String(200), nullable=True),
        sa.Column("closed_by", sa.String(200), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("departed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("arrived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reconciled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_manifests_manifest_no", "manifests", ["manifest_no"], unique=True)
    op.create_index("ix_manifests_status", "manifests", ["status"])

    op.create_table(
        "shipments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("awb_number", sa.String(11), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*SHIPMENT_STATUSES, name="shipment_status"),
            nullable=False,
            server_default="CREATED",
        ),
        sa.Column("origin_hub_id", UUID(as_uuid=True), sa.ForeignKey("hubs.id"), nullable=True),
        sa.Column("destination_hub_id", UUID(as_uuid=True), sa.ForeignKey("hubs.id"), nullable=True),
        sa.Column("customer_id", UUID(as_uuid=True), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("manifest_id", UUID(as_uuid=True), sa.ForeignKey("manifests.id"), nullable=True),
        sa.Column("sender_name", sa.String(200), nullable=True),
        sa.Column("consignee_name", sa.String(200), nullable=True),
        sa.Column("consignee_phone", sa.String(20), nullable=True),
        sa.Column("package_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("total_weight", sa.Float, nullable=False, server_default="0"),
        sa.Column("payment_mode", sa.String(20), nullable=True),
        sa.Column("service_level", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_shipments_awb_number", "shipments", ["awb_number"], unique=True)
    op.create_index("ix_shipments_manifest_id", "shipments", ["manifest_id"])

    # One row per (manifest, shipment): concurrent scans of the same AWB collide here
    op.create_table(
        "manifest_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "manifest_id",
            UUID(as_uuid=True),
            sa.ForeignKey("manifests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shipment_id", UUID(as_uuid=True), sa.ForeignKey("shipments.id"), nullable=False),
        sa.Column("scanned_by", sa.String(200), nullable=True),
        sa.Column(
            "scan_source",
            sa.Enum("CAMERA", "MANUAL", "BARCODE_SCANNER", name="scan_source"),
            nullable=False,
            server_default="MANUAL",
        ),
        sa.Column("scanned_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("manifest_id", "shipment_id", name="uq_manifest_items_manifest_shipment"),
    )
    op.create_index("ix_manifest_items_manifest_id", "manifest_items", ["manifest_id"])
    op.create_index("ix_manifest_items_shipment_id", "manifest_items", ["shipment_id"])

    op.create_table(
        "tracking_events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("shipment_id", UUID(as_uuid=True), sa.ForeignKey("shipments.id"), nullable=False),
        sa.Column("awb_number", sa.String(11), nullable=False),
        sa.Column("event_code", sa.String(50), nullable=False),
        sa.Column("hub_id", UUID(as_uuid=True), sa.ForeignKey("hubs.id"), nullable=True),
        sa.Column(
            "source",
            sa.Enum("SCAN", "MANUAL", "SYSTEM", "API", name="tracking_event_source"),
            nullable=False,
            server_default="SYSTEM",
        ),
        sa.Column("actor", sa.String(200), nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("meta", JSONB, nullable=True),
        sa.Column("event_time", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_tracking_events_shipment_id", "tracking_events", ["shipment_id"])
    op.create_index("ix_tracking_events_awb_number", "tracking_events", ["awb_number"])

    op.create_table(
        "invoices",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("invoice_no", sa.String(32), nullable=False),
        sa.Column("awb_number", sa.String(11), nullable=False),
        sa.Column("customer_id", UUID(as_uuid=True), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("payment_mode", sa.Enum("PAID", "TO_PAY", "TBB", name="payment_mode"), nullable=False),
        sa.Column("gst_rate", sa.Float, nullable=False, server_default="18"),
        sa.Column("base_freight", sa.Float, nullable=False, server_default="0"),
        sa.Column("docket_charge", sa.Float, nullable=False, server_default="0"),
        sa.Column("pickup_charge", sa.Float, nullable=False, server_default="0"),
        sa.Column("packing_charge", sa.Float, nullable=False, server_default="0"),
        sa.Column("fuel_surcharge", sa.Float, nullable=False, server_default="0"),
        sa.Column("handling_fee", sa.Float, nullable=False, server_default="0"),
        sa.Column("insurance", sa.Float, nullable=False, server_default="0"),
        sa.Column("discount", sa.Float, nullable=False, server_default="0"),
        sa.Column("cgst", sa.Float, nullable=False, server_default="0"),
        sa.Column("sgst", sa.Float, nullable=False, server_default="0"),
        sa.Column("igst", sa.Float, nullable=False, server_default="0"),
        sa.Column("tax_total", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("advance_paid", sa.Float, nullable=False, server_default="0"),
        sa.Column("balance", sa.Float, nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(200), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_invoices_invoice_no", "invoices", ["invoice_no"], unique=True)
    op.create_index("ix_invoices_awb_number", "invoices", ["awb_number"])


def downgrade() -> None:
    op.drop_table("invoices")
    op.drop_table("tracking_events")
    op.drop_table("manifest_items")
    op.drop_table("shipments")
    op.drop_table("manifests")
    op.drop_table("customers")
    op.drop_table("hubs")
    for enum_name in (
        "payment_mode",
        "tracking_event_source",
        "scan_source",
        "shipment_status",
        "manifest_status",
        "manifest_type",
        "customer_tier",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
