"""ORM models for customers and freight invoices."""

import enum
import uuid

from sqlalchemy import Enum as SAEnum, Float, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from cargo_ops.models.base import Base, TimestampMixin


class CustomerTier(str, enum.Enum):
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


class PaymentMode(str, enum.Enum):
    PAID = "PAID"
    TO_PAY = "TO_PAY"
    TBB = "TBB"


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    tier: Mapped[CustomerTier] = mapped_column(
        SAEnum(CustomerTier, name="customer_tier", values_callable=lambda e: [m.value for m in e]),
        default=CustomerTier.STANDARD,
        nullable=False,
    )
    gstin: Mapped[str | None] = mapped_column(String(15), nullable=True)


class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invoice_no: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    awb_number: Mapped[str] = mapped_column(String(11), index=True, nullable=False)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False
    )
    payment_mode: Mapped[PaymentMode] = mapped_column(
        SAEnum(PaymentMode, name="payment_mode", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    gst_rate: Mapped[float] = mapped_column(Float, default=18.0, nullable=False)

    base_freight: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    docket_charge: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    pickup_charge: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    packing_charge: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    fuel_surcharge: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    handling_fee: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    insurance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    cgst: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    sgst: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    igst: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    tax_total: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    total_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    advance_paid: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    balance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
