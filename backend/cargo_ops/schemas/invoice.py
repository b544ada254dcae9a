"""Pydantic schemas for invoice financials, validation and persistence."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from cargo_ops.models.invoice import CustomerTier, PaymentMode
from cargo_ops.models.manifest import ManifestType
from cargo_ops.models.shipment import ServiceLevel


class TaxBreakdown(BaseModel):
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0
    total: float = 0.0


class InvoiceFinancials(BaseModel):
    base_freight: float
    docket_charge: float = 0.0
    pickup_charge: float = 0.0
    packing_charge: float = 0.0
    fuel_surcharge: float = 0.0
    handling_fee: float = 0.0
    insurance: float = 0.0
    tax: TaxBreakdown = Field(default_factory=TaxBreakdown)
    discount: float = 0.0
    total_amount: float
    advance_paid: float = 0.0
    balance: float = 0.0

    @property
    def subtotal(self) -> float:
        return (
            self.base_freight
            + self.docket_charge
            + self.pickup_charge
            + self.packing_charge
            + self.fuel_surcharge
            + self.handling_fee
            + self.insurance
        )


class CustomerInfo(BaseModel):
    id: uuid.UUID | None = None
    name: str | None = None
    tier: CustomerTier = CustomerTier.STANDARD
    gstin: str | None = None

    model_config = {"from_attributes": True}


class InvoiceDraft(BaseModel):
    """Invoice fields as submitted for validation."""
    awb: str | None = None
    customer_id: uuid.UUID | None = None
    payment_mode: PaymentMode | None = None
    financials: InvoiceFinancials | None = None


class InvoiceValidationRequest(BaseModel):
    invoice: InvoiceDraft
    customer: CustomerInfo | None = None


class InvoiceCreateRequest(BaseModel):
    awb: str
    customer_id: uuid.UUID
    payment_mode: PaymentMode
    gst_rate: float | None = None
    financials: InvoiceFinancials
    created_by: str = "user"


class InvoiceResponse(BaseModel):
    id: uuid.UUID
    invoice_no: str
    awb_number: str
    customer_id: uuid.UUID
    payment_mode: PaymentMode
    gst_rate: float
    base_freight: float
    docket_charge: float
    pickup_charge: float
    packing_charge: float
    fuel_surcharge: float
    handling_fee: float
    insurance: float
    discount: float
    cgst: float
    sgst: float
    igst: float
    tax_total: float
    total_amount: float
    advance_paid: float
    balance: float
    created_by: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class InvoiceCreatedResponse(BaseModel):
    invoice: InvoiceResponse
    warnings: list[str] = Field(default_factory=list)


class NextInvoiceNumberResponse(BaseModel):
    invoice_no: str


class FreightQuoteRequest(BaseModel):
    weight: float = Field(ge=0)
    mode: ManifestType
    service_level: ServiceLevel = ServiceLevel.STANDARD
    intra_state: bool = False
