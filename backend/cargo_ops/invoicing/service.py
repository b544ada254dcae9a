"""InvoiceService: validates and persists freight invoices.

Flow:
1. Load the customer referenced by the request
2. Run every invoice rule in one pass, GST against the stated rate included;
   reject on any error
3. Assign the next INV-YYYY-NNNN number for the current year
4. Insert; the unique index on invoice_no turns a numbering race into a conflict
"""

import logging
import uuid
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.config import Settings
from cargo_ops.errors import ConflictError, InvoiceValidationError, NotFoundError
from cargo_ops.invoicing.calculator import calculate_freight
from cargo_ops.invoicing.validators import generate_next_invoice_number, validate_invoice
from cargo_ops.models.invoice import Customer, Invoice
from cargo_ops.schemas.invoice import (
    FreightQuoteRequest,
    InvoiceCreateRequest,
    InvoiceDraft,
    InvoiceFinancials,
    InvoiceValidationRequest,
)
from cargo_ops.schemas.validation import ValidationResult

logger = logging.getLogger(__name__)


class InvoiceService:
    """Invoice validation and numbering backed by the invoices table."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def validate(self, request: InvoiceValidationRequest) -> ValidationResult:
        return validate_invoice(
            request.invoice,
            request.customer,
            max_discount_ratio=self.settings.discount_max_ratio,
            approval_ratio=self.settings.discount_approval_ratio,
            tolerance=self.settings.total_tolerance,
        )

    def quote(self, request: FreightQuoteRequest) -> InvoiceFinancials:
        return calculate_freight(
            request.weight,
            request.mode,
            request.service_level,
            gst_rate=self.settings.default_gst_rate,
            intra_state=request.intra_state,
        )

    async def last_invoice_no(self, db: AsyncSession, year: int) -> str | None:
        # Lexical order breaks once the counter outgrows four digits, so sort by length first
        result = await db.execute(
            select(Invoice.invoice_no)
            .where(Invoice.invoice_no.like(f"INV-{year}-%"))
            .order_by(func.length(Invoice.invoice_no).desc(), Invoice.invoice_no.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def next_invoice_no(self, db: AsyncSession, year: int | None = None) -> str:
        year = year if year is not None else date.today().year
        last = await self.last_invoice_no(db, year)
        return generate_next_invoice_number(last, year)

    async def create_invoice(
        self,
        db: AsyncSession,
        request: InvoiceCreateRequest,
    ) -> tuple[Invoice, list[str]]:
        """Validate and persist an invoice. Returns the row and any warnings."""
        customer = await db.get(Customer, request.customer_id)
        if customer is None:
            raise NotFoundError("Customer", request.customer_id)

        draft = InvoiceDraft(
            awb=request.awb,
            customer_id=request.customer_id,
            payment_mode=request.payment_mode,
            financials=request.financials,
        )
        gst_rate = request.gst_rate if request.gst_rate is not None else self.settings.default_gst_rate
        result = validate_invoice(
            draft,
            customer,
            max_discount_ratio=self.settings.discount_max_ratio,
            approval_ratio=self.settings.discount_approval_ratio,
            tolerance=self.settings.total_tolerance,
            gst_rate=gst_rate,
        )
        if not result.is_valid:
            raise InvoiceValidationError(result)

        invoice_no = await self.next_invoice_no(db)
        fin = request.financials
        invoice = Invoice(
            id=uuid.uuid4(),
            invoice_no=invoice_no,
            awb_number=request.awb,
            customer_id=customer.id,
            payment_mode=request.payment_mode,
            gst_rate=gst_rate,
            base_freight=fin.base_freight,
            docket_charge=fin.docket_charge,
            pickup_charge=fin.pickup_charge,
            packing_charge=fin.packing_charge,
            fuel_surcharge=fin.fuel_surcharge,
            handling_fee=fin.handling_fee,
            insurance=fin.insurance,
            discount=fin.discount,
            cgst=fin.tax.cgst,
            sgst=fin.tax.sgst,
            igst=fin.tax.igst,
            tax_total=fin.tax.total,
            total_amount=fin.total_amount,
            advance_paid=fin.advance_paid,
            balance=fin.balance,
            created_by=request.created_by,
        )

        try:
            async with db.begin_nested():
                db.add(invoice)
                await db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Invoice number {invoice_no} was taken concurrently; retry the request",
                details={"invoice_no": invoice_no},
            ) from e
        await db.refresh(invoice)

        logger.info("Created invoice %s for AWB %s (total=%.2f)", invoice_no, request.awb, fin.total_amount)
        return invoice, result.warnings

    async def get_invoice(self, db: AsyncSession, invoice_no: str) -> Invoice:
        result = await db.execute(select(Invoice).where(Invoice.invoice_no == invoice_no))
        invoice = result.scalar_one_or_none()
        if invoice is None:
            raise NotFoundError("Invoice", invoice_no)
        return invoice
