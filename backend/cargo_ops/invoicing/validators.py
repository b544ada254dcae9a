"""Invoice financial validation. Pure functions, no DB dependency.

Each validator returns a ValidationResult listing every violated rule so a
caller can surface all problems in one pass. Currency amounts are whole
rupees; GST is rounded half-up to the nearest rupee.
"""

import math
import re
from datetime import date

from cargo_ops.models.invoice import CustomerTier, PaymentMode
from cargo_ops.schemas.invoice import InvoiceDraft, InvoiceFinancials
from cargo_ops.schemas.validation import ValidationIssue, ValidationResult

AWB_PATTERN = re.compile(r"^TAC\d{8}$")
GSTIN_PATTERN = re.compile(r"^\d{2}[A-Z]{5}\d{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
INVOICE_NO_PATTERN = re.compile(r"INV-(\d{4})-(\d+)")

MAX_DISCOUNT_RATIO = 0.25
MANAGER_APPROVAL_RATIO = 0.15
TOTAL_TOLERANCE = 1.0

# balance is exempt: it goes negative when the advance exceeds the total
NON_NEGATIVE_FIELDS = (
    "base_freight",
    "docket_charge",
    "pickup_charge",
    "packing_charge",
    "fuel_surcharge",
    "handling_fee",
    "insurance",
    "total_amount",
    "discount",
    "advance_paid",
)


def validate_awb(awb: str | None) -> ValidationResult:
    """AWB must be exactly TAC + 8 digits (e.g. TAC48878789)."""
    errors = []
    if not awb:
        errors.append(ValidationIssue(field="awb", message="AWB number is required", code="AWB_REQUIRED"))
    elif not AWB_PATTERN.match(awb):
        errors.append(ValidationIssue(
            field="awb",
            message=f'AWB "{awb}" does not match required format TAC + 8 digits (e.g., TAC48878789)',
            code="AWB_INVALID_FORMAT",
        ))
    return ValidationResult.build(errors)


def validate_gstin(gstin: str | None) -> ValidationResult:
    """Validate an Indian GSTIN. A missing GSTIN is allowed with a warning."""
    if not gstin:
        return ValidationResult.build(
            warnings=["GSTIN not provided - GST invoice cannot be generated"]
        )

    errors = []
    if not GSTIN_PATTERN.match(gstin):
        errors.append(ValidationIssue(
            field="gstin",
            message=f'GSTIN "{gstin}" is not valid. Expected format: 07AABCU9603R1Z2',
            code="GSTIN_INVALID_FORMAT",
        ))
    return ValidationResult.build(errors)


def calculate_gst(subtotal: float, rate_percent: float) -> int:
    """GST on ``subtotal`` at ``rate_percent``, rounded half-up to whole rupees.

    Non-positive subtotal or rate yields 0.
    """
    if subtotal <= 0 or rate_percent <= 0:
        return 0
    return math.floor(subtotal * rate_percent / 100 + 0.5)


def validate_gst_calculation(subtotal: float, rate_percent: float, provided_tax: float) -> ValidationResult:
    expected = calculate_gst(subtotal, rate_percent)
    errors = []
    if provided_tax != expected:
        errors.append(ValidationIssue(
            field="tax",
            message=f"GST calculation incorrect. Expected ₹{expected}, got ₹{_fmt(provided_tax)}",
            code="GST_CALCULATION_MISMATCH",
        ))
    return ValidationResult.build(errors)


def validate_tax_breakdown(financials: InvoiceFinancials, rate_percent: float) -> ValidationResult:
    """Check the stated tax against ``rate_percent`` on the discounted subtotal.

    CGST and SGST are each computed at half the rate; IGST carries the full
    rate. The components must also add up to the stated tax total.
    """
    tax = financials.tax
    taxable = financials.subtotal - financials.discount

    errors = []
    if tax.cgst + tax.sgst + tax.igst != tax.total:
        errors.append(ValidationIssue(
            field="tax",
            message=(
                f"Tax components (₹{_fmt(tax.cgst + tax.sgst + tax.igst)}) "
                f"do not add up to the tax total ₹{_fmt(tax.total)}"
            ),
            code="TAX_BREAKDOWN_MISMATCH",
        ))

    if tax.cgst or tax.sgst:
        if tax.igst:
            errors.append(ValidationIssue(
                field="tax",
                message="IGST cannot be charged together with CGST/SGST",
                code="TAX_BREAKDOWN_MISMATCH",
            ))
        half_rate = rate_percent / 2
        checks = [
            validate_gst_calculation(taxable, half_rate, tax.cgst),
            validate_gst_calculation(taxable, half_rate, tax.sgst),
        ]
    else:
        checks = [validate_gst_calculation(taxable, rate_percent, tax.igst)]
    return ValidationResult.merge(ValidationResult.build(errors), *checks)


def validate_amounts(financials: InvoiceFinancials) -> ValidationResult:
    errors = []
    for name in NON_NEGATIVE_FIELDS:
        value = getattr(financials, name)
        if value < 0:
            errors.append(ValidationIssue(
                field=name,
                message=f"Negative amount not allowed for {name}: ₹{_fmt(value)}",
                code="NEGATIVE_AMOUNT",
            ))
    return ValidationResult.build(errors)


def validate_discount(
    subtotal: float,
    discount: float,
    *,
    max_ratio: float = MAX_DISCOUNT_RATIO,
    approval_ratio: float = MANAGER_APPROVAL_RATIO,
) -> ValidationResult:
    """Hard limit at 25% of subtotal; above 15% needs manager approval (warning only)."""
    max_discount = subtotal * max_ratio
    approval_threshold = subtotal * approval_ratio

    errors = []
    warnings = []
    if discount > max_discount:
        errors.append(ValidationIssue(
            field="discount",
            message=(
                f"Discount ₹{_fmt(discount)} exceeds maximum {max_ratio:.0%} limit "
                f"(₹{math.floor(max_discount + 0.5)})"
            ),
            code="DISCOUNT_EXCEEDS_LIMIT",
        ))
    elif discount > approval_threshold:
        warnings.append(
            f"Discount ₹{_fmt(discount)} exceeds {approval_ratio:.0%} - Manager approval required"
        )
    return ValidationResult.build(errors, warnings)


def validate_payment_mode(payment_mode: PaymentMode | str | None, customer) -> ValidationResult:
    """TBB (To Be Billed) is reserved for ENTERPRISE-tier customers.

    ``customer`` is anything with a ``tier`` attribute, or None.
    """
    errors = []
    if payment_mode == PaymentMode.TBB:
        if customer is None:
            errors.append(ValidationIssue(
                field="payment_mode",
                message="Customer information required for TBB payment mode",
                code="TBB_CUSTOMER_REQUIRED",
            ))
        elif customer.tier != CustomerTier.ENTERPRISE:
            tier = getattr(customer.tier, "value", customer.tier)
            errors.append(ValidationIssue(
                field="payment_mode",
                message=f"TBB payment mode only allowed for Enterprise customers. Current tier: {tier}",
                code="TBB_ENTERPRISE_ONLY",
            ))
    return ValidationResult.build(errors)


def validate_total_calculation(
    financials: InvoiceFinancials,
    tolerance: float = TOTAL_TOLERANCE,
) -> ValidationResult:
    """totalAmount must equal subtotal + tax - discount within ``tolerance``."""
    expected = financials.subtotal + financials.tax.total - financials.discount

    errors = []
    if abs(expected - financials.total_amount) > tolerance:
        errors.append(ValidationIssue(
            field="total_amount",
            message=(
                f"Total mismatch. Expected ₹{math.floor(expected + 0.5)}, "
                f"got ₹{_fmt(financials.total_amount)}"
            ),
            code="TOTAL_MISMATCH",
        ))
    return ValidationResult.build(errors)


def validate_invoice(
    invoice: InvoiceDraft,
    customer=None,
    *,
    max_discount_ratio: float = MAX_DISCOUNT_RATIO,
    approval_ratio: float = MANAGER_APPROVAL_RATIO,
    tolerance: float = TOTAL_TOLERANCE,
    gst_rate: float | None = None,
) -> ValidationResult:
    """Run every invoice rule and collect all errors and warnings.

    The tax is checked against ``gst_rate`` only when a rate is given.
    """
    results = [validate_awb(invoice.awb)]

    if invoice.customer_id is None:
        results.append(ValidationResult.build([
            ValidationIssue(field="customer_id", message="Customer is required", code="CUSTOMER_REQUIRED"),
        ]))

    if customer is not None and customer.gstin:
        results.append(validate_gstin(customer.gstin))

    if invoice.financials is not None:
        financials = invoice.financials
        results.append(validate_amounts(financials))
        results.append(validate_total_calculation(financials, tolerance))
        if gst_rate is not None:
            results.append(validate_tax_breakdown(financials, gst_rate))
        results.append(validate_discount(
            financials.subtotal,
            financials.discount,
            max_ratio=max_discount_ratio,
            approval_ratio=approval_ratio,
        ))

    if invoice.payment_mode is not None:
        results.append(validate_payment_mode(invoice.payment_mode, customer))

    return ValidationResult.merge(*results)


def generate_next_invoice_number(last_invoice_no: str | None = None, year: int | None = None) -> str:
    """Next sequential invoice number in INV-YYYY-NNNN form.

    Resets to 0001 for a new year or when the previous number is absent or
    malformed. The counter is zero-padded to at least four digits.
    """
    year = year if year is not None else date.today().year

    if not last_invoice_no:
        return f"INV-{year}-0001"

    match = INVOICE_NO_PATTERN.search(last_invoice_no)
    if match is None:
        return f"INV-{year}-0001"

    last_year = int(match.group(1))
    last_num = int(match.group(2))
    if last_year != year:
        return f"INV-{year}-0001"

    return f"INV-{year}-{last_num + 1:04d}"


def _fmt(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"
