"""Tests for invoice financial validators."""

import uuid
from types import SimpleNamespace

import pytest

from cargo_ops.invoicing.validators import (
    calculate_gst,
    generate_next_invoice_number,
    validate_amounts,
    validate_awb,
    validate_discount,
    validate_gst_calculation,
    validate_gstin,
    validate_invoice,
    validate_payment_mode,
    validate_tax_breakdown,
    validate_total_calculation,
)
from cargo_ops.models.invoice import CustomerTier, PaymentMode
from cargo_ops.schemas.invoice import CustomerInfo, InvoiceDraft, InvoiceFinancials, TaxBreakdown


def make_financials(**overrides) -> InvoiceFinancials:
    values = {
        "base_freight": 1000,
        "tax": TaxBreakdown(igst=180, total=180),
        "total_amount": 1180,
    }
    values.update(overrides)
    return InvoiceFinancials(**values)


# ── Format checks ──


class TestValidateAwb:
    """Tests for validate_awb."""

    def test_valid(self):
        result = validate_awb("TAC48878789")
        assert result.is_valid is True
        assert result.errors == []

    def test_missing(self):
        result = validate_awb("")
        assert result.codes() == ["AWB_REQUIRED"]

    @pytest.mark.parametrize("awb", ["TAC1234567", "tac12345678", "ABC12345678", "TAC12345678X"])
    def test_invalid_format(self, awb):
        result = validate_awb(awb)
        assert result.is_valid is False
        assert result.codes() == ["AWB_INVALID_FORMAT"]
        assert result.errors[0].field == "awb"


class TestValidateGstin:
    """Tests for validate_gstin."""

    def test_valid(self):
        result = validate_gstin("07AABCU9603R1Z2")
        assert result.is_valid is True
        assert result.warnings == []

    def test_missing_is_valid_with_warning(self):
        result = validate_gstin(None)
        assert result.is_valid is True
        assert len(result.warnings) == 1
        assert "GSTIN" in result.warnings[0]

    @pytest.mark.parametrize("gstin", ["07AABCU9603R1Z", "07aabcu9603r1z2", "07AABCU9603R0Z2", "07AABCU9603R1X2"])
    def test_invalid(self, gstin):
        assert validate_gstin(gstin).codes() == ["GSTIN_INVALID_FORMAT"]


# ── GST ──


class TestCalculateGst:
    """Tests for calculate_gst."""

    def test_rounds_up_at_half_or_more(self):
        assert calculate_gst(999, 18) == 180

    def test_rounds_down_below_half(self):
        assert calculate_gst(997, 18) == 179

    def test_exact_half_rounds_up(self):
        # 25 * 18 / 100 = 4.5
        assert calculate_gst(25, 18) == 5

    def test_common_rates(self):
        assert calculate_gst(1000, 18) == 180
        assert calculate_gst(1000, 12) == 120
        assert calculate_gst(1000, 5) == 50

    def test_non_positive_inputs(self):
        assert calculate_gst(0, 18) == 0
        assert calculate_gst(-100, 18) == 0
        assert calculate_gst(1000, -5) == 0
        assert calculate_gst(1000, 0) == 0

    def test_gst_calculation_mismatch(self):
        assert validate_gst_calculation(1000, 18, 180).is_valid is True
        result = validate_gst_calculation(1000, 18, 175)
        assert result.codes() == ["GST_CALCULATION_MISMATCH"]
        assert "Expected ₹180" in result.errors[0].message


# ── Totals, discounts, amounts ──


class TestValidateTaxBreakdown:
    """Tests for validate_tax_breakdown."""

    def test_igst_at_full_rate(self):
        assert validate_tax_breakdown(make_financials(), 18).is_valid is True

    def test_understated_igst(self):
        financials = make_financials(tax=TaxBreakdown(igst=5, total=5), total_amount=1005)
        assert validate_tax_breakdown(financials, 18).codes() == ["GST_CALCULATION_MISMATCH"]

    def test_intra_state_split_rounds_each_half(self):
        # 9% of 1050 is 94.5, so each half rounds up to 95
        financials = make_financials(
            docket_charge=50, tax=TaxBreakdown(cgst=95, sgst=95, total=190), total_amount=1240
        )
        assert validate_tax_breakdown(financials, 18).is_valid is True

    def test_taxed_on_discounted_subtotal(self):
        financials = make_financials(discount=100, tax=TaxBreakdown(igst=162, total=162), total_amount=1062)
        assert validate_tax_breakdown(financials, 18).is_valid is True

    def test_components_must_add_up(self):
        financials = make_financials(tax=TaxBreakdown(igst=180, total=200), total_amount=1200)
        assert validate_tax_breakdown(financials, 18).codes() == ["TAX_BREAKDOWN_MISMATCH"]

    def test_igst_mixed_with_split(self):
        financials = make_financials(tax=TaxBreakdown(cgst=90, sgst=90, igst=180, total=360))
        assert "TAX_BREAKDOWN_MISMATCH" in validate_tax_breakdown(financials, 18).codes()


class TestValidateTotalCalculation:
    """Tests for validate_total_calculation."""

    def test_exact_total(self):
        assert validate_total_calculation(make_financials()).is_valid is True

    def test_within_tolerance(self):
        assert validate_total_calculation(make_financials(total_amount=1181)).is_valid is True
        assert validate_total_calculation(make_financials(total_amount=1179)).is_valid is True

    def test_outside_tolerance(self):
        result = validate_total_calculation(make_financials(total_amount=1182))
        assert result.codes() == ["TOTAL_MISMATCH"]

    def test_discount_is_subtracted(self):
        financials = make_financials(discount=100, total_amount=1080)
        assert validate_total_calculation(financials).is_valid is True

    def test_all_charges_count_towards_subtotal(self):
        financials = make_financials(
            docket_charge=80,
            pickup_charge=100,
            packing_charge=50,
            fuel_surcharge=100,
            handling_fee=50,
            insurance=20,
            total_amount=1580,
        )
        assert financials.subtotal == 1400
        assert validate_total_calculation(financials).is_valid is True


class TestValidateDiscount:
    """Tests for validate_discount."""

    def test_exactly_at_limit_is_valid(self):
        result = validate_discount(1000, 250)
        assert result.is_valid is True

    def test_above_limit(self):
        result = validate_discount(1000, 251)
        assert result.codes() == ["DISCOUNT_EXCEEDS_LIMIT"]
        assert result.warnings == []

    def test_manager_approval_warning(self):
        result = validate_discount(1000, 160)
        assert result.is_valid is True
        assert len(result.warnings) == 1
        assert "approval" in result.warnings[0]

    def test_small_discount_clean(self):
        result = validate_discount(1000, 150)
        assert result.is_valid is True
        assert result.warnings == []


class TestValidateAmounts:
    """Tests for validate_amounts."""

    def test_all_positive(self):
        assert validate_amounts(make_financials()).is_valid is True

    def test_each_negative_field_reported(self):
        result = validate_amounts(make_financials(insurance=-5, discount=-1))
        assert result.codes() == ["NEGATIVE_AMOUNT", "NEGATIVE_AMOUNT"]
        assert {e.field for e in result.errors} == {"insurance", "discount"}

    def test_negative_balance_allowed(self):
        result = validate_amounts(make_financials(advance_paid=1500, balance=-320))
        assert result.is_valid is True


# ── Payment mode ──


class TestValidatePaymentMode:
    """Tests for validate_payment_mode."""

    def test_tbb_requires_enterprise(self):
        customer = SimpleNamespace(tier=CustomerTier.STANDARD)
        result = validate_payment_mode(PaymentMode.TBB, customer)
        assert result.codes() == ["TBB_ENTERPRISE_ONLY"]
        assert "STANDARD" in result.errors[0].message

    def test_tbb_enterprise_ok(self):
        customer = SimpleNamespace(tier=CustomerTier.ENTERPRISE)
        assert validate_payment_mode(PaymentMode.TBB, customer).is_valid is True

    def test_tbb_without_customer(self):
        assert validate_payment_mode("TBB", None).codes() == ["TBB_CUSTOMER_REQUIRED"]

    def test_other_modes_need_no_customer(self):
        assert validate_payment_mode(PaymentMode.PAID, None).is_valid is True
        assert validate_payment_mode(PaymentMode.TO_PAY, None).is_valid is True


# ── Aggregate ──


class TestValidateInvoice:
    """Tests for validate_invoice."""

    def test_clean_invoice(self):
        draft = InvoiceDraft(
            awb="TAC48878789",
            customer_id=uuid.uuid4(),
            payment_mode=PaymentMode.PAID,
            financials=make_financials(),
        )
        customer = CustomerInfo(tier=CustomerTier.STANDARD, gstin="07AABCU9603R1Z2")
        result = validate_invoice(draft, customer)
        assert result.is_valid is True
        assert result.errors == []

    def test_collects_every_error(self):
        draft = InvoiceDraft(
            awb="TAC123",
            customer_id=None,
            payment_mode=PaymentMode.TBB,
            financials=make_financials(discount=300, total_amount=5000, insurance=-1),
        )
        customer = CustomerInfo(tier=CustomerTier.PREMIUM, gstin="BADGSTIN")
        result = validate_invoice(draft, customer)
        assert result.is_valid is False
        assert set(result.codes()) == {
            "AWB_INVALID_FORMAT",
            "CUSTOMER_REQUIRED",
            "GSTIN_INVALID_FORMAT",
            "NEGATIVE_AMOUNT",
            "TOTAL_MISMATCH",
            "DISCOUNT_EXCEEDS_LIMIT",
            "TBB_ENTERPRISE_ONLY",
        }

    def test_warnings_do_not_invalidate(self):
        draft = InvoiceDraft(
            awb="TAC48878789",
            customer_id=uuid.uuid4(),
            payment_mode=PaymentMode.PAID,
            financials=make_financials(discount=200, total_amount=980),
        )
        result = validate_invoice(draft, None)
        assert result.is_valid is True
        assert any("approval" in w for w in result.warnings)

    def test_custom_limits(self):
        draft = InvoiceDraft(
            awb="TAC48878789",
            customer_id=uuid.uuid4(),
            financials=make_financials(discount=200, total_amount=980),
        )
        result = validate_invoice(draft, None, max_discount_ratio=0.1)
        assert result.codes() == ["DISCOUNT_EXCEEDS_LIMIT"]

    def test_gst_checked_against_given_rate(self):
        draft = InvoiceDraft(
            awb="TAC48878789",
            customer_id=uuid.uuid4(),
            financials=make_financials(tax=TaxBreakdown(igst=5, total=5), total_amount=1005),
        )
        assert validate_invoice(draft, None).is_valid is True
        assert validate_invoice(draft, None, gst_rate=18).codes() == ["GST_CALCULATION_MISMATCH"]


# ── Numbering ──


class TestGenerateNextInvoiceNumber:
    """Tests for generate_next_invoice_number."""

    def test_increments_within_year(self):
        assert generate_next_invoice_number("INV-2026-6772", 2026) == "INV-2026-6773"

    def test_resets_on_new_year(self):
        assert generate_next_invoice_number("INV-2026-6772", 2027) == "INV-2027-0001"

    def test_first_invoice(self):
        assert generate_next_invoice_number(None, 2026) == "INV-2026-0001"

    def test_malformed_predecessor(self):
        assert generate_next_invoice_number("garbage", 2026) == "INV-2026-0001"

    def test_zero_padding(self):
        assert generate_next_invoice_number("INV-2026-0009", 2026) == "INV-2026-0010"

    def test_grows_beyond_four_digits(self):
        assert generate_next_invoice_number("INV-2026-9999", 2026) == "INV-2026-10000"

    def test_defaults_to_current_year(self):
        from datetime import date

        year = date.today().year
        assert generate_next_invoice_number(None) == f"INV-{year}-0001"
