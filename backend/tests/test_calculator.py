"""Tests for the freight charge calculator."""

import pytest

from cargo_ops.invoicing.calculator import (
    build_financials,
    calculate_freight,
    chargeable_weight,
    rate_per_kg,
)
from cargo_ops.invoicing.validators import validate_amounts, validate_total_calculation
from cargo_ops.models.manifest import ManifestType
from cargo_ops.models.shipment import ServiceLevel


class TestRates:
    """Tests for rate_per_kg and chargeable_weight."""

    def test_base_rates(self):
        assert rate_per_kg(ManifestType.AIR) == 120
        assert rate_per_kg("TRUCK") == 40

    def test_express_multiplier(self):
        assert rate_per_kg(ManifestType.AIR, ServiceLevel.EXPRESS) == 180
        assert rate_per_kg(ManifestType.TRUCK, "EXPRESS") == 60

    def test_minimum_chargeable_weight(self):
        assert chargeable_weight(0.4, ManifestType.AIR) == 1
        assert chargeable_weight(3, ManifestType.TRUCK) == 10
        assert chargeable_weight(25, ManifestType.TRUCK) == 25

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            rate_per_kg("SEA")


class TestCalculateFreight:
    """Tests for calculate_freight."""

    def test_air_standard(self):
        fin = calculate_freight(10, ManifestType.AIR)
        assert fin.base_freight == 1200
        assert fin.fuel_surcharge == 120
        assert fin.insurance == 24
        assert fin.handling_fee == 50
        assert fin.docket_charge == 80
        assert fin.pickup_charge == 100
        assert fin.packing_charge == 50
        assert fin.subtotal == 1624
        # 1624 * 18% = 292.32
        assert fin.tax.igst == 292
        assert fin.tax.cgst == 0
        assert fin.total_amount == 1916
        assert fin.balance == 1916

    def test_truck_minimum_weight_applies(self):
        fin = calculate_freight(2, ManifestType.TRUCK)
        assert fin.base_freight == 400

    def test_intra_state_splits_gst(self):
        fin = calculate_freight(10, ManifestType.AIR, intra_state=True)
        # 1624 * 9% = 146.16 on each half
        assert fin.tax.cgst == 146
        assert fin.tax.sgst == 146
        assert fin.tax.igst == 0
        assert fin.tax.total == 292

    def test_output_passes_validators(self):
        fin = calculate_freight(7.3, ManifestType.AIR, ServiceLevel.EXPRESS)
        assert validate_total_calculation(fin).is_valid is True
        assert validate_amounts(fin).is_valid is True


class TestBuildFinancials:
    """Tests for build_financials."""

    def test_discount_applied_before_gst(self):
        fin = build_financials(base_freight=1000, discount=100)
        # (1000 - 100) * 18% = 162
        assert fin.tax.total == 162
        assert fin.total_amount == 1062
        assert validate_total_calculation(fin).is_valid is True

    def test_advance_reduces_balance(self):
        fin = build_financials(base_freight=1000, advance_paid=1500)
        assert fin.total_amount == 1180
        assert fin.balance == -320
