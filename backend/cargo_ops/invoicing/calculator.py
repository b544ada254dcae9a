"""Freight charge calculator.

Produces InvoiceFinancials that pass the invoice validators by construction:
discount is applied before GST, and total = subtotal + tax - discount.
"""

import math

from cargo_ops.invoicing.validators import calculate_gst
from cargo_ops.models.manifest import ManifestType
from cargo_ops.models.shipment import ServiceLevel
from cargo_ops.schemas.invoice import InvoiceFinancials, TaxBreakdown

RATE_PER_KG = {
    ManifestType.AIR: 120.0,
    ManifestType.TRUCK: 40.0,
}
MIN_CHARGEABLE_WEIGHT = {
    ManifestType.AIR: 1.0,
    ManifestType.TRUCK: 10.0,
}
EXPRESS_MULTIPLIER = 1.5

FUEL_SURCHARGE_RATE = 0.10
INSURANCE_RATE = 0.02
HANDLING_FEE = 50.0
DOCKET_CHARGE = 80.0
PICKUP_CHARGE = 100.0
PACKING_CHARGE = 50.0


def round_rupees(amount: float) -> int:
    """Round half-up to whole rupees."""
    return math.floor(amount + 0.5)


def rate_per_kg(mode: ManifestType | str, service_level: ServiceLevel | str = ServiceLevel.STANDARD) -> float:
    rate = RATE_PER_KG[ManifestType(mode)]
    if ServiceLevel(service_level) == ServiceLevel.EXPRESS:
        rate *= EXPRESS_MULTIPLIER
    return rate


def chargeable_weight(weight: float, mode: ManifestType | str) -> float:
    return max(weight, MIN_CHARGEABLE_WEIGHT[ManifestType(mode)])


def build_financials(
    *,
    base_freight: float,
    docket_charge: float = 0.0,
    pickup_charge: float = 0.0,
    packing_charge: float = 0.0,
    fuel_surcharge: float = 0.0,
    handling_fee: float = 0.0,
    insurance: float = 0.0,
    discount: float = 0.0,
    advance_paid: float = 0.0,
    gst_rate: float = 18.0,
    intra_state: bool = False,
) -> InvoiceFinancials:
    """Assemble charges into InvoiceFinancials with GST and balance filled in.

    Intra-state supplies split GST into CGST and SGST at half the rate each;
    inter-state supplies carry the full rate as IGST.
    """
    subtotal = (
        base_freight + docket_charge + pickup_charge + packing_charge
        + fuel_surcharge + handling_fee + insurance
    )
    taxable = subtotal - discount

    if intra_state:
        cgst = calculate_gst(taxable, gst_rate / 2)
        sgst = calculate_gst(taxable, gst_rate / 2)
        tax = TaxBreakdown(cgst=cgst, sgst=sgst, igst=0, total=cgst + sgst)
    else:
        igst = calculate_gst(taxable, gst_rate)
        tax = TaxBreakdown(cgst=0, sgst=0, igst=igst, total=igst)

    total_amount = taxable + tax.total
    return InvoiceFinancials(
        base_freight=base_freight,
        docket_charge=docket_charge,
        pickup_charge=pickup_charge,
        packing_charge=packing_charge,
        fuel_surcharge=fuel_surcharge,
        handling_fee=handling_fee,
        insurance=insurance,
        tax=tax,
        discount=discount,
        total_amount=total_amount,
        advance_paid=advance_paid,
        balance=total_amount - advance_paid,
    )


def calculate_freight(
    weight: float,
    mode: ManifestType | str,
    service_level: ServiceLevel | str = ServiceLevel.STANDARD,
    *,
    gst_rate: float = 18.0,
    intra_state: bool = False,
) -> InvoiceFinancials:
    """Standard tariff for a consignment of ``weight`` kg."""
    base_freight = round_rupees(chargeable_weight(weight, mode) * rate_per_kg(mode, service_level))
    return build_financials(
        base_freight=base_freight,
        docket_charge=DOCKET_CHARGE,
        pickup_charge=PICKUP_CHARGE,
        packing_charge=PACKING_CHARGE,
        fuel_surcharge=round_rupees(base_freight * FUEL_SURCHARGE_RATE),
        handling_fee=HANDLING_FEE,
        insurance=round_rupees(base_freight * INSURANCE_RATE),
        gst_rate=gst_rate,
        intra_state=intra_state,
    )
