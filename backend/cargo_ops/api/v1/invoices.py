"""Invoice endpoints: dry-run validation, freight quotes, creation, lookup, numbering."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cargo_ops.api.errors import http_error
from cargo_ops.dependencies import get_db, get_invoice_service
from cargo_ops.errors import CargoOpsError
from cargo_ops.invoicing.service import InvoiceService
from cargo_ops.schemas.invoice import (
    FreightQuoteRequest,
    InvoiceCreatedResponse,
    InvoiceCreateRequest,
    InvoiceFinancials,
    InvoiceResponse,
    InvoiceValidationRequest,
    NextInvoiceNumberResponse,
)
from cargo_ops.schemas.validation import ValidationResult

router = APIRouter()


@router.post("/validate", response_model=ValidationResult)
async def validate_invoice(
    request: InvoiceValidationRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> ValidationResult:
    """Run every invoice rule and return all errors and warnings at once."""
    return service.validate(request)


@router.post("/quote", response_model=InvoiceFinancials)
async def quote_freight(
    request: FreightQuoteRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceFinancials:
    """Standard tariff for a consignment; the result passes invoice validation as-is."""
    return service.quote(request)


@router.get("/next-number", response_model=NextInvoiceNumberResponse)
async def next_invoice_number(
    year: int | None = None,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> NextInvoiceNumberResponse:
    return NextInvoiceNumberResponse(invoice_no=await service.next_invoice_no(db, year))


@router.post("", response_model=InvoiceCreatedResponse, status_code=201)
async def create_invoice(
    request: InvoiceCreateRequest,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceCreatedResponse:
    try:
        invoice, warnings = await service.create_invoice(db, request)
    except CargoOpsError as e:
        raise http_error(e) from e
    return InvoiceCreatedResponse(invoice=InvoiceResponse.model_validate(invoice), warnings=warnings)


@router.get("/{invoice_no}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_no: str,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResponse:
    try:
        invoice = await service.get_invoice(db, invoice_no)
    except CargoOpsError as e:
        raise http_error(e) from e
    return InvoiceResponse.model_validate(invoice)
