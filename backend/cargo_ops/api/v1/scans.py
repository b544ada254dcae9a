"""Stateless scan parsing, for label printers and scanner diagnostics."""

import dataclasses

from fastapi import APIRouter

from cargo_ops.api.errors import http_error
from cargo_ops.errors import ScanFormatError
from cargo_ops.scanning.parser import parse_scan_input
from cargo_ops.schemas.scan import ScanParseRequest, ScanTokenResponse

router = APIRouter()


@router.post("/parse", response_model=ScanTokenResponse)
async def parse_scan(request: ScanParseRequest) -> ScanTokenResponse:
    try:
        token = parse_scan_input(request.raw)
    except ScanFormatError as e:
        raise http_error(e) from e
    return ScanTokenResponse(**dataclasses.asdict(token))
