"""Map domain exceptions onto HTTP responses."""

from fastapi import HTTPException

from cargo_ops.errors import (
    CargoOpsError,
    ConflictError,
    InvalidStatusTransitionError,
    InvoiceValidationError,
    ManifestNotEditableError,
    ManifestTransitionError,
    NotFoundError,
)

STATUS_BY_ERROR: list[tuple[type[CargoOpsError], int]] = [
    (NotFoundError, 404),
    (ConflictError, 409),
    (ManifestNotEditableError, 409),
    (ManifestTransitionError, 409),
    (InvalidStatusTransitionError, 409),
    (InvoiceValidationError, 422),
]


def http_error(exc: CargoOpsError) -> HTTPException:
    status_code = next((code for cls, code in STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    detail = {"code": exc.code, "message": exc.message}
    if isinstance(exc, InvoiceValidationError):
        detail["errors"] = [e.model_dump() for e in exc.result.errors]
        detail["warnings"] = exc.result.warnings
    elif exc.details:
        detail["details"] = exc.details
    return HTTPException(status_code=status_code, detail=detail)
