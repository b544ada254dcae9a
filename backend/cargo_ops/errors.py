"""Domain exceptions raised by parsing and orchestration code.

Validators never raise these; they return a ValidationResult instead.
Every class derives from ValueError so routes can keep a single
``except ValueError`` fallback.
"""


class CargoOpsError(ValueError):
    """Base class for expected, user-reportable failures."""

    code = "CARGO_OPS_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}


class ScanFormatError(CargoOpsError):
    """Raw scan text matches none of the recognised shapes."""

    code = "INVALID_FORMAT"


class UnknownStatusError(CargoOpsError):
    code = "UNKNOWN_STATUS"


class NotFoundError(CargoOpsError):
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: object | None = None):
        message = (
            f"{resource} '{identifier}' not found" if identifier is not None else f"{resource} not found"
        )
        super().__init__(message, details={"resource": resource, "identifier": str(identifier)})


class ConflictError(CargoOpsError):
    code = "CONFLICT"


class ManifestNotEditableError(CargoOpsError):
    code = "MANIFEST_CLOSED"


class ManifestTransitionError(CargoOpsError):
    """The stored manifest status did not satisfy the transition precondition."""

    code = "PRECONDITION_FAILED"


class InvalidStatusTransitionError(CargoOpsError):
    code = "INVALID_TRANSITION"


class InvoiceValidationError(CargoOpsError):
    code = "INVOICE_INVALID"

    def __init__(self, result):
        self.result = result
        summary = "; ".join(f"{e.field}: {e.message}" for e in result.errors)
        super().__init__(f"Invoice failed validation: {summary}")
