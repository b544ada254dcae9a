"""Structured validation results listing every violated rule."""

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    field: str
    message: str
    code: str


class ValidationResult(BaseModel):
    is_valid: bool = True
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        errors: list[ValidationIssue] | None = None,
        warnings: list[str] | None = None,
    ) -> "ValidationResult":
        errors = errors or []
        return cls(is_valid=not errors, errors=errors, warnings=warnings or [])

    @classmethod
    def merge(cls, *results: "ValidationResult") -> "ValidationResult":
        errors: list[ValidationIssue] = []
        warnings: list[str] = []
        for result in results:
            errors.extend(result.errors)
            warnings.extend(result.warnings)
        return cls.build(errors, warnings)

    def codes(self) -> list[str]:
        return [e.code for e in self.errors]
