"""Errors raised by the tax engine."""

from typing import Optional


class TaxValidationError(ValueError):
    """Input rejected before computation (bad tax year, negative quantity or price)."""

    def __init__(self, message: str, field: Optional[str] = None, record_id: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.record_id = record_id
