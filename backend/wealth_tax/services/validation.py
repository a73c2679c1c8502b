"""Argument checks run before any computation."""

from datetime import MAXYEAR, MINYEAR
from typing import Iterable

from ..exceptions import TaxValidationError
from .records import Transaction


def validate_tax_year(tax_year) -> int:
    """Reject anything that is not a calendar year usable with ``datetime.date``."""
    if isinstance(tax_year, bool) or not isinstance(tax_year, int):
        raise TaxValidationError(f"Tax year must be an integer, got {tax_year!r}", field="tax_year")
    if not MINYEAR <= tax_year <= MAXYEAR:
        raise TaxValidationError(f"Tax year out of range: {tax_year}", field="tax_year")
    return tax_year


def validate_transactions(transactions: Iterable[Transaction]):
    """Negative quantities or prices are data-quality errors, not losses."""
    for trans in transactions:
        if trans.quantity < 0:
            raise TaxValidationError(
                f"Transaction {trans.id} has negative quantity {trans.quantity}",
                field="quantity",
                record_id=trans.id
            )
        if trans.unit_price < 0:
            raise TaxValidationError(
                f"Transaction {trans.id} has negative unit price {trans.unit_price}",
                field="unit_price",
                record_id=trans.id
            )
