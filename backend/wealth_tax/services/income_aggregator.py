"""
Capital Income Aggregator

Sums realized (non-forecasted) investment income for a tax year:
- Dividends and bond coupons -> dividend income
- Interest -> interest income
- Rent and other flows are not part of the modeled rules

Both are taxed at the flat 26% rate.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..enums import CashFlowType
from .records import CashFlow
from .validation import validate_tax_year

DIVIDEND_FLOW_TYPES = frozenset({CashFlowType.DIVIDEND, CashFlowType.COUPON})
INTEREST_FLOW_TYPES = frozenset({CashFlowType.INTEREST})


@dataclass(frozen=True)
class IncomeTotals:
    """Income received in a tax year."""
    dividend_income: Decimal = Decimal("0")
    interest_income: Decimal = Decimal("0")


def taxable_flows(
    cash_flows: Iterable[CashFlow],
    tax_year: int,
    flow_types: frozenset
) -> list[CashFlow]:
    """Received flows of the given kinds paid in the tax year, in input order."""
    return [
        cf for cf in cash_flows
        if cf.flow_type in flow_types
        and not cf.is_forecasted
        and cf.payment_date.year == tax_year
    ]


def aggregate_income(cash_flows: list[CashFlow], tax_year: int) -> IncomeTotals:
    """Sum dividend/coupon and interest income for a tax year."""
    validate_tax_year(tax_year)

    dividends = taxable_flows(cash_flows, tax_year, DIVIDEND_FLOW_TYPES)
    interest = taxable_flows(cash_flows, tax_year, INTEREST_FLOW_TYPES)

    return IncomeTotals(
        dividend_income=sum((cf.amount for cf in dividends), Decimal("0")),
        interest_income=sum((cf.amount for cf in interest), Decimal("0"))
    )
