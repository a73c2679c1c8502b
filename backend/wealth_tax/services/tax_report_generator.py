"""
Italian Tax Report Generator

Combines the engine components into one yearly result:
- Capital gains (FIFO) at 26% / 12.5% on Italian government bonds
- Dividends and coupons at 26%
- Interest at 26%
- Crypto holdings threshold warning (€2,000)

Produces the calculation result, persistable tax events and a plain-text
report for download. Losses lower the taxable income but never the tax owed.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Optional

from ..enums import CashFlowType, FifoMode, TaxEventType
from .crypto_threshold import CryptoThresholdStatus, check_crypto_threshold
from .income_aggregator import (
    DIVIDEND_FLOW_TYPES,
    INTEREST_FLOW_TYPES,
    aggregate_income,
    taxable_flows,
)
from .lot_matcher import CapitalGainRecord, match_gains
from .records import CashFlow, Holding, Transaction
from .tax_rates import DIVIDEND_RATE, INTEREST_RATE

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
TENTH = Decimal("0.1")


@dataclass(frozen=True)
class TaxBreakdown:
    """Tax owed per category."""
    capital_gains_tax: Decimal = Decimal("0")
    dividend_tax: Decimal = Decimal("0")
    interest_tax: Decimal = Decimal("0")


@dataclass(frozen=True)
class TaxCalculationResult:
    """Result of the tax calculation for a year."""
    tax_year: int
    capital_gains: tuple[CapitalGainRecord, ...] = ()

    # Signed: a net-loss year reports a negative total
    total_capital_gains: Decimal = Decimal("0")
    dividend_income: Decimal = Decimal("0")
    interest_income: Decimal = Decimal("0")
    total_taxable_income: Decimal = Decimal("0")

    total_tax_owed: Decimal = Decimal("0")
    breakdown: TaxBreakdown = field(default_factory=TaxBreakdown)

    crypto_threshold: Optional[CryptoThresholdStatus] = None

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        data = {
            "tax_year": self.tax_year,
            "capital_gains": [g.to_dict() for g in self.capital_gains],
            "total_capital_gains": float(self.total_capital_gains),
            "dividend_income": float(self.dividend_income),
            "interest_income": float(self.interest_income),
            "total_taxable_income": float(self.total_taxable_income),
            "total_tax_owed": float(self.total_tax_owed),
            "breakdown": {
                "capital_gains_tax": float(self.breakdown.capital_gains_tax),
                "dividend_tax": float(self.breakdown.dividend_tax),
                "interest_tax": float(self.breakdown.interest_tax),
            },
        }
        if self.crypto_threshold is not None:
            data["crypto_threshold"] = self.crypto_threshold.to_dict()
        return data


@dataclass(frozen=True)
class TaxEvent:
    """A taxable event ready to be stored. Ids and timestamps are assigned by storage."""
    user_id: str
    tax_year: int
    event_type: TaxEventType
    taxable_amount: Decimal
    tax_rate: Decimal
    tax_owed: Decimal
    event_date: date
    holding_id: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "tax_year": self.tax_year,
            "event_type": self.event_type.value,
            "taxable_amount": float(self.taxable_amount),
            "tax_rate": float(self.tax_rate),
            "tax_owed": float(self.tax_owed),
            "asset_id": self.holding_id,
            "event_date": self.event_date.isoformat(),
            "notes": self.notes,
        }


def format_money(amount: Decimal) -> str:
    """Two decimals, half-up. Presentation only."""
    return f"{amount.quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def format_rate(rate: Decimal) -> str:
    """Rate as a percentage with one decimal (0.125 -> 12.5)."""
    return f"{(rate * 100).quantize(TENTH, rounding=ROUND_HALF_UP):.1f}"


def format_quantity(quantity: Decimal) -> str:
    """Quantity without trailing zeros."""
    return f"{quantity.normalize():f}"


class ItalianTaxEngine:
    """
    Italian capital gains and investment income tax engine.

    Stateless apart from the FIFO mode: every call builds its own lot queues,
    so one instance can serve concurrent callers.
    """

    def __init__(self, fifo_mode: FifoMode = FifoMode.DRAIN_ALL_SALES):
        self.fifo_mode = fifo_mode

    def calculate_taxes(
        self,
        transactions: list[Transaction],
        holdings: list[Holding],
        cash_flows: list[CashFlow],
        tax_year: int,
        current_prices: Optional[Mapping[str, Decimal]] = None
    ) -> TaxCalculationResult:
        """Calculate capital gains, capital income and tax owed for a year."""
        capital_gains = match_gains(transactions, holdings, tax_year, self.fifo_mode)
        total_capital_gains = sum((g.gain for g in capital_gains), Decimal("0"))
        capital_gains_tax = sum((g.tax_owed for g in capital_gains), Decimal("0"))

        income = aggregate_income(cash_flows, tax_year)
        dividend_tax = income.dividend_income * DIVIDEND_RATE
        interest_tax = income.interest_income * INTEREST_RATE

        crypto = check_crypto_threshold(holdings, current_prices)

        result = TaxCalculationResult(
            tax_year=tax_year,
            capital_gains=tuple(capital_gains),
            total_capital_gains=total_capital_gains,
            dividend_income=income.dividend_income,
            interest_income=income.interest_income,
            total_taxable_income=total_capital_gains + income.dividend_income + income.interest_income,
            total_tax_owed=capital_gains_tax + dividend_tax + interest_tax,
            breakdown=TaxBreakdown(
                capital_gains_tax=capital_gains_tax,
                dividend_tax=dividend_tax,
                interest_tax=interest_tax
            ),
            crypto_threshold=crypto
        )

        logger.info(
            "Tax year %d: %d gain records, taxable %s, tax owed %s",
            tax_year, len(capital_gains),
            format_money(result.total_taxable_income), format_money(result.total_tax_owed)
        )
        if crypto.exceeded:
            logger.info("Crypto holdings %s above threshold %s", format_money(crypto.total_value), crypto.threshold)

        return result

    def generate_tax_events(
        self,
        user_id: str,
        transactions: list[Transaction],
        holdings: list[Holding],
        cash_flows: list[CashFlow],
        tax_year: int
    ) -> list[TaxEvent]:
        """
        Project the calculation into one event per taxable item.

        Positive gain records, then each dividend/coupon payment, then each
        interest payment. Losses produce no event.
        """
        calculation = self.calculate_taxes(transactions, holdings, cash_flows, tax_year)
        events = []

        for gain in calculation.capital_gains:
            if gain.gain > 0:
                events.append(TaxEvent(
                    user_id=user_id,
                    tax_year=tax_year,
                    event_type=TaxEventType.CAPITAL_GAIN,
                    taxable_amount=gain.gain,
                    tax_rate=gain.tax_rate,
                    tax_owed=gain.tax_owed,
                    event_date=gain.sale_date,
                    holding_id=gain.holding_id,
                    notes=f"Sale of {format_quantity(gain.quantity)} units of {gain.holding_name}"
                ))

        for cf in taxable_flows(cash_flows, tax_year, DIVIDEND_FLOW_TYPES):
            events.append(TaxEvent(
                user_id=user_id,
                tax_year=tax_year,
                event_type=TaxEventType.DIVIDEND,
                taxable_amount=cf.amount,
                tax_rate=DIVIDEND_RATE,
                tax_owed=cf.amount * DIVIDEND_RATE,
                event_date=cf.payment_date,
                holding_id=cf.holding_id,
                notes="Coupon payment" if cf.flow_type == CashFlowType.COUPON else "Dividend payment"
            ))

        for cf in taxable_flows(cash_flows, tax_year, INTEREST_FLOW_TYPES):
            events.append(TaxEvent(
                user_id=user_id,
                tax_year=tax_year,
                event_type=TaxEventType.INTEREST,
                taxable_amount=cf.amount,
                tax_rate=INTEREST_RATE,
                tax_owed=cf.amount * INTEREST_RATE,
                event_date=cf.payment_date,
                holding_id=cf.holding_id,
                notes="Interest payment"
            ))

        return events

    def generate_tax_report(
        self,
        transactions: list[Transaction],
        holdings: list[Holding],
        cash_flows: list[CashFlow],
        tax_year: int
    ) -> str:
        """Plain-text report of the calculation, for export."""
        calculation = self.calculate_taxes(transactions, holdings, cash_flows, tax_year)
        return render_report(calculation)


def render_report(calculation: TaxCalculationResult) -> str:
    """
    Render a result as text.

    Sections, in order: capital gains detail, capital income, totals.
    """
    lines = [
        f"DICHIARAZIONE REDDITI {calculation.tax_year}",
        "=" * 50,
        "",
        "CAPITAL GAINS:",
    ]

    for idx, gain in enumerate(calculation.capital_gains, start=1):
        lines.extend([
            f"  {idx}. {gain.holding_name}",
            f"     Acquisto: {gain.purchase_date.isoformat()} @ EUR {format_money(gain.purchase_price)}",
            f"     Vendita: {gain.sale_date.isoformat()} @ EUR {format_money(gain.sale_price)}",
            f"     Quantita': {format_quantity(gain.quantity)}",
            f"     Guadagno: EUR {format_money(gain.gain)}",
            f"     Imposta ({format_rate(gain.tax_rate)}%): EUR {format_money(gain.tax_owed)}",
            "",
        ])

    breakdown = calculation.breakdown
    lines.extend([
        "",
        "REDDITI DA CAPITALE:",
        f"  Dividendi: EUR {format_money(calculation.dividend_income)}",
        f"  Imposta dividendi: EUR {format_money(breakdown.dividend_tax)}",
        f"  Interessi: EUR {format_money(calculation.interest_income)}",
        f"  Imposta interessi: EUR {format_money(breakdown.interest_tax)}",
        "",
        "",
        "TOTALE:",
        f"  Reddito imponibile: EUR {format_money(calculation.total_taxable_income)}",
        f"  Imposte dovute: EUR {format_money(calculation.total_tax_owed)}",
    ])

    return "\n".join(lines) + "\n"


def calculate_taxes(
    transactions: list[Transaction],
    holdings: list[Holding],
    cash_flows: list[CashFlow],
    tax_year: int
) -> TaxCalculationResult:
    """Calculate taxes with the default FIFO mode."""
    return ItalianTaxEngine().calculate_taxes(transactions, holdings, cash_flows, tax_year)


def generate_tax_events(
    user_id: str,
    transactions: list[Transaction],
    holdings: list[Holding],
    cash_flows: list[CashFlow],
    tax_year: int
) -> list[TaxEvent]:
    return ItalianTaxEngine().generate_tax_events(user_id, transactions, holdings, cash_flows, tax_year)


def generate_tax_report(
    transactions: list[Transaction],
    holdings: list[Holding],
    cash_flows: list[CashFlow],
    tax_year: int
) -> str:
    return ItalianTaxEngine().generate_tax_report(transactions, holdings, cash_flows, tax_year)
