from .records import Holding, Transaction, CashFlow, attributes_from_metadata
from .lot_matcher import FifoLotMatcher, CapitalGainRecord, match_gains
from .tax_rates import resolve_rate
from .income_aggregator import IncomeTotals, aggregate_income
from .crypto_threshold import CryptoThresholdStatus, check_crypto_threshold
from .tax_report_generator import (
    ItalianTaxEngine,
    TaxCalculationResult,
    TaxEvent,
    calculate_taxes,
    generate_tax_events,
    generate_tax_report,
    render_report,
)

__all__ = [
    "Holding",
    "Transaction",
    "CashFlow",
    "attributes_from_metadata",
    "FifoLotMatcher",
    "CapitalGainRecord",
    "match_gains",
    "resolve_rate",
    "IncomeTotals",
    "aggregate_income",
    "CryptoThresholdStatus",
    "check_crypto_threshold",
    "ItalianTaxEngine",
    "TaxCalculationResult",
    "TaxEvent",
    "calculate_taxes",
    "generate_tax_events",
    "generate_tax_report",
    "render_report",
]
