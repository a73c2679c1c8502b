"""Enumerations shared by the engine, the ORM models and the API schemas."""

from enum import Enum


class AssetClass(str, Enum):
    """Holding classification."""
    STOCK = "stock"
    BOND = "bond"
    ETF = "etf"
    CRYPTO = "crypto"
    REAL_ESTATE = "real_estate"
    LUXURY = "luxury"
    COMMODITY = "commodity"
    CASH = "cash"


class TransactionType(str, Enum):
    """Transaction kinds. Only BUY and SELL take part in gain matching."""
    BUY = "buy"
    SELL = "sell"
    DIVIDEND = "dividend"
    COUPON = "coupon"
    SPLIT = "split"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class CashFlowType(str, Enum):
    """Cash flow kinds."""
    DIVIDEND = "dividend"
    COUPON = "coupon"
    RENT = "rent"
    INTEREST = "interest"
    OTHER = "other"


class TaxEventType(str, Enum):
    """Persisted tax event kinds."""
    CAPITAL_GAIN = "capital_gain"
    DIVIDEND = "dividend"
    INTEREST = "interest"
    OTHER = "other"


class FifoMode(str, Enum):
    """
    How sells outside the target year treat the FIFO queue.

    DRAIN_ALL_SALES: every sell consumes lots, only target-year sells are reported.
    TARGET_YEAR_ONLY: only target-year sells consume lots (legacy behaviour,
    overstates available quantity when earlier years had sales).
    """
    DRAIN_ALL_SALES = "drain_all_sales"
    TARGET_YEAR_ONLY = "target_year_only"
