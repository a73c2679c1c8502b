"""
Input records for the tax engine.

Plain dataclasses, independent of the database layer. Amounts are Decimal
and already expressed in the reporting currency (EUR).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from ..enums import AssetClass, TransactionType, CashFlowType


@dataclass(frozen=True)
class BondAttributes:
    """Bond metadata. The issuing country selects the government-bond rate."""
    issuing_country: Optional[str] = None
    isin: Optional[str] = None
    maturity_date: Optional[date] = None


@dataclass(frozen=True)
class MarketAttributes:
    """Stock/ETF metadata."""
    isin: Optional[str] = None
    exchange: Optional[str] = None
    sector: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class CryptoAttributes:
    """Crypto metadata."""
    blockchain: Optional[str] = None
    wallet_address: Optional[str] = None


@dataclass(frozen=True)
class RealEstateAttributes:
    """Real estate metadata."""
    address: Optional[str] = None
    property_type: Optional[str] = None
    square_meters: Optional[Decimal] = None


HoldingAttributes = Union[BondAttributes, MarketAttributes, CryptoAttributes, RealEstateAttributes]


def _parse_date(value) -> Optional[date]:
    """ISO date or None. Unparseable values are dropped."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


def _parse_decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def _country_code(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return None


def attributes_from_metadata(asset_class: AssetClass, metadata: Optional[dict]) -> Optional[HoldingAttributes]:
    """
    Convert a stored metadata dict into the typed attributes for an asset class.

    Metadata is free-form user input, so malformed values become None.
    """
    if not isinstance(metadata, dict):
        metadata = {}

    if asset_class == AssetClass.BOND:
        country = _country_code(metadata.get("issuing_country")) or _country_code(metadata.get("country"))
        return BondAttributes(
            issuing_country=country,
            isin=metadata.get("isin"),
            maturity_date=_parse_date(metadata.get("maturity_date")),
        )

    if asset_class in (AssetClass.STOCK, AssetClass.ETF):
        return MarketAttributes(
            isin=metadata.get("isin"),
            exchange=metadata.get("exchange"),
            sector=metadata.get("sector"),
            country=metadata.get("country"),
        )

    if asset_class == AssetClass.CRYPTO:
        return CryptoAttributes(
            blockchain=metadata.get("blockchain"),
            wallet_address=metadata.get("wallet_address"),
        )

    if asset_class == AssetClass.REAL_ESTATE:
        return RealEstateAttributes(
            address=metadata.get("address"),
            property_type=metadata.get("property_type"),
            square_meters=_parse_decimal(metadata.get("square_meters")),
        )

    return None


@dataclass(frozen=True)
class Holding:
    """A holding (asset) as seen by the engine."""
    id: str
    asset_class: AssetClass
    name: str
    attributes: Optional[HoldingAttributes] = None

    # Only used by the crypto threshold check
    quantity: Decimal = Decimal("0")
    current_price: Decimal = Decimal("0")


@dataclass(frozen=True)
class Transaction:
    """A transaction on a holding."""
    id: str
    holding_id: str
    transaction_type: TransactionType
    quantity: Decimal
    unit_price: Decimal
    transaction_date: date
    fees: Decimal = Decimal("0")
    notes: Optional[str] = None


@dataclass(frozen=True)
class CashFlow:
    """A cash flow, optionally attached to a holding."""
    id: str
    flow_type: CashFlowType
    amount: Decimal
    payment_date: date
    holding_id: Optional[str] = None
    is_forecasted: bool = False
    is_recurring: bool = False
