"""
Crypto holdings threshold check.

Flags portfolios whose current crypto value is above €2,000. The check is
informational: it drives a warning and never changes the tax owed.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from ..enums import AssetClass
from .records import Holding

CRYPTO_THRESHOLD = Decimal("2000")


@dataclass(frozen=True)
class CryptoThresholdStatus:
    """Outcome of the threshold check."""
    exceeded: bool
    total_value: Decimal
    threshold: Decimal = CRYPTO_THRESHOLD

    def to_dict(self) -> dict:
        return {
            "exceeded": self.exceeded,
            "total_value": float(self.total_value),
            "threshold": float(self.threshold),
        }


def check_crypto_threshold(
    holdings: list[Holding],
    current_prices: Optional[Mapping[str, Decimal]] = None
) -> CryptoThresholdStatus:
    """
    Compare the current value of all crypto holdings with the threshold.

    Value is quantity x current unit price, as of now (not tied to a tax
    year). ``current_prices`` overrides the price stored on the holding; a missing or
    None entry falls back to it. Float prices are converted through str.
    """
    current_prices = current_prices or {}
    total_value = Decimal("0")

    for holding in holdings:
        if holding.asset_class != AssetClass.CRYPTO:
            continue
        price = current_prices.get(holding.id)
        if price is None:
            price = holding.current_price
        total_value += holding.quantity * Decimal(str(price))

    return CryptoThresholdStatus(
        exceeded=total_value > CRYPTO_THRESHOLD,
        total_value=total_value
    )
