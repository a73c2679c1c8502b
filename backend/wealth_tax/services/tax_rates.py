"""
Italian tax rates on investment income (2024).

- 26% standard rate on capital gains, dividends and interest
- 12.5% on Italian government bonds (BTP, BOT, CCT...)
- 26% on crypto gains, kept as its own constant
"""

from decimal import Decimal
from typing import Optional

from ..enums import AssetClass
from .records import BondAttributes, HoldingAttributes

STANDARD_RATE = Decimal("0.26")
GOV_BOND_RATE = Decimal("0.125")
CRYPTO_RATE = Decimal("0.26")
DIVIDEND_RATE = STANDARD_RATE
INTEREST_RATE = STANDARD_RATE

DOMESTIC_COUNTRY = "IT"


def resolve_rate(asset_class: AssetClass, attributes: Optional[HoldingAttributes] = None) -> Decimal:
    """
    Capital gains rate for a holding.

    Checked in order:
    1. Bond issued by Italy -> 12.5%
    2. Crypto -> crypto rate
    3. Anything else -> standard rate
    """
    if (
        asset_class == AssetClass.BOND
        and isinstance(attributes, BondAttributes)
        and attributes.issuing_country == DOMESTIC_COUNTRY
    ):
        return GOV_BOND_RATE

    if asset_class == AssetClass.CRYPTO:
        return CRYPTO_RATE

    return STANDARD_RATE
