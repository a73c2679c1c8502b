"""
FIFO Lot Matcher

Matches sales against earlier purchases of the same holding, oldest lot first,
and produces one CapitalGainRecord per matched lot slice.

Rules:
- Buys append a lot to the back of the holding's queue
- Sells consume lots from the front
- Only sells dated in the tax year produce records
- A sell larger than the available lots stops matching when the queue is
  empty; the excess quantity is dropped (incomplete history is tolerated)
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from ..enums import AssetClass, FifoMode, TransactionType
from .records import Holding, Transaction
from .tax_rates import resolve_rate
from .validation import validate_tax_year, validate_transactions

logger = logging.getLogger(__name__)


@dataclass
class Lot:
    """Purchased quantity still available for matching."""
    remaining_quantity: Decimal
    unit_price: Decimal
    purchase_date: date


@dataclass(frozen=True)
class CapitalGainRecord:
    """A sale slice matched against one lot."""
    holding_id: str
    holding_name: str
    asset_class: AssetClass
    purchase_date: date
    sale_date: date
    purchase_price: Decimal
    sale_price: Decimal
    quantity: Decimal
    gain: Decimal
    tax_rate: Decimal
    tax_owed: Decimal

    def to_dict(self) -> dict:
        return {
            "asset_id": self.holding_id,
            "asset_name": self.holding_name,
            "asset_type": self.asset_class.value,
            "purchase_date": self.purchase_date.isoformat(),
            "sale_date": self.sale_date.isoformat(),
            "purchase_price": float(self.purchase_price),
            "sale_price": float(self.sale_price),
            "quantity": float(self.quantity),
            "gain": float(self.gain),
            "tax_rate": float(self.tax_rate),
            "tax_owed": float(self.tax_owed),
        }


class FifoLotMatcher:
    """
    FIFO queue for a single holding.

    A fresh matcher is built for every calculation; it is never shared.
    """

    def __init__(
        self,
        holding: Holding,
        tax_year: int,
        fifo_mode: FifoMode = FifoMode.DRAIN_ALL_SALES
    ):
        self.holding = holding
        self.tax_year = tax_year
        self.fifo_mode = fifo_mode
        self.lots: deque[Lot] = deque()

    def process(self, transaction: Transaction) -> list[CapitalGainRecord]:
        """Apply one transaction to the queue. Returns records for target-year sells."""
        if transaction.transaction_type == TransactionType.BUY:
            self.add_purchase(transaction)
            return []

        if transaction.transaction_type == TransactionType.SELL:
            in_year = transaction.transaction_date.year == self.tax_year
            if in_year:
                return self.process_sale(transaction)
            if self.fifo_mode == FifoMode.DRAIN_ALL_SALES:
                self._consume(transaction)
            return []

        # dividend, coupon, split, deposit, withdrawal
        return []

    def add_purchase(self, transaction: Transaction):
        """Push a new lot on the back of the queue."""
        self.lots.append(Lot(
            remaining_quantity=transaction.quantity,
            unit_price=transaction.unit_price,
            purchase_date=transaction.transaction_date
        ))

    def process_sale(self, transaction: Transaction) -> list[CapitalGainRecord]:
        """Match a sale against the queue and build gain records."""
        records = []
        for lot, matched_qty in self._consume(transaction):
            gain = matched_qty * (transaction.unit_price - lot.unit_price)
            rate = resolve_rate(self.holding.asset_class, self.holding.attributes)

            records.append(CapitalGainRecord(
                holding_id=self.holding.id,
                holding_name=self.holding.name,
                asset_class=self.holding.asset_class,
                purchase_date=lot.purchase_date,
                sale_date=transaction.transaction_date,
                purchase_price=lot.unit_price,
                sale_price=transaction.unit_price,
                quantity=matched_qty,
                gain=gain,
                tax_rate=rate,
                tax_owed=gain * rate if gain > 0 else Decimal("0")
            ))

        return records

    def _consume(self, transaction: Transaction) -> list[tuple[Lot, Decimal]]:
        """Take the sold quantity from the front of the queue."""
        remaining = transaction.quantity
        taken = []

        while remaining > 0 and self.lots:
            lot = self.lots[0]
            matched_qty = min(remaining, lot.remaining_quantity)
            taken.append((lot, matched_qty))

            lot.remaining_quantity -= matched_qty
            remaining -= matched_qty

            if lot.remaining_quantity == 0:
                self.lots.popleft()

        if remaining > 0:
            logger.debug(
                "Sale %s of %s exceeds available lots, %s units unmatched",
                transaction.id, self.holding.id, remaining
            )

        return taken

    def get_remaining_quantity(self) -> Decimal:
        """Total quantity still held in the queue."""
        return sum((lot.remaining_quantity for lot in self.lots), Decimal("0"))


def group_by_holding(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    """Partition by holding id, keeping first-appearance order of holdings and arrival order within each."""
    groups: dict[str, list[Transaction]] = {}
    for trans in transactions:
        groups.setdefault(trans.holding_id, []).append(trans)
    return groups


def match_gains(
    transactions: list[Transaction],
    holdings: list[Holding],
    tax_year: int,
    fifo_mode: FifoMode = FifoMode.DRAIN_ALL_SALES
) -> list[CapitalGainRecord]:
    """
    Compute FIFO capital gains for every holding in a tax year.

    Records are grouped by holding (first appearance in ``transactions``),
    then in sale order. Transactions on unknown holdings are skipped.
    """
    validate_tax_year(tax_year)
    validate_transactions(transactions)

    holdings_by_id = {h.id: h for h in holdings}
    records: list[CapitalGainRecord] = []

    for holding_id, group in group_by_holding(transactions).items():
        holding = holdings_by_id.get(holding_id)
        if holding is None:
            logger.debug("Skipping %d transactions for unknown holding %s", len(group), holding_id)
            continue

        matcher = FifoLotMatcher(holding, tax_year, fifo_mode)
        # Stable sort: same-day transactions keep their arrival order
        for trans in sorted(group, key=lambda t: t.transaction_date):
            records.extend(matcher.process(trans))

    return records
