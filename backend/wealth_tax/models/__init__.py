from .database import Base, engine, get_db, init_db
from .entities import (
    Portfolio,
    Asset,
    Transaction,
    CashFlow,
    TaxEvent,
)
from ..enums import AssetClass, TransactionType, CashFlowType, TaxEventType

__all__ = [
    "Base",
    "engine",
    "get_db",
    "init_db",
    "Portfolio",
    "Asset",
    "Transaction",
    "CashFlow",
    "TaxEvent",
    "AssetClass",
    "TransactionType",
    "CashFlowType",
    "TaxEventType",
]
