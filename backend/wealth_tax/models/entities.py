"""Database entity models for the wealth tracker."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric,
    ForeignKey, Enum as SQLEnum, Boolean, Text, JSON
)
from sqlalchemy.orm import relationship
from .database import Base
from ..enums import AssetClass, TransactionType, CashFlowType, TaxEventType


class Portfolio(Base):
    """A user's portfolio."""
    __tablename__ = "portfolios"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    currency = Column(String(3), default="EUR")

    # Relationships
    assets = relationship("Asset", back_populates="portfolio", cascade="all, delete-orphan")
    cash_flows = relationship("CashFlow", back_populates="portfolio", cascade="all, delete-orphan")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Asset(Base):
    """A holding inside a portfolio."""
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    portfolio_id = Column(Integer, ForeignKey("portfolios.id"), nullable=False, index=True)
    asset_type = Column(SQLEnum(AssetClass), nullable=False)
    symbol = Column(String(32))
    name = Column(String(255), nullable=False)

    # Current position, refreshed by price updates
    quantity = Column(Numeric(18, 8), nullable=False, default=0)
    current_price = Column(Numeric(18, 6), default=0)

    # Class-specific attributes (issuing country for bonds, wallet for crypto...)
    asset_metadata = Column("metadata", JSON, default=dict)

    # Relationships
    portfolio = relationship("Portfolio", back_populates="assets")
    transactions = relationship("Transaction", back_populates="asset", cascade="all, delete-orphan")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Transaction(Base):
    """Individual transaction record."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=False, index=True)

    transaction_type = Column(SQLEnum(TransactionType), nullable=False)
    transaction_date = Column(Date, nullable=False, index=True)

    # Quantities and prices
    quantity = Column(Numeric(18, 8), nullable=False)  # Support fractional shares
    price = Column(Numeric(18, 6), nullable=False)
    fees = Column(Numeric(18, 2), default=0)
    total_amount = Column(Numeric(18, 2), nullable=False)

    notes = Column(Text)

    # Relationships
    asset = relationship("Asset", back_populates="transactions")

    created_at = Column(DateTime, default=datetime.utcnow)


class CashFlow(Base):
    """Income or expense cash flow (dividends, coupons, rent, interest)."""
    __tablename__ = "cash_flows"

    id = Column(Integer, primary_key=True, index=True)
    portfolio_id = Column(Integer, ForeignKey("portfolios.id"), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=True)

    flow_type = Column(SQLEnum(CashFlowType), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    currency = Column(String(3), default="EUR")
    payment_date = Column(Date, nullable=False, index=True)

    is_forecasted = Column(Boolean, default=False)  # Planning only, never taxed
    is_recurring = Column(Boolean, default=False)
    notes = Column(Text)

    # Relationships
    portfolio = relationship("Portfolio", back_populates="cash_flows")

    created_at = Column(DateTime, default=datetime.utcnow)


class TaxEvent(Base):
    """Persisted taxable event. Written once, never read back by the engine."""
    __tablename__ = "tax_events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    tax_year = Column(Integer, nullable=False, index=True)

    event_type = Column(SQLEnum(TaxEventType), nullable=False)
    taxable_amount = Column(Numeric(18, 2), nullable=False)
    tax_rate = Column(Numeric(6, 4), nullable=False)
    tax_owed = Column(Numeric(18, 2), nullable=False)

    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=True)
    event_date = Column(Date, nullable=False)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
