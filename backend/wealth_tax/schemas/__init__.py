from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..enums import AssetClass, TransactionType, CashFlowType, TaxEventType


class PortfolioCreate(BaseModel):
    user_id: str
    name: str
    description: Optional[str] = None
    currency: str = "EUR"


class PortfolioResponse(BaseModel):
    id: int
    user_id: str
    name: str
    description: Optional[str] = None
    currency: str

    class Config:
        from_attributes = True


class AssetCreate(BaseModel):
    portfolio_id: int
    asset_type: AssetClass
    name: str
    symbol: Optional[str] = None
    quantity: Decimal = Field(Decimal("0"), ge=0)
    current_price: Decimal = Field(Decimal("0"), ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AssetResponse(BaseModel):
    id: int
    portfolio_id: int
    asset_type: AssetClass
    name: str
    symbol: Optional[str] = None
    quantity: Decimal
    current_price: Optional[Decimal] = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="asset_metadata")

    class Config:
        from_attributes = True


class TransactionCreate(BaseModel):
    asset_id: int
    transaction_type: TransactionType
    transaction_date: date
    quantity: Decimal = Field(ge=0)
    price: Decimal = Field(ge=0)
    fees: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None


class TransactionResponse(BaseModel):
    id: int
    asset_id: int
    transaction_type: TransactionType
    transaction_date: date
    quantity: Decimal
    price: Decimal
    fees: Decimal
    total_amount: Decimal
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class CashFlowCreate(BaseModel):
    portfolio_id: int
    asset_id: Optional[int] = None
    flow_type: CashFlowType
    amount: Decimal
    payment_date: date
    currency: str = "EUR"
    is_forecasted: bool = False
    is_recurring: bool = False
    notes: Optional[str] = None


class CashFlowResponse(BaseModel):
    id: int
    portfolio_id: int
    asset_id: Optional[int] = None
    flow_type: CashFlowType
    amount: Decimal
    payment_date: date
    currency: str
    is_forecasted: bool
    is_recurring: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class TaxEventResponse(BaseModel):
    id: int
    user_id: str
    tax_year: int
    event_type: TaxEventType
    taxable_amount: Decimal
    tax_rate: Decimal
    tax_owed: Decimal
    asset_id: Optional[int] = None
    event_date: date
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class CryptoThresholdResponse(BaseModel):
    exceeded: bool
    total_value: float
    threshold: float
