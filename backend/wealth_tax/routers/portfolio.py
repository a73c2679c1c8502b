"""Portfolio router for managing portfolios, holdings, transactions and cash flows."""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.orm import Session

from ..models import get_db, Portfolio, Asset, Transaction, CashFlow, TransactionType, CashFlowType
from ..schemas import (
    PortfolioCreate,
    PortfolioResponse,
    AssetCreate,
    AssetResponse,
    TransactionCreate,
    TransactionResponse,
    CashFlowCreate,
    CashFlowResponse,
)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


def _get_portfolio(db: Session, portfolio_id: int) -> Portfolio:
    portfolio = db.query(Portfolio).filter(Portfolio.id == portfolio_id).first()
    if not portfolio:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return portfolio


def _get_asset(db: Session, asset_id: int) -> Asset:
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


@router.post("/", response_model=PortfolioResponse)
async def create_portfolio(portfolio: PortfolioCreate, db: Session = Depends(get_db)) -> PortfolioResponse:
    """Create a portfolio for a user."""
    db_portfolio = Portfolio(
        user_id=portfolio.user_id,
        name=portfolio.name,
        description=portfolio.description,
        currency=portfolio.currency,
    )
    db.add(db_portfolio)
    db.commit()
    db.refresh(db_portfolio)
    return db_portfolio


@router.get("/", response_model=List[PortfolioResponse])
async def get_portfolios(
    user_id: str = Query(..., description="Owner of the portfolios"),
    db: Session = Depends(get_db)
) -> List[PortfolioResponse]:
    """Get all portfolios of a user."""
    return db.query(Portfolio).filter(Portfolio.user_id == user_id).order_by(Portfolio.id).all()


@router.post("/assets", response_model=AssetResponse)
async def create_asset(asset: AssetCreate, db: Session = Depends(get_db)) -> AssetResponse:
    """Add a holding to a portfolio."""
    _get_portfolio(db, asset.portfolio_id)

    db_asset = Asset(
        portfolio_id=asset.portfolio_id,
        asset_type=asset.asset_type,
        name=asset.name,
        symbol=asset.symbol,
        quantity=asset.quantity,
        current_price=asset.current_price,
        asset_metadata=asset.metadata,
    )
    db.add(db_asset)
    db.commit()
    db.refresh(db_asset)
    return db_asset


@router.get("/{portfolio_id}/assets", response_model=List[AssetResponse])
async def get_assets(portfolio_id: int, db: Session = Depends(get_db)) -> List[AssetResponse]:
    """Get holdings of a portfolio."""
    _get_portfolio(db, portfolio_id)
    return db.query(Asset).filter(Asset.portfolio_id == portfolio_id).order_by(Asset.id).all()


@router.post("/transactions", response_model=TransactionResponse)
async def create_transaction(
    transaction: TransactionCreate,
    db: Session = Depends(get_db)
) -> TransactionResponse:
    """Record a transaction on a holding."""
    _get_asset(db, transaction.asset_id)

    gross = transaction.quantity * transaction.price
    if transaction.transaction_type == TransactionType.BUY:
        total = gross + transaction.fees
    else:
        total = gross - transaction.fees

    db_transaction = Transaction(
        asset_id=transaction.asset_id,
        transaction_type=transaction.transaction_type,
        transaction_date=transaction.transaction_date,
        quantity=transaction.quantity,
        price=transaction.price,
        fees=transaction.fees,
        total_amount=total,
        notes=transaction.notes,
    )
    db.add(db_transaction)
    db.commit()
    db.refresh(db_transaction)
    return db_transaction


@router.get("/transactions", response_model=List[TransactionResponse])
async def get_transactions(
    db: Session = Depends(get_db),
    asset_id: Optional[int] = Query(None, description="Filter by asset"),
    start_date: Optional[date] = Query(None, description="Start date"),
    end_date: Optional[date] = Query(None, description="End date"),
    transaction_type: Optional[TransactionType] = Query(None, description="Transaction type"),
    limit: int = Query(100, le=1000),
    offset: int = Query(0)
) -> List[TransactionResponse]:
    """Get transaction history with optional filters."""
    query = db.query(Transaction)

    if asset_id:
        query = query.filter(Transaction.asset_id == asset_id)

    if start_date:
        query = query.filter(Transaction.transaction_date >= start_date)

    if end_date:
        query = query.filter(Transaction.transaction_date <= end_date)

    if transaction_type:
        query = query.filter(Transaction.transaction_type == transaction_type)

    return query.order_by(
        Transaction.transaction_date.desc(), Transaction.id.desc()
    ).offset(offset).limit(limit).all()


@router.post("/cash-flows", response_model=CashFlowResponse)
async def create_cash_flow(cash_flow: CashFlowCreate, db: Session = Depends(get_db)) -> CashFlowResponse:
    """Record a cash flow (dividend, coupon, rent, interest...)."""
    _get_portfolio(db, cash_flow.portfolio_id)
    if cash_flow.asset_id is not None:
        _get_asset(db, cash_flow.asset_id)

    db_cash_flow = CashFlow(**cash_flow.model_dump())
    db.add(db_cash_flow)
    db.commit()
    db.refresh(db_cash_flow)
    return db_cash_flow


@router.get("/{portfolio_id}/cash-flows", response_model=List[CashFlowResponse])
async def get_cash_flows(
    portfolio_id: int,
    flow_type: Optional[CashFlowType] = Query(None, description="Filter by flow type"),
    include_forecasted: bool = Query(True, description="Include forecasted flows"),
    db: Session = Depends(get_db)
) -> List[CashFlowResponse]:
    """Get cash flows of a portfolio."""
    _get_portfolio(db, portfolio_id)
    query = db.query(CashFlow).filter(CashFlow.portfolio_id == portfolio_id)

    if flow_type:
        query = query.filter(CashFlow.flow_type == flow_type)

    if not include_forecasted:
        query = query.filter(CashFlow.is_forecasted == False)

    return query.order_by(CashFlow.payment_date, CashFlow.id).all()
