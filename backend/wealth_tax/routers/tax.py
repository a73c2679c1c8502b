"""Tax calculation router."""

from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..enums import FifoMode
from ..exceptions import TaxValidationError
from ..models import get_db, Portfolio, Asset, Transaction, CashFlow, TaxEvent
from ..schemas import TaxEventResponse, CryptoThresholdResponse
from ..services import (
    ItalianTaxEngine,
    check_crypto_threshold,
    attributes_from_metadata,
    render_report,
)
from ..services import records

router = APIRouter(prefix="/tax", tags=["tax"])


def _get_engine(fifo_mode: Optional[FifoMode]) -> ItalianTaxEngine:
    return ItalianTaxEngine(fifo_mode or get_settings().fifo_mode)


def _to_holding(asset: Asset) -> records.Holding:
    return records.Holding(
        id=str(asset.id),
        asset_class=asset.asset_type,
        name=asset.name,
        attributes=attributes_from_metadata(asset.asset_type, asset.asset_metadata),
        quantity=Decimal(asset.quantity or 0),
        current_price=Decimal(asset.current_price or 0),
    )


def _to_transaction(trans: Transaction) -> records.Transaction:
    return records.Transaction(
        id=str(trans.id),
        holding_id=str(trans.asset_id),
        transaction_type=trans.transaction_type,
        quantity=Decimal(trans.quantity),
        unit_price=Decimal(trans.price),
        transaction_date=trans.transaction_date,
        fees=Decimal(trans.fees or 0),
        notes=trans.notes,
    )


def _to_cash_flow(cf: CashFlow) -> records.CashFlow:
    return records.CashFlow(
        id=str(cf.id),
        holding_id=str(cf.asset_id) if cf.asset_id is not None else None,
        flow_type=cf.flow_type,
        amount=Decimal(cf.amount),
        payment_date=cf.payment_date,
        is_forecasted=bool(cf.is_forecasted),
        is_recurring=bool(cf.is_recurring),
    )


def _load_tax_inputs(
    db: Session,
    user_id: str,
    portfolio_ids: Optional[List[int]]
) -> tuple[list[records.Holding], list[records.Transaction], list[records.CashFlow]]:
    """Fetch everything the engine needs for a user's portfolios."""
    query = db.query(Portfolio.id).filter(Portfolio.user_id == user_id)
    if portfolio_ids:
        query = query.filter(Portfolio.id.in_(portfolio_ids))
    selected = [row.id for row in query.all()]

    if not selected:
        return [], [], []

    assets = db.query(Asset).filter(Asset.portfolio_id.in_(selected)).order_by(Asset.id).all()
    asset_ids = [a.id for a in assets]

    # Date order, ties in insertion order
    transactions = db.query(Transaction).filter(
        Transaction.asset_id.in_(asset_ids)
    ).order_by(Transaction.transaction_date, Transaction.id).all() if asset_ids else []

    cash_flows = db.query(CashFlow).filter(
        CashFlow.portfolio_id.in_(selected)
    ).order_by(CashFlow.payment_date, CashFlow.id).all()

    return (
        [_to_holding(a) for a in assets],
        [_to_transaction(t) for t in transactions],
        [_to_cash_flow(cf) for cf in cash_flows],
    )


def _store_tax_events(db: Session, user_id: str, tax_year: int, events) -> List[TaxEvent]:
    """Replace the user's stored events for the year with a fresh set."""
    db.query(TaxEvent).filter(
        TaxEvent.user_id == user_id,
        TaxEvent.tax_year == tax_year
    ).delete(synchronize_session=False)

    db_events = [
        TaxEvent(
            user_id=event.user_id,
            tax_year=event.tax_year,
            event_type=event.event_type,
            taxable_amount=event.taxable_amount,
            tax_rate=event.tax_rate,
            tax_owed=event.tax_owed,
            asset_id=int(event.holding_id) if event.holding_id is not None else None,
            event_date=event.event_date,
            notes=event.notes,
        )
        for event in events
    ]
    db.add_all(db_events)
    db.commit()
    for db_event in db_events:
        db.refresh(db_event)
    return db_events


@router.get("/calculate/{tax_year}")
async def calculate_tax(
    tax_year: int,
    user_id: str = Query(..., description="Owner of the portfolios"),
    portfolio_ids: Optional[List[int]] = Query(None, description="Restrict to these portfolios"),
    format: Optional[str] = Query(None, description="'report' to include the text report"),
    save: bool = Query(False, description="Store the year's tax events"),
    fifo_mode: Optional[FifoMode] = Query(None, description="Override the configured FIFO mode"),
    db: Session = Depends(get_db)
) -> dict:
    """
    Calculate Italian taxes for a tax year.

    Returns:
    - Capital gains per matched lot (26%, 12.5% on Italian government bonds)
    - Dividend/coupon and interest income (26%)
    - Tax owed breakdown and crypto threshold status
    """
    holdings, transactions, cash_flows = _load_tax_inputs(db, user_id, portfolio_ids)
    engine = _get_engine(fifo_mode)

    try:
        result = engine.calculate_taxes(transactions, holdings, cash_flows, tax_year)
        events = engine.generate_tax_events(
            user_id, transactions, holdings, cash_flows, tax_year
        ) if save else None
    except TaxValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if events is not None:
        _store_tax_events(db, user_id, tax_year, events)

    response = result.to_dict()
    if format == "report":
        response["report"] = render_report(result)
    return response


@router.get("/report/{tax_year}", response_class=PlainTextResponse)
async def download_tax_report(
    tax_year: int,
    user_id: str = Query(..., description="Owner of the portfolios"),
    portfolio_ids: Optional[List[int]] = Query(None, description="Restrict to these portfolios"),
    fifo_mode: Optional[FifoMode] = Query(None, description="Override the configured FIFO mode"),
    db: Session = Depends(get_db)
) -> PlainTextResponse:
    """Download the plain-text tax report."""
    holdings, transactions, cash_flows = _load_tax_inputs(db, user_id, portfolio_ids)

    try:
        report = _get_engine(fifo_mode).generate_tax_report(transactions, holdings, cash_flows, tax_year)
    except TaxValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return PlainTextResponse(
        report,
        headers={"Content-Disposition": f'attachment; filename="tax_report_{tax_year}.txt"'}
    )


@router.post("/events/{tax_year}", response_model=List[TaxEventResponse])
async def save_tax_events(
    tax_year: int,
    user_id: str = Query(..., description="Owner of the portfolios"),
    portfolio_ids: Optional[List[int]] = Query(None, description="Restrict to these portfolios"),
    fifo_mode: Optional[FifoMode] = Query(None, description="Override the configured FIFO mode"),
    db: Session = Depends(get_db)
) -> List[TaxEventResponse]:
    """Generate the year's taxable events and store them, replacing earlier ones."""
    holdings, transactions, cash_flows = _load_tax_inputs(db, user_id, portfolio_ids)

    try:
        events = _get_engine(fifo_mode).generate_tax_events(
            user_id, transactions, holdings, cash_flows, tax_year
        )
    except TaxValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return _store_tax_events(db, user_id, tax_year, events)


@router.get("/events/{tax_year}", response_model=List[TaxEventResponse])
async def get_tax_events(
    tax_year: int,
    user_id: str = Query(..., description="Owner of the events"),
    db: Session = Depends(get_db)
) -> List[TaxEventResponse]:
    """Get stored taxable events for a year."""
    return db.query(TaxEvent).filter(
        TaxEvent.user_id == user_id,
        TaxEvent.tax_year == tax_year
    ).order_by(TaxEvent.id).all()


@router.get("/crypto-threshold", response_model=CryptoThresholdResponse)
async def get_crypto_threshold(
    user_id: str = Query(..., description="Owner of the portfolios"),
    portfolio_ids: Optional[List[int]] = Query(None, description="Restrict to these portfolios"),
    db: Session = Depends(get_db)
) -> CryptoThresholdResponse:
    """Check current crypto holdings against the €2,000 threshold."""
    holdings, _, _ = _load_tax_inputs(db, user_id, portfolio_ids)
    status = check_crypto_threshold(holdings)
    return CryptoThresholdResponse(**status.to_dict())
