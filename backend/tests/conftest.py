"""
Pytest configuration and fixtures.
"""
import os

# Keep the app off the on-disk database during tests
os.environ.setdefault("WEALTH_TAX_DATABASE_URL", "sqlite://")

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wealth_tax.enums import AssetClass
from wealth_tax.main import app
from wealth_tax.models import Base, get_db
from wealth_tax.services.records import BondAttributes, CryptoAttributes, Holding, MarketAttributes


@pytest.fixture
def acme():
    """A plain stock (standard rate)."""
    return Holding(
        id="acme",
        asset_class=AssetClass.STOCK,
        name="ACME Corp",
        attributes=MarketAttributes(isin="US0000000001", country="US")
    )


@pytest.fixture
def btp():
    """Italian government bond (reduced rate)."""
    return Holding(
        id="btp",
        asset_class=AssetClass.BOND,
        name="BTP 2030",
        attributes=BondAttributes(issuing_country="IT", isin="IT0005383309")
    )


@pytest.fixture
def bund():
    """German government bond (standard rate)."""
    return Holding(
        id="bund",
        asset_class=AssetClass.BOND,
        name="Bund 2031",
        attributes=BondAttributes(issuing_country="DE")
    )


@pytest.fixture
def bitcoin():
    """Crypto holding with a current position."""
    return Holding(
        id="btc",
        asset_class=AssetClass.CRYPTO,
        name="Bitcoin",
        attributes=CryptoAttributes(blockchain="bitcoin"),
        quantity=Decimal("0.05"),
        current_price=Decimal("40000")
    )


@pytest.fixture
def client():
    """API client backed by a fresh in-memory database."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=test_engine)
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=test_engine)
