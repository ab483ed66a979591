"""Pytest fixtures for testing"""

import os

# Background refresh would call the real provider
os.environ.setdefault("RATE_REFRESH_ENABLED", "false")

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from ledgerly.api.main import create_app
from ledgerly.infrastructure.database.models import Base
from ledgerly.infrastructure.database.session import get_db
from ledgerly.domain.exceptions import RefreshFailed
from ledgerly.domain.models import MonetaryRecord
from ledgerly.domain.rates import RateCache


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "64fabc0123456789abcdef01"

# EUR pivot: EUR->USD = 1.10, GBP->USD = 1.10 / 0.92 = 1.1956 -> 1.20
SAMPLE_RATES = {"USD": Decimal("1.10"), "GBP": Decimal("0.92"), "JPY": Decimal("162.82")}


class FakeRateProvider:
    """Rate provider returning a fixed table, or failing when told to"""

    def __init__(self, rates: Optional[Dict[str, Decimal]] = None, fail: bool = False):
        self.rates = rates or {}
        self.fail = fail
        self.calls = 0

    async def fetch_rates(self) -> Dict[str, Decimal]:
        self.calls += 1
        if self.fail:
            raise RefreshFailed("provider down")
        return dict(self.rates)


@pytest.fixture
def rate_cache() -> RateCache:
    """Cache pre-loaded with SAMPLE_RATES"""
    return RateCache(provider=FakeRateProvider(SAMPLE_RATES), pivot_currency="EUR", table=SAMPLE_RATES)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, rate_cache: RateCache) -> TestClient:
    """Create FastAPI test client with test database and a fixed rate table"""
    app = create_app(rate_cache=rate_cache)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app, headers={"X-User-ID": USER_ID})


@pytest.fixture
def make_record():
    """Factory for in-memory monetary records"""

    def _make(
        amount,
        currency: str = "USD",
        when: datetime = datetime(2025, 1, 10, tzinfo=timezone.utc),
        type: str = "expense",
        category: str = "Groceries",
        tags=None,
    ) -> MonetaryRecord:
        return MonetaryRecord(
            amount=Decimal(str(amount)),
            date=when,
            type=type,
            currency=currency,
            category=category,
            tags=list(tags or []),
        )

    return _make
