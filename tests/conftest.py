"""Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database with all engine tables.
"""

from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taxsaver.db import Base, HoldingRecord, TransactionRecord

# 15 Jan 2025 falls in FY 2024-25
AS_OF = date(2025, 1, 15)
FISCAL_YEAR = "2024-25"
USER = "user-1"
OTHER_USER = "user-2"


@pytest.fixture
def engine():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    with factory() as session:
        yield session


@pytest.fixture
def add_holding(session):
    """Factory inserting a holding acquired ``days_held`` days before AS_OF."""

    def _add(
        symbol: str = "RELIANCE",
        quantity: float = 10,
        average_price: float = 2500.0,
        current_price=2300.0,
        days_held: int = 200,
        asset_category: str = "equity",
        user_id: str = USER,
    ) -> HoldingRecord:
        record = HoldingRecord(
            user_id=user_id,
            symbol=symbol,
            asset_category=asset_category,
            quantity=quantity,
            average_price=average_price,
            current_price=current_price,
            acquisition_date=AS_OF - timedelta(days=days_held),
            platform="zerodha",
        )
        session.add(record)
        session.commit()
        return record

    return _add


@pytest.fixture
def add_transaction(session):
    """Factory inserting a ledger row on ``day``."""

    def _add(
        symbol: str,
        transaction_type: str,
        day: date,
        quantity: float = 10,
        price: float = 100.0,
        user_id: str = USER,
        holding_id=None,
    ) -> TransactionRecord:
        record = TransactionRecord(
            user_id=user_id,
            holding_id=holding_id,
            transaction_type=transaction_type,
            symbol=symbol,
            asset_category="equity",
            quantity=quantity,
            price=price,
            transaction_date=day,
        )
        session.add(record)
        session.commit()
        return record

    return _add
