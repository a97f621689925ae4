"""SQLAlchemy ORM records for the TaxSaver engine.

Tables:
- holdings: open positions per user (mutated only by the executor)
- transactions: append-only buy/sell ledger with reversal links
- tax_configurations: per-fiscal-year rate tables
- tax_carry_forwards: unutilized losses carried into a later fiscal year
- tax_recommendations: tax-loss-harvesting recommendations and their status

Categorical columns (asset category, status, transaction type) are stored as
their string values so that categories unknown to this release still load.
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from taxsaver.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class HoldingRecord(Base):
    """Open position owned by a single user."""

    __tablename__ = "holdings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    symbol = Column(String(50), nullable=False)
    asset_category = Column(String(20), nullable=False)
    quantity = Column(Float, nullable=False)
    average_price = Column(Float, nullable=False)
    current_price = Column(Float)
    acquisition_date = Column(Date, nullable=False)
    platform = Column(String(50))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_holdings_user_symbol", "user_id", "symbol"),
    )

    def __repr__(self):
        return f"<Holding {self.symbol} qty={self.quantity} @ {self.average_price}>"


class TransactionRecord(Base):
    """Buy or sell event. Rows are never deleted; reversal is a flag plus a
    link to the compensating row."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    # No FK: the link must survive deletion of a fully sold holding so a
    # reversal can recreate it under the same id.
    holding_id = Column(String(36), index=True)
    recommendation_id = Column(String(36))
    transaction_type = Column(String(10), nullable=False)
    symbol = Column(String(50), nullable=False)
    asset_category = Column(String(20), nullable=False)
    quantity = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    transaction_date = Column(Date, nullable=False)
    fees = Column(Float, default=0.0)
    platform = Column(String(50))
    notes = Column(Text)
    is_reversed = Column(Boolean, nullable=False, default=False)
    reversed_at = Column(DateTime)
    reversed_by_id = Column(String(36))
    reversal_of_id = Column(String(36))
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_transactions_user_symbol_date", "user_id", "symbol", "transaction_date"),
    )

    def __repr__(self):
        return (
            f"<Transaction {self.transaction_type} {self.quantity} {self.symbol} "
            f"@ {self.price} on {self.transaction_date}>"
        )


class TaxConfigurationRecord(Base):
    """Rate table for one fiscal year. Rates are fractions (0.20 == 20%)."""

    __tablename__ = "tax_configurations"

    fiscal_year = Column(String(7), primary_key=True)
    short_term_equity_rate = Column(Float, nullable=False)
    long_term_equity_rate = Column(Float, nullable=False)
    long_term_equity_exemption = Column(Float, nullable=False)
    crypto_short_term_rate = Column(Float, nullable=False)
    crypto_long_term_rate = Column(Float, nullable=False)
    other_short_term_rate = Column(Float, nullable=False)
    other_long_term_rate = Column(Float, nullable=False)
    default_rate = Column(Float, nullable=False)
    surcharge_threshold = Column(Float, nullable=False)
    surcharge_rate = Column(Float, nullable=False)
    cess_rate = Column(Float, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class CarryForwardRecord(Base):
    """Net losses of ``source_fiscal_year`` carried into ``fiscal_year``."""

    __tablename__ = "tax_carry_forwards"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    fiscal_year = Column(String(7), nullable=False)
    source_fiscal_year = Column(String(7), nullable=False)
    short_term_loss = Column(Float, nullable=False, default=0.0)
    long_term_loss = Column(Float, nullable=False, default=0.0)
    expires_in = Column(Integer, nullable=False, default=8)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "fiscal_year", name="uq_carry_forward_user_year"),
    )


class RecommendationRecord(Base):
    """Tax-loss-harvesting recommendation."""

    __tablename__ = "tax_recommendations"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    holding_id = Column(String(36))
    symbol = Column(String(50), nullable=False)
    recommendation_type = Column(String(20), nullable=False)
    current_price = Column(Float)
    purchase_price = Column(Float)
    quantity = Column(Float)
    potential_loss = Column(Float)
    tax_savings = Column(Float)
    priority_score = Column(Integer)
    deadline = Column(Date)
    notes = Column(Text)
    status = Column(String(10), nullable=False, default="pending", index=True)
    wash_sale_warning = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    executed_at = Column(DateTime)

    def __repr__(self):
        return f"<Recommendation {self.symbol} {self.status} priority={self.priority_score}>"
