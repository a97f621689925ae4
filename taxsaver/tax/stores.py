"""Persistence stores for the tax engine.

Thin query helpers over the ORM records that convert to and from the
domain dataclasses. Stores never commit; the owning component decides
the transaction boundary.
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from taxsaver.db.models import (
    CarryForwardRecord,
    HoldingRecord,
    RecommendationRecord,
    TaxConfigurationRecord,
    TransactionRecord,
)
from taxsaver.errors import ConfigurationMissingError
from taxsaver.tax.config import (
    RecommendationStatus,
    RecommendationType,
    TaxConfiguration,
    TransactionType,
)
from taxsaver.tax.models import (
    CarryForwardEntry,
    Holding,
    Recommendation,
    Transaction,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Holdings
# =============================================================================

class HoldingStore:
    """Read and mutate open positions."""

    def __init__(self, session: Session):
        self.session = session

    def list_for_user(self, user_id: str) -> list[Holding]:
        records = (
            self.session.query(HoldingRecord)
            .filter(HoldingRecord.user_id == user_id)
            .order_by(HoldingRecord.symbol)
            .all()
        )
        return [self.to_holding(r) for r in records]

    def get_record(self, holding_id: str, user_id: str) -> Optional[HoldingRecord]:
        return (
            self.session.query(HoldingRecord)
            .filter(HoldingRecord.id == holding_id, HoldingRecord.user_id == user_id)
            .first()
        )

    def add(self, holding: Holding) -> Holding:
        record = HoldingRecord(
            user_id=holding.user_id,
            symbol=holding.symbol,
            asset_category=holding.asset_category,
            quantity=holding.quantity,
            average_price=holding.average_price,
            current_price=holding.current_price,
            acquisition_date=holding.acquisition_date,
            platform=holding.platform,
        )
        if holding.holding_id:
            record.id = holding.holding_id
        self.session.add(record)
        self.session.flush()
        return self.to_holding(record)

    def delete(self, record: HoldingRecord) -> None:
        self.session.delete(record)
        self.session.flush()

    @staticmethod
    def to_holding(record: HoldingRecord) -> Holding:
        return Holding(
            holding_id=record.id,
            user_id=record.user_id,
            symbol=record.symbol,
            asset_category=record.asset_category,
            quantity=record.quantity,
            average_price=record.average_price,
            current_price=record.current_price,
            acquisition_date=record.acquisition_date,
            platform=record.platform,
        )


# =============================================================================
# Transactions
# =============================================================================

class TransactionStore:
    """Append-only transaction ledger."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, transaction: Transaction) -> Transaction:
        record = TransactionRecord(
            user_id=transaction.user_id,
            holding_id=transaction.holding_id,
            recommendation_id=transaction.recommendation_id,
            transaction_type=transaction.transaction_type.value,
            symbol=transaction.symbol,
            asset_category=transaction.asset_category,
            quantity=transaction.quantity,
            price=transaction.price,
            transaction_date=transaction.transaction_date,
            fees=transaction.fees,
            platform=transaction.platform,
            notes=transaction.notes,
            is_reversed=False,
            reversal_of_id=transaction.reversal_of_id,
        )
        self.session.add(record)
        self.session.flush()
        return self.to_transaction(record)

    def get_record(self, transaction_id: str, user_id: str) -> Optional[TransactionRecord]:
        return (
            self.session.query(TransactionRecord)
            .filter(
                TransactionRecord.id == transaction_id,
                TransactionRecord.user_id == user_id,
            )
            .first()
        )

    def mark_reversed(self, record: TransactionRecord, reversed_by_id: str) -> None:
        record.is_reversed = True
        record.reversed_at = datetime.utcnow()
        record.reversed_by_id = reversed_by_id
        self.session.flush()

    def find(
        self,
        user_id: str,
        symbol: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        end_exclusive: bool = False,
        effective_only: bool = True,
    ) -> list[Transaction]:
        """Transactions newest first.

        With ``effective_only`` reversed rows and their compensating rows are
        excluded, so the result reflects trades that actually stand.
        """
        query = self.session.query(TransactionRecord).filter(
            TransactionRecord.user_id == user_id
        )
        if symbol is not None:
            query = query.filter(TransactionRecord.symbol == symbol)
        if transaction_type is not None:
            query = query.filter(TransactionRecord.transaction_type == transaction_type.value)
        if start is not None:
            query = query.filter(TransactionRecord.transaction_date >= start)
        if end is not None:
            if end_exclusive:
                query = query.filter(TransactionRecord.transaction_date < end)
            else:
                query = query.filter(TransactionRecord.transaction_date <= end)
        if effective_only:
            query = query.filter(
                TransactionRecord.is_reversed == False,
                TransactionRecord.reversal_of_id.is_(None),
            )
        records = query.order_by(
            TransactionRecord.transaction_date.desc(),
            TransactionRecord.created_at.desc(),
        ).all()
        return [self.to_transaction(r) for r in records]

    @staticmethod
    def to_transaction(record: TransactionRecord) -> Transaction:
        return Transaction(
            transaction_id=record.id,
            user_id=record.user_id,
            holding_id=record.holding_id,
            recommendation_id=record.recommendation_id,
            transaction_type=TransactionType(record.transaction_type),
            symbol=record.symbol,
            asset_category=record.asset_category,
            quantity=record.quantity,
            price=record.price,
            transaction_date=record.transaction_date,
            fees=record.fees or 0.0,
            platform=record.platform,
            notes=record.notes,
            is_reversed=bool(record.is_reversed),
            reversed_at=record.reversed_at,
            reversed_by_id=record.reversed_by_id,
            reversal_of_id=record.reversal_of_id,
        )


# =============================================================================
# Tax Configuration
# =============================================================================

_CONFIG_FIELDS = (
    "short_term_equity_rate",
    "long_term_equity_rate",
    "long_term_equity_exemption",
    "crypto_short_term_rate",
    "crypto_long_term_rate",
    "other_short_term_rate",
    "other_long_term_rate",
    "default_rate",
    "surcharge_threshold",
    "surcharge_rate",
    "cess_rate",
)


class TaxConfigurationStore:
    """Per-fiscal-year rate tables."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, fiscal_year: str) -> TaxConfiguration:
        record = self.session.get(TaxConfigurationRecord, fiscal_year)
        if record is None:
            raise ConfigurationMissingError(fiscal_year)
        return TaxConfiguration(
            fiscal_year=record.fiscal_year,
            **{name: getattr(record, name) for name in _CONFIG_FIELDS},
        )

    def save(self, configuration: TaxConfiguration) -> None:
        record = TaxConfigurationRecord(
            fiscal_year=configuration.fiscal_year,
            **{name: getattr(configuration, name) for name in _CONFIG_FIELDS},
        )
        self.session.merge(record)
        self.session.flush()


# =============================================================================
# Carry-Forward
# =============================================================================

class CarryForwardStore:
    """Carry-forward ledger, one row per (user, target fiscal year)."""

    def __init__(self, session: Session):
        self.session = session

    def upsert(
        self,
        user_id: str,
        fiscal_year: str,
        source_fiscal_year: str,
        short_term_loss: float,
        long_term_loss: float,
        expires_in: int,
    ) -> CarryForwardEntry:
        record = (
            self.session.query(CarryForwardRecord)
            .filter(
                CarryForwardRecord.user_id == user_id,
                CarryForwardRecord.fiscal_year == fiscal_year,
            )
            .first()
        )
        if record is None:
            record = CarryForwardRecord(user_id=user_id, fiscal_year=fiscal_year)
            self.session.add(record)
        record.source_fiscal_year = source_fiscal_year
        record.short_term_loss = short_term_loss
        record.long_term_loss = long_term_loss
        record.expires_in = expires_in
        self.session.flush()
        return self.to_entry(record)

    def list_up_to(self, user_id: str, fiscal_year: str) -> list[CarryForwardEntry]:
        """Entries targeting ``fiscal_year`` or earlier, newest first."""
        # "YYYY-YY" strings order the same as their start years
        records = (
            self.session.query(CarryForwardRecord)
            .filter(
                CarryForwardRecord.user_id == user_id,
                CarryForwardRecord.fiscal_year <= fiscal_year,
            )
            .order_by(CarryForwardRecord.fiscal_year.desc())
            .all()
        )
        return [self.to_entry(r) for r in records]

    @staticmethod
    def to_entry(record: CarryForwardRecord) -> CarryForwardEntry:
        return CarryForwardEntry(
            fiscal_year=record.fiscal_year,
            source_fiscal_year=record.source_fiscal_year,
            short_term_loss=record.short_term_loss or 0.0,
            long_term_loss=record.long_term_loss or 0.0,
            expires_in=record.expires_in,
            created_at=record.created_at,
        )


# =============================================================================
# Recommendations
# =============================================================================

class RecommendationStore:
    """Tax-loss-harvesting recommendations."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, recommendation: Recommendation) -> Recommendation:
        record = RecommendationRecord(
            user_id=recommendation.user_id,
            holding_id=recommendation.holding_id,
            symbol=recommendation.symbol,
            recommendation_type=recommendation.recommendation_type.value,
            current_price=recommendation.current_price,
            purchase_price=recommendation.purchase_price,
            quantity=recommendation.quantity,
            potential_loss=recommendation.potential_loss,
            tax_savings=recommendation.tax_savings,
            priority_score=recommendation.priority_score,
            deadline=recommendation.deadline,
            notes=recommendation.notes,
            status=recommendation.status.value,
            wash_sale_warning=recommendation.wash_sale_warning,
        )
        self.session.add(record)
        self.session.flush()
        return self.to_recommendation(record)

    def get_record(self, recommendation_id: str, user_id: str) -> Optional[RecommendationRecord]:
        return (
            self.session.query(RecommendationRecord)
            .filter(
                RecommendationRecord.id == recommendation_id,
                RecommendationRecord.user_id == user_id,
            )
            .first()
        )

    def get_pending_record(self, recommendation_id: str, user_id: str) -> Optional[RecommendationRecord]:
        return (
            self.session.query(RecommendationRecord)
            .filter(
                RecommendationRecord.id == recommendation_id,
                RecommendationRecord.user_id == user_id,
                RecommendationRecord.status == RecommendationStatus.PENDING.value,
            )
            .first()
        )

    def list_for_user(
        self,
        user_id: str,
        status: Optional[RecommendationStatus] = None,
    ) -> list[Recommendation]:
        query = self.session.query(RecommendationRecord).filter(
            RecommendationRecord.user_id == user_id
        )
        if status is not None:
            query = query.filter(RecommendationRecord.status == status.value)
        records = query.order_by(
            RecommendationRecord.priority_score.desc(),
            RecommendationRecord.created_at.desc(),
        ).all()
        return [self.to_recommendation(r) for r in records]

    def pending_past_deadline(self, user_id: str, today: date) -> list[RecommendationRecord]:
        return (
            self.session.query(RecommendationRecord)
            .filter(
                RecommendationRecord.user_id == user_id,
                RecommendationRecord.status == RecommendationStatus.PENDING.value,
                RecommendationRecord.deadline < today,
            )
            .all()
        )

    @staticmethod
    def to_recommendation(record: RecommendationRecord) -> Recommendation:
        return Recommendation(
            recommendation_id=record.id,
            user_id=record.user_id,
            holding_id=record.holding_id,
            symbol=record.symbol,
            recommendation_type=RecommendationType(record.recommendation_type),
            current_price=record.current_price or 0.0,
            purchase_price=record.purchase_price or 0.0,
            quantity=record.quantity or 0.0,
            potential_loss=record.potential_loss or 0.0,
            tax_savings=record.tax_savings or 0.0,
            priority_score=record.priority_score or 0,
            deadline=record.deadline,
            notes=record.notes or "",
            status=RecommendationStatus(record.status),
            wash_sale_warning=bool(record.wash_sale_warning),
            created_at=record.created_at,
            executed_at=record.executed_at,
        )
