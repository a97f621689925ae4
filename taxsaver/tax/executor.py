"""Recommendation lifecycle and execution.

Recommendations move from ``pending`` to exactly one of ``accepted``,
``rejected`` or ``expired``. Executing a recommendation records the sell,
reduces (or removes) the holding and accepts the recommendation in a
single unit of work: either every step commits or none does.

Two concurrent executions of different recommendations on the same
holding are not serialized beyond the pending-status check.
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from taxsaver.errors import (
    ErrorCode,
    ExecutionError,
    InvalidStateError,
    NotFoundError,
    TaxSaverError,
    ValidationError,
)
from taxsaver.logging_config import log_performance
from taxsaver.tax.config import RecommendationStatus, TransactionType
from taxsaver.tax.models import (
    ExecutionResult,
    Holding,
    Recommendation,
    ReversalResult,
    Transaction,
)
from taxsaver.tax.stores import HoldingStore, RecommendationStore, TransactionStore
from taxsaver.tax.wash_sales import WashSaleGuard

logger = logging.getLogger(__name__)

EXECUTION_PLATFORM = "tlh_execution"

# Statuses a user may set directly; expiry is system-driven
USER_SETTABLE_STATUSES = frozenset({RecommendationStatus.ACCEPTED, RecommendationStatus.REJECTED})


def parse_status(status) -> RecommendationStatus:
    """Coerce a status value, raising ValidationError if unknown."""
    if isinstance(status, RecommendationStatus):
        return status
    try:
        return RecommendationStatus(str(status).lower())
    except ValueError:
        raise ValidationError(
            f"Unknown recommendation status {status!r}",
            ErrorCode.INVALID_STATUS,
            field="status",
        )


class RecommendationExecutor:
    """Status transitions, execution and reversal. The only component that
    mutates holdings and transactions."""

    def __init__(self, session: Session, wash_sales: Optional[WashSaleGuard] = None):
        self.session = session
        self.wash_sales = wash_sales or WashSaleGuard(session)
        self.holdings = HoldingStore(session)
        self.transactions = TransactionStore(session)
        self.recommendations = RecommendationStore(session)

    # =========================================================================
    # Status
    # =========================================================================

    def update_status(self, recommendation_id: str, user_id: str, status) -> Recommendation:
        """Accept or reject a pending recommendation without touching holdings."""
        target = parse_status(status)
        if target not in USER_SETTABLE_STATUSES:
            raise ValidationError(
                f"Status must be accepted or rejected, got {target.value!r}",
                ErrorCode.INVALID_STATUS,
                field="status",
            )

        record = self.recommendations.get_record(recommendation_id, user_id)
        if record is None:
            raise NotFoundError(
                "Recommendation not found",
                ErrorCode.RECOMMENDATION_NOT_FOUND,
                resource_type="recommendation",
                resource_id=recommendation_id,
            )
        if record.status != RecommendationStatus.PENDING.value:
            raise InvalidStateError(
                f"Recommendation is already {record.status}",
                current_state=record.status,
            )

        record.status = target.value
        if target == RecommendationStatus.ACCEPTED:
            record.executed_at = datetime.utcnow()
        self.session.commit()

        logger.info(
            "Recommendation %s marked %s", recommendation_id, target.value,
            extra={"user_id": user_id},
        )
        return self.recommendations.to_recommendation(record)

    def expire_overdue(self, user_id: str, as_of: Optional[date] = None) -> int:
        """Expire pending recommendations whose deadline has passed."""
        today = as_of or date.today()
        overdue = self.recommendations.pending_past_deadline(user_id, today)
        for record in overdue:
            record.status = RecommendationStatus.EXPIRED.value
        if overdue:
            self.session.commit()
            logger.info("Expired %d recommendations", len(overdue), extra={"user_id": user_id})
        return len(overdue)

    # =========================================================================
    # Execution
    # =========================================================================

    @log_performance(threshold_ms=1000)
    def execute(
        self,
        recommendation_id: str,
        user_id: str,
        trade_date: Optional[date] = None,
    ) -> ExecutionResult:
        """Realize a pending recommendation as a sell.

        ``wash_sale`` on the result reports a buy of the same symbol inside
        the window before ``trade_date``. It is advisory and never blocks
        the sale.

        Raises:
            NotFoundError: Recommendation or holding missing or not owned.
            InvalidStateError: Recommendation is no longer pending.
            ExecutionError: Any other failure; nothing is committed.
        """
        try:
            result = self._execute(recommendation_id, user_id, trade_date or date.today())
            self.session.commit()
        except TaxSaverError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            logger.exception("Execution of recommendation %s rolled back", recommendation_id)
            raise ExecutionError(f"Failed to execute recommendation: {e}") from e

        logger.info(
            "Executed recommendation %s: sold %s %s, %s remaining",
            recommendation_id,
            result.transaction.quantity,
            result.transaction.symbol,
            result.remaining_quantity,
            extra={"user_id": user_id},
        )
        return result

    def _execute(self, recommendation_id: str, user_id: str, trade_date: date) -> ExecutionResult:
        record = self.recommendations.get_pending_record(recommendation_id, user_id)
        if record is None:
            existing = self.recommendations.get_record(recommendation_id, user_id)
            if existing is None:
                raise NotFoundError(
                    "Recommendation not found or already executed",
                    ErrorCode.RECOMMENDATION_NOT_FOUND,
                    resource_type="recommendation",
                    resource_id=recommendation_id,
                )
            raise InvalidStateError(
                "Recommendation not found or already executed",
                ErrorCode.ALREADY_EXECUTED,
                current_state=existing.status,
            )

        holding = self.holdings.get_record(record.holding_id, user_id)
        if holding is None:
            raise NotFoundError(
                "Holding not found",
                ErrorCode.HOLDING_NOT_FOUND,
                resource_type="holding",
                resource_id=record.holding_id,
            )

        # Advisory only; a recent buy never blocks the harvesting sale
        wash_sale = self.wash_sales.check_reverse(user_id, holding.symbol, trade_date)
        if wash_sale.is_wash_sale:
            logger.warning(
                "Harvesting %s inside the wash-sale window of a buy on %s",
                holding.symbol, wash_sale.related_trade_date,
                extra={"user_id": user_id},
            )

        transaction = self.transactions.add(Transaction(
            user_id=user_id,
            holding_id=holding.id,
            recommendation_id=record.id,
            transaction_type=TransactionType.SELL,
            symbol=holding.symbol,
            asset_category=holding.asset_category,
            quantity=record.quantity,
            price=record.current_price,
            transaction_date=trade_date,
            platform=EXECUTION_PLATFORM,
            notes=f"Tax loss harvesting: {record.notes or 'Executed via TaxSaver'}",
        ))

        remaining = holding.quantity - record.quantity
        if remaining <= 0:
            self.holdings.delete(holding)
            logger.debug("Holding %s fully sold and removed", holding.id)
        else:
            holding.quantity = remaining

        record.status = RecommendationStatus.ACCEPTED.value
        record.executed_at = datetime.utcnow()
        self.session.flush()

        return ExecutionResult(
            transaction=transaction,
            recommendation=self.recommendations.to_recommendation(record),
            remaining_quantity=max(0.0, remaining),
            fully_sold=remaining <= 0,
            wash_sale=wash_sale,
        )

    # =========================================================================
    # Reversal
    # =========================================================================

    def reverse(
        self,
        transaction_id: str,
        user_id: str,
        trade_date: Optional[date] = None,
    ) -> ReversalResult:
        """Undo a transaction's effect on holdings.

        The original row is flagged reversed and a compensating row of the
        opposite type is appended, so the ledger is never rewritten.
        """
        try:
            result = self._reverse(transaction_id, user_id, trade_date or date.today())
            self.session.commit()
        except TaxSaverError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            logger.exception("Reversal of transaction %s rolled back", transaction_id)
            raise ExecutionError(f"Failed to reverse transaction: {e}") from e

        logger.info("Transaction reversed: %s", transaction_id, extra={"user_id": user_id})
        return result

    def _reverse(self, transaction_id: str, user_id: str, trade_date: date) -> ReversalResult:
        record = self.transactions.get_record(transaction_id, user_id)
        if record is None:
            raise NotFoundError(
                "Transaction not found",
                ErrorCode.TRANSACTION_NOT_FOUND,
                resource_type="transaction",
                resource_id=transaction_id,
            )
        if record.is_reversed:
            raise InvalidStateError(
                "Transaction has already been reversed",
                ErrorCode.ALREADY_REVERSED,
                current_state="reversed",
            )
        if record.reversal_of_id:
            raise InvalidStateError(
                "A reversal cannot itself be reversed",
                ErrorCode.INVALID_STATE,
                current_state="compensating",
            )

        original_type = TransactionType(record.transaction_type)
        holding_quantity = 0.0
        recreated = False

        if record.holding_id:
            holding = self.holdings.get_record(record.holding_id, user_id)
            if original_type == TransactionType.SELL:
                if holding is not None:
                    holding.quantity += record.quantity
                    holding_quantity = holding.quantity
                else:
                    restored = self.holdings.add(Holding(
                        holding_id=record.holding_id,
                        user_id=user_id,
                        symbol=record.symbol,
                        asset_category=record.asset_category,
                        quantity=record.quantity,
                        average_price=record.price,
                        current_price=record.price,
                        acquisition_date=record.transaction_date,
                        platform=record.platform,
                    ))
                    holding_quantity = restored.quantity
                    recreated = True
            elif holding is not None:
                remaining = holding.quantity - record.quantity
                if remaining <= 0:
                    self.holdings.delete(holding)
                else:
                    holding.quantity = remaining
                holding_quantity = max(0.0, remaining)
            else:
                logger.warning("Holding %s for reversed buy no longer exists", record.holding_id)

        compensating = self.transactions.add(Transaction(
            user_id=user_id,
            holding_id=record.holding_id,
            recommendation_id=record.recommendation_id,
            transaction_type=(
                TransactionType.BUY if original_type == TransactionType.SELL else TransactionType.SELL
            ),
            symbol=record.symbol,
            asset_category=record.asset_category,
            quantity=record.quantity,
            price=record.price,
            transaction_date=trade_date,
            platform=record.platform,
            notes=f"Reversal of transaction {record.id}",
            reversal_of_id=record.id,
        ))
        self.transactions.mark_reversed(record, compensating.transaction_id)

        return ReversalResult(
            transaction_id=record.id,
            compensating_transaction_id=compensating.transaction_id,
            holding_id=record.holding_id,
            holding_quantity=holding_quantity,
            holding_recreated=recreated,
            message="Transaction reversed successfully",
        )
