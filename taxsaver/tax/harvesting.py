"""Tax-Loss Harvesting Recommendations.

Scans loss-making holdings, sizes the tax each loss could save against the
current net gain in its bucket, scores priority and persists the candidates
as pending recommendations.
"""

import logging
import math
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from taxsaver.logging_config import log_performance
from taxsaver.tax.calculator import TaxCalculator
from taxsaver.tax.config import RecommendationConfig, RecommendationStatus, RecommendationType
from taxsaver.tax.executor import parse_status
from taxsaver.tax.fiscal_year import current_fiscal_year, fiscal_year_end
from taxsaver.tax.models import Recommendation, TaxCalculation, TaxSummary
from taxsaver.tax.stores import RecommendationStore
from taxsaver.tax.wash_sales import WashSaleGuard

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Generates and lists harvesting recommendations.

    Each candidate's savings are sized against the full net gain of its
    bucket; gains claimed by one candidate are not deducted before the
    next, so combined savings across candidates may exceed what can be
    realized together.
    """

    def __init__(
        self,
        session: Session,
        calculator: TaxCalculator,
        wash_sale_guard: Optional[WashSaleGuard] = None,
        config: Optional[RecommendationConfig] = None,
    ):
        self.session = session
        self.calculator = calculator
        self.wash_sale_guard = wash_sale_guard
        self.config = config or RecommendationConfig()
        self.store = RecommendationStore(session)

    @log_performance(threshold_ms=1000)
    def generate(
        self,
        user_id: str,
        fiscal_year: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> list[Recommendation]:
        """Create pending recommendations for every loss-making holding.

        Returns:
            Persisted recommendations, highest priority first; equal
            priorities keep holding order.
        """
        fiscal_year = fiscal_year or current_fiscal_year(as_of)
        summary = self.calculator.calculate_tax(user_id, fiscal_year, as_of)
        deadline = fiscal_year_end(fiscal_year)

        candidates = [
            self.build_recommendation(user_id, calc, summary, deadline)
            for calc in summary.loss_calculations
            if abs(calc.gain_loss) >= self.config.min_loss_threshold
        ]

        if self.wash_sale_guard is not None and self.config.flag_wash_sales:
            self.wash_sale_guard.flag_recommendations(user_id, candidates, as_of)

        candidates.sort(key=lambda r: r.priority_score, reverse=True)
        persisted = [self.store.add(rec) for rec in candidates]
        self.session.commit()

        logger.info(
            "Recommendations generated: %d", len(persisted),
            extra={"user_id": user_id, "fiscal_year": fiscal_year},
        )
        return persisted

    def build_recommendation(
        self,
        user_id: str,
        calc: TaxCalculation,
        summary: TaxSummary,
        deadline: date,
    ) -> Recommendation:
        holding = calc.holding
        potential_loss = abs(calc.gain_loss)
        tax_savings = self.estimate_savings(calc, summary)
        return Recommendation(
            user_id=user_id,
            holding_id=holding.holding_id,
            symbol=holding.symbol,
            recommendation_type=RecommendationType.HARVEST_LOSS,
            current_price=calc.current_price,
            purchase_price=holding.average_price,
            quantity=holding.quantity,
            potential_loss=potential_loss,
            tax_savings=tax_savings,
            priority_score=self.priority_score(calc.gain_loss_percentage, tax_savings),
            deadline=deadline,
            notes=(
                f"Selling this asset will realize a loss of ₹{potential_loss:.2f}, "
                f"potentially saving ₹{tax_savings:.2f} in taxes."
            ),
            status=RecommendationStatus.PENDING,
        )

    @staticmethod
    def estimate_savings(calc: TaxCalculation, summary: TaxSummary) -> float:
        """Loss offset against the matching bucket's net gain, at the holding's rate."""
        available = summary.net_long_term if calc.is_long_term else summary.net_short_term
        if available <= 0:
            return 0.0
        return min(abs(calc.gain_loss), available) * calc.tax_rate

    def priority_score(self, loss_percentage: float, tax_savings: float) -> int:
        score = math.floor(abs(loss_percentage) / self.config.loss_percent_step)
        if tax_savings > 0:
            score += self.config.savings_bonus
        return min(self.config.max_priority, score)

    def get_recommendations(self, user_id: str, status=None) -> list[Recommendation]:
        """Stored recommendations by priority, newest first within a priority."""
        status = parse_status(status) if status is not None else None
        return self.store.list_for_user(user_id, status)
