"""TaxService - public operations of the tax engine over one session."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from taxsaver.logging_config import bind_operation
from taxsaver.settings import get_settings
from taxsaver.tax.calculator import PriceLookup, TaxCalculator
from taxsaver.tax.carry_forward import CarryForwardLedger
from taxsaver.tax.classifier import HoldingClassifier
from taxsaver.tax.config import TaxConfiguration, TaxEngineConfig
from taxsaver.tax.executor import RecommendationExecutor
from taxsaver.tax.fiscal_year import current_fiscal_year
from taxsaver.tax.harvesting import RecommendationEngine
from taxsaver.tax.models import (
    AvailableCarryForward,
    CapitalGains,
    CarryForwardApplication,
    CarryForwardInsight,
    CarryForwardResult,
    ExecutionResult,
    QuickEstimate,
    Recommendation,
    RegimeComparison,
    ReversalResult,
    TaxSummary,
    WashSaleCheckResult,
    WashSalePair,
    WashSaleWarning,
)
from taxsaver.tax.provider import TaxConfigurationProvider
from taxsaver.tax.regimes import RegimeComparator
from taxsaver.tax.stores import HoldingStore, TaxConfigurationStore
from taxsaver.tax.wash_sales import WashSaleGuard

logger = logging.getLogger(__name__)


class TaxService:
    """Facade wiring the engine components to a database session.

    Example:
        with SyncSessionLocal()() as session:
            service = TaxService(session, price_lookup=prices.get)
            summary = service.calculate_tax(user_id, "2024-25")
    """

    def __init__(
        self,
        session: Session,
        config: Optional[TaxEngineConfig] = None,
        price_lookup: Optional[PriceLookup] = None,
    ):
        self.session = session
        self.config = config or TaxEngineConfig.from_settings(get_settings())

        self.provider = TaxConfigurationProvider(TaxConfigurationStore(session), self.config.rule_set)
        self.calculator = TaxCalculator(
            HoldingStore(session),
            self.provider,
            HoldingClassifier(self.config.rule_set),
            price_lookup,
        )
        self.carry_forward = CarryForwardLedger(session, self.config.carry_forward)
        self.wash_sales = WashSaleGuard(session, self.config.wash_sale)
        self.recommendations = RecommendationEngine(
            session, self.calculator, self.wash_sales, self.config.recommendation
        )
        self.executor = RecommendationExecutor(session, self.wash_sales)
        self.regimes = RegimeComparator(self.config.regime)

    # =========================================================================
    # Tax Calculation
    # =========================================================================

    @bind_operation()
    def calculate_tax(
        self,
        user_id: str,
        fiscal_year: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> TaxSummary:
        return self.calculator.calculate_tax(user_id, fiscal_year, as_of)

    @staticmethod
    def get_current_fiscal_year(today: Optional[date] = None) -> str:
        return current_fiscal_year(today)

    @bind_operation()
    def seed_tax_configuration(self, configuration: TaxConfiguration) -> None:
        self.provider.seed(configuration)
        self.session.commit()

    # =========================================================================
    # Recommendations
    # =========================================================================

    @bind_operation()
    def generate_recommendations(
        self,
        user_id: str,
        fiscal_year: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> list[Recommendation]:
        return self.recommendations.generate(user_id, fiscal_year, as_of)

    @bind_operation()
    def get_recommendations(self, user_id: str, status=None) -> list[Recommendation]:
        return self.recommendations.get_recommendations(user_id, status)

    @bind_operation()
    def update_recommendation_status(self, recommendation_id: str, user_id: str, status) -> Recommendation:
        return self.executor.update_status(recommendation_id, user_id, status)

    @bind_operation()
    def execute_recommendation(
        self,
        recommendation_id: str,
        user_id: str,
        trade_date: Optional[date] = None,
    ) -> ExecutionResult:
        return self.executor.execute(recommendation_id, user_id, trade_date)

    @bind_operation()
    def reverse_transaction(
        self,
        transaction_id: str,
        user_id: str,
        trade_date: Optional[date] = None,
    ) -> ReversalResult:
        return self.executor.reverse(transaction_id, user_id, trade_date)

    @bind_operation()
    def expire_recommendations(self, user_id: str, as_of: Optional[date] = None) -> int:
        return self.executor.expire_overdue(user_id, as_of)

    # =========================================================================
    # Wash Sales
    # =========================================================================

    @bind_operation()
    def check_wash_sale(
        self,
        user_id: str,
        symbol: str,
        proposed_buy_date: Optional[date] = None,
    ) -> WashSaleCheckResult:
        return self.wash_sales.check_forward(user_id, symbol, proposed_buy_date)

    @bind_operation()
    def check_reverse_wash_sale(
        self,
        user_id: str,
        symbol: str,
        proposed_sell_date: Optional[date] = None,
    ) -> WashSaleCheckResult:
        return self.wash_sales.check_reverse(user_id, symbol, proposed_sell_date)

    @bind_operation()
    def get_wash_sale_history(self, user_id: str, fiscal_year: str) -> list[WashSalePair]:
        return self.wash_sales.history(user_id, fiscal_year)

    @bind_operation()
    def get_wash_sale_warnings(self, user_id: str, as_of: Optional[date] = None) -> list[WashSaleWarning]:
        return self.wash_sales.warnings(user_id, as_of)

    # =========================================================================
    # Carry-Forward
    # =========================================================================

    @bind_operation()
    def get_carry_forward(self, user_id: str, fiscal_year: str) -> AvailableCarryForward:
        return self.carry_forward.get_available(user_id, fiscal_year)

    @bind_operation()
    def record_carry_forward(
        self,
        user_id: str,
        fiscal_year: str,
        summary: Optional[TaxSummary] = None,
    ) -> CarryForwardResult:
        """Close ``fiscal_year``; computes its summary when not supplied."""
        if summary is None:
            summary = self.calculate_tax(user_id, fiscal_year)
        return self.carry_forward.record_year_end(user_id, fiscal_year, summary)

    @bind_operation()
    def apply_carry_forward(
        self,
        user_id: str,
        fiscal_year: str,
        short_term_gain: Optional[float] = None,
        long_term_gain: Optional[float] = None,
    ) -> CarryForwardApplication:
        return self.carry_forward.apply_to_current_year(
            user_id, fiscal_year, short_term_gain, long_term_gain
        )

    @bind_operation()
    def get_carry_forward_insights(self, user_id: str, fiscal_year: str) -> list[CarryForwardInsight]:
        return self.carry_forward.insights(user_id, fiscal_year)

    # =========================================================================
    # Regimes
    # =========================================================================

    def compare_regimes(
        self,
        income: Optional[float],
        deductions=None,
        capital_gains: Optional[CapitalGains] = None,
    ) -> RegimeComparison:
        return self.regimes.compare(income, deductions, capital_gains)

    def quick_estimate(self, income: Optional[float], deductions: Optional[float] = None) -> QuickEstimate:
        return self.regimes.quick_estimate(income, deductions)
