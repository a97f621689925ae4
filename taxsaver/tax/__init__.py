"""Indian Capital-Gains Tax Engine.

Tax computation and loss harvesting for multi-asset portfolios:
- Short/long-term classification per asset category
- Per-holding and aggregate liability with surcharge and cess
- Loss carry-forward with eight-year expiry
- 30-day wash-sale checks (advisory)
- Tax-loss-harvesting recommendations and atomic execution
- Old vs new income-tax regime comparison

Example:
    from taxsaver.tax import TaxService

    service = TaxService(session)
    summary = service.calculate_tax("user-1", "2024-25")
    recs = service.generate_recommendations("user-1", "2024-25")
    result = service.execute_recommendation(recs[0].recommendation_id, "user-1")
"""

from taxsaver.tax.config import (
    AssetCategory,
    HoldingPeriod,
    RuleSet,
    TransactionType,
    RecommendationType,
    RecommendationStatus,
    Regime,
    LTCG_HOLDING_DAYS,
    OLD_REGIME_SLABS,
    NEW_REGIME_SLABS,
    SURCHARGE_TIERS,
    TaxConfiguration,
    WashSaleConfig,
    CarryForwardConfig,
    RecommendationConfig,
    RegimeConfig,
    TaxEngineConfig,
    default_tax_configuration,
    legacy_tax_configuration,
)
from taxsaver.tax.models import (
    Holding,
    Transaction,
    Classification,
    TaxCalculation,
    SkippedHolding,
    TaxSummary,
    CarryForwardEntry,
    CarryForwardResult,
    AvailableCarryForward,
    CarryForwardApplication,
    CarryForwardInsight,
    WashSaleCheckResult,
    WashSalePair,
    WashSaleWarning,
    Recommendation,
    ExecutionResult,
    ReversalResult,
    Deductions,
    CapitalGains,
    RegimeCalculation,
    RegimeComparison,
    QuickEstimate,
)
from taxsaver.tax.fiscal_year import (
    current_fiscal_year,
    fiscal_year_bounds,
    fiscal_year_end,
    fiscal_year_for,
    next_fiscal_year,
    parse_fiscal_year,
)
from taxsaver.tax.classifier import HoldingClassifier
from taxsaver.tax.provider import TaxConfigurationProvider
from taxsaver.tax.calculator import PriceLookup, TaxCalculator
from taxsaver.tax.carry_forward import CarryForwardLedger
from taxsaver.tax.wash_sales import WashSaleGuard
from taxsaver.tax.harvesting import RecommendationEngine
from taxsaver.tax.executor import RecommendationExecutor
from taxsaver.tax.regimes import RegimeComparator
from taxsaver.tax.service import TaxService

__all__ = [
    # Config
    "AssetCategory",
    "HoldingPeriod",
    "RuleSet",
    "TransactionType",
    "RecommendationType",
    "RecommendationStatus",
    "Regime",
    "LTCG_HOLDING_DAYS",
    "OLD_REGIME_SLABS",
    "NEW_REGIME_SLABS",
    "SURCHARGE_TIERS",
    "TaxConfiguration",
    "WashSaleConfig",
    "CarryForwardConfig",
    "RecommendationConfig",
    "RegimeConfig",
    "TaxEngineConfig",
    "default_tax_configuration",
    "legacy_tax_configuration",
    # Models
    "Holding",
    "Transaction",
    "Classification",
    "TaxCalculation",
    "SkippedHolding",
    "TaxSummary",
    "CarryForwardEntry",
    "CarryForwardResult",
    "AvailableCarryForward",
    "CarryForwardApplication",
    "CarryForwardInsight",
    "WashSaleCheckResult",
    "WashSalePair",
    "WashSaleWarning",
    "Recommendation",
    "ExecutionResult",
    "ReversalResult",
    "Deductions",
    "CapitalGains",
    "RegimeCalculation",
    "RegimeComparison",
    "QuickEstimate",
    # Fiscal year
    "current_fiscal_year",
    "fiscal_year_bounds",
    "fiscal_year_end",
    "fiscal_year_for",
    "next_fiscal_year",
    "parse_fiscal_year",
    # Components
    "HoldingClassifier",
    "TaxConfigurationProvider",
    "PriceLookup",
    "TaxCalculator",
    "CarryForwardLedger",
    "WashSaleGuard",
    "RecommendationEngine",
    "RecommendationExecutor",
    "RegimeComparator",
    "TaxService",
]
