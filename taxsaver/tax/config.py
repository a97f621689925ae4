"""Tax Engine Configuration.

Asset categories, holding-period thresholds, regime slabs, rate tables
and configuration dataclasses for Indian capital-gains computation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# =============================================================================
# Enums
# =============================================================================

class AssetCategory(str, Enum):
    """Asset class, which decides holding-period threshold and rates."""
    EQUITY = "equity"
    CRYPTO = "crypto"
    EQUITY_FUND = "equity_fund"
    DEBT_FUND = "debt_fund"
    GOLD_ETF = "gold_etf"
    BOND = "bond"

    @classmethod
    def from_value(cls, value) -> Optional["AssetCategory"]:
        """Resolve a stored value (including legacy aliases); None if unknown."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        key = str(value).strip().lower()
        key = CATEGORY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


# Names used by earlier imports and broker exports
CATEGORY_ALIASES: dict[str, str] = {
    "stock": "equity",
    "mutual_fund": "equity_fund",
    "debt_mf": "debt_fund",
    "gold": "gold_etf",
}


class HoldingPeriod(str, Enum):
    """Capital-gains term classification."""
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"


class RuleSet(str, Enum):
    """Which holding-period rule table to classify with."""
    MULTI_ASSET = "multi_asset"  # canonical: crypto is never long-term
    LEGACY = "legacy"            # deprecated: crypto long-term after 1095 days


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class RecommendationType(str, Enum):
    HARVEST_LOSS = "harvest_loss"
    DEFER_GAIN = "defer_gain"
    SELL_PARTIAL = "sell_partial"


class RecommendationStatus(str, Enum):
    """Recommendation lifecycle state."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Regime(str, Enum):
    """Income-tax regime choice."""
    OLD = "OLD"
    NEW = "NEW"
    EITHER = "EITHER"


# =============================================================================
# Holding-Period Thresholds (days)
# =============================================================================

# None means the category never becomes long-term
LTCG_HOLDING_DAYS: dict[AssetCategory, Optional[int]] = {
    AssetCategory.EQUITY: 365,
    AssetCategory.EQUITY_FUND: 365,
    AssetCategory.DEBT_FUND: 1095,
    AssetCategory.GOLD_ETF: 1095,
    AssetCategory.BOND: 1095,
    AssetCategory.CRYPTO: None,
}

LEGACY_LTCG_HOLDING_DAYS: dict[AssetCategory, Optional[int]] = {
    AssetCategory.EQUITY: 365,
    AssetCategory.EQUITY_FUND: 365,
    AssetCategory.DEBT_FUND: 1095,
    AssetCategory.GOLD_ETF: 1095,
    AssetCategory.BOND: 1095,
    AssetCategory.CRYPTO: 1095,
}

DEFAULT_LTCG_HOLDING_DAYS = 1095

# Categories whose long-term gains get the equity exemption
EXEMPTION_CATEGORIES = frozenset({AssetCategory.EQUITY, AssetCategory.EQUITY_FUND})

FISCAL_YEAR_START_MONTH = 4


# =============================================================================
# Income-Tax Regimes
# =============================================================================

# (upper bound, rate) pairs, ascending
OLD_REGIME_SLABS: list[tuple[float, float]] = [
    (250_000, 0.00),
    (500_000, 0.05),
    (1_000_000, 0.20),
    (float("inf"), 0.30),
]

NEW_REGIME_SLABS: list[tuple[float, float]] = [
    (300_000, 0.00),
    (600_000, 0.05),
    (900_000, 0.10),
    (1_200_000, 0.15),
    (1_500_000, 0.20),
    (float("inf"), 0.30),
]

# Surcharge on income tax, chosen by total income including gains
SURCHARGE_TIERS: list[tuple[float, float]] = [
    (5_000_000, 0.00),      # up to 50L
    (10_000_000, 0.10),     # 50L - 1Cr
    (20_000_000, 0.15),     # 1Cr - 2Cr
    (50_000_000, 0.25),     # 2Cr - 5Cr
    (float("inf"), 0.37),   # above 5Cr
]

OLD_REGIME_DEDUCTION_CEILING = 350_000
HEALTH_EDUCATION_CESS = 0.04


# =============================================================================
# Configuration Dataclasses
# =============================================================================

@dataclass(frozen=True)
class TaxConfiguration:
    """Capital-gains rate table for one fiscal year. Rates are fractions."""
    fiscal_year: str
    short_term_equity_rate: float = 0.20
    long_term_equity_rate: float = 0.125
    long_term_equity_exemption: float = 100_000
    crypto_short_term_rate: float = 0.30
    crypto_long_term_rate: float = 0.30
    other_short_term_rate: float = 0.30   # debt funds, gold ETF, bonds
    other_long_term_rate: float = 0.125
    default_rate: float = 0.30            # unknown categories
    surcharge_threshold: float = 5_000_000
    surcharge_rate: float = 0.10
    cess_rate: float = 0.04
    is_default: bool = field(default=False, compare=False)

    def rate_for(self, category: Optional[AssetCategory], is_long_term: bool) -> float:
        """Rate for a (category x term) pair; unknown categories get default_rate."""
        if category in EXEMPTION_CATEGORIES:
            return self.long_term_equity_rate if is_long_term else self.short_term_equity_rate
        if category is AssetCategory.CRYPTO:
            return self.crypto_long_term_rate if is_long_term else self.crypto_short_term_rate
        if category is None:
            return self.default_rate
        return self.other_long_term_rate if is_long_term else self.other_short_term_rate

    def exemption_for(self, category: Optional[AssetCategory], is_long_term: bool) -> float:
        if is_long_term and category in EXEMPTION_CATEGORIES:
            return self.long_term_equity_exemption
        return 0.0


def default_tax_configuration(fiscal_year: str) -> TaxConfiguration:
    """Default synthesized when no year-specific configuration is stored."""
    return TaxConfiguration(fiscal_year=fiscal_year, is_default=True)


def legacy_tax_configuration(fiscal_year: str) -> TaxConfiguration:
    """Rates of the deprecated single-path calculator (use with RuleSet.LEGACY)."""
    return TaxConfiguration(
        fiscal_year=fiscal_year,
        short_term_equity_rate=0.15,
        long_term_equity_rate=0.10,
        long_term_equity_exemption=100_000,
        crypto_short_term_rate=0.30,
        crypto_long_term_rate=0.20,
        surcharge_threshold=5_000_000,
        surcharge_rate=0.10,
        cess_rate=0.04,
        is_default=True,
    )


@dataclass
class WashSaleConfig:
    """Wash-sale window configuration."""
    window_days: int = 30


@dataclass
class CarryForwardConfig:
    """Loss carry-forward configuration."""
    expiry_years: int = 8
    expiry_warning_years: int = 6
    # Flat illustrative rates for the tax-saved estimate, not effective rates
    illustrative_short_term_rate: float = 0.15
    illustrative_long_term_rate: float = 0.10


@dataclass
class RecommendationConfig:
    """Tax-loss-harvesting recommendation configuration."""
    min_loss_threshold: float = 0.0
    loss_percent_step: float = 5.0
    savings_bonus: int = 3
    max_priority: int = 10
    flag_wash_sales: bool = True


@dataclass
class RegimeConfig:
    """Old vs new regime comparison parameters."""
    old_slabs: list[tuple[float, float]] = field(default_factory=lambda: list(OLD_REGIME_SLABS))
    new_slabs: list[tuple[float, float]] = field(default_factory=lambda: list(NEW_REGIME_SLABS))
    deduction_ceiling: float = OLD_REGIME_DEDUCTION_CEILING
    surcharge_tiers: list[tuple[float, float]] = field(default_factory=lambda: list(SURCHARGE_TIERS))
    cess_rate: float = HEALTH_EDUCATION_CESS
    short_term_equity_rate: float = 0.20
    long_term_equity_rate: float = 0.125
    long_term_equity_exemption: float = 100_000
    crypto_rate: float = 0.30


@dataclass
class TaxEngineConfig:
    """Main engine configuration."""
    rule_set: RuleSet = RuleSet.MULTI_ASSET
    wash_sale: WashSaleConfig = field(default_factory=WashSaleConfig)
    carry_forward: CarryForwardConfig = field(default_factory=CarryForwardConfig)
    recommendation: RecommendationConfig = field(default_factory=RecommendationConfig)
    regime: RegimeConfig = field(default_factory=RegimeConfig)

    @classmethod
    def from_settings(cls, settings) -> "TaxEngineConfig":
        return cls(
            wash_sale=WashSaleConfig(window_days=settings.wash_sale_window_days),
            carry_forward=CarryForwardConfig(expiry_years=settings.carry_forward_expiry_years),
            recommendation=RecommendationConfig(min_loss_threshold=settings.min_harvest_loss),
        )
