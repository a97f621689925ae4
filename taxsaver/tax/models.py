"""Tax Engine Data Models.

Dataclasses for holdings, per-holding calculations, summaries,
carry-forward ledger entries, wash-sale checks, recommendations
and regime comparisons.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from taxsaver.tax.config import (
    AssetCategory,
    HoldingPeriod,
    RecommendationStatus,
    RecommendationType,
    Regime,
    TransactionType,
)


# =============================================================================
# Holdings & Transactions
# =============================================================================

@dataclass
class Holding:
    """Open position as stored. ``asset_category`` is kept raw so unknown
    categories survive the round trip."""
    holding_id: str = ""
    user_id: str = ""
    symbol: str = ""
    asset_category: str = AssetCategory.EQUITY.value
    quantity: float = 0.0
    average_price: float = 0.0
    current_price: Optional[float] = None
    acquisition_date: date = field(default_factory=date.today)
    platform: Optional[str] = None

    @property
    def category(self) -> Optional[AssetCategory]:
        return AssetCategory.from_value(self.asset_category)

    @property
    def invested(self) -> float:
        return self.quantity * self.average_price


@dataclass
class Transaction:
    """Ledger row."""
    transaction_id: str = ""
    user_id: str = ""
    holding_id: Optional[str] = None
    recommendation_id: Optional[str] = None
    transaction_type: TransactionType = TransactionType.BUY
    symbol: str = ""
    asset_category: str = AssetCategory.EQUITY.value
    quantity: float = 0.0
    price: float = 0.0
    transaction_date: date = field(default_factory=date.today)
    fees: float = 0.0
    platform: Optional[str] = None
    notes: Optional[str] = None
    is_reversed: bool = False
    reversed_at: Optional[datetime] = None
    reversed_by_id: Optional[str] = None
    reversal_of_id: Optional[str] = None

    @property
    def value(self) -> float:
        return self.quantity * self.price

    @property
    def is_compensating(self) -> bool:
        return self.reversal_of_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.transaction_id,
            "holding_id": self.holding_id,
            "recommendation_id": self.recommendation_id,
            "transaction_type": self.transaction_type.value,
            "symbol": self.symbol,
            "asset_category": self.asset_category,
            "quantity": self.quantity,
            "price": self.price,
            "transaction_date": self.transaction_date.isoformat(),
            "fees": self.fees,
            "platform": self.platform,
            "notes": self.notes,
            "is_reversed": self.is_reversed,
        }


# =============================================================================
# Classification & Calculation
# =============================================================================

@dataclass
class Classification:
    """Holding-period classification of one holding."""
    category: Optional[AssetCategory] = None
    holding_period_days: int = 0
    threshold_days: Optional[int] = None
    is_long_term: bool = False

    @property
    def holding_period(self) -> HoldingPeriod:
        return HoldingPeriod.LONG_TERM if self.is_long_term else HoldingPeriod.SHORT_TERM


@dataclass
class TaxCalculation:
    """Unrealized gain/loss and tax liability of one holding."""
    holding: Holding = field(default_factory=Holding)
    current_price: float = 0.0
    gain_loss: float = 0.0
    gain_loss_percentage: float = 0.0
    holding_period_days: int = 0
    is_long_term: bool = False
    tax_rate: float = 0.0
    taxable_amount: float = 0.0
    tax_liability: float = 0.0

    @property
    def is_loss(self) -> bool:
        return self.gain_loss < 0

    @property
    def holding_period(self) -> HoldingPeriod:
        return HoldingPeriod.LONG_TERM if self.is_long_term else HoldingPeriod.SHORT_TERM

    def to_dict(self) -> dict[str, Any]:
        return {
            "holding_id": self.holding.holding_id,
            "symbol": self.holding.symbol,
            "asset_category": self.holding.asset_category,
            "quantity": self.holding.quantity,
            "average_price": self.holding.average_price,
            "current_price": self.current_price,
            "gain_loss": self.gain_loss,
            "gain_loss_percentage": self.gain_loss_percentage,
            "holding_period_days": self.holding_period_days,
            "is_long_term": self.is_long_term,
            "tax_rate": self.tax_rate,
            "taxable_amount": self.taxable_amount,
            "tax_liability": self.tax_liability,
        }


@dataclass
class SkippedHolding:
    holding_id: str = ""
    symbol: str = ""
    reason: str = ""


@dataclass
class TaxSummary:
    """Aggregate capital-gains position of one user for one fiscal year."""
    user_id: str = ""
    fiscal_year: str = ""
    total_short_term_gains: float = 0.0
    total_short_term_losses: float = 0.0
    total_long_term_gains: float = 0.0
    total_long_term_losses: float = 0.0
    net_short_term: float = 0.0
    net_long_term: float = 0.0
    total_tax_liability: float = 0.0
    surcharge: float = 0.0
    cess: float = 0.0
    calculations: list[TaxCalculation] = field(default_factory=list)
    skipped: list[SkippedHolding] = field(default_factory=list)
    used_default_configuration: bool = False

    @property
    def total_tax_with_surcharge_and_cess(self) -> float:
        return self.total_tax_liability + self.surcharge + self.cess

    @property
    def loss_calculations(self) -> list[TaxCalculation]:
        return [c for c in self.calculations if c.is_loss]

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "fiscal_year": self.fiscal_year,
            "total_short_term_gains": self.total_short_term_gains,
            "total_short_term_losses": self.total_short_term_losses,
            "total_long_term_gains": self.total_long_term_gains,
            "total_long_term_losses": self.total_long_term_losses,
            "net_short_term": self.net_short_term,
            "net_long_term": self.net_long_term,
            "total_tax_liability": self.total_tax_liability,
            "surcharge": self.surcharge,
            "cess": self.cess,
            "total_tax_with_surcharge_and_cess": self.total_tax_with_surcharge_and_cess,
            "calculations": [c.to_dict() for c in self.calculations],
            "skipped": [
                {"holding_id": s.holding_id, "symbol": s.symbol, "reason": s.reason}
                for s in self.skipped
            ],
        }


# =============================================================================
# Carry-Forward
# =============================================================================

@dataclass
class CarryForwardEntry:
    """Losses of ``source_fiscal_year`` usable from ``fiscal_year`` onwards."""
    fiscal_year: str = ""
    source_fiscal_year: str = ""
    short_term_loss: float = 0.0
    long_term_loss: float = 0.0
    expires_in: int = 8
    created_at: Optional[datetime] = None

    @property
    def total_loss(self) -> float:
        return self.short_term_loss + self.long_term_loss


@dataclass
class CarryForwardResult:
    """Outcome of recording a fiscal year's closing losses."""
    fiscal_year: str = ""
    next_fiscal_year: str = ""
    short_term_carry_forward: float = 0.0
    long_term_carry_forward: float = 0.0
    expires_in: int = 8
    message: str = ""


@dataclass
class AvailableCarryForward:
    """Unexpired carry-forward usable in a fiscal year."""
    fiscal_year: str = ""
    total_short_term: float = 0.0
    total_long_term: float = 0.0
    entries: list[CarryForwardEntry] = field(default_factory=list)

    @property
    def total(self) -> float:
        return self.total_short_term + self.total_long_term

    @property
    def count(self) -> int:
        return len(self.entries)


@dataclass
class CarryForwardApplication:
    """Gains after offsetting available carry-forward losses. Read-only."""
    original_short_term_gain: float = 0.0
    original_long_term_gain: float = 0.0
    adjusted_short_term_gain: float = 0.0
    adjusted_long_term_gain: float = 0.0
    short_term_loss_used: float = 0.0
    long_term_loss_used: float = 0.0
    tax_saved: float = 0.0

    @property
    def total_loss_used(self) -> float:
        return self.short_term_loss_used + self.long_term_loss_used

    @property
    def carry_forward_applied(self) -> bool:
        return self.total_loss_used > 0


@dataclass
class CarryForwardInsight:
    insight_type: str = ""  # carry_forward, expiry_warning
    message: str = ""
    action: str = ""
    priority: str = "medium"


# =============================================================================
# Wash Sales
# =============================================================================

@dataclass
class WashSaleCheckResult:
    """Whether a prospective trade falls inside the wash-sale window."""
    symbol: str = ""
    is_wash_sale: bool = False
    related_trade_date: Optional[date] = None
    related_trade_price: Optional[float] = None
    can_trade_after: Optional[date] = None
    days_remaining: int = 0
    warning: Optional[str] = None


@dataclass
class WashSalePair:
    """A loss sale followed by a repurchase within the window."""
    symbol: str = ""
    sell_date: date = field(default_factory=date.today)
    sell_price: float = 0.0
    sell_quantity: float = 0.0
    repurchase_date: date = field(default_factory=date.today)
    repurchase_price: float = 0.0
    repurchase_quantity: float = 0.0
    days_between: int = 0
    loss_disallowed: float = 0.0


@dataclass
class WashSaleWarning:
    """Symbol sold recently enough that buying it back is a wash sale."""
    symbol: str = ""
    sell_date: date = field(default_factory=date.today)
    days_remaining: int = 0
    can_buy_back_after: date = field(default_factory=date.today)


# =============================================================================
# Recommendations & Execution
# =============================================================================

@dataclass
class Recommendation:
    """Tax-loss-harvesting recommendation."""
    recommendation_id: Optional[str] = None
    user_id: str = ""
    holding_id: Optional[str] = None
    symbol: str = ""
    recommendation_type: RecommendationType = RecommendationType.HARVEST_LOSS
    current_price: float = 0.0
    purchase_price: float = 0.0
    quantity: float = 0.0
    potential_loss: float = 0.0
    tax_savings: float = 0.0
    priority_score: int = 0
    deadline: Optional[date] = None
    notes: str = ""
    status: RecommendationStatus = RecommendationStatus.PENDING
    wash_sale_warning: bool = False
    created_at: Optional[datetime] = None
    executed_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.recommendation_id,
            "holding_id": self.holding_id,
            "symbol": self.symbol,
            "recommendation_type": self.recommendation_type.value,
            "current_price": self.current_price,
            "purchase_price": self.purchase_price,
            "quantity": self.quantity,
            "potential_loss": self.potential_loss,
            "tax_savings": self.tax_savings,
            "priority_score": self.priority_score,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "notes": self.notes,
            "status": self.status.value,
            "wash_sale_warning": self.wash_sale_warning,
        }


@dataclass
class ExecutionResult:
    """Outcome of executing a recommendation."""
    transaction: Transaction = field(default_factory=Transaction)
    recommendation: Recommendation = field(default_factory=Recommendation)
    remaining_quantity: float = 0.0
    fully_sold: bool = False
    wash_sale: WashSaleCheckResult = field(default_factory=WashSaleCheckResult)


@dataclass
class ReversalResult:
    """Outcome of reversing a transaction."""
    transaction_id: str = ""
    compensating_transaction_id: str = ""
    holding_id: Optional[str] = None
    holding_quantity: float = 0.0
    holding_recreated: bool = False
    message: str = ""


# =============================================================================
# Regime Comparison
# =============================================================================

@dataclass
class Deductions:
    """Chapter VI-A and related deductions (old regime only)."""
    section_80c: float = 0.0
    section_80d: float = 0.0
    home_loan_interest: float = 0.0
    nps: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.section_80c + self.section_80d + self.home_loan_interest + self.nps + self.other


@dataclass
class CapitalGains:
    """Realized capital gains for a regime comparison."""
    short_term_equity: float = 0.0
    long_term_equity: float = 0.0
    short_term_crypto: float = 0.0
    long_term_crypto: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.short_term_equity + self.long_term_equity
            + self.short_term_crypto + self.long_term_crypto
        )


@dataclass
class RegimeCalculation:
    """Tax under one regime."""
    regime: Regime = Regime.NEW
    taxable_income: float = 0.0
    deductions_used: float = 0.0
    income_tax: float = 0.0
    surcharge: float = 0.0
    cess: float = 0.0
    capital_gains_tax: float = 0.0
    total_tax: float = 0.0
    effective_rate: float = 0.0


@dataclass
class RegimeComparison:
    old_regime: RegimeCalculation = field(default_factory=RegimeCalculation)
    new_regime: RegimeCalculation = field(default_factory=RegimeCalculation)
    recommendation: Regime = Regime.EITHER
    savings: float = 0.0
    savings_percentage: float = 0.0
    explanation: str = ""


@dataclass
class QuickEstimate:
    old_regime_tax: float = 0.0
    new_regime_tax: float = 0.0
    recommendation: Regime = Regime.EITHER
