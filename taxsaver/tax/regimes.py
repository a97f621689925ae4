"""Old vs New income-tax regime comparison.

Computes total tax under both regimes for decision support. Capital-gains
tax is identical in both and applies the long-term equity exemption once
to the aggregate, unlike the per-holding calculator.
"""

import logging
from typing import Optional, Union

from taxsaver.tax.config import Regime, RegimeConfig
from taxsaver.tax.formatting import format_inr
from taxsaver.tax.models import (
    CapitalGains,
    Deductions,
    QuickEstimate,
    RegimeCalculation,
    RegimeComparison,
)

logger = logging.getLogger(__name__)


class RegimeComparator:
    """Compares the old (deduction-based) and new (flat-slab) regimes."""

    def __init__(self, config: Optional[RegimeConfig] = None):
        self.config = config or RegimeConfig()

    def compare(
        self,
        income: Optional[float],
        deductions: Union[Deductions, float, None] = None,
        capital_gains: Optional[CapitalGains] = None,
    ) -> RegimeComparison:
        """Total tax under both regimes and which one is cheaper.

        Missing inputs count as zero.
        """
        income = income or 0.0
        if deductions is None:
            deductions = Deductions()
        elif not isinstance(deductions, Deductions):
            deductions = Deductions(other=float(deductions))
        capital_gains = capital_gains or CapitalGains()

        old = self.calculate_old_regime(income, deductions, capital_gains)
        new = self.calculate_new_regime(income, capital_gains)

        diff = old.total_tax - new.total_tax
        if diff < 0:
            recommendation = Regime.OLD
        elif diff > 0:
            recommendation = Regime.NEW
        else:
            recommendation = Regime.EITHER

        highest = max(old.total_tax, new.total_tax)
        savings_pct = abs(diff) / highest * 100 if highest > 0 else 0.0

        comparison = RegimeComparison(
            old_regime=old,
            new_regime=new,
            recommendation=recommendation,
            savings=abs(diff),
            savings_percentage=savings_pct,
            explanation=self._explain(recommendation, abs(diff), old.deductions_used),
        )
        logger.debug(
            "Regime comparison: old %.2f, new %.2f -> %s",
            old.total_tax, new.total_tax, recommendation.value,
        )
        return comparison

    def quick_estimate(self, income: Optional[float], deductions: Optional[float] = None) -> QuickEstimate:
        """Compare regimes without capital gains, deductions given as one total."""
        comparison = self.compare(income, Deductions(section_80c=deductions or 0.0))
        return QuickEstimate(
            old_regime_tax=comparison.old_regime.total_tax,
            new_regime_tax=comparison.new_regime.total_tax,
            recommendation=comparison.recommendation,
        )

    # =========================================================================
    # Regimes
    # =========================================================================

    def calculate_old_regime(
        self,
        income: float,
        deductions: Deductions,
        capital_gains: CapitalGains,
    ) -> RegimeCalculation:
        deductions_used = min(deductions.total, self.config.deduction_ceiling)
        taxable_income = max(0.0, income - deductions_used)
        return self._build(
            Regime.OLD,
            income,
            taxable_income,
            deductions_used,
            self._calculate_slab_tax(taxable_income, self.config.old_slabs),
            capital_gains,
        )

    def calculate_new_regime(self, income: float, capital_gains: CapitalGains) -> RegimeCalculation:
        return self._build(
            Regime.NEW,
            income,
            income,
            0.0,
            self._calculate_slab_tax(income, self.config.new_slabs),
            capital_gains,
        )

    def _build(
        self,
        regime: Regime,
        income: float,
        taxable_income: float,
        deductions_used: float,
        income_tax: float,
        capital_gains: CapitalGains,
    ) -> RegimeCalculation:
        total_with_gains = income + capital_gains.total
        surcharge = income_tax * self._surcharge_rate(total_with_gains)
        cess = (income_tax + surcharge) * self.config.cess_rate
        cg_tax = self.calculate_capital_gains_tax(capital_gains)
        total = income_tax + surcharge + cess + cg_tax
        return RegimeCalculation(
            regime=regime,
            taxable_income=taxable_income,
            deductions_used=deductions_used,
            income_tax=income_tax,
            surcharge=surcharge,
            cess=cess,
            capital_gains_tax=cg_tax,
            total_tax=total,
            effective_rate=(total / total_with_gains * 100) if total_with_gains > 0 else 0.0,
        )

    # =========================================================================
    # Components
    # =========================================================================

    def calculate_capital_gains_tax(self, gains: CapitalGains) -> float:
        cfg = self.config
        tax = gains.short_term_equity * cfg.short_term_equity_rate
        tax += max(0.0, gains.long_term_equity - cfg.long_term_equity_exemption) * cfg.long_term_equity_rate
        tax += (gains.short_term_crypto + gains.long_term_crypto) * cfg.crypto_rate
        return tax

    def _surcharge_rate(self, total_income: float) -> float:
        """Rate of the first tier whose upper bound covers ``total_income``."""
        for upper, rate in self.config.surcharge_tiers:
            if total_income <= upper:
                return rate
        return self.config.surcharge_tiers[-1][1]

    @staticmethod
    def _calculate_slab_tax(income: float, slabs: list[tuple[float, float]]) -> float:
        """Marginal tax over ascending (upper bound, rate) slabs."""
        if income <= 0:
            return 0.0

        tax = 0.0
        lower = 0.0
        for upper, rate in slabs:
            if income <= lower:
                break
            tax += (min(income, upper) - lower) * rate
            lower = upper
        return tax

    @staticmethod
    def _explain(recommendation: Regime, savings: float, deductions_used: float) -> str:
        if recommendation == Regime.OLD:
            return (
                f"Old Regime is better by ₹{format_inr(savings)}. "
                f"Your deductions of ₹{format_inr(deductions_used)} result in significant "
                "tax savings. Continue maximizing 80C, 80D, and home loan deductions."
            )
        if recommendation == Regime.NEW:
            return (
                f"New Regime is better by ₹{format_inr(savings)}. "
                "The lower tax rates offset the loss of deductions. "
                "Consider switching to New Regime for simpler filing and better returns."
            )
        return (
            "Both regimes result in the same tax liability. You can choose either regime. "
            "Old Regime requires more documentation for deductions, while New Regime is simpler."
        )
