"""Capital-gains tax calculator.

Computes per-holding unrealized gain/loss and liability, then aggregates
into a fiscal-year summary with surcharge and cess.

Note: the long-term equity exemption is subtracted from each holding's
gain separately, not once from the aggregate. With several long-term lots
this yields a lower liability than the statutory aggregate treatment used
by the regime comparator.
"""

import logging
from datetime import date
from typing import Callable, Optional

from taxsaver.errors import ComputationSkippedError
from taxsaver.logging_config import log_performance
from taxsaver.tax.classifier import HoldingClassifier
from taxsaver.tax.config import AssetCategory, TaxConfiguration
from taxsaver.tax.fiscal_year import current_fiscal_year
from taxsaver.tax.models import Holding, SkippedHolding, TaxCalculation, TaxSummary
from taxsaver.tax.provider import TaxConfigurationProvider
from taxsaver.tax.stores import HoldingStore

logger = logging.getLogger(__name__)

# (symbol, category) -> price, or None when unknown
PriceLookup = Callable[[str, Optional[AssetCategory]], Optional[float]]


class TaxCalculator:
    """Per-holding and aggregate capital-gains liability."""

    def __init__(
        self,
        holdings: HoldingStore,
        provider: TaxConfigurationProvider,
        classifier: Optional[HoldingClassifier] = None,
        price_lookup: Optional[PriceLookup] = None,
    ):
        self.holdings = holdings
        self.provider = provider
        self.classifier = classifier or HoldingClassifier(provider.rule_set)
        self.price_lookup = price_lookup

    @log_performance(threshold_ms=500)
    def calculate_tax(
        self,
        user_id: str,
        fiscal_year: Optional[str] = None,
        as_of: Optional[date] = None,
    ) -> TaxSummary:
        """Tax summary over the user's current holdings.

        Args:
            user_id: Owner of the holdings.
            fiscal_year: Selects the rate table. Defaults to the current year.
            as_of: Valuation date for holding periods. Defaults to today.
        """
        fiscal_year = fiscal_year or current_fiscal_year(as_of)
        configuration = self.provider.get(fiscal_year)
        holdings = self.holdings.list_for_user(user_id)
        summary = self.summarize(user_id, fiscal_year, holdings, configuration, as_of)
        logger.info(
            "Calculated tax for %d holdings (%d skipped): liability %.2f",
            len(summary.calculations),
            len(summary.skipped),
            summary.total_tax_with_surcharge_and_cess,
            extra={"user_id": user_id, "fiscal_year": fiscal_year},
        )
        return summary

    def summarize(
        self,
        user_id: str,
        fiscal_year: str,
        holdings: list[Holding],
        configuration: TaxConfiguration,
        as_of: Optional[date] = None,
    ) -> TaxSummary:
        summary = TaxSummary(
            user_id=user_id,
            fiscal_year=fiscal_year,
            used_default_configuration=configuration.is_default,
        )

        for holding in holdings:
            try:
                calc = self.calculate_holding(holding, configuration, as_of)
            except ComputationSkippedError as e:
                logger.warning(e.message, extra={"user_id": user_id})
                summary.skipped.append(
                    SkippedHolding(holding_id=holding.holding_id, symbol=holding.symbol, reason=e.reason)
                )
                continue

            summary.calculations.append(calc)
            if calc.is_long_term:
                if calc.gain_loss > 0:
                    summary.total_long_term_gains += calc.gain_loss
                else:
                    summary.total_long_term_losses += abs(calc.gain_loss)
            else:
                if calc.gain_loss > 0:
                    summary.total_short_term_gains += calc.gain_loss
                else:
                    summary.total_short_term_losses += abs(calc.gain_loss)
            summary.total_tax_liability += calc.tax_liability

        # Same-bucket clip only; cross-bucket offset happens in carry-forward
        summary.net_short_term = max(0.0, summary.total_short_term_gains - summary.total_short_term_losses)
        summary.net_long_term = max(0.0, summary.total_long_term_gains - summary.total_long_term_losses)

        gross_gains = summary.total_short_term_gains + summary.total_long_term_gains
        if gross_gains > configuration.surcharge_threshold:
            summary.surcharge = summary.total_tax_liability * configuration.surcharge_rate
        summary.cess = (summary.total_tax_liability + summary.surcharge) * configuration.cess_rate
        return summary

    def calculate_holding(
        self,
        holding: Holding,
        configuration: TaxConfiguration,
        as_of: Optional[date] = None,
    ) -> TaxCalculation:
        """Gain/loss and liability of one holding.

        Raises:
            ComputationSkippedError: If quantity, cost or price is invalid.
        """
        price = self.resolve_price(holding)
        self._validate(holding, price)

        classification = self.classifier.classify(
            holding.asset_category, holding.acquisition_date, as_of
        )
        gain = holding.quantity * (price - holding.average_price)
        invested = holding.invested
        gain_pct = (gain / invested * 100) if invested > 0 else 0.0

        # Losses keep their applicable rate for savings estimates but are never taxed
        category = classification.category
        rate = configuration.rate_for(category, classification.is_long_term)
        taxable = 0.0
        liability = 0.0
        if gain > 0:
            exemption = configuration.exemption_for(category, classification.is_long_term)
            taxable = max(0.0, gain - exemption)
            liability = taxable * rate

        return TaxCalculation(
            holding=holding,
            current_price=price,
            gain_loss=gain,
            gain_loss_percentage=gain_pct,
            holding_period_days=classification.holding_period_days,
            is_long_term=classification.is_long_term,
            tax_rate=rate,
            taxable_amount=taxable,
            tax_liability=liability,
        )

    def resolve_price(self, holding: Holding) -> Optional[float]:
        """Injected lookup first, then the stored current price."""
        if self.price_lookup is not None:
            price = self.price_lookup(holding.symbol, holding.category)
            if price is not None:
                return price
        return holding.current_price

    @staticmethod
    def _validate(holding: Holding, price: Optional[float]) -> None:
        if holding.quantity is None or holding.quantity <= 0:
            raise ComputationSkippedError(holding.holding_id, "quantity must be positive")
        if holding.average_price is None or holding.average_price < 0:
            raise ComputationSkippedError(holding.holding_id, "average price must not be negative")
        if price is None:
            raise ComputationSkippedError(holding.holding_id, "no current price available")
        if price <= 0:
            raise ComputationSkippedError(holding.holding_id, "current price must be positive")
