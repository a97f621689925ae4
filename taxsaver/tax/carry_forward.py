"""Capital-loss carry-forward ledger.

Net losses left at the close of a fiscal year are carried into the next
year and stay usable for eight years from the year they arose in.
Short-term losses offset short-term gains and then long-term gains;
long-term losses offset long-term gains only.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from taxsaver.tax.config import CarryForwardConfig
from taxsaver.tax.fiscal_year import next_fiscal_year, parse_fiscal_year, years_between
from taxsaver.tax.formatting import format_inr
from taxsaver.tax.models import (
    AvailableCarryForward,
    CarryForwardApplication,
    CarryForwardInsight,
    CarryForwardResult,
    TaxSummary,
)
from taxsaver.tax.stores import CarryForwardStore

logger = logging.getLogger(__name__)


class CarryForwardLedger:
    """Records, sums and applies carried-forward losses."""

    def __init__(self, session: Session, config: Optional[CarryForwardConfig] = None):
        self.session = session
        self.store = CarryForwardStore(session)
        self.config = config or CarryForwardConfig()

    def record_year_end(self, user_id: str, fiscal_year: str, summary: TaxSummary) -> CarryForwardResult:
        """Carry the year's net losses into the next fiscal year.

        Upserts the next year's record when either net loss is positive;
        recording the same year twice overwrites the earlier amounts.
        """
        target = next_fiscal_year(fiscal_year)
        net_st_loss = max(0.0, summary.total_short_term_losses - summary.total_short_term_gains)
        net_lt_loss = max(0.0, summary.total_long_term_losses - summary.total_long_term_gains)
        has_losses = net_st_loss > 0 or net_lt_loss > 0

        if has_losses:
            self.store.upsert(
                user_id=user_id,
                fiscal_year=target,
                source_fiscal_year=fiscal_year,
                short_term_loss=net_st_loss,
                long_term_loss=net_lt_loss,
                expires_in=self.config.expiry_years,
            )
            self.session.commit()
            logger.info(
                "Carried forward ST %.2f / LT %.2f from FY %s to FY %s",
                net_st_loss, net_lt_loss, fiscal_year, target,
                extra={"user_id": user_id, "fiscal_year": fiscal_year},
            )

        return CarryForwardResult(
            fiscal_year=fiscal_year,
            next_fiscal_year=target,
            short_term_carry_forward=net_st_loss,
            long_term_carry_forward=net_lt_loss,
            expires_in=self.config.expiry_years,
            message=(
                "Losses will be carried forward to next year"
                if has_losses else "No losses to carry forward"
            ),
        )

    def get_available(self, user_id: str, fiscal_year: str) -> AvailableCarryForward:
        """Unexpired losses usable in ``fiscal_year``.

        A record sourced from year Y is unavailable once ``fiscal_year - Y``
        reaches its ``expires_in``.
        """
        parse_fiscal_year(fiscal_year)
        available = AvailableCarryForward(fiscal_year=fiscal_year)
        for entry in self.store.list_up_to(user_id, fiscal_year):
            if years_between(entry.source_fiscal_year, fiscal_year) >= entry.expires_in:
                logger.debug("Carry-forward from FY %s has expired", entry.source_fiscal_year)
                continue
            available.entries.append(entry)
            available.total_short_term += entry.short_term_loss
            available.total_long_term += entry.long_term_loss
        return available

    def apply_to_current_year(
        self,
        user_id: str,
        fiscal_year: str,
        short_term_gain: Optional[float] = None,
        long_term_gain: Optional[float] = None,
    ) -> CarryForwardApplication:
        """Offset current gains with available losses. Nothing is persisted.

        ``tax_saved`` uses flat illustrative rates, not the effective rates
        of the gains being offset.
        """
        short_term_gain = short_term_gain or 0.0
        long_term_gain = long_term_gain or 0.0
        available = self.get_available(user_id, fiscal_year)

        remaining_st = max(0.0, short_term_gain)
        remaining_lt = max(0.0, long_term_gain)
        st_used = 0.0
        lt_used = 0.0

        if available.total_short_term > 0:
            offset = min(remaining_st, available.total_short_term)
            remaining_st -= offset
            st_used += offset

            leftover = available.total_short_term - st_used
            if leftover > 0 and remaining_lt > 0:
                offset = min(remaining_lt, leftover)
                remaining_lt -= offset
                st_used += offset

        if available.total_long_term > 0 and remaining_lt > 0:
            offset = min(remaining_lt, available.total_long_term)
            remaining_lt -= offset
            lt_used += offset

        tax_saved = (
            st_used * self.config.illustrative_short_term_rate
            + lt_used * self.config.illustrative_long_term_rate
        )
        return CarryForwardApplication(
            original_short_term_gain=short_term_gain,
            original_long_term_gain=long_term_gain,
            adjusted_short_term_gain=remaining_st,
            adjusted_long_term_gain=remaining_lt,
            short_term_loss_used=st_used,
            long_term_loss_used=lt_used,
            tax_saved=tax_saved,
        )

    def insights(self, user_id: str, fiscal_year: str) -> list[CarryForwardInsight]:
        available = self.get_available(user_id, fiscal_year)
        insights = []

        if available.total_short_term > 0:
            insights.append(CarryForwardInsight(
                insight_type="carry_forward",
                message=(
                    f"You have ₹{format_inr(available.total_short_term)} "
                    "in short-term losses from previous years"
                ),
                action="These can offset both short-term and long-term gains",
                priority="high",
            ))

        if available.total_long_term > 0:
            insights.append(CarryForwardInsight(
                insight_type="carry_forward",
                message=(
                    f"You have ₹{format_inr(available.total_long_term)} "
                    "in long-term losses from previous years"
                ),
                action="These can offset long-term gains only",
                priority="medium",
            ))

        if available.entries:
            oldest = available.entries[-1]
            years_old = years_between(oldest.source_fiscal_year, fiscal_year)
            if years_old >= self.config.expiry_warning_years:
                insights.append(CarryForwardInsight(
                    insight_type="expiry_warning",
                    message=(
                        f"Losses from FY {oldest.source_fiscal_year} will expire in "
                        f"{oldest.expires_in - years_old} years"
                    ),
                    action="Consider realizing gains to utilize these losses before they expire",
                    priority="urgent",
                ))

        return insights
