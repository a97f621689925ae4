"""Wash-Sale Guard.

Flags trades that fall within a window (30 days by default) of an
opposite trade in the same symbol. Selling at a loss and buying straight
back can be treated as tax avoidance, so the guard reports how long to
wait. It is advisory only and never blocks a trade.

Reversed transactions and their compensating rows are ignored.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from taxsaver.tax.config import TransactionType, WashSaleConfig
from taxsaver.tax.fiscal_year import fiscal_year_bounds
from taxsaver.tax.models import (
    Recommendation,
    WashSaleCheckResult,
    WashSalePair,
    WashSaleWarning,
)
from taxsaver.tax.stores import TransactionStore

logger = logging.getLogger(__name__)


class WashSaleGuard:
    """Checks prospective trades against recent opposite trades."""

    def __init__(self, session: Session, config: Optional[WashSaleConfig] = None):
        self.transactions = TransactionStore(session)
        self.config = config or WashSaleConfig()

    @property
    def window(self) -> timedelta:
        return timedelta(days=self.config.window_days)

    def check_forward(
        self,
        user_id: str,
        symbol: str,
        proposed_buy_date: Optional[date] = None,
    ) -> WashSaleCheckResult:
        """Would buying ``symbol`` on ``proposed_buy_date`` follow a recent sale?"""
        buy_date = proposed_buy_date or date.today()
        sells = self.transactions.find(
            user_id,
            symbol=symbol,
            transaction_type=TransactionType.SELL,
            start=buy_date - self.window,
            end=buy_date,
        )
        if not sells:
            return WashSaleCheckResult(symbol=symbol)

        last_sell = sells[0]
        can_buy_after = last_sell.transaction_date + self.window
        days_remaining = (can_buy_after - buy_date).days
        is_wash_sale = days_remaining > 0

        warning = None
        if is_wash_sale:
            warning = (
                f"Warning: You sold {symbol} on {last_sell.transaction_date.isoformat()}. "
                f"To avoid wash sale, wait {days_remaining} more days before repurchasing."
            )
        return WashSaleCheckResult(
            symbol=symbol,
            is_wash_sale=is_wash_sale,
            related_trade_date=last_sell.transaction_date,
            related_trade_price=last_sell.price,
            can_trade_after=can_buy_after,
            days_remaining=max(0, days_remaining),
            warning=warning,
        )

    def check_reverse(
        self,
        user_id: str,
        symbol: str,
        proposed_sell_date: Optional[date] = None,
    ) -> WashSaleCheckResult:
        """Would selling ``symbol`` on ``proposed_sell_date`` follow a recent buy?"""
        sell_date = proposed_sell_date or date.today()
        buys = self.transactions.find(
            user_id,
            symbol=symbol,
            transaction_type=TransactionType.BUY,
            start=sell_date - self.window,
            end=sell_date,
            end_exclusive=True,
        )
        if not buys:
            return WashSaleCheckResult(symbol=symbol)

        last_buy = buys[0]
        days_since_buy = (sell_date - last_buy.transaction_date).days
        days_remaining = self.config.window_days - days_since_buy
        return WashSaleCheckResult(
            symbol=symbol,
            is_wash_sale=True,
            related_trade_date=last_buy.transaction_date,
            related_trade_price=last_buy.price,
            can_trade_after=sell_date + self.window,
            days_remaining=days_remaining,
            warning=(
                f"Warning: You bought {symbol} {days_since_buy} days ago. "
                "Selling now may be considered tax avoidance. "
                f"Consider waiting {days_remaining} more days."
            ),
        )

    def history(self, user_id: str, fiscal_year: str) -> list[WashSalePair]:
        """Sells in the fiscal year followed by a buy-back within the window.

        ``loss_disallowed`` is ``(sell price - buy price) x min(quantities)``
        and is reported whatever its sign.
        """
        fy_start, fy_end = fiscal_year_bounds(fiscal_year)
        sells = self.transactions.find(
            user_id, transaction_type=TransactionType.SELL, start=fy_start, end=fy_end
        )

        pairs = []
        for sell in sorted(sells, key=lambda t: t.transaction_date):
            buys = self.transactions.find(
                user_id,
                symbol=sell.symbol,
                transaction_type=TransactionType.BUY,
                start=sell.transaction_date + timedelta(days=1),
                end=sell.transaction_date + self.window,
            )
            if not buys:
                continue
            # find() is newest first; the pair uses the first buy-back
            buy = buys[-1]
            pairs.append(WashSalePair(
                symbol=sell.symbol,
                sell_date=sell.transaction_date,
                sell_price=sell.price,
                sell_quantity=sell.quantity,
                repurchase_date=buy.transaction_date,
                repurchase_price=buy.price,
                repurchase_quantity=buy.quantity,
                days_between=(buy.transaction_date - sell.transaction_date).days,
                loss_disallowed=(sell.price - buy.price) * min(sell.quantity, buy.quantity),
            ))

        logger.debug("Found %d wash-sale pairs in FY %s", len(pairs), fiscal_year)
        return pairs

    def warnings(self, user_id: str, as_of: Optional[date] = None) -> list[WashSaleWarning]:
        """Symbols sold recently enough that buying back now is a wash sale."""
        as_of = as_of or date.today()
        recent_sells = self.transactions.find(
            user_id,
            transaction_type=TransactionType.SELL,
            start=as_of - self.window,
            end=as_of,
        )

        warnings = []
        for symbol in sorted({t.symbol for t in recent_sells}):
            check = self.check_forward(user_id, symbol, as_of)
            if check.is_wash_sale:
                warnings.append(WashSaleWarning(
                    symbol=symbol,
                    sell_date=check.related_trade_date,
                    days_remaining=check.days_remaining,
                    can_buy_back_after=check.can_trade_after,
                ))
        return warnings

    def flag_recommendations(
        self,
        user_id: str,
        recommendations: list[Recommendation],
        as_of: Optional[date] = None,
    ) -> list[Recommendation]:
        """Set ``wash_sale_warning`` on sell recommendations following a recent buy."""
        for rec in recommendations:
            check = self.check_reverse(user_id, rec.symbol, as_of)
            rec.wash_sale_warning = check.is_wash_sale
            if check.is_wash_sale:
                logger.info(
                    "Recommendation for %s falls in wash-sale window (%d days remaining)",
                    rec.symbol, check.days_remaining,
                    extra={"user_id": user_id},
                )
        return recommendations
