"""Holding-period classification.

Decides whether a holding is short-term or long-term from its asset
category and how long it has been held.
"""

import logging
from datetime import date
from typing import Optional

from taxsaver.tax.config import (
    DEFAULT_LTCG_HOLDING_DAYS,
    LEGACY_LTCG_HOLDING_DAYS,
    LTCG_HOLDING_DAYS,
    AssetCategory,
    RuleSet,
)
from taxsaver.tax.models import Classification

logger = logging.getLogger(__name__)


class HoldingClassifier:
    """Classifies holdings into short- and long-term.

    Under ``RuleSet.MULTI_ASSET`` crypto never becomes long-term. The
    deprecated ``RuleSet.LEGACY`` table treats crypto as long-term after
    1095 days.
    """

    def __init__(self, rule_set: RuleSet = RuleSet.MULTI_ASSET):
        self.rule_set = rule_set
        self._thresholds = (
            LEGACY_LTCG_HOLDING_DAYS if rule_set == RuleSet.LEGACY else LTCG_HOLDING_DAYS
        )

    def threshold_days(self, category: Optional[AssetCategory]) -> Optional[int]:
        """Days to long-term status; None if the category has none."""
        if category is None:
            return DEFAULT_LTCG_HOLDING_DAYS
        return self._thresholds.get(category, DEFAULT_LTCG_HOLDING_DAYS)

    def classify(
        self,
        category,
        acquisition_date: date,
        as_of: Optional[date] = None,
    ) -> Classification:
        """Classify a holding acquired on ``acquisition_date``.

        Args:
            category: AssetCategory or raw stored value; unknown values use
                the default threshold.
            acquisition_date: Date the position was acquired.
            as_of: Valuation date. Defaults to today.

        Returns:
            Classification with days held and term.
        """
        resolved = AssetCategory.from_value(category)
        as_of = as_of or date.today()
        days = (as_of - acquisition_date).days
        threshold = self.threshold_days(resolved)

        if resolved is None:
            logger.debug("Unknown asset category %r, using default threshold", category)

        is_long_term = threshold is not None and days >= threshold
        return Classification(
            category=resolved,
            holding_period_days=days,
            threshold_days=threshold,
            is_long_term=is_long_term,
        )
