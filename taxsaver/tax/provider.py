"""Tax configuration provider.

Resolves the rate table for a fiscal year, substituting the statutory
defaults when none is stored. A read-miss never writes anything.
"""

import logging
from typing import Optional

from taxsaver.errors import ConfigurationMissingError
from taxsaver.tax.config import (
    RuleSet,
    TaxConfiguration,
    default_tax_configuration,
    legacy_tax_configuration,
)
from taxsaver.tax.fiscal_year import parse_fiscal_year
from taxsaver.tax.stores import TaxConfigurationStore

logger = logging.getLogger(__name__)


class TaxConfigurationProvider:
    """Reads per-year configuration and falls back to defaults."""

    def __init__(
        self,
        store: Optional[TaxConfigurationStore] = None,
        rule_set: RuleSet = RuleSet.MULTI_ASSET,
    ):
        self.store = store
        self.rule_set = rule_set

    def get(self, fiscal_year: str) -> TaxConfiguration:
        parse_fiscal_year(fiscal_year)
        if self.store is not None:
            try:
                return self.store.get(fiscal_year)
            except ConfigurationMissingError:
                logger.info("No tax configuration for FY %s, using defaults", fiscal_year)
        return self.default(fiscal_year)

    def default(self, fiscal_year: str) -> TaxConfiguration:
        if self.rule_set == RuleSet.LEGACY:
            return legacy_tax_configuration(fiscal_year)
        return default_tax_configuration(fiscal_year)

    def seed(self, configuration: TaxConfiguration) -> None:
        """Persist a configuration explicitly. The caller commits."""
        if self.store is None:
            raise ValueError("Cannot seed configuration without a store")
        parse_fiscal_year(configuration.fiscal_year)
        self.store.save(configuration)
        logger.info("Seeded tax configuration for FY %s", configuration.fiscal_year)
