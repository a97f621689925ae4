"""Tests for holding classification, fiscal years, configuration and tax calculation."""

from dataclasses import FrozenInstanceError
from datetime import date, timedelta

import pytest

from taxsaver.db import TaxConfigurationRecord
from taxsaver.errors import ErrorCode, ValidationError
from taxsaver.tax import (
    AssetCategory,
    Holding,
    HoldingClassifier,
    HoldingPeriod,
    RegimeComparator,
    CapitalGains,
    RuleSet,
    TaxCalculator,
    TaxConfiguration,
    TaxConfigurationProvider,
    current_fiscal_year,
    fiscal_year_bounds,
    fiscal_year_end,
    next_fiscal_year,
    parse_fiscal_year,
)
from taxsaver.tax.stores import HoldingStore, TaxConfigurationStore

AS_OF = date(2025, 1, 15)
FY = "2024-25"
USER = "user-1"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def classifier():
    return HoldingClassifier()


@pytest.fixture
def provider(session):
    return TaxConfigurationProvider(TaxConfigurationStore(session))


@pytest.fixture
def calculator(session, provider):
    return TaxCalculator(HoldingStore(session), provider)


def make_holding(
    symbol="RELIANCE",
    quantity=10,
    average_price=2500.0,
    current_price=2300.0,
    days_held=200,
    asset_category="equity",
    holding_id=None,
):
    return Holding(
        holding_id=holding_id or symbol,
        user_id=USER,
        symbol=symbol,
        asset_category=asset_category,
        quantity=quantity,
        average_price=average_price,
        current_price=current_price,
        acquisition_date=AS_OF - timedelta(days=days_held),
    )


# =============================================================================
# Holding Classifier
# =============================================================================

class TestHoldingClassifier:
    """Tests for HoldingClassifier."""

    def test_equity_threshold_is_365_days(self, classifier):
        short = classifier.classify("equity", AS_OF - timedelta(days=364), AS_OF)
        long = classifier.classify("equity", AS_OF - timedelta(days=365), AS_OF)
        assert not short.is_long_term
        assert long.is_long_term
        assert long.holding_period == HoldingPeriod.LONG_TERM
        assert long.threshold_days == 365

    def test_equity_fund_uses_equity_threshold(self, classifier):
        result = classifier.classify(AssetCategory.EQUITY_FUND, AS_OF - timedelta(days=365), AS_OF)
        assert result.is_long_term

    @pytest.mark.parametrize("category", ["debt_fund", "gold_etf", "bond"])
    def test_non_equity_threshold_is_1095_days(self, classifier, category):
        assert not classifier.classify(category, AS_OF - timedelta(days=1094), AS_OF).is_long_term
        assert classifier.classify(category, AS_OF - timedelta(days=1095), AS_OF).is_long_term

    def test_crypto_never_long_term(self, classifier):
        result = classifier.classify("crypto", AS_OF - timedelta(days=4000), AS_OF)
        assert not result.is_long_term
        assert result.threshold_days is None
        assert result.holding_period_days == 4000

    def test_legacy_rules_make_crypto_long_term(self):
        legacy = HoldingClassifier(RuleSet.LEGACY)
        assert legacy.classify("crypto", AS_OF - timedelta(days=1095), AS_OF).is_long_term
        assert not legacy.classify("crypto", AS_OF - timedelta(days=1094), AS_OF).is_long_term

    def test_unknown_category_uses_default_threshold(self, classifier):
        result = classifier.classify("art", AS_OF - timedelta(days=1095), AS_OF)
        assert result.category is None
        assert result.threshold_days == 1095
        assert result.is_long_term

    def test_legacy_alias_resolves(self, classifier):
        result = classifier.classify("stock", AS_OF - timedelta(days=400), AS_OF)
        assert result.category == AssetCategory.EQUITY
        assert result.is_long_term

    def test_defaults_to_today(self, classifier):
        result = classifier.classify("equity", date.today() - timedelta(days=10))
        assert result.holding_period_days == 10


# =============================================================================
# Fiscal Years
# =============================================================================

class TestFiscalYear:
    """Tests for fiscal-year helpers."""

    def test_year_starts_in_april(self):
        assert current_fiscal_year(date(2025, 3, 31)) == "2024-25"
        assert current_fiscal_year(date(2025, 4, 1)) == "2025-26"

    def test_century_rollover(self):
        assert current_fiscal_year(date(1999, 12, 1)) == "1999-00"
        assert parse_fiscal_year("1999-00") == 1999

    def test_bounds_and_end(self):
        assert fiscal_year_bounds(FY) == (date(2024, 4, 1), date(2025, 3, 31))
        assert fiscal_year_end(FY) == date(2025, 3, 31)

    def test_next_fiscal_year(self):
        assert next_fiscal_year("2024-25") == "2025-26"

    @pytest.mark.parametrize("value", ["2024-26", "2024/25", "24-25", "", "2024-2025"])
    def test_invalid_fiscal_year(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_fiscal_year(value)
        assert exc_info.value.error_code == ErrorCode.INVALID_FISCAL_YEAR
        assert exc_info.value.status_code == 400


# =============================================================================
# Tax Configuration
# =============================================================================

class TestTaxConfigurationProvider:
    """Tests for TaxConfigurationProvider."""

    def test_missing_configuration_uses_defaults(self, session, provider):
        config = provider.get(FY)
        assert config.is_default
        assert config.short_term_equity_rate == 0.20
        assert config.long_term_equity_rate == 0.125
        assert config.long_term_equity_exemption == 100_000
        assert config.cess_rate == 0.04

    def test_read_miss_never_persists(self, session, provider):
        provider.get(FY)
        assert session.query(TaxConfigurationRecord).count() == 0

    def test_seeded_configuration_is_returned(self, session, provider):
        provider.seed(TaxConfiguration(fiscal_year=FY, short_term_equity_rate=0.15))
        session.commit()

        config = provider.get(FY)
        assert not config.is_default
        assert config.short_term_equity_rate == 0.15
        assert provider.get("2023-24").is_default

    def test_configuration_is_immutable(self, provider):
        config = provider.get(FY)
        with pytest.raises(FrozenInstanceError):
            config.short_term_equity_rate = 0.5

    def test_invalid_fiscal_year_rejected(self, provider):
        with pytest.raises(ValidationError):
            provider.get("2024")

    def test_rates_by_category(self):
        config = TaxConfiguration(fiscal_year=FY)
        assert config.rate_for(AssetCategory.EQUITY, False) == 0.20
        assert config.rate_for(AssetCategory.EQUITY_FUND, True) == 0.125
        assert config.rate_for(AssetCategory.CRYPTO, False) == 0.30
        assert config.rate_for(AssetCategory.DEBT_FUND, False) == 0.30
        assert config.rate_for(AssetCategory.GOLD_ETF, True) == 0.125
        assert config.rate_for(None, True) == 0.30
        assert config.exemption_for(AssetCategory.EQUITY, True) == 100_000
        assert config.exemption_for(AssetCategory.BOND, True) == 0.0
        assert config.exemption_for(AssetCategory.EQUITY, False) == 0.0


# =============================================================================
# Tax Calculator
# =============================================================================

class TestTaxCalculator:
    """Tests for TaxCalculator."""

    def test_short_term_loss_example(self, calculator, add_holding):
        add_holding("RELIANCE", quantity=10, average_price=2500, current_price=2300, days_held=200)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert len(summary.calculations) == 1
        calc = summary.calculations[0]
        assert calc.gain_loss == pytest.approx(-2000)
        assert calc.gain_loss_percentage == pytest.approx(-8.0)
        assert not calc.is_long_term
        assert calc.tax_rate == pytest.approx(0.20)
        assert calc.tax_liability == 0
        assert summary.total_short_term_losses == pytest.approx(2000)
        assert summary.total_tax_with_surcharge_and_cess == 0

    def test_losses_are_never_taxed(self, calculator, add_holding):
        add_holding("A", quantity=5, average_price=100, current_price=50, days_held=30)
        add_holding("B", quantity=5, average_price=100, current_price=100, days_held=500)
        add_holding("C", quantity=1, average_price=10, current_price=1, days_held=10, asset_category="crypto")

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        for calc in summary.calculations:
            assert calc.gain_loss <= 0
            assert calc.tax_liability == 0
            assert calc.taxable_amount == 0

    def test_short_term_gain_with_cess(self, calculator, add_holding):
        add_holding("TCS", quantity=10, average_price=100, current_price=150, days_held=100)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.total_short_term_gains == pytest.approx(500)
        assert summary.total_tax_liability == pytest.approx(100)
        assert summary.surcharge == 0
        assert summary.cess == pytest.approx(4)
        assert summary.total_tax_with_surcharge_and_cess == pytest.approx(104)

    def test_long_term_exemption_applied_per_holding(self, calculator, add_holding):
        add_holding("INFY", quantity=1000, average_price=100, current_price=250, days_held=400)
        add_holding("HDFC", quantity=1000, average_price=100, current_price=250, days_held=500)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        # Each 150,000 gain loses its own 100,000 exemption
        assert summary.total_long_term_gains == pytest.approx(300_000)
        assert summary.total_tax_liability == pytest.approx(12_500)

        aggregate = RegimeComparator().calculate_capital_gains_tax(
            CapitalGains(long_term_equity=300_000)
        )
        assert aggregate == pytest.approx(25_000)
        assert summary.total_tax_liability != pytest.approx(aggregate)

    def test_single_long_term_lot_matches_aggregate(self, calculator, add_holding):
        add_holding("INFY", quantity=1000, average_price=100, current_price=300, days_held=400)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.calculations[0].taxable_amount == pytest.approx(100_000)
        assert summary.total_tax_liability == pytest.approx(12_500)

    def test_non_equity_long_term_has_no_exemption(self, calculator, add_holding):
        add_holding("LIQUIDBEES", quantity=100, average_price=1000, current_price=1100,
                    days_held=1200, asset_category="debt_fund")

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        calc = summary.calculations[0]
        assert calc.is_long_term
        assert calc.tax_rate == pytest.approx(0.125)
        assert calc.tax_liability == pytest.approx(1250)

    def test_crypto_taxed_at_flat_rate(self, calculator, add_holding):
        add_holding("BTC", quantity=1, average_price=1_000_000, current_price=1_500_000,
                    days_held=2000, asset_category="crypto")

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert not summary.calculations[0].is_long_term
        assert summary.total_tax_liability == pytest.approx(150_000)

    def test_legacy_rules_tax_crypto_as_long_term(self, session, add_holding):
        legacy = TaxCalculator(
            HoldingStore(session),
            TaxConfigurationProvider(TaxConfigurationStore(session), RuleSet.LEGACY),
        )
        add_holding("BTC", quantity=1, average_price=100_000, current_price=200_000,
                    days_held=1200, asset_category="crypto")

        summary = legacy.calculate_tax(USER, FY, AS_OF)

        calc = summary.calculations[0]
        assert calc.is_long_term
        assert calc.tax_rate == pytest.approx(0.20)
        assert summary.total_long_term_gains == pytest.approx(100_000)

    def test_unknown_category_uses_default_rate(self, calculator, add_holding):
        add_holding("PAINTING", quantity=1, average_price=1000, current_price=2000,
                    days_held=50, asset_category="art")

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.calculations[0].tax_rate == pytest.approx(0.30)
        assert summary.total_tax_liability == pytest.approx(300)

    def test_surcharge_above_threshold(self, calculator, add_holding):
        add_holding("MRF", quantity=1000, average_price=1000, current_price=7000, days_held=100)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.total_tax_liability == pytest.approx(1_200_000)
        assert summary.surcharge == pytest.approx(120_000)
        assert summary.cess == pytest.approx(52_800)
        assert summary.total_tax_with_surcharge_and_cess == pytest.approx(1_372_800)

    def test_net_buckets_clip_at_zero(self, calculator, add_holding):
        add_holding("WIN", quantity=10, average_price=100, current_price=200, days_held=10)
        add_holding("LOSE", quantity=10, average_price=500, current_price=300, days_held=10)
        add_holding("OLDWIN", quantity=10, average_price=100, current_price=150, days_held=700)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.total_short_term_gains == pytest.approx(1000)
        assert summary.total_short_term_losses == pytest.approx(2000)
        assert summary.net_short_term == 0
        # No cross-bucket offset at this stage
        assert summary.net_long_term == pytest.approx(500)

    def test_net_buckets_independent_of_order(self, calculator, provider):
        holdings = [
            make_holding("A", 10, 100, 180, 20),
            make_holding("B", 10, 100, 60, 30),
            make_holding("C", 10, 100, 130, 900),
            make_holding("D", 10, 100, 90, 800),
        ]
        config = provider.get(FY)

        forward = calculator.summarize(USER, FY, holdings, config, AS_OF)
        backward = calculator.summarize(USER, FY, list(reversed(holdings)), config, AS_OF)

        assert forward.net_short_term == pytest.approx(backward.net_short_term) == pytest.approx(400)
        assert forward.net_long_term == pytest.approx(backward.net_long_term) == pytest.approx(200)
        assert forward.total_tax_liability == pytest.approx(backward.total_tax_liability)

    def test_invalid_holdings_are_skipped(self, calculator, add_holding):
        add_holding("GOOD", quantity=10, average_price=100, current_price=110, days_held=10)
        add_holding("EMPTY", quantity=0, average_price=100, current_price=110, days_held=10)
        add_holding("NOPRICE", quantity=10, average_price=100, current_price=None, days_held=10)
        add_holding("ZERO", quantity=10, average_price=100, current_price=0, days_held=10)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert [c.holding.symbol for c in summary.calculations] == ["GOOD"]
        assert sorted(s.symbol for s in summary.skipped) == ["EMPTY", "NOPRICE", "ZERO"]
        assert summary.total_short_term_gains == pytest.approx(100)

    def test_price_lookup_overrides_stored_price(self, session, provider, add_holding):
        add_holding("RELIANCE", quantity=10, average_price=2500, current_price=2300, days_held=200)
        prices = {"RELIANCE": 2600.0}
        calculator = TaxCalculator(
            HoldingStore(session), provider, price_lookup=lambda symbol, category: prices.get(symbol)
        )

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.calculations[0].current_price == 2600.0
        assert summary.calculations[0].gain_loss == pytest.approx(1000)

    def test_price_lookup_miss_falls_back_to_stored_price(self, session, provider, add_holding):
        add_holding("RELIANCE", quantity=10, average_price=2500, current_price=2300, days_held=200)
        calculator = TaxCalculator(HoldingStore(session), provider, price_lookup=lambda s, c: None)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert summary.calculations[0].current_price == 2300.0

    def test_seeded_rates_are_used(self, session, calculator, provider, add_holding):
        provider.seed(TaxConfiguration(fiscal_year=FY, short_term_equity_rate=0.15))
        session.commit()
        add_holding("TCS", quantity=10, average_price=100, current_price=200, days_held=10)

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert not summary.used_default_configuration
        assert summary.total_tax_liability == pytest.approx(150)

    def test_only_own_holdings_are_counted(self, calculator, add_holding):
        add_holding("TCS", quantity=10, average_price=100, current_price=200, days_held=10)
        add_holding("TCS", quantity=10, average_price=100, current_price=200, days_held=10,
                    user_id="user-2")

        summary = calculator.calculate_tax(USER, FY, AS_OF)

        assert len(summary.calculations) == 1

    def test_summary_to_dict(self, calculator, add_holding):
        add_holding()

        data = calculator.calculate_tax(USER, FY, AS_OF).to_dict()

        assert data["fiscal_year"] == FY
        assert data["calculations"][0]["symbol"] == "RELIANCE"
        assert data["total_tax_with_surcharge_and_cess"] == 0
