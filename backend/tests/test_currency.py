"""
Unit tests for the fixed-rate currency table.
"""
import logging

import pytest

from expense_tracker.services import currency


class TestConvert:
    def test_same_currency_is_identity(self):
        assert currency.convert(123.45, "EUR", "EUR") == 123.45

    def test_same_currency_ignores_case(self):
        assert currency.convert(10, "jpy", "JPY") == 10

    def test_usd_to_eur(self):
        assert currency.convert(100, "USD", "EUR") == pytest.approx(92.98)

    def test_eur_to_usd(self):
        assert currency.convert(92.98, "EUR", "USD") == pytest.approx(100)

    def test_cross_rate_pivots_through_usd(self):
        expected = 1000 / 160.93 * 83.5025
        assert currency.convert(1000, "JPY", "INR") == pytest.approx(expected)

    def test_round_trip_is_stable(self):
        there = currency.convert(250, "GBP", "BRL")
        assert currency.convert(there, "BRL", "GBP") == pytest.approx(250)

    def test_zero_amount(self):
        assert currency.convert(0, "USD", "CHF") == 0

    def test_unsupported_source_treated_as_usd(self, caplog):
        with caplog.at_level(logging.WARNING, logger="expense_tracker.services.currency"):
            result = currency.convert(100, "XYZ", "EUR")
        assert result == pytest.approx(92.98)
        assert "XYZ" in caplog.text

    def test_unsupported_target_treated_as_usd(self):
        assert currency.convert(92.98, "EUR", "ZZZ") == pytest.approx(100)


class TestTable:
    def test_usd_is_the_pivot(self):
        assert currency.EXCHANGE_RATES["USD"] == 1.0

    def test_all_rates_positive(self):
        assert all(rate > 0 for rate in currency.EXCHANGE_RATES.values())

    def test_metadata_covers_every_rate(self):
        assert set(currency.CURRENCIES) == set(currency.EXCHANGE_RATES)

    def test_normalize(self):
        assert currency.normalize_currency(" eur ") == "EUR"
        assert currency.normalize_currency("XYZ") is None
        assert currency.normalize_currency(None) is None

    def test_options(self):
        options = currency.currency_options()
        assert {"value": "EUR", "label": "EUR - Euro"} in options
        assert len(options) == len(currency.EXCHANGE_RATES)

    def test_format(self):
        assert currency.format_currency(1234.5, "USD") == "$1,234.50"
        assert currency.format_currency(1234.4, "JPY") == "¥1,234"
        assert currency.format_currency(-3, "GBP") == "-£3.00"


@pytest.mark.parametrize("source", sorted(currency.EXCHANGE_RATES))
@pytest.mark.parametrize("target", sorted(currency.EXCHANGE_RATES))
def test_round_trip_every_pair(source, target):
    for amount in (0, 1, 100.5, 1000000):
        there = currency.convert(amount, source, target)
        assert currency.convert(there, target, source) == pytest.approx(amount, rel=1e-9)
