"""Tests for billing money_utils module."""

from decimal import Decimal

import pytest
from moneyed import Money

from remindi.billing.config import BillingConfig, set_billing_config
from remindi.billing.money_utils import (
    MoneyHandler,
    add_money,
    create_money,
    format_money,
    get_money_handler,
    reset_money_handler,
    round_money,
)


@pytest.mark.unit
class TestMoneyHandler:
    """Test MoneyHandler class."""

    def test_money_handler_initialization_defaults(self):
        handler = MoneyHandler()
        assert handler.default_currency.code == "USD"
        assert handler.default_locale == "en_US"

    def test_money_handler_initialization_custom(self):
        handler = MoneyHandler(default_currency="EUR", default_locale="de_DE")
        assert handler.default_currency.code == "EUR"
        assert handler.default_locale == "de_DE"

    def test_validate_currency_invalid(self):
        handler = MoneyHandler()

        with pytest.raises(ValueError) as exc_info:
            handler._validate_currency("INVALID")
        assert "Invalid currency code" in str(exc_info.value)

    def test_validate_locale_invalid_fallback(self):
        handler = MoneyHandler()

        assert handler._validate_locale("invalid_locale") == "en_US"

    def test_create_money_from_decimal_and_string(self):
        handler = MoneyHandler()

        assert handler.create_money(Decimal("12.50")).amount == Decimal("12.50")
        assert handler.create_money("100.50", "gbp").currency.code == "GBP"

    def test_add_money_same_currency(self):
        handler = MoneyHandler()

        total = handler.add_money(
            handler.create_money("10.00"), handler.create_money("15.50")
        )

        assert total == Money(Decimal("25.50"), "USD")

    def test_add_money_empty(self):
        assert MoneyHandler().add_money() == Money(Decimal("0"), "USD")

    def test_add_money_currency_mismatch(self):
        handler = MoneyHandler()

        with pytest.raises(ValueError, match="Currency mismatch"):
            handler.add_money(handler.create_money(1, "USD"), handler.create_money(1, "EUR"))

    def test_create_money_custom_currency(self):
        handler = MoneyHandler()

        with pytest.raises(ValueError, match="Invalid currency code"):
            handler.create_money("5", "ABC")

        money = handler.create_money("5", "abc", allow_custom=True)
        assert money.currency.code == "ABC"
        assert money.amount == Decimal("5")

    def test_add_money_custom_currency(self):
        handler = MoneyHandler()

        total = handler.add_money(
            handler.create_money("1.25", "ABC", allow_custom=True),
            handler.create_money("2.50", "ABC", allow_custom=True),
        )

        assert total.currency.code == "ABC"
        assert total.amount == Decimal("3.75")

    def test_round_money(self):
        handler = MoneyHandler()

        assert handler.round_money(handler.create_money("10.005")).amount == Decimal("10.00")
        assert handler.round_money(handler.create_money("100.4", "JPY")).amount == Decimal("100")

    def test_format_money(self):
        handler = MoneyHandler()

        assert handler.format_money(handler.create_money("1234.5")) == "$1,234.50"


@pytest.mark.unit
class TestConvenienceFunctions:
    """Module-level helpers use the configured defaults."""

    def test_handler_follows_billing_config(self):
        set_billing_config(BillingConfig(default_currency="EUR", default_locale="de_DE"))
        reset_money_handler()

        handler = get_money_handler()

        assert handler.default_currency.code == "EUR"
        assert create_money("5").currency.code == "EUR"

    def test_handler_is_cached(self):
        assert get_money_handler() is get_money_handler()

    def test_round_money_helper(self):
        assert round_money(create_money("19.999")).amount == Decimal("20.00")

    def test_add_and_format(self):
        total = add_money(create_money("19.99"), create_money("0.01"))

        assert total.amount == Decimal("20.00")
        assert format_money(total) == "$20.00"
