"""
Money and currency utilities using py-moneyed and Babel.

Forecast totals are summed per currency, so amounts are wrapped in
``Money`` before aggregation and formatted with locale-aware rules.
"""

from decimal import Decimal
from typing import Any

from babel import Locale
from babel.core import UnknownLocaleError
from babel.numbers import format_currency, get_currency_precision
from moneyed import Currency, Money, get_currency
from moneyed.classes import CurrencyDoesNotExist

DEFAULT_LOCALE = "en_US"


class MoneyHandler:
    """Central handler for money operations with proper error handling."""

    def __init__(self, default_currency: str = "USD", default_locale: str = DEFAULT_LOCALE) -> None:
        self.default_currency = self._validate_currency(default_currency)
        self.default_locale = self._validate_locale(default_locale)

    def _validate_currency(self, currency_code: str) -> Currency:
        """Validate and return Currency object."""
        try:
            return get_currency(currency_code.upper())
        except CurrencyDoesNotExist:
            raise ValueError(f"Invalid currency code: {currency_code}")

    def _resolve_currency(self, currency_code: str, allow_custom: bool = False) -> Currency:
        # User-defined codes outside the ISO table get a bare Currency
        if not allow_custom:
            return self._validate_currency(currency_code)
        try:
            return get_currency(currency_code.upper())
        except CurrencyDoesNotExist:
            return Currency(currency_code.upper())

    def _validate_locale(self, locale_code: str) -> str:
        try:
            Locale.parse(locale_code)
            return locale_code
        except (UnknownLocaleError, ValueError):
            return DEFAULT_LOCALE

    def create_money(
        self,
        amount: int | float | Decimal | str,
        currency: str | None = None,
        allow_custom: bool = False,
    ) -> Money:
        """
        Create Money object with proper validation.

        With ``allow_custom`` unknown three-letter codes are accepted instead
        of raising ``ValueError``.
        """
        currency = currency or self.default_currency.code
        validated_currency = self._resolve_currency(currency, allow_custom)

        # Convert to Decimal for precision
        if isinstance(amount, Decimal):
            decimal_amount = amount
        else:
            decimal_amount = Decimal(str(amount))

        return Money(amount=decimal_amount, currency=validated_currency)

    def zero(self, currency: str | None = None) -> Money:
        return self.create_money(0, currency)

    def add_money(self, *money_objects: Money) -> Money:
        """Add multiple Money objects of the same currency."""
        if not money_objects:
            return self.zero()

        first_currency = money_objects[0].currency
        for money in money_objects[1:]:
            if money.currency != first_currency:
                raise ValueError(f"Currency mismatch: {money.currency} != {first_currency}")

        return sum(money_objects, Money(amount=Decimal("0"), currency=first_currency))

    def round_money(self, money: Money) -> Money:
        """Round Money to proper currency precision."""
        precision = get_currency_precision(money.currency.code)
        rounded_amount = money.amount.quantize(Decimal("0.1") ** precision)
        return Money(amount=rounded_amount, currency=money.currency)

    def format_money(self, money: Money, locale: str | None = None, **kwargs: Any) -> str:
        """Format Money object with locale-aware formatting."""
        validated_locale = self._validate_locale(locale or self.default_locale)

        try:
            return format_currency(
                number=money.amount, currency=money.currency.code, locale=validated_locale, **kwargs
            )
        except (TypeError, ValueError):
            return f"{money.currency.code} {money.amount}"


_money_handler: MoneyHandler | None = None


def get_money_handler() -> MoneyHandler:
    """Money handler using the configured default currency and locale."""
    global _money_handler
    if _money_handler is None:
        from remindi.billing.config import get_billing_config

        config = get_billing_config()
        _money_handler = MoneyHandler(config.default_currency, config.default_locale)
    return _money_handler


def reset_money_handler() -> None:
    global _money_handler
    _money_handler = None


def create_money(
    amount: int | float | Decimal | str, currency: str | None = None, allow_custom: bool = False
) -> Money:
    """Create Money object with default handler."""
    return get_money_handler().create_money(amount, currency, allow_custom)


def add_money(*money_objects: Money) -> Money:
    """Add Money objects with default handler."""
    return get_money_handler().add_money(*money_objects)


def round_money(money: Money) -> Money:
    """Round Money with default handler."""
    return get_money_handler().round_money(money)


def format_money(money: Money, locale: str | None = None, **kwargs: Any) -> str:
    """Format Money with default handler."""
    return get_money_handler().format_money(money, locale, **kwargs)


__all__ = [
    "MoneyHandler",
    "add_money",
    "create_money",
    "format_money",
    "get_money_handler",
    "reset_money_handler",
    "round_money",
]
