"""
Dashboard views over a collection of subscriptions.

Each helper takes the subscriptions already loaded by the caller and a
single ``now``; next billing dates are recomputed from the paid payment
count of each record.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal

import structlog
from moneyed import Money
from pydantic import BaseModel, ConfigDict, Field

from remindi.billing.config import BillingConfig, get_billing_config
from remindi.billing.dates import as_instant, month_bounds
from remindi.billing.engine import has_ended, monthly_forecast_amount, next_billing_date
from remindi.billing.models import SubscriptionRecord
from remindi.billing.money_utils import add_money, create_money, round_money

logger = structlog.get_logger(__name__)


class ForecastItem(BaseModel):
    """One subscription's contribution to a monthly forecast."""

    model_config = ConfigDict(frozen=True)

    subscription: SubscriptionRecord
    forecast_amount: Decimal


class CurrencyForecast(BaseModel):
    """Monthly forecast for all subscriptions billed in one currency."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    currency: str
    total: Money
    count: int = 0
    subscriptions: list[ForecastItem] = Field(default_factory=list)


def _with_next_dates(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    billing_config: BillingConfig,
) -> list[tuple[SubscriptionRecord, datetime]]:
    moment = as_instant(now)
    pairs = []
    for record in records:
        if has_ended(record, moment):
            continue
        due = next_billing_date(record, record.paid_payment_count, moment, billing_config)
        if due is None:
            continue
        pairs.append((record, as_instant(due, moment)))
    return pairs


def due_soon(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    days: int = 7,
    billing_config: BillingConfig | None = None,
) -> list[SubscriptionRecord]:
    """Active subscriptions due on or before ``now + days``, overdue ones included."""
    billing_config = billing_config or get_billing_config()
    cutoff = as_instant(now) + timedelta(days=days)
    return [
        record
        for record, due in _with_next_dates(records, now, billing_config)
        if due <= cutoff
    ]


def expired_bills(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    billing_config: BillingConfig | None = None,
) -> list[SubscriptionRecord]:
    """Active subscriptions whose next billing date has passed."""
    billing_config = billing_config or get_billing_config()
    moment = as_instant(now)
    return [
        record for record, due in _with_next_dates(records, now, billing_config) if due < moment
    ]


def upcoming_bills(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    days: int = 7,
    billing_config: BillingConfig | None = None,
) -> list[SubscriptionRecord]:
    """Future bills only: due after ``now`` and on or before ``now + days``."""
    billing_config = billing_config or get_billing_config()
    moment = as_instant(now)
    cutoff = moment + timedelta(days=days)
    return [
        record
        for record, due in _with_next_dates(records, now, billing_config)
        if moment < due <= cutoff
    ]


def current_month_bills(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    billing_config: BillingConfig | None = None,
) -> list[SubscriptionRecord]:
    """Active subscriptions whose next billing date falls in the month of ``now``."""
    billing_config = billing_config or get_billing_config()
    start_of_month, end_of_month = month_bounds(now)
    return [
        record
        for record, due in _with_next_dates(records, now, billing_config)
        if start_of_month <= due.date() <= end_of_month
    ]


def monthly_forecast(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    billing_config: BillingConfig | None = None,
) -> dict[str, CurrencyForecast]:
    """
    Total monthly subscription budget grouped by currency.

    Every billing cycle in the month of ``now`` counts, regardless of
    payment status. Subscriptions that have ended, contribute nothing, or
    whose forecast is undetermined are left out. Currency codes outside
    the ISO table are grouped like any other; totals are rounded to the
    currency precision.
    """
    billing_config = billing_config or get_billing_config()
    start_of_month, end_of_month = month_bounds(now)
    forecast: dict[str, CurrencyForecast] = {}

    for record in records:
        if has_ended(record, now):
            continue

        amount = monthly_forecast_amount(record, start_of_month, end_of_month, billing_config)
        if amount is None:
            logger.info(
                "billing.forecast_undetermined",
                subscription_id=record.id,
                month_start=start_of_month.isoformat(),
            )
            continue
        if amount <= 0:
            continue

        entry = forecast.get(record.currency)
        if entry is None:
            entry = CurrencyForecast(
                currency=record.currency, total=create_money(0, record.currency, allow_custom=True)
            )
            forecast[record.currency] = entry

        entry.total = add_money(
            entry.total, create_money(amount, record.currency, allow_custom=True)
        )
        entry.count += 1
        entry.subscriptions.append(ForecastItem(subscription=record, forecast_amount=amount))

    for entry in forecast.values():
        entry.total = round_money(entry.total)

    return forecast


__all__ = [
    "CurrencyForecast",
    "ForecastItem",
    "current_month_bills",
    "due_soon",
    "expired_bills",
    "monthly_forecast",
    "upcoming_bills",
]
