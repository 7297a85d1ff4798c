"""
Reminder scheduling helpers.

Decides whether a subscription is due for a "bill coming up" reminder
today. Sending the reminder is up to the notification dispatcher.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime

import structlog
from pydantic import BaseModel, ConfigDict

from remindi.billing.config import BillingConfig, get_billing_config
from remindi.billing.dates import today as calendar_day
from remindi.billing.engine import next_billing_date
from remindi.billing.models import SubscriptionRecord

logger = structlog.get_logger(__name__)


class Reminder(BaseModel):
    """A reminder that should go out for a subscription."""

    model_config = ConfigDict(frozen=True)

    subscription: SubscriptionRecord
    days_before: int
    due_date: date


def days_until_due(due_date: date, today: date) -> int:
    """Signed number of days from ``today`` to ``due_date`` (negative when overdue)."""
    return (due_date - today).days


def reminders_for(
    record: SubscriptionRecord,
    now: date | datetime,
    intervals: Sequence[int] | None = None,
    specific_days: int | None = None,
    billing_config: BillingConfig | None = None,
) -> list[Reminder]:
    """
    Reminders to send today for one subscription.

    With ``specific_days`` only that offset is checked. Otherwise the first
    matching offset from ``intervals`` (or the configured defaults) wins, so
    a subscription gets at most one reminder per run. Subscriptions without
    a next billing date never get reminders.
    """
    billing_config = billing_config or get_billing_config()
    due = next_billing_date(record, record.paid_payment_count, now, billing_config)
    if due is None:
        return []

    remaining = days_until_due(due, calendar_day(now))

    if specific_days is not None:
        if remaining == specific_days:
            return [Reminder(subscription=record, days_before=remaining, due_date=due)]
        return []

    offsets = intervals if intervals is not None else billing_config.default_reminder_intervals
    for days in offsets:
        if remaining == days:
            return [Reminder(subscription=record, days_before=days, due_date=due)]

    return []


def collect_reminders(
    records: Iterable[SubscriptionRecord],
    now: date | datetime,
    intervals: Sequence[int] | None = None,
    specific_days: int | None = None,
    billing_config: BillingConfig | None = None,
) -> list[Reminder]:
    """Reminders due today across many subscriptions."""
    billing_config = billing_config or get_billing_config()
    reminders: list[Reminder] = []
    for record in records:
        reminders.extend(
            reminders_for(record, now, intervals, specific_days, billing_config)
        )

    logger.info(
        "billing.reminders_collected",
        reminder_count=len(reminders),
        specific_days=specific_days,
    )
    return reminders


__all__ = ["Reminder", "collect_reminders", "days_until_due", "reminders_for"]
