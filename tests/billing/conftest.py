"""
Pytest fixtures for billing engine tests.
"""

from datetime import date
from decimal import Decimal

import pytest

from remindi.billing.models import BillingConfiguration, SubscriptionRecord


@pytest.fixture
def make_config():
    """Factory for BillingConfiguration with monthly defaults."""

    def _make(**overrides) -> BillingConfiguration:
        data = {
            "billing_cycle": "monthly",
            "billing_interval": 1,
            "billing_cycle_day": None,
            "first_billing_date": date(2024, 1, 31),
            "start_date": date(2024, 1, 31),
            "end_date": None,
            "price": Decimal("10.00"),
        }
        data.update(overrides)
        return BillingConfiguration(**data)

    return _make


@pytest.fixture
def make_record():
    """Factory for SubscriptionRecord with monthly defaults."""
    counter = {"value": 0}

    def _make(**overrides) -> SubscriptionRecord:
        counter["value"] += 1
        data = {
            "id": f"sub_{counter['value']}",
            "name": f"Subscription {counter['value']}",
            "billing_cycle": "monthly",
            "billing_interval": 1,
            "first_billing_date": date(2024, 5, 1),
            "start_date": date(2024, 5, 1),
            "price": Decimal("10.00"),
            "currency": "USD",
            "paid_payment_count": 0,
        }
        data.update(overrides)
        return SubscriptionRecord(**data)

    return _make


@pytest.fixture
def end_of_month_config(make_config):
    """Monthly subscription anchored to the 31st, starting 2024-01-31."""
    return make_config(billing_cycle_day=31)
