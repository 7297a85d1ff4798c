"""
Global pytest configuration and fixtures for the Remindi billing tests.
"""

import os

import pytest
import structlog

# Keep developer .env overrides and real environment out of the defaults
os.environ.setdefault("ENVIRONMENT", "test")

from remindi.billing.config import BillingConfig, set_billing_config  # noqa: E402
from remindi.billing.money_utils import reset_money_handler  # noqa: E402
from remindi.settings import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_configuration():
    """Give every test fresh settings, billing config and money handler."""
    reset_settings()
    set_billing_config(BillingConfig())
    reset_money_handler()
    yield
    reset_settings()
    set_billing_config(None)
    reset_money_handler()
    structlog.reset_defaults()
