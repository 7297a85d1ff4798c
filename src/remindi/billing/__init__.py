"""
Billing date module.

Provides the recurring billing calculations behind subscription tracking:
- Next billing date from the paid payment count
- Overdue and ended status
- Monthly forecast totals (per subscription and per currency)
- Reminder offset matching
"""

from remindi.billing.config import BillingConfig, IterationLimits, get_billing_config
from remindi.billing.engine import (
    advance_billing_date,
    billing_date_for_cycle,
    billing_snapshot,
    computed_status,
    has_ended,
    is_active_in_month,
    is_overdue,
    monthly_forecast_amount,
    next_billing_date,
    recalculate_billing_cycle_day,
    set_billing_cycle_day,
    update_billing_dates,
)
from remindi.billing.exceptions import (
    BillingConfigurationError,
    BillingError,
    UnknownBillingCycleError,
)
from remindi.billing.models import (
    BillingConfiguration,
    BillingCycle,
    BillingSnapshot,
    SubscriptionRecord,
    SubscriptionStatus,
)

__all__ = [
    # Configuration
    "BillingConfig",
    "IterationLimits",
    "get_billing_config",
    # Models
    "BillingConfiguration",
    "BillingCycle",
    "BillingSnapshot",
    "SubscriptionRecord",
    "SubscriptionStatus",
    # Engine
    "advance_billing_date",
    "billing_date_for_cycle",
    "billing_snapshot",
    "computed_status",
    "has_ended",
    "is_active_in_month",
    "is_overdue",
    "monthly_forecast_amount",
    "next_billing_date",
    "recalculate_billing_cycle_day",
    "set_billing_cycle_day",
    "update_billing_dates",
    # Exceptions
    "BillingError",
    "BillingConfigurationError",
    "UnknownBillingCycleError",
]
