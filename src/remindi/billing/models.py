"""
Billing value objects.

``BillingConfiguration`` is the subset of a subscription record the billing
date engine works from. Persistence and request validation live elsewhere;
these models only normalise already-validated primitives.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BillingCycle(str, Enum):
    """Recurrence unit of a subscription."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    ONE_TIME = "one-time"

    @classmethod
    def resolve(cls, value: str) -> "BillingCycle | None":
        """Look up a cycle by value, returning None for unknown cycles."""
        try:
            return cls(value)
        except ValueError:
            return None


# Cycles that anchor to a preferred day of the month
DAY_ANCHORED_CYCLES = frozenset({BillingCycle.MONTHLY, BillingCycle.QUARTERLY})


class SubscriptionStatus(str, Enum):
    """Computed subscription status."""

    ACTIVE = "active"
    ENDED = "ended"


class BillingConfiguration(BaseModel):
    """Billing settings of a single subscription."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    billing_cycle: str = Field(
        BillingCycle.MONTHLY.value,
        description="daily, weekly, monthly, quarterly, yearly or one-time",
    )
    billing_interval: int = Field(1, description="Multiplier applied to the cycle unit")
    billing_cycle_day: int | None = Field(
        None, ge=1, le=31, description="Preferred day of month for monthly/quarterly cycles"
    )
    first_billing_date: date = Field(description="Baseline date for cycle counting")
    start_date: date = Field(description="Date the subscription started")
    end_date: date | None = Field(None, description="Date the subscription ends")
    price: Decimal = Field(Decimal("0"), description="Amount charged per cycle")
    currency: str = Field("USD", min_length=3, max_length=3)

    @field_validator("billing_cycle", mode="before")
    @classmethod
    def normalize_billing_cycle(cls, v: Any) -> Any:
        # Unknown values are kept as-is; the engine decides how to treat them
        if isinstance(v, BillingCycle):
            return v.value
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate currency code."""
        return v.upper()

    @property
    def cycle(self) -> BillingCycle | None:
        """Known billing cycle, or None when the stored value is unrecognised."""
        return BillingCycle.resolve(self.billing_cycle)


class SubscriptionRecord(BillingConfiguration):
    """A stored subscription together with its paid payment count."""

    id: str = Field(description="Subscription identifier")
    name: str = Field("", max_length=255)
    paid_payment_count: int = Field(0, ge=0, description="Payments with status paid")


class BillingSnapshot(BaseModel):
    """Billing values computed against a single captured instant."""

    model_config = ConfigDict(frozen=True)

    computed_at: datetime
    status: SubscriptionStatus
    next_billing_date: date | None = None
    is_overdue: bool = False
    month_start: date
    month_end: date
    monthly_forecast: Decimal | None = Field(
        None, description="None when the forecast could not be determined"
    )


__all__ = [
    "BillingCycle",
    "BillingConfiguration",
    "BillingSnapshot",
    "DAY_ANCHORED_CYCLES",
    "SubscriptionRecord",
    "SubscriptionStatus",
]
