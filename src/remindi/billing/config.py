"""
Billing module configuration
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from remindi.billing.exceptions import BillingConfigurationError


class IterationLimits(BaseModel):
    """Upper bounds on cycle steps when walking billing dates.

    Daily cycles need many more steps to cross a month than yearly ones,
    so the limits are kept per cycle type.
    """

    model_config = ConfigDict(frozen=True)

    daily: int = Field(1000, description="Max steps for daily billing")
    weekly: int = Field(100, description="Max steps for weekly billing")
    periodic: int = Field(50, description="Max steps for monthly, quarterly and yearly billing")

    @field_validator("daily", "weekly", "periodic")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise BillingConfigurationError(
                f"Iteration limit must be at least 1, got {v}",
                config_key="iteration_limits",
            )
        return v


def _default_iteration_limits() -> IterationLimits:
    """Create default IterationLimits instance"""
    return IterationLimits(daily=1000, weekly=100, periodic=50)


class BillingConfig(BaseModel):
    """Main billing configuration"""

    model_config = ConfigDict()

    iteration_limits: IterationLimits = Field(default_factory=_default_iteration_limits)
    strict_billing_cycles: bool = Field(
        False, description="Raise UnknownBillingCycleError instead of falling back to monthly"
    )
    default_reminder_intervals: list[int] = Field(
        default_factory=lambda: [30, 7, 3, 1],
        description="Days before due date to send reminders",
    )
    default_currency: str = Field("USD", description="Default currency code")
    default_locale: str = Field("en_US", description="Default locale for money formatting")

    @classmethod
    def from_env(cls) -> "BillingConfig":
        """Create configuration from settings (environment and .env)"""
        from remindi.settings import get_settings

        billing = get_settings().billing

        return cls(
            iteration_limits=IterationLimits(
                daily=billing.daily_iteration_limit,
                weekly=billing.weekly_iteration_limit,
                periodic=billing.periodic_iteration_limit,
            ),
            strict_billing_cycles=billing.strict_billing_cycles,
            default_reminder_intervals=list(billing.default_reminder_intervals),
            default_currency=billing.default_currency,
            default_locale=billing.default_locale,
        )


# Global configuration instance
_billing_config: BillingConfig | None = None


def get_billing_config() -> BillingConfig:
    """Get the global billing configuration instance"""
    global _billing_config
    if _billing_config is None:
        _billing_config = BillingConfig.from_env()
    return _billing_config


def set_billing_config(config: BillingConfig | None) -> None:
    """Set the global billing configuration instance (None re-reads settings)"""
    global _billing_config
    _billing_config = config
