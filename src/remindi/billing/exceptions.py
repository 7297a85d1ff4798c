"""
Billing exceptions.

Iteration overruns in the billing date engine are logged and reported as
"undetermined" results, not raised. The errors below cover configuration
problems only.
"""

from typing import Any


class BillingError(Exception):
    """
    Base billing error with enhanced context.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        status_code: HTTP status a calling web layer should map this error to;
            this package never serves HTTP itself
        context: Additional context data about the error
        recovery_hint: Suggested action to resolve the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int = 400,
        context: dict[str, Any] | None = None,
        recovery_hint: str | None = None,
    ):
        self.message = message
        self.error_code = error_code or "BILLING_ERROR"
        self.status_code = status_code
        self.context = context or {}
        self.recovery_hint = recovery_hint
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
            "context": self.context,
            "recovery_hint": self.recovery_hint,
        }


class BillingConfigurationError(BillingError):
    """Billing configuration errors."""

    def __init__(
        self, message: str, config_key: str | None = None, recovery_hint: str | None = None
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message,
            "BILLING_CONFIG_ERROR",
            status_code=500,
            context=context,
            recovery_hint=recovery_hint or "Check billing configuration settings",
        )


class UnknownBillingCycleError(BillingConfigurationError):
    """Billing cycle value is not one of the supported cycles."""

    def __init__(self, message: str, billing_cycle: str) -> None:
        super().__init__(
            message,
            config_key="billing_cycle",
            recovery_hint=(
                "Use daily, weekly, monthly, quarterly, yearly or one-time, "
                "or disable strict billing cycles"
            ),
        )
        self.context["billing_cycle"] = billing_cycle
        self.error_code = "UNKNOWN_BILLING_CYCLE"
        self.status_code = 422


__all__ = [
    "BillingError",
    "BillingConfigurationError",
    "UnknownBillingCycleError",
]
