"""
Recurring billing date engine.

Pure functions over a ``BillingConfiguration``:

- the billing date of the n-th cycle counted from the first billing date
- the next billing date given the number of paid payments
- overdue and ended status for an explicit "now"
- the forecast amount of every cycle falling inside a calendar month

Next billing dates are never stored; they are recomputed from the paid
payment count on every call. Walking loops are bounded by per-cycle
iteration limits; hitting a limit is logged and reported as ``None``
("undetermined") instead of raising.
"""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import structlog

from remindi.billing.config import BillingConfig, IterationLimits, get_billing_config
from remindi.billing.dates import (
    add_months,
    add_months_on_day,
    add_years,
    as_instant,
    month_bounds,
)
from remindi.billing.exceptions import UnknownBillingCycleError
from remindi.billing.models import (
    DAY_ANCHORED_CYCLES,
    BillingConfiguration,
    BillingCycle,
    BillingSnapshot,
    SubscriptionStatus,
)

logger = structlog.get_logger(__name__)

_MONTHS_PER_CYCLE = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
}

# Returned by the window search when no cycle falls inside the month
NO_BILLING_IN_WINDOW = -1


def resolve_cycle(
    config: BillingConfiguration, billing_config: BillingConfig | None = None
) -> BillingCycle:
    """
    Billing cycle used for date arithmetic.

    Unknown cycle values fall back to monthly unless strict billing cycles
    are enabled, in which case ``UnknownBillingCycleError`` is raised.
    """
    cycle = config.cycle
    if cycle is not None:
        return cycle

    billing_config = billing_config or get_billing_config()
    if billing_config.strict_billing_cycles:
        raise UnknownBillingCycleError(
            f"Unknown billing cycle: {config.billing_cycle!r}", config.billing_cycle
        )

    logger.debug(
        "billing.unknown_cycle_fallback",
        billing_cycle=config.billing_cycle,
        fallback=BillingCycle.MONTHLY.value,
    )
    return BillingCycle.MONTHLY


def iteration_limit(cycle: BillingCycle, limits: IterationLimits) -> int:
    """Maximum number of cycle steps for a billing cycle."""
    if cycle is BillingCycle.DAILY:
        return limits.daily
    if cycle is BillingCycle.WEEKLY:
        return limits.weekly
    return limits.periodic


def _date_for_cycle(config: BillingConfiguration, cycle: BillingCycle, cycle_index: int) -> date:
    first = config.first_billing_date
    interval = config.billing_interval

    if cycle is BillingCycle.DAILY:
        return first + timedelta(days=interval * cycle_index)
    if cycle is BillingCycle.WEEKLY:
        return first + timedelta(weeks=interval * cycle_index)
    if cycle is BillingCycle.ONE_TIME:
        return first
    if cycle is BillingCycle.YEARLY:
        years = interval * cycle_index
        if years == 0:
            return first
        return add_years(first, years)

    months = interval * _MONTHS_PER_CYCLE[cycle] * cycle_index
    if months == 0:
        return first
    if config.billing_cycle_day is None:
        return add_months(first, months)
    return add_months_on_day(first, months, config.billing_cycle_day)


def billing_date_for_cycle(
    config: BillingConfiguration,
    cycle_index: int,
    billing_config: BillingConfig | None = None,
) -> date:
    """
    Date of the ``cycle_index``-th billing counted from the first billing date.

    Index 0 is the first billing date itself. Monthly and quarterly cycles
    land on ``billing_cycle_day`` or the last day of shorter months; yearly
    cycles move Feb 29 to Feb 28 in non-leap years.
    """
    cycle = resolve_cycle(config, billing_config)
    return _date_for_cycle(config, cycle, cycle_index)


def has_ended(config: BillingConfiguration, now: date | datetime) -> bool:
    """True once ``now`` is past midnight of the end date."""
    if config.end_date is None:
        return False
    moment = as_instant(now)
    return as_instant(config.end_date, moment) < moment


def computed_status(config: BillingConfiguration, now: date | datetime) -> SubscriptionStatus:
    if has_ended(config, now):
        return SubscriptionStatus.ENDED
    return SubscriptionStatus.ACTIVE


def next_billing_date(
    config: BillingConfiguration,
    paid_payment_count: int,
    now: date | datetime,
    billing_config: BillingConfig | None = None,
) -> date | None:
    """
    Date the next payment is due.

    Ended subscriptions and one-time charges have no next billing date.
    Otherwise the result is the billing date ``paid_payment_count`` cycles
    after the first billing date.
    """
    if has_ended(config, now):
        return None
    if config.cycle is BillingCycle.ONE_TIME:
        return None
    return billing_date_for_cycle(config, paid_payment_count, billing_config)


def is_overdue(
    config: BillingConfiguration,
    paid_payment_count: int,
    now: date | datetime,
    billing_config: BillingConfig | None = None,
) -> bool:
    """Whether the next billing date has passed on an active subscription."""
    if has_ended(config, now):
        return False
    if config.cycle is BillingCycle.ONE_TIME:
        return False

    due = next_billing_date(config, paid_payment_count, now, billing_config)
    if due is None:
        return False

    moment = as_instant(now)
    return as_instant(due, moment) < moment


def advance_billing_date(
    config: BillingConfiguration,
    current: date,
    billing_config: BillingConfig | None = None,
) -> date | None:
    """
    Step a known billing date forward by exactly one cycle.

    Returns None for one-time charges, which never recur.
    """
    cycle = resolve_cycle(config, billing_config)
    interval = config.billing_interval

    if cycle is BillingCycle.ONE_TIME:
        return None
    if cycle is BillingCycle.DAILY:
        return current + timedelta(days=interval)
    if cycle is BillingCycle.WEEKLY:
        return current + timedelta(weeks=interval)
    if cycle is BillingCycle.YEARLY:
        return add_years(current, interval)

    months = interval * _MONTHS_PER_CYCLE[cycle]
    if config.billing_cycle_day is None:
        return add_months(current, months)
    return add_months_on_day(current, months, config.billing_cycle_day)


def is_active_in_month(
    config: BillingConfiguration, start_of_month: date, end_of_month: date
) -> bool:
    """Whether the subscription was active on any day of the month."""
    if config.start_date > end_of_month:
        return False
    if config.end_date is not None and config.end_date < start_of_month:
        return False
    return True


def _estimate_cycle_index(
    config: BillingConfiguration, cycle: BillingCycle, window_start: date
) -> int:
    """Largest cycle index known to fall before ``window_start``.

    Assumes the first billing date is before the window. Non-positive
    intervals cannot be estimated and start from index 0.
    """
    first = config.first_billing_date
    interval = config.billing_interval
    if interval <= 0:
        return 0

    if cycle in (BillingCycle.DAILY, BillingCycle.WEEKLY):
        step_days = interval * (7 if cycle is BillingCycle.WEEKLY else 1)
        elapsed_days = (window_start - first).days
        return max(0, (elapsed_days - 1) // step_days)

    if cycle is BillingCycle.YEARLY:
        elapsed_years = window_start.year - first.year
        return max(0, elapsed_years // interval - 1)

    step_months = interval * _MONTHS_PER_CYCLE[cycle]
    elapsed_months = (window_start.year - first.year) * 12 + window_start.month - first.month
    return max(0, elapsed_months // step_months - 1)


def _log_iteration_limit(
    phase: str, config: BillingConfiguration, cycle: BillingCycle, limit: int
) -> None:
    logger.warning(
        "billing.iteration_limit_exceeded",
        phase=phase,
        billing_cycle=cycle.value,
        billing_interval=config.billing_interval,
        first_billing_date=config.first_billing_date.isoformat(),
        limit=limit,
    )


def find_first_cycle_in_window(
    config: BillingConfiguration,
    cycle: BillingCycle,
    start_of_month: date,
    end_of_month: date,
    limit: int,
) -> int | None:
    """
    Index of the first billing cycle dated inside ``[start_of_month, end_of_month]``.

    Returns ``NO_BILLING_IN_WINDOW`` when no cycle lands in the window and
    None when the walk exceeds ``limit`` steps.
    """
    first = config.first_billing_date
    if start_of_month <= first <= end_of_month:
        return 0
    if first > end_of_month:
        return NO_BILLING_IN_WINDOW

    index = _estimate_cycle_index(config, cycle, start_of_month)
    current = _date_for_cycle(config, cycle, index)
    iterations = 0

    while current < start_of_month:
        if iterations >= limit:
            _log_iteration_limit("find_first_in_month", config, cycle, limit)
            return None
        iterations += 1
        index += 1
        current = _date_for_cycle(config, cycle, index)
        if current > end_of_month:
            return NO_BILLING_IN_WINDOW

    return index


def _count_cycles_until(
    config: BillingConfiguration,
    cycle: BillingCycle,
    start_index: int,
    effective_end: date,
    limit: int,
) -> int | None:
    count = 0
    index = start_index
    current = _date_for_cycle(config, cycle, index)

    while current <= effective_end:
        if count >= limit:
            _log_iteration_limit("count_in_month", config, cycle, limit)
            return None
        count += 1
        index += 1
        current = _date_for_cycle(config, cycle, index)

    return count


def monthly_forecast_amount(
    config: BillingConfiguration,
    start_of_month: date,
    end_of_month: date,
    billing_config: BillingConfig | None = None,
) -> Decimal | None:
    """
    Total of all billing cycles due within the month, paid or not.

    This is a budgeting figure, not the remaining amount. Returns None when
    the cycle walk hits its iteration limit; callers must treat that as
    "undetermined" rather than zero.
    """
    if not is_active_in_month(config, start_of_month, end_of_month):
        return Decimal("0")

    billing_config = billing_config or get_billing_config()
    cycle = resolve_cycle(config, billing_config)

    effective_end = end_of_month
    if config.end_date is not None and config.end_date < end_of_month:
        effective_end = config.end_date

    if cycle is BillingCycle.ONE_TIME:
        if start_of_month <= config.first_billing_date <= effective_end:
            return config.price
        return Decimal("0")

    limit = iteration_limit(cycle, billing_config.iteration_limits)

    first_index = find_first_cycle_in_window(config, cycle, start_of_month, end_of_month, limit)
    if first_index is None:
        return None
    if first_index == NO_BILLING_IN_WINDOW:
        return Decimal("0")

    count = _count_cycles_until(config, cycle, first_index, effective_end, limit)
    if count is None:
        return None

    return config.price * count


def set_billing_cycle_day(config: BillingConfiguration) -> BillingConfiguration:
    """
    Anchor monthly and quarterly billing to the start date's day of month.

    Called once when a subscription is created. Other cycles carry no
    billing cycle day.
    """
    day = config.start_date.day if config.cycle in DAY_ANCHORED_CYCLES else None
    return config.model_copy(update={"billing_cycle_day": day})


def recalculate_billing_cycle_day(config: BillingConfiguration) -> BillingConfiguration:
    """Re-anchor the billing cycle day to the first billing date after an edit."""
    day = config.first_billing_date.day if config.cycle in DAY_ANCHORED_CYCLES else None
    return config.model_copy(update={"billing_cycle_day": day})


def update_billing_dates(
    config: BillingConfiguration,
    *,
    start_date: date | None = None,
    first_billing_date: date | None = None,
) -> BillingConfiguration | None:
    """
    Apply start/first billing date edits and recalculate the cycle day.

    Returns None when neither date is given. The first billing date may
    precede the start date.
    """
    if start_date is None and first_billing_date is None:
        return None

    updates: dict[str, date] = {}
    if start_date is not None:
        updates["start_date"] = start_date
    if first_billing_date is not None:
        updates["first_billing_date"] = first_billing_date

    return recalculate_billing_cycle_day(config.model_copy(update=updates))


def billing_snapshot(
    config: BillingConfiguration,
    paid_payment_count: int,
    now: datetime | None = None,
    billing_config: BillingConfig | None = None,
) -> BillingSnapshot:
    """
    Next date, overdue flag, status and current-month forecast for one instant.

    ``now`` is captured once so every value refers to the same moment.
    """
    moment = now or datetime.now(UTC)
    billing_config = billing_config or get_billing_config()
    start_of_month, end_of_month = month_bounds(moment)

    return BillingSnapshot(
        computed_at=moment,
        status=computed_status(config, moment),
        next_billing_date=next_billing_date(config, paid_payment_count, moment, billing_config),
        is_overdue=is_overdue(config, paid_payment_count, moment, billing_config),
        month_start=start_of_month,
        month_end=end_of_month,
        monthly_forecast=monthly_forecast_amount(
            config, start_of_month, end_of_month, billing_config
        ),
    )
