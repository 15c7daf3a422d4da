"""
baseline.py — Baseline Assumptions from Historical Marts

Purpose:
- Derive a GrowthModelInput from what actually happened recently, so the
  operator can start a what-if from today's numbers.

Derivations (trailing windows end today):
- monthly_budget          = floor(spend over 90 days / 3)              default 25000
- target_cac              = monthly_budget / new customers (30d), 2dp  default 50
- avg_order_value         = net revenue / orders (30d), 2dp            default 85
- cogs_percent            = COGS / net revenue (30d), 3dp              default 0.45
- expected_cvr            = purchases / sessions (30d), 4dp            default 0.025
- return_rate             = latest cohort d30 retention, capped at 1   default 0.20
- avg_orders_per_customer = orders / new customers (30d), 1dp          default 1.3
- monthly_traffic         = sessions (30d)                             None if 0
- horizon_months          = 6

Rounded fields round halves up (0.125 → 0.13 at 2dp), not to even.

Every derived value falls back to its default when the underlying data is
missing or non-positive, so the engine never receives a degenerate input.
The estimator never raises for "no data".
"""

from __future__ import annotations

import datetime
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from app.core.logging import get_logger
from app.services.modeling.marts import MartReader
from app.services.modeling.types import GrowthModelInput

logger = get_logger(__name__)

DEFAULT_MONTHLY_BUDGET = 25000
DEFAULT_TARGET_CAC = 50.0
DEFAULT_AVG_ORDER_VALUE = 85.0
DEFAULT_COGS_PERCENT = 0.45
DEFAULT_EXPECTED_CVR = 0.025
DEFAULT_RETURN_RATE = 0.20
DEFAULT_AVG_ORDERS_PER_CUSTOMER = 1.3
BASELINE_HORIZON_MONTHS = 6


def _round_half_up(value: float, places: int) -> float:
    """Round `value * 10**places` to the nearest integer, halves away from zero."""
    scale = 10 ** places
    scaled = Decimal(value * scale).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return float(scaled) / scale


def _or_default(name: str, value: float, default: float) -> float:
    if value > 0:
        return value
    logger.debug("Baseline %s has no usable data; using default %s", name, default)
    return default


def estimate_baseline(
    reader: MartReader,
    today: Optional[datetime.date] = None,
    lookback_days: int = 30,
    spend_lookback_days: int = 90,
) -> GrowthModelInput:
    """
    Build baseline assumptions from the marts behind `reader`.

    Args:
        reader: aggregate-query provider (see app.services.modeling.marts)
        today: end of the lookback windows (defaults to today's UTC date)
        lookback_days: window for orders, traffic and new customers
        spend_lookback_days: window for spend; the monthly budget is the
            window total divided by the number of 30-day months it spans

    Returns:
        GrowthModelInput with every field populated
    """
    if today is None:
        today = datetime.datetime.now(datetime.timezone.utc).date()
    recent_start = today - datetime.timedelta(days=lookback_days)
    spend_start = today - datetime.timedelta(days=spend_lookback_days)

    total_spend = reader.spend_since(spend_start)
    orders = reader.orders_since(recent_start)
    traffic = reader.traffic_since(recent_start)
    cohort_retention = reader.latest_cohort_retention()
    new_customers = reader.new_customers_since(recent_start)

    spend_months = spend_lookback_days / 30
    raw_budget = math.floor(total_spend / spend_months) if total_spend > 0 else 0

    target_cac = _round_half_up(raw_budget / new_customers, 2) if new_customers > 0 else 0.0
    avg_order_value = (
        _round_half_up(orders.revenue_net / orders.order_count, 2) if orders.order_count > 0 else 0.0
    )
    cogs_percent = (
        _round_half_up(orders.cogs / orders.revenue_net, 3) if orders.revenue_net > 0 else 0.0
    )
    expected_cvr = (
        _round_half_up(traffic.purchases / traffic.sessions, 4) if traffic.sessions > 0 else 0.0
    )

    if cohort_retention is None:
        logger.debug("Baseline return_rate has no qualifying cohort; using default %s", DEFAULT_RETURN_RATE)
        return_rate = DEFAULT_RETURN_RATE
    else:
        return_rate = min(1.0, max(0.0, cohort_retention))

    if orders.order_count > 0 and new_customers > 0:
        avg_orders_per_customer = _round_half_up(orders.order_count / new_customers, 1)
    else:
        avg_orders_per_customer = DEFAULT_AVG_ORDERS_PER_CUSTOMER

    baseline = GrowthModelInput(
        monthly_budget=_or_default("monthly_budget", raw_budget, DEFAULT_MONTHLY_BUDGET),
        target_cac=_or_default("target_cac", target_cac, DEFAULT_TARGET_CAC),
        expected_cvr=_or_default("expected_cvr", expected_cvr, DEFAULT_EXPECTED_CVR),
        avg_order_value=_or_default("avg_order_value", avg_order_value, DEFAULT_AVG_ORDER_VALUE),
        cogs_percent=_or_default("cogs_percent", cogs_percent, DEFAULT_COGS_PERCENT),
        monthly_traffic=round(traffic.sessions) if traffic.sessions > 0 else None,
        return_rate=return_rate,
        avg_orders_per_customer=avg_orders_per_customer,
        horizon_months=BASELINE_HORIZON_MONTHS,
    )
    logger.info(
        "Derived baseline: budget=%s cac=%s aov=%s cvr=%s return_rate=%s",
        baseline.monthly_budget,
        baseline.target_cac,
        baseline.avg_order_value,
        baseline.expected_cvr,
        baseline.return_rate,
    )
    return baseline
