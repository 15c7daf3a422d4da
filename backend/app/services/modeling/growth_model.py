"""
growth_model.py — Growth Model Simulation Engine

Purpose:
- Turn a small set of marketing assumptions (budget, CAC, AOV, margin,
  repeat-purchase behaviour) into a month-by-month forecast of spend,
  customers, orders, revenue, contribution margin and break-even timing.

Per month m = 1..horizon:
    spend               = monthly_budget (constant, no pacing or seasonality)
    new_customers       = spend / target_cac              (0 when target_cac <= 0)
    returning_customers = repeat orders released by earlier cohorts
    orders              = new_customers + returning_customers
    revenue             = orders * avg_order_value
    cogs                = revenue * cogs_percent
    contribution_margin = revenue - cogs - spend
    roas                = revenue / spend                  (0 when spend == 0)

Repeat orders:
    Each cohort carries a pool of extra orders,
        new_customers * (avg_orders_per_customer - 1),
    and every following month return_rate of whatever is still in the pool
    comes back as returning customers. Summed over an unbounded horizon a
    cohort therefore releases exactly its pool (for 0 < return_rate <= 1);
    with return_rate == 0 nobody returns.

This module does NOT:
- Validate inputs (callers reject malformed requests first).
- Touch the database or any other I/O.

It is a pure, deterministic function: every well-typed input produces an
output, and every zero denominator short-circuits to 0.
"""

from __future__ import annotations

from typing import List, Optional

from app.services.modeling.types import (
    GrowthModelInput,
    GrowthModelOutput,
    MonthlyProjection,
)


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def compute_monthly_breakdown(model_input: GrowthModelInput) -> List[MonthlyProjection]:
    """
    Simulate `horizon_months` months and return one projection per month.

    Returns an empty list when the horizon is zero or negative.
    """
    budget = model_input.monthly_budget
    retention = min(1.0, max(0.0, model_input.return_rate))
    extra_orders_per_customer = max(0.0, model_input.avg_orders_per_customer - 1.0)

    # Remaining repeat orders for each cohort acquired so far
    repeat_pools: List[float] = []

    months: List[MonthlyProjection] = []
    cumulative_revenue = 0.0
    cumulative_profit = 0.0

    for month in range(1, model_input.horizon_months + 1):
        spend = budget
        new_customers = _safe_div(spend, model_input.target_cac)

        returning_customers = 0.0
        for i, pool in enumerate(repeat_pools):
            released = pool * retention
            repeat_pools[i] = pool - released
            returning_customers += released
        repeat_pools.append(new_customers * extra_orders_per_customer)

        orders = new_customers + returning_customers
        revenue = orders * model_input.avg_order_value
        cogs = revenue * model_input.cogs_percent
        contribution_margin = revenue - cogs - spend

        cumulative_revenue += revenue
        cumulative_profit += contribution_margin

        months.append(
            MonthlyProjection(
                month=month,
                spend=spend,
                new_customers=new_customers,
                returning_customers=returning_customers,
                orders=orders,
                revenue=revenue,
                cogs=cogs,
                contribution_margin=contribution_margin,
                cumulative_revenue=cumulative_revenue,
                # Constant spend, so the running sum is budget * month
                cumulative_spend=budget * month,
                cumulative_profit=cumulative_profit,
                roas=_safe_div(revenue, spend),
            )
        )

    return months


def find_break_even_month(months: List[MonthlyProjection]) -> Optional[int]:
    """First month whose cumulative profit is >= 0, or None."""
    for projection in months:
        if projection.cumulative_profit >= 0:
            return projection.month
    return None


def compute_growth_model(model_input: GrowthModelInput) -> GrowthModelOutput:
    """
    Main entrypoint: summary KPIs plus the monthly breakdown.

    Every summary except `projected_ltv` is derived from the breakdown;
    LTV is the closed form avg_order_value * avg_orders_per_customer.
    """
    months = compute_monthly_breakdown(model_input)
    projected_ltv = model_input.avg_order_value * model_input.avg_orders_per_customer

    if not months:
        return GrowthModelOutput(
            projected_revenue=0.0,
            projected_orders=0.0,
            projected_customers=0.0,
            projected_roas=0.0,
            projected_mer=0.0,
            projected_ltv=projected_ltv,
            projected_contribution_margin=0.0,
            break_even_month=None,
            monthly_breakdown=[],
        )

    last = months[-1]
    total_revenue = sum(m.revenue for m in months)
    total_spend = sum(m.spend for m in months)

    return GrowthModelOutput(
        projected_revenue=total_revenue,
        projected_orders=sum(m.orders for m in months),
        projected_customers=sum(m.new_customers for m in months),
        projected_roas=_safe_div(total_revenue, total_spend),
        projected_mer=_safe_div(total_spend, total_revenue),
        projected_ltv=projected_ltv,
        projected_contribution_margin=last.cumulative_profit,
        break_even_month=find_break_even_month(months),
        monthly_breakdown=months,
    )
