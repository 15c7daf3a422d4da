"""
types.py — Shared Data Layer for the Growth Model

Purpose:
- Define the value objects passed between the baseline estimator, the
  simulation engine, the scenario store and the API layer.
- Keep them free of persistence and HTTP concerns (plain dataclasses).

Field names are snake_case here; the API layer exposes them as camelCase.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class GrowthModelInput:
    """
    Marketing assumptions that fully define a scenario.

    Example:
        GrowthModelInput(
            monthly_budget=45000, target_cac=32, expected_cvr=0.028,
            avg_order_value=85, cogs_percent=0.45, return_rate=0.20,
            avg_orders_per_customer=1.3, horizon_months=6,
        )
    """
    monthly_budget: float
    target_cac: float  # 0 means no paid acquisition
    expected_cvr: float
    avg_order_value: float
    cogs_percent: float
    monthly_traffic: Optional[int] = None  # informational only
    return_rate: float = 0.0
    avg_orders_per_customer: float = 1.0
    horizon_months: int = 6


@dataclass
class MonthlyProjection:
    """One simulated month (month is 1-based)."""
    month: int
    spend: float
    new_customers: float
    returning_customers: float
    orders: float
    revenue: float
    cogs: float
    contribution_margin: float
    cumulative_revenue: float
    cumulative_spend: float
    cumulative_profit: float
    roas: float


@dataclass
class GrowthModelOutput:
    """
    Projection summary plus the month-by-month breakdown it was derived from.
    """
    projected_revenue: float
    projected_orders: float
    projected_customers: float
    projected_roas: float
    projected_mer: float
    projected_ltv: float
    projected_contribution_margin: float
    break_even_month: Optional[int]
    monthly_breakdown: List[MonthlyProjection] = field(default_factory=list)

    def scalars(self) -> dict:
        """Summary fields only (what the scenario store persists)."""
        return {name: getattr(self, name) for name in OUTPUT_SCALAR_FIELDS}


INPUT_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(GrowthModelInput))

OUTPUT_SCALAR_FIELDS: Tuple[str, ...] = tuple(
    f.name for f in fields(GrowthModelOutput) if f.name != "monthly_breakdown"
)
