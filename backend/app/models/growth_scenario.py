"""
growth_scenario.py — ORM Model for Saved Growth Scenarios

Purpose:
- Store a named set of growth assumptions together with the projected
  outputs computed from them.
- Allows operators to:
    * Save a what-if ("Scale Meta 2x", "Optimize CAC")
    * Promote the derived baseline into a saved scenario
    * Return to it later and compare against other scenarios

This table stores:
- Every GrowthModelInput field
- Every GrowthModelOutput summary field (NOT the monthly breakdown)
- Name / description / baseline flag
- Created / updated timestamps

Important Design Rule:
- Output columns are only ever written together with the input columns,
  from a fresh engine run (see app.services.modeling.scenario_store).
"""

import datetime
import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text

from app.core.database import Base
from app.services.modeling.types import (
    INPUT_FIELDS,
    OUTPUT_SCALAR_FIELDS,
    GrowthModelInput,
    GrowthModelOutput,
)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class GrowthScenario(Base):
    __tablename__ = "growth_scenario"

    # Primary key
    id = Column(String(32), primary_key=True, default=_new_id)

    # Display metadata
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_baseline = Column(Boolean, nullable=False, default=False)

    # Inputs
    monthly_budget = Column(Float, nullable=False)
    target_cac = Column(Float, nullable=False)
    expected_cvr = Column(Float, nullable=False)
    avg_order_value = Column(Float, nullable=False)
    cogs_percent = Column(Float, nullable=False)
    monthly_traffic = Column(Integer, nullable=True)
    return_rate = Column(Float, nullable=False, default=0.0)
    avg_orders_per_customer = Column(Float, nullable=False, default=1.0)
    horizon_months = Column(Integer, nullable=False, default=6)

    # Outputs (summary only — the breakdown is recomputed on read)
    projected_revenue = Column(Float, nullable=False)
    projected_orders = Column(Float, nullable=False)
    projected_customers = Column(Float, nullable=False)
    projected_roas = Column(Float, nullable=False)
    projected_mer = Column(Float, nullable=False)
    projected_ltv = Column(Float, nullable=False)
    projected_contribution_margin = Column(Float, nullable=False)
    break_even_month = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_growth_scenario_updated_at", "updated_at"),
    )

    def to_input(self) -> GrowthModelInput:
        """Rebuild the engine input from the stored columns."""
        return GrowthModelInput(**{name: getattr(self, name) for name in INPUT_FIELDS})

    def apply_projection(self, model_input: GrowthModelInput, output: GrowthModelOutput) -> None:
        """
        Overwrite inputs and outputs in one step.
        """
        for name in INPUT_FIELDS:
            setattr(self, name, getattr(model_input, name))
        for name in OUTPUT_SCALAR_FIELDS:
            setattr(self, name, getattr(output, name))

    def __repr__(self):
        return f"<GrowthScenario {self.id} | {self.name}>"
