"""
demo_scenarios.py — Starter Scenarios for Demo Workspaces

Purpose:
- Give a fresh workspace three comparable scenarios to explore:
    * Current Baseline (flagged as baseline)
    * Scale Meta 2x
    * Optimize CAC
- Seeded through the ScenarioStore so outputs are computed like any other save.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Tuple

from app.core.logging import get_logger
from app.services.modeling.scenario_store import ScenarioStore
from app.services.modeling.types import GrowthModelInput

logger = get_logger(__name__)


@dataclass(frozen=True)
class DemoScenario:
    name: str
    description: str
    is_baseline: bool
    model_input: GrowthModelInput


DEMO_SCENARIOS: Tuple[DemoScenario, ...] = (
    DemoScenario(
        name="Current Baseline",
        description="Based on current business metrics — $45K monthly budget with existing CAC and conversion rates.",
        is_baseline=True,
        model_input=GrowthModelInput(
            monthly_budget=45000,
            target_cac=32,
            expected_cvr=0.028,
            avg_order_value=85,
            cogs_percent=0.45,
            return_rate=0.20,
            avg_orders_per_customer=1.3,
            horizon_months=6,
        ),
    ),
    DemoScenario(
        name="Scale Meta 2x",
        description="Double Meta Ads budget to $90K/mo — expect slightly higher CAC but similar CVR.",
        is_baseline=False,
        model_input=GrowthModelInput(
            monthly_budget=90000,
            target_cac=35,
            expected_cvr=0.025,
            avg_order_value=85,
            cogs_percent=0.45,
            return_rate=0.18,
            avg_orders_per_customer=1.2,
            horizon_months=6,
        ),
    ),
    DemoScenario(
        name="Optimize CAC",
        description="Focus on CAC efficiency — maintain budget, improve targeting and creative to lower CAC to $26.",
        is_baseline=False,
        model_input=GrowthModelInput(
            monthly_budget=45000,
            target_cac=26,
            expected_cvr=0.035,
            avg_order_value=85,
            cogs_percent=0.45,
            return_rate=0.25,
            avg_orders_per_customer=1.4,
            horizon_months=6,
        ),
    ),
)


def seed_demo_scenarios(store: ScenarioStore) -> int:
    """
    Insert the demo scenarios when the store is empty.

    Returns:
        Number of scenarios inserted (0 if any scenario already existed)
    """
    if store.list():
        logger.info("Scenario store not empty; skipping demo seed")
        return 0

    for demo in DEMO_SCENARIOS:
        store.create(
            demo.name,
            asdict(demo.model_input),
            description=demo.description,
            is_baseline=demo.is_baseline,
        )
    logger.info("Seeded %d demo scenarios", len(DEMO_SCENARIOS))
    return len(DEMO_SCENARIOS)
