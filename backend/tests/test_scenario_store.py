"""
Tests for scenario_store.py and demo_scenarios.py against in-memory SQLite.
"""

from dataclasses import asdict

import pytest

from app.models.growth_scenario import GrowthScenario
from app.services.modeling.assumptions import find_invalid_fields
from app.services.modeling.demo_scenarios import DEMO_SCENARIOS, seed_demo_scenarios
from app.services.modeling.errors import ScenarioNotFoundError, ScenarioValidationError
from app.services.modeling.growth_model import compute_growth_model
from app.services.modeling.types import OUTPUT_SCALAR_FIELDS, GrowthModelInput


def _stored_scalars(scenario: GrowthScenario) -> dict:
    return {name: getattr(scenario, name) for name in OUTPUT_SCALAR_FIELDS}


# -----------------------------------------------------------------------------
# Create / get
# -----------------------------------------------------------------------------

def test_create_persists_inputs_and_computed_outputs(store, simple_fields):
    scenario = store.create("Simple", simple_fields, description="flat month")

    assert scenario.id
    assert scenario.name == "Simple"
    assert scenario.description == "flat month"
    assert scenario.is_baseline is False
    assert scenario.monthly_budget == 10000
    assert scenario.projected_revenue == pytest.approx(60000)
    assert scenario.break_even_month == 1
    assert scenario.updated_at is not None


def test_create_applies_defaults_for_optional_inputs(store):
    scenario = store.create(
        "Minimal",
        {
            "monthly_budget": 10000,
            "target_cac": 50,
            "expected_cvr": 0.02,
            "avg_order_value": 100,
            "cogs_percent": 0.4,
        },
    )

    assert scenario.monthly_traffic is None
    assert scenario.return_rate == 0
    assert scenario.avg_orders_per_customer == 1
    assert scenario.horizon_months == 6


def test_create_reports_every_missing_field(store):
    with pytest.raises(ScenarioValidationError) as excinfo:
        store.create(None, {"monthly_budget": 1000, "cogs_percent": None})

    assert excinfo.value.missing_fields == [
        "name",
        "targetCac",
        "expectedCvr",
        "avgOrderValue",
        "cogsPercent",
    ]
    assert store.list() == []


def test_create_reports_every_out_of_range_field(store, simple_fields):
    with pytest.raises(ScenarioValidationError) as excinfo:
        store.create(
            "Broken",
            {**simple_fields, "monthly_budget": -5000, "return_rate": 1.2, "horizon_months": 0},
        )

    assert excinfo.value.missing_fields == []
    assert excinfo.value.invalid_fields == ["monthlyBudget", "returnRate", "horizonMonths"]
    assert store.list() == []


def test_invalid_fields_cover_non_finite_and_fractional_horizon():
    invalid = find_invalid_fields(
        {"avg_order_value": float("nan"), "target_cac": float("inf"), "horizon_months": 2.5}
    )
    assert invalid == ["targetCac", "avgOrderValue", "horizonMonths"]


def test_round_trip_matches_engine(store):
    model_input = GrowthModelInput(
        monthly_budget=45000,
        target_cac=32,
        expected_cvr=0.028,
        avg_order_value=85,
        cogs_percent=0.45,
        return_rate=0.2,
        avg_orders_per_customer=1.3,
        horizon_months=6,
    )
    created = store.create("Baseline", asdict(model_input))

    scenario, breakdown = store.get_with_breakdown(created.id)
    expected = compute_growth_model(model_input)

    assert _stored_scalars(scenario) == pytest.approx(expected.scalars())
    assert len(breakdown) == 6
    assert sum(m.revenue for m in breakdown) == pytest.approx(scenario.projected_revenue)
    assert breakdown[-1].cumulative_profit == pytest.approx(scenario.projected_contribution_margin)


def test_get_missing_raises_not_found(store):
    with pytest.raises(ScenarioNotFoundError):
        store.get("does-not-exist")
    with pytest.raises(ScenarioNotFoundError):
        store.get_with_breakdown("does-not-exist")


# -----------------------------------------------------------------------------
# Update
# -----------------------------------------------------------------------------

def test_update_keeps_untouched_fields_and_recomputes(store, simple_fields):
    created = store.create("Simple", simple_fields)

    updated = store.update(created.id, {"monthly_budget": 20000})

    assert updated.monthly_budget == 20000
    assert updated.target_cac == 50
    assert updated.cogs_percent == pytest.approx(0.4)
    assert updated.horizon_months == 3
    assert updated.name == "Simple"

    expected = compute_growth_model(updated.to_input())
    assert _stored_scalars(updated) == pytest.approx(expected.scalars())
    assert updated.projected_revenue == pytest.approx(120000)


def test_update_ignores_none_values(store, simple_fields):
    created = store.create("Simple", simple_fields, description="keep me")

    updated = store.update(created.id, {"target_cac": None, "description": None, "name": "Renamed"})

    assert updated.target_cac == 50
    assert updated.description == "keep me"
    assert updated.name == "Renamed"


def test_update_rejects_out_of_range_values_and_keeps_row(store, simple_fields):
    created = store.create("Simple", simple_fields)

    with pytest.raises(ScenarioValidationError) as excinfo:
        store.update(created.id, {"expected_cvr": 1.7, "name": ""})

    assert excinfo.value.missing_fields == ["name"]
    assert excinfo.value.invalid_fields == ["expectedCvr"]
    stored = store.get(created.id)
    assert stored.name == "Simple"
    assert stored.expected_cvr == pytest.approx(0.025)


def test_update_can_flag_baseline(store, simple_fields):
    created = store.create("Simple", simple_fields)
    assert store.update(created.id, {"is_baseline": True}).is_baseline is True


def test_update_missing_raises_not_found(store):
    with pytest.raises(ScenarioNotFoundError):
        store.update("does-not-exist", {"monthly_budget": 1})


# -----------------------------------------------------------------------------
# List / delete
# -----------------------------------------------------------------------------

def test_list_orders_by_most_recent_update(store, simple_fields):
    first = store.create("First", simple_fields)
    second = store.create("Second", simple_fields)
    assert [s.name for s in store.list()] == ["Second", "First"]

    store.update(first.id, {"horizon_months": 4})
    assert [s.id for s in store.list()] == [first.id, second.id]


def test_delete_removes_scenario(store, simple_fields):
    created = store.create("Doomed", simple_fields)

    store.delete(created.id)

    assert store.list() == []
    with pytest.raises(ScenarioNotFoundError):
        store.delete(created.id)


# -----------------------------------------------------------------------------
# Baseline promotion / demo seed
# -----------------------------------------------------------------------------

def test_promote_baseline_creates_flagged_scenario(store):
    baseline = GrowthModelInput(
        monthly_budget=25000,
        target_cac=50,
        expected_cvr=0.025,
        avg_order_value=85,
        cogs_percent=0.45,
        return_rate=0.2,
        avg_orders_per_customer=1.3,
        horizon_months=6,
    )
    scenario = store.promote_baseline(baseline)

    assert scenario.is_baseline is True
    assert scenario.name == "Current Baseline"
    assert scenario.to_input() == baseline


def test_promote_baseline_keeps_estimated_orders_per_customer_below_one(store):
    baseline = GrowthModelInput(
        monthly_budget=25000,
        target_cac=50,
        expected_cvr=0.025,
        avg_order_value=85,
        cogs_percent=0.45,
        avg_orders_per_customer=0.3,
    )
    scenario = store.promote_baseline(baseline, name="Thin repeat data")

    assert scenario.avg_orders_per_customer == pytest.approx(0.3)
    assert scenario.projected_ltv == pytest.approx(85 * 0.3)


def test_seed_demo_scenarios_only_when_empty(store):
    assert seed_demo_scenarios(store) == len(DEMO_SCENARIOS)
    assert seed_demo_scenarios(store) == 0

    scenarios = store.list()
    assert {s.name for s in scenarios} == {d.name for d in DEMO_SCENARIOS}
    assert [s.name for s in scenarios if s.is_baseline] == ["Current Baseline"]
