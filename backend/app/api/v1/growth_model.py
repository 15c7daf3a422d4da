"""
growth_model.py — Growth Model / Scenario Planning API Endpoints

Purpose:
- Interactive scenario planning: input assumptions → projected outcomes.
- CRUD over saved scenarios (outputs recomputed on every write).
- Stateless compute for live slider interaction (no persistence).
- Baseline assumptions derived from the historical marts.

Endpoints:
- GET    /api/v1/growth-model/scenarios           - List scenarios, newest-updated first
- POST   /api/v1/growth-model/scenarios           - Create scenario (201)
- GET    /api/v1/growth-model/scenarios/{id}      - Scenario + monthly breakdown
- PUT    /api/v1/growth-model/scenarios/{id}      - Partial update + recompute
- DELETE /api/v1/growth-model/scenarios/{id}      - Delete (204)
- POST   /api/v1/growth-model/compute             - Stateless projection
- GET    /api/v1/growth-model/baseline            - Derived baseline + its projection
- POST   /api/v1/growth-model/baseline/promote    - Save derived baseline as a scenario (201)

JSON field names are camelCase for the dashboard; services use snake_case.
"""

from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.logging import get_logger
from app.services.modeling.assumptions import compute_from_assumptions
from app.services.modeling.baseline import estimate_baseline
from app.services.modeling.errors import ScenarioNotFoundError, ScenarioValidationError
from app.services.modeling.growth_model import compute_growth_model
from app.services.modeling.marts import SqlMartReader
from app.services.modeling.scenario_store import DEFAULT_BASELINE_NAME, ScenarioStore
from app.services.modeling.types import GrowthModelOutput

logger = get_logger(__name__)

router = APIRouter(
    prefix="/growth-model",
    tags=["growth-model"]
)

# -----------------------------------------------------------------------------
# Request/Response Schemas
# -----------------------------------------------------------------------------


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AssumptionsIn(CamelModel):
    """All optional so every missing required field can be reported at once."""
    monthly_budget: Optional[float] = None
    target_cac: Optional[float] = None
    expected_cvr: Optional[float] = None
    avg_order_value: Optional[float] = None
    cogs_percent: Optional[float] = None
    monthly_traffic: Optional[int] = None
    return_rate: Optional[float] = None
    avg_orders_per_customer: Optional[float] = None
    horizon_months: Optional[int] = None


class ScenarioIn(AssumptionsIn):
    name: Optional[str] = None
    description: Optional[str] = None
    is_baseline: Optional[bool] = None


class PromoteBaselineIn(CamelModel):
    name: str = DEFAULT_BASELINE_NAME
    description: Optional[str] = None


class GrowthModelInputOut(CamelModel):
    monthly_budget: float
    target_cac: float
    expected_cvr: float
    avg_order_value: float
    cogs_percent: float
    monthly_traffic: Optional[int] = None
    return_rate: float
    avg_orders_per_customer: float
    horizon_months: int


class MonthlyProjectionOut(CamelModel):
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


class GrowthModelOutputOut(CamelModel):
    projected_revenue: float
    projected_orders: float
    projected_customers: float
    projected_roas: float
    projected_mer: float
    projected_ltv: float
    projected_contribution_margin: float
    break_even_month: Optional[int] = None
    monthly_breakdown: List[MonthlyProjectionOut]


class BaselineOut(GrowthModelOutputOut):
    baseline: GrowthModelInputOut


class ScenarioOut(GrowthModelInputOut):
    id: str
    name: str
    description: Optional[str] = None
    is_baseline: bool
    projected_revenue: float
    projected_orders: float
    projected_customers: float
    projected_roas: float
    projected_mer: float
    projected_ltv: float
    projected_contribution_margin: float
    break_even_month: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ScenarioDetailOut(ScenarioOut):
    monthly_breakdown: List[MonthlyProjectionOut]


class ScenarioListOut(CamelModel):
    scenarios: List[ScenarioOut]


def _output_out(output: GrowthModelOutput) -> GrowthModelOutputOut:
    return GrowthModelOutputOut(**asdict(output))


def _fields(body: AssumptionsIn) -> dict:
    return body.model_dump(exclude_none=True)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Scenario not found")


def _invalid(exc: ScenarioValidationError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "error": str(exc),
            "missingFields": exc.missing_fields,
            "invalidFields": exc.invalid_fields,
        },
    )


# -----------------------------------------------------------------------------
# Scenario Endpoints
# -----------------------------------------------------------------------------


@router.get("/scenarios", response_model=ScenarioListOut)
def list_scenarios(db: Session = Depends(get_db)):
    """
    Returns all saved growth scenarios, newest-updated first.
    """
    scenarios = ScenarioStore(db).list()
    return ScenarioListOut(scenarios=[ScenarioOut.model_validate(s) for s in scenarios])


@router.post("/scenarios", response_model=ScenarioOut, status_code=201)
def create_scenario(body: ScenarioIn, db: Session = Depends(get_db)):
    """
    Create a new growth scenario — computes projected outputs from the input
    assumptions and stores both.

    Requires name, monthlyBudget, targetCac, expectedCvr, avgOrderValue, cogsPercent.
    """
    fields = _fields(body)
    try:
        scenario = ScenarioStore(db).create(
            fields.pop("name", None),
            fields,
            description=fields.pop("description", None),
            is_baseline=fields.pop("is_baseline", False),
        )
    except ScenarioValidationError as exc:
        raise _invalid(exc) from exc
    return ScenarioOut.model_validate(scenario)


@router.get("/scenarios/{scenario_id}", response_model=ScenarioDetailOut)
def get_scenario(scenario_id: str, db: Session = Depends(get_db)):
    """
    Returns a single saved scenario with its monthly breakdown (recomputed,
    never stored).
    """
    try:
        scenario, breakdown = ScenarioStore(db).get_with_breakdown(scenario_id)
    except ScenarioNotFoundError as exc:
        raise _not_found() from exc
    return ScenarioDetailOut(
        **ScenarioOut.model_validate(scenario).model_dump(),
        monthly_breakdown=[asdict(m) for m in breakdown],
    )


@router.put("/scenarios/{scenario_id}", response_model=ScenarioOut)
def update_scenario(scenario_id: str, body: ScenarioIn, db: Session = Depends(get_db)):
    """
    Update scenario fields — omitted fields keep their stored values and all
    projected outputs are recomputed.
    """
    try:
        scenario = ScenarioStore(db).update(scenario_id, _fields(body))
    except ScenarioNotFoundError as exc:
        raise _not_found() from exc
    except ScenarioValidationError as exc:
        raise _invalid(exc) from exc
    return ScenarioOut.model_validate(scenario)


@router.delete("/scenarios/{scenario_id}", status_code=204)
def delete_scenario(scenario_id: str, db: Session = Depends(get_db)):
    """
    Delete a saved growth scenario.
    """
    try:
        ScenarioStore(db).delete(scenario_id)
    except ScenarioNotFoundError as exc:
        raise _not_found() from exc
    return Response(status_code=204)


# -----------------------------------------------------------------------------
# Stateless Compute
# -----------------------------------------------------------------------------


@router.post("/compute", response_model=GrowthModelOutputOut)
async def compute(body: AssumptionsIn):
    """
    Real-time computation for slider interaction. No database access —
    returns projected KPIs and the monthly breakdown.
    """
    try:
        output = compute_from_assumptions(_fields(body))
    except ScenarioValidationError as exc:
        raise _invalid(exc) from exc
    return _output_out(output)


# -----------------------------------------------------------------------------
# Baseline
# -----------------------------------------------------------------------------


def _derive_baseline(db: Session):
    return estimate_baseline(
        SqlMartReader(db),
        lookback_days=settings.BASELINE_LOOKBACK_DAYS,
        spend_lookback_days=settings.BASELINE_SPEND_LOOKBACK_DAYS,
    )


@router.get("/baseline", response_model=BaselineOut)
def get_baseline(db: Session = Depends(get_db)):
    """
    Derives input assumptions from recent mart data (spend, orders, traffic,
    cohorts, new customers) and projects them forward.
    """
    try:
        baseline = _derive_baseline(db)
        output = compute_growth_model(baseline)
    except Exception as exc:
        logger.exception("Error deriving baseline: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error deriving baseline: {str(exc)}")

    return BaselineOut(**asdict(output), baseline=asdict(baseline))


@router.post("/baseline/promote", response_model=ScenarioOut, status_code=201)
def promote_baseline(body: Optional[PromoteBaselineIn] = None, db: Session = Depends(get_db)):
    """
    Save the currently derived baseline as a scenario flagged isBaseline.
    """
    body = body or PromoteBaselineIn()
    try:
        baseline = _derive_baseline(db)
    except Exception as exc:
        logger.exception("Error deriving baseline: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error deriving baseline: {str(exc)}")

    try:
        scenario = ScenarioStore(db).promote_baseline(
            baseline,
            name=body.name,
            description=body.description,
        )
    except ScenarioValidationError as exc:
        raise _invalid(exc) from exc
    return ScenarioOut.model_validate(scenario)
