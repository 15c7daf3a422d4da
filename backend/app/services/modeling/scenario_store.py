"""
scenario_store.py — Persistence for Named Growth Scenarios

Purpose:
- Create, read, update, delete and list saved scenarios.
- Guarantee that stored outputs are always the engine's result for the
  stored inputs:
    * every create/update runs the engine on the effective input and
      writes inputs + summary outputs in the same commit
    * the monthly breakdown is never stored; `get_with_breakdown()`
      recomputes it from the stored inputs

Update semantics:
- Fields absent (or None) in the update keep their previous value.
- The row is read with SELECT ... FOR UPDATE, so read → compute → write is
  one unit per scenario id. Concurrent updates to one id: last writer wins.

This module does NOT:
- Speak HTTP (see app.api.v1.growth_model).
- Derive baselines from the marts (see baseline.py).
"""

from __future__ import annotations

import datetime
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.growth_scenario import GrowthScenario
from app.services.modeling.assumptions import (
    merge_assumptions,
    supplied,
    validate_required,
    validate_update,
)
from app.services.modeling.errors import ScenarioNotFoundError
from app.services.modeling.growth_model import compute_growth_model
from app.services.modeling.types import GrowthModelInput, MonthlyProjection

logger = get_logger(__name__)

DEFAULT_BASELINE_NAME = "Current Baseline"


class ScenarioStore:
    """Scenario persistence bound to one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list(self) -> List[GrowthScenario]:
        """All scenarios, most recently updated first."""
        return (
            self.db.query(GrowthScenario)
            .order_by(GrowthScenario.updated_at.desc(), GrowthScenario.created_at.desc())
            .all()
        )

    def get(self, scenario_id: str) -> GrowthScenario:
        scenario = self.db.get(GrowthScenario, scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)
        return scenario

    def get_with_breakdown(self, scenario_id: str) -> Tuple[GrowthScenario, List[MonthlyProjection]]:
        """
        Scenario plus its monthly breakdown, recomputed from the stored inputs.
        """
        scenario = self.get(scenario_id)
        output = compute_growth_model(scenario.to_input())
        return scenario, output.monthly_breakdown

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(
        self,
        name: Optional[str],
        fields: Mapping[str, Any],
        description: Optional[str] = None,
        is_baseline: bool = False,
        check_ranges: bool = True,
    ) -> GrowthScenario:
        """
        Validate, compute and persist a new scenario.

        Args:
            name: display name (required)
            fields: snake_case GrowthModelInput fields; the five required
                fields must be present, the rest fall back to defaults

        Raises:
            ScenarioValidationError: listing every missing required field and
                every out-of-range value
        """
        validate_required(fields, require_name=True, name=name, check_ranges=check_ranges)

        model_input = merge_assumptions(fields)
        output = compute_growth_model(model_input)

        scenario = GrowthScenario(
            name=name,
            description=description,
            is_baseline=bool(is_baseline),
        )
        scenario.apply_projection(model_input, output)
        self.db.add(scenario)
        self.db.commit()
        self.db.refresh(scenario)

        logger.info("Created scenario %s (%s)", scenario.id, scenario.name)
        return scenario

    def update(self, scenario_id: str, fields: Mapping[str, Any]) -> GrowthScenario:
        """
        Replace the supplied fields and recompute every output.

        `fields` may also carry name / description / is_baseline.

        Raises:
            ScenarioNotFoundError: if the id does not exist
            ScenarioValidationError: if a supplied value is out of range or
                the name is set to an empty string
        """
        changes: Dict[str, Any] = supplied(fields)
        validate_update(changes)

        scenario = (
            self.db.query(GrowthScenario)
            .filter(GrowthScenario.id == scenario_id)
            .with_for_update()
            .one_or_none()
        )
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)

        model_input = merge_assumptions(changes, base=scenario.to_input())
        output = compute_growth_model(model_input)

        if "name" in changes:
            scenario.name = changes["name"]
        if "description" in changes:
            scenario.description = changes["description"]
        if "is_baseline" in changes:
            scenario.is_baseline = bool(changes["is_baseline"])
        scenario.apply_projection(model_input, output)
        scenario.updated_at = datetime.datetime.now(datetime.timezone.utc)

        self.db.commit()
        self.db.refresh(scenario)

        logger.info("Updated scenario %s (%s)", scenario.id, ", ".join(sorted(changes)) or "no changes")
        return scenario

    def delete(self, scenario_id: str) -> None:
        """
        Raises:
            ScenarioNotFoundError: if the id does not exist
        """
        scenario = self.get(scenario_id)
        self.db.delete(scenario)
        self.db.commit()
        logger.info("Deleted scenario %s", scenario_id)

    def promote_baseline(
        self,
        baseline: GrowthModelInput,
        name: str = DEFAULT_BASELINE_NAME,
        description: Optional[str] = None,
    ) -> GrowthScenario:
        """
        Save a derived baseline as a scenario flagged is_baseline=True.

        Estimated values are stored as derived, without range checks: the
        estimator may legitimately report avg_orders_per_customer below 1.
        """
        return self.create(
            name,
            asdict(baseline),
            description=description,
            is_baseline=True,
            check_ranges=False,
        )
