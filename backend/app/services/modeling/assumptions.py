"""
assumptions.py — Input Validation, Merging and the Stateless Compute Façade

Purpose:
- Decide which request fields are required before the engine may run, and
  reject supplied values outside their allowed ranges.
- Merge supplied fields over defaults (create) or over a stored input (update).
- Provide `compute_from_assumptions()`, the no-persistence entrypoint used
  by the live slider endpoint and the CLI.

Field dictionaries use snake_case keys; a key that is absent or None means
"not supplied".
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic.alias_generators import to_camel

from app.services.modeling.errors import ScenarioValidationError
from app.services.modeling.growth_model import compute_growth_model
from app.services.modeling.types import INPUT_FIELDS, GrowthModelInput, GrowthModelOutput

# Required before any engine run, in the order they are reported
REQUIRED_INPUT_FIELDS = (
    "monthly_budget",
    "target_cac",
    "expected_cvr",
    "avg_order_value",
    "cogs_percent",
)

# Applied on create / compute when the optional fields are not supplied
INPUT_DEFAULTS: Dict[str, Any] = {
    "monthly_traffic": None,
    "return_rate": 0.0,
    "avg_orders_per_customer": 1.0,
    "horizon_months": 6,
}


def supplied(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in fields.items() if value is not None}


def find_missing_fields(
    fields: Mapping[str, Any],
    require_name: bool = False,
    name: Optional[str] = None,
) -> List[str]:
    """
    Return the camelCase names of every missing required field.

    Example:
        find_missing_fields({"monthly_budget": 1}, require_name=True)
        → ["name", "targetCac", "expectedCvr", "avgOrderValue", "cogsPercent"]
    """
    missing: List[str] = []
    if require_name and not name:
        missing.append("name")
    missing.extend(to_camel(key) for key in REQUIRED_INPUT_FIELDS if fields.get(key) is None)
    return missing


# Inclusive (low, high) bounds for every supplied value; None means unbounded
FIELD_BOUNDS: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "monthly_budget": (0, None),
    "target_cac": (0, None),
    "expected_cvr": (0, 1),
    "avg_order_value": (0, None),
    "cogs_percent": (0, 1),
    "monthly_traffic": (0, None),
    "return_rate": (0, 1),
    "avg_orders_per_customer": (1, None),
    "horizon_months": (1, None),
}


def find_invalid_fields(fields: Mapping[str, Any]) -> List[str]:
    """
    Return the camelCase names of supplied fields outside FIELD_BOUNDS.

    Absent / None fields are skipped; non-finite numbers and a fractional
    horizon are always invalid.
    """
    invalid: List[str] = []
    for key, (low, high) in FIELD_BOUNDS.items():
        value = fields.get(key)
        if value is None:
            continue
        if (
            not math.isfinite(value)
            or (low is not None and value < low)
            or (high is not None and value > high)
            or (key == "horizon_months" and value != int(value))
        ):
            invalid.append(to_camel(key))
    return invalid


def validate_required(
    fields: Mapping[str, Any],
    require_name: bool = False,
    name: Optional[str] = None,
    check_ranges: bool = True,
) -> None:
    """
    Raises:
        ScenarioValidationError: naming every missing field and, unless
            check_ranges is False, every out-of-range field
    """
    missing = find_missing_fields(fields, require_name=require_name, name=name)
    invalid = find_invalid_fields(fields) if check_ranges else []
    if missing or invalid:
        raise ScenarioValidationError(missing, invalid)


def validate_update(changes: Mapping[str, Any]) -> None:
    """
    Validate a partial update: only supplied fields are checked, and a
    supplied name must not be empty.
    """
    missing = ["name"] if "name" in changes and not changes["name"] else []
    invalid = find_invalid_fields(changes)
    if missing or invalid:
        raise ScenarioValidationError(missing, invalid)


def merge_assumptions(
    fields: Mapping[str, Any],
    base: Optional[GrowthModelInput] = None,
) -> GrowthModelInput:
    """
    Build a GrowthModelInput from supplied fields.

    - base is None: supplied fields over INPUT_DEFAULTS (required fields
      must already be validated).
    - base given: supplied fields over the base, field by field; anything
      not supplied keeps its previous value.
    """
    overrides = {key: value for key, value in supplied(fields).items() if key in INPUT_FIELDS}
    if base is not None:
        return replace(base, **overrides)
    return GrowthModelInput(**{**INPUT_DEFAULTS, **overrides})


def compute_from_assumptions(fields: Mapping[str, Any]) -> GrowthModelOutput:
    """
    Stateless compute: validate, merge with defaults, run the engine.

    Raises:
        ScenarioValidationError: if any of the five required fields is missing
            or a supplied value is out of range
    """
    validate_required(fields)
    return compute_growth_model(merge_assumptions(fields))
