"""
errors.py — Domain Errors for the Growth Model Services

The API layer maps these to HTTP responses:
- ScenarioValidationError → 400
- ScenarioNotFoundError   → 404

Arithmetic degeneracies (zero CAC, zero spend, zero revenue) are never
raised; the engine guards them internally.
"""

from typing import List, Sequence


class GrowthModelError(Exception):
    """Base class for growth model service errors."""


class ScenarioValidationError(GrowthModelError):
    """
    Raised when required fields are missing or supplied values are out of
    range. Lists every offending field, not just the first one.
    """

    def __init__(self, missing_fields: Sequence[str], invalid_fields: Sequence[str] = ()):
        self.missing_fields: List[str] = list(missing_fields)
        self.invalid_fields: List[str] = list(invalid_fields)

        problems = []
        if self.missing_fields:
            problems.append(f"Missing required fields: {', '.join(self.missing_fields)}")
        if self.invalid_fields:
            problems.append(f"Fields out of range: {', '.join(self.invalid_fields)}")
        super().__init__("; ".join(problems))


class ScenarioNotFoundError(GrowthModelError):
    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(f"Scenario {scenario_id} not found")
