"""
compute_growth_model.py — Run the growth model on a JSON assumptions file.

Reads a GrowthModelInput as camelCase JSON (the same body the
/growth-model/compute endpoint accepts), runs the engine and writes the
projection as camelCase JSON.

Usage:
    python scripts/compute_growth_model.py \
        --input-json inputs/scale_meta.json \
        --output-json outputs/scale_meta_projection.json

Without --output-json a summary and the monthly table are printed.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from pydantic.alias_generators import to_camel, to_snake

from app.services.modeling.assumptions import compute_from_assumptions
from app.services.modeling.errors import ScenarioValidationError
from app.services.modeling.types import GrowthModelOutput


def load_assumptions(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return {to_snake(key): value for key, value in raw.items()}


def to_camel_dict(output: GrowthModelOutput) -> Dict[str, Any]:
    data = asdict(output)
    result = {to_camel(key): value for key, value in data.items() if key != "monthly_breakdown"}
    result["monthlyBreakdown"] = [
        {to_camel(key): value for key, value in month.items()}
        for month in data["monthly_breakdown"]
    ]
    return result


def print_summary(output: GrowthModelOutput) -> None:
    print(f"  Revenue: ${output.projected_revenue:,.0f}")
    print(f"  Orders: {output.projected_orders:,.0f}")
    print(f"  New customers: {output.projected_customers:,.0f}")
    print(f"  ROAS: {output.projected_roas:.2f}x  MER: {output.projected_mer:.2f}")
    print(f"  LTV: ${output.projected_ltv:,.2f}")
    print(f"  Contribution margin: ${output.projected_contribution_margin:,.0f}")
    print(f"  Break-even month: {output.break_even_month or 'not within horizon'}")
    print()
    print(f"  {'Month':>5}  {'Spend':>12}  {'Orders':>10}  {'Revenue':>12}  {'Cum. profit':>12}")
    for m in output.monthly_breakdown:
        print(
            f"  {m.month:>5}  {m.spend:>12,.0f}  {m.orders:>10,.0f}  "
            f"{m.revenue:>12,.0f}  {m.cumulative_profit:>12,.0f}"
        )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Project spend, customers, revenue and break-even from growth assumptions"
    )
    parser.add_argument(
        "--input-json",
        type=str,
        required=True,
        help="Path to assumptions JSON (camelCase GrowthModelInput)",
    )
    parser.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Optional path to write the projection JSON",
    )
    args = parser.parse_args()

    try:
        fields = load_assumptions(Path(args.input_json))
        output = compute_from_assumptions(fields)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except ScenarioValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, TypeError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output_json:
        output_path = Path(args.output_json)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            json.dump(to_camel_dict(output), f, indent=2, ensure_ascii=False)
        print(f"Successfully wrote projection to {args.output_json}")
    else:
        print("Projection:")
        print_summary(output)


if __name__ == "__main__":
    main()
