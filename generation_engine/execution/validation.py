"""
Plan validation.

A plan that fails validation is rejected before any provider call; it is
never partially executed.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..domain.models import ExecutionPlan, PlanStep
from ..exceptions import PlanValidationError
from ..providers.catalog import ModelCatalog
from .scheduler import build_waves


def _flatten_errors(e: ValidationError, root: str) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or root}: {err['msg']}"
        for err in e.errors()
    ]


def parse_plan(payload: Dict[str, Any]) -> ExecutionPlan:
    """Builds an ExecutionPlan from a raw JSON payload."""
    try:
        return ExecutionPlan.model_validate(payload)
    except ValidationError as e:
        raise PlanValidationError(_flatten_errors(e, "plan")) from e


def parse_step(payload: Dict[str, Any]) -> PlanStep:
    """Builds a standalone PlanStep from a raw JSON payload."""
    try:
        return PlanStep.model_validate(payload)
    except ValidationError as e:
        raise PlanValidationError(_flatten_errors(e, "step")) from e


def validate_plan(plan: ExecutionPlan, catalog: Optional[ModelCatalog] = None) -> None:
    """
    Checks the structural invariants of a plan. When a catalog is given,
    every model id must also be one it can serve.

    Raises PlanValidationError listing every problem found.
    """
    problems: List[str] = []

    if not plan.plan_id or not plan.plan_id.strip():
        problems.append("plan_id is required")
    if not plan.steps:
        problems.append("plan must contain at least one step")

    counts = Counter(step.step_id for step in plan.steps)
    for step_id, count in counts.items():
        if not step_id or not step_id.strip():
            problems.append("step_id is required")
        elif count > 1:
            problems.append(f"duplicate step id '{step_id}'")

    graph_ok = True
    for step in plan.steps:
        if not step.primary_model.model_id:
            problems.append(f"step '{step.step_id}' has no primary model")

        unknown = [dep for dep in step.depends_on if dep not in counts]
        if unknown:
            graph_ok = False
            problems.append(
                f"step '{step.step_id}' depends on unknown step(s): {', '.join(unknown)}"
            )
        if step.step_id in step.depends_on:
            graph_ok = False
            problems.append(f"step '{step.step_id}' depends on itself")

        stray = [ref for ref in step.reference_steps if ref not in step.depends_on]
        if stray:
            problems.append(
                f"step '{step.step_id}' references step(s) it does not depend on: {', '.join(stray)}"
            )

        if catalog is not None:
            for candidate in step.candidates:
                if candidate.model_id and candidate.model_id not in catalog:
                    problems.append(
                        f"step '{step.step_id}' uses unsupported model '{candidate.model_id}'"
                    )

    if graph_ok and plan.steps and all(count == 1 for count in counts.values()):
        try:
            build_waves(plan.steps)
        except PlanValidationError as e:
            problems.extend(e.problems)

    if problems:
        raise PlanValidationError(problems)
