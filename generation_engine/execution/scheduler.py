"""
Scheduler - Dependency Ordering Layer

The DependencyScheduler turns the `depends_on` graph of a plan into waves:
every step of a wave has all of its dependencies finished, so the steps of
a wave run concurrently. The next wave starts once the whole current wave
has joined.

Dependencies gate ordering, not eligibility: a step whose dependency failed
is still attempted unless `skip_failed_dependencies` is set.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..domain.models import ExecutionPlan, PlanStep
from ..exceptions import PlanValidationError
from ..state.models import StepResult, StepStatus
from .executor import StepRunner


def build_waves(steps: List[PlanStep]) -> List[List[PlanStep]]:
    """
    Layers the steps by dependency depth (Kahn's algorithm).
    Steps keep their declared order inside a wave.

    Raises PlanValidationError if the graph has a cycle or references an
    unknown step.
    """
    known = {step.step_id for step in steps}
    for step in steps:
        missing = [dep for dep in step.depends_on if dep not in known]
        if missing:
            raise PlanValidationError(
                [f"step '{step.step_id}' depends on unknown step(s): {', '.join(missing)}"]
            )

    remaining: Dict[str, set] = {step.step_id: set(step.depends_on) for step in steps}
    finished: set = set()
    waves: List[List[PlanStep]] = []

    while remaining:
        ready = [s for s in steps if s.step_id in remaining and remaining[s.step_id] <= finished]
        if not ready:
            blocked = ", ".join(sorted(remaining))
            raise PlanValidationError([f"dependency cycle among steps: {blocked}"])
        waves.append(ready)
        for step in ready:
            finished.add(step.step_id)
            del remaining[step.step_id]

    return waves


class DependencyScheduler:
    def __init__(
        self,
        runner: StepRunner,
        skip_failed_dependencies: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.runner = runner
        self.skip_failed_dependencies = skip_failed_dependencies
        self.logger = logger or logging.getLogger(__name__)

    async def run(
        self,
        plan: ExecutionPlan,
        results: Dict[str, StepResult],
    ) -> Dict[str, StepResult]:
        """
        Runs every step of the plan, writing each StepResult into its own slot
        of `results` as soon as the step finishes. The dict is owned by the
        caller so partial results survive a cancellation.
        """
        waves = build_waves(plan.steps)
        self.logger.info(f"Plan '{plan.plan_id}': {len(plan.steps)} step(s) in {len(waves)} wave(s)")

        for index, wave in enumerate(waves, start=1):
            self.logger.debug(
                f"Wave {index}/{len(waves)}: {', '.join(s.step_id for s in wave)}"
            )
            # Cancelling this gather cancels every in-flight step of the wave.
            await asyncio.gather(*(self._run_step(step, results) for step in wave))

        return results

    async def _run_step(self, step: PlanStep, results: Dict[str, StepResult]) -> None:
        if self.skip_failed_dependencies:
            failed_dep = next(
                (dep for dep in step.depends_on if results[dep].status == StepStatus.FAILED),
                None,
            )
            if failed_dep is not None:
                self.logger.warning(
                    f"Skipping step '{step.step_id}': dependency '{failed_dep}' failed"
                )
                now = datetime.now(timezone.utc)
                results[step.step_id] = StepResult(
                    step_id=step.step_id,
                    status=StepStatus.FAILED,
                    model_used=step.primary_model.model_id,
                    error=f"skipped: dependency '{failed_dep}' failed",
                    started_at=now,
                    completed_at=now,
                )
                return

        results[step.step_id] = await self.runner.run(step, self._reference_assets(step, results))

    @staticmethod
    def _reference_assets(step: PlanStep, results: Dict[str, StepResult]) -> List[str]:
        urls: List[str] = []
        for ref_id in step.reference_steps:
            ref = results.get(ref_id)
            if ref is None or not ref.succeeded:
                continue
            urls.extend(ref.asset_urls or ([ref.asset_reference] if ref.asset_reference else []))
        return urls
