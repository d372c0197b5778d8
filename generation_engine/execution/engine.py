"""
Engine - Execution Coordination Layer

The ExecutionCoordinator is the single entry point of the engine
("The Manager"). It validates an ExecutionPlan, hands it to the
DependencyScheduler, which delegates every step to the StepRunner
("The Worker"), and aggregates the StepResults into one WorkflowResult.
-----------------------------------------------

Failure handling is layered:
1. A provider failure is recovered by the StepRunner via the fallback cascade.
2. A step that exhausts its candidates is recorded as a failed StepResult and
   never aborts its siblings or dependents.
3. A mix of successes and failures is a PARTIAL_SUCCESS, a normal return.

The only exception that escapes execute() is PlanValidationError. The
coordinator never retries a step once its StepResult is recorded.
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..domain.models import Capability, ExecutionPlan, PlanStep
from ..providers.catalog import ModelCatalog
from ..state.models import StepResult, StepStatus, WorkflowResult, WorkflowStatus
from .executor import DEFAULT_PROVIDER_TIMEOUT, StepRunner
from .scheduler import DependencyScheduler
from .validation import validate_plan

PLAN_TIMEOUT_ERROR = "timeout: plan deadline exceeded"


class ExecutionCoordinator:
    def __init__(
        self,
        catalog: ModelCatalog,
        logger: Optional[logging.Logger] = None,
        provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        plan_timeout: Optional[float] = None,
        skip_failed_dependencies: bool = False,
    ):
        self.catalog = catalog
        self.logger = logger or logging.getLogger(__name__)
        self.plan_timeout = plan_timeout

        self.runner = StepRunner(
            catalog, timeout=provider_timeout, logger=self.logger.getChild("runner")
        )
        self.scheduler = DependencyScheduler(
            self.runner,
            skip_failed_dependencies=skip_failed_dependencies,
            logger=self.logger.getChild("scheduler"),
        )

    async def execute(self, plan: ExecutionPlan) -> WorkflowResult:
        """
        Drives a plan to completion.

        Raises:
            PlanValidationError: the plan is malformed. No provider was called.
        """
        # 1. Validate
        validate_plan(plan, self.catalog)

        workflow_id = str(uuid.uuid4())
        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        self.logger.info(
            f"Workflow {workflow_id}: executing plan '{plan.plan_id}' ({len(plan.steps)} step(s))"
        )

        # 2. Schedule (each step writes its own slot)
        results: Dict[str, StepResult] = {}
        try:
            if self.plan_timeout is not None:
                await asyncio.wait_for(
                    self.scheduler.run(plan, results), timeout=self.plan_timeout
                )
            else:
                await self.scheduler.run(plan, results)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Workflow {workflow_id}: plan deadline of {self.plan_timeout:g}s exceeded, "
                f"{len(plan.steps) - len(results)} step(s) unfinished"
            )

        total_time = time.monotonic() - start
        completed_at = datetime.now(timezone.utc)

        # 3. Aggregate in declared step order
        steps: List[StepResult] = [
            results.get(step.step_id) or self._unfinished(step, completed_at)
            for step in plan.steps
        ]
        status = self._overall_status(steps)
        total_cost = sum(s.actual_cost for s in steps)

        self.logger.info(
            f"Workflow {workflow_id}: {status.value}, cost=${total_cost:.4f}, time={total_time:.2f}s"
        )

        return WorkflowResult(
            workflow_id=workflow_id,
            plan_id=plan.plan_id,
            status=status,
            steps=steps,
            total_cost=total_cost,
            total_time=total_time,
            asset_urls=[url for s in steps for url in s.asset_urls],
            started_at=started_at,
            completed_at=completed_at,
        )

    async def execute_step(self, step: PlanStep) -> StepResult:
        """Runs a single standalone step as a one-step plan."""
        if step.depends_on or step.reference_steps:
            step = step.model_copy(update={"depends_on": [], "reference_steps": []})
        plan = ExecutionPlan(
            plan_id=f"single-step-{uuid.uuid4().hex[:12]}",
            capability=self._capability_of(step),
            steps=[step],
        )
        result = await self.execute(plan)
        return result.steps[0]

    def _capability_of(self, step: PlanStep) -> Capability:
        model_id = step.primary_model.model_id
        if model_id not in self.catalog:
            # Rejected by validation anyway
            return Capability.IMAGE
        return Capability(self.catalog.get_spec(model_id).capability)

    # ==========================================================================
    # Aggregation
    # ==========================================================================

    @staticmethod
    def _overall_status(steps: List[StepResult]) -> WorkflowStatus:
        if all(s.status == StepStatus.SUCCESS for s in steps):
            return WorkflowStatus.SUCCESS
        if all(s.status == StepStatus.FAILED for s in steps):
            return WorkflowStatus.FAILED
        return WorkflowStatus.PARTIAL_SUCCESS

    @staticmethod
    def _unfinished(step: PlanStep, now: datetime) -> StepResult:
        return StepResult(
            step_id=step.step_id,
            status=StepStatus.FAILED,
            model_used=step.primary_model.model_id,
            error=PLAN_TIMEOUT_ERROR,
            completed_at=now,
        )
