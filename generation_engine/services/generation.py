"""
Generation Service - Application Orchestration Layer

This service is the entry point used by the API. It turns raw payloads into
validated plans, runs them through the ExecutionCoordinator and stores every
WorkflowResult so it can be looked up later.
"""

import logging
from typing import Any, Dict, Optional

from ..execution.engine import ExecutionCoordinator
from ..execution.validation import parse_plan, parse_step
from ..repositories.workflow_result import WorkflowResultRepository
from ..state.models import StepResult, WorkflowResult

logger = logging.getLogger(__name__)


class GenerationService:
    def __init__(
        self,
        coordinator: ExecutionCoordinator,
        result_repository: WorkflowResultRepository,
    ):
        self.coordinator = coordinator
        self.result_repo = result_repository

    async def execute_plan(self, payload: Dict[str, Any]) -> WorkflowResult:
        """
        1. Parse & validate the plan
        2. Execute it
        3. Store the result
        """
        plan = parse_plan(payload)
        result = await self.coordinator.execute(plan)
        self.result_repo.save(result)
        logger.debug(f"Stored workflow result {result.workflow_id} for plan '{plan.plan_id}'")
        return result

    async def execute_step(self, payload: Dict[str, Any]) -> StepResult:
        """Runs one standalone step. The result is not stored."""
        step = parse_step(payload)
        return await self.coordinator.execute_step(step)

    def get_result(self, workflow_id: str) -> Optional[WorkflowResult]:
        return self.result_repo.get(workflow_id)
