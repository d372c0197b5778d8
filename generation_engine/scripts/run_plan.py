"""
Plan Runner.

Executes an ExecutionPlan stored as a JSON file against the configured
providers and prints the WorkflowResult. Handy for trying a planner's
output without starting the API.

Usage:
    python -m generation_engine.scripts.run_plan path/to/plan.json [--store]

With --store the result is also saved to DATABASE_URL.
"""

import asyncio
import json
import sys

from generation_engine.app.dependencies import get_engine_logger
from generation_engine.config import settings
from generation_engine.exceptions import PlanValidationError
from generation_engine.execution.engine import ExecutionCoordinator
from generation_engine.execution.validation import parse_plan
from generation_engine.infrastructure.database.connection import init_db
from generation_engine.providers.adapters import build_default_catalog
from generation_engine.repositories.workflow_result import SQLWorkflowResultRepository


async def run(path: str, store: bool) -> int:
    with open(path) as f:
        payload = json.load(f)

    coordinator = ExecutionCoordinator(
        catalog=build_default_catalog(settings),
        logger=get_engine_logger(),
        provider_timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        plan_timeout=settings.PLAN_TIMEOUT_SECONDS,
        skip_failed_dependencies=settings.SKIP_STEPS_WITH_FAILED_DEPENDENCIES,
    )

    try:
        result = await coordinator.execute(parse_plan(payload))
    except PlanValidationError as e:
        print("Plan rejected:")
        for problem in e.problems:
            print(f"  - {problem}")
        return 2

    if store:
        init_db()
        SQLWorkflowResultRepository().save(result)
        print(f"Stored workflow {result.workflow_id}")

    print(result.model_dump_json(indent=2))
    return 0 if result.status.value != "failed" else 1


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(64)
    sys.exit(asyncio.run(run(sys.argv[1], store="--store" in sys.argv[2:])))
