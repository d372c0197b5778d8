"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Instantiating the process-wide singletons (logger, model catalog,
   result repository, coordinator).
2. Wiring them together (e.g., injecting the catalog and the logger into
   the ExecutionCoordinator).
3. Managing their lifecycle with @lru_cache so they are created only once
   per application process.

Tests override these with app.dependency_overrides.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from ..config import settings
from ..execution.engine import ExecutionCoordinator
from ..providers.adapters import build_default_catalog
from ..providers.catalog import ModelCatalog
from ..repositories.workflow_result import (
    WorkflowResultRepository,
    SQLWorkflowResultRepository,
)
from ..services.generation import GenerationService

from ..infrastructure.database.connection import init_db

ENGINE_LOGGER_NAME = "generation_engine"


# Engine Logger (Singleton)
@lru_cache()
def get_engine_logger() -> logging.Logger:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    return logging.getLogger(ENGINE_LOGGER_NAME)


# Model Catalog (Singleton, read-only after startup)
@lru_cache()
def get_model_catalog() -> ModelCatalog:
    return build_default_catalog(settings)


# Result Repository (Singleton)
@lru_cache()
def get_result_repository() -> WorkflowResultRepository:
    init_db()
    return SQLWorkflowResultRepository()


# The Coordinator (Singleton Service)
@lru_cache()
def get_coordinator(
    catalog: ModelCatalog = Depends(get_model_catalog),
    logger: logging.Logger = Depends(get_engine_logger),
) -> ExecutionCoordinator:
    return ExecutionCoordinator(
        catalog=catalog,
        logger=logger,
        provider_timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        plan_timeout=settings.PLAN_TIMEOUT_SECONDS,
        skip_failed_dependencies=settings.SKIP_STEPS_WITH_FAILED_DEPENDENCIES,
    )


# The Generation Service (Singleton Service)
@lru_cache()
def get_generation_service(
    coordinator: ExecutionCoordinator = Depends(get_coordinator),
    result_repo: WorkflowResultRepository = Depends(get_result_repository),
) -> GenerationService:
    return GenerationService(coordinator=coordinator, result_repository=result_repo)
