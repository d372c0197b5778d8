"""
Generation Execution Engine

Drives fully-specified content-generation plans (images, video, copy)
against unreliable third-party AI providers: per-step model fallback,
dependency-ordered concurrent execution and actual cost/time accounting.
"""

from generation_engine.domain import (
    Capability,
    ExecutionPlan,
    ModelSelection,
    PlanStep,
)
from generation_engine.state import (
    AttemptRecord,
    StepResult,
    StepStatus,
    WorkflowResult,
    WorkflowStatus,
)
from generation_engine.exceptions import (
    GenerationEngineError,
    PlanValidationError,
    ProviderError,
    ProviderTimeoutError,
    UnknownModelError,
)
from generation_engine.providers import (
    ModelCatalog,
    ModelSpec,
    ProviderAdapter,
    ProviderResponse,
)
from generation_engine.execution import (
    DependencyScheduler,
    ExecutionCoordinator,
    StepRunner,
)

__all__ = [
    # Domain Layer
    "Capability",
    "ExecutionPlan",
    "ModelSelection",
    "PlanStep",
    # State Layer
    "AttemptRecord",
    "StepResult",
    "StepStatus",
    "WorkflowResult",
    "WorkflowStatus",
    # Errors
    "GenerationEngineError",
    "PlanValidationError",
    "ProviderError",
    "ProviderTimeoutError",
    "UnknownModelError",
    # Provider Layer
    "ModelCatalog",
    "ModelSpec",
    "ProviderAdapter",
    "ProviderResponse",
    # Execution Layer
    "DependencyScheduler",
    "ExecutionCoordinator",
    "StepRunner",
]
