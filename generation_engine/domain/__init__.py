"""
Domain Layer - Execution Plan Models

Defines the immutable input of the engine: ExecutionPlan, PlanStep and
ModelSelection.
"""

from generation_engine.domain.models import (
    Capability,
    ExecutionPlan,
    ModelSelection,
    PlanStep,
)

__all__ = [
    "Capability",
    "ExecutionPlan",
    "ModelSelection",
    "PlanStep",
]
