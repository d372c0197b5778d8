"""
State Layer - Execution Result Models

Defines the StepResult and WorkflowResult records produced by the engine.
"""

from generation_engine.state.models import (
    AttemptRecord,
    StepResult,
    StepStatus,
    WorkflowResult,
    WorkflowStatus,
)

__all__ = [
    "AttemptRecord",
    "StepResult",
    "StepStatus",
    "WorkflowResult",
    "WorkflowStatus",
]
