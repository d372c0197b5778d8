"""
State Layer - Execution Result Models

This module defines the output of the engine. A StepResult is created once
per plan step when the step finishes; a WorkflowResult is created once per
execution attempt when every schedulable step has finished. Both are frozen:
retrying a plan produces a new WorkflowResult with a new workflow_id.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StepStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class WorkflowStatus(str, Enum):
    """
    SUCCESS: every step succeeded.
    PARTIAL_SUCCESS: a mix of succeeded and failed steps.
    FAILED: every step failed.
    """
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


class AttemptRecord(BaseModel):
    """One provider call made while running a step."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    succeeded: bool
    error: Optional[str] = None
    elapsed_ms: float = 0.0


class StepResult(BaseModel):
    """
    Outcome of a single plan step.

    model_used is the model that actually produced the asset, which may be a
    fallback. For a failed step it is the last candidate attempted.
    actual_cost / actual_time come from the provider, never from the plan.
    """
    model_config = ConfigDict(frozen=True)

    step_id: str
    status: StepStatus
    model_used: str
    actual_cost: float = 0.0
    actual_time: float = 0.0
    asset_reference: Optional[str] = None
    asset_urls: List[str] = Field(default_factory=list)
    content: Optional[str] = None
    error: Optional[str] = None
    attempts: List[AttemptRecord] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == StepStatus.SUCCESS

    @property
    def used_fallback(self) -> bool:
        return len(self.attempts) > 1 and self.succeeded


class WorkflowResult(BaseModel):
    """
    Outcome of one execution of an ExecutionPlan.

    steps follow the plan's declared step order regardless of completion
    order. total_cost sums actual step costs; total_time is wall-clock
    seconds from coordinator start to the last step completion.
    """
    model_config = ConfigDict(frozen=True)

    workflow_id: str
    plan_id: str
    status: WorkflowStatus
    steps: List[StepResult] = Field(default_factory=list)
    total_cost: float = 0.0
    total_time: float = 0.0
    asset_urls: List[str] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def get_step(self, step_id: str) -> Optional[StepResult]:
        return next((s for s in self.steps if s.step_id == step_id), None)
