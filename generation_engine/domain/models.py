"""
Domain Layer - Execution Plan Models

This module defines the read-only input of the engine: the ExecutionPlan
produced by the upstream planner. A plan names a target capability and one
or more PlanSteps, each bound to an ordered model preference list
(primary model first, then fallbacks) and an optional set of dependencies.

Estimates carried by ModelSelection are display hints only. The engine never
uses them in cost or time arithmetic.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_STEP_ID = "step-001"


class Capability(str, Enum):
    """Generation capability a plan targets."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    MULTI_ASSET = "multi_asset"


class ModelSelection(BaseModel):
    """
    One model the planner picked for a step.

    Attributes:
        name: Human-readable model name (e.g. "FLUX Pro 1.1").
        model_id: Catalog identifier (e.g. "flux-pro-1.1"). This is the key
            used to find the provider adapter.
        provider_id: Provider/API service (e.g. "fal.ai"). Filled from the
            catalog when the planner leaves it empty.
        estimated_cost: Planner estimate in USD. Display only.
        estimated_time: Planner estimate in seconds. Display only.
        parameters: Model-specific parameters merged over the step parameters.
        reason: Why the planner picked this model.
    """
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str
    model_id: str
    provider_id: Optional[str] = None
    estimated_cost: float = 0.0
    estimated_time: float = 0.0
    parameters: Dict[str, Any] = Field(default_factory=dict)
    reason: Optional[str] = None

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Accept a bare model id string wherever a ModelSelection is expected."""
        if isinstance(value, str):
            return {"name": value, "model_id": value}
        return value


class PlanStep(BaseModel):
    """
    A single unit of work in an ExecutionPlan.

    Attributes:
        step_id: Unique identifier within the plan.
        primary_model: Preferred model, always attempted first.
        fallback_models: Models attempted in order when the previous one fails.
        prompt: Prompt text sent to the provider.
        parameters: Provider parameters (aspect_ratio, seed, ...).
        depends_on: Step ids that must finish before this step starts.
        reference_steps: Subset of depends_on whose assets are passed to the
            provider as reference images.
    """
    model_config = ConfigDict(frozen=True)

    step_id: str
    primary_model: ModelSelection
    fallback_models: List[ModelSelection] = Field(default_factory=list)
    prompt: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)
    depends_on: List[str] = Field(default_factory=list)
    reference_steps: List[str] = Field(default_factory=list)

    @field_validator("primary_model", mode="before")
    @classmethod
    def _coerce_primary(cls, value: Any) -> Any:
        return ModelSelection.coerce(value)

    @field_validator("fallback_models", mode="before")
    @classmethod
    def _coerce_fallbacks(cls, value: Any) -> Any:
        if value is None:
            return []
        return [ModelSelection.coerce(v) for v in value]

    @field_validator("depends_on", "reference_steps", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def candidates(self) -> List[ModelSelection]:
        """Primary model followed by the fallbacks, in declared order."""
        return [self.primary_model, *self.fallback_models]


class ExecutionPlan(BaseModel):
    """
    Complete plan handed to the engine by the planner.

    Accepts either an explicit `steps` list or the single-step shorthand
    (plan-level primary_model / fallback_models / prompt / parameters), which
    is normalized into one step with id DEFAULT_STEP_ID.
    """
    model_config = ConfigDict(frozen=True)

    plan_id: str
    capability: Capability = Capability.IMAGE
    steps: List[PlanStep] = Field(default_factory=list)
    brief_id: Optional[str] = None
    created_at: Optional[str] = None
    notes: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_single_step(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("steps"):
            return data
        if "primary_model" not in data:
            return data

        data = dict(data)
        data["steps"] = [{
            "step_id": DEFAULT_STEP_ID,
            "primary_model": data.pop("primary_model"),
            "fallback_models": data.pop("fallback_models", None) or [],
            "prompt": data.pop("prompt", "") or "",
            "parameters": data.pop("parameters", None) or {},
        }]
        return data

    def get_step(self, step_id: str) -> PlanStep:
        for step in self.steps:
            if step.step_id == step_id:
                return step
        raise KeyError(step_id)
