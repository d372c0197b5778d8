"""
Engine Exceptions

Error taxonomy for plan execution. Only PlanValidationError ever escapes
ExecutionCoordinator.execute(); provider failures are recovered by the
StepRunner and recorded in the StepResult.
"""

from typing import List, Optional


class GenerationEngineError(Exception):
    """Base class for all engine errors."""
    pass


class PlanValidationError(GenerationEngineError):
    """
    Raised when an ExecutionPlan is malformed: missing required fields,
    duplicate step ids, unknown dependencies, cycles or unsupported models.
    Raised before any provider call is made.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid execution plan: " + "; ".join(self.problems))


class UnknownModelError(GenerationEngineError):
    """Raised when the model catalog has no entry for a model id."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Unknown model: {model_id}")


class ProviderError(GenerationEngineError):
    """
    A single provider call failed (non-2xx response, malformed payload,
    transport error). Retryable errors make the StepRunner move on to the
    next candidate model.
    """

    def __init__(
        self,
        message: str,
        model_id: Optional[str] = None,
        retryable: bool = True,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.model_id = model_id
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(message)


class ProviderTimeoutError(ProviderError):
    """The per-call timeout elapsed before the provider answered."""

    def __init__(self, model_id: str, timeout: float):
        super().__init__(
            f"Provider call to '{model_id}' timed out after {timeout:g}s",
            model_id=model_id,
        )
        self.timeout = timeout
