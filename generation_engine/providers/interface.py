from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProviderResponse(BaseModel):
    """
    What a provider returns for one successful call.

    cost is the actual USD cost of the call and time_ms the measured call
    duration. Both feed the StepResult instead of the plan estimates.
    """
    asset_reference: str
    cost: float
    time_ms: float
    asset_urls: List[str] = Field(default_factory=list)
    content: Optional[str] = None


class ProviderAdapter(ABC):
    """
    Abstract Base Class interface that defines the contract for any generation
    provider (FAL.AI, KIE.AI, OpenAI, ...).

    Adapters are single-call, single-model and stateless with respect to
    plans: they know nothing about fallback chains or dependencies.
    """

    provider_id: str = "unknown"

    @abstractmethod
    async def invoke(
        self,
        model_id: str,
        parameters: Dict[str, Any],
        timeout: float,
    ) -> ProviderResponse:
        """
        Generates one asset with `model_id`. `timeout` is in seconds.
        Raises ProviderError on any failure.
        """
        pass
