"""
Model Catalog - Supported Models and Their Adapters

Process-wide, read-only mapping from a model id (the string the planner
puts in a ModelSelection) to its specification and to the adapter of the
provider serving it. Built once at startup and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from ..exceptions import UnknownModelError
from .interface import ProviderAdapter

"""
CostUnit says what cost_per_unit is charged for:
- asset: every image/video returned
- 1k_tokens: every thousand tokens of a text completion
"""
CostUnit = Literal["asset", "1k_tokens"]


@dataclass(frozen=True)
class ModelSpec:
    """
    Static description of a model.

    Attributes:
        model_id: Catalog key (e.g. "flux-pro-1.1").
        name: Human-readable name.
        provider: Provider id; selects the adapter ("fal.ai", "kie.ai", "openai").
        endpoint: Provider-side model path or name.
        capability: What the model generates (image, video, text).
        cost_per_unit: Price in USD per CostUnit.
        cost_unit: CostUnit
        average_time: Typical generation time in seconds.
        strengths: Free-form tags, shown by GET /models.
    """
    model_id: str
    name: str
    provider: str
    endpoint: str
    capability: str
    cost_per_unit: float
    cost_unit: CostUnit = "asset"
    average_time: float = 10.0
    strengths: List[str] = field(default_factory=list)


MODEL_SPECS: Dict[str, ModelSpec] = {
    spec.model_id: spec
    for spec in [
        ModelSpec(
            model_id="flux-pro-1.1",
            name="FLUX Pro 1.1 Ultra",
            provider="fal.ai",
            endpoint="fal-ai/flux-pro/v1.1-ultra",
            capability="image",
            cost_per_unit=0.055,
            average_time=8.0,
            strengths=["photorealism", "natural_language", "quality"],
        ),
        ModelSpec(
            model_id="flux-schnell",
            name="FLUX Schnell",
            provider="fal.ai",
            endpoint="fal-ai/flux/schnell",
            capability="image",
            cost_per_unit=0.003,
            average_time=2.0,
            strengths=["ultra_fast", "draft_quality"],
        ),
        ModelSpec(
            model_id="seedream-4.0",
            name="Seedream 4.0",
            provider="fal.ai",
            endpoint="fal-ai/seedream",
            capability="image",
            cost_per_unit=0.04,
            average_time=10.0,
            strengths=["character_consistency", "multi_reference"],
        ),
        ModelSpec(
            model_id="ideogram-v2",
            name="Ideogram v2",
            provider="fal.ai",
            endpoint="fal-ai/ideogram-v2",
            capability="image",
            cost_per_unit=0.08,
            average_time=10.0,
            strengths=["typography", "text_rendering"],
        ),
        ModelSpec(
            model_id="recraft-v3",
            name="Recraft v3",
            provider="fal.ai",
            endpoint="fal-ai/recraft-v3",
            capability="image",
            cost_per_unit=0.04,
            average_time=10.0,
            strengths=["vector_output", "design"],
        ),
        ModelSpec(
            model_id="hunyuan-video",
            name="Hunyuan Video",
            provider="fal.ai",
            endpoint="fal-ai/hunyuan-video",
            capability="video",
            cost_per_unit=0.4,
            average_time=120.0,
            strengths=["video", "motion"],
        ),
        ModelSpec(
            model_id="midjourney-v6",
            name="Midjourney v6",
            provider="kie.ai",
            endpoint="midjourney",
            capability="image",
            cost_per_unit=0.06,
            average_time=60.0,
            strengths=["artistic", "aesthetic", "style"],
        ),
        ModelSpec(
            model_id="gpt-4o",
            name="GPT-4o",
            provider="openai",
            endpoint="gpt-4o",
            capability="text",
            cost_per_unit=0.01,
            cost_unit="1k_tokens",
            average_time=6.0,
            strengths=["copywriting", "long_form"],
        ),
        ModelSpec(
            model_id="gpt-4o-mini",
            name="GPT-4o mini",
            provider="openai",
            endpoint="gpt-4o-mini",
            capability="text",
            cost_per_unit=0.0006,
            cost_unit="1k_tokens",
            average_time=3.0,
            strengths=["copywriting", "cheap"],
        ),
    ]
}


class ModelCatalog:
    """
    Resolves model ids to specs and adapters.

    Adapters are registered per provider; every spec whose provider has no
    adapter is treated as unsupported.
    """

    def __init__(
        self,
        adapters: Dict[str, ProviderAdapter],
        specs: Optional[Dict[str, ModelSpec]] = None,
    ):
        self._specs: Dict[str, ModelSpec] = dict(MODEL_SPECS if specs is None else specs)
        self._adapters: Dict[str, ProviderAdapter] = dict(adapters)

    def __contains__(self, model_id: str) -> bool:
        spec = self._specs.get(model_id)
        return spec is not None and spec.provider in self._adapters

    def get_spec(self, model_id: str) -> ModelSpec:
        if model_id not in self._specs:
            raise UnknownModelError(model_id)
        return self._specs[model_id]

    def get_adapter(self, model_id: str) -> ProviderAdapter:
        spec = self.get_spec(model_id)
        adapter = self._adapters.get(spec.provider)
        if adapter is None:
            raise UnknownModelError(model_id)
        return adapter

    def list_models(self) -> List[ModelSpec]:
        return [spec for model_id, spec in self._specs.items() if model_id in self]
