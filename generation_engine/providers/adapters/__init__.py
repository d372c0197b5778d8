"""
Concrete provider adapters and the default catalog wiring.
"""

from typing import Dict, Optional

from generation_engine.config import Settings, settings as default_settings
from generation_engine.providers.catalog import MODEL_SPECS, ModelCatalog, ModelSpec
from generation_engine.providers.adapters.fal_adapter import FalAdapter
from generation_engine.providers.adapters.kie_adapter import KieAdapter
from generation_engine.providers.adapters.openai_adapter import OpenAIAdapter


def build_default_catalog(
    config: Optional[Settings] = None,
    specs: Optional[Dict[str, ModelSpec]] = None,
) -> ModelCatalog:
    """Wires one adapter per provider from configuration."""
    config = config or default_settings
    specs = MODEL_SPECS if specs is None else specs

    adapters = {
        FalAdapter.provider_id: FalAdapter(
            specs,
            base_url=config.FAL_BASE_URL,
            api_key=config.FAL_KEY,
            min_interval=config.FAL_MIN_INTERVAL_SECONDS,
        ),
        KieAdapter.provider_id: KieAdapter(
            specs,
            base_url=config.KIE_BASE_URL,
            api_key=config.KIE_API_KEY,
            min_interval=config.KIE_MIN_INTERVAL_SECONDS,
            poll_interval=config.KIE_POLL_INTERVAL_SECONDS,
            max_polls=config.KIE_MAX_POLLS,
        ),
        OpenAIAdapter.provider_id: OpenAIAdapter(specs, api_key=config.OPENAI_API_KEY),
    }
    return ModelCatalog(adapters=adapters, specs=specs)


__all__ = [
    "FalAdapter",
    "KieAdapter",
    "OpenAIAdapter",
    "build_default_catalog",
]
