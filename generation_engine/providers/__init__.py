"""
Provider Layer - Generation API Adapters

Uniform `invoke` interface over external generation providers, and the
read-only model catalog that maps model ids to adapters.
"""

from generation_engine.providers.interface import ProviderAdapter, ProviderResponse
from generation_engine.providers.catalog import MODEL_SPECS, ModelCatalog, ModelSpec

__all__ = [
    "MODEL_SPECS",
    "ModelCatalog",
    "ModelSpec",
    "ProviderAdapter",
    "ProviderResponse",
]
