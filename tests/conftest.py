"""Shared fixtures: scripted provider adapters and catalogs built on them."""
import asyncio
from typing import Any, Dict, List, Tuple

import pytest

from generation_engine.exceptions import ProviderError
from generation_engine.providers.catalog import ModelCatalog
from generation_engine.providers.interface import ProviderAdapter, ProviderResponse


class ScriptedAdapter(ProviderAdapter):
    """
    Fake provider. `outcomes` maps a model id to either an exception to raise
    or the actual cost of a successful call. `delays` (seconds) simulate slow
    providers. Every call is recorded in order.
    """

    provider_id = "scripted"

    def __init__(self, outcomes: Dict[str, Any], delays: Dict[str, float] = None):
        self.outcomes = outcomes
        self.delays = delays or {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def called_models(self) -> List[str]:
        return [model_id for model_id, _ in self.calls]

    async def invoke(self, model_id: str, parameters: Dict[str, Any], timeout: float) -> ProviderResponse:
        self.calls.append((model_id, dict(parameters)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(model_id, 0))
        finally:
            self.in_flight -= 1

        outcome = self.outcomes.get(model_id, ProviderError(f"no script for {model_id}", model_id=model_id))
        if isinstance(outcome, BaseException):
            raise outcome
        return ProviderResponse(
            asset_reference=f"https://assets.test/{model_id}.png",
            asset_urls=[f"https://assets.test/{model_id}.png"],
            cost=float(outcome),
            time_ms=1500.0,
        )


def scripted_catalog(adapter: ProviderAdapter) -> ModelCatalog:
    """Catalog where every provider is served by the same fake adapter."""
    return ModelCatalog(adapters={"fal.ai": adapter, "kie.ai": adapter, "openai": adapter})


@pytest.fixture
def make_catalog():
    def _make(outcomes: Dict[str, Any], delays: Dict[str, float] = None):
        adapter = ScriptedAdapter(outcomes, delays)
        return adapter, scripted_catalog(adapter)
    return _make
