"""
Shared plumbing for adapters that talk to a provider over plain HTTP.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from ...exceptions import ProviderError, ProviderTimeoutError
from ..catalog import ModelSpec
from ..interface import ProviderAdapter
from ..spacing import RequestSpacer


class HTTPProviderAdapter(ProviderAdapter):
    """
    Base class for JSON-over-HTTP providers.

    A shared httpx.AsyncClient may be injected (tests pass one built on
    httpx.MockTransport); otherwise a client is opened per call.
    """

    provider_id = "http"
    display_name = "HTTP"

    def __init__(
        self,
        specs: Dict[str, ModelSpec],
        base_url: str,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        min_interval: float = 0.0,
    ):
        self.specs = specs
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client
        self.spacer = RequestSpacer(min_interval)

    def _get_spec(self, model_id: str) -> ModelSpec:
        spec = self.specs.get(model_id)
        if spec is None or spec.provider != self.provider_id:
            raise ProviderError(
                f"{self.display_name} does not serve model '{model_id}'",
                model_id=model_id,
            )
        return spec

    @asynccontextmanager
    async def _session(self, timeout: float) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as client:
            yield client

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        model_id: str,
        timeout: float,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Sends one request and returns the decoded JSON body."""
        await self.spacer.wait()
        try:
            response = await client.request(
                method, url, headers=self._headers(), timeout=timeout, **kwargs
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(model_id, timeout) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.display_name} transport error: {e}", model_id=model_id
            ) from e

        if not response.is_success:
            raise ProviderError(
                f"{self.display_name} API error: {response.status_code} {response.text}",
                model_id=model_id,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.display_name} returned a malformed payload", model_id=model_id
            ) from e
        if not isinstance(body, dict):
            raise ProviderError(
                f"{self.display_name} returned a malformed payload", model_id=model_id
            )
        return body

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.monotonic() - start) * 1000.0
