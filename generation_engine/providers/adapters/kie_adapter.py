import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx

from ..catalog import ModelSpec
from ...exceptions import ProviderError
from ..interface import ProviderResponse
from .http import HTTPProviderAdapter


class KieAdapter(HTTPProviderAdapter):
    """
    KIE.AI (Midjourney). Generation is asynchronous: submit a task, then poll
    it until it completes or fails. The whole submit+poll cycle counts as one
    provider call and is bounded by the caller's timeout.
    """

    provider_id = "kie.ai"
    display_name = "KIE.AI"

    def __init__(
        self,
        specs: Dict[str, ModelSpec],
        base_url: str,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        min_interval: float = 0.0,
        poll_interval: float = 5.0,
        max_polls: int = 60,
    ):
        super().__init__(specs, base_url, api_key=api_key, client=client, min_interval=min_interval)
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    async def invoke(
        self,
        model_id: str,
        parameters: Dict[str, Any],
        timeout: float,
    ) -> ProviderResponse:
        spec = self._get_spec(model_id)
        start = time.monotonic()

        async with self._session(timeout) as client:
            submitted = await self._request(
                client,
                "POST",
                f"{self.base_url}/{spec.endpoint}/generate",
                model_id=model_id,
                timeout=timeout,
                json=dict(parameters),
            )
            task_id = submitted.get("task_id")
            if not task_id:
                raise ProviderError("No task_id in KIE.AI response", model_id=model_id)

            urls = await self._poll(client, spec, task_id, timeout, deadline=start + timeout)

        return ProviderResponse(
            asset_reference=urls[0],
            asset_urls=urls,
            cost=spec.cost_per_unit * len(urls),
            time_ms=self._elapsed_ms(start),
        )

    async def _poll(
        self,
        client: httpx.AsyncClient,
        spec: ModelSpec,
        task_id: str,
        timeout: float,
        deadline: float,
    ) -> List[str]:
        for _ in range(self.max_polls):
            # No point sleeping past the caller's timeout
            if time.monotonic() + self.poll_interval > deadline:
                break
            await asyncio.sleep(self.poll_interval)

            task = await self._request(
                client,
                "GET",
                f"{self.base_url}/{spec.endpoint}/task/{task_id}",
                model_id=spec.model_id,
                timeout=timeout,
            )
            status = task.get("status")

            if status == "completed":
                result = task.get("result") or {}
                urls = result.get("image_urls") or (
                    [result["image_url"]] if result.get("image_url") else []
                )
                if not urls:
                    raise ProviderError(
                        "No image_url in completed KIE.AI result", model_id=spec.model_id
                    )
                return list(urls)

            if status == "failed":
                raise ProviderError(
                    f"KIE.AI generation failed: {task.get('error') or 'Unknown error'}",
                    model_id=spec.model_id,
                )

        raise ProviderError("KIE.AI polling timeout", model_id=spec.model_id)

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.api_key or ''}"
        return headers
