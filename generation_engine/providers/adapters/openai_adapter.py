import time
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from ...exceptions import ProviderError, ProviderTimeoutError
from ..catalog import ModelSpec
from ..interface import ProviderAdapter, ProviderResponse


class OpenAIAdapter(ProviderAdapter):
    """
    Copy generation through OpenAI chat completions.

    The generated text is returned as `content`; the asset reference points
    at the completion id.
    """

    provider_id = "openai"

    def __init__(
        self,
        specs: Dict[str, ModelSpec],
        api_key: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.specs = specs
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # Built on first use so the catalog can be assembled without a key.
        # SDK retries are off: a failed call moves on to the next candidate model.
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    async def invoke(
        self,
        model_id: str,
        parameters: Dict[str, Any],
        timeout: float,
    ) -> ProviderResponse:
        spec = self.specs.get(model_id)
        if spec is None or spec.provider != self.provider_id:
            raise ProviderError(f"OpenAI does not serve model '{model_id}'", model_id=model_id)

        messages = []
        if parameters.get("system_prompt"):
            messages.append({"role": "system", "content": parameters["system_prompt"]})
        messages.append({"role": "user", "content": parameters.get("prompt", "")})

        start = time.monotonic()
        try:
            completion = await self.client.chat.completions.create(
                model=spec.endpoint,
                messages=messages,
                temperature=parameters.get("temperature", 0.7),
                max_tokens=parameters.get("max_tokens", 1024),
                timeout=timeout,
            )
        except openai.APITimeoutError as e:
            raise ProviderTimeoutError(model_id, timeout) from e
        except openai.OpenAIError as e:
            raise ProviderError(
                f"OpenAI error: {e}",
                model_id=model_id,
                status_code=getattr(e, "status_code", None),
            ) from e

        if not completion.choices or not completion.choices[0].message.content:
            raise ProviderError("OpenAI returned an empty completion", model_id=model_id)

        total_tokens = completion.usage.total_tokens if completion.usage else 0
        return ProviderResponse(
            asset_reference=f"openai://completion/{completion.id}",
            content=completion.choices[0].message.content,
            cost=spec.cost_per_unit * total_tokens / 1000.0,
            time_ms=(time.monotonic() - start) * 1000.0,
        )
