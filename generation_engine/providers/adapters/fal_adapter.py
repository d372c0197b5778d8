import time
from typing import Any, Dict, List

from ...exceptions import ProviderError
from ..interface import ProviderResponse
from .http import HTTPProviderAdapter


class FalAdapter(HTTPProviderAdapter):
    """
    FAL.AI synchronous API. One POST per generation; the response body carries the
    generated assets.
    """

    provider_id = "fal.ai"
    display_name = "FAL.AI"

    async def invoke(
        self,
        model_id: str,
        parameters: Dict[str, Any],
        timeout: float,
    ) -> ProviderResponse:
        spec = self._get_spec(model_id)
        start = time.monotonic()

        async with self._session(timeout) as client:
            body = await self._request(
                client,
                "POST",
                f"{self.base_url}/{spec.endpoint}",
                model_id=model_id,
                timeout=timeout,
                json=dict(parameters),
            )

        urls = self._extract_urls(body)
        if not urls:
            raise ProviderError("No images in FAL.AI response", model_id=model_id)

        return ProviderResponse(
            asset_reference=urls[0],
            asset_urls=urls,
            cost=spec.cost_per_unit * len(urls),
            time_ms=self._elapsed_ms(start),
        )

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Key {self.api_key or ''}"
        return headers

    @staticmethod
    def _extract_urls(body: Dict[str, Any]) -> List[str]:
        # Image endpoints answer {"images": [{"url": ...}]}, some {"image": "..."};
        # video endpoints answer {"video": {"url": ...}}.
        images = body.get("images")
        if isinstance(images, list):
            return [img["url"] for img in images if isinstance(img, dict) and img.get("url")]
        image = body.get("image")
        if isinstance(image, str) and image:
            return [image]
        if isinstance(image, dict) and image.get("url"):
            return [image["url"]]
        video = body.get("video")
        if isinstance(video, dict) and video.get("url"):
            return [video["url"]]
        return []
