"""Tests for the FAL.AI, KIE.AI and OpenAI adapters and request spacing."""
import json
import time
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from generation_engine.config import Settings
from generation_engine.exceptions import ProviderError, ProviderTimeoutError
from generation_engine.providers.adapters import FalAdapter, KieAdapter, OpenAIAdapter, build_default_catalog
from generation_engine.providers.catalog import MODEL_SPECS
from generation_engine.providers.spacing import RequestSpacer


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================================================
# FAL.AI
# ============================================================================


@pytest.mark.asyncio
async def test_fal_adapter_returns_image_urls_and_cost():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"images": [{"url": "https://fal.media/a.png"}, {"url": "https://fal.media/b.png"}]})

    adapter = FalAdapter(MODEL_SPECS, base_url="https://fal.run/", api_key="secret", client=_client(handler))
    response = await adapter.invoke("flux-schnell", {"prompt": "a fox", "num_images": 2}, timeout=5)

    assert seen["url"] == f"https://fal.run/{MODEL_SPECS['flux-schnell'].endpoint}"
    assert seen["auth"] == "Key secret"
    assert seen["body"] == {"prompt": "a fox", "num_images": 2}
    assert response.asset_reference == "https://fal.media/a.png"
    assert response.asset_urls == ["https://fal.media/a.png", "https://fal.media/b.png"]
    assert response.cost == pytest.approx(MODEL_SPECS["flux-schnell"].cost_per_unit * 2)


@pytest.mark.asyncio
async def test_fal_adapter_reads_video_payload():
    adapter = FalAdapter(
        MODEL_SPECS,
        base_url="https://fal.run",
        client=_client(lambda r: httpx.Response(200, json={"video": {"url": "https://fal.media/v.mp4"}})),
    )

    response = await adapter.invoke("hunyuan-video", {"prompt": "waves"}, timeout=5)

    assert response.asset_urls == ["https://fal.media/v.mp4"]


@pytest.mark.asyncio
async def test_fal_adapter_error_status_is_provider_error():
    adapter = FalAdapter(
        MODEL_SPECS,
        base_url="https://fal.run",
        client=_client(lambda r: httpx.Response(503, text="overloaded")),
    )

    with pytest.raises(ProviderError) as exc_info:
        await adapter.invoke("flux-pro-1.1", {"prompt": "x"}, timeout=5)

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "FAL.AI API error: 503 overloaded"


@pytest.mark.asyncio
async def test_fal_adapter_malformed_payload():
    adapter = FalAdapter(
        MODEL_SPECS,
        base_url="https://fal.run",
        client=_client(lambda r: httpx.Response(200, text="<html>oops</html>")),
    )

    with pytest.raises(ProviderError, match="malformed payload"):
        await adapter.invoke("flux-pro-1.1", {"prompt": "x"}, timeout=5)


@pytest.mark.asyncio
async def test_fal_adapter_without_images():
    adapter = FalAdapter(
        MODEL_SPECS,
        base_url="https://fal.run",
        client=_client(lambda r: httpx.Response(200, json={"images": []})),
    )

    with pytest.raises(ProviderError, match="No images in FAL.AI response"):
        await adapter.invoke("flux-pro-1.1", {"prompt": "x"}, timeout=5)


@pytest.mark.asyncio
async def test_fal_adapter_transport_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    adapter = FalAdapter(MODEL_SPECS, base_url="https://fal.run", client=_client(handler))

    with pytest.raises(ProviderTimeoutError):
        await adapter.invoke("flux-pro-1.1", {"prompt": "x"}, timeout=5)


@pytest.mark.asyncio
async def test_fal_adapter_rejects_foreign_model():
    adapter = FalAdapter(MODEL_SPECS, base_url="https://fal.run", client=_client(lambda r: httpx.Response(200)))

    with pytest.raises(ProviderError, match="does not serve model 'midjourney-v6'"):
        await adapter.invoke("midjourney-v6", {}, timeout=5)


# ============================================================================
# KIE.AI
# ============================================================================


def _kie_handler(statuses):
    polls = iter(statuses)
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path))
        if request.method == "POST":
            return httpx.Response(200, json={"task_id": "task-42"})
        return httpx.Response(200, json=next(polls))

    return handler, requests


@pytest.mark.asyncio
async def test_kie_adapter_polls_until_completed():
    handler, requests = _kie_handler([
        {"status": "processing"},
        {"status": "completed", "result": {"image_url": "https://kie.ai/mj.png"}},
    ])
    adapter = KieAdapter(
        MODEL_SPECS, base_url="https://api.kie.ai/v1", api_key="k", client=_client(handler), poll_interval=0
    )

    response = await adapter.invoke("midjourney-v6", {"prompt": "castle"}, timeout=5)

    assert response.asset_urls == ["https://kie.ai/mj.png"]
    assert response.cost == pytest.approx(MODEL_SPECS["midjourney-v6"].cost_per_unit)
    assert [m for m, _ in requests] == ["POST", "GET", "GET"]
    assert requests[-1][1].endswith("/task/task-42")


@pytest.mark.asyncio
async def test_kie_adapter_failed_task():
    handler, _ = _kie_handler([{"status": "failed", "error": "banned prompt"}])
    adapter = KieAdapter(MODEL_SPECS, base_url="https://api.kie.ai/v1", client=_client(handler), poll_interval=0)

    with pytest.raises(ProviderError, match="KIE.AI generation failed: banned prompt"):
        await adapter.invoke("midjourney-v6", {"prompt": "castle"}, timeout=5)


@pytest.mark.asyncio
async def test_kie_adapter_gives_up_after_max_polls():
    handler, requests = _kie_handler([{"status": "processing"}] * 3)
    adapter = KieAdapter(
        MODEL_SPECS, base_url="https://api.kie.ai/v1", client=_client(handler), poll_interval=0, max_polls=3
    )

    with pytest.raises(ProviderError, match="KIE.AI polling timeout"):
        await adapter.invoke("midjourney-v6", {"prompt": "castle"}, timeout=5)
    assert len(requests) == 4


# ============================================================================
# OpenAI
# ============================================================================


def _completion(content, total_tokens=500):
    return SimpleNamespace(
        id="chatcmpl-1",
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total_tokens),
    )


@pytest.mark.asyncio
async def test_openai_adapter_returns_content_and_token_cost():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_completion("Ride further."))
    adapter = OpenAIAdapter(MODEL_SPECS, client=client)

    response = await adapter.invoke(
        "gpt-4o-mini", {"prompt": "tagline", "system_prompt": "Be brief"}, timeout=7
    )

    assert response.content == "Ride further."
    assert response.asset_reference == "openai://completion/chatcmpl-1"
    assert response.cost == pytest.approx(MODEL_SPECS["gpt-4o-mini"].cost_per_unit * 0.5)
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["timeout"] == 7
    assert kwargs["messages"][0] == {"role": "system", "content": "Be brief"}
    assert kwargs["messages"][1] == {"role": "user", "content": "tagline"}


@pytest.mark.asyncio
async def test_openai_adapter_empty_completion():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_completion(""))
    adapter = OpenAIAdapter(MODEL_SPECS, client=client)

    with pytest.raises(ProviderError, match="empty completion"):
        await adapter.invoke("gpt-4o", {"prompt": "x"}, timeout=5)


@pytest.mark.asyncio
async def test_openai_adapter_maps_sdk_errors():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=openai.APITimeoutError(request=request))
    adapter = OpenAIAdapter(MODEL_SPECS, client=client)

    with pytest.raises(ProviderTimeoutError):
        await adapter.invoke("gpt-4o", {"prompt": "x"}, timeout=5)

    client.chat.completions.create = AsyncMock(side_effect=openai.APIConnectionError(request=request))
    with pytest.raises(ProviderError, match="OpenAI error"):
        await adapter.invoke("gpt-4o", {"prompt": "x"}, timeout=5)


@pytest.mark.asyncio
async def test_kie_adapter_stops_polling_at_call_deadline():
    handler, requests = _kie_handler([{"status": "processing"}] * 100)
    adapter = KieAdapter(
        MODEL_SPECS,
        base_url="https://api.kie.ai/v1",
        client=_client(handler),
        poll_interval=0.05,
        max_polls=100,
    )

    with pytest.raises(ProviderError, match="KIE.AI polling timeout"):
        await adapter.invoke("midjourney-v6", {"prompt": "castle"}, timeout=0.2)
    assert 1 < len(requests) < 10


@pytest.mark.asyncio
async def test_openai_adapter_calls_the_api_once_per_invoke():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(503, json={"error": {"message": "overloaded"}})

    adapter = OpenAIAdapter(MODEL_SPECS, api_key="sk-test")
    assert adapter.client.max_retries == 0
    adapter._client = adapter.client.with_options(http_client=_client(handler))

    with pytest.raises(ProviderError) as exc_info:
        await adapter.invoke("gpt-4o-mini", {"prompt": "tagline"}, timeout=5)

    assert len(requests) == 1
    assert exc_info.value.status_code == 503


# ============================================================================
# Wiring and spacing
# ============================================================================


def test_default_catalog_serves_every_known_model():
    catalog = build_default_catalog()

    for model_id in MODEL_SPECS:
        assert model_id in catalog
    assert isinstance(catalog.get_adapter("midjourney-v6"), KieAdapter)
    assert isinstance(catalog.get_adapter("gpt-4o"), OpenAIAdapter)


@pytest.mark.asyncio
async def test_request_spacer_enforces_min_interval():
    spacer = RequestSpacer(min_interval=0.05)

    start = time.monotonic()
    for _ in range(3):
        await spacer.wait()
    elapsed = time.monotonic() - start

    assert elapsed >= 0.1


@pytest.mark.asyncio
async def test_default_fal_adapter_gets_assets_from_one_post():
    catalog = build_default_catalog(Settings(_env_file=None))
    adapter = catalog.get_adapter("flux-schnell")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"images": [{"url": "https://fal.media/kite.png"}]})

    adapter._client = _client(handler)
    response = await adapter.invoke("flux-schnell", {"prompt": "kite"}, timeout=5)

    assert seen == ["https://fal.run/fal-ai/flux/schnell"]
    assert response.asset_urls == ["https://fal.media/kite.png"]
