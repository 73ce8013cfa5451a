"""Tests for the Gemini version x model fallback matrix."""

from __future__ import annotations

import json
import time

import httpx
import pytest

from blueprint.errors import GenerationAuthError, GenerationExhausted
from blueprint.services.llm import GeminiClient
from conftest import drip

VERSIONS = ["v1", "v1beta"]
MODELS = ["model-a", "model-b", "model-c"]


def ok(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def gemini_error(code: int, message: str, status: str) -> httpx.Response:
    return httpx.Response(code, json={"error": {"code": code, "message": message, "status": status}})


def client_for(
    route, seen: list[str], api_key: str | None = "test-key", timeout: float | None = None
) -> GeminiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        # /{version}/models/{model}:generateContent
        _, version, _, cell = request.url.path.split("/")
        combo = f"{version}/{cell.split(':')[0]}"
        seen.append(combo)
        return route(combo, request)

    return GeminiClient(
        api_key=api_key,
        api_versions=VERSIONS,
        models=MODELS,
        base_url="https://gemini.example",
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


def test_matrix_is_version_major():
    client = GeminiClient(api_key="k", api_versions=VERSIONS, models=MODELS)

    assert client.matrix() == [
        ("v1", "model-a"), ("v1", "model-b"), ("v1", "model-c"),
        ("v1beta", "model-a"), ("v1beta", "model-b"), ("v1beta", "model-c"),
    ]


@pytest.mark.asyncio
async def test_returns_text_from_first_working_cell():
    seen: list[str] = []

    def route(combo, request):
        assert request.headers["x-goog-api-key"] == "test-key"
        assert "key" not in request.url.params
        if combo == "v1/model-a":
            return gemini_error(404, "models/model-a is not found for API version v1", "NOT_FOUND")
        return ok("generated text")

    text = await client_for(route, seen).generate("prompt")

    assert text == "generated text"
    assert seen == ["v1/model-a", "v1/model-b"]


@pytest.mark.asyncio
async def test_sends_prompt_and_generation_config():
    bodies: list[bytes] = []

    def route(combo, request):
        bodies.append(request.content)
        return ok("fine")

    await client_for(route, []).generate("analyse these posts")

    body = json.loads(bodies[0])
    assert body["contents"][0]["parts"][0]["text"] == "analyse these posts"
    assert body["generationConfig"]["maxOutputTokens"] == 2048


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        gemini_error(403, "Permission denied", "PERMISSION_DENIED"),
        gemini_error(401, "Request had invalid authentication credentials", "UNAUTHENTICATED"),
        gemini_error(400, "API key not valid. Please pass a valid API key.", "INVALID_ARGUMENT"),
    ],
)
async def test_credential_error_aborts_the_walk(response):
    seen: list[str] = []

    with pytest.raises(GenerationAuthError):
        await client_for(lambda combo, request: response, seen).generate("prompt")

    assert seen == ["v1/model-a"]


@pytest.mark.asyncio
async def test_missing_key_is_fatal_without_any_request():
    seen: list[str] = []

    with pytest.raises(GenerationAuthError):
        await client_for(lambda combo, request: ok("x"), seen, api_key="").generate("prompt")

    assert seen == []


@pytest.mark.asyncio
async def test_transient_failures_continue_through_matrix():
    seen: list[str] = []

    def route(combo, request):
        if combo.startswith("v1/"):
            raise httpx.ReadTimeout("timed out", request=request)
        if combo == "v1beta/model-a":
            return httpx.Response(500, text="internal")
        if combo == "v1beta/model-b":
            return httpx.Response(200, json={"candidates": []})
        return ok("last one standing")

    text = await client_for(route, seen).generate("prompt")

    assert text == "last one standing"
    assert len(seen) == 6


@pytest.mark.asyncio
async def test_exhaustion_carries_last_three_failures():
    seen: list[str] = []

    def route(combo, request):
        return gemini_error(503, f"overloaded {combo}", "UNAVAILABLE")

    with pytest.raises(GenerationExhausted) as excinfo:
        await client_for(route, seen).generate("prompt")

    assert len(seen) == 6
    assert len(excinfo.value.failures) == 3
    assert excinfo.value.failures[-1].startswith("v1beta/model-c")
    assert "overloaded v1beta/model-c" in str(excinfo.value)


@pytest.mark.asyncio
async def test_api_key_never_reaches_the_logs(log_records):
    seen: list[str] = []

    def route(combo, request):
        if combo == "v1/model-a":
            return gemini_error(404, "models/model-a is not found", "NOT_FOUND")
        return ok("fine")

    client = client_for(route, seen, api_key="SUPER-SECRET-KEY")
    await client.generate("prompt")

    assert seen == ["v1/model-a", "v1/model-b"]
    assert log_records
    assert not [r["message"] for r in log_records if "SUPER-SECRET-KEY" in r["message"]]


@pytest.mark.asyncio
async def test_slow_streaming_cell_is_cut_off_by_the_cell_timeout():
    seen: list[str] = []
    body = json.dumps({"candidates": [{"content": {"parts": [{"text": "too late"}]}}]}).encode()

    def route(combo, request):
        if combo == "v1/model-a":
            return httpx.Response(200, content=drip(body, chunks=8, delay=0.25))
        return ok("on time")

    started = time.monotonic()
    text = await client_for(route, seen, timeout=0.3).generate("prompt")

    assert text == "on time"
    assert seen == ["v1/model-a", "v1/model-b"]
    assert time.monotonic() - started < 1.5
