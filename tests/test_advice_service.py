"""
AdviceService against a mocked Gemini endpoint.
"""
import json
import time

import httpx
import pytest

from kawogo_api.exceptions import AdviceUpstreamError
from kawogo_api.services.advice_service import AdviceService, build_prompt


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def make_service(handler, api_key="gemini-key"):
    return AdviceService(
        api_key=api_key,
        model="gemini-1.5-flash-latest",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


async def test_posts_prompt_to_generate_content():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_payload("Yellow mosaic patterns. Use clean cuttings."))

    advice = await make_service(handler).get_advice("CMD")

    assert advice == "Yellow mosaic patterns. Use clean cuttings."
    assert seen["path"] == "/v1beta/models/gemini-1.5-flash-latest:generateContent"
    assert seen["key"] == "gemini-key"
    prompt = seen["body"]["contents"][0]["parts"][0]["text"]
    assert "explain the disease CMD" in prompt


def test_prompt_lists_cassava_abbreviations():
    prompt = build_prompt("CBB")

    assert "CBSD = Cassava Brown Streak Disease" in prompt
    assert "CMD = Cassava Mosaic Disease" in prompt
    assert "CGM = Cassava Green Mite" in prompt
    assert "CBB = Cassava Bacterial Blight" in prompt
    assert "Symptoms" in prompt


async def test_missing_api_key_raises_without_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=gemini_payload("x"))

    service = make_service(handler, api_key=None)

    with pytest.raises(AdviceUpstreamError, match="key not set"):
        await service.get_advice("CMD")
    assert calls == []


async def test_error_status_raises():
    def handler(request):
        return httpx.Response(403, json={"error": {"message": "API key not valid"}})

    with pytest.raises(AdviceUpstreamError, match="403"):
        await make_service(handler).get_advice("CMD")


async def test_timeout_raises():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(AdviceUpstreamError, match="timed out"):
        await make_service(handler).get_advice("CMD")


async def test_connection_error_raises():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(AdviceUpstreamError):
        await make_service(handler).get_advice("CMD")


async def test_non_json_body_raises():
    def handler(request):
        return httpx.Response(200, content=b"not json")

    with pytest.raises(AdviceUpstreamError):
        await make_service(handler).get_advice("CMD")


@pytest.mark.parametrize("payload", [
    {},
    {"candidates": []},
    {"candidates": [{"content": {"parts": []}}]},
    {"candidates": [{"finishReason": "SAFETY"}]},
    gemini_payload(""),
    gemini_payload("   \n"),
    gemini_payload(None),
])
def test_unusable_responses_raise(payload):
    with pytest.raises(AdviceUpstreamError):
        AdviceService.parse_response(payload)


async def test_slow_body_is_cut_off_at_total_timeout(trickling_server):
    url = await trickling_server(gemini_payload("Uproot infected plants and use clean cuttings."))
    service = AdviceService(api_key="gemini-key", base_url=url, timeout=0.5)

    started = time.monotonic()
    with pytest.raises(AdviceUpstreamError, match="timed out"):
        await service.get_advice("CMD")

    assert time.monotonic() - started < 1.2
