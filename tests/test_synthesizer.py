import json

import httpx
import pytest

from alchemist.errors import SynthesisError
from alchemist.services.synthesizer import ElementSynthesizer


def completion(content) -> dict:
    return {"id": "chatcmpl-1", "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def make_synthesizer(handler, api_key="test-key") -> ElementSynthesizer:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ElementSynthesizer(
        api_key=api_key,
        model="gpt-4o-mini",
        base_url="https://llm.test/v1/",
        client=client,
    )


async def test_synthesize_sends_json_mode_request_and_parses_element():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion('{"name": "Vapor", "emoji": "💨", "colorHex": "#cccccc"}'))

    synthesizer = make_synthesizer(handler)
    element = await synthesizer.synthesize("Fuego", "Agua")
    await synthesizer.aclose()

    assert element.name == "Vapor"
    assert element.emoji == "💨"
    assert element.color_hex == "#CCCCCC"
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    body = seen["body"]
    assert body["model"] == "gpt-4o-mini"
    assert body["response_format"] == {"type": "json_object"}
    assert body["temperature"] == 0.8
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert '"Fuego" + "Agua"' in body["messages"][1]["content"]


async def test_malformed_color_uses_fallback():
    def handler(request):
        return httpx.Response(200, json=completion('{"name": "Lava", "emoji": "🌋", "colorHex": "orange"}'))

    element = await make_synthesizer(handler).synthesize("Tierra", "Fuego")
    assert element.color_hex == "#CCCCCC"


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        '{"name": "Vapor", "emoji": "💨"',
        '["Vapor", "💨", "#CCCCCC"]',
        '{"name": "Vapor", "colorHex": "#CCCCCC"}',
        '{"name": "Vapor", "emoji": "💨", "color_hex": "#CCCCCC"}',
        '{"name": "Very Hot Steam", "emoji": "💨", "colorHex": "#CCCCCC"}',
        '{"name": "", "emoji": "💨", "colorHex": "#CCCCCC"}',
        "",
    ],
)
async def test_invalid_content_is_rejected(content):
    def handler(request):
        return httpx.Response(200, json=completion(content))

    with pytest.raises(SynthesisError):
        await make_synthesizer(handler).synthesize("Fuego", "Agua")


@pytest.mark.parametrize(
    "body",
    [{"choices": []}, {"error": "nope"}, {"choices": [{"message": {"content": None}}]}, {"choices": ["x"]}],
)
async def test_invalid_envelope_is_rejected(body):
    def handler(request):
        return httpx.Response(200, json=body)

    with pytest.raises(SynthesisError):
        await make_synthesizer(handler).synthesize("Fuego", "Agua")


async def test_non_json_body_is_rejected():
    def handler(request):
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(SynthesisError):
        await make_synthesizer(handler).synthesize("Fuego", "Agua")


async def test_error_status_is_rejected():
    def handler(request):
        return httpx.Response(500, json={"error": {"message": "overloaded"}})

    with pytest.raises(SynthesisError, match="500"):
        await make_synthesizer(handler).synthesize("Fuego", "Agua")


async def test_transport_error_is_rejected():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SynthesisError):
        await make_synthesizer(handler).synthesize("Fuego", "Agua")


async def test_missing_api_key_never_calls_the_provider():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=completion("{}"))

    with pytest.raises(SynthesisError, match="API key"):
        await make_synthesizer(handler, api_key=None).synthesize("Fuego", "Agua")
    assert calls == []
