"""Tests for the Gemini client and the AI endpoints (Gemini mocked with httpx.MockTransport)."""
import base64
import json

import httpx
import pytest
from httpx import AsyncClient

from studysync.main import app
from studysync.routers.ai import get_gemini_service
from studysync.services.gemini import CHAT_FALLBACKS, GeminiError, GeminiService


def _text_reply(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def _service(handler) -> GeminiService:
    return GeminiService(api_key="test-key", transport=httpx.MockTransport(handler))


@pytest.fixture
def gemini_requests():
    """Collects the requests sent to the mocked Gemini API."""
    return []


@pytest.fixture
def use_gemini(gemini_requests):
    """Install a mocked GeminiService for the AI routes; call with a reply function."""

    def install(reply):
        def handler(request: httpx.Request) -> httpx.Response:
            gemini_requests.append(request)
            return reply(request)

        app.dependency_overrides[get_gemini_service] = lambda: _service(handler)

    yield install
    app.dependency_overrides.pop(get_gemini_service, None)


# ---------------------------------------------------------------------------
# GeminiService
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_chat_posts_generate_content():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=_text_reply("Photosynthesis turns light into sugar."))

    answer = await _service(handler).chat("What is photosynthesis?")
    assert answer == "Photosynthesis turns light into sugar."

    request = seen[0]
    assert request.url.path.endswith("/models/gemini-2.5-flash:generateContent")
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert "What is photosynthesis?" in body["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_chat_falls_back_on_http_error():
    service = _service(lambda request: httpx.Response(500, json={"error": {"message": "boom"}}))
    assert await service.chat("hello") == CHAT_FALLBACKS[1]


@pytest.mark.asyncio
async def test_chat_falls_back_on_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert await _service(handler).chat("hello") == CHAT_FALLBACKS[1]


@pytest.mark.asyncio
async def test_chat_falls_back_when_error_body_is_not_an_object():
    service = _service(lambda request: httpx.Response(
        429, json=[{"error": {"code": 429, "message": "quota"}}]
    ))
    assert await service.chat("hello") == CHAT_FALLBACKS[1]


@pytest.mark.asyncio
async def test_chat_falls_back_when_success_body_is_not_an_object():
    service = _service(lambda request: httpx.Response(200, json=["unexpected"]))
    assert await service.chat("hello") == CHAT_FALLBACKS[1]


@pytest.mark.asyncio
async def test_chat_skips_malformed_parts():
    service = _service(lambda request: httpx.Response(200, json={
        "candidates": [{"content": {"parts": ["stray", {"text": None}, {"text": "Answer"}]}}],
    }))
    assert await service.chat("hello") == "Answer"


@pytest.mark.asyncio
async def test_chat_odd_candidate_shape_uses_rephrase_message():
    service = _service(lambda request: httpx.Response(200, json={"candidates": ["x"]}))
    assert await service.chat("hello") == CHAT_FALLBACKS[0]


@pytest.mark.asyncio
async def test_chat_empty_answer_uses_rephrase_message():
    service = _service(lambda request: httpx.Response(200, json={"candidates": []}))
    assert await service.chat("hello") == CHAT_FALLBACKS[0]


@pytest.mark.asyncio
async def test_missing_api_key_falls_back_without_calling_out():
    def handler(request):
        raise AssertionError("should not be called")

    service = GeminiService(api_key="", transport=httpx.MockTransport(handler))
    assert await service.chat("hello") == CHAT_FALLBACKS[1]
    assert await service.check_health() is False


@pytest.mark.asyncio
async def test_sentiment_parses_json():
    service = _service(lambda request: httpx.Response(
        200, json=_text_reply('{"rating": 4, "confidence": 0.85}')
    ))
    result = await service.analyze_sentiment("Great lecture!")
    assert result.rating == 4
    assert result.confidence == 0.85


@pytest.mark.asyncio
async def test_sentiment_raises_on_garbage():
    service = _service(lambda request: httpx.Response(200, json=_text_reply("not json")))
    with pytest.raises(GeminiError):
        await service.analyze_sentiment("meh")


@pytest.mark.asyncio
async def test_generate_image_decodes_inline_data():
    png = b"\x89PNG fake"
    service = _service(lambda request: httpx.Response(200, json={
        "candidates": [{"content": {"parts": [
            {"text": "A cat"},
            {"inlineData": {"mimeType": "image/png", "data": base64.b64encode(png).decode()}},
        ]}}],
    }))
    result = await service.generate_image("a cat")
    assert result.data == png
    assert result.mime_type == "image/png"
    assert result.text == "A cat"


@pytest.mark.asyncio
async def test_generate_image_without_image_raises():
    service = _service(lambda request: httpx.Response(200, json=_text_reply("no picture")))
    with pytest.raises(GeminiError):
        await service.generate_image("a cat")


@pytest.mark.asyncio
async def test_analyze_image_sends_inline_bytes():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=_text_reply("A whiteboard with equations."))

    text = await _service(handler).analyze_image(b"\xff\xd8jpeg", "image/jpeg")
    assert text == "A whiteboard with equations."
    inline = seen[0]["contents"][0]["parts"][0]["inlineData"]
    assert inline["mimeType"] == "image/jpeg"
    assert base64.b64decode(inline["data"]) == b"\xff\xd8jpeg"


@pytest.mark.asyncio
async def test_check_health():
    assert await _service(lambda request: httpx.Response(200, json={"models": []})).check_health() is True
    assert await _service(lambda request: httpx.Response(403)).check_health() is False


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_chat_endpoint(client: AsyncClient, use_gemini):
    use_gemini(lambda request: httpx.Response(200, json=_text_reply("Derivatives measure change.")))
    resp = await client.post("/api/chat", json={"message": "Explain derivatives"})
    assert resp.status_code == 200
    assert resp.json() == {"response": "Derivatives measure change."}


@pytest.mark.asyncio
async def test_chat_blank_message_400(client: AsyncClient, use_gemini, gemini_requests):
    use_gemini(lambda request: httpx.Response(200, json=_text_reply("unused")))
    resp = await client.post("/api/chat", json={"message": "   "})
    assert resp.status_code == 400
    assert gemini_requests == []


@pytest.mark.asyncio
async def test_chat_endpoint_fallback_is_200(client: AsyncClient, use_gemini):
    use_gemini(lambda request: httpx.Response(503))
    resp = await client.post("/api/chat", json={"message": "hi"})
    assert resp.status_code == 200
    assert "try again" in resp.json()["response"]


@pytest.mark.asyncio
async def test_chat_endpoint_fallback_on_list_body(client: AsyncClient, use_gemini):
    use_gemini(lambda request: httpx.Response(200, json=["unexpected"]))
    resp = await client.post("/api/chat", json={"message": "hi"})
    assert resp.status_code == 200
    assert resp.json()["response"] == CHAT_FALLBACKS[1]


@pytest.mark.asyncio
async def test_explain_quiz_feedback(client: AsyncClient, use_gemini, gemini_requests):
    use_gemini(lambda request: httpx.Response(200, json=_text_reply("ok")))

    r1 = await client.post("/api/ai/explain", json={"concept": "Entropy", "subject": "Physics"})
    r2 = await client.post("/api/ai/quiz", json={"topic": "WW2", "difficulty": "hard", "count": 3})
    r3 = await client.post("/api/ai/feedback", json={"student_work": "My essay", "subject": "English"})
    assert [r.status_code for r in (r1, r2, r3)] == [200, 200, 200]

    prompts = [json.loads(r.content)["contents"][0]["parts"][0]["text"] for r in gemini_requests]
    assert '"Entropy" in Physics' in prompts[0]
    assert "Generate 3 hard level quiz questions" in prompts[1]
    assert "My essay" in prompts[2]


@pytest.mark.asyncio
async def test_sentiment_endpoint_502_on_failure(client: AsyncClient, use_gemini):
    use_gemini(lambda request: httpx.Response(500))
    resp = await client.post("/api/ai/sentiment", json={"text": "so so"})
    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_generate_image_endpoint(client: AsyncClient, use_gemini):
    png = b"\x89PNGdata"
    use_gemini(lambda request: httpx.Response(200, json={
        "candidates": [{"content": {"parts": [
            {"inlineData": {"mimeType": "image/png", "data": base64.b64encode(png).decode()}},
        ]}}],
    }))
    resp = await client.post("/api/ai/generate-image", json={"prompt": "a cell diagram"})
    assert resp.status_code == 200
    image = resp.json()["image"]
    assert image.startswith("data:image/png;base64,")
    assert base64.b64decode(image.split(",", 1)[1]) == png


@pytest.mark.asyncio
async def test_analyze_image_rejects_non_media(client: AsyncClient, use_gemini):
    use_gemini(lambda request: httpx.Response(200, json=_text_reply("unused")))
    resp = await client.post(
        "/api/ai/analyze-image",
        files={"image": ("notes.txt", b"plain text", "text/plain")},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_analyze_image_endpoint(client: AsyncClient, use_gemini):
    use_gemini(lambda request: httpx.Response(200, json=_text_reply("A graph.")))
    resp = await client.post(
        "/api/ai/analyze-image",
        files={"image": ("graph.png", b"\x89PNG...", "image/png")},
    )
    assert resp.status_code == 200
    assert resp.json() == {"analysis": "A graph."}
