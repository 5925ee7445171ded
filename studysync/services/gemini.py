"""
Google Gemini client for the AI study assistant.

Talks to the Generative Language REST API
(``{GEMINI_BASE_URL}/models/{model}:generateContent``) with httpx.  All
prompts are module-level constants so they can be tuned without touching
logic code.

Public API
----------
GeminiService.chat(message)                              -> str (never raises)
GeminiService.explain_concept(concept, subject)          -> str (never raises)
GeminiService.generate_quiz_questions(topic, difficulty) -> str (never raises)
GeminiService.provide_feedback(student_work, subject)    -> str (never raises)
GeminiService.analyze_sentiment(text)                    -> Sentiment
GeminiService.analyze_image(image_bytes, mime_type)      -> str
GeminiService.analyze_video(video_bytes, mime_type)      -> str
GeminiService.generate_image(prompt)                     -> GeneratedImage

The text helpers swallow failures and return a friendly fallback message;
the remaining calls raise ``GeminiError`` for the router to translate.
"""
from __future__ import annotations

import base64
import dataclasses
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from studysync.config import settings
from studysync.utils.helpers import truncate_text

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    """Gemini could not be reached or returned an unusable response."""


@dataclasses.dataclass
class Sentiment:
    rating: float
    confidence: float


@dataclasses.dataclass
class GeneratedImage:
    data: bytes
    mime_type: str = "image/png"
    text: Optional[str] = None


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_CHAT_PROMPT = """\
You are an AI academic assistant helping students with their studies. \
Please provide a helpful, accurate, and educational response to the following question or request:

{message}

If this is about:
- Math/Science: Provide step-by-step explanations
- Programming: Include code examples and explanations
- Writing: Offer structure and improvement suggestions
- Study advice: Give practical, actionable tips
- General questions: Provide clear, informative answers

Keep responses concise but thorough, and always encourage learning.\
"""

_EXPLAIN_PROMPT = """\
As an educational AI assistant, please explain the concept of "{concept}" in {subject}.

Please provide:
1. A clear, simple definition
2. Key points or components
3. A practical example or analogy
4. How it relates to other concepts in {subject}

Make it understandable for students while being accurate and comprehensive.\
"""

_QUIZ_PROMPT = """\
Generate {count} {difficulty} level quiz questions about "{topic}".

Format each question as:
Q: [Question]
A: [Answer]
Explanation: [Brief explanation]

Make sure questions are educational, clear, and appropriate for the {difficulty} difficulty level.\
"""

_FEEDBACK_PROMPT = """\
As an educational AI assistant, please review this student work in {subject} and provide constructive feedback:

"{student_work}"

Please provide:
1. What the student did well
2. Areas for improvement
3. Specific suggestions for enhancement
4. Encouragement and next steps

Be supportive, specific, and educational in your feedback.\
"""

_SENTIMENT_SYSTEM_PROMPT = """\
You are a sentiment analysis expert.
Analyze the sentiment of the text and provide a rating
from 1 to 5 stars and a confidence score between 0 and 1.
Respond with JSON in this format:
{'rating': number, 'confidence': number}\
"""

_IMAGE_ANALYSIS_PROMPT = """\
Analyze this image in detail and describe its key elements, context,
and any notable aspects.\
"""

_VIDEO_ANALYSIS_PROMPT = """\
Analyze this video in detail and describe its key elements, context,
and any notable aspects.\
"""

# Fallbacks: (empty model answer, call failure)
CHAT_FALLBACKS = (
    "I'm here to help! Could you please rephrase your question?",
    "I'm having trouble connecting right now. Please try again in a moment, or rephrase your question.",
)
EXPLAIN_FALLBACKS = (
    "I couldn't generate an explanation. Please try rephrasing your question.",
    "I'm having trouble explaining this concept right now. Please try again.",
)
QUIZ_FALLBACKS = (
    "I couldn't generate quiz questions. Please try again with a different topic.",
    "I'm having trouble generating quiz questions right now. Please try again.",
)
FEEDBACK_FALLBACKS = (
    "I couldn't provide feedback right now. Please try again.",
    "I'm having trouble providing feedback right now. Please try again.",
)


class GeminiService:
    """
    Thin async wrapper over Gemini ``generateContent``.

    Args:
        api_key:   Overrides settings.GEMINI_API_KEY.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = httpx.Timeout(float(settings.GEMINI_TIMEOUT), connect=10.0)
        self._transport = transport

    # ------------------------------------------------------------------
    # Text helpers (fallback on failure)
    # ------------------------------------------------------------------

    async def chat(self, message: str) -> str:
        """Answer a free-form student question."""
        prompt = _CHAT_PROMPT.format(message=message)
        return await self._text_with_fallback(prompt, settings.GEMINI_MODEL, CHAT_FALLBACKS)

    async def explain_concept(self, concept: str, subject: str) -> str:
        prompt = _EXPLAIN_PROMPT.format(concept=concept, subject=subject)
        return await self._text_with_fallback(prompt, settings.GEMINI_MODEL, EXPLAIN_FALLBACKS)

    async def generate_quiz_questions(self, topic: str, difficulty: str, count: int = 5) -> str:
        prompt = _QUIZ_PROMPT.format(topic=topic, difficulty=difficulty, count=count)
        return await self._text_with_fallback(prompt, settings.GEMINI_MODEL, QUIZ_FALLBACKS)

    async def provide_feedback(self, student_work: str, subject: str) -> str:
        prompt = _FEEDBACK_PROMPT.format(student_work=student_work, subject=subject)
        return await self._text_with_fallback(prompt, settings.GEMINI_MODEL, FEEDBACK_FALLBACKS)

    # ------------------------------------------------------------------
    # Structured / multimodal calls (raise GeminiError)
    # ------------------------------------------------------------------

    async def analyze_sentiment(self, text: str) -> Sentiment:
        """Rate *text* from 1 to 5 stars with a confidence in [0, 1]."""
        payload = {
            "systemInstruction": {"parts": [{"text": _SENTIMENT_SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": text}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": {
                    "type": "object",
                    "properties": {
                        "rating": {"type": "number"},
                        "confidence": {"type": "number"},
                    },
                    "required": ["rating", "confidence"],
                },
            },
        }
        data = await self._generate(settings.GEMINI_PRO_MODEL, payload)
        raw = _response_text(data)
        logger.debug("analyze_sentiment raw JSON: %s", raw)
        if not raw:
            raise GeminiError("Empty response from model")
        try:
            parsed = json.loads(raw)
            return Sentiment(
                rating=float(parsed["rating"]),
                confidence=float(parsed["confidence"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise GeminiError(f"Failed to analyze sentiment: {exc}") from exc

    async def analyze_image(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        return await self._describe_media(image_bytes, mime_type, _IMAGE_ANALYSIS_PROMPT)

    async def analyze_video(self, video_bytes: bytes, mime_type: str = "video/mp4") -> str:
        return await self._describe_media(video_bytes, mime_type, _VIDEO_ANALYSIS_PROMPT)

    async def generate_image(self, prompt: str) -> GeneratedImage:
        """
        Generate an image from *prompt*.

        Only the image-generation model supports IMAGE output; any text parts
        returned alongside it are kept as ``GeneratedImage.text``.
        """
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }
        data = await self._generate(settings.GEMINI_IMAGE_MODEL, payload)

        texts: List[str] = []
        for part in _first_candidate_parts(data):
            if isinstance(part.get("text"), str) and part["text"]:
                texts.append(part["text"])
            inline = part.get("inlineData") or part.get("inline_data")
            if isinstance(inline, dict) and isinstance(inline.get("data"), str):
                try:
                    image = base64.b64decode(inline["data"])
                except (ValueError, TypeError) as exc:
                    raise GeminiError(f"Failed to generate image: {exc}") from exc
                return GeneratedImage(
                    data=image,
                    mime_type=inline.get("mimeType") or inline.get("mime_type") or "image/png",
                    text="\n".join(texts) or None,
                )
        raise GeminiError("Failed to generate image: no image data in response")

    async def check_health(self) -> bool:
        """Return ``True`` if the API key is set and the models endpoint answers 200."""
        if not self.api_key:
            return False
        try:
            async with self._client(timeout=5.0) as client:
                resp = await client.get(f"{self.base_url}/models", headers=self._headers())
                return resp.status_code == 200
        except Exception as exc:
            logger.error("Gemini health check failed: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _text_with_fallback(self, prompt: str, model: str, fallbacks: tuple) -> str:
        empty_fallback, error_fallback = fallbacks
        try:
            text = await self._generate_text(prompt, model)
        except GeminiError as exc:
            logger.error("Gemini API error: %s", exc)
            return error_fallback
        return text or empty_fallback

    async def _generate_text(self, prompt: str, model: str) -> str:
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        data = await self._generate(model, payload)
        return _response_text(data)

    async def _describe_media(self, media: bytes, mime_type: str, prompt: str) -> str:
        payload = {
            "contents": [{
                "role": "user",
                "parts": [
                    {"inlineData": {"data": base64.b64encode(media).decode("ascii"), "mimeType": mime_type}},
                    {"text": prompt},
                ],
            }],
        }
        data = await self._generate(settings.GEMINI_PRO_MODEL, payload)
        return _response_text(data)

    async def _generate(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST ``generateContent`` and return the decoded JSON body."""
        if not self.api_key:
            raise GeminiError("GEMINI_API_KEY is not configured")

        url = f"{self.base_url}/models/{model}:generateContent"
        try:
            async with self._client() as client:
                resp = await client.post(url, json=payload, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise GeminiError(f"request timed out after {settings.GEMINI_TIMEOUT} s") from exc
        except httpx.HTTPError as exc:
            raise GeminiError(f"connection error: {exc}") from exc

        if resp.status_code != 200:
            message = truncate_text(resp.text, 300)
            try:
                body = resp.json()
            except ValueError:
                body = None
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                message = error["message"]
            raise GeminiError(f"Gemini returned HTTP {resp.status_code}: {message}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise GeminiError(f"invalid JSON from Gemini: {exc}") from exc
        if not isinstance(body, dict):
            raise GeminiError(f"unexpected Gemini response: {truncate_text(resp.text, 300)}")
        return body

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout if timeout is not None else self.timeout,
            transport=self._transport,
        )

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "x-goog-api-key": self.api_key}


def _first_candidate_parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Parts of the first candidate; malformed entries are skipped."""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return []
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return []
    parts = content.get("parts")
    if not isinstance(parts, list):
        return []
    return [p for p in parts if isinstance(p, dict)]


def _response_text(data: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    return "".join(
        p["text"] for p in _first_candidate_parts(data) if isinstance(p.get("text"), str)
    ).strip()
