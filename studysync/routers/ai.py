"""
AI study assistant endpoints backed by Google Gemini.

Route summary
-------------
POST /api/chat                - free-form question  -> {response}
POST /api/ai/explain          - explain a concept    -> {response}
POST /api/ai/quiz             - quiz questions       -> {response}
POST /api/ai/feedback         - feedback on work     -> {response}
POST /api/ai/sentiment        - 1-5 star rating      -> {rating, confidence}
POST /api/ai/analyze-image    - describe an uploaded image or video
POST /api/ai/generate-image   - text-to-image        -> {image: data URL}

The text endpoints always answer 200; when Gemini is unreachable the body
carries a "try again" message instead of an error.
"""
from __future__ import annotations

import base64
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from studysync.config import settings
from studysync.models.schemas import (
    ChatRequest,
    ChatResponse,
    ExplainConceptRequest,
    FeedbackRequest,
    ImageGenerationRequest,
    ImageGenerationResponse,
    MediaAnalysisResponse,
    QuizRequest,
    SentimentRequest,
    SentimentResponse,
)
from studysync.services.gemini import GeminiError, GeminiService
from studysync.utils.helpers import truncate_text

logger = logging.getLogger(__name__)

router = APIRouter()


def get_gemini_service() -> GeminiService:
    return GeminiService()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    gemini: GeminiService = Depends(get_gemini_service),
) -> ChatResponse:
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    logger.info("Chat request: %s", truncate_text(body.message.strip(), 80))
    return ChatResponse(response=await gemini.chat(body.message))


@router.post("/ai/explain", response_model=ChatResponse)
async def explain_concept(
    body: ExplainConceptRequest,
    gemini: GeminiService = Depends(get_gemini_service),
) -> ChatResponse:
    return ChatResponse(response=await gemini.explain_concept(body.concept, body.subject))


@router.post("/ai/quiz", response_model=ChatResponse)
async def generate_quiz(
    body: QuizRequest,
    gemini: GeminiService = Depends(get_gemini_service),
) -> ChatResponse:
    text = await gemini.generate_quiz_questions(body.topic, body.difficulty, body.count)
    return ChatResponse(response=text)


@router.post("/ai/feedback", response_model=ChatResponse)
async def provide_feedback(
    body: FeedbackRequest,
    gemini: GeminiService = Depends(get_gemini_service),
) -> ChatResponse:
    return ChatResponse(response=await gemini.provide_feedback(body.student_work, body.subject))


@router.post("/ai/sentiment", response_model=SentimentResponse)
async def analyze_sentiment(
    body: SentimentRequest,
    gemini: GeminiService = Depends(get_gemini_service),
) -> SentimentResponse:
    try:
        result = await gemini.analyze_sentiment(body.text)
    except GeminiError as exc:
        logger.error("Sentiment analysis failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to analyze sentiment")
    return SentimentResponse(rating=result.rating, confidence=result.confidence)


@router.post("/ai/analyze-image", response_model=MediaAnalysisResponse)
async def analyze_media(
    image: UploadFile = File(...),
    gemini: GeminiService = Depends(get_gemini_service),
) -> MediaAnalysisResponse:
    """Describe an uploaded image (or short video) with the multimodal model."""
    mime_type = image.content_type or "application/octet-stream"
    if not mime_type.startswith(("image/", "video/")):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported media type {mime_type!r}. Upload an image or video.",
        )

    content = await image.read()
    if len(content) > settings.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Max size: {settings.MAX_FILE_SIZE // (1024 * 1024)} MB",
        )

    try:
        if mime_type.startswith("video/"):
            analysis = await gemini.analyze_video(content, mime_type)
        else:
            analysis = await gemini.analyze_image(content, mime_type)
    except GeminiError as exc:
        logger.error("Media analysis failed for %s: %s", image.filename, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to analyze media")

    return MediaAnalysisResponse(analysis=analysis)


@router.post("/ai/generate-image", response_model=ImageGenerationResponse)
async def generate_image(
    body: ImageGenerationRequest,
    gemini: GeminiService = Depends(get_gemini_service),
) -> ImageGenerationResponse:
    try:
        result = await gemini.generate_image(body.prompt)
    except GeminiError as exc:
        logger.error("Image generation failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to generate image")

    encoded = base64.b64encode(result.data).decode("ascii")
    return ImageGenerationResponse(image=f"data:{result.mime_type};base64,{encoded}", text=result.text)
