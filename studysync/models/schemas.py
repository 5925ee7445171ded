"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# Enums (matching database enums)
class TodoPrioritySchema(str, Enum):
    """Todo priorities for API requests and responses."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectTypeSchema(str, Enum):
    """Project types for API requests and responses."""

    ACADEMIC = "academic"
    PERSONAL = "personal"
    CAREER = "career"


class ScheduleTypeSchema(str, Enum):
    """Schedule entry types for API requests and responses."""

    CLASS = "class"
    STUDY = "study"
    ASSIGNMENT = "assignment"
    EXAM = "exam"


class TimerModeSchema(str, Enum):
    """Timer presets (matching services.timer.TimerMode)."""

    POMODORO = "pomodoro"
    SHORT = "short"
    LONG = "long"
    CUSTOM = "custom"


class TimerStateSchema(str, Enum):
    """Timer lifecycle states (matching services.timer.TimerState)."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class QRTypeSchema(str, Enum):
    """Payload kinds understood by the QR generator."""

    TEXT = "text"
    URL = "url"
    WIFI = "wifi"
    CONTACT = "contact"


class SuccessResponse(BaseModel):
    """Generic acknowledgement returned by delete endpoints."""

    success: bool = True


# Note Schemas
class NoteCreate(BaseModel):
    """Schema for creating a note."""

    title: str = Field(..., min_length=1)
    content: str
    tags: List[str] = Field(default_factory=list)


class NoteUpdate(BaseModel):
    """Partial note update; omitted fields are left untouched."""

    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    tags: Optional[List[str]] = None


class NoteResponse(BaseModel):
    """Schema for note responses."""

    id: int
    user_id: int
    title: str
    content: str
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> Any:
        return [] if value is None else value


# Flashcard Schemas
class FlashcardCard(BaseModel):
    """A single card inside a deck."""

    front: str
    back: str


class FlashcardDeckCreate(BaseModel):
    """Schema for creating a flashcard deck."""

    deck_name: str = Field(..., min_length=1)
    cards: List[FlashcardCard] = Field(default_factory=list)


class FlashcardDeckUpdate(BaseModel):
    """Partial deck update."""

    deck_name: Optional[str] = Field(None, min_length=1)
    cards: Optional[List[FlashcardCard]] = None


class FlashcardDeckResponse(BaseModel):
    """Schema for flashcard deck responses."""

    id: int
    user_id: int
    deck_name: str
    cards: List[FlashcardCard]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Todo Schemas
class TodoCreate(BaseModel):
    """Schema for creating a todo."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    completed: bool = False
    priority: TodoPrioritySchema = TodoPrioritySchema.MEDIUM
    due_date: Optional[datetime] = None


class TodoUpdate(BaseModel):
    """Partial todo update (toggle completion, change priority, ...)."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[TodoPrioritySchema] = None
    due_date: Optional[datetime] = None


class TodoResponse(BaseModel):
    """Schema for todo responses."""

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    completed: bool = False
    priority: TodoPrioritySchema = TodoPrioritySchema.MEDIUM
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Project Schemas
class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: ProjectTypeSchema
    status: str = Field("in_progress", max_length=20)
    data: Dict[str, Any] = Field(default_factory=dict)


class ProjectUpdate(BaseModel):
    """Partial project update."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[ProjectTypeSchema] = None
    status: Optional[str] = Field(None, max_length=20)
    data: Optional[Dict[str, Any]] = None


class ProjectResponse(BaseModel):
    """Schema for project responses."""

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    type: ProjectTypeSchema
    status: str
    data: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Schedule Schemas
class ScheduleCreate(BaseModel):
    """Schema for creating a schedule entry."""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    type: ScheduleTypeSchema

    @model_validator(mode="after")
    def _check_times(self) -> "ScheduleCreate":
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError("start_time and end_time must both be timezone-aware or both naive")
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class ScheduleUpdate(BaseModel):
    """Partial schedule update. Time ordering is re-checked by the router."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    type: Optional[ScheduleTypeSchema] = None


class ScheduleResponse(BaseModel):
    """Schema for schedule responses."""

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    type: ScheduleTypeSchema
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Study Session Schemas
class StudySessionCreate(BaseModel):
    """Schema for logging a study session."""

    duration: int = Field(..., ge=1, description="Length in minutes")
    subject: Optional[str] = None
    type: str = Field("pomodoro", max_length=20)


class StudySessionResponse(BaseModel):
    """Schema for study session responses."""

    id: int
    user_id: int
    duration: int
    subject: Optional[str] = None
    type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudyStatsResponse(BaseModel):
    """Aggregate study time for the dashboard."""

    session_count: int
    total_minutes: int
    total_formatted: str  # "3h 25m"
    minutes_by_subject: Dict[str, int] = {}


# News Feed Schemas
class NewsFeedCreate(BaseModel):
    """Schema for creating a news-feed post."""

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    image_url: Optional[str] = None


class NewsFeedUpdate(BaseModel):
    """Partial post update."""

    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None


class NewsFeedResponse(BaseModel):
    """Schema for news-feed post responses."""

    id: int
    user_id: int
    title: str
    content: str
    image_url: Optional[str] = None
    likes: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Timer Schemas
# ---------------------------------------------------------------------------

class TimerCreateRequest(BaseModel):
    """
    Create a countdown timer.

    ``duration_seconds`` is only used with ``mode == "custom"``; the preset
    modes carry their own durations.
    """

    mode: TimerModeSchema = TimerModeSchema.POMODORO
    duration_seconds: Optional[int] = Field(None, ge=1)
    subject: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def _custom_needs_duration(self) -> "TimerCreateRequest":
        if self.mode == TimerModeSchema.CUSTOM and self.duration_seconds is None:
            raise ValueError("duration_seconds is required for custom mode")
        return self


class TimerModeRequest(TimerCreateRequest):
    """Switch an existing timer to another mode (always lands in idle)."""


class TimerResponse(BaseModel):
    """Snapshot of a timer's state."""

    id: str
    user_id: int
    mode: TimerModeSchema
    subject: Optional[str] = None
    state: TimerStateSchema
    total_duration: int
    remaining: int
    remaining_formatted: str  # "MM:SS"
    running: bool
    completed: bool
    created_at: datetime


# ---------------------------------------------------------------------------
# AI Schemas
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    """Request body for POST /api/chat. Blank messages are rejected with 400."""

    message: str = ""


class ChatResponse(BaseModel):
    """Response for POST /api/chat and the other text helpers."""

    response: str


class ExplainConceptRequest(BaseModel):
    concept: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)


class QuizRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    difficulty: str = Field("medium", min_length=1)
    count: int = Field(5, ge=1, le=20)


class FeedbackRequest(BaseModel):
    student_work: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)


class SentimentRequest(BaseModel):
    text: str = Field(..., min_length=1)


class SentimentResponse(BaseModel):
    """1-5 star rating plus model confidence in [0, 1]."""

    rating: float
    confidence: float


class MediaAnalysisResponse(BaseModel):
    analysis: str


class ImageGenerationRequest(BaseModel):
    prompt: str = Field(..., min_length=1)


class ImageGenerationResponse(BaseModel):
    success: bool = True
    image: str  # data:image/png;base64,...
    text: Optional[str] = None


# ---------------------------------------------------------------------------
# Tool Schemas (upload, conversion, scanning, QR)
# ---------------------------------------------------------------------------

class UploadResponse(BaseModel):
    """Descriptor of a stored upload."""

    success: bool = True
    message: str = "File uploaded successfully"
    filename: str
    originalname: str
    path: str
    size: int
    size_formatted: str
    mimetype: Optional[str] = None


class ConversionResponse(BaseModel):
    """Descriptor of a converted document."""

    success: bool = True
    message: str = "Document converted successfully"
    original_file: str
    converted_file: str
    output_format: str
    download_url: str


class ScanResponse(BaseModel):
    """Descriptor of an OCR-scanned image."""

    success: bool = True
    filename: str
    original_name: str
    extracted_text: str
    url: str


class WifiPayload(BaseModel):
    ssid: str = ""
    password: str = ""
    security: str = "WPA"


class ContactPayload(BaseModel):
    name: str = ""
    phone: str = ""
    email: str = ""
    organization: str = ""


class QRRequest(BaseModel):
    """
    QR generation request.

    The plain ``{"text": "..."}`` form is the default; structured payloads set
    ``type`` to ``url``, ``wifi`` or ``contact`` and fill the matching field.
    """

    type: QRTypeSchema = QRTypeSchema.TEXT
    text: str = ""
    url: str = ""
    wifi: WifiPayload = Field(default_factory=WifiPayload)
    contact: ContactPayload = Field(default_factory=ContactPayload)


class QRResponse(BaseModel):
    success: bool = True
    qr_code: str  # data:image/png;base64,...
    text: str


# ---------------------------------------------------------------------------
# Static sample resources
# ---------------------------------------------------------------------------

class CalendarEvent(BaseModel):
    id: str
    title: str
    description: str
    date: datetime
    time: str
    location: str
    type: str


class EmailTemplate(BaseModel):
    id: str
    name: str
    subject: str
    body: str
    category: str
    tags: List[str]


class FileEntry(BaseModel):
    id: str
    name: str
    type: str  # "file" | "folder"
    size: int
    size_formatted: str
    mime_type: str
    date_modified: datetime
    date_created: datetime
    path: str
    is_shared: bool
    tags: List[str]


# Health Check Schema
class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    database: str
    gemini: str
    timestamp: datetime
    version: str = "0.1.0"
