"""Database and schema models for StudySync."""
from studysync.models.database_models import (
    User,
    Note,
    Flashcard,
    Todo,
    Project,
    Schedule,
    StudySession,
    NewsFeed,
    TodoPriority,
    ProjectType,
    ScheduleType,
)
from studysync.models.schemas import (
    NoteResponse,
    FlashcardDeckResponse,
    TodoResponse,
    ProjectResponse,
    ScheduleResponse,
    StudySessionResponse,
    NewsFeedResponse,
    TimerResponse,
    HealthCheckResponse,
)

__all__ = [
    # Database models
    "User",
    "Note",
    "Flashcard",
    "Todo",
    "Project",
    "Schedule",
    "StudySession",
    "NewsFeed",
    "TodoPriority",
    "ProjectType",
    "ScheduleType",
    # Pydantic schemas
    "NoteResponse",
    "FlashcardDeckResponse",
    "TodoResponse",
    "ProjectResponse",
    "ScheduleResponse",
    "StudySessionResponse",
    "NewsFeedResponse",
    "TimerResponse",
    "HealthCheckResponse",
]
