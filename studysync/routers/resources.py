"""
Sample data for widgets that have no backing store yet: calendar events,
email templates and the file manager listing.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List

from fastapi import APIRouter

from studysync.models.schemas import CalendarEvent, EmailTemplate, FileEntry
from studysync.utils.helpers import format_file_size

logger = logging.getLogger(__name__)

router = APIRouter()


EMAIL_TEMPLATES = [
    EmailTemplate(
        id="1",
        name="Professor Meeting Request",
        subject="Request for Office Hours Meeting",
        body=(
            "Dear Professor [NAME],\n\n"
            "I hope this email finds you well. I am [YOUR NAME], a student in your "
            "[COURSE NAME] class.\n\n"
            "I would like to schedule a meeting during your office hours to discuss "
            "[SPECIFIC TOPIC/QUESTION]. I am available on [DAY/TIME] and would appreciate "
            "the opportunity to get your guidance on this matter.\n\n"
            "Please let me know if this time works for you, or if you would prefer to "
            "meet at a different time.\n\n"
            "Thank you for your time and consideration.\n\n"
            "Best regards,\n[YOUR NAME]\n[STUDENT ID]\n[EMAIL]"
        ),
        category="academic",
        tags=["professor", "meeting", "office hours"],
    ),
    EmailTemplate(
        id="2",
        name="Assignment Extension Request",
        subject="Request for Assignment Extension - [ASSIGNMENT NAME]",
        body=(
            "Dear Professor [NAME],\n\n"
            "I am writing to request an extension for [ASSIGNMENT NAME] that is due on "
            "[DUE DATE].\n\n"
            "Due to [REASON], I have encountered difficulties completing the assignment by "
            "the original deadline. I would like to request an extension until [NEW DATE], "
            "which would allow me to submit quality work that meets the course standards.\n\n"
            "I understand that extensions are not always possible, and I take full "
            "responsibility for this situation. I have attached any relevant documentation "
            "that supports my request.\n\n"
            "Thank you for considering my request. I look forward to your response.\n\n"
            "Sincerely,\n[YOUR NAME]\n[STUDENT ID]"
        ),
        category="academic",
        tags=["extension", "assignment", "deadline"],
    ),
]


def _file(id: str, name: str, type: str, size: int, mime_type: str,
          modified: datetime, created: datetime, shared: bool, tags: List[str]) -> FileEntry:
    return FileEntry(
        id=id,
        name=name,
        type=type,
        size=size,
        size_formatted=format_file_size(size),
        mime_type=mime_type,
        date_modified=modified,
        date_created=created,
        path="/documents",
        is_shared=shared,
        tags=tags,
    )


FILES = [
    _file("1", "Lecture Notes", "folder", 0, "",
          datetime(2024, 1, 15, tzinfo=timezone.utc), datetime(2024, 1, 10, tzinfo=timezone.utc),
          False, ["study", "notes"]),
    _file("2", "Assignment_1.pdf", "file", 2048576, "application/pdf",
          datetime(2024, 1, 20, tzinfo=timezone.utc), datetime(2024, 1, 18, tzinfo=timezone.utc),
          True, ["assignment", "pdf"]),
]


@router.get("/calendar-events", response_model=List[CalendarEvent])
async def calendar_events() -> List[CalendarEvent]:
    now = datetime.now(timezone.utc)
    return [
        CalendarEvent(
            id="1",
            title="Computer Science Lecture",
            description="Introduction to Algorithms",
            date=now,
            time="10:00 AM",
            location="Room 101",
            type="class",
        ),
        CalendarEvent(
            id="2",
            title="Assignment Due",
            description="Data Structures Project",
            date=now + timedelta(days=2),
            time="11:59 PM",
            location="Online",
            type="assignment",
        ),
    ]


@router.get("/email-templates", response_model=List[EmailTemplate])
async def email_templates() -> List[EmailTemplate]:
    return EMAIL_TEMPLATES


@router.get("/files", response_model=List[FileEntry])
async def list_files() -> List[FileEntry]:
    return FILES
