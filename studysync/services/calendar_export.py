"""
iCalendar and vCard rendering.

``schedules_to_ics`` turns schedule rows into a VCALENDAR document that
Google Calendar / Outlook / Apple Calendar can import; ``build_vcard`` renders
a minimal VERSION:3.0 contact card (used by the QR generator).
"""
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from icalendar import Calendar, Event
from icalendar.parser import escape_char

PRODID = "-//StudySync//Calendar//EN"
UID_DOMAIN = "studysync.com"


def as_utc(value: datetime) -> datetime:
    """Naive values (SQLite) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def schedules_to_ics(schedules: Iterable[Any], now: Optional[datetime] = None) -> str:
    """
    Render schedule rows as an ICS calendar.

    Args:
        schedules: Objects with id, title, description, start_time, end_time
                   and location attributes.
        now:       DTSTAMP value (defaults to the current UTC time).

    Returns:
        The calendar text, CRLF line endings, content lines folded at 75 octets.
    """
    stamp = as_utc(now or datetime.now(timezone.utc))

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")

    for item in schedules:
        event = Event()
        event.add("uid", f"{item.id}@{UID_DOMAIN}")
        event.add("dtstamp", stamp)
        event.add("dtstart", as_utc(item.start_time))
        event.add("dtend", as_utc(item.end_time))
        event.add("summary", item.title)
        if item.description:
            event.add("description", item.description)
        if item.location:
            event.add("location", item.location)
        cal.add_component(event)

    return cal.to_ical().decode("utf-8")


def build_vcard(name: str = "", phone: str = "", email: str = "", organization: str = "") -> str:
    # vCard 3.0 shares the iCalendar TEXT escaping rules
    return "\n".join([
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"FN:{escape_char(name or '')}",
        f"TEL:{escape_char(phone or '')}",
        f"EMAIL:{escape_char(email or '')}",
        f"ORG:{escape_char(organization or '')}",
        "END:VCARD",
    ])
