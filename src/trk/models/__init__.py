"""Data models for trk."""

from .event import CommitEvent, Event, EventKind, NoteEvent, PauseEvent, ResumeEvent
from .session import Session
from .timesheet import Timesheet

__all__ = [
    "CommitEvent",
    "Event",
    "EventKind",
    "NoteEvent",
    "PauseEvent",
    "ResumeEvent",
    "Session",
    "Timesheet",
]
