"""Event models for a session's log."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class EventKind(str, Enum):
    """Kind of event recorded in a session."""

    PAUSE = "pause"
    RESUME = "resume"
    NOTE = "note"
    COMMIT = "commit"


class PauseEvent(BaseModel):
    """Start of a pause interval, optionally with a reason."""

    kind: Literal["pause"] = "pause"
    timestamp: int
    note: Optional[str] = None


class ResumeEvent(BaseModel):
    """End of a pause interval."""

    kind: Literal["resume"] = "resume"
    timestamp: int
    note: Optional[str] = None


class NoteEvent(BaseModel):
    """Free-text annotation."""

    kind: Literal["note"] = "note"
    timestamp: int
    note: str


class CommitEvent(BaseModel):
    """A commit made in the tracked repository."""

    kind: Literal["commit"] = "commit"
    timestamp: int
    hash: str
    note: Optional[str] = None  # Commit message


Event = Annotated[
    Union[PauseEvent, ResumeEvent, NoteEvent, CommitEvent],
    Field(discriminator="kind"),
]
