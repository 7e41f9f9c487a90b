"""Session model for tracking a span of work."""

import logging
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field, field_serializer

from trk.core import clock
from trk.core.duration import format_duration
from trk.errors import FatalTimestampError
from trk.models.event import (
    CommitEvent,
    Event,
    EventKind,
    NoteEvent,
    PauseEvent,
    ResumeEvent,
)

logger = logging.getLogger(__name__)

# Joins notes taken while paused into the open pause's note
NOTE_SEPARATOR = "\n"


class Phase(str, Enum):
    """State a session is in, derived from its flag and event log."""

    ACTIVE = "active"
    PAUSED = "paused"
    FINALIZED = "finalized"


class Transition(str, Enum):
    """What pushing an event does in a given phase."""

    APPEND = "append"
    AMEND_PAUSE = "amend_pause"
    RESUME_THEN_APPEND = "resume_then_append"
    REJECT = "reject"


TRANSITIONS: Dict[Tuple[Phase, EventKind], Transition] = {
    (Phase.ACTIVE, EventKind.PAUSE): Transition.APPEND,
    (Phase.ACTIVE, EventKind.RESUME): Transition.REJECT,
    (Phase.ACTIVE, EventKind.NOTE): Transition.APPEND,
    (Phase.ACTIVE, EventKind.COMMIT): Transition.APPEND,
    (Phase.PAUSED, EventKind.PAUSE): Transition.REJECT,
    (Phase.PAUSED, EventKind.RESUME): Transition.APPEND,
    (Phase.PAUSED, EventKind.NOTE): Transition.AMEND_PAUSE,
    (Phase.PAUSED, EventKind.COMMIT): Transition.RESUME_THEN_APPEND,
}

REJECTIONS: Dict[Tuple[Phase, EventKind], str] = {
    (Phase.ACTIVE, EventKind.RESUME): "Currently not paused.",
    (Phase.PAUSED, EventKind.PAUSE): "Already paused.",
}


class Session(BaseModel):
    """One continuous span of tracked work.

    Events are kept in strictly increasing timestamp order. After every
    successful append ``end`` is re-derived from the last event, so the
    session always covers its most recent event.
    """

    start: int
    end: int
    running: bool = True
    branches: Set[str] = Field(default_factory=set)
    events: List[Event] = Field(default_factory=list)

    @classmethod
    def begin(cls, timestamp: Optional[int] = None) -> "Session":
        """Start a session now or at the given timestamp."""
        start = clock.now() if timestamp is None else timestamp
        return cls(start=start, end=start + 1)

    @field_serializer("branches")
    def _serialize_branches(self, branches: Set[str]) -> List[str]:
        return sorted(branches)

    @property
    def is_running(self) -> bool:
        """Check if the session has not been finalized yet."""
        return self.running

    @property
    def is_paused(self) -> bool:
        """Check if the most recent event is a pause."""
        return bool(self.events) and self.events[-1].kind == EventKind.PAUSE

    @property
    def phase(self) -> Phase:
        if not self.running:
            return Phase.FINALIZED
        return Phase.PAUSED if self.is_paused else Phase.ACTIVE

    @property
    def last_timestamp(self) -> int:
        """Timestamp every new event has to come after."""
        return self.events[-1].timestamp if self.events else self.start

    @property
    def commits(self) -> List[CommitEvent]:
        return [event for event in self.events if event.kind == EventKind.COMMIT]

    def refresh_end(self) -> None:
        """Re-derive ``end`` from the last event."""
        if self.events:
            self.end = self.events[-1].timestamp + 1

    def push_event(
        self,
        kind: EventKind,
        timestamp: Optional[int] = None,
        note: Optional[str] = None,
        commit_hash: Optional[str] = None,
    ) -> bool:
        """Record an event, returning False if it was rejected.

        Without a timestamp the clock is used. Commits are always recorded at
        the current time, any timestamp passed for them is ignored.
        """
        kind = EventKind(kind)
        if kind == EventKind.COMMIT and commit_hash is None:
            raise ValueError("Commit events need a commit hash")
        if kind == EventKind.NOTE and note is None:
            raise ValueError("Note events need a note")

        if not self.running:
            logger.warning("Already finalized, cannot push event.")
            return False

        if kind == EventKind.COMMIT:
            if timestamp is not None:
                logger.debug("Ignoring timestamp %d for commit %s", timestamp, commit_hash)
            timestamp = None

        if timestamp is not None and timestamp <= self.last_timestamp:
            logger.warning("That timestamp is before the last event.")
            return False

        transition = TRANSITIONS[(self.phase, kind)]
        if transition == Transition.REJECT:
            logger.warning(REJECTIONS[(self.phase, kind)])
            return False

        if transition == Transition.AMEND_PAUSE:
            self._amend_pause_note(note)
        else:
            if transition == Transition.RESUME_THEN_APPEND:
                self.events.append(ResumeEvent(timestamp=self._next_timestamp()))
            if timestamp is None:
                timestamp = self._next_timestamp()
            self.events.append(self._build_event(kind, timestamp, note, commit_hash))

        self.refresh_end()
        return True

    def finalize(self, timestamp: Optional[int] = None) -> bool:
        """Close the session; a finalized session is left untouched.

        Raises FatalTimestampError if an explicit timestamp does not come
        after the last event.
        """
        if not self.running:
            return False

        if timestamp is None:
            timestamp = self._next_timestamp()
        elif timestamp <= self.last_timestamp:
            raise FatalTimestampError("That is not a valid timestamp!", timestamp)

        if self.is_paused:
            self.events.append(ResumeEvent(timestamp=timestamp))
        self.running = False
        self.end = timestamp + 1
        return True

    def add_branch(self, name: str) -> None:
        """Remember a branch worked on while the session runs."""
        if self.running:
            self.branches.add(name)

    def pause_time(self) -> int:
        """Get the total length of closed pause intervals in seconds."""
        total = 0
        paused_at: Optional[int] = None
        for event in self.events:
            if event.kind == EventKind.PAUSE:
                paused_at = event.timestamp
            elif event.kind == EventKind.RESUME and paused_at is not None:
                total += event.timestamp - paused_at
                paused_at = None
        return total

    def working_time(self) -> int:
        """Get the session length minus pauses in seconds."""
        return self.end - self.start - self.pause_time()

    def status(self, now: Optional[int] = None) -> str:
        """Describe the session for the terminal."""
        now = clock.now() if now is None else now
        lines = []

        if self.running:
            lines.append(f"Session running since {_since(now, self.start)}.")
        else:
            lines.append(
                f"Session ended {_since(now, self.end)} ago, "
                f"worked for {format_duration(self.working_time())}."
            )

        if self.is_paused:
            lines.append(f"    Paused since {_since(now, self.events[-1].timestamp)}.")
        elif not self.events:
            lines.append("    No events in this session yet!")
        else:
            last = self.events[-1]
            lines.append(
                f"    Last event: {last.kind.capitalize()}, "
                f"{_since(now, last.timestamp)} ago."
            )

        if self.branches:
            lines.append(
                f"Worked on {len(self.branches)} branches: "
                + " ".join(sorted(self.branches))
            )
        return "\n".join(lines)

    def _next_timestamp(self) -> int:
        # The clock has whole-second resolution, keep the log strictly ordered
        return max(clock.now(), self.last_timestamp + 1)

    def _amend_pause_note(self, text: str) -> None:
        pause = self.events[-1]
        if pause.note:
            pause.note = f"{pause.note}{NOTE_SEPARATOR}{text}"
        else:
            pause.note = text

    def _build_event(
        self,
        kind: EventKind,
        timestamp: int,
        note: Optional[str],
        commit_hash: Optional[str],
    ) -> Event:
        if kind == EventKind.PAUSE:
            return PauseEvent(timestamp=timestamp, note=note)
        if kind == EventKind.RESUME:
            return ResumeEvent(timestamp=timestamp, note=note)
        if kind == EventKind.NOTE:
            return NoteEvent(timestamp=timestamp, note=note)

        if note is None:
            logger.warning("No commit message found for commit %s.", commit_hash)
        return CommitEvent(timestamp=timestamp, hash=commit_hash, note=note)


def _since(now: int, timestamp: int) -> str:
    return format_duration(max(now - timestamp, 0))
