"""Timesheet model, the root of all tracked sessions."""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from trk.core import clock
from trk.core.duration import format_duration
from trk.errors import FatalTimestampError
from trk.models.event import EventKind
from trk.models.session import Session

logger = logging.getLogger(__name__)


class Timesheet(BaseModel):
    """All sessions tracked for one repository.

    Operations always act on the last session; a new one can only be started
    once the previous one is finalized.
    """

    start: int
    end: int
    user: str
    show_commits: bool = True
    repo: str = ""
    sessions: List[Session] = Field(default_factory=list)

    @classmethod
    def create(cls, user: str, timestamp: Optional[int] = None) -> "Timesheet":
        """Create an empty timesheet owned by ``user``."""
        start = clock.now() if timestamp is None else timestamp
        return cls(start=start, end=start + 1, user=user)

    @property
    def last_session(self) -> Optional[Session]:
        """Get the most recently started session."""
        return self.sessions[-1] if self.sessions else None

    def new_session(self, timestamp: Optional[int] = None) -> bool:
        """Start a new session unless the last one is still running.

        Raises FatalTimestampError if ``timestamp`` does not come after the
        end of the last session (or the start of the sheet).
        """
        last = self.last_session
        if last is not None and last.is_running:
            logger.warning("Last session is still running.")
            return False

        if timestamp is not None:
            earliest = self.start if last is None else last.end
            if timestamp <= earliest:
                raise FatalTimestampError("That timestamp is invalid.", timestamp)

        self.sessions.append(Session.begin(timestamp))
        return True

    def end_session(self, timestamp: Optional[int] = None) -> bool:
        """Finalize the last session."""
        session = self.last_session
        if session is None:
            logger.warning("No session to finalize.")
            return False

        if session.is_running:
            session.refresh_end()
        return session.finalize(timestamp)

    def pause(self, timestamp: Optional[int] = None, note: Optional[str] = None) -> bool:
        session = self.last_session
        if session is None:
            logger.warning("No session to pause.")
            return False
        return session.push_event(EventKind.PAUSE, timestamp=timestamp, note=note)

    def resume(self, timestamp: Optional[int] = None) -> bool:
        session = self.last_session
        if session is None:
            logger.warning("No session to resume.")
            return False
        return session.push_event(EventKind.RESUME, timestamp=timestamp)

    def note(self, text: str, timestamp: Optional[int] = None) -> bool:
        session = self.last_session
        if session is None:
            logger.warning("No session to add note to.")
            return False
        return session.push_event(EventKind.NOTE, timestamp=timestamp, note=text)

    def add_commit(self, commit_hash: str, message: Optional[str] = None) -> bool:
        """Record a commit, starting a session first if none is running."""
        last = self.last_session
        if last is None or not last.is_running:
            self.new_session()

        # A commit whose message could not be read is still worth recording
        return self.last_session.push_event(
            EventKind.COMMIT,
            note=message if message is not None else "",
            commit_hash=commit_hash,
        )

    def add_branch(self, name: str) -> None:
        session = self.last_session
        if session is not None and session.is_running:
            session.add_branch(name)

    def toggle_show_commits(self, setting: bool) -> None:
        self.show_commits = setting

    def set_repo(self, repo: str) -> None:
        self.repo = repo

    def sessions_since(self, since: Optional[int] = None) -> List[Session]:
        """Get the sessions started after ``since``, or all of them."""
        if since is None:
            return list(self.sessions)
        return [session for session in self.sessions if session.start > since]

    def pause_time(self) -> int:
        return sum(session.pause_time() for session in self.sessions)

    def working_time(self) -> int:
        return sum(session.working_time() for session in self.sessions)

    def status(self, now: Optional[int] = None) -> str:
        """Describe the sheet and its last session for the terminal."""
        now = clock.now() if now is None else now
        status = f"Sheet running for {format_duration(max(now - self.start, 0))}\n"
        if not self.sessions:
            return status + "No sessions yet."
        return (
            status
            + f"{len(self.sessions)} session(s) so far.\nLast session:\n"
            + self.last_session.status(now)
        )

    def last_session_status(self, now: Optional[int] = None) -> str:
        session = self.last_session
        if session is None:
            return "No session yet."
        return session.status(now)
