"""HTML reports for timesheets and sessions."""

from html import escape
from typing import Iterable, Optional

from trk.core.clock import format_timestamp
from trk.core.duration import format_duration
from trk.models.event import Event, EventKind
from trk.models.session import NOTE_SEPARATOR, Session
from trk.models.timesheet import Timesheet

STYLE_CSS = """body {
    font-family: sans-serif;
    max-width: 50em;
    margin: 2em auto;
    color: #222;
}
.sessionheader { font-size: 1.4em; }
.sessionfooter { font-size: 1.1em; color: #555; }
.entry { margin: 0.4em 0; }
.pause { color: #a05a00; }
.resume { color: #2a7a2a; }
.commit { color: #1a4f8a; }
.mininote { margin: 0.2em 0 0 1.5em; font-style: italic; }
.summary { border-top: 1px solid #ccc; padding-top: 0.5em; }
"""

# Loaded on top of style.css when commits are hidden
NO_COMMIT_CSS = """.commit { display: none; }
"""

STYLESHEETS = {"style.css": STYLE_CSS, "no_commit.css": NO_COMMIT_CSS}


def render_timesheet(sheet: Timesheet, since: Optional[int] = None) -> str:
    """Render the sessions started after ``since`` with their totals."""
    sessions = sheet.sessions_since(since)
    sessions_html = "".join(f"{_session_section(session)}<hr>\n" for session in sessions)

    return _document(
        sheet,
        f"Timesheet for {sheet.user}",
        sessions_html + _summary(
            working=sum(session.working_time() for session in sessions),
            paused=sum(session.pause_time() for session in sessions),
        ),
    )


def render_session(sheet: Timesheet, session: Session) -> str:
    """Render a single session of ``sheet``."""
    return _document(sheet, f"Session for {sheet.user}", _session_section(session))


def render_event(event: Event) -> str:
    date = escape(format_timestamp(event.timestamp))

    if event.kind == EventKind.PAUSE:
        mininote = (
            f'\n    <p class="mininote">{_text(event.note)}</p>' if event.note else ""
        )
        return f'<div class="entry pause">{date}: Started a pause{mininote}\n</div>\n'

    if event.kind == EventKind.RESUME:
        return f'<div class="entry resume">{date}: Resumed work\n<hr>\n</div>\n'

    if event.kind == EventKind.NOTE:
        return f'<div class="entry note">{date}: Note: {_text(event.note)}\n<hr>\n</div>\n'

    return (
        f'<div class="entry commit">{date}: Commit id: {escape(event.hash)}\n'
        f'    <p class="mininote">message: {_text(event.note or "")}</p>\n'
        "  <hr>\n</div>\n"
    )


def _session_section(session: Session) -> str:
    events_html = "".join(render_event(event) for event in session.events)

    branches = ""
    if session.branches:
        names = " ".join(escape(name) for name in sorted(session.branches))
        branches = f"Worked on {len(session.branches)} branches: {names}"

    return (
        '<section class="session">\n'
        f'    <h1 class="sessionheader">Session on {escape(format_timestamp(session.start))}</h1>\n'
        f"{events_html}"
        f'<h2 class="sessionfooter">Ended on {escape(format_timestamp(session.end))}</h2>\n'
        + _summary(session.working_time(), session.pause_time(), extra=[branches])
        + "</section>\n"
    )


def _summary(working: int, paused: int, extra: Iterable[str] = ()) -> str:
    lines = "".join(f"    <p>{line}</p>\n" for line in extra if line)
    return (
        '<section class="summary">\n'
        f"{lines}"
        f"    <p>Worked for {format_duration(working)}</p>\n"
        f"    <p>Paused for {format_duration(paused)}</p>\n"
        "</section>\n"
    )


def _document(sheet: Timesheet, title: str, body: str) -> str:
    stylesheets = '<link rel="stylesheet" type="text/css" href="style.css">\n'
    if not sheet.show_commits:
        stylesheets += '<link rel="stylesheet" type="text/css" href="no_commit.css">\n'

    repo = f'<p class="repo">Repository: {escape(sheet.repo)}</p>\n' if sheet.repo else ""

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        f"{stylesheets}"
        f"<title>{escape(title)}</title>\n"
        "</head>\n"
        "<body>\n"
        f"{repo}"
        f"{body}"
        "</body>\n"
        "</html>\n"
    )


def _text(note: str) -> str:
    return "<br>".join(escape(part) for part in note.split(NOTE_SEPARATOR))
