"""Tests for the Session event log and time accounting."""

import logging

import pytest

from trk.errors import FatalTimestampError
from trk.models.event import EventKind
from trk.models.session import TRANSITIONS, Phase, Session, Transition

from conftest import START


@pytest.fixture
def session(fake_clock):
    """A running session started at START."""
    return Session.begin()


def kinds(session):
    return [event.kind for event in session.events]


def test_begin_creates_running_session(session):
    """Test that a new session runs and spans one second."""
    assert session.start == START
    assert session.end == START + 1
    assert session.is_running
    assert not session.is_paused
    assert session.phase == Phase.ACTIVE
    assert session.events == []


def test_begin_with_explicit_timestamp():
    """Test starting a session in the past."""
    session = Session.begin(500)
    assert session.start == 500
    assert session.end == 501


def test_pause_twice_is_rejected(session):
    """Test that pausing a paused session leaves the log unchanged."""
    assert session.push_event(EventKind.PAUSE, timestamp=START + 10)
    assert session.phase == Phase.PAUSED

    assert not session.push_event(EventKind.PAUSE, timestamp=START + 20)
    assert kinds(session) == ["pause"]
    assert session.end == START + 11


def test_resume_without_pause_is_rejected(session):
    """Test that resuming an active session fails."""
    assert not session.push_event(EventKind.RESUME, timestamp=START + 10)
    assert session.events == []

    session.push_event(EventKind.PAUSE, timestamp=START + 10)
    assert session.push_event(EventKind.RESUME, timestamp=START + 20)
    assert not session.push_event(EventKind.RESUME, timestamp=START + 30)
    assert kinds(session) == ["pause", "resume"]


def test_rejected_transitions_are_logged(session, caplog):
    """Test that rejections tell the user why."""
    with caplog.at_level(logging.WARNING):
        session.push_event(EventKind.RESUME)
    assert "Currently not paused." in caplog.text

    session.push_event(EventKind.PAUSE)
    with caplog.at_level(logging.WARNING):
        session.push_event(EventKind.PAUSE)
    assert "Already paused." in caplog.text


@pytest.mark.parametrize("offset", [-5, 0, 10])
def test_timestamp_not_after_last_event_is_rejected(session, offset):
    """Test that events can only be appended after the last one."""
    session.push_event(EventKind.PAUSE, timestamp=START + 10)

    assert not session.push_event(EventKind.RESUME, timestamp=START + offset)
    assert kinds(session) == ["pause"]
    assert session.end == START + 11


def test_timestamp_must_be_after_start(session):
    """Test that the first event must come after the session start."""
    assert not session.push_event(EventKind.NOTE, timestamp=START, note="too early")
    assert session.events == []
    assert session.push_event(EventKind.NOTE, timestamp=START + 1, note="fine")


def test_clock_timestamps_stay_strictly_increasing(session):
    """Test that events within one clock second still get distinct timestamps."""
    session.push_event(EventKind.PAUSE)
    session.push_event(EventKind.RESUME)
    session.push_event(EventKind.NOTE, note="same second")

    timestamps = [event.timestamp for event in session.events]
    assert timestamps == [START + 1, START + 2, START + 3]


def test_clock_timestamp_is_used_when_omitted(session, fake_clock):
    """Test that events default to the current time."""
    fake_clock.advance(120)
    session.push_event(EventKind.PAUSE)

    assert session.events[0].timestamp == START + 120
    assert session.end == START + 121


def test_end_follows_last_event(session):
    """Test that every append re-derives the session end."""
    session.push_event(EventKind.NOTE, timestamp=START + 30, note="a")
    assert session.end == START + 31

    session.push_event(EventKind.PAUSE, timestamp=START + 90)
    assert session.end == START + 91


def test_note_while_paused_amends_pause(session):
    """Test that notes taken during a pause go into the pause's note."""
    session.push_event(EventKind.PAUSE, timestamp=START + 10, note="lunch")
    assert session.push_event(EventKind.NOTE, timestamp=START + 20, note="coffee too")

    assert kinds(session) == ["pause"]
    assert session.events[0].note == "lunch\ncoffee too"


def test_note_while_paused_creates_missing_pause_note(session):
    """Test that the first note of a pause without a reason becomes the reason."""
    session.push_event(EventKind.PAUSE, timestamp=START + 10)
    session.push_event(EventKind.NOTE, note="phone call")

    assert len(session.events) == 1
    assert session.events[0].note == "phone call"


def test_note_while_active_appends(session):
    """Test that notes on an active session are standalone events."""
    assert session.push_event(EventKind.NOTE, note="started refactoring")
    assert kinds(session) == ["note"]
    assert session.events[0].note == "started refactoring"


def test_commit_while_paused_inserts_one_resume(session, fake_clock):
    """Test that committing ends the pause first."""
    session.push_event(EventKind.PAUSE, timestamp=START + 10)
    fake_clock.advance(100)

    assert session.push_event(EventKind.COMMIT, note="Fix bug", commit_hash="abc123")

    assert kinds(session) == ["pause", "resume", "commit"]
    resume, commit = session.events[1], session.events[2]
    assert resume.timestamp == START + 100
    assert commit.timestamp == START + 101
    assert commit.hash == "abc123"
    assert commit.note == "Fix bug"
    assert session.pause_time() == 90


def test_commit_ignores_explicit_timestamp(session, fake_clock):
    """Test that commits are always recorded at the current time."""
    fake_clock.advance(300)
    session.push_event(EventKind.COMMIT, timestamp=START + 5, note="", commit_hash="abc")

    assert session.events[0].timestamp == START + 300


def test_commit_without_message_is_recorded(session, caplog):
    """Test that a missing commit message only warns."""
    with caplog.at_level(logging.WARNING):
        assert session.push_event(EventKind.COMMIT, commit_hash="deadbeef")

    assert "No commit message found for commit deadbeef." in caplog.text
    assert session.events[0].note is None
    assert session.commits == [session.events[0]]


def test_commit_needs_hash(session):
    """Test that a commit without a hash is a programming error."""
    with pytest.raises(ValueError):
        session.push_event(EventKind.COMMIT, note="msg")


def test_push_after_finalize_fails(session):
    """Test that a finalized session accepts no events."""
    session.finalize(START + 60)

    assert not session.push_event(EventKind.NOTE, note="late")
    assert not session.push_event(EventKind.COMMIT, note="", commit_hash="abc")
    assert session.events == []


def test_finalize_sets_end(session):
    """Test that finalizing closes the session one second after the timestamp."""
    assert session.finalize(START + 3600)

    assert not session.is_running
    assert session.phase == Phase.FINALIZED
    assert session.end == START + 3601
    assert session.working_time() == 3601


def test_finalize_uses_clock(session, fake_clock):
    """Test that finalizing without a timestamp uses the current time."""
    fake_clock.advance(600)
    session.finalize()
    assert session.end == START + 601


def test_finalize_while_paused_resumes(session):
    """Test that a paused session is resumed at the finalize timestamp."""
    session.push_event(EventKind.PAUSE, timestamp=START + 100)
    session.finalize(START + 400)

    assert kinds(session) == ["pause", "resume"]
    assert session.events[1].timestamp == START + 400
    assert session.pause_time() == 300
    assert session.working_time() == 401 - 300


def test_finalize_invalid_timestamp_is_fatal(session):
    """Test that an invalid end timestamp raises and changes nothing."""
    session.push_event(EventKind.PAUSE, timestamp=START + 100)

    with pytest.raises(FatalTimestampError) as excinfo:
        session.finalize(START + 50)

    assert excinfo.value.timestamp == START + 50
    assert session.is_running
    assert kinds(session) == ["pause"]
    assert session.end == START + 101


def test_finalize_twice_is_noop(session):
    """Test that a second finalize does not touch the session."""
    session.push_event(EventKind.NOTE, timestamp=START + 10, note="x")
    session.finalize(START + 100)
    snapshot = session.model_copy(deep=True)

    assert not session.finalize(START + 500)
    assert not session.finalize()
    assert session == snapshot


def test_pause_time_counts_closed_intervals():
    """Test that one pause from 100 to 150 counts 50 seconds."""
    session = Session.begin(50)
    session.push_event(EventKind.PAUSE, timestamp=100)
    session.push_event(EventKind.RESUME, timestamp=150)

    assert session.pause_time() == 50
    assert session.end == 151
    assert session.working_time() == 151 - 50 - 50


def test_open_pause_is_not_counted():
    """Test that a running pause contributes nothing."""
    session = Session.begin(0)
    session.push_event(EventKind.PAUSE, timestamp=100)
    session.push_event(EventKind.RESUME, timestamp=150)
    session.push_event(EventKind.PAUSE, timestamp=200)

    assert session.pause_time() == 50


def test_working_time_invariant_over_sequence(fake_clock):
    """Test working_time == end - start - pause_time after each operation."""
    session = Session.begin()
    steps = [
        lambda: session.push_event(EventKind.NOTE, note="start"),
        lambda: session.push_event(EventKind.PAUSE, timestamp=START + 50),
        lambda: session.push_event(EventKind.PAUSE, timestamp=START + 60),
        lambda: session.push_event(EventKind.NOTE, note="away"),
        lambda: session.push_event(EventKind.RESUME, timestamp=START + 200),
        lambda: session.push_event(EventKind.COMMIT, note="m", commit_hash="c1"),
        lambda: session.push_event(EventKind.PAUSE, timestamp=START + 400),
        lambda: session.finalize(START + 700),
    ]
    for step in steps:
        fake_clock.advance(7)
        step()
        assert session.working_time() == session.end - session.start - session.pause_time()

    assert session.pause_time() == 150 + 300


def test_add_branch(session):
    """Test that branches are collected only while running."""
    session.add_branch("main")
    session.add_branch("feature")
    session.add_branch("main")
    assert session.branches == {"main", "feature"}

    session.finalize(START + 10)
    session.add_branch("late")
    assert session.branches == {"main", "feature"}


def test_transition_table_is_complete():
    """Test that every active or paused phase handles every event kind."""
    for phase in (Phase.ACTIVE, Phase.PAUSED):
        for kind in EventKind:
            assert (phase, kind) in TRANSITIONS

    assert TRANSITIONS[(Phase.PAUSED, EventKind.NOTE)] == Transition.AMEND_PAUSE
    assert TRANSITIONS[(Phase.PAUSED, EventKind.COMMIT)] == Transition.RESUME_THEN_APPEND


def test_status(session):
    """Test the terminal status of a session."""
    session.push_event(EventKind.PAUSE, timestamp=START + 60)
    session.add_branch("main")

    status = session.status(now=START + 120)

    assert "Session running since 2 minutes." in status
    assert "Paused since 1 minute." in status
    assert "Worked on 1 branches: main" in status


def test_status_without_events(session):
    """Test the status of a fresh session."""
    assert "No events in this session yet!" in session.status(now=START + 5)
