"""Shared fixtures for trk tests."""

import tempfile
from pathlib import Path

import pytest
from git import Repo

START = 1_000_000


class FakeClock:
    """Stands in for trk.core.clock.now with a time that only moves on request."""

    def __init__(self, current: int = START):
        self.current = current

    def __call__(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        self.current += seconds
        return self.current


@pytest.fixture
def fake_clock(monkeypatch):
    """Freeze the clock at START."""
    fake = FakeClock()
    monkeypatch.setattr("trk.core.clock.now", fake)
    return fake


@pytest.fixture
def no_tidy(monkeypatch):
    """Skip running html-tidy on rendered reports."""
    calls = []
    monkeypatch.setattr("trk.core.tidy.format_document", lambda path: calls.append(path) or True)
    return calls


@pytest.fixture
def temp_git_project():
    """Create a temporary git project with one commit."""
    with tempfile.TemporaryDirectory() as temp_dir:
        project_path = Path(temp_dir).resolve()

        main_repo = Repo.init(project_path)
        with main_repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")

        (project_path / "test.py").write_text("print('test')\n")
        main_repo.index.add(["test.py"])
        main_repo.index.commit("Initial commit\n\nWith a body line.")

        yield project_path
