"""Tests for git hook installation."""

import os

import pytest

from trk.cli.setup_hooks import (
    HOOK_MARKER,
    install_git_hooks,
    strip_trk_block,
    uninstall_git_hooks,
)


@pytest.fixture
def hooks_dir(temp_git_project):
    return temp_git_project / ".git" / "hooks"


def test_install_creates_executable_hooks(temp_git_project, hooks_dir):
    """Test installing into a repository without hooks."""
    results = install_git_hooks(temp_git_project)

    assert dict(results) == {"post-commit": "installed", "post-checkout": "installed"}
    post_commit = hooks_dir / "post-commit"
    content = post_commit.read_text()
    assert content.startswith("#!/bin/sh\n")
    assert 'trk commit "$(git rev-parse HEAD)"' in content
    assert os.access(post_commit, os.X_OK)
    post_checkout = (hooks_dir / "post-checkout").read_text()
    assert "trk branch || true" in post_checkout
    assert "rev-parse" not in post_checkout


def test_install_is_idempotent(temp_git_project, hooks_dir):
    """Test that installed hooks are left alone."""
    install_git_hooks(temp_git_project)
    before = (hooks_dir / "post-commit").read_text()

    results = install_git_hooks(temp_git_project)

    assert dict(results)["post-commit"] == "unchanged"
    assert (hooks_dir / "post-commit").read_text() == before


def test_install_appends_to_existing_hook(temp_git_project, hooks_dir):
    """Test that foreign hooks keep their content."""
    (hooks_dir / "post-commit").write_text("#!/bin/sh\necho committed\n")

    results = install_git_hooks(temp_git_project, confirm=lambda question: True)

    assert dict(results)["post-commit"] == "appended"
    content = (hooks_dir / "post-commit").read_text()
    assert content.startswith("#!/bin/sh\necho committed\n\n")
    assert HOOK_MARKER in content


def test_install_skips_when_declined(temp_git_project, hooks_dir):
    """Test that a declined prompt leaves the hook unchanged."""
    (hooks_dir / "post-commit").write_text("#!/bin/sh\necho committed\n")

    results = install_git_hooks(temp_git_project, confirm=lambda question: False)

    assert dict(results)["post-commit"] == "skipped"
    assert (hooks_dir / "post-commit").read_text() == "#!/bin/sh\necho committed\n"


def test_install_outside_git(tmp_path):
    """Test that installing needs a git repository."""
    with pytest.raises(ValueError):
        install_git_hooks(tmp_path)


def test_uninstall(temp_git_project, hooks_dir):
    """Test removing and cleaning hooks."""
    (hooks_dir / "post-commit").write_text("#!/bin/sh\necho committed\n")
    install_git_hooks(temp_git_project)

    results = dict(uninstall_git_hooks(temp_git_project))

    assert results == {"post-commit": "cleaned", "post-checkout": "removed"}
    assert (hooks_dir / "post-commit").read_text() == "#!/bin/sh\necho committed\n"
    assert not (hooks_dir / "post-checkout").exists()


def test_strip_trk_block_keeps_surrounding_lines():
    """Test that only the trk block is removed."""
    content = (
        "#!/bin/sh\nbefore\n\n# trk integration - x\nif true; then\n"
        "    trk commit x\nfi\nafter\n"
    )
    assert strip_trk_block(content) == "#!/bin/sh\nbefore\n\nafter\n"
