"""Install git hooks that feed commits and branches into trk."""

from pathlib import Path
from typing import Callable, Dict, List, Tuple

HOOK_MARKER = "# trk integration"
SHEBANG = "#!/bin/sh\n"

POST_COMMIT_HOOK = """# trk integration - record commits in the timesheet
if [ -d ".trk" ]; then
    trk commit "$(git rev-parse HEAD)" || true
fi
"""

POST_CHECKOUT_HOOK = """# trk integration - record branches worked on
if [ -d ".trk" ]; then
    trk branch || true
fi
"""

GIT_HOOKS: Dict[str, str] = {
    "post-commit": POST_COMMIT_HOOK,
    "post-checkout": POST_CHECKOUT_HOOK,
}


def get_git_hooks_dir(project_root: Path) -> Path:
    """Get the hooks directory of the project's git repository."""
    return project_root / ".git" / "hooks"


def install_git_hooks(
    project_root: Path,
    force: bool = False,
    confirm: Callable[[str], bool] = lambda question: True,
) -> List[Tuple[str, str]]:
    """Install the trk hooks, returning (hook name, outcome) pairs.

    Existing hooks without trk integration get the trk block appended if
    ``confirm`` agrees, unless ``force`` replaces them outright.
    """
    hooks_dir = get_git_hooks_dir(project_root)
    if not hooks_dir.parent.exists():
        raise ValueError(f"No git repository found in {project_root}")
    hooks_dir.mkdir(exist_ok=True)

    results = []
    for hook_name, hook_content in GIT_HOOKS.items():
        hook_file = hooks_dir / hook_name
        outcome = "installed"
        content = SHEBANG + hook_content

        if hook_file.exists() and not force:
            existing_content = hook_file.read_text()
            if HOOK_MARKER in existing_content:
                results.append((hook_name, "unchanged"))
                continue
            if not confirm(f"Git hook {hook_name} exists. Add trk integration?"):
                results.append((hook_name, "skipped"))
                continue
            content = existing_content.rstrip("\n") + "\n\n" + hook_content
            outcome = "appended"

        hook_file.write_text(content)
        hook_file.chmod(0o755)  # Make executable
        results.append((hook_name, outcome))

    return results


def uninstall_git_hooks(project_root: Path) -> List[Tuple[str, str]]:
    """Remove the trk blocks from the git hooks."""
    hooks_dir = get_git_hooks_dir(project_root)

    results = []
    for hook_name in GIT_HOOKS:
        hook_file = hooks_dir / hook_name
        if not hook_file.exists():
            results.append((hook_name, "missing"))
            continue

        content = hook_file.read_text()
        if HOOK_MARKER not in content:
            results.append((hook_name, "untouched"))
            continue

        remaining = strip_trk_block(content)
        if remaining.strip() in ("", SHEBANG.strip()):
            hook_file.unlink()
            results.append((hook_name, "removed"))
        else:
            hook_file.write_text(remaining)
            results.append((hook_name, "cleaned"))

    return results


def strip_trk_block(content: str) -> str:
    """Remove every trk block (marker line through its closing ``fi``)."""
    kept = []
    in_block = False
    for line in content.splitlines():
        if line.startswith(HOOK_MARKER):
            in_block = True
            continue
        if in_block:
            if line.strip() == "fi":
                in_block = False
            continue
        kept.append(line)

    return "\n".join(kept).strip("\n") + "\n"
