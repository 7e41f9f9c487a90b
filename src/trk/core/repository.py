"""Storage of a project's timesheet in the .trk directory."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from trk.core import tidy, vcs
from trk.core.config import TrackerConfig
from trk.core.report import STYLESHEETS, render_session, render_timesheet
from trk.errors import StorageError
from trk.models.timesheet import Timesheet

logger = logging.getLogger(__name__)

GITIGNORE_ENTRY = ".trk/"


class TrackerRepository:
    """Manages the timesheet, config and reports of a project."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)
        self.trk_dir = self.project_root / ".trk"
        self.timesheet_file = self.trk_dir / "timesheet.json"
        self.config_file = self.trk_dir / "config.json"
        self.timesheet_report = self.trk_dir / "timesheet.html"
        self.session_report = self.trk_dir / "session.html"
        self._config: Optional[TrackerConfig] = None

    @property
    def config(self) -> TrackerConfig:
        """Get the repository configuration, loading it if needed."""
        if self._config is None:
            self._config = TrackerConfig.load(self.config_file)
        return self._config

    def exists(self) -> bool:
        """Check if a valid timesheet has been initialized."""
        return self.timesheet_file.exists() and self.load() is not None

    def init(self, author_name: Optional[str] = None) -> Timesheet:
        """Create and save a new timesheet.

        The owner defaults to the git ``user.name``. Raises ValueError if a
        timesheet already exists or no name can be found.
        """
        if self.exists():
            raise ValueError("Timesheet is already initialized!")

        if author_name is None:
            author_name = vcs.current_author_name(self.project_root)
        if not author_name:
            raise ValueError(
                "Empty name not permitted.\nPlease run with 'trk init <name>'"
            )

        self._ensure_dir()
        if not self.config_file.exists():
            self._config = TrackerConfig(project_root=str(self.project_root))
            self._config.save(self.config_file)

        sheet = Timesheet.create(author_name)
        self.save(sheet)
        return sheet

    def load(self) -> Optional[Timesheet]:
        """Load the timesheet, None if there is no valid one."""
        if not self.timesheet_file.exists():
            return None

        try:
            serialized = self.timesheet_file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Could not decode %s: %s", self.timesheet_file, e)
            return None
        except OSError as e:
            raise StorageError("IO error while reading the timesheet file.") from e

        try:
            return Timesheet.model_validate_json(serialized)
        except ValidationError as e:
            logger.warning("Could not parse %s: %s", self.timesheet_file, e)
            return None

    def save(self, sheet: Timesheet) -> bool:
        """Write the timesheet and refresh the reports."""
        self._ensure_dir()

        try:
            self.timesheet_file.write_text(
                sheet.model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            logger.error("Could not open timesheet.json file: %s", e)
            return False

        return self.write_reports(sheet)

    def write_reports(self, sheet: Timesheet, since: Optional[int] = None) -> bool:
        """Render the timesheet and last session reports."""
        self._ensure_dir()

        try:
            for name, content in STYLESHEETS.items():
                stylesheet = self.trk_dir / name
                if not stylesheet.exists():
                    stylesheet.write_text(content, encoding="utf-8")

            self.timesheet_report.write_text(
                render_timesheet(sheet, since), encoding="utf-8"
            )
            written = [self.timesheet_report]

            session = sheet.last_session
            if session is not None:
                self.session_report.write_text(
                    render_session(sheet, session), encoding="utf-8"
                )
                written.append(self.session_report)
        except OSError as e:
            logger.warning("Could not report sheet! %s", e)
            return False

        if self.config.tidy:
            for path in written:
                tidy.format_document(path)
        return True

    def clear(self) -> Timesheet:
        """Start over with an empty timesheet for the same user."""
        sheet = self.load()
        name = sheet.user if sheet is not None else None

        if self.timesheet_file.exists():
            try:
                self.timesheet_file.unlink()
            except OSError as e:
                logger.warning("Could not remove sessions file: %s", e)

        return self.init(name)

    def add_to_gitignore(self) -> bool:
        """Add .trk/ to the project's .gitignore, False if already there."""
        gitignore_path = self.project_root / ".gitignore"

        if gitignore_path.exists():
            existing_content = gitignore_path.read_text(encoding="utf-8")
            lines = existing_content.splitlines()
        else:
            existing_content = ""
            lines = []

        if any(line.strip() in [".trk/", ".trk", "/.trk/", "/.trk"] for line in lines):
            return False

        new_content = existing_content
        if existing_content and not existing_content.endswith("\n"):
            new_content += "\n"

        # Keep some spacing after existing entries
        if lines:
            new_content += "\n"
        new_content += f"# trk time tracking\n{GITIGNORE_ENTRY}\n"

        gitignore_path.write_text(new_content, encoding="utf-8")
        return True

    def _ensure_dir(self) -> None:
        try:
            self.trk_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise StorageError("Could not create .trk directory.") from e
