"""Per-repository configuration stored in .trk/config.json."""

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from trk import __version__

logger = logging.getLogger(__name__)


class TrackerConfig(BaseModel):
    """Settings for one tracked repository."""

    version: str = __version__
    created: str = Field(default_factory=lambda: datetime.now().isoformat())
    project_root: str = ""
    tidy: bool = True  # Run tidy on rendered reports
    open_reports: bool = True

    @classmethod
    def load(cls, config_file: Path) -> "TrackerConfig":
        """Load the configuration, falling back to defaults."""
        if not config_file.exists():
            return cls()

        try:
            return cls.model_validate_json(config_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Ignoring invalid config file %s: %s", config_file, e)
            return cls()

    def save(self, config_file: Path) -> None:
        config_file.write_text(json.dumps(self.model_dump(), indent=2), encoding="utf-8")
