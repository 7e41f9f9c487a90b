"""Pretty-print rendered documents with html-tidy."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

TIDY_COMMAND = ["tidy", "--tidy-mark", "no", "-i", "-m"]


def format_document(path: Path) -> bool:
    """Indent a document in place; failures are logged and ignored."""
    try:
        result = subprocess.run(  # noqa: S603
            TIDY_COMMAND + [str(path)], capture_output=True, text=True, check=False
        )
    except FileNotFoundError:
        logger.warning("tidy-html not found!")
        return False

    # tidy exits with 1 for warnings and 2 for errors
    if result.returncode > 1:
        logger.warning("tidy failed on %s: %s", path, result.stderr.strip())
        return False
    return True
