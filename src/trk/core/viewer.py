"""Open rendered reports for the user."""

import logging
import webbrowser
from pathlib import Path

logger = logging.getLogger(__name__)


def open_document(path: Path) -> bool:
    """Open a document in the default browser."""
    url = Path(path).resolve().as_uri()
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error:
        logger.exception("Failed to launch browser for %s", url)
        return False

    if not opened:
        logger.warning("No browser available to open %s", url)
    return opened
