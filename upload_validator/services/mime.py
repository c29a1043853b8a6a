import logging
from pathlib import Path

import magic

logger = logging.getLogger(__name__)


def resolve_mime_type(path: str) -> str | None:
    """Sniff the MIME type of an already-received file from its content.

    Returns ``None`` when the path is empty, the file is gone, or libmagic
    cannot identify it; callers treat that as a non-matching type.
    """
    if not path:
        logger.warning("MIME resolution skipped: empty file path")
        return None
    if not Path(path).is_file():
        logger.warning("MIME resolution failed: file not found at %s", path)
        return None
    try:
        mime = magic.from_file(path, mime=True)
    except (magic.MagicException, OSError) as e:
        logger.warning("MIME resolution failed for %s: %s", path, e)
        return None
    logger.debug("Resolved MIME type for %s: %s", path, mime)
    return mime or None
