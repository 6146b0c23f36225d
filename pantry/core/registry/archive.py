"""
Downloaded archive checks and extraction.

The size/content check is a heuristic: object stores answer a missing
key with a short XML error document, which would otherwise be saved as
``package.tar.gz``. It is not an integrity checksum.
"""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from pantry.core.data.constants import ERROR_PAGE_MARKERS, SUSPICIOUS_ARCHIVE_BYTES
from pantry.core.errors import BadArchiveError, ExtractionError

logger = logging.getLogger(__name__)


def looks_like_error_page(data: bytes) -> bool:
    """True if a small artifact contains an object-store error marker."""
    if len(data) >= SUSPICIOUS_ARCHIVE_BYTES:
        return False
    return any(marker in data for marker in ERROR_PAGE_MARKERS)


def validate_archive(path: Path, package: str = "") -> None:
    """Reject a downloaded artifact that is really an error response.

    Raises:
        BadArchiveError: If the artifact is small and carries an error marker.
    """
    if path.stat().st_size >= SUSPICIOUS_ARCHIVE_BYTES:
        return
    if looks_like_error_page(path.read_bytes()):
        raise BadArchiveError(package or path.name)


def extract_archive(archive: Path, dest: Path, package: str = "") -> None:
    """Extract a ``.tar.gz`` into ``dest``.

    Raises:
        ExtractionError: If the archive is unreadable or extraction fails.
    """
    try:
        with tarfile.open(archive, "r:gz") as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(dest, filter="data")
            else:
                tar.extractall(dest)
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ExtractionError(package or archive.name, f"Cannot extract {archive.name}: {e}") from e
    logger.debug("Extracted %s into %s", archive, dest)
