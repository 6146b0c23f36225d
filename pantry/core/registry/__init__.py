"""
Registry client — metadata and platform archives from the object store.
"""

from pantry.core.registry.archive import extract_archive, validate_archive  # noqa: F401
from pantry.core.registry.client import (  # noqa: F401
    RegistryClient,
    archive_candidates,
    extract_latest_version,
)
from pantry.core.registry.platform import detect_platform, normalize_arch  # noqa: F401
