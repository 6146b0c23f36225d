"""
Constants shared across pantry: manifest names, cache layout, registry
defaults, and the session environment variables.
"""

from __future__ import annotations

from pathlib import Path

# Manifest filenames, in probe priority order.
MANIFEST_FILENAMES: tuple[str, ...] = ("pantry.yaml", "deps.yaml", ".pantry.yaml")

# Top-level manifest keys the reader understands.
DEPENDENCIES_KEY = "dependencies"
SERVICES_KEY = "services"

# ── Cache layout ────────────────────────────────────────────────

DEFAULT_HOME = Path.home() / ".pantry"

# Version directory names that never count as an installed version.
CURRENT_MARKER = "current"
TEMP_SUFFIX = ".tmp"

# Executable directories exposed on PATH, in per-package order.
EXECUTABLE_DIRS: tuple[str, ...] = ("bin", "sbin")

# Transient download artifact inside an install directory.
ARCHIVE_FILENAME = "package.tar.gz"

# Non-package entries that may live at the cache root.
CACHE_ROOT_IGNORE: frozenset[str] = frozenset({"env.sh", "config.yml"})

# ── Registry ────────────────────────────────────────────────────

DEFAULT_BUCKET = "pantry-registry"
DEFAULT_REGION = "us-east-1"
DEFAULT_TIMEOUT = 60

# Architecture name normalization for platform strings (<os>-<arch>).
# Anything not listed passes through unchanged.
_ARCH_MAP: dict[str, str] = {
    "aarch64": "arm64",
    "arm64": "arm64",      # macOS (Darwin reports arm64)
    "x86_64": "x86-64",
}

# Artifacts below this size are scanned for object-store error markers.
SUSPICIOUS_ARCHIVE_BYTES = 1000
ERROR_PAGE_MARKERS: tuple[bytes, ...] = (b"xml", b"Error", b"NoSuchKey")

# ── Session environment ─────────────────────────────────────────

ENV_PATH = "PATH"
ENV_ACTIVE = "PANTRY_ACTIVE"
ENV_CONFIG = "PANTRY_CONFIG"
ENV_OLD_PATH = "PANTRY_OLD_PATH"
ENV_LAST_DIR = "PANTRY_LAST_DIR"

SESSION_ENV_KEYS: tuple[str, ...] = (ENV_ACTIVE, ENV_CONFIG, ENV_OLD_PATH, ENV_LAST_DIR)
