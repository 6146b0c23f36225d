"""
Error taxonomy for the activation engine.

Run-level errors (``ConfigError``, ``ManifestNotFoundError``) reach the
CLI and abort the command. Registry errors are per-package: the
installer converts them into failed results and moves on.
"""

from __future__ import annotations

from pathlib import Path


class PantryError(Exception):
    """Base class for all pantry errors."""


class ConfigError(PantryError):
    """Raised when settings are invalid or unreadable."""


class ManifestNotFoundError(PantryError):
    """Raised when a command needs a manifest and the directory has none."""

    def __init__(self, directory: Path):
        self.directory = directory
        super().__init__(f"No pantry.yaml or deps.yaml found in {directory}")


class RegistryError(PantryError):
    """Base class for per-package registry failures."""

    reason = "registry error"

    def __init__(self, package: str, message: str = ""):
        self.package = package
        super().__init__(message or f"{package}: {self.reason}")


class DownloadError(RegistryError):
    """No archive candidate could be downloaded."""

    reason = "download error"


class BadArchiveError(RegistryError):
    """The downloaded artifact is an object-store error page, not an archive."""

    reason = "bad archive"


class ExtractionError(RegistryError):
    """The downloaded archive could not be extracted."""

    reason = "extract error"
