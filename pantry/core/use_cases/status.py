"""
Status use cases — session status and cache listing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from pantry.core.activation.path_composer import pantry_entries
from pantry.core.cache.store import PackageCache
from pantry.core.config.settings import Settings
from pantry.core.data.constants import ENV_PATH
from pantry.core.persistence.session_env import load_record


@dataclass
class StatusResult:
    """Activation status of a session."""

    active: bool = False
    directory: str = ""
    config_file: str = ""
    path_entries: list[str] = field(default_factory=list)
    home: str = ""

    def to_dict(self) -> dict:
        return {
            "active": self.active,
            "directory": self.directory or None,
            "config": self.config_file or None,
            "path_entries": list(self.path_entries),
            "home": self.home,
        }


def get_status(environ: Mapping[str, str], settings: Settings) -> StatusResult:
    """Describe the session held in ``environ``."""
    record = load_record(environ)
    result = StatusResult(home=str(settings.home))
    if not record.is_active:
        return result

    result.active = True
    result.directory = record.active_dir
    result.config_file = record.config_file
    result.path_entries = pantry_entries(environ.get(ENV_PATH, ""), settings.home)
    return result


def list_packages(settings: Settings) -> dict[str, list[str]]:
    """Installed packages and their versions, by package name."""
    return PackageCache(settings.home).list_installed()
