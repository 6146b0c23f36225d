"""
Package cache — ``<root>/<package>/<version>/{bin,sbin}``.

Answers presence and version queries for the activator and creates,
finalizes, or prunes install directories for the installer.
Package names may contain ``/`` and then map to nested directories.
"""

from __future__ import annotations

import logging
import re
import shutil
import stat
from pathlib import Path

from pantry.core.data.constants import (
    CACHE_ROOT_IGNORE,
    CURRENT_MARKER,
    EXECUTABLE_DIRS,
    TEMP_SUFFIX,
)
from pantry.core.models.manifest import Manifest

logger = logging.getLogger(__name__)

_RUN_RE = re.compile(r"(\d+)")

# Guard against walking arbitrarily deep trees in list_installed().
_MAX_NAME_DEPTH = 4


def version_sort_key(version: str) -> tuple:
    """Sort key comparing numeric runs as numbers (``sort -V`` style).

    ``"1.10.0"`` sorts after ``"1.2.0"``; a version with extra trailing
    segments sorts after its prefix.
    """
    key: list[tuple[int, int | str]] = []
    for part in _RUN_RE.split(version):
        if not part:
            continue
        if part.isdigit():
            key.append((1, int(part)))
        else:
            key.append((0, part))
    return tuple(key)


def _is_version_name(name: str) -> bool:
    return name != CURRENT_MARKER and not name.endswith(TEMP_SUFFIX)


class PackageCache:
    """Shared local package cache rooted at ``root``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"PackageCache(root={self.root})"

    def package_dir(self, package: str) -> Path:
        return self.root / package

    # ── Queries ─────────────────────────────────────────────────

    def is_fully_installed(self, manifest: Manifest) -> bool:
        """True if every declared package has a non-empty cache directory.

        Stops at the first package that is missing or empty.
        """
        for name in manifest.packages:
            pkg_dir = self.package_dir(name)
            if not pkg_dir.is_dir() or not any(pkg_dir.iterdir()):
                logger.debug("Package %s not in cache (%s)", name, pkg_dir)
                return False
        return True

    def installed_versions(self, package: str) -> list[str]:
        """Installed versions of ``package``, lowest first.

        ``current`` and in-progress ``*.tmp`` directories are excluded.
        """
        pkg_dir = self.package_dir(package)
        if not pkg_dir.is_dir():
            return []
        names = [
            child.name
            for child in pkg_dir.iterdir()
            if child.is_dir() and _is_version_name(child.name)
        ]
        return sorted(names, key=version_sort_key)

    def resolve_installed_version(self, package: str) -> str | None:
        """Highest installed version of ``package``, or None."""
        versions = self.installed_versions(package)
        return versions[-1] if versions else None

    def version_dir(self, package: str, version: str) -> Path:
        return self.package_dir(package) / version

    def executable_dirs(self, package: str) -> list[Path]:
        """Existing ``bin``/``sbin`` dirs of the resolved version, in that order."""
        version = self.resolve_installed_version(package)
        if version is None:
            return []
        base = self.version_dir(package, version)
        return [base / d for d in EXECUTABLE_DIRS if (base / d).is_dir()]

    def list_installed(self) -> dict[str, list[str]]:
        """Map every cached package name to its installed versions.

        A directory is a package when one of its children holds ``bin`` or
        ``sbin``; otherwise it is treated as a name prefix (``org/``) and
        searched further.
        """
        found: dict[str, list[str]] = {}
        if not self.root.is_dir():
            return found

        def _walk(directory: Path, depth: int) -> None:
            for child in sorted(directory.iterdir()):
                if not child.is_dir() or child.name in CACHE_ROOT_IGNORE:
                    continue
                name = child.relative_to(self.root).as_posix()
                if self._looks_like_package(child):
                    found[name] = self.installed_versions(name)
                elif depth < _MAX_NAME_DEPTH:
                    _walk(child, depth + 1)

        _walk(self.root, 1)
        return found

    @staticmethod
    def _looks_like_package(directory: Path) -> bool:
        for version in directory.iterdir():
            if not version.is_dir():
                continue
            if any((version / d).is_dir() for d in EXECUTABLE_DIRS):
                return True
        return False

    # ── Install lifecycle ───────────────────────────────────────

    def begin_install(self, package: str, version: str) -> Path:
        """Create (with parents) the install directory for ``package@version``."""
        install_dir = self.version_dir(package, version)
        install_dir.mkdir(parents=True, exist_ok=True)
        return install_dir

    def abort_install(self, install_dir: Path) -> None:
        """Remove a failed install so later presence checks don't see it.

        The package directory goes too if nothing else is left in it.
        """
        shutil.rmtree(install_dir, ignore_errors=True)
        pkg_dir = install_dir.parent
        try:
            if pkg_dir != self.root and pkg_dir.is_dir() and not any(pkg_dir.iterdir()):
                pkg_dir.rmdir()
        except OSError as e:
            logger.debug("Could not prune %s: %s", pkg_dir, e)

    def finalize_install(self, install_dir: Path) -> None:
        """Mark files in ``bin/`` and ``sbin/`` executable."""
        for sub in EXECUTABLE_DIRS:
            exe_dir = install_dir / sub
            if not exe_dir.is_dir():
                continue
            for entry in exe_dir.iterdir():
                if entry.is_symlink() or not entry.is_file():
                    continue
                mode = entry.stat().st_mode
                entry.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
