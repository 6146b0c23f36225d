"""
Path composer — builds PATH from the packages of a manifest.

The new PATH is always composed from the *saved* pre-activation PATH,
never from the current one, so re-activation does not stack entries.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from pantry.core.cache.store import PackageCache
from pantry.core.config.settings import PathPrecedence
from pantry.core.models.manifest import Manifest


@dataclass
class PathComposition:
    """Executable dirs added for a manifest and the resulting PATH."""

    entries: list[str] = field(default_factory=list)
    path: str = ""

    def to_dict(self) -> dict:
        return {"entries": list(self.entries), "path": self.path}


def join_path(entries: list[str], original_path: str, sep: str = os.pathsep) -> str:
    """Prefix ``original_path`` with ``entries``.

    No entries leaves the original untouched; an empty original does not
    produce a trailing separator (which a shell would read as ``.``).
    """
    if not entries:
        return original_path
    if not original_path:
        return sep.join(entries)
    return sep.join([*entries, original_path])


def compose_path(
    manifest: Manifest,
    cache: PackageCache,
    original_path: str,
    precedence: PathPrecedence = PathPrecedence.DECLARATION,
    sep: str = os.pathsep,
) -> PathComposition:
    """Compose the activated PATH for ``manifest``.

    Args:
        manifest: Parsed manifest; duplicate packages count once.
        cache: Package cache to resolve installed versions from.
        original_path: The saved pre-activation PATH.
        precedence: ``DECLARATION`` puts earlier-declared packages first
            (``bin`` before ``sbin``). ``LAST_DECLARED`` is the reverse:
            later packages first, ``sbin`` before ``bin``.
        sep: PATH separator.

    Returns:
        PathComposition with the added entries in PATH order.
    """
    groups: list[list[str]] = []
    for name in manifest.unique_packages():
        dirs = [os.path.abspath(d) for d in cache.executable_dirs(name)]
        if dirs:
            groups.append(dirs)

    if precedence is PathPrecedence.LAST_DECLARED:
        entries = [d for group in reversed(groups) for d in reversed(group)]
    else:
        entries = [d for group in groups for d in group]

    return PathComposition(entries=entries, path=join_path(entries, original_path, sep))


def pantry_entries(path: str, home: Path, sep: str = os.pathsep) -> list[str]:
    """PATH entries that point into the package cache at ``home``."""
    root = os.path.abspath(home)
    prefix = root.rstrip(os.sep) + os.sep
    return [p for p in path.split(sep) if p and (p == root or p.startswith(prefix))]
