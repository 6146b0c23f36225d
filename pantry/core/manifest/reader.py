"""
Manifest reader — finds and parses ``pantry.yaml`` / ``deps.yaml``.

The manifest format is a restricted, line-oriented subset of YAML::

    dependencies:
      bun.sh: ^1.2
      org/tool: "*"
    services:
      ...

Only the indented entries directly under the top-level ``dependencies:``
key are read. ``services:`` ends parsing; so does any other top-level key
that follows the dependency section. Lines the reader cannot interpret
are skipped without raising and kept on ``Manifest.skipped``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pantry.core.data.constants import DEPENDENCIES_KEY, MANIFEST_FILENAMES, SERVICES_KEY
from pantry.core.errors import ManifestNotFoundError
from pantry.core.models.manifest import Manifest, ManifestEntry, SkippedLine

logger = logging.getLogger(__name__)

# Stands in for bytes that are not valid UTF-8 (see load_manifest).
_UNDECODABLE = "\ufffd"


def find_manifest(directory: Path | None = None) -> Path | None:
    """Probe ``directory`` for a manifest file.

    Args:
        directory: Directory to look in (default: cwd). Parents are not searched.

    Returns:
        Absolute path of the first manifest found, in
        ``MANIFEST_FILENAMES`` order, or None.
    """
    base = (directory or Path.cwd()).resolve()
    for name in MANIFEST_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def parse_manifest(text: str, source: Path | None = None) -> Manifest:
    """Parse manifest text into an ordered list of entries."""
    manifest = Manifest(path=source)
    in_section = False
    entry_indent: int | None = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if raw[0] not in " \t":
            key = stripped.split(":", 1)[0].strip()
            if key == SERVICES_KEY:
                break
            if key == DEPENDENCIES_KEY:
                in_section = True
                continue
            if in_section:
                break
            continue

        if not in_section:
            continue

        indent = len(raw) - len(raw.lstrip(" \t"))
        if entry_indent is None:
            entry_indent = indent

        if indent > entry_indent:
            _skip(manifest, lineno, stripped, "nested under an entry")
            continue
        if stripped.startswith("-"):
            _skip(manifest, lineno, stripped, "list item")
            continue
        if ":" not in stripped:
            _skip(manifest, lineno, stripped, "missing ':'")
            continue
        if _UNDECODABLE in stripped:
            _skip(manifest, lineno, stripped, "invalid UTF-8")
            continue

        name, _, value = stripped.partition(":")
        name = _unquote(name.strip())
        if not name:
            _skip(manifest, lineno, stripped, "empty package name")
            continue

        manifest.entries.append(
            ManifestEntry(name=name, value=_clean_value(value), line=lineno)
        )

    return manifest


def load_manifest(path: Path) -> Manifest:
    """Read and parse a manifest file."""
    path = path.resolve()
    text = path.read_bytes().decode("utf-8", errors="replace")
    manifest = parse_manifest(text, source=path)
    logger.debug(
        "Read %d packages from %s (%d lines skipped)",
        len(manifest.entries), path, len(manifest.skipped),
    )
    return manifest


def read_manifest(directory: Path | None = None) -> Manifest:
    """Find and parse the manifest of ``directory``.

    Raises:
        ManifestNotFoundError: If the directory has no manifest.
    """
    base = (directory or Path.cwd()).resolve()
    path = find_manifest(base)
    if path is None:
        raise ManifestNotFoundError(base)
    return load_manifest(path)


# ── Private helpers ───────────────────────────────────────

def _skip(manifest: Manifest, lineno: int, text: str, reason: str) -> None:
    logger.debug("Skipping manifest line %d (%s): %r", lineno, reason, text)
    manifest.skipped.append(SkippedLine(line=lineno, text=text, reason=reason))


def _clean_value(value: str) -> str:
    value = value.strip()
    if value.startswith("#"):
        return ""
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return _unquote(value)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text
