"""
Manifest — the parsed dependency declaration of one directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ManifestEntry(BaseModel):
    """One declared dependency line."""

    name: str
    value: str = ""  # reserved for version constraints; unused by the engine
    line: int = 0


class SkippedLine(BaseModel):
    """A dependency-section line the reader could not interpret."""

    line: int
    text: str
    reason: str


class Manifest(BaseModel):
    """Ordered package declarations read from a manifest file.

    Duplicate names are kept as declared; consumers that care
    (path composition) de-duplicate on their own.
    """

    path: Path | None = None
    entries: list[ManifestEntry] = Field(default_factory=list)
    skipped: list[SkippedLine] = Field(default_factory=list)

    @property
    def packages(self) -> list[str]:
        """Package names in declaration order."""
        return [e.name for e in self.entries]

    @property
    def directory(self) -> Path | None:
        return self.path.parent if self.path else None

    @property
    def filename(self) -> str:
        return self.path.name if self.path else ""

    def unique_packages(self) -> list[str]:
        """Package names in declaration order, first occurrence only."""
        seen: set[str] = set()
        out: list[str] = []
        for name in self.packages:
            if name not in seen:
                seen.add(name)
                out.append(name)
        return out
