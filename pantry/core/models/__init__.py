"""
Domain models — Pydantic types for the activation engine.

    from pantry.core.models import Manifest, ManifestEntry, ActivationRecord
"""

from pantry.core.models.manifest import Manifest, ManifestEntry, SkippedLine
from pantry.core.models.session import ActivationRecord

__all__ = [
    # session.py
    "ActivationRecord",
    # manifest.py
    "Manifest",
    "ManifestEntry",
    "SkippedLine",
]
