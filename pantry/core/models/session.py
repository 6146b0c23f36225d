"""
ActivationRecord — the per-session activation state.

Stored in the shell environment between events (see
``pantry.core.persistence.session_env``), never in module globals.
"""

from __future__ import annotations

from pydantic import BaseModel


class ActivationRecord(BaseModel):
    """State of one interactive session.

    ``original_path`` is captured on the first activation of a session
    and must not change until deactivation restores it.
    """

    active_dir: str = ""
    config_file: str = ""
    original_path: str | None = None
    last_dir: str = ""

    @property
    def is_active(self) -> bool:
        return bool(self.active_dir)

    def open(self, directory: str, config_file: str) -> None:
        """Mark ``directory`` as active under ``config_file``."""
        self.active_dir = directory
        self.config_file = config_file

    def save_original_path(self, path: str) -> bool:
        """Save the pre-activation PATH unless one is already saved.

        Returns:
            True if ``path`` was saved, False if a saved path already existed.
        """
        if self.original_path is not None:
            return False
        self.original_path = path
        return True

    def close(self) -> str | None:
        """Clear the session and return the saved PATH, if any.

        The last-processed-directory marker survives: it belongs to the
        event stream, not to the activation.
        """
        saved = self.original_path
        self.active_dir = ""
        self.config_file = ""
        self.original_path = None
        return saved
