"""
Activation state machine — reacts to directory changes.

States are ``Inactive`` and ``Active(directory, manifest)``, held in an
ActivationRecord that is loaded from and stored back into an explicit
environment mapping::

    Inactive --manifest found-------------> Active      install if needed, compose PATH
    Active   --same directory-------------> Active      ignored (last-dir marker)
    Active   --other dir, manifest found--> Active      full re-activation
    Active   --no manifest----------------> Inactive    restore saved PATH
    Inactive --no manifest----------------> Inactive    nothing to do

``deactivate()`` can also be called directly and is idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pantry.core.activation.path_composer import PathComposition, compose_path
from pantry.core.cache.store import PackageCache
from pantry.core.config.settings import PathPrecedence, Settings
from pantry.core.data.constants import ENV_PATH
from pantry.core.errors import ManifestNotFoundError
from pantry.core.install.installer import Installer, InstallReport, ResultCallback
from pantry.core.manifest.reader import find_manifest, load_manifest
from pantry.core.models.manifest import Manifest
from pantry.core.persistence.session_env import load_record, store_record
from pantry.core.registry.client import Opener, RegistryClient

logger = logging.getLogger(__name__)


class ActivationAction(str, Enum):
    """What an event did to the session."""

    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    NOOP = "noop"
    SKIPPED = "skipped"  # same directory as the previous event


@dataclass
class ActivationResult:
    """Outcome of one state-machine event."""

    action: ActivationAction
    directory: Path | None = None
    manifest: Manifest | None = None
    report: InstallReport | None = None
    composition: PathComposition | None = None
    restored_path: str | None = None

    @property
    def path_entries(self) -> list[str]:
        return list(self.composition.entries) if self.composition else []

    def to_dict(self) -> dict:
        result: dict = {"action": self.action.value}
        if self.directory is not None:
            result["directory"] = str(self.directory)
        if self.manifest is not None:
            result["manifest"] = str(self.manifest.path) if self.manifest.path else None
            result["packages"] = self.manifest.packages
        if self.report is not None:
            result["install"] = self.report.to_dict()
        if self.composition is not None:
            result["path_entries"] = self.path_entries
        return result


class Activator:
    """Drives activation for one session environment."""

    def __init__(
        self,
        environ: MutableMapping[str, str],
        cache: PackageCache,
        installer: Installer,
        precedence: PathPrecedence = PathPrecedence.DECLARATION,
    ):
        """
        Args:
            environ: Session environment; PATH and the ``PANTRY_*`` session
                variables are read from and written to it.
            cache: Package cache.
            installer: Installer used when packages are missing.
            precedence: PATH precedence policy between packages.
        """
        self.environ = environ
        self.cache = cache
        self.installer = installer
        self.precedence = precedence
        self.record = load_record(environ)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        environ: MutableMapping[str, str],
        opener: Opener | None = None,
        platform: str | None = None,
    ) -> "Activator":
        """Wire cache, registry client, and installer from settings."""
        cache = PackageCache(settings.home)
        registry = RegistryClient(settings.base_url, timeout=settings.timeout, opener=opener)
        installer = Installer(cache, registry, platform=platform)
        return cls(environ, cache, installer, precedence=settings.path_precedence)

    @property
    def search_path(self) -> str:
        return self.environ.get(ENV_PATH, "")

    @property
    def is_active(self) -> bool:
        return self.record.is_active

    # ── Events ──────────────────────────────────────────────────

    def on_directory_change(
        self,
        directory: Path,
        on_result: ResultCallback | None = None,
    ) -> ActivationResult:
        """Handle the shell entering ``directory``."""
        directory = Path(directory).resolve()
        if self.record.last_dir == str(directory) and not self._manifest_removed(directory):
            logger.debug("Already processed %s", directory)
            return ActivationResult(ActivationAction.SKIPPED, directory=directory)
        self.record.last_dir = str(directory)

        manifest_path = find_manifest(directory)
        if manifest_path is None:
            if self.record.is_active or self.record.original_path is not None:
                return self.deactivate()
            self._store()
            return ActivationResult(ActivationAction.NOOP, directory=directory)

        return self.activate(directory, manifest_path, on_result=on_result)

    def activate(
        self,
        directory: Path,
        manifest_path: Path | None = None,
        *,
        always_install: bool = False,
        on_result: ResultCallback | None = None,
    ) -> ActivationResult:
        """Activate ``directory``.

        The installer runs only when some package is missing from the
        cache, unless ``always_install`` asks for a per-package report
        (cached packages still cost no network call).

        Raises:
            ManifestNotFoundError: If ``directory`` has no manifest.
        """
        directory = Path(directory).resolve()
        manifest_path = manifest_path or find_manifest(directory)
        if manifest_path is None:
            raise ManifestNotFoundError(directory)

        manifest = load_manifest(manifest_path)
        if self.record.save_original_path(self.search_path):
            logger.debug("Saved original PATH")

        report = None
        if always_install or not self.cache.is_fully_installed(manifest):
            report = self.installer.install(manifest, on_result=on_result)

        composition = self.refresh_path(manifest)
        self.record.open(str(directory), manifest_path.name)
        self._store()

        logger.info(
            "Activated %s (%s): %d PATH entries",
            directory, manifest_path.name, len(composition.entries),
        )
        return ActivationResult(
            ActivationAction.ACTIVATED,
            directory=directory,
            manifest=manifest,
            report=report,
            composition=composition,
        )

    def deactivate(self) -> ActivationResult:
        """Restore the saved PATH and clear the session. Safe when inactive."""
        was_active = self.record.is_active
        saved = self.record.close()
        if saved is not None:
            self.environ[ENV_PATH] = saved
        self._store()

        if not was_active and saved is None:
            return ActivationResult(ActivationAction.NOOP)
        logger.info("Deactivated; PATH restored")
        return ActivationResult(ActivationAction.DEACTIVATED, restored_path=saved)

    def refresh_path(self, manifest: Manifest) -> PathComposition:
        """Recompose PATH for ``manifest`` from the saved original PATH."""
        self.record.save_original_path(self.search_path)
        original = self.record.original_path or ""
        composition = compose_path(manifest, self.cache, original, self.precedence)
        self.environ[ENV_PATH] = composition.path
        return composition

    # ── Private helpers ─────────────────────────────────────────

    def _store(self) -> None:
        store_record(self.record, self.environ)

    def _manifest_removed(self, directory: Path) -> bool:
        """True if ``directory`` is active but its manifest file is gone."""
        if not self.record.is_active or self.record.active_dir != str(directory):
            return False
        return not (directory / self.record.config_file).is_file()
