"""
Installer — per-package cache population.

For each declared package, in order:

    cached? → metadata → latestVersion → download (primary, alternate)
            → validate → extract → chmod → installed

Packages are processed one at a time. A failure is recorded against
its package and the run moves on; nothing raised by the network or the
filesystem escapes ``Installer.install``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from pantry.core.cache.store import PackageCache
from pantry.core.data.constants import ARCHIVE_FILENAME
from pantry.core.errors import BadArchiveError, DownloadError, ExtractionError, RegistryError
from pantry.core.models.manifest import Manifest
from pantry.core.registry.archive import extract_archive, validate_archive
from pantry.core.registry.client import RegistryClient, extract_latest_version
from pantry.core.registry.platform import detect_platform

logger = logging.getLogger(__name__)


class PackageStatus(str, Enum):
    """Outcome of one package."""

    CACHED = "cached"
    INSTALLED = "installed"
    NOT_FOUND = "not_found"
    NO_VERSION = "no_version"
    DOWNLOAD_ERROR = "download_error"
    BAD_ARCHIVE = "bad_archive"
    EXTRACT_ERROR = "extract_error"

    @property
    def ok(self) -> bool:
        return self in (PackageStatus.CACHED, PackageStatus.INSTALLED)


_ERROR_STATUS: dict[type[RegistryError], PackageStatus] = {
    DownloadError: PackageStatus.DOWNLOAD_ERROR,
    BadArchiveError: PackageStatus.BAD_ARCHIVE,
    ExtractionError: PackageStatus.EXTRACT_ERROR,
}


@dataclass
class PackageResult:
    """Result of installing (or finding) one package."""

    name: str
    status: PackageStatus
    version: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status.ok

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status.value,
            "version": self.version,
            "error": self.error,
        }


@dataclass
class InstallReport:
    """Aggregate of one installer run."""

    results: list[PackageResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[PackageResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[PackageResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok_count(self) -> int:
        return len(self.succeeded)

    @property
    def fail_count(self) -> int:
        return len(self.failed)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok_count,
            "failed": self.fail_count,
            "packages": [r.to_dict() for r in self.results],
        }


ResultCallback = Callable[[PackageResult], None]


class Installer:
    """Ensures manifest packages are present in the cache."""

    def __init__(
        self,
        cache: PackageCache,
        registry: RegistryClient,
        platform: str | None = None,
    ):
        self.cache = cache
        self.registry = registry
        self.platform = platform or detect_platform()

    def install(self, manifest: Manifest, on_result: ResultCallback | None = None) -> InstallReport:
        """Install every package of ``manifest`` that is not cached yet.

        Args:
            manifest: Parsed manifest.
            on_result: Called with each PackageResult as soon as it is known.

        Returns:
            InstallReport with one result per declared package.
        """
        report = InstallReport()
        logger.info("Installing %d packages for %s", len(manifest.entries), self.platform)

        for name in manifest.packages:
            result = self.install_package(name)
            report.results.append(result)
            if on_result is not None:
                on_result(result)

        logger.info("Install finished: %d ok, %d failed", report.ok_count, report.fail_count)
        return report

    def install_package(self, name: str) -> PackageResult:
        """Run the cache-check → download → extract sequence for one package."""
        cached = self.cache.resolve_installed_version(name)
        if cached:
            logger.debug("%s@%s already cached", name, cached)
            return PackageResult(name, PackageStatus.CACHED, version=cached)

        metadata = self.registry.fetch_metadata(name)
        if not metadata:
            logger.warning("Package %s not found in registry", name)
            return PackageResult(name, PackageStatus.NOT_FOUND, error="metadata not found")

        version = extract_latest_version(metadata)
        if not version:
            logger.warning("Package %s has no latestVersion in its metadata", name)
            return PackageResult(name, PackageStatus.NO_VERSION, error="no latestVersion in metadata")

        install_dir = self.cache.begin_install(name, version)
        archive = install_dir / ARCHIVE_FILENAME
        try:
            self.registry.download_archive(name, version, self.platform, archive)
            validate_archive(archive, package=name)
            extract_archive(archive, install_dir, package=name)
            archive.unlink(missing_ok=True)
            self.cache.finalize_install(install_dir)
        except RegistryError as e:
            self.cache.abort_install(install_dir)
            status = _ERROR_STATUS.get(type(e), PackageStatus.DOWNLOAD_ERROR)
            logger.warning("Failed to install %s@%s: %s", name, version, e)
            return PackageResult(name, status, version=version, error=str(e))
        except OSError as e:
            self.cache.abort_install(install_dir)
            logger.warning("Failed to install %s@%s: %s", name, version, e)
            return PackageResult(name, PackageStatus.EXTRACT_ERROR, version=version, error=str(e))
        except Exception as e:
            # One package never ends the run
            self.cache.abort_install(install_dir)
            logger.warning("Failed to install %s@%s: %r", name, version, e)
            return PackageResult(name, PackageStatus.DOWNLOAD_ERROR, version=version, error=repr(e))

        logger.info("Installed %s@%s into %s", name, version, install_dir)
        return PackageResult(name, PackageStatus.INSTALLED, version=version)
