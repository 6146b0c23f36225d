"""Installer — populates the package cache from the registry."""

from pantry.core.install.installer import (  # noqa: F401
    InstallReport,
    Installer,
    PackageResult,
    PackageStatus,
)
