"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from helpers import BASE_URL, PLATFORM, FakeRegistry

from pantry.core.cache.store import PackageCache
from pantry.core.install.installer import Installer
from pantry.core.registry.client import RegistryClient


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Return an empty package cache directory."""
    root = tmp_path / "pantry-home"
    root.mkdir()
    return root


@pytest.fixture
def cache(cache_root: Path) -> PackageCache:
    return PackageCache(cache_root)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def registry(fake_registry: FakeRegistry) -> RegistryClient:
    return RegistryClient(BASE_URL, timeout=5, opener=fake_registry)


@pytest.fixture
def installer(cache: PackageCache, registry: RegistryClient) -> Installer:
    return Installer(cache, registry, platform=PLATFORM)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Return an empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path
