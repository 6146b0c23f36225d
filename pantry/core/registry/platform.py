"""
Platform string detection — ``<os>-<arch>`` as used in registry paths.
"""

from __future__ import annotations

import platform as _platform

from pantry.core.data.constants import _ARCH_MAP


def normalize_arch(machine: str) -> str:
    """Map a ``uname -m`` style name to the registry's naming."""
    return _ARCH_MAP.get(machine, machine)


def detect_platform(system: str | None = None, machine: str | None = None) -> str:
    """Return the registry platform string for this (or the given) host.

    >>> detect_platform("Darwin", "arm64")
    'darwin-arm64'
    >>> detect_platform("Linux", "x86_64")
    'linux-x86-64'
    """
    os_name = (system if system is not None else _platform.system()).lower()
    arch = normalize_arch(machine if machine is not None else _platform.machine())
    return f"{os_name}-{arch}"
