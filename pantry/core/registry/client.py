"""
Registry client — HTTP access to the binary registry.

Layout of the registry (an S3 bucket by convention, any HTTP endpoint
in practice)::

    {base}/binaries/{package}/metadata.json
    {base}/binaries/{package}/{version}/{platform}/{archive}.tar.gz

Metadata lookups fail soft (``None``); archive downloads raise
``DownloadError`` for the installer to turn into a per-package result.
"""

from __future__ import annotations

import http.client
import logging
import re
import shutil
import urllib.error
import urllib.request
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pantry import __version__
from pantry.core.data.constants import DEFAULT_TIMEOUT
from pantry.core.errors import DownloadError

logger = logging.getLogger(__name__)

_LATEST_VERSION_RE = re.compile(r'"latestVersion"\s*:\s*"([^"]*)"')

Opener = Callable[..., Any]


def extract_latest_version(metadata: str | None) -> str | None:
    """Scan metadata text for ``"latestVersion": "..."``.

    Tolerant by intent: the document does not have to be valid JSON.
    """
    if not metadata:
        return None
    m = _LATEST_VERSION_RE.search(metadata)
    if not m or not m.group(1).strip():
        return None
    return m.group(1).strip()


def archive_candidates(package: str, version: str) -> list[str]:
    """Archive filenames to try, in order.

    Primary: ``/`` in the name becomes ``-``. Alternate: ``.`` becomes
    ``-``. When both spell the same name it is only tried once.
    """
    names = [
        f"{package.replace('/', '-')}-{version}.tar.gz",
        f"{package.replace('.', '-')}-{version}.tar.gz",
    ]
    return list(dict.fromkeys(names))


class RegistryClient:
    """Fetches package metadata and platform archives."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        opener: Opener | None = None,
    ):
        """
        Args:
            base_url: Registry endpoint, e.g.
                ``https://pantry-registry.s3.us-east-1.amazonaws.com``.
            timeout: Per-request timeout in seconds.
            opener: ``urlopen``-compatible callable (injected in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._opener = opener or urllib.request.urlopen

    def __repr__(self) -> str:
        return f"RegistryClient(base_url={self.base_url})"

    # ── URLs ────────────────────────────────────────────────────

    def metadata_url(self, package: str) -> str:
        return f"{self.base_url}/binaries/{package}/metadata.json"

    def archive_url(self, package: str, version: str, platform: str, filename: str) -> str:
        return f"{self.base_url}/binaries/{package}/{version}/{platform}/{filename}"

    # ── Metadata ────────────────────────────────────────────────

    def fetch_metadata(self, package: str) -> str | None:
        """Fetch ``metadata.json`` for ``package``.

        Returns:
            The document text, or None if it is missing, empty, or the
            request failed.
        """
        url = self.metadata_url(package)
        try:
            with self._open(url) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            logger.debug("Metadata for %s: HTTP %s", package, e.code)
            return None
        except (OSError, ValueError, http.client.HTTPException) as e:
            logger.warning("Metadata request for %s failed: %s", package, e)
            return None

        text = body.decode("utf-8", errors="replace").strip()
        return text or None

    # ── Archives ────────────────────────────────────────────────

    def download_archive(self, package: str, version: str, platform: str, dest: Path) -> Path:
        """Download the platform archive of ``package@version`` to ``dest``.

        Each candidate filename is tried in order; the first success wins.

        Raises:
            DownloadError: If every candidate failed.
        """
        failures: list[str] = []
        for filename in archive_candidates(package, version):
            url = self.archive_url(package, version, platform, filename)
            try:
                self._fetch_to_file(url, dest)
            except urllib.error.HTTPError as e:
                failures.append(f"{filename}: HTTP {e.code}")
            except (DownloadError, OSError, ValueError, http.client.HTTPException) as e:
                failures.append(f"{filename}: {e}")
            else:
                logger.debug("Downloaded %s to %s", url, dest)
                return dest
            dest.unlink(missing_ok=True)
            logger.debug("Archive candidate failed: %s", failures[-1])

        raise DownloadError(package, f"{package}: download error ({'; '.join(failures)})")

    # ── Private helpers ─────────────────────────────────────────

    def _open(self, url: str):
        req = urllib.request.Request(url, headers={"User-Agent": f"pantry/{__version__}"})
        return self._opener(req, timeout=self.timeout)

    def _fetch_to_file(self, url: str, dest: Path) -> None:
        with self._open(url) as resp:
            headers = getattr(resp, "headers", None) or {}
            content_type = (headers.get("Content-Type") or "").lower()
            if "xml" in content_type:
                raise DownloadError(url, f"error document ({content_type})")
            with open(dest, "wb") as f:
                shutil.copyfileobj(resp, f)
