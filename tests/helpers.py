"""
Test helpers — archives, a fake registry transport, cache layouts.

The registry is never contacted: ``FakeRegistry`` stands in for
``urllib.request.urlopen`` and serves canned responses by URL.
"""

from __future__ import annotations

import io
import tarfile
import textwrap
import urllib.error
from pathlib import Path

from pantry.core.registry.client import archive_candidates

BASE_URL = "https://pantry-registry.s3.us-east-1.amazonaws.com"
PLATFORM = "linux-x86-64"


def make_tarball(files: dict[str, str]) -> bytes:
    """Build a .tar.gz in memory from ``{member_path: content}``."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeResponse(io.BytesIO):
    """Minimal stand-in for an ``http.client.HTTPResponse``."""

    def __init__(self, data: bytes, content_type: str = "application/octet-stream"):
        super().__init__(data)
        self.headers = {"Content-Type": content_type}


class FakeRegistry:
    """``urlopen``-compatible callable serving registered URLs; others 404."""

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.responses: dict[str, tuple[bytes, str]] = {}
        self.calls: list[str] = []

    def __call__(self, request, timeout=None):
        url = request.full_url if hasattr(request, "full_url") else request
        self.calls.append(url)
        if url not in self.responses:
            raise urllib.error.HTTPError(url, 404, "Not Found", hdrs=None, fp=None)
        data, content_type = self.responses[url]
        return FakeResponse(data, content_type)

    def serve(self, url: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        self.responses[url] = (data, content_type)

    def serve_metadata(self, package: str, body: str) -> None:
        self.serve(
            f"{self.base_url}/binaries/{package}/metadata.json",
            body.encode("utf-8"),
            "application/json",
        )

    def serve_package(
        self,
        package: str,
        version: str,
        files: dict[str, str] | None = None,
        platform: str = PLATFORM,
        candidate: int = 0,
    ) -> str:
        """Serve metadata plus an archive under one of the candidate names."""
        self.serve_metadata(package, f'{{"name": "{package}", "latestVersion": "{version}"}}')
        filename = archive_candidates(package, version)[candidate]
        url = f"{self.base_url}/binaries/{package}/{version}/{platform}/{filename}"
        tool = package.rsplit("/", 1)[-1].split(".")[0]
        self.serve(url, make_tarball(files or {f"bin/{tool}": "#!/bin/sh\necho ok\n"}))
        return url


def install_fake(root: Path, package: str, version: str, dirs: tuple[str, ...] = ("bin",)) -> Path:
    """Lay out an installed package version directly in the cache."""
    base = root / package / version
    for d in dirs:
        (base / d).mkdir(parents=True, exist_ok=True)
        (base / d / "tool").write_text("#!/bin/sh\n")
    return base


def write_manifest(directory: Path, content: str, name: str = "pantry.yaml") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(textwrap.dedent(content))
    return path
