"""Manifest reader — locate and parse dependency manifests."""

from pantry.core.manifest.reader import (  # noqa: F401
    find_manifest,
    load_manifest,
    parse_manifest,
    read_manifest,
)
