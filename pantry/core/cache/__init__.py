"""Package cache — the on-disk store of installed package versions."""

from pantry.core.cache.store import PackageCache, version_sort_key  # noqa: F401
