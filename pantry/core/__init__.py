"""Core engine — manifest, cache, registry, installer, activation."""
