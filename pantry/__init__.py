"""pantry — directory-scoped dependency activator."""

__version__ = "0.1.0"
