"""Use cases — read-only views over the session and the cache."""
