"""Static data — constants shared across the core layers."""
