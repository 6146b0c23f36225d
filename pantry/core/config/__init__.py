"""Configuration — settings file + environment overrides."""
