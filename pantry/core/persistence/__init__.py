"""Persistence — session state carried in the shell environment."""
