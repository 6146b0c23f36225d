"""Shell adapter — export statements and hook snippets."""

from pantry.adapters.shell.exports import (  # noqa: F401
    SUPPORTED_SHELLS,
    hook_snippet,
    render_exports,
)
