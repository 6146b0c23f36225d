"""Activation — PATH composition and the directory-change state machine."""

from pantry.core.activation.path_composer import (  # noqa: F401
    PathComposition,
    compose_path,
    join_path,
    pantry_entries,
)
from pantry.core.activation.state_machine import (  # noqa: F401
    ActivationAction,
    ActivationResult,
    Activator,
)
