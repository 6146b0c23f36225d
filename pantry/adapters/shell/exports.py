"""
Shell adapter — turns environment changes into shell statements.

A child process cannot change its parent's environment, so session
commands print statements for the shell to evaluate::

    eval "$(pantry hook --shell zsh)"

Only POSIX-family shells (bash, zsh) are supported.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping

SUPPORTED_SHELLS: tuple[str, ...] = ("bash", "zsh")

_HOOK_COMMON = """\
_pantry_hook() {
  eval "$(command %(exe)s hook --shell %(shell)s)"
}

pantry() {
  case "$1" in
    env|deactivate)
      case " $* " in
        *" --json "*|*" --json-output "*)
          command %(exe)s "$@"
          ;;
        *)
          eval "$(command %(exe)s "$@" --shell %(shell)s)"
          ;;
      esac
      ;;
    *)
      command %(exe)s "$@"
      ;;
  esac
}
"""

_HOOK_ZSH = """\
autoload -Uz add-zsh-hook
add-zsh-hook chpwd _pantry_hook
_pantry_hook
"""

_HOOK_BASH = """\
if [[ ";${PROMPT_COMMAND:-};" != *";_pantry_hook;"* ]]; then
  PROMPT_COMMAND="_pantry_hook${PROMPT_COMMAND:+;$PROMPT_COMMAND}"
fi
_pantry_hook
"""


def _check_shell(shell: str) -> str:
    if shell not in SUPPORTED_SHELLS:
        raise ValueError(f"Unsupported shell: {shell} (expected one of {', '.join(SUPPORTED_SHELLS)})")
    return shell


def render_exports(changes: Mapping[str, str | None], shell: str = "bash") -> str:
    """Render ``{name: value | None}`` as ``export`` / ``unset`` lines.

    Returns:
        The statements joined by newlines, or ``""`` when nothing changed.
    """
    _check_shell(shell)
    lines: list[str] = []
    for name, value in changes.items():
        if value is None:
            lines.append(f"unset {name}")
        else:
            lines.append(f"export {name}={shlex.quote(value)}")
    return "\n".join(lines)


def hook_snippet(shell: str = "bash", exe: str = "pantry") -> str:
    """Return the integration snippet for ``eval "$(pantry shellenv)"``."""
    _check_shell(shell)
    body = _HOOK_COMMON % {"exe": shlex.quote(exe), "shell": shell}
    return body + "\n" + (_HOOK_ZSH if shell == "zsh" else _HOOK_BASH)
