"""
Session persistence — ActivationRecord ⇄ environment variables.

The shell is the only thing that lives across directory-change events,
so the record travels in its environment::

    PANTRY_ACTIVE    active directory ("" / unset = inactive)
    PANTRY_CONFIG    manifest filename of the active directory
    PANTRY_OLD_PATH  PATH before activation (present = saved)
    PANTRY_LAST_DIR  last directory a hook event was processed for
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping

from pantry.core.data.constants import (
    ENV_ACTIVE,
    ENV_CONFIG,
    ENV_LAST_DIR,
    ENV_OLD_PATH,
)
from pantry.core.models.session import ActivationRecord

logger = logging.getLogger(__name__)

EnvChanges = dict[str, str | None]


def load_record(environ: Mapping[str, str]) -> ActivationRecord:
    """Read the activation record from an environment mapping."""
    record = ActivationRecord(
        active_dir=environ.get(ENV_ACTIVE, ""),
        config_file=environ.get(ENV_CONFIG, ""),
        original_path=environ.get(ENV_OLD_PATH),
        last_dir=environ.get(ENV_LAST_DIR, ""),
    )
    logger.debug("Loaded session record: %s", record)
    return record


def store_record(record: ActivationRecord, environ: MutableMapping[str, str]) -> None:
    """Write ``record`` into ``environ``; empty fields are removed."""
    values: dict[str, str | None] = {
        ENV_ACTIVE: record.active_dir or None,
        ENV_CONFIG: record.config_file or None,
        ENV_OLD_PATH: record.original_path,
        ENV_LAST_DIR: record.last_dir or None,
    }
    for key, value in values.items():
        if value is None:
            environ.pop(key, None)
        else:
            environ[key] = value


def env_changes(before: Mapping[str, str], after: Mapping[str, str]) -> EnvChanges:
    """Variables that differ between two environments.

    Returns:
        ``{name: new_value}`` for set/changed variables and
        ``{name: None}`` for removed ones, sorted by name.
    """
    changes: EnvChanges = {}
    for key in sorted(set(before) | set(after)):
        old, new = before.get(key), after.get(key)
        if old != new:
            changes[key] = new
    return changes
