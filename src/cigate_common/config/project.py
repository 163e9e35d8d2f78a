"""Project/user YAML configuration loading for cigate.

This module locates, loads, and deep-merges configuration from user
(~/.config/cigate/config.yaml) and project (.cigate.yaml) files on top of built-in
defaults.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

from cigate_common.constants import (
    DEFAULT_BRANCH,
    PROJECT_CONFIG_FILE,
    USER_CONFIG_DIR,
    USER_CONFIG_FILE,
)
from cigate_common.io import FileOperationError, safe_read_yaml
from cigate_common.path import get_cigate_state_dir

_DEFAULTS: dict[str, Any] = {
    "defaults": {
        "log_level": "INFO",
        "output": "text",
    },
    "runner": {
        "provision_timeout": 900,
        "poll_interval": 10,
    },
    "concurrency": {
        "queue_timeout": 3600,
        "poll_interval": 15,
        "stale_after": 21600,
        "protected_branches": [DEFAULT_BRANCH],
    },
    "notify": {
        "username": "cigate",
    },
    "executor": {
        "command_template": "make {target}",
    },
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge two dictionaries in place and return ``base``.

    Values from ``override`` take precedence. Nested dicts are merged
    recursively; other values are replaced.
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def default_config() -> dict[str, Any]:
    """Return a fresh copy of the built-in configuration."""
    cfg = copy.deepcopy(_DEFAULTS)
    cfg["defaults"]["state_dir"] = str(get_cigate_state_dir())
    return cfg


def load_yaml(path: Path) -> dict[str, Any]:
    """Load an optional YAML config file.

    Returns an empty dict when the file is missing or unreadable so a broken user
    config never blocks a CI run.
    """
    if not path.exists():
        return {}
    try:
        return safe_read_yaml(path)
    except FileOperationError:
        return {}


def get_user_config_path() -> Path:
    """Get path to user-level cigate configuration file."""
    return Path.home() / ".config" / USER_CONFIG_DIR / USER_CONFIG_FILE


def get_project_config_path(repo_root: Path) -> Path:
    """Get path to project-level cigate configuration file."""
    return repo_root / PROJECT_CONFIG_FILE


def load_merged_config(repo_root: Path) -> dict[str, Any]:
    """Load default + user + project YAML config into a single dict."""
    cfg = default_config()

    user_cfg = load_yaml(get_user_config_path())
    if user_cfg:
        deep_merge(cfg, user_cfg)

    project_cfg = load_yaml(get_project_config_path(repo_root))
    if project_cfg:
        deep_merge(cfg, project_cfg)

    return cfg
