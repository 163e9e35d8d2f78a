"""Shared configuration utilities for cigate (cigate_common.config).

This package provides the YAML-based project/user configuration loader. Pipeline
definitions live in ``cigate.config``.
"""

from .project import deep_merge, default_config, load_merged_config

__all__ = [
    "deep_merge",
    "default_config",
    "load_merged_config",
]
