"""File IO helpers."""

from .files import (
    FileOperationError,
    atomic_write_text,
    ensure_dir,
    safe_read_json,
    safe_read_yaml,
    safe_write_json,
)

__all__ = [
    "FileOperationError",
    "atomic_write_text",
    "ensure_dir",
    "safe_read_json",
    "safe_read_yaml",
    "safe_write_json",
]
