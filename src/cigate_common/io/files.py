"""Reading pipeline/config files and writing shared run state.

Every failure surfaces as :class:`FileOperationError` carrying the path, so
callers translate one exception type into their own domain error.
"""

import contextlib
import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml


class FileOperationError(Exception):
    """A file could not be read, parsed or written."""


def _load(path: Path, kind: str, parse: Callable[[str], Any]) -> Any:
    if not path.is_file():
        msg = f"{kind} file does not exist: {path}"
        raise FileOperationError(msg)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Cannot read {kind} file {path}: {e}"
        raise FileOperationError(msg) from e
    try:
        return parse(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        msg = f"Invalid {kind} in {path}: {e}"
        raise FileOperationError(msg) from e


def safe_read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML document whose root is a mapping.

    An empty document reads as ``{}``; any other non-mapping root is an error,
    since pipeline and project files are always keyed.

    Raises
    ------
    FileOperationError
        If the file is missing, unreadable, malformed or not a mapping
    """
    data = _load(path, "YAML", yaml.safe_load)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"YAML root must be a mapping: {path}"
        raise FileOperationError(msg)
    return data


def safe_read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object; a non-object root reads as ``{}``."""
    data = _load(path, "JSON", json.loads)
    return data if isinstance(data, dict) else {}


def atomic_write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` without readers ever seeing a partial file.

    The content goes to a sibling temp file first and is then renamed over the
    target; on failure the temp file is removed.
    """
    ensure_dir(path.parent)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        Path(temp_name).replace(path)
    except OSError as e:
        with contextlib.suppress(OSError):
            Path(temp_name).unlink(missing_ok=True)
        msg = f"Cannot write {path}: {e}"
        raise FileOperationError(msg) from e


def safe_write_json(path: Path, data: dict[str, Any]) -> None:
    """Atomically write ``data`` as sorted, indented JSON."""
    try:
        text = json.dumps(data, indent=2, sort_keys=True)
    except (TypeError, ValueError) as e:
        msg = f"Cannot serialize JSON for {path}: {e}"
        raise FileOperationError(msg) from e
    atomic_write_text(path, text + "\n")


def ensure_dir(path: Path) -> Path:
    """Create ``path`` and its parents if needed and return it."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Cannot create directory {path}: {e}"
        raise FileOperationError(msg) from e
    return path
