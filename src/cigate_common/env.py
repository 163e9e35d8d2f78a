"""Typed environment variable readers.

All cigate packages read configuration from the environment through these helpers so
that boolean/integer coercion behaves the same everywhere.
"""

import os
from collections.abc import Mapping

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})


def _source(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def read_str(
    name: str,
    default: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Read a string environment variable.

    Empty and whitespace-only values are treated as unset.

    Parameters
    ----------
    name : str
        Variable name
    default : str | None
        Value returned when the variable is unset or blank
    environ : Mapping[str, str] | None
        Environment to read from (defaults to ``os.environ``)

    Returns
    -------
    str | None
        Stripped value or ``default``
    """
    raw = _source(environ).get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def read_bool(
    name: str,
    default: bool = False,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Read a boolean environment variable.

    Unrecognized values fall back to ``default``.
    """
    raw = read_str(name, environ=environ)
    if raw is None:
        return default
    normalized = raw.lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def read_int(
    name: str,
    default: int,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Read an integer environment variable, falling back to ``default``."""
    raw = read_str(name, environ=environ)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default
