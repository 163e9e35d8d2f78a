"""Path utilities for consistent path handling across cigate."""

from pathlib import Path

from cigate_common.constants import CIGATE_HOME_DIR, LOG_SUBDIR, STATE_SUBDIR


def get_cigate_home() -> Path:
    """Get the cigate home directory (~/.cigate).

    Returns
    -------
    Path
        The cigate home directory path
    """
    return Path.home() / CIGATE_HOME_DIR


def get_cigate_log_dir() -> Path:
    """Get the cigate log directory (~/.cigate/log)."""
    return get_cigate_home() / LOG_SUBDIR


def get_cigate_state_dir() -> Path:
    """Get the directory holding cross-run state such as concurrency groups."""
    return get_cigate_home() / STATE_SUBDIR


def detect_repo_root(start: Path | None = None) -> Path:
    """Find the enclosing git repository root.

    Walks up from ``start`` (default: the current directory) looking for a ``.git``
    entry. Falls back to ``start`` when no repository is found.

    Parameters
    ----------
    start : Path | None
        Directory to start searching from

    Returns
    -------
    Path
        Repository root, or the starting directory
    """
    origin = (start or Path.cwd()).resolve()
    for candidate in (origin, *origin.parents):
        if (candidate / ".git").exists():
            return candidate
    return origin
