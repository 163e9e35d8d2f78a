"""Change-set evaluation: which components changed between two revisions."""

from cigate.changes.evaluator import ChangeSetEvaluator
from cigate.changes.git import GitChangeSource, detect_changes
from cigate.changes.globs import PathMatcher, compile_glob, match_glob

__all__ = [
    "ChangeSetEvaluator",
    "GitChangeSource",
    "PathMatcher",
    "compile_glob",
    "detect_changes",
    "match_glob",
]
