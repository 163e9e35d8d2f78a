"""Path glob matching for component definitions.

Glob syntax:

- ``**`` matches any run of characters, including ``/``
- ``**/`` matches zero or more leading directories
- ``*`` matches within a single path segment
- ``?`` matches one character other than ``/``
- ``[...]`` is a character class (``[!...]`` negates)

Patterns are anchored at both ends and compared against repository-relative POSIX
paths.
"""

import re
from collections.abc import Iterable
from functools import lru_cache


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a compiled, fully anchored regular expression."""
    pattern = pattern.lstrip("/").removeprefix("./")
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    parts.append("(?:.*/)?")
                    i += 1
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                parts.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                i = end
        else:
            parts.append(re.escape(c))
        i += 1
    return re.compile("".join(parts) + r"\Z")


def match_glob(pattern: str, path: str) -> bool:
    """Check whether ``path`` matches ``pattern``."""
    return compile_glob(pattern).match(normalize_path(path)) is not None


def normalize_path(path: str) -> str:
    """Normalize a changed path to repository-relative POSIX form."""
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


class PathMatcher:
    """Two-pass matcher: the include set minus the exclude set.

    A path belongs to the matcher when at least one include glob matches it and no
    exclude glob does. Exclusions always win, regardless of ordering.

    Parameters
    ----------
    include : Iterable[str]
        Positive globs
    exclude : Iterable[str]
        Negative globs
    """

    def __init__(self, include: Iterable[str], exclude: Iterable[str] = ()) -> None:
        self.include = tuple(include)
        self.exclude = tuple(exclude)
        self._include_re = [compile_glob(p) for p in self.include]
        self._exclude_re = [compile_glob(p) for p in self.exclude]

    def matches(self, path: str) -> bool:
        """Check whether a single path is selected."""
        path = normalize_path(path)
        if not any(r.match(path) for r in self._include_re):
            return False
        return not any(r.match(path) for r in self._exclude_re)

    def filter(self, paths: Iterable[str]) -> list[str]:
        """Return the selected paths, preserving order."""
        return [p for p in paths if self.matches(p)]

    def any_match(self, paths: Iterable[str]) -> bool:
        """Check whether at least one path is selected."""
        return any(self.matches(p) for p in paths)

    def __repr__(self) -> str:
        return f"PathMatcher(include={self.include!r}, exclude={self.exclude!r})"
