"""How much of a run the console shows."""

from enum import IntEnum


class Verbosity(IntEnum):
    """Console detail levels, ordered so they compare with ``>=``."""

    NORMAL = 0  # stage table, errors, warnings
    VERBOSE = 1  # -v: changed paths, gate reasons
    DEBUG = 2  # -vvv or a GitHub debug re-run: lifecycle traces

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        verbose_debug: bool = False,
        runner_debug: bool = False,
    ) -> "Verbosity":
        """Pick a level from the CLI flags.

        ``runner_debug`` mirrors ``RUNNER_DEBUG=1``, which GitHub sets when a
        workflow is re-run with debug logging; it implies the DEBUG level.
        """
        if verbose_debug or runner_debug:
            return cls.DEBUG
        return cls.VERBOSE if verbose else cls.NORMAL
