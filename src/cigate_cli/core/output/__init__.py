"""User-facing console output.

Commands take the shared instance from ``ctx.obj.output``; logging goes to the
log file separately.
"""

from cigate_cli.core.output.strategy import OutputStrategy, escape_workflow_data
from cigate_cli.core.output.verbosity import Verbosity

__all__ = [
    "OutputStrategy",
    "Verbosity",
    "escape_workflow_data",
]
