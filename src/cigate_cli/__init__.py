"""Command line interface for cigate."""

from cigate import __version__

__all__ = ["__version__"]
