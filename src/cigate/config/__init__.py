"""Pipeline definition loading."""

from cigate.config.loader import load_pipeline, parse_pipeline, split_globs

__all__ = ["load_pipeline", "parse_pipeline", "split_globs"]
