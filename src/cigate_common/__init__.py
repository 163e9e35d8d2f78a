"""Shared utilities for cigate packages (environment, paths, IO, config, processes)."""
