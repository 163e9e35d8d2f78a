"""CI pipeline orchestration: change gating, ephemeral runners, concurrency groups."""

__version__ = "0.1.0"
