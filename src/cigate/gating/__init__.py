"""Stage gate resolution."""

from cigate.gating.resolver import GateDecision, GateResolver

__all__ = ["GateDecision", "GateResolver"]
