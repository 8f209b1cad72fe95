"""Builtin tools shipped with the orchestrator."""

from .now import now

__all__ = ["now"]
