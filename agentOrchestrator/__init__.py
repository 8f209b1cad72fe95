"""Top-level package exports for agentOrchestrator."""

from .runtime.app import Orchestrator, build_orchestrator
from .runtime.model_resolver import Credentials

__version__ = "0.1.0"

__all__ = ["Credentials", "Orchestrator", "build_orchestrator", "__version__"]
