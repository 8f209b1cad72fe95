"""Runtime wiring and public entry points."""

from .app import Orchestrator, build_orchestrator
from .model_resolver import Credentials, ModelResolver, build_model_resolver

__all__ = ["Credentials", "ModelResolver", "Orchestrator", "build_model_resolver", "build_orchestrator"]
