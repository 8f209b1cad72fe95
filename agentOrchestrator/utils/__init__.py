"""Shared helpers: logging and error handling."""

from .error_handler import (
    MissingCredentialsError,
    ModelInvocationError,
    OrchestratorError,
    SessionNotFoundError,
    format_error_message,
)
from .logging_utils import (
    log_error,
    log_stage_transition,
    log_tool_call,
    log_tool_result,
    setup_logging,
)

__all__ = [
    "MissingCredentialsError",
    "ModelInvocationError",
    "OrchestratorError",
    "SessionNotFoundError",
    "format_error_message",
    "log_error",
    "log_stage_transition",
    "log_tool_call",
    "log_tool_result",
    "setup_logging",
]
