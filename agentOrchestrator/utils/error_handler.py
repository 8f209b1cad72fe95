"""Error types and user-facing error formatting for orchestration."""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base exception for orchestration errors."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


class SessionNotFoundError(OrchestratorError):
    """A task was created against a session that does not exist.

    Only raised where a missing session means a caller bug; every other store
    operation tolerates a missing session.
    """

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class ModelInvocationError(OrchestratorError):
    """Error during model invocation."""
    pass


class MissingCredentialsError(OrchestratorError):
    """No API key is available to build a model client."""
    pass


def format_error_message(error: BaseException) -> str:
    """Return the text surfaced to users for a failed stage or worker.

    No tracebacks cross this boundary, only the message.
    """
    if isinstance(error, OrchestratorError):
        return error.user_message
    message = str(error)
    return message if message else "Unknown error"


__all__ = [
    "OrchestratorError",
    "SessionNotFoundError",
    "ModelInvocationError",
    "MissingCredentialsError",
    "format_error_message",
]
