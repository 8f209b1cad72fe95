"""Default model resolver wiring using environment-derived settings.

Converts credentials supplied with an orchestration request (falling back
to the configured ones) into a ChatOpenAI instance. The resolver is a plain
callable so tests and embedders can inject any LangChain chat model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from agentOrchestrator.config import Settings
from agentOrchestrator.utils.error_handler import MissingCredentialsError


@dataclass(frozen=True)
class Credentials:
    """Per-request model credentials (from the caller's credential storage)."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None


ModelResolver = Callable[[Optional[Credentials]], BaseChatModel]


def _chat_kwargs(settings: Settings, credentials: Optional[Credentials]) -> Dict[str, object]:
    models = settings.models
    api_key = (credentials.api_key if credentials else None) or models.api_key
    if not api_key:
        raise MissingCredentialsError(
            f"Missing API key for model {models.model_id}",
            user_message="No API key available for plan agent",
        )
    kwargs: Dict[str, object] = {
        "model": models.model_id,
        "api_key": api_key,
        "temperature": models.temperature,
    }
    base_url = (credentials.base_url if credentials else None) or models.base_url
    if base_url:
        kwargs["base_url"] = base_url
    return kwargs


def build_model_resolver(settings: Settings) -> ModelResolver:
    """Construct a resolver that returns ChatOpenAI-compatible clients.

    Args:
        settings: Application settings (model id, fallback key, base url)

    Returns:
        ModelResolver: Function that takes Credentials and returns a ChatOpenAI instance

    Raises:
        MissingCredentialsError: If neither the credentials nor the settings carry an API key
    """

    def resolver(credentials: Optional[Credentials] = None) -> BaseChatModel:
        return ChatOpenAI(**_chat_kwargs(settings, credentials))

    return resolver


__all__ = ["Credentials", "ModelResolver", "build_model_resolver"]
