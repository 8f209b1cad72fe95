"""Environment-bound configuration objects.

This module provides Pydantic BaseSettings-based configuration loading from .env files.
All settings classes automatically load from environment variables with support for
multiple alias names (e.g., MODEL_ID and MODEL_NAME both work).

Example:
    from agentOrchestrator.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    plan_steps = settings.orchestration.plan_max_steps
    cap = settings.context.max_tool_result_chars
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class ModelRoutingSettings(BaseSettings):
    """Model identifier, provider family and credentials for agent runs.

    The api key here is only a fallback: credentials passed to
    ``start_orchestration`` take precedence.
    """

    model_id: str = Field(
        default="gpt-4o",
        validation_alias=AliasChoices("MODEL_ID", "MODEL_NAME", "MODEL_CHAT"),
    )
    provider: str = Field(
        default="openai",
        validation_alias=AliasChoices("MODEL_PROVIDER"),
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_API_KEY", "OPENAI_API_KEY"),
    )
    base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_BASE_URL", "OPENAI_BASE_URL"),
    )
    context_window: int = Field(
        default=128000,
        validation_alias=AliasChoices("MODEL_CONTEXT_WINDOW"),
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices("MODEL_TEMPERATURE"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
        populate_by_name=True,
    )


class OrchestrationSettings(BaseSettings):
    """Step caps and fan-out limits for the plan/execute pipeline.

    - plan_max_steps: model steps allowed in the Plan stage
    - execute_max_steps: model steps allowed in the Execute stage
    - explore_max_steps: model steps per exploration worker
    - sub_executor_max_steps: model steps per execution worker
    - max_concurrent_workers: optional cap on simultaneously running workers
      (None means every worker in a batch starts at once)
    """

    plan_max_steps: int = Field(default=15, ge=1, le=200, alias="PLAN_MAX_STEPS")
    execute_max_steps: int = Field(default=30, ge=1, le=200, alias="EXECUTE_MAX_STEPS")
    explore_max_steps: int = Field(default=10, ge=1, le=100, alias="EXPLORE_MAX_STEPS")
    sub_executor_max_steps: int = Field(default=20, ge=1, le=100, alias="SUB_EXECUTOR_MAX_STEPS")
    max_concurrent_workers: Optional[int] = Field(default=None, ge=1, alias="MAX_CONCURRENT_WORKERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class ContextSettings(BaseSettings):
    """Context budgeting configuration.

    - chars_per_token: heuristic ratio used when no exact counter is available
    - max_tool_result_chars: cap applied to a single tool result before budgeting
    - response_buffer_tokens: space reserved for the model's reply
    - min_keep_messages: most recent turns always retained
    - exact_token_counting: use the chat model's own token counter when possible
    """

    chars_per_token: float = Field(default=2.0, gt=0, alias="CONTEXT_CHARS_PER_TOKEN")
    max_tool_result_chars: int = Field(default=8000, ge=200, alias="MAX_TOOL_RESULT_CHARS")
    head_ratio: float = Field(default=0.7, gt=0, lt=1, alias="TRUNCATION_HEAD_RATIO")
    response_buffer_tokens: int = Field(default=8000, ge=0, alias="RESPONSE_BUFFER_TOKENS")
    min_keep_messages: int = Field(default=2, ge=0, alias="CONTEXT_MIN_KEEP_MESSAGES")
    exact_token_counting: bool = Field(default=True, alias="EXACT_TOKEN_COUNTING")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration.

    - log_level: console log level name
    - log_dir: directory for detailed log files
    - log_prompt_max_length: preview length for prompts/results in debug logs
    """

    log_level: str = Field(default="WARNING", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_prompt_max_length: int = Field(default=500, ge=100, le=5000, alias="LOG_PROMPT_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Root application settings loaded from .env file.

    Hierarchical structure containing four nested settings groups:
    - models: Model routing and API credentials (ModelRoutingSettings)
    - orchestration: Step caps and fan-out limits (OrchestrationSettings)
    - context: Context budgeting (ContextSettings)
    - observability: Logging (ObservabilitySettings)

    Use get_settings() to obtain a cached singleton instance.
    """

    environment: str = Field(default="dev", alias="APP_ENV")
    models: ModelRoutingSettings = Field(default_factory=ModelRoutingSettings)
    orchestration: OrchestrationSettings = Field(default_factory=OrchestrationSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Returns:
        Settings: Cached application settings instance
    """
    return Settings()
