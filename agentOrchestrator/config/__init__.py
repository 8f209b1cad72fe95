"""Configuration package."""

from .settings import (
    ContextSettings,
    ModelRoutingSettings,
    ObservabilitySettings,
    OrchestrationSettings,
    Settings,
    get_settings,
)

__all__ = [
    "ContextSettings",
    "ModelRoutingSettings",
    "ObservabilitySettings",
    "OrchestrationSettings",
    "Settings",
    "get_settings",
]
