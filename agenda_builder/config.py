"""Configuration for agenda building, generation and the record store.

Agenda defaults are passed explicitly to the functions that need them;
`DEFAULT_SETTINGS` is used when none are given.

Numeric settings read from the environment are parsed when a settings object
is built, and a malformed value raises ValueError naming the variable.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class AgendaSettings:
    """Named defaults for agenda drafting and duration validation."""

    default_duration_minutes: int = field(default_factory=lambda: env_int("AGENDA_DEFAULT_DURATION", 60))
    default_group_size: int = field(default_factory=lambda: env_int("AGENDA_GROUP_SIZE", 12))
    default_target_minutes: int = field(default_factory=lambda: env_int("AGENDA_TARGET_MINUTES", 480))
    default_start_time: str = field(default_factory=lambda: os.getenv("AGENDA_DEFAULT_START_TIME", "10:00"))
    # Not read from the environment.
    short_threshold_ratio: float = 0.8
    long_threshold_ratio: float = 1.2


@dataclass
class GeneratorConfig:
    """Chat-completion endpoint settings.

    Any OpenAI-compatible endpoint works; OpenRouter is the default.
    """

    api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", os.getenv("OPENAI_API_KEY", "")))
    base_url: str = field(default_factory=lambda: os.getenv("AGENDA_LLM_BASE_URL", "https://openrouter.ai/api/v1"))
    model: str = field(default_factory=lambda: os.getenv("AGENDA_LLM_MODEL", "openai/gpt-4o"))
    temperature: float = field(default_factory=lambda: env_float("AGENDA_LLM_TEMPERATURE", 0.7))
    max_tokens: int = field(default_factory=lambda: env_int("AGENDA_LLM_MAX_TOKENS", 4000))
    timeout: float = field(default_factory=lambda: env_float("AGENDA_LLM_TIMEOUT", 120))
    app_title: str = "Training Agenda Generator"


# Service URL - configurable via environment variable
TRAINING_SERVICE_URL = os.getenv("TRAINING_SERVICE_URL", "http://localhost:8004")

# Timeout for CRUD calls against the training service (in seconds)
STANDARD_TIMEOUT = env_float("TRAINING_SERVICE_TIMEOUT", 30)

DEFAULT_SETTINGS = AgendaSettings()
