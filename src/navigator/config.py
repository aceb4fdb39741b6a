"""
config.py — Runtime settings read from the environment.

``app.py`` loads ``.env`` with python-dotenv before calling
``load_settings()``. Only GEMINI_API_KEY is needed for a conversation; its
absence is reported per message rather than at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from .agents.base import AgentIdentity
from .agents.context import DEFAULT_CONTEXT_WINDOW
from .agents.router import DEFAULT_ROUTING_TEMPERATURE
from .agents.tools import DEFAULT_DOCUMENT_FORMAT

DEFAULT_MODEL = "gemini-2.5-flash"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(Exception):
    """An environment variable holds a value that cannot be used."""


@dataclass(frozen=True)
class Settings:
    api_key: str | None = None
    routing_model: str = DEFAULT_MODEL
    agent_model: str = DEFAULT_MODEL
    routing_temperature: float = DEFAULT_ROUTING_TEMPERATURE
    context_window: int = DEFAULT_CONTEXT_WINDOW
    default_agent: AgentIdentity = AgentIdentity.PATIENT_INFO
    document_format: str = DEFAULT_DOCUMENT_FORMAT
    request_timeout: float = 30.0
    allowed_users: frozenset[str] = field(default_factory=frozenset)
    log_level: str = "INFO"

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


def _number(env: Mapping[str, str], key: str, default, cast):
    raw = _get(env, key)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ``)."""
    env = os.environ if env is None else env

    context_window = _number(env, "NAVIGATOR_CONTEXT_WINDOW", DEFAULT_CONTEXT_WINDOW, int)
    if context_window < 0:
        raise ConfigError("NAVIGATOR_CONTEXT_WINDOW must be >= 0")

    timeout = _number(env, "NAVIGATOR_REQUEST_TIMEOUT", 30.0, float)
    if timeout <= 0:
        raise ConfigError("NAVIGATOR_REQUEST_TIMEOUT must be > 0")

    temperature = _number(
        env, "NAVIGATOR_ROUTING_TEMPERATURE", DEFAULT_ROUTING_TEMPERATURE, float
    )
    if not 0 <= temperature <= 2:
        raise ConfigError("NAVIGATOR_ROUTING_TEMPERATURE must be between 0 and 2")

    log_level = (_get(env, "LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    default_agent_name = (_get(env, "NAVIGATOR_DEFAULT_AGENT") or "PATIENT_INFO").upper()
    try:
        default_agent = AgentIdentity[default_agent_name]
    except KeyError:
        raise ConfigError(
            f"NAVIGATOR_DEFAULT_AGENT must be one of "
            f"{', '.join(a.name for a in AgentIdentity.specialists())}"
        ) from None
    if default_agent is AgentIdentity.NAVIGATOR:
        raise ConfigError("NAVIGATOR_DEFAULT_AGENT cannot be the navigator")

    allowed_users = frozenset(
        uid.strip()
        for uid in env.get("TELEGRAM_ALLOWED_USERS", "").split(",")
        if uid.strip()
    )

    return Settings(
        api_key=_get(env, "GEMINI_API_KEY"),
        routing_model=_get(env, "NAVIGATOR_ROUTING_MODEL") or DEFAULT_MODEL,
        agent_model=_get(env, "NAVIGATOR_AGENT_MODEL") or DEFAULT_MODEL,
        routing_temperature=temperature,
        context_window=context_window,
        default_agent=default_agent,
        document_format=_get(env, "NAVIGATOR_DOCUMENT_FORMAT") or DEFAULT_DOCUMENT_FORMAT,
        request_timeout=timeout,
        allowed_users=allowed_users,
        log_level=log_level,
    )
