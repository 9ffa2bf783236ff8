"""Server configuration loaded from environment variables.

Settings are read once by the entry point and passed to whatever needs them.
Every field goes through an explicit parse-or-default step, so a malformed
value never stops the server from starting:

    MAX_CONCURRENT_ANALYSIS=abc  ->  max_concurrent_analysis == 5
    DEBUG=TRUE                   ->  debug is True
    BLOCKED_PATTERNS=" a, ,b "   ->  blocked_patterns == ("a", "b")

Usage:
    from codesentry_mcp.config import load_settings, validate_settings

    settings = load_settings()
    validate_settings(settings)  # logs advisory warnings only
"""

from __future__ import annotations

import os
import re
from typing import Annotated, Any, Literal

import structlog
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = structlog.get_logger(__name__)

LogLevel = Literal["debug", "info", "warn", "error"]
AIProvider = Literal["openai", "anthropic", "none"]

LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warn", "error")
AI_PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "none")

DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1MB
DEFAULT_MAX_CONCURRENT_ANALYSIS = 5
DEFAULT_BLOCKED_PATTERNS: tuple[str, ...] = ("node_modules", "dist", "build", ".git")

# Advisory thresholds, see validate_settings()
LARGE_FILE_SIZE_THRESHOLD = 10 * 1024 * 1024  # 10MB
HIGH_CONCURRENCY_THRESHOLD = 10

SECRET_MASK = "********"

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def parse_bool(value: Any, default: bool = False) -> bool:
    """Interpret an environment value as a boolean flag.

    Only ``"true"`` (any case) and ``"1"`` count as set. ``None`` means the
    variable is absent and yields ``default``.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value)
    return text.lower() == "true" or text == "1"


def parse_int(value: Any, default: int) -> int:
    """Parse the leading base-10 integer of ``value``.

    Trailing text is ignored, so ``"8.0"`` and ``"2097152 bytes"`` both
    parse; ``default`` is returned only when no digits lead.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if match is None:
        return default
    return int(match.group(0), 10)


def parse_list(value: Any) -> tuple[str, ...]:
    """Split a comma-separated value, trimming entries and dropping empty ones."""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(item) for item in value]
    return tuple(item.strip() for item in items if item.strip())


def parse_choice(value: Any, choices: tuple[str, ...], default: str) -> str:
    """Return ``value`` lowercased if it is one of ``choices``, else ``default``."""
    if not isinstance(value, str):
        return default
    normalized = value.strip().lower()
    return normalized if normalized in choices else default


def env_flag(name: str) -> bool:
    """Read a boolean flag from the live process environment."""
    return parse_bool(os.environ.get(name))


class Settings(BaseSettings):
    """CodeSentry server settings.

    Environment variables are read without a prefix, e.g. ``DEBUG``,
    ``MAX_FILE_SIZE`` or ``AI_PROVIDER``. A ``.env`` file in the working
    directory is honoured as well. Instances are frozen.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Server
    debug: bool = False
    log_level: LogLevel = "info"

    # AI providers (declared, not used by any handler yet)
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    default_ai_provider: AIProvider = Field(default="none", validation_alias="AI_PROVIDER")

    # GitHub integration (declared, not used by any handler yet)
    github_token: SecretStr | None = None

    # Analysis limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_concurrent_analysis: int = DEFAULT_MAX_CONCURRENT_ANALYSIS

    # Filesystem scope
    allowed_directories: Annotated[tuple[str, ...], NoDecode] = ()
    blocked_patterns: Annotated[tuple[str, ...], NoDecode] = DEFAULT_BLOCKED_PATTERNS

    @field_validator("debug", mode="before")
    @classmethod
    def _coerce_debug(cls, v: Any) -> bool:
        return parse_bool(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, v: Any) -> str:
        return parse_choice(v, LOG_LEVELS, "info")

    @field_validator("default_ai_provider", mode="before")
    @classmethod
    def _coerce_ai_provider(cls, v: Any) -> str:
        return parse_choice(v, AI_PROVIDERS, "none")

    @field_validator("openai_api_key", "anthropic_api_key", "github_token", mode="before")
    @classmethod
    def _blank_secret_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("max_file_size", mode="before")
    @classmethod
    def _coerce_max_file_size(cls, v: Any) -> int:
        return parse_int(v, DEFAULT_MAX_FILE_SIZE)

    @field_validator("max_concurrent_analysis", mode="before")
    @classmethod
    def _coerce_max_concurrent_analysis(cls, v: Any) -> int:
        return parse_int(v, DEFAULT_MAX_CONCURRENT_ANALYSIS)

    @field_validator("allowed_directories", mode="before")
    @classmethod
    def _split_allowed_directories(cls, v: Any) -> tuple[str, ...]:
        return parse_list(v)

    @field_validator("blocked_patterns", mode="before")
    @classmethod
    def _split_blocked_patterns(cls, v: Any) -> tuple[str, ...]:
        # An empty variable means "use the defaults", not "block nothing"
        if v == "":
            return DEFAULT_BLOCKED_PATTERNS
        return parse_list(v)

    @property
    def has_ai_credentials(self) -> bool:
        """True when at least one AI provider credential is configured."""
        return self.openai_api_key is not None or self.anthropic_api_key is not None


def load_settings() -> Settings:
    """Build a fresh Settings instance from the current environment."""
    return Settings()


def _mask(secret: SecretStr | None) -> str | None:
    return SECRET_MASK if secret is not None else None


def describe_settings(settings: Settings) -> dict[str, Any]:
    """Return a JSON-friendly view of settings with secrets masked."""
    return {
        "debug": settings.debug,
        "log_level": settings.log_level,
        "openai_api_key": _mask(settings.openai_api_key),
        "anthropic_api_key": _mask(settings.anthropic_api_key),
        "default_ai_provider": settings.default_ai_provider,
        "github_token": _mask(settings.github_token),
        "max_file_size": settings.max_file_size,
        "max_concurrent_analysis": settings.max_concurrent_analysis,
        "allowed_directories": list(settings.allowed_directories),
        "blocked_patterns": list(settings.blocked_patterns),
    }


def validate_settings(settings: Settings) -> list[str]:
    """Check settings for risky or missing values.

    Warnings are logged and returned. Nothing here raises: a questionable
    configuration limits functionality but never blocks startup.

    Args:
        settings: Loaded settings to inspect

    Returns:
        List of human-readable warning messages (empty if all is well)
    """
    warnings: list[str] = []

    if not settings.has_ai_credentials:
        warnings.append(
            "No AI API keys configured. AI analysis features will be disabled. "
            "Set OPENAI_API_KEY or ANTHROPIC_API_KEY environment variables to enable."
        )

    if settings.github_token is None:
        warnings.append(
            "No GitHub token configured. GitHub integration features will be disabled. "
            "Set GITHUB_TOKEN environment variable to enable PR analysis."
        )

    if settings.max_file_size > LARGE_FILE_SIZE_THRESHOLD:
        warnings.append(
            "Large MAX_FILE_SIZE configured. This may impact performance."
        )

    if settings.max_concurrent_analysis > HIGH_CONCURRENCY_THRESHOLD:
        warnings.append(
            "High MAX_CONCURRENT_ANALYSIS configured. This may impact system resources."
        )

    for message in warnings:
        logger.warning("config_warning", detail=message)

    return warnings
