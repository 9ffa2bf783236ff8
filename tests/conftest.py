"""Shared fixtures: keep the host environment out of every test."""

import logging

import pytest
import structlog

CODESENTRY_ENV_VARS = (
    "DEBUG",
    "LOG_LEVEL",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "AI_PROVIDER",
    "GITHUB_TOKEN",
    "MAX_FILE_SIZE",
    "MAX_CONCURRENT_ANALYSIS",
    "ALLOWED_DIRECTORIES",
    "BLOCKED_PATTERNS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Unset CodeSentry variables and run from a directory without a .env file."""
    for name in CODESENTRY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any logging configuration a test (or a CLI command) installed."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
