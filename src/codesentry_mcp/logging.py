"""Structured logging for the CodeSentry MCP server.

All output goes to stderr: stdout belongs to the stdio transport and any
stray write there corrupts the JSON-RPC stream.

Three rules apply to every event regardless of level:

- debug events are dropped unless ``DEBUG`` is set (checked on each call)
- keys that look like credentials are replaced with ``[REDACTED]``, both at
  the top level and one level down inside dict arguments
- values that cannot be JSON-serialized are replaced with a placeholder

Usage:
    from codesentry_mcp.logging import setup_logging, get_logger

    setup_logging()
    log = get_logger("codesentry_mcp.server")
    log.info("tool_called", arguments={"token": "xyz", "name": "a"})
    # {"arguments": {"token": "[REDACTED]", "name": "a"}, ...}
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

from codesentry_mcp.config import env_flag

DEBUG_ENV_VAR = "DEBUG"

SENSITIVE_KEY_PARTS: tuple[str, ...] = (
    "password",
    "token",
    "secret",
    "key",
    "auth",
    "credential",
)
REDACTED = "[REDACTED]"
UNSERIALIZABLE = "[Object - Could not serialize]"

# Keys structlog itself adds; never redacted or re-serialized
_RESERVED_KEYS = frozenset({"event", "level", "timestamp", "exception"})

_SCALAR_TYPES = (str, int, float, bool, type(None))


def is_sensitive_key(key: Any) -> bool:
    """Return True if a key name suggests its value is a credential."""
    lowered = str(key).lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def redact_mapping(data: Mapping[Any, Any]) -> dict[Any, Any]:
    """Return a shallow copy of ``data`` with sensitive keys redacted."""
    return {
        key: (REDACTED if is_sensitive_key(key) else value)
        for key, value in data.items()
    }


def drop_debug_unless_enabled(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drop debug events unless the DEBUG flag is set right now."""
    if method_name == "debug" and not env_flag(DEBUG_ENV_VAR):
        raise structlog.DropEvent
    return event_dict


def redact_sensitive(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace credential-looking values before anything is rendered."""
    for key, value in list(event_dict.items()):
        if key in _RESERVED_KEYS:
            continue
        if is_sensitive_key(key):
            event_dict[key] = REDACTED
        elif isinstance(value, Mapping):
            event_dict[key] = redact_mapping(value)
    return event_dict


def ensure_serializable(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Swap values the JSON renderer would choke on for a placeholder."""
    for key, value in list(event_dict.items()):
        if key in _RESERVED_KEYS or isinstance(value, _SCALAR_TYPES):
            continue
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            event_dict[key] = UNSERIALIZABLE
    return event_dict


def setup_logging(stream: TextIO | None = None, cache_loggers: bool = True) -> None:
    """Configure structlog and stdlib logging to write JSON lines.

    Args:
        stream: Destination for log lines. Defaults to stderr.
        cache_loggers: Bind loggers to this configuration on first use.
            Tests that reconfigure logging repeatedly pass False.
    """
    output = stream if stream is not None else sys.stderr

    processors: list[Processor] = [
        drop_debug_unless_enabled,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_sensitive,
        structlog.processors.format_exc_info,
        ensure_serializable,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=cache_loggers,
    )

    # The mcp SDK logs through the stdlib; keep it off stdout as well
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
    )
    handler = logging.StreamHandler(output)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> Any:
    """Get a bound logger with optional name.

    Args:
        name: Optional logger name (e.g., 'codesentry_mcp.server')

    Returns:
        Bound structlog logger instance
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
