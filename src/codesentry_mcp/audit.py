"""Audit trail for MCP tool calls.

Every ``tools/call`` request produces exactly one record, whether the tool
succeeded or not:

    {"event": "mcp_tool_invoked", "tool": "analyze_repository",
     "params": {"path": "/srv/app"}, "result_summary": "stub reply for /srv/app",
     "content_items": 1, "duration_ms": 0.21, "success": true, ...}

Failed calls are logged as ``mcp_tool_failed`` at error level and carry the
error text instead of a result summary.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import structlog
from mcp import types

from codesentry_mcp import catalog
from codesentry_mcp.logging import REDACTED, is_sensitive_key

logger = structlog.get_logger("codesentry_mcp.audit")

# Character limits
MAX_STRING_LENGTH = 200
TRUNCATED_PREFIX_LENGTH = 100
MAX_RESULT_LENGTH = 200
MAX_ERROR_LENGTH = 500
TRUNCATE_SUFFIX = "...[truncated]"


def _clip(value: str, max_length: int = MAX_STRING_LENGTH) -> str:
    if len(value) <= max_length:
        return value
    return value[:TRUNCATED_PREFIX_LENGTH] + TRUNCATE_SUFFIX


def _sanitize(value: Any) -> Any:
    """Redact credential keys and clip long strings at any depth."""
    if isinstance(value, str):
        return _clip(value)
    if isinstance(value, Mapping):
        return {
            key: REDACTED if is_sensitive_key(key) else _sanitize(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_sanitize(item) for item in value]
    return value


def _first_line(contents: Sequence[types.TextContent]) -> str:
    for item in contents:
        text = getattr(item, "text", "")
        if text:
            return text.splitlines()[0]
    return ""


def _summarize_ping(arguments: Mapping[str, Any], contents: Sequence[types.TextContent]) -> str:
    message = arguments.get("message")
    if message:
        return f"pong, echoed {len(str(message))} chars"
    return "pong"


def _summarize_analyze_repository(
    arguments: Mapping[str, Any], contents: Sequence[types.TextContent]
) -> str:
    return f"stub reply for {arguments.get('path')}"


_SUMMARIZERS: dict[str, Callable[[Mapping[str, Any], Sequence[types.TextContent]], str]] = {
    catalog.PING_TOOL: _summarize_ping,
    catalog.ANALYZE_REPOSITORY_TOOL: _summarize_analyze_repository,
}


def summarize_result(
    tool_name: str,
    arguments: Mapping[str, Any],
    contents: Sequence[types.TextContent],
) -> str:
    """Describe a tool result in one short line.

    Known tools get a tailored summary; anything else falls back to the
    first line of its text output.
    """
    summarizer = _SUMMARIZERS.get(tool_name)
    if summarizer is None:
        return _first_line(contents)
    return summarizer(arguments, contents)


def log_tool_call(
    tool_name: str,
    arguments: Mapping[str, Any] | None,
    duration_ms: float,
    contents: Sequence[types.TextContent] = (),
    error: str | None = None,
) -> None:
    """Record one tool invocation.

    Args:
        tool_name: Tool the client asked for
        arguments: Raw call arguments; sanitized before logging
        duration_ms: Handler time in milliseconds
        contents: Content returned to the client (successful calls)
        error: Failure message; its presence marks the call as failed
    """
    arguments = arguments or {}
    log_fields: dict[str, Any] = {
        "tool": tool_name,
        "params": _sanitize(arguments),
        "duration_ms": round(duration_ms, 2),
        "success": error is None,
    }

    if error is not None:
        log_fields["error"] = _clip(error, MAX_ERROR_LENGTH)
        logger.error("mcp_tool_failed", **log_fields)
        return

    log_fields["result_summary"] = _clip(
        summarize_result(tool_name, arguments, contents), MAX_RESULT_LENGTH
    )
    log_fields["content_items"] = len(contents)
    logger.info("mcp_tool_invoked", **log_fields)
