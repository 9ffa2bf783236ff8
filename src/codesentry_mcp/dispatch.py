"""Request dispatch over the static CodeSentry catalog.

Each request family is a lookup on its discriminator (tool name, resource
URI, prompt name) followed by a canned or trivially computed answer. Lookups
never raise: a miss comes back as ``UnknownName`` and the transport adapter
decides how to report it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar, Union

import structlog
from mcp import types
from pydantic import ValidationError

from codesentry_mcp import catalog
from codesentry_mcp.models import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig, AnalysisOptions

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Category = Literal["tool", "resource", "prompt"]

PONG_TEXT = "🏓 Pong! CodeSentry is running."
NOT_IMPLEMENTED_MARKER = "Not yet implemented"


@dataclass(frozen=True)
class Found(Generic[T]):
    """A lookup that matched; ``value`` is the response payload."""

    value: T


@dataclass(frozen=True)
class UnknownName:
    """A lookup whose discriminator matched nothing in its table."""

    category: Category
    name: str

    @property
    def message(self) -> str:
        return f"Unknown {self.category}: {self.name}"


Outcome = Union[Found[T], UnknownName]


def _text(text: str) -> types.TextContent:
    return types.TextContent(type="text", text=text)


class Dispatcher:
    """Answers list/call/read/get requests from the static catalog.

    Args:
        analysis_config: Configuration served as ``codesentry://config`` and
            used as the baseline for ``analyze_repository`` options.
    """

    def __init__(self, analysis_config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG) -> None:
        self.analysis_config = analysis_config
        self._tool_handlers: dict[str, Callable[[Mapping[str, Any]], str]] = {
            catalog.PING_TOOL: self._ping,
            catalog.ANALYZE_REPOSITORY_TOOL: self._analyze_repository,
        }

    # --- Tools ---

    def list_tools(self) -> list[types.Tool]:
        logger.debug("listing_tools")
        return list(catalog.TOOLS)

    def call_tool(
        self, name: str, arguments: Mapping[str, Any] | None
    ) -> Outcome[list[types.TextContent]]:
        """Run a tool by name.

        Missing arguments are treated as an empty mapping; the handlers
        themselves decide what a missing field means.
        """
        logger.info("executing_tool", tool=name)
        logger.debug("tool_arguments", tool=name, arguments=dict(arguments or {}))

        handler = self._tool_handlers.get(name)
        if handler is None:
            return UnknownName("tool", name)
        return Found([_text(handler(arguments or {}))])

    def _ping(self, arguments: Mapping[str, Any]) -> str:
        message = arguments.get("message")
        if message:
            return f"{PONG_TEXT} Message: {message}"
        return PONG_TEXT

    def _analyze_repository(self, arguments: Mapping[str, Any]) -> str:
        # Stub: echoes the request, never touches the filesystem
        path = arguments.get("path")
        requested = self.requested_analyses(arguments.get("config"))
        return (
            f"🔍 Repository analysis requested for: {path}\n"
            f"Requested analyses: {', '.join(requested) or 'none'}\n\n"
            f"⚠️  {NOT_IMPLEMENTED_MARKER} - repository analysis is coming soon."
        )

    def requested_analyses(self, raw_options: Any) -> list[str]:
        """Merge per-call options over the baseline config.

        Options that fail to parse are ignored rather than rejected.

        Returns:
            Enabled analysis names in a fixed order.
        """
        options = AnalysisOptions()
        if isinstance(raw_options, Mapping):
            try:
                options = AnalysisOptions.model_validate(raw_options)
            except ValidationError:
                logger.debug("analysis_options_ignored", options=dict(raw_options))

        baseline = self.analysis_config
        flags = {
            "security": (options.enable_security, baseline.enable_security),
            "performance": (options.enable_performance, baseline.enable_performance),
            "quality": (options.enable_quality, baseline.enable_quality),
            "documentation": (options.enable_documentation, baseline.enable_documentation),
        }
        return [
            name
            for name, (override, default) in flags.items()
            if (default if override is None else override)
        ]

    # --- Resources ---

    def list_resources(self) -> list[types.Resource]:
        logger.debug("listing_resources")
        return list(catalog.RESOURCES)

    def read_resource(self, uri: str) -> Outcome[list[types.TextResourceContents]]:
        logger.info("reading_resource", uri=uri)

        if uri == catalog.CONFIG_RESOURCE_URI:
            return Found(
                [
                    types.TextResourceContents(
                        uri=uri,
                        mimeType=catalog.JSON_MIME_TYPE,
                        text=self.analysis_config.to_json(),
                    )
                ]
            )
        return UnknownName("resource", uri)

    # --- Prompts ---

    def list_prompts(self) -> list[types.Prompt]:
        logger.debug("listing_prompts")
        return list(catalog.PROMPTS)

    def get_prompt(
        self, name: str, arguments: Mapping[str, str] | None = None
    ) -> Outcome[types.GetPromptResult]:
        """Return the canned prompt body. ``arguments`` is accepted and ignored."""
        logger.info("getting_prompt", prompt=name)

        entry = catalog.PROMPT_BODIES.get(name)
        if entry is None:
            return UnknownName("prompt", name)

        description, body = entry
        return Found(
            types.GetPromptResult(
                description=description,
                messages=[types.PromptMessage(role="user", content=_text(body))],
            )
        )
