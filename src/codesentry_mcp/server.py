"""CodeSentry MCP server: binds the dispatcher to the stdio transport.

Logging must be configured before the server starts writing to stdout; see
``codesentry_mcp.logging``. The CLI (``codesentry-mcp serve``) is the way in.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, NoReturn

import structlog
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl

from codesentry_mcp import SERVER_DESCRIPTION, SERVER_NAME, __version__
from codesentry_mcp.audit import log_tool_call
from codesentry_mcp.config import Settings, describe_settings, validate_settings
from codesentry_mcp.dispatch import Dispatcher, UnknownName
from codesentry_mcp.lifecycle import (
    ShutdownGuard,
    force_exit,
    install_signal_handlers,
    remove_signal_handlers,
)

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

# How long a signalled shutdown waits for the transport to unwind
SHUTDOWN_GRACE_SECONDS = 1.0


def _raise_unknown(outcome: UnknownName) -> NoReturn:
    raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=outcome.message))


def create_server(dispatcher: Dispatcher | None = None) -> Server:
    """Build an MCP server with tool, resource and prompt handlers registered.

    Args:
        dispatcher: Request dispatcher; a default one is built if omitted.

    Returns:
        Low-level MCP server, not yet connected to a transport.
    """
    dispatcher = dispatcher or Dispatcher()
    server: Server = Server(SERVER_NAME, version=__version__, instructions=SERVER_DESCRIPTION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return dispatcher.list_tools()

    # The stub accepts whatever it is given; skip SDK-side schema validation
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        start_time = time.monotonic()
        outcome = dispatcher.call_tool(name, arguments)
        duration_ms = (time.monotonic() - start_time) * 1000

        if isinstance(outcome, UnknownName):
            log_tool_call(name, arguments, duration_ms, error=outcome.message)
            _raise_unknown(outcome)

        log_tool_call(name, arguments, duration_ms, contents=outcome.value)
        return outcome.value

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return dispatcher.list_resources()

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        outcome = dispatcher.read_resource(str(uri))
        if isinstance(outcome, UnknownName):
            _raise_unknown(outcome)
        return [
            ReadResourceContents(content=contents.text, mime_type=contents.mimeType)
            for contents in outcome.value
        ]

    @server.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        return dispatcher.list_prompts()

    @server.get_prompt()
    async def get_prompt(
        name: str, arguments: dict[str, str] | None = None
    ) -> types.GetPromptResult:
        outcome = dispatcher.get_prompt(name, arguments)
        if isinstance(outcome, UnknownName):
            _raise_unknown(outcome)
        return outcome.value

    logger.info("server_initialized", name=SERVER_NAME, version=__version__)
    return server


async def _serve_streams(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        logger.info("server_ready", transport="stdio")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


async def serve_stdio(server: Server) -> None:
    """Serve ``server`` on stdin/stdout until EOF or a shutdown signal.

    SIGINT and SIGTERM trip a ShutdownGuard, which cancels the transport.
    The stdio transport reads stdin from a worker thread that only notices
    cancellation once a line or EOF arrives; if the client keeps stdin open
    past ``SHUTDOWN_GRACE_SECONDS`` the process is ended with exit code 0.
    """
    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()
    guard = ShutdownGuard(stop_requested.set)
    installed = install_signal_handlers(loop, guard)

    serving = asyncio.create_task(_serve_streams(server))
    stop_waiter = asyncio.create_task(stop_requested.wait())
    try:
        await asyncio.wait({serving, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        serving.cancel()
        raise
    finally:
        stop_waiter.cancel()
        remove_signal_handlers(loop, installed)

    if not guard.requested:
        # Client closed stdin, or the transport failed
        serving.result()
        return

    serving.cancel()
    done, _ = await asyncio.wait({serving}, timeout=SHUTDOWN_GRACE_SECONDS)
    logger.info("server_stopped", reason=guard.requested_by)
    if not done:
        force_exit(EXIT_OK)


def run(settings: Settings, dispatcher: Dispatcher | None = None) -> int:
    """Start the server and block until it stops.

    Args:
        settings: Loaded settings, reported at startup
        dispatcher: Optional dispatcher override

    Returns:
        Process exit code: 0 on graceful shutdown, 1 on failure.
    """
    validate_settings(settings)
    logger.info(
        "server_starting",
        name=SERVER_NAME,
        version=__version__,
        transport="stdio",
        settings=describe_settings(settings),
    )

    try:
        server = create_server(dispatcher)
        asyncio.run(serve_stdio(server))
    except KeyboardInterrupt:
        logger.info("server_stopped", reason="KeyboardInterrupt")
    except Exception:
        logger.exception("server_failed")
        return EXIT_FAILURE

    return EXIT_OK
