"""Process lifecycle: signal handling and one-shot shutdown."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
import sys
from collections.abc import Callable, Iterable
from typing import NoReturn

import structlog

logger = structlog.get_logger(__name__)

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class ShutdownGuard:
    """Runs a shutdown callback at most once.

    SIGINT and SIGTERM can both arrive while the server is stopping; only the
    first request does anything.
    """

    def __init__(self, on_shutdown: Callable[[], object]) -> None:
        self._on_shutdown = on_shutdown
        self._requested_by: str | None = None

    @property
    def requested(self) -> bool:
        return self._requested_by is not None

    @property
    def requested_by(self) -> str | None:
        return self._requested_by

    def request(self, reason: str) -> bool:
        """Request shutdown.

        Returns:
            True if this call triggered shutdown, False if one was already underway.
        """
        if self._requested_by is not None:
            logger.debug("shutdown_already_requested", reason=reason, first=self._requested_by)
            return False

        self._requested_by = reason
        logger.info("shutdown_requested", reason=reason)
        self._on_shutdown()
        return True


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    guard: ShutdownGuard,
    signals: Iterable[signal.Signals] = SHUTDOWN_SIGNALS,
) -> list[signal.Signals]:
    """Route termination signals to ``guard``.

    Platforms without loop signal support (Windows) are skipped; there Ctrl+C
    surfaces as KeyboardInterrupt and is handled by the entry point.

    Returns:
        Signals that were actually installed.
    """
    installed: list[signal.Signals] = []
    for sig in signals:
        try:
            loop.add_signal_handler(sig, guard.request, sig.name)
        except (NotImplementedError, RuntimeError):
            logger.debug("signal_handler_unavailable", signal=sig.name)
            continue
        installed.append(sig)
    return installed


def remove_signal_handlers(
    loop: asyncio.AbstractEventLoop, signals: Iterable[signal.Signals]
) -> None:
    for sig in signals:
        loop.remove_signal_handler(sig)


def force_exit(code: int) -> NoReturn:
    """End the process now, skipping interpreter teardown.

    Used when a blocked stdin reader thread would otherwise keep the process
    alive after shutdown was requested. Standard streams are flushed first.
    """
    logger.warning("forcing_exit", code=code)
    for stream in (sys.stdout, sys.stderr):
        with contextlib.suppress(OSError, ValueError):
            stream.flush()
    os._exit(code)
