"""Single-line progress display with a spinner."""

import asyncio
import logging
import sys
from typing import Optional, TextIO

LOADING_CHARS = "⣾⣽⣻⢿⡿⣟⣯⣷ ⠁⠂⠄⡀⢀⠠⠐⠈"
CLEAR_LINE = "\r\x1b[2K"


class ProgressLogger:
    """Keeps one status line at the bottom of the terminal.

    The line is re-rendered every `interval` seconds by a task on the running
    event loop, so the spinner moves while samples are in flight. Messages
    passed to `log()` are printed above it.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        interval: float = 0.1,
        enabled: Optional[bool] = None,
    ):
        self.stream = stream or sys.stdout
        self.interval = interval
        if enabled is None:
            enabled = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.enabled = enabled
        self.message = ""
        self._next_loading_index = 0
        self._ticker: Optional[asyncio.Task] = None

    def start(self) -> None:
        """Start re-rendering on the running event loop."""
        if self.enabled and self._ticker is None:
            self._ticker = asyncio.get_running_loop().create_task(self._tick())

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.progress(self.message)

    def log(self, message: str) -> None:
        self._clear()
        self.stream.write(f"{message}\n")
        self.progress(self.message)

    def progress(self, message: str) -> None:
        self.message = message
        if not self.enabled:
            return
        self._clear()
        if message:
            self.stream.write(f"{self._next_loading_char()} {message}")
        self.stream.flush()

    async def close(self) -> None:
        """Stop the ticker and clear the status line."""
        if self._ticker is not None:
            self._ticker.cancel()
            try:
                await self._ticker
            except asyncio.CancelledError:
                pass
            self._ticker = None
        self.progress("")

    def _clear(self) -> None:
        if self.enabled:
            self.stream.write(CLEAR_LINE)

    def _next_loading_char(self) -> str:
        char = LOADING_CHARS[self._next_loading_index]
        self._next_loading_index = (self._next_loading_index + 1) % len(LOADING_CHARS)
        return char


class ProgressHandler(logging.Handler):
    """Logging handler that prints records above the progress line."""

    def __init__(self, progress: ProgressLogger, level=logging.NOTSET):
        super().__init__(level)
        self.progress = progress

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.progress.log(self.format(record))
        except Exception:
            self.handleError(record)
