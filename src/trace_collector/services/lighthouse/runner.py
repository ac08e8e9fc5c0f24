"""
Local Lighthouse runner

Runs Lighthouse on this machine, with no throttling, in gather mode (`-G`),
and reads the trace it saved. Every run writes the same file in the
artifacts directory, so callers must not run two captures at once.
"""

import asyncio
import logging
from pathlib import Path
from typing import Sequence, Union

from ...errors import SubprocessError
from ...models import TraceResult

logger = logging.getLogger(__name__)

TRACE_FILENAME = "defaultPass.trace.json"


class LighthouseRunner:
    """Captures unthrottled traces with the Lighthouse CLI."""

    def __init__(
        self,
        command: Sequence[str] = ("lighthouse",),
        artifacts_dir: Union[str, Path] = ".tmp/collect-traces-artifacts",
    ):
        if not command:
            raise ValueError("command must not be empty")
        self.command = list(command)
        self.artifacts_dir = Path(artifacts_dir)

    @property
    def trace_path(self) -> Path:
        return self.artifacts_dir / TRACE_FILENAME

    async def run(self, url: str) -> TraceResult:
        """Collect one unthrottled trace for `url`."""
        args = [*self.command[1:], url, f"-G={self.artifacts_dir}"]
        logger.debug(f"Running {self.command[0]} {' '.join(args)}")
        # A trace left by an earlier run must not be read as this run's output.
        self.trace_path.unlink(missing_ok=True)

        try:
            process = await asyncio.create_subprocess_exec(
                self.command[0],
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SubprocessError(f"could not start {self.command[0]}: {e}") from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-500:]
            raise SubprocessError(
                f"{self.command[0]} exited with code {process.returncode} for {url}: {tail}",
                returncode=process.returncode,
            )

        try:
            trace = self.trace_path.read_text(encoding="utf-8")
        except OSError as e:
            raise SubprocessError(f"could not read {self.trace_path}: {e}") from e

        return TraceResult(trace=trace)
