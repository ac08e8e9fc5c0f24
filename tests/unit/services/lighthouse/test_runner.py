"""Test module for the local Lighthouse runner."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from trace_collector.errors import SubprocessError
from trace_collector.models import TraceResult
from trace_collector.services.lighthouse.runner import TRACE_FILENAME, LighthouseRunner


def fake_exec(returncode=0, trace=None, stderr=b""):
    """Stand-in for create_subprocess_exec that writes the gathered trace."""
    calls = []

    async def create_subprocess_exec(program, *args, **kwargs):
        calls.append([program, *args])
        if trace is not None:
            artifacts_dir = args[-1].split("=", 1)[1]
            with open(f"{artifacts_dir}/{TRACE_FILENAME}", "w", encoding="utf-8") as f:
                f.write(trace)
        process = MagicMock()
        process.returncode = returncode
        process.communicate = AsyncMock(return_value=(b"", stderr))
        return process

    return create_subprocess_exec, calls


@pytest.fixture
def artifacts_dir(tmp_path):
    path = tmp_path / "collect-traces-artifacts"
    path.mkdir()
    return path


@pytest.mark.asyncio
async def test_run_returns_gathered_trace(artifacts_dir):
    exec_, calls = fake_exec(trace='{"traceEvents": [1]}')
    runner = LighthouseRunner(["node", "lighthouse-cli"], artifacts_dir)

    with patch("asyncio.create_subprocess_exec", new=exec_):
        result = await runner.run("https://example.com")

    assert result == TraceResult(trace='{"traceEvents": [1]}')
    assert calls == [["node", "lighthouse-cli", "https://example.com", f"-G={artifacts_dir}"]]


@pytest.mark.asyncio
async def test_nonzero_exit_raises(artifacts_dir):
    exec_, _ = fake_exec(returncode=1, trace="{}", stderr=b"Runtime error encountered: NO_FCP")
    runner = LighthouseRunner(["lighthouse"], artifacts_dir)

    with patch("asyncio.create_subprocess_exec", new=exec_):
        with pytest.raises(SubprocessError, match="NO_FCP") as exc_info:
            await runner.run("https://example.com")

    assert exc_info.value.returncode == 1


@pytest.mark.asyncio
async def test_missing_trace_raises(artifacts_dir):
    exec_, _ = fake_exec(trace=None)
    runner = LighthouseRunner(["lighthouse"], artifacts_dir)

    with patch("asyncio.create_subprocess_exec", new=exec_):
        with pytest.raises(SubprocessError, match="could not read"):
            await runner.run("https://example.com")


@pytest.mark.asyncio
async def test_stale_trace_is_not_reused(artifacts_dir):
    (artifacts_dir / TRACE_FILENAME).write_text("from an earlier run")
    exec_, _ = fake_exec(trace=None)
    runner = LighthouseRunner(["lighthouse"], artifacts_dir)

    with patch("asyncio.create_subprocess_exec", new=exec_):
        with pytest.raises(SubprocessError):
            await runner.run("https://example.com")


@pytest.mark.asyncio
async def test_command_not_found(artifacts_dir):
    runner = LighthouseRunner(["lighthouse"], artifacts_dir)

    with patch("asyncio.create_subprocess_exec", new=AsyncMock(side_effect=FileNotFoundError("lighthouse"))):
        with pytest.raises(SubprocessError, match="could not start lighthouse"):
            await runner.run("https://example.com")


def test_empty_command():
    with pytest.raises(ValueError):
        LighthouseRunner([])
