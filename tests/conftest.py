"""Test configuration and fixtures."""

import asyncio

import pytest

from trace_collector.errors import NetworkError
from trace_collector.models import TraceResult
from trace_collector.utils import ManifestStore

TEST_URL = "https://example.com"


class FakeTraceSource:
    """Trace source double that hands out traces in call order."""

    def __init__(self, traces, failures=0):
        self.traces = list(traces)
        self.failures = failures
        self.calls = 0
        self.urls = []

    async def run(self, url):
        self.calls += 1
        self.urls.append(url)
        if self.failures:
            self.failures -= 1
            await asyncio.sleep(0)
            raise NetworkError(f"error fetching {url}: 503 Service Unavailable", url=url, status=503)
        trace = self.traces.pop(0)
        await asyncio.sleep(0)
        return TraceResult(trace=trace)


@pytest.fixture(autouse=True)
def test_env(monkeypatch, tmp_path):
    """Keep tests away from the real environment and log directory."""
    monkeypatch.delenv("WPT_KEY", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    yield


@pytest.fixture
def output_dir(tmp_path):
    """Directory traces and the manifest are written to."""
    path = tmp_path / "lantern-traces"
    path.mkdir()
    return path


@pytest.fixture
def manifest_store(output_dir):
    return ManifestStore(output_dir / "summary.json", [TEST_URL])
