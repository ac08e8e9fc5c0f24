"""
WebPageTest client

Runs one throttled mobile Lighthouse test on webpagetest.org and downloads
the trace it recorded. Tests are queued on the WebPageTest side, so a run is
job start, polling until the job is done, then a separate artifact download.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from ...errors import NetworkError, RemoteJobError
from ...models import JobHandle, TraceResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.webpagetest.org"
DEFAULT_LOCATION = "Dulles:Chrome.3G"
TRACE_ARTIFACT = "lighthouse_trace.json"
POLL_FALLBACK_SECONDS = 5


class WebPageTestClient:
    """Async client for the WebPageTest job API."""

    def __init__(
        self,
        api_key: str,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = DEFAULT_BASE_URL,
        location: str = DEFAULT_LOCATION,
        poll_fallback_seconds: float = POLL_FALLBACK_SECONDS,
        request_timeout: float = 60,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the client.

        Args:
            api_key: WebPageTest API key
            session: Session to issue requests on; one is opened by
                `async with` when not given
            base_url: WebPageTest server
            location: Test location, browser and connectivity profile
            poll_fallback_seconds: Wait between polls when the server gives
                no queue position
            request_timeout: Total timeout per HTTP request, in seconds
            sleep: Coroutine used to wait between polls
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.location = location
        self.poll_fallback_seconds = poll_fallback_seconds
        self.request_timeout = request_timeout
        self._sleep = sleep
        self._session = session
        self._owns_session = False

    async def __aenter__(self) -> "WebPageTestClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.request_timeout)
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("WebPageTestClient used outside of 'async with'")
        return self._session

    async def fetch_string(self, url: str, params: Optional[Dict[str, str]] = None) -> str:
        """GET `url` and return the body as text."""
        try:
            async with self.session.get(url, params=params) as response:
                if response.status >= 400:
                    raise NetworkError(
                        f"error fetching {url}: {response.status} {response.reason}",
                        url=url,
                        status=response.status,
                    )
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"error fetching {url}: {e!r}", url=url) from e

    async def fetch_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        body = await self.fetch_string(url, params)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise RemoteJobError(None, f"malformed response from {url}: {e}") from e

    async def start_job(self, url: str) -> JobHandle:
        """Queue a Lighthouse test for `url`."""
        params = {
            "k": self.api_key,
            "f": "json",
            "url": url,
            # Keep the location constant. Use Chrome and 3G network conditions.
            "location": self.location,
            "lighthouse": "1",
            # Make the trace file available over /getgzip.php.
            "lighthouseTrace": "1",
            # Skip the extra analysis WebPageTest does by default, e.g. repeat view.
            "type": "lighthouse",
            "mobile": "1",
        }
        response = await self.fetch_json(f"{self.base_url}/runtest.php", params)
        if response.get("statusCode") != 200:
            raise RemoteJobError(response.get("statusCode"), response.get("statusText", ""))

        data = response.get("data") or {}
        if not data.get("testId") or not data.get("jsonUrl"):
            raise RemoteJobError(200, "missing testId/jsonUrl in response")
        handle = JobHandle(test_id=data["testId"], json_url=data["jsonUrl"])
        logger.debug(
            "WebPageTest job started",
            extra={"url": url, "test_id": handle.test_id, "json_url": handle.json_url},
        )
        return handle

    async def poll_until_done(self, handle: JobHandle) -> TraceResult:
        """Wait for the job to finish and download its trace.

        There is no limit on the number of polls. The wait between polls is
        the job's position in the queue, in seconds.
        """
        while True:
            # The body also carries the Lighthouse report, which is not needed.
            response = await self.fetch_json(handle.json_url)
            status_code = response.get("statusCode")

            if status_code == 200:
                break

            if isinstance(status_code, int) and 100 <= status_code < 200:
                # No behindCount means the test is running right now.
                data = response.get("data") or {}
                seconds_to_wait = data.get("behindCount") or self.poll_fallback_seconds
                logger.debug(
                    f"poll wpt in {seconds_to_wait}",
                    extra={"test_id": handle.test_id, "status_code": status_code},
                )
                await self._sleep(seconds_to_wait)
            else:
                raise RemoteJobError(status_code, response.get("statusText", ""))

        return TraceResult(trace=await self.download_trace(handle.test_id))

    async def download_trace(self, test_id: str) -> str:
        return await self.fetch_string(
            f"{self.base_url}/getgzip.php",
            {"test": test_id, "file": TRACE_ARTIFACT},
        )

    async def run(self, url: str) -> TraceResult:
        """Collect one throttled trace for `url`."""
        handle = await self.start_job(url)
        return await self.poll_until_done(handle)
