#!/usr/bin/env python3
"""
Trace Collection Service

Collects throttled (WebPageTest) and unthrottled (local Lighthouse) traces for
every configured URL, checkpointing progress to a manifest after each URL and
zipping the output directory once every URL is done.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from dotenv import load_dotenv

from ...config import Settings
from ...logging_config import setup_logging
from ...models import TraceRef, TraceResult, UrlResultSet
from ...utils import (
    ManifestStore,
    ProgressHandler,
    ProgressLogger,
    RetryPolicy,
    archive_directory,
    load_urls_from_file,
    repeat_until_success,
)
from ..lighthouse import LighthouseRunner
from ..wpt import WebPageTestClient

logger = logging.getLogger(__name__)


class TraceSource(Protocol):
    async def run(self, url: str) -> TraceResult:
        ...


def sanitize_url(url: str) -> str:
    return re.sub(r"[^a-z0-9]", "-", url, flags=re.IGNORECASE)


def trace_filename(url: str, source: str, sample: int) -> str:
    """File name for the `sample`-th (1-based) trace of `url` from `source`."""
    return f"{sanitize_url(url)}-mobile-{source}-{sample}-trace.json"


class TraceCollector:
    """Collects traces for one URL at a time and records them in the manifest."""

    def __init__(
        self,
        urls: Sequence[str],
        samples: int,
        manifest_store: ManifestStore,
        remote: TraceSource,
        local: TraceSource,
        output_dir: Path,
        archive_path: Optional[Path] = None,
        progress: Optional[ProgressLogger] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """Initialize the collector.

        Args:
            urls: URLs to collect, in order
            samples: Traces to collect per URL from each source
            manifest_store: Where progress is checkpointed
            remote: Throttled trace source; samples run concurrently
            local: Unthrottled trace source; samples run one at a time
            output_dir: Directory trace files are written to
            archive_path: Zip written once every URL is done; skipped if None
            progress: Status line display
            retry_policy: Retry policy for each sample
        """
        self.urls = list(urls)
        self.samples = samples
        self.manifest_store = manifest_store
        self.remote = remote
        self.local = local
        self.output_dir = Path(output_dir)
        self.archive_path = archive_path
        self.progress = progress or ProgressLogger(enabled=False)
        self.retry_policy = retry_policy or RetryPolicy()
        self.manifest: List[UrlResultSet] = []

    async def run(self) -> List[UrlResultSet]:
        """Collect every URL not yet in the manifest, then archive the output."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.manifest = self.manifest_store.load()
        self.progress.start()

        try:
            # URLs are done in series so both sources trace a URL within a
            # short window, making it less likely the site changes in between.
            for index, url in enumerate(self.urls):
                existing = self._manifest_entry(url)
                if existing is not None:
                    if existing.is_complete(self.samples):
                        logger.info(f"already collected traces for {url}")
                        continue
                    logger.info(
                        f"discarding traces for {url} collected with a different sample count"
                    )
                    self.manifest.remove(existing)
                    self._remove_traces(existing)

                logger.info(f"collecting traces for {url}")
                result_set = await self.collect_url(url, index)

                # Each URL is saved as soon as it is complete, never part-way.
                self.manifest.append(result_set)
                self.manifest_store.save(self.manifest)

            if self.archive_path is not None:
                logger.info("done! archiving ...")
                await archive_directory(self.output_dir, self.archive_path)
        finally:
            await self.progress.close()

        return self.manifest

    async def collect_url(self, url: str, index: int) -> UrlResultSet:
        """Collect all samples for `url` and write them to the output directory."""
        wpt_results: List[TraceResult] = []
        unthrottled_results: List[TraceResult] = []

        def update_progress():
            self.progress.progress(
                self._progress_message(url, index, len(wpt_results), len(unthrottled_results))
            )

        async def collect_remote_sample():
            result = await repeat_until_success(lambda: self.remote.run(url), self.retry_policy)
            # Kept in arrival order so the status line tracks finished samples.
            wpt_results.append(result)
            update_progress()

        update_progress()

        # Remote samples run in parallel.
        remote_tasks = [
            asyncio.create_task(collect_remote_sample()) for _ in range(self.samples)
        ]
        try:
            # Local samples share one output file and must run in series.
            for _ in range(self.samples):
                result = await repeat_until_success(lambda: self.local.run(url), self.retry_policy)
                unthrottled_results.append(result)
                update_progress()

            await asyncio.gather(*remote_tasks)
        except BaseException:
            for task in remote_tasks:
                task.cancel()
            raise

        result_set = UrlResultSet(
            url=url,
            wpt=self._write_traces(url, "wpt", wpt_results),
            unthrottled=self._write_traces(url, "unthrottled", unthrottled_results),
        )
        logger.info(
            f"collected traces for {url}",
            extra={"url": url, "samples": self.samples},
        )
        return result_set

    def _write_traces(self, url: str, source: str, results: List[TraceResult]) -> List[TraceRef]:
        refs = []
        for i, result in enumerate(results):
            filename = trace_filename(url, source, i + 1)
            (self.output_dir / filename).write_text(result.trace, encoding="utf-8")
            refs.append(TraceRef(trace=filename))
        return refs

    def _remove_traces(self, entry: UrlResultSet) -> None:
        for ref in entry.wpt + entry.unthrottled:
            (self.output_dir / ref.trace).unlink(missing_ok=True)

    def _manifest_entry(self, url: str) -> Optional[UrlResultSet]:
        for entry in self.manifest:
            if entry.url == url:
                return entry
        return None

    def _progress_message(self, url: str, index: int, wpt_done: int, unthrottled_done: int) -> str:
        def count(done):
            return "DONE" if done == self.samples else f"{done + 1} / {self.samples}"

        return " ".join([
            f"{url} ({index + 1} / {len(self.urls)})",
            "mobile",
            f"({count(wpt_done)})",
            "desktop",
            f"({count(unthrottled_done)})",
        ])


async def collect(settings: Settings, urls: Sequence[str], progress: ProgressLogger) -> List[UrlResultSet]:
    """Run a full collection with the sources described by `settings`."""
    retry_policy = RetryPolicy(
        max_attempts=settings.retry_max_attempts,
        backoff_seconds=settings.retry_backoff_seconds,
    )
    local = LighthouseRunner(settings.lighthouse_command, settings.artifacts_dir)
    manifest_store = ManifestStore(settings.manifest_path, urls)

    async with WebPageTestClient(
        settings.require_api_key(),
        base_url=settings.wpt_base_url,
        location=settings.wpt_location,
        poll_fallback_seconds=settings.poll_fallback_seconds,
        request_timeout=settings.request_timeout,
    ) as remote:
        collector = TraceCollector(
            urls,
            settings.trace_samples,
            manifest_store,
            remote=remote,
            local=local,
            output_dir=settings.output_dir,
            archive_path=settings.archive_path,
            progress=progress,
            retry_policy=retry_policy,
        )
        return await collector.run()


def main() -> None:
    load_dotenv()
    settings = Settings()
    # Fail before touching the manifest, the network or Lighthouse.
    api_key = settings.require_api_key()

    progress = ProgressLogger()
    setup_logging(
        "trace_collector",
        settings.effective_log_level,
        console_handler=ProgressHandler(progress),
        secrets=[api_key],
        log_dir=settings.log_dir,
    )

    urls = load_urls_from_file(settings.urls_file)
    asyncio.run(collect(settings, urls, progress))


if __name__ == "__main__":
    main()
