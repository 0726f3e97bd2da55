from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from core.config import settings
from core.metrics import record_item_match, record_scrape
from gluestick.collector import Collector, HTMLElement
from gluestick.extraction import collect_item
from gluestick.fetcher import FetchResult
from gluestick.fields import FieldSpec
from gluestick.request import ScrapeRequest, validate_request
from gluestick.values import Value

logger = logging.getLogger(__name__)


class ScrapeState(str, Enum):
    idle = "idle"
    registered = "registered"
    fetching = "fetching"
    completed = "completed"
    failed = "failed"


@dataclass(frozen=True)
class ScrapeOutcome:
    results: dict[str, Value] = field(default_factory=dict)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class Completion:
    """One-shot terminal signal; only the first of succeed/fail counts."""

    def __init__(self) -> None:
        self._future: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def succeed(self) -> bool:
        return self._settle(None)

    def fail(self, code: str) -> bool:
        return self._settle(code)

    def _settle(self, error: str | None) -> bool:
        if self._future.done():
            logger.debug("completion_ignored: %s", error or "success")
            return False
        self._future.set_result(error)
        return True

    async def wait(self) -> str | None:
        return await asyncio.shield(self._future)


class ScrapeOrchestrator:
    """Runs a single scrape request; build a new one per request."""

    def __init__(self, collector: Collector | None = None, *, timeout_ms: int | None = None) -> None:
        self.collector = collector or Collector()
        self.timeout_ms = settings.scrape_timeout_ms if timeout_ms is None else timeout_ms
        self.state = ScrapeState.idle
        self.results: dict[str, Value] = {}

    async def run(self, request: ScrapeRequest) -> ScrapeOutcome:
        if self.state is not ScrapeState.idle:
            raise RuntimeError(f"orchestrator already used (state={self.state.value})")
        started = time.monotonic()
        completion = Completion()
        self._register(request, completion)

        self.state = ScrapeState.fetching
        task = asyncio.create_task(self.collector.visit(request.url))
        task.add_done_callback(lambda done: _settle_unfinished(done, completion))
        try:
            error = await self._await_completion(completion)
        finally:
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        duration = time.monotonic() - started
        if error is not None:
            self.state = ScrapeState.failed
            self.results = {}
            record_scrape("failed", request.url, duration)
            return ScrapeOutcome(error=error)
        self.state = ScrapeState.completed
        record_scrape("succeeded", request.url, duration)
        return ScrapeOutcome(results=self.results)

    def _register(self, request: ScrapeRequest, completion: Completion) -> None:
        for item_name, item in request.items.items():
            fields = item.compiled_fields(f"request.items[{item_name!r}].fields")
            self.collector.on_html(item.selector, self._item_callback(item_name, fields, request.url))

        def on_request(url: str) -> None:
            logger.info("scrape_started: %s", url)

        def on_scraped(response: FetchResult) -> None:
            logger.info("scrape_finished: %s", response.url)
            completion.succeed()

        def on_error(url: str, code: str) -> None:
            logger.warning("scrape_failed: %s %s", url, code)
            completion.fail(code)

        self.collector.on_request(on_request)
        self.collector.on_scraped(on_scraped)
        self.collector.on_error(on_error)
        self.state = ScrapeState.registered

    def _item_callback(self, item_name: str, fields: dict[str, FieldSpec], url: str):
        def on_item(element: HTMLElement) -> None:
            record_item_match(url)
            collect_item(self.results, item_name, fields, element)

        return on_item

    async def _await_completion(self, completion: Completion) -> str | None:
        timeout = self.timeout_ms / 1000 if self.timeout_ms and self.timeout_ms > 0 else None
        try:
            return await asyncio.wait_for(completion.wait(), timeout)
        except asyncio.TimeoutError:
            completion.fail("timeout")
            logger.warning("scrape_timeout: after %sms", self.timeout_ms)
            return "timeout"


def _settle_unfinished(task: asyncio.Task, completion: Completion) -> None:
    # a visit that ends without firing a terminal hook still has to release the caller
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("visit_failed: %s", exc, exc_info=exc)
        completion.fail("fetch_failed")
    elif not completion.done:
        completion.fail("incomplete")


async def scrape(request: ScrapeRequest, collector: Collector | None = None) -> ScrapeOutcome:
    """Validate ``request`` and run it on a fresh orchestrator.

    Raises ``BadRequestError`` before anything is fetched if the request is
    malformed.
    """
    validate_request(request)
    return await ScrapeOrchestrator(collector).run(request)
