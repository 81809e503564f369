# === FILE: site_mirror/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Protocol, Set

from aiohttp import ClientSession, ClientTimeout

from site_mirror.aggregator import MirrorReport
from site_mirror.config import MirrorConfig
from site_mirror.crawler.fetcher import Fetcher
from site_mirror.crawler.models import FetchResult, ResourceKind, Task
from site_mirror.crawler.paths import (
    canonicalize,
    host_of,
    is_same_host,
    local_path,
    to_local_path,
)
from site_mirror.errors import MirrorError, ParseError, StorageError, UrlError
from site_mirror.logger import LOGGER_NAME
from site_mirror.parser.css_rewriter import rewrite_css_bytes
from site_mirror.parser.html_rewriter import rewrite_html
from site_mirror.parser.links import LinkRewriter

__all__ = ("MirrorCrawler", "SupportsFetch")


class SupportsFetch(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


class MirrorCrawler:
    """
    Асинхронный зеркалировщик сайта: один запуск = один экземпляр.

    Every same-host URL is fetched at most once. The live-task counter is
    incremented in :meth:`enqueue` and decremented only when the worker has
    finished rewriting and storing its resource, so references discovered by a
    worker are always counted before that worker's own task completes.
    """

    def __init__(self, config: MirrorConfig, fetcher: Optional[SupportsFetch] = None) -> None:
        self.config = config
        self.seed_url = canonicalize(config.seed_url)
        self.base_host = host_of(self.seed_url)
        self.output_root = Path(config.output_dir)
        self.concurrency: int = config.concurrency
        self.visited: Set[str] = set()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[SupportsFetch] = fetcher
        self.logger = logging.getLogger(LOGGER_NAME)
        self.report = MirrorReport(seed_url=self.seed_url, output_dir=str(self.output_root))
        self._claimed_paths: Dict[str, str] = {}
        self._workers: Set[asyncio.Task[None]] = set()
        self._live = 0
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._idle: Optional[asyncio.Event] = None

    async def __aenter__(self) -> MirrorCrawler:
        if self.fetcher is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self.fetcher = Fetcher(self.session, self.config.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    @property
    def in_flight(self) -> int:
        """Number of tasks that are enqueued or running."""
        return self._live

    async def run(self) -> MirrorReport:
        """Mirror the site and block until no task is queued or running."""
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized; use 'async with MirrorCrawler(...)'")
        self.logger.info("Старт зеркалирования: %s -> %s", self.seed_url, self.output_root)
        start = time.monotonic()
        self._semaphore = asyncio.Semaphore(self.concurrency)
        self._idle = asyncio.Event()
        self._idle.set()
        try:
            self.output_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(str(self.output_root), f"cannot create output directory: {exc}") from exc

        self.enqueue(self.seed_url, ResourceKind.PAGE)
        await self._idle.wait()

        duration = time.monotonic() - start
        self.report.finish(duration)
        self.logger.info(
            "Зеркалирование завершено: %d файлов, %d ошибок за %.2f с",
            len(self.report.resources),
            len(self.report.failures),
            duration,
        )
        return self.report

    def enqueue(self, url: str, hint: ResourceKind = ResourceKind.ASSET) -> bool:
        """
        Schedule *url* unless it is off-host or already seen.

        Returns True if a new task was started. Must be called from the event
        loop thread; the membership test and the insert are not separated by
        an ``await`` and therefore act as one test-and-set.
        """
        if self._idle is None:
            raise RuntimeError("enqueue() called outside of run()")
        try:
            canonical = canonicalize(url)
        except UrlError as exc:
            self.logger.debug("Skip %s", exc)
            return False
        if not is_same_host(canonical, self.base_host):
            return False
        if canonical in self.visited:
            return False
        self.visited.add(canonical)

        self._live += 1
        self._idle.clear()
        worker = asyncio.create_task(self._worker(Task(canonical, hint)))
        self._workers.add(worker)
        worker.add_done_callback(self._workers.discard)
        return True

    async def _worker(self, task: Task) -> None:
        assert self._semaphore is not None
        try:
            async with self._semaphore:
                await self._process(task)
        except MirrorError as exc:
            self.logger.warning("Ошибка %s: %s", task.url, exc.reason)
            self.report.add_failure(task.url, exc)
        except Exception as exc:
            self.logger.exception("Unexpected failure while mirroring %s", task.url)
            self.report.add_failure(task.url, exc)
        finally:
            self._task_done()

    def _task_done(self) -> None:
        assert self._idle is not None
        self._live -= 1
        if self._live == 0:
            self._idle.set()

    async def _process(self, task: Task) -> None:
        assert self.fetcher is not None
        self.logger.info("Downloading: %s", task.url)
        result = await self.fetcher.fetch(task.url)
        kind = result.resolve_kind(task.hint)
        body = self._rewrite(task.url, kind, result.body)
        path = await self._persist(task.url, body)
        self.report.add_resource(task.url, path, kind, len(body))

    def _rewrite(self, url: str, kind: ResourceKind, body: bytes) -> bytes:
        linker = LinkRewriter(page_url=url, base_host=self.base_host, enqueue=self.enqueue)
        try:
            if kind is ResourceKind.PAGE:
                return rewrite_html(body, linker)
            if kind is ResourceKind.STYLESHEET:
                return rewrite_css_bytes(body, linker)
        except ParseError as exc:
            self.logger.warning("Сохраняю без изменений %s: %s", url, exc.reason)
        return body

    async def _persist(self, url: str, body: bytes) -> str:
        rel = local_path(url)
        # claimed before the first await
        owner = self._claimed_paths.setdefault(rel, url)
        if owner != url:
            raise StorageError(url, f"path collision: {rel} already holds {owner}")
        target = to_local_path(url, self.output_root)
        try:
            await asyncio.to_thread(_write_file, target, body)
        except (OSError, ValueError) as exc:
            raise StorageError(url, f"cannot write {target}: {exc}") from exc
        return rel


def _write_file(target: Path, body: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(body)
