"""Background execution of root resolution.

Walks read directories and must not run on the caller's interactive thread.
``RootResolver`` runs them on a thread pool and hands each result back through
a dispatcher exactly once. The default dispatcher is a ``CompletionQueue``
that the caller drains on its own thread; an event loop's
``call_soon_threadsafe`` works just as well.
"""

import asyncio
import itertools
import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Tuple

from projroot.core import PathLike, RootMatch, resolve
from projroot.exceptions import SubmissionError

logger = logging.getLogger(__name__)

Dispatch = Callable[..., Any]


@dataclass(frozen=True)
class Completion:
    """Result of one submitted resolution."""

    request_id: int
    start_dir: Path
    match: Optional[RootMatch]

    @property
    def found(self) -> bool:
        return self.match is not None


CompletionCallback = Callable[[Completion], None]


@dataclass
class ResolveRequest:
    """Handle for a submitted resolution job."""

    request_id: int
    start_dir: Path
    patterns: Tuple[str, ...]
    future: "Future[Optional[RootMatch]]"

    def done(self) -> bool:
        return self.future.done()


class CompletionQueue:
    """Thread-safe channel of pending callbacks, run by whoever drains it."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Tuple[Callable[..., Any], tuple]]" = queue.Queue()

    def __call__(self, fn: Callable[..., Any], *args: Any) -> None:
        self._queue.put((fn, args))

    def __len__(self) -> int:
        return self._queue.qsize()

    def drain(self, timeout: Optional[float] = None) -> int:
        """Run queued callbacks on the calling thread.

        Args:
            timeout: If given, wait up to this many seconds for the first
                callback. Without it only already queued callbacks run.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        if timeout is not None:
            try:
                fn, args = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            fn(*args)
            ran += 1
        while True:
            try:
                fn, args = self._queue.get_nowait()
            except queue.Empty:
                return ran
            fn(*args)
            ran += 1


class RootResolver:
    """Runs root resolution jobs on a worker pool.

    Jobs are independent: each walk owns its own state and cache, so any
    number may run concurrently. Completions may arrive in any order; use
    ``latest_request_id`` (or your own bookkeeping) to ignore stale ones.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        dispatch: Optional[Dispatch] = None,
    ):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="projroot"
        )
        self.dispatch = dispatch if dispatch is not None else CompletionQueue()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._latest_request_id = 0
        self._closed = False

    @property
    def latest_request_id(self) -> int:
        return self._latest_request_id

    def is_latest(self, completion: Completion) -> bool:
        return completion.request_id == self._latest_request_id

    def _next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def _publish(self, request_id: int) -> None:
        with self._lock:
            self._latest_request_id = max(self._latest_request_id, request_id)

    def submit(
        self,
        start_dir: PathLike,
        patterns: Iterable[str],
        callback: CompletionCallback,
    ) -> ResolveRequest:
        """Schedule a resolution and return its request handle.

        callback receives a Completion exactly once, through the dispatcher.

        Raises:
            SubmissionError: If the pool refuses the job (shut down, or no
                worker thread could be started).
        """
        start = Path(start_dir)
        pattern_tuple = tuple(patterns)
        request_id = self._next_id()

        try:
            future = self._executor.submit(resolve, start, pattern_tuple)
        except RuntimeError as e:
            raise SubmissionError(start, str(e)) from e
        # Only accepted jobs become the latest request
        self._publish(request_id)

        def on_done(fut: "Future[Optional[RootMatch]]") -> None:
            try:
                match = fut.result()
            except Exception:
                logger.exception("Root resolution for %s failed", start)
                match = None
            self.dispatch(callback, Completion(request_id, start, match))

        future.add_done_callback(on_done)
        logger.debug("Submitted request %d for %s", request_id, start)
        return ResolveRequest(request_id, start, pattern_tuple, future)

    async def resolve_async(
        self, start_dir: PathLike, patterns: Iterable[str]
    ) -> Optional[RootMatch]:
        """Await a resolution on the pool from a running event loop."""
        loop = asyncio.get_running_loop()
        start = Path(start_dir)
        try:
            future = loop.run_in_executor(self._executor, resolve, start, tuple(patterns))
        except RuntimeError as e:
            raise SubmissionError(start, str(e)) from e
        return await future

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "RootResolver":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
