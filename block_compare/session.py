"""
Comparison Session
==================
Keeps long comparisons off latency-sensitive paths and drops results that
a newer request has superseded.

There is no cancellation: every request gets a monotonically increasing
generation number, and a finished comparison is only committed when its
generation is still the newest one.

Usage:
    session = ComparisonSession()
    session.submit(left_html, right_html, callback=show)
    ...
    session.submit(edited_left, right_html, callback=show)  # first result is dropped
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from config_logging import get_logger
from .differ import compare_documents

logger = get_logger('block_compare.session')


@dataclass
class CommittedResult:
    """The newest accepted comparison result."""
    generation: int
    result: Dict[str, Any]
    committed_at: float


class ComparisonSession:
    """
    Thread-safe request generation guard.

    Args:
        comparer: Callable (left_html, right_html) -> result dict
    """

    def __init__(self, comparer: Optional[Callable[[str, str], Dict[str, Any]]] = None):
        self._comparer = comparer or compare_documents
        self._lock = threading.Lock()
        self._generation = 0
        self._committed: Optional[CommittedResult] = None
        self._worker: Optional[threading.Thread] = None

    @property
    def generation(self) -> int:
        """Newest generation handed out."""
        with self._lock:
            return self._generation

    def begin(self) -> int:
        """Start a new request; any older in-flight request becomes stale."""
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def commit(self, generation: int, result: Dict[str, Any]) -> bool:
        """
        Accept a result if no newer request was started.

        Returns:
            True if the result became the visible one
        """
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale comparison result (generation {generation}, "
                             f"current {self._generation})")
                return False
            self._committed = CommittedResult(generation, result, time.time())
            return True

    def latest(self) -> Optional[CommittedResult]:
        with self._lock:
            return self._committed

    def submit(self, left_html: str, right_html: str,
               callback: Optional[Callable[[Dict[str, Any]], None]] = None) -> int:
        """
        Run a comparison on a worker thread.

        The callback is only invoked for a result that was committed. A
        failing comparer is logged; nothing is committed for it.

        Returns:
            Generation number of this request
        """
        generation = self.begin()
        worker = threading.Thread(
            target=self._run,
            args=(generation, left_html, right_html, callback),
            daemon=True,
            name=f"bc-worker-{generation}"
        )
        with self._lock:
            self._worker = worker
        worker.start()
        return generation

    def _run(self, generation: int, left_html: str, right_html: str,
             callback: Optional[Callable[[Dict[str, Any]], None]]) -> None:
        try:
            result = self._comparer(left_html, right_html)
        except Exception as e:
            logger.exception(f"Comparison failed for generation {generation}: {e}",
                             generation=generation)
            return
        if self.commit(generation, result) and callback is not None:
            try:
                callback(result)
            except Exception as e:
                logger.exception(f"Comparison callback failed for generation {generation}: {e}")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Join the most recently started worker.

        Returns:
            True if no worker is running afterwards
        """
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()
