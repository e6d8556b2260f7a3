from __future__ import annotations

import logging
import queue
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass

from ..clients.api import ExternalServiceError, PriceEstimate, PriceEstimateRequest, PriceEstimationClient

"""Fire-and-forget price estimation.

Requests run on an executor so editing is never blocked. A worker never
touches the grid: it only puts an EstimateCompletion on a thread-safe inbox,
and the grid's owner drains the inbox on its own loop (OrderGrid.process_pending),
so completions are serialized with every other command.

Each request carries the row revision at issue time; the dispatcher discards
completions whose row has changed since.
"""

__all__ = [
    "EstimateCompletion",
    "EstimationQueue",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EstimateCompletion:
    row_id: str
    revision: int  # row revision when the request was issued
    estimate: PriceEstimate | None = None
    error: str | None = None


class EstimationQueue:
    def __init__(self, client: PriceEstimationClient, executor: Executor | None = None) -> None:
        self.client = client
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="estimate")
        self._inbox: queue.Queue[EstimateCompletion] = queue.Queue()

    def submit(self, row_id: str, revision: int, request: PriceEstimateRequest) -> Future[None]:
        """Start an estimation; the returned future resolves once the completion is queued."""
        logger.debug("estimate: submit row=%s revision=%d", row_id, revision)
        return self._executor.submit(self._run, row_id, revision, request)

    def _run(self, row_id: str, revision: int, request: PriceEstimateRequest) -> None:
        try:
            estimate = self.client.estimate(request)
        except ExternalServiceError as e:
            self._inbox.put(EstimateCompletion(row_id, revision, error=str(e)))
            return
        except Exception as e:  # worker thread: report instead of losing the completion
            logger.exception("estimate: unexpected failure row=%s", row_id)
            self._inbox.put(EstimateCompletion(row_id, revision, error=f"unexpected error: {e}"))
            return
        self._inbox.put(EstimateCompletion(row_id, revision, estimate=estimate))

    def drain(self) -> list[EstimateCompletion]:
        """Take every completion currently queued (never blocks)."""
        out: list[EstimateCompletion] = []
        while True:
            try:
                out.append(self._inbox.get_nowait())
            except queue.Empty:
                return out

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
