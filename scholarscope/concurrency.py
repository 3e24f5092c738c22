"""scholarscope.concurrency
~~~~~~~~~~~~~~~~~~~~~~~~~~
Best-effort parallel fan-out.

``settle_all`` runs a list of callables on a thread pool and waits for every
one of them to settle. It never raises on behalf of a branch: each branch
yields an :class:`Outcome` carrying either its value or its error, in
submission order, and the caller decides what to do with failures.
"""
from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from .errors import UpstreamTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def settle_all(
    calls: Sequence[Callable[[], T]],
    *,
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None,
) -> List[Outcome[T]]:
    """Run ``calls`` concurrently and return one Outcome per call.

    Parameters
    ----------
    calls : Sequence[Callable[[], T]]
        Zero-argument callables (use ``functools.partial`` to bind arguments).
    max_workers : int, optional
        Pool size; defaults to one worker per call.
    timeout : float, optional
        Overall time box. Branches still running when it elapses settle as
        :class:`UpstreamTimeout` and are left to finish in the background.
    """
    if not calls:
        return []

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers or len(calls))
    try:
        futures = [executor.submit(call) for call in calls]
        done, not_done = concurrent.futures.wait(futures, timeout=timeout)

        outcomes: List[Outcome[T]] = []
        for index, future in enumerate(futures):
            if future in not_done:
                future.cancel()
                logger.debug(f"Branch {index} still running after {timeout}s")
                outcomes.append(Outcome(error=UpstreamTimeout(f"Branch exceeded {timeout}s time box")))
                continue
            try:
                outcomes.append(Outcome(value=future.result()))
            except Exception as exc:
                outcomes.append(Outcome(error=exc))
        return outcomes
    finally:
        # Do not block on stragglers that outlived the time box
        executor.shutdown(wait=False, cancel_futures=True)


def successes(outcomes: Sequence[Outcome[T]]) -> List[T]:
    """Values of the branches that succeeded, in submission order."""
    return [o.value for o in outcomes if o.ok]
