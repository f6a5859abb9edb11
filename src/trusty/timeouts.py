"""Per-turn time bounds.

Each model turn runs on its own single-worker thread pool and is waited on
for at most ``seconds``. The pool is shut down when the turn exits, whether
it returned, raised or timed out, so no turn's bound carries over into the
next.

Shutdown does not wait, so a timed-out worker thread keeps running until its
call returns. The HTTP backends get the same bound as their httpx timeout,
but httpx applies it per phase (connect, each read, write), not to the whole
request, so an abandoned call can outlive ``seconds``. The caller is never
blocked by it and its result is discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from trusty.exceptions import TurnTimeoutError
from trusty.llm.errors import BackendTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def guard_turn(fn: Callable[[], T], *, turn: str, seconds: float) -> T:
    """Run ``fn`` and return its result, bounded by ``seconds``.

    A BackendTimeoutError raised by ``fn`` itself (the HTTP layer hitting
    the same bound) is reported the same way as the guard expiring.

    Args:
        fn: Zero-argument callable performing the turn.
        turn: Turn name used in logs and in the timeout error.
        seconds: Time bound for this turn only.

    Raises:
        TurnTimeoutError: If the bound expires first.
    """
    if seconds <= 0:
        raise ValueError(f"Turn time bound must be positive, got {seconds}")

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"trusty-{turn}")
    try:
        future = executor.submit(fn)
        try:
            return future.result(timeout=seconds)
        except FutureTimeoutError as exc:
            future.cancel()
            logger.debug("Turn %r exceeded %ss", turn, seconds)
            raise TurnTimeoutError(turn, seconds) from exc
        except BackendTimeoutError as exc:
            raise TurnTimeoutError(turn, seconds) from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
