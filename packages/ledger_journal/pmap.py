"""A small bounded-concurrency map over ``ThreadPoolExecutor``, in the spirit of ``p-map``.

Used to parse the files matched by one ``include`` line side by side.

- ``concurrency`` caps the number of mapper calls running at once; work is
  submitted through a sliding window so large inputs are never materialized.
- Results come back in input order.
- Fail-fast: the first mapper error cancels work that has not started yet,
  sets the optional ``cancel`` event so running mappers can stop at their next
  checkpoint, and is re-raised once the running mappers have returned.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
    cancel: threading.Event | None = None,
    thread_name_prefix: str = "p_map",
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` calls in flight.

    Once ``cancel`` is set (by the caller or by a failing mapper) no further
    items are submitted; results of items that never ran are omitted.
    """

    if not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    it = enumerate(iterable)
    results: dict[int, OutT] = {}
    future_to_idx: dict[Future, int] = {}

    def _submit(pool: ThreadPoolExecutor) -> Future | None:
        if cancel is not None and cancel.is_set():
            return None
        try:
            idx, item = next(it)
        except StopIteration:
            return None
        fut = pool.submit(mapper, item)
        future_to_idx[fut] = idx
        return fut

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix=thread_name_prefix) as pool:
        active: set[Future] = set()
        for _ in range(concurrency):
            fut = _submit(pool)
            if fut is None:
                break
            active.add(fut)

        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = future_to_idx.pop(fut)
                try:
                    results[idx] = fut.result()
                except Exception:
                    if cancel is not None:
                        cancel.set()
                    # Leaving the ``with`` block waits for mappers still running.
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise

            for _ in range(len(done)):
                fut = _submit(pool)
                if fut is None:
                    break
                active.add(fut)

    return [results[i] for i in sorted(results)]


__all__ = ["p_map"]
