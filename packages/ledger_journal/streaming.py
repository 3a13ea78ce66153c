"""Result delivery between parser threads and the caller.

Every parse invocation writes into one sink, shared by the top-level file and
all of its (possibly concurrent) includes:

- :class:`CollectingSink` backs the batch API: a lock-guarded list that
  raises the first error it is given (fail-fast).
- :class:`ChannelSink` backs the streaming API: transactions and errors go to
  two :class:`Channel` queues read by the caller (collect-all).

A :class:`Channel` is a queue with an end-of-stream marker and a shared
``closed`` event. The consumer sets the event to stop the parse; producers
blocked on a full queue notice it within ``poll_interval`` seconds and give
up instead of waiting forever on a reader that is gone.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator
from typing import Generic, Protocol, TypeVar

from .errors import LedgerError
from .models import Transaction

T = TypeVar("T")

_EOF = object()


class ResultSink(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def put_transaction(self, transaction: Transaction) -> bool: ...

    def put_error(self, error: LedgerError) -> bool: ...


class Channel(Generic[T]):
    """A closable, optionally bounded queue iterated by a single consumer."""

    def __init__(
        self, closed: threading.Event, *, maxsize: int = 0, poll_interval: float = 0.05
    ) -> None:
        self._queue: queue.Queue[object] = queue.Queue(maxsize)
        self._closed = closed
        self._poll_interval = poll_interval

    def put(self, item: T) -> bool:
        """Enqueue ``item``, blocking while full. False once the consumer has closed."""

        return self._put(item)

    def finish(self) -> None:
        """Mark the end of the stream for the consumer."""

        self._put(_EOF)

    def _put(self, item: object) -> bool:
        while not self._closed.is_set():
            try:
                self._queue.put(item, timeout=self._poll_interval)
            except queue.Full:
                continue
            return True
        return False

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                item = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                if self._closed.is_set():
                    return
                continue
            if item is _EOF:
                return
            yield item  # type: ignore[misc]


class ChannelSink:
    """Route transactions and errors to their own channels."""

    def __init__(
        self,
        transactions: Channel[Transaction],
        errors: Channel[LedgerError],
        closed: threading.Event,
    ) -> None:
        self.transactions = transactions
        self.errors = errors
        self._closed = closed

    @property
    def cancelled(self) -> bool:
        return self._closed.is_set()

    def put_transaction(self, transaction: Transaction) -> bool:
        return self.transactions.put(transaction)

    def put_error(self, error: LedgerError) -> bool:
        return self.errors.put(error)


class CollectingSink:
    """Accumulate transactions in a list; raise the first error."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._transactions: list[Transaction] = []

    @property
    def cancelled(self) -> bool:
        return False

    def put_transaction(self, transaction: Transaction) -> bool:
        with self._lock:
            self._transactions.append(transaction)
        return True

    def put_error(self, error: LedgerError) -> bool:
        raise error

    @property
    def transactions(self) -> list[Transaction]:
        with self._lock:
            return list(self._transactions)


__all__ = ["Channel", "ChannelSink", "CollectingSink", "ResultSink"]
