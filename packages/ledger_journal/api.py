"""Public entry points of the ``ledger_journal`` package.

Batch functions (:func:`parse_ledger_file`, :func:`parse_ledger`) are
fail-fast: they return every transaction or raise the first error of any
kind, never a partial ledger.

Streaming functions (:func:`parse_ledger_async`,
:func:`parse_ledger_file_async`) are collect-all: they return a
:class:`LedgerStream` whose ``transactions`` and ``errors`` channels fill up
while a background thread parses. Non-fatal errors do not stop the parse; a
fatal one is the last item on ``errors``.
"""

from __future__ import annotations

import os
import threading
from os import PathLike
from types import TracebackType
from typing import IO

from .config import ParserSettings, load_settings
from .errors import LedgerError
from .logging_setup import get_logger
from .models import Transaction
from .parser import run_parser
from .streaming import Channel, ChannelSink, CollectingSink

_logger = get_logger("ledger_journal.api")


def parse_ledger_file(
    filename: str | PathLike[str], *, settings: ParserSettings | None = None
) -> list[Transaction]:
    """Parse the journal at ``filename``, resolving includes next to it.

    Raises ``OSError`` when the file cannot be opened and
    :class:`~ledger_journal.errors.LedgerError` for the first parse error.
    """

    source = os.fspath(filename)
    with open(source, encoding="utf-8") as f:
        return _collect(f, source=source, settings=settings)


def parse_ledger(
    stream: IO[str] | IO[bytes], *, settings: ParserSettings | None = None
) -> list[Transaction]:
    """Parse an anonymous stream; includes resolve against the working directory."""

    return _collect(stream, source="", settings=settings)


def _collect(
    stream: IO[str] | IO[bytes], *, source: str, settings: ParserSettings | None
) -> list[Transaction]:
    sink = CollectingSink()
    run_parser(stream, source=source, sink=sink, settings=settings or load_settings())
    return sink.transactions


class LedgerStream:
    """Transactions and errors of a parse running on a background thread.

    Iterate ``transactions`` and ``errors`` to consume results; both end when
    the parse completes. The transaction channel is bounded
    (``queue_size``) and applies backpressure; the error channel is unbounded
    so reading all transactions first and then all errors never deadlocks.

    ``close()`` (or leaving a ``with`` block) cancels the parse: producers stop
    at the next block boundary instead of waiting on a reader that is gone.
    """

    def __init__(
        self,
        stream: IO[str] | IO[bytes],
        *,
        source: str = "",
        settings: ParserSettings | None = None,
        owns_stream: bool = False,
    ) -> None:
        settings = settings or load_settings()
        self.source = source
        self._closed = threading.Event()
        self.transactions: Channel[Transaction] = Channel(
            self._closed, maxsize=settings.queue_size, poll_interval=settings.poll_interval
        )
        self.errors: Channel[LedgerError] = Channel(
            self._closed, poll_interval=settings.poll_interval
        )
        self._thread = threading.Thread(
            target=self._produce,
            args=(stream, settings, owns_stream),
            name=f"ledger-stream:{source or '<stream>'}",
            daemon=True,
        )
        self._thread.start()

    def _produce(
        self, stream: IO[str] | IO[bytes], settings: ParserSettings, owns_stream: bool
    ) -> None:
        sink = ChannelSink(self.transactions, self.errors, self._closed)
        try:
            run_parser(stream, source=self.source, sink=sink, settings=settings)
        except LedgerError as err:
            _logger.error("stream:aborted source=%s error=%s", self.source, err)
            self.errors.put(err)
        finally:
            if owns_stream:
                stream.close()
            self.transactions.finish()
            self.errors.finish()

    def collect(self) -> tuple[list[Transaction], list[LedgerError]]:
        """Drain both channels and wait for the parse to finish."""

        transactions = list(self.transactions)
        errors = list(self.errors)
        self._thread.join()
        return transactions, errors

    def close(self, timeout: float | None = None) -> None:
        self._closed.set()
        self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def __enter__(self) -> LedgerStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def parse_ledger_async(
    stream: IO[str] | IO[bytes], *, settings: ParserSettings | None = None
) -> LedgerStream:
    """Start parsing an anonymous stream in the background."""

    return LedgerStream(stream, settings=settings)


def parse_ledger_file_async(
    filename: str | PathLike[str], *, settings: ParserSettings | None = None
) -> LedgerStream:
    """Start parsing the journal at ``filename`` in the background.

    The file is opened eagerly, so an unreadable top-level file raises
    ``OSError`` here rather than showing up on the error channel.
    """

    source = os.fspath(filename)
    f = open(source, encoding="utf-8")  # noqa: SIM115
    try:
        return LedgerStream(f, source=source, settings=settings, owns_stream=True)
    except BaseException:
        f.close()
        raise


__all__ = [
    "LedgerStream",
    "parse_ledger",
    "parse_ledger_async",
    "parse_ledger_file",
    "parse_ledger_file_async",
]
