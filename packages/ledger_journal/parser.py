"""Per-source parse driver.

A :class:`JournalParser` owns everything needed to parse one source: its line
scanner, its date-layout cache and the comments waiting for the next
transaction. It walks the source block by block:

- ``account`` blocks are skipped;
- comment-only blocks hold their comments for the next transaction;
- ``include`` blocks parse every matched file with a fresh
  :class:`JournalParser` on a thread pool and wait for all of them;
- anything else becomes a :class:`~ledger_journal.models.Transaction` or a
  :class:`~ledger_journal.errors.ParseError`.

All parsers of one invocation share the result sink and an ``abort`` event.
Both are checked between blocks, which is where a parse stops when the
consumer goes away or a sibling include fails.
"""

from __future__ import annotations

import functools
import glob
import os
import threading
from typing import IO, NamedTuple

from .balance import balance_postings
from .config import ParserSettings
from .errors import (
    BalanceError,
    DateFormatError,
    HeaderError,
    IncludeError,
    LedgerError,
    ParseError,
    PostingError,
)
from .header import BlockHeader, BlockKind, DateParser, parse_header
from .logging_setup import get_logger
from .models import Posting, Transaction
from .pmap import p_map
from .postings import parse_posting
from .scanner import Block, BlockAssembler, LineScanner
from .streaming import ResultSink

_logger = get_logger("ledger_journal.parser")


class ParseSummary(NamedTuple):
    source: str
    transactions: int
    errors: int


class JournalParser:
    def __init__(
        self,
        stream: IO[str] | IO[bytes],
        *,
        source: str,
        sink: ResultSink,
        settings: ParserSettings,
        abort: threading.Event,
        ancestors: tuple[str, ...] = (),
    ) -> None:
        self.source = source
        self._sink = sink
        self._settings = settings
        self._abort = abort
        self._ancestors = ancestors
        self._scanner = LineScanner(stream, source=source)
        self._dates = DateParser(settings.date_formats)
        self._pending_comments: list[str] = []
        self._transactions = 0
        self._errors = 0

    def _stopped(self) -> bool:
        return self._abort.is_set() or self._sink.cancelled

    def run(self) -> ParseSummary:
        """Parse the whole source into the sink.

        Returns counts for logging. Fatal errors (``IncludeError``,
        ``LedgerReadError``) propagate to the caller.
        """

        for block in BlockAssembler(self._scanner):
            if self._stopped() or not self._handle(block):
                _logger.debug(
                    "parse:stopped source=%s line=%d", self.source, self._scanner.line_number
                )
                break
        _logger.info(
            "parse:done source=%s transactions=%d errors=%d",
            self.source,
            self._transactions,
            self._errors,
        )
        return ParseSummary(self.source, self._transactions, self._errors)

    # ---- Blocks --------------------------------------------------------------

    def _handle(self, block: Block) -> bool:
        """Process one block; False when the sink no longer accepts results."""

        try:
            header = parse_header(block)
        except HeaderError as exc:
            self._pending_comments.clear()
            line = next(ln.number for ln in block.lines if not ln.is_comment)
            return self._report(ParseError(self.source, line, str(exc)))

        if header.kind is BlockKind.COMMENT:
            self._pending_comments.extend(header.leading_comments)
            return True
        if header.kind is BlockKind.ACCOUNT:
            _logger.debug(
                "parse:skip_account source=%s line=%d account=%s",
                self.source,
                header.line_number,
                header.argument,
            )
            return True
        if header.kind is BlockKind.INCLUDE:
            self._include(header)
            return True

        try:
            transaction = self._transaction(block, header)
        except ParseError as err:
            return self._report(err)
        self._transactions += 1
        return self._sink.put_transaction(transaction)

    def _report(self, error: ParseError) -> bool:
        self._errors += 1
        _logger.warning(
            "parse:block_error source=%s line=%d error=%s", error.source, error.line, error.cause
        )
        return self._sink.put_error(error)

    def _transaction(self, block: Block, header: BlockHeader) -> Transaction:
        comments = [*self._pending_comments, *header.leading_comments]
        self._pending_comments.clear()

        try:
            date = self._dates.parse(header.token)
        except DateFormatError as exc:
            raise ParseError(self.source, header.line_number, str(exc)) from exc

        postings: list[Posting] = []
        for line in block.lines[header.index + 1 :]:
            if line.is_comment:
                comments.append(line.comment)
                continue
            try:
                postings.append(parse_posting(line.text, line.comment))
            except PostingError as exc:
                raise ParseError(self.source, line.number, str(exc)) from exc

        try:
            balanced = balance_postings(postings)
        except BalanceError as exc:
            raise ParseError(self.source, block.last_line_number, str(exc)) from exc

        return Transaction(
            date=date,
            payee=header.argument,
            payee_comment=header.comment,
            comments=tuple(comments),
            postings=tuple(balanced),
        )

    # ---- Includes ------------------------------------------------------------

    def _include(self, header: BlockHeader) -> None:
        pattern = header.argument
        paths: list[str] = []
        if pattern:
            base = os.path.dirname(self.source)
            paths = sorted(
                p for p in glob.glob(os.path.join(base, pattern)) if not os.path.isdir(p)
            )
        if not paths:
            raise IncludeError(self.source, header.line_number, pattern, "not found")

        _logger.info(
            "parse:include source=%s line=%d pattern=%s matches=%d",
            self.source,
            header.line_number,
            pattern,
            len(paths),
        )
        summaries = p_map(
            paths,
            functools.partial(self._parse_included, header=header),
            concurrency=min(self._settings.max_workers, len(paths)),
            cancel=self._abort,
            thread_name_prefix="ledger-include",
        )
        _logger.info(
            "parse:include_done source=%s line=%d files=%d transactions=%d errors=%d",
            self.source,
            header.line_number,
            len(summaries),
            sum(s.transactions for s in summaries),
            sum(s.errors for s in summaries),
        )

    def _parse_included(self, path: str, *, header: BlockHeader) -> ParseSummary:
        real = os.path.realpath(path)
        if real in self._ancestors:
            raise IncludeError(
                self.source, header.line_number, header.argument, f"include cycle through {path}"
            )
        try:
            f = open(path, encoding="utf-8")  # noqa: SIM115
        except OSError as exc:
            raise IncludeError(
                self.source, header.line_number, header.argument, f"{path}: {exc.strerror or exc}"
            ) from exc
        with f:
            child = JournalParser(
                f,
                source=path,
                sink=self._sink,
                settings=self._settings,
                abort=self._abort,
                ancestors=(*self._ancestors, real),
            )
            return child.run()


def run_parser(
    stream: IO[str] | IO[bytes],
    *,
    source: str,
    sink: ResultSink,
    settings: ParserSettings,
) -> ParseSummary:
    """Parse ``stream`` and everything it includes into ``sink``.

    Raises the fatal :class:`~ledger_journal.errors.LedgerError` that aborted
    the invocation, if any.
    """

    abort = threading.Event()
    ancestors = (os.path.realpath(source),) if source else ()
    parser = JournalParser(
        stream, source=source, sink=sink, settings=settings, abort=abort, ancestors=ancestors
    )
    try:
        return parser.run()
    except LedgerError:
        abort.set()
        raise


__all__ = ["JournalParser", "ParseSummary", "run_parser"]
