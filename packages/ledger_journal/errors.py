"""Exception types raised while parsing a journal.

Two layers:

- Component errors (``HeaderError``, ``DateFormatError``, ``PostingError``,
  ``ExpressionError``, ``BalanceError``) are plain ``ValueError`` subclasses
  raised by the individual parsing steps. They know nothing about files or
  line numbers.
- ``LedgerError`` subclasses are what callers see. The driver wraps a
  component error into a :class:`ParseError` carrying the source name and the
  line the failure was detected on. ``IncludeError`` and ``LedgerReadError``
  are fatal: they abort the whole invocation.
"""

from __future__ import annotations

# Balancer messages; callers and tests match on these verbatim.
NEED_TWO_POSTINGS = "need at least two postings"
NO_EMPTY_ACCOUNT = "unable to balance transaction: no empty account to place extra balance"
MORE_THAN_ONE_EMPTY = "unable to balance transaction: more than one account empty"


class HeaderError(ValueError):
    """The first line of a block could not be split into token and payee."""


class DateFormatError(ValueError):
    """The date token of a transaction header matched no known layout."""


class ExpressionError(ValueError):
    """A parenthesized amount expression could not be evaluated."""


class PostingError(ValueError):
    """A posting line could not be parsed."""


class BalanceError(ValueError):
    """The postings of a transaction cannot be made to sum to zero."""


class LedgerError(Exception):
    """Base class for errors reported to callers of the parser."""

    fatal: bool = False


class ParseError(LedgerError):
    """A single block failed to parse; the block is skipped.

    ``str(err)`` follows the ``<source>:<line>: unable to parse transaction:
    <cause>`` contract that downstream tooling matches on. ``source`` is empty
    for anonymous streams.
    """

    def __init__(self, source: str, line: int, cause: str) -> None:
        self.source = source
        self.line = line
        self.cause = cause
        super().__init__(f"{source}:{line}: unable to parse transaction: {cause}")


class IncludeError(LedgerError):
    """An ``include`` directive could not be satisfied."""

    fatal = True

    def __init__(self, source: str, line: int, pattern: str, reason: str) -> None:
        self.source = source
        self.line = line
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"{source}:{line}: unable to include file({pattern}): {reason}")


class LedgerReadError(LedgerError):
    """The underlying stream failed while being read or decoded."""

    fatal = True

    def __init__(self, source: str, line: int, reason: str) -> None:
        self.source = source
        self.line = line
        self.reason = reason
        super().__init__(f"{source}:{line}: unable to read journal: {reason}")


__all__ = [
    "MORE_THAN_ONE_EMPTY",
    "NEED_TWO_POSTINGS",
    "NO_EMPTY_ACCOUNT",
    "BalanceError",
    "DateFormatError",
    "ExpressionError",
    "HeaderError",
    "IncludeError",
    "LedgerError",
    "LedgerReadError",
    "ParseError",
    "PostingError",
]
