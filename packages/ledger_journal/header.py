"""Block header classification and transaction dates.

The header of a block is its first line with non-comment text. Comment-only
lines before it are the block's leading comments. The header text is split
on the first space: the token before it selects the block kind.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .errors import DateFormatError, HeaderError
from .scanner import Block

DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%Y.%m.%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%d.%m.%Y",
    "%Y%m%d",
)


class BlockKind(str, Enum):
    COMMENT = "comment"
    ACCOUNT = "account"
    INCLUDE = "include"
    TRANSACTION = "transaction"


@dataclass(frozen=True, slots=True)
class BlockHeader:
    """Classified first line of a block.

    ``index`` points into ``Block.lines``; for a comment-only block it equals
    ``len(block.lines)`` and ``line_number`` is the block's last line.
    """

    kind: BlockKind
    index: int
    line_number: int
    token: str = ""
    argument: str = ""
    comment: str = ""
    leading_comments: tuple[str, ...] = ()


def parse_header(block: Block) -> BlockHeader:
    """Classify ``block`` by its header line.

    Raises :class:`HeaderError` when the header text has no space to split on.
    """

    leading: list[str] = []
    for index, line in enumerate(block.lines):
        if line.is_comment:
            leading.append(line.comment)
            continue
        token, sep, rest = line.text.partition(" ")
        if not sep:
            raise HeaderError(f"unable to parse payee line: {line.text}")
        if token == "account":
            kind = BlockKind.ACCOUNT
        elif token == "include":
            kind = BlockKind.INCLUDE
        else:
            kind = BlockKind.TRANSACTION
        return BlockHeader(
            kind=kind,
            index=index,
            line_number=line.number,
            token=token,
            argument=rest.strip(),
            comment=line.comment,
            leading_comments=tuple(leading),
        )
    return BlockHeader(
        kind=BlockKind.COMMENT,
        index=len(block.lines),
        line_number=block.last_line_number,
        leading_comments=tuple(leading),
    )


class DateParser:
    """Parse header date tokens, remembering what worked last time.

    Journals almost always use one layout throughout, and consecutive
    transactions often share a date. The parser keeps the last successful
    layout (tried first) and the last token/result pair. Each parser instance
    belongs to a single parse of a single source.
    """

    def __init__(self, formats: Iterable[str] = DEFAULT_DATE_FORMATS) -> None:
        self._formats = tuple(formats)
        self.layout: str | None = None
        self._prev_token: str | None = None
        self._prev_date: dt.date | None = None

    def parse(self, token: str) -> dt.date:
        if token == self._prev_token and self._prev_date is not None:
            return self._prev_date

        candidates = self._formats
        if self.layout is not None:
            candidates = (self.layout, *(f for f in self._formats if f != self.layout))
        for layout in candidates:
            try:
                parsed = dt.datetime.strptime(token, layout).date()
            except ValueError:
                continue
            self.layout = layout
            self._prev_token = token
            self._prev_date = parsed
            return parsed
        raise DateFormatError(f"unable to parse date({token}): no known date layout matches")


__all__ = [
    "DEFAULT_DATE_FORMATS",
    "BlockHeader",
    "BlockKind",
    "DateParser",
    "parse_header",
]
