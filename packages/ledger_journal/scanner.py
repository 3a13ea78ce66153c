"""Line scanning and block assembly.

A journal is read one physical line at a time. Each line is trimmed and split
into its text and a trailing ``;`` comment (:class:`ScannedLine`).
Consecutive non-blank lines form a :class:`Block`; blank lines and the end of
input close a block. A comment-only line is not blank: it belongs to the
block it sits in.
"""

from __future__ import annotations

import io
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import IO, NamedTuple

from .errors import LedgerReadError


def split_comment(line: str) -> tuple[str, str]:
    """Split ``line`` into ``(text, comment)``, both trimmed.

    The comment starts at the first ``;`` that is neither inside double
    quotes nor escaped as ``\\;``; it keeps its leading ``;``. Escaped
    semicolons are unescaped in the returned text.
    """

    if ";" not in line:
        return line.strip(), ""

    out: list[str] = []
    quoted = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == "\\" and i + 1 < n and line[i + 1] == ";":
            out.append(";")
            i += 2
            continue
        if ch == '"':
            quoted = not quoted
        elif ch == ";" and not quoted:
            return "".join(out).strip(), line[i:].strip()
        out.append(ch)
        i += 1
    return "".join(out).strip(), ""


class ScannedLine(NamedTuple):
    """One physical line: 1-based ``number``, ``raw`` text and its parts."""

    number: int
    raw: str
    text: str
    comment: str

    @property
    def is_blank(self) -> bool:
        return not self.text and not self.comment

    @property
    def is_comment(self) -> bool:
        return not self.text and bool(self.comment)


class LineScanner:
    """Iterate the lines of ``stream`` as :class:`ScannedLine` values.

    Accepts text streams as well as binary ones (decoded as UTF-8). Every
    physical line advances :attr:`line_number`, blank ones included.
    """

    def __init__(self, stream: IO[str] | IO[bytes], *, source: str = "") -> None:
        self.source = source
        self.line_number = 0
        self._wrapper: io.TextIOWrapper | None = None
        if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
            self._wrapper = io.TextIOWrapper(stream, encoding="utf-8")
            self._stream: IO[str] = self._wrapper
        else:
            self._stream = stream  # type: ignore[assignment]

    def __iter__(self) -> Iterator[ScannedLine]:
        return self

    def __next__(self) -> ScannedLine:
        try:
            raw = self._stream.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise LedgerReadError(self.source, self.line_number + 1, str(exc)) from exc
        if not raw:
            self._release()
            raise StopIteration
        self.line_number += 1
        raw = raw.rstrip("\r\n")
        text, comment = split_comment(raw)
        return ScannedLine(self.line_number, raw, text, comment)

    def _release(self) -> None:
        # Hand the caller's binary stream back instead of closing it with the wrapper.
        if self._wrapper is not None:
            self._wrapper.detach()
            self._wrapper = None


@dataclass(slots=True)
class Block:
    """A blank-line delimited run of lines from one source."""

    source: str
    line_number: int
    lines: list[ScannedLine] = field(default_factory=list)

    @property
    def last_line_number(self) -> int:
        return self.lines[-1].number if self.lines else self.line_number


class BlockAssembler:
    """Group the lines produced by a :class:`LineScanner` into blocks."""

    def __init__(self, scanner: LineScanner) -> None:
        self._scanner = scanner

    @property
    def source(self) -> str:
        return self._scanner.source

    def __iter__(self) -> Iterator[Block]:
        current: Block | None = None
        for line in self._scanner:
            if line.is_blank:
                if current is not None:
                    yield current
                    current = None
                continue
            if current is None:
                current = Block(source=self._scanner.source, line_number=line.number)
            current.lines.append(line)
        if current is not None:
            yield current


__all__ = ["Block", "BlockAssembler", "LineScanner", "ScannedLine", "split_comment"]
