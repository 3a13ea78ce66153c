import datetime as dt

import pytest

from ledger_journal.errors import DateFormatError, HeaderError
from ledger_journal.header import BlockKind, DateParser, parse_header
from ledger_journal.scanner import BlockAssembler, LineScanner
from tests.helpers.journal import journal


def _blocks(text: str):
    return list(BlockAssembler(LineScanner(journal(text), source="h.journal")))


def test_header_kinds():
    blocks = _blocks(
        """
        account Assets:Bank
            note checking

        include other/*.journal

        ; just a note
        ; and another

        1970/01/01 Payee Name  ; payee comment
            Assets  10
            Expenses
        """
    )
    headers = [parse_header(b) for b in blocks]

    assert [h.kind for h in headers] == [
        BlockKind.ACCOUNT,
        BlockKind.INCLUDE,
        BlockKind.COMMENT,
        BlockKind.TRANSACTION,
    ]
    assert headers[0].argument == "Assets:Bank"
    assert headers[1].argument == "other/*.journal"
    assert headers[2].leading_comments == ("; just a note", "; and another")
    assert headers[2].index == 2
    assert headers[3].token == "1970/01/01"
    assert headers[3].argument == "Payee Name"
    assert headers[3].comment == "; payee comment"
    assert headers[3].line_number == 9


def test_header_skips_leading_comment_lines():
    (block,) = _blocks(
        """
        ; before
            1970/01/01 Payee
            Assets  1
            Expenses
        """
    )
    header = parse_header(block)
    assert header.kind is BlockKind.TRANSACTION
    assert header.index == 1
    assert header.line_number == 2
    assert header.leading_comments == ("; before",)


def test_header_without_space_is_rejected():
    (block,) = _blocks(
        """
        1970/01/01Payee
            Assets  1
        """
    )
    with pytest.raises(HeaderError, match="unable to parse payee line: 1970/01/01Payee"):
        parse_header(block)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("1970/01/01", dt.date(1970, 1, 1)),
        ("1970-01-02", dt.date(1970, 1, 2)),
        ("1970.01.03", dt.date(1970, 1, 3)),
        ("01/04/1970", dt.date(1970, 1, 4)),
        ("05.01.1970", dt.date(1970, 1, 5)),
        ("19700106", dt.date(1970, 1, 6)),
    ],
)
def test_date_parser_known_layouts(token, expected):
    assert DateParser().parse(token) == expected


def test_date_parser_remembers_layout():
    dates = DateParser()
    dates.parse("2024-03-01")
    assert dates.layout == "%Y-%m-%d"
    assert dates.parse("2024-03-02") == dt.date(2024, 3, 2)
    assert dates.parse("2024/03/03") == dt.date(2024, 3, 3)
    assert dates.layout == "%Y/%m/%d"


def test_date_parser_rejects_impossible_dates():
    with pytest.raises(DateFormatError, match=r"unable to parse date\(1970/02/31\)"):
        DateParser().parse("1970/02/31")


def test_date_parser_custom_formats():
    dates = DateParser(["%d %b %Y"])
    with pytest.raises(DateFormatError):
        dates.parse("1970/01/01")
