import io
import threading

import pytest

from ledger_journal import IncludeError, ParseError, load_settings, parse_ledger, parse_ledger_file


def _tx(payee: str, amount: int = 1) -> str:
    return f"1970/01/01 {payee}\n    Assets  {amount}\n    Expenses\n"


def test_include_merges_every_match(write_journal):
    write_journal("sub/a.journal", _tx("A1") + "\n" + _tx("A2"))
    write_journal("sub/b.journal", _tx("B1"))
    main = write_journal("main.journal", _tx("Top") + "\ninclude sub/*.journal\n\n" + _tx("End"))

    transactions = parse_ledger_file(main)
    payees = [t.payee for t in transactions]

    assert sorted(payees) == ["A1", "A2", "B1", "End", "Top"]
    assert payees[0] == "Top"
    assert payees[-1] == "End"
    assert payees.index("A1") < payees.index("A2")


def test_include_resolves_relative_to_including_file(write_journal):
    write_journal("books/2024/q1.journal", _tx("Q1"))
    write_journal("books/2024.journal", "include 2024/*.journal\n")
    main = write_journal("books/main.journal", "include 2024.journal\n")

    assert [t.payee for t in parse_ledger_file(main)] == ["Q1"]


def test_anonymous_stream_includes_from_working_directory(write_journal):
    write_journal("other.journal", _tx("Other"))

    transactions = parse_ledger(io.StringIO("include other.journal\n"))
    assert [t.payee for t in transactions] == ["Other"]


def test_include_without_matches_is_fatal(write_journal):
    main = write_journal("main.journal", _tx("Top") + "\ninclude missing/*.journal\n")

    with pytest.raises(IncludeError) as ei:
        parse_ledger_file(main)
    assert str(ei.value) == f"{main}:5: unable to include file(missing/*.journal): not found"
    assert ei.value.fatal


def test_include_cycle_is_fatal(write_journal):
    write_journal("a.journal", "include b.journal\n")
    write_journal("b.journal", "include a.journal\n")
    main = write_journal("main.journal", "include a.journal\n")

    with pytest.raises(IncludeError, match="include cycle"):
        parse_ledger_file(main)


def test_error_in_included_file_names_that_file(write_journal):
    bad = write_journal("bad.journal", "1970/01/01 Bad\n    Assets  1\n    Expenses  2\n")
    main = write_journal("main.journal", "include bad.journal\n")

    with pytest.raises(ParseError) as ei:
        parse_ledger_file(main)
    assert str(ei.value).startswith(f"{bad}:3: unable to parse transaction:")


def test_include_concurrency_is_capped(write_journal, monkeypatch):
    for i in range(6):
        write_journal(f"parts/{i}.journal", _tx(f"P{i}"))
    main = write_journal("main.journal", "include parts/*.journal\n")

    seen: set[str] = set()
    original_start = threading.Thread.start

    def _start(self):
        seen.add(self.name)
        original_start(self)

    monkeypatch.setattr(threading.Thread, "start", _start)
    transactions = parse_ledger_file(main, settings=load_settings(max_workers=2))

    assert sorted(t.payee for t in transactions) == [f"P{i}" for i in range(6)]
    assert len({n for n in seen if n.startswith("ledger-include")}) <= 2
