"""Helpers shared by the journal parser tests."""

from __future__ import annotations

import io
import textwrap
from decimal import Decimal

from ledger_journal import Posting


def dedent(s: str) -> str:
    # Keep internal newlines and tabs, normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n")


def journal(s: str) -> io.StringIO:
    """Return a readable stream over the dedented journal text ``s``."""

    return io.StringIO(dedent(s))


def posting(account: str, amount: int | str = 0, **kw: object) -> Posting:
    return Posting(account=account, amount=Decimal(str(amount)), **kw)
