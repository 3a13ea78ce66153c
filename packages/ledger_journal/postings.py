"""Posting line parser.

Grammar (after the trailing comment has been split off)::

    NAME [CURRENCY] AMOUNT [@@ CONVERTED | @ FACTOR]

``NAME`` ends at the first run of two or more spaces (or a tab) that is
followed by a well-formed amount field. A line without such a field is a bare
account name, i.e. an empty posting whose amount the balancer infers.
"""

from __future__ import annotations

import re
from decimal import Decimal

from .arithmetic import evaluate
from .errors import ExpressionError, PostingError
from .models import Posting

_NUMBER = r"[-+]?\d+(?:\.\d+)?"

_POSTING_RE = re.compile(
    r"^(?P<name>.+?)"
    r"(?:(?:\s{2,}|\t)"
    r"(?:(?P<currency>[A-Z$]+)\s+)?"
    rf"(?P<amount>{_NUMBER}|\([0-9+\-*/. ]+\))"
    rf"(?:\s*(?:@@\s*(?P<converted>{_NUMBER})|@\s*(?P<factor>{_NUMBER})))?"
    r")?\s*$"
)


def parse_posting(text: str, comment: str = "") -> Posting:
    """Parse one posting line into a :class:`Posting`.

    ``text`` is the line with its comment already removed; ``comment`` is
    stored on the posting as-is. Raises :class:`PostingError` when the line
    does not match or its amount expression cannot be evaluated.
    """

    line = text.strip()
    m = _POSTING_RE.match(line)
    if m is None:
        raise PostingError(f"invalid posting: {line!r}")

    amount = Decimal(0)
    raw_amount = m.group("amount")
    if raw_amount is not None:
        if raw_amount.startswith("("):
            try:
                amount = evaluate(raw_amount)
            except ExpressionError as exc:
                raise PostingError(f"invalid posting {line!r}: {exc}") from exc
        else:
            amount = Decimal(raw_amount)

    converted = m.group("converted")
    factor = m.group("factor")
    return Posting(
        account=m.group("name"),
        currency=m.group("currency") or "",
        amount=amount,
        converted_amount=Decimal(converted) if converted is not None else None,
        conversion_factor=Decimal(factor) if factor is not None else None,
        comment=comment,
    )


__all__ = ["parse_posting"]
