"""Data models for parsed journals.

Both models are frozen pydantic models: once the balancer has produced a
:class:`Transaction` nothing about it changes. The balancer fills in inferred
amounts and conversion factors by building updated copies of
:class:`Posting` (``model_copy(update=...)``) before the transaction exists.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .errors import NEED_TWO_POSTINGS


class Posting(BaseModel):
    """One account line of a transaction.

    Attributes
    ----------
    account:
        Account name as written, trimmed. Opaque to the parser; may contain
        single spaces, slashes and colons.
    currency:
        Currency code written before the amount, or ``""`` when unspecified.
    amount:
        Amount in the posting's own currency. Zero for an "empty" posting
        until the balancer places the remaining balance on it.
    converted_amount:
        Explicit total in the common unit, from ``@@ X``.
    conversion_factor:
        Rate from ``@ X``, or inferred for two-currency transactions.
    comment:
        Trailing inline comment including its leading ``;``, or ``""``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    account: str
    currency: str = ""
    amount: Decimal = Decimal(0)
    converted_amount: Decimal | None = None
    conversion_factor: Decimal | None = None
    comment: str = ""

    @field_validator("account")
    @classmethod
    def _account_non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("account must be non-empty")
        return v

    @property
    def has_conversion(self) -> bool:
        return self.converted_amount is not None or self.conversion_factor is not None

    @property
    def is_empty(self) -> bool:
        """True when the balancer may place the remaining balance here.

        A ``@@`` total fixes the posting's contribution regardless of its
        amount, and a zero rate makes any amount contribute nothing, so
        neither counts as empty.
        """

        return self.amount == 0 and self.converted_amount is None and self.conversion_factor != 0

    def contribution(self) -> Decimal:
        """Signed contribution of this posting in the transaction's common unit."""

        if self.converted_amount is not None:
            return -self.converted_amount
        if self.conversion_factor is not None:
            return self.amount * self.conversion_factor
        return self.amount


class Transaction(BaseModel):
    """A balanced journal entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: dt.date
    payee: str
    payee_comment: str = ""
    comments: tuple[str, ...] = ()
    postings: tuple[Posting, ...]

    @model_validator(mode="after")
    def _at_least_two_postings(self) -> Transaction:
        if len(self.postings) < 2:
            raise ValueError(NEED_TWO_POSTINGS)
        return self

    def total(self) -> Decimal:
        """Sum of posting contributions; zero for every parsed transaction."""

        return sum((p.contribution() for p in self.postings), Decimal(0))


__all__ = ["Posting", "Transaction"]
