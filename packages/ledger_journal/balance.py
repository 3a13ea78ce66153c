"""Zero-sum enforcement for the postings of one transaction.

Order of operations:

1. Currency-group inference. Postings are grouped by non-empty currency in
   first-seen order. With exactly two groups, of which at most one carries an
   explicit conversion (``@`` or ``@@``), a conversion factor is inferred for
   the other group so both sides cancel. The group carrying a conversion is
   the base; when neither does, the first-seen currency is.
2. Summation of each posting's common-unit contribution.
3. Resolution: a non-zero total goes to the single empty posting; zero or
   several empty postings is an error.

Inference must run before summation: it is what lets a plain two-currency
exchange balance without any empty posting.
"""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from decimal import Decimal

from .errors import MORE_THAN_ONE_EMPTY, NEED_TWO_POSTINGS, NO_EMPTY_ACCOUNT, BalanceError
from .models import Posting

# Working precision while inferring a factor and checking what it leaves behind.
INFERENCE_PRECISION = 50
# Residue an inferred factor may leave, relative to the largest contribution.
INFERENCE_RESIDUE = Decimal("1e-18")


def common_unit_total(postings: Sequence[Posting]) -> Decimal:
    return sum((p.contribution() for p in postings), Decimal(0))


def infer_conversion_factors(postings: Sequence[Posting]) -> tuple[list[Posting], bool]:
    """Infer a conversion factor for two-currency transactions.

    Returns the (possibly updated) postings and whether a factor was assigned.
    Postings that already carry a conversion are never modified.
    """

    out = list(postings)
    groups: dict[str, list[int]] = {}
    for i, p in enumerate(out):
        if p.currency:
            groups.setdefault(p.currency, []).append(i)
    if len(groups) != 2:
        return out, False

    first, second = groups.values()
    first_converts = any(out[i].has_conversion for i in first)
    second_converts = any(out[i].has_conversion for i in second)
    if first_converts and second_converts:
        return out, False
    base, other = (second, first) if second_converts else (first, second)

    sum_base = common_unit_total([out[i] for i in base])
    sum_other_raw = sum((out[i].amount for i in other), Decimal(0))
    if sum_other_raw == 0 or sum_base + sum_other_raw == 0:
        return out, False

    with decimal.localcontext() as ctx:
        ctx.prec = max(ctx.prec, INFERENCE_PRECISION)
        factor = -sum_base / sum_other_raw
    for i in other:
        if not out[i].has_conversion:
            out[i] = out[i].model_copy(update={"conversion_factor": factor})
    return out, True


def balance_postings(postings: Sequence[Posting]) -> list[Posting]:
    """Return ``postings`` completed so that their contributions sum to zero.

    Raises :class:`BalanceError` with one of the ``errors`` module messages
    when that is impossible.
    """

    if len(postings) < 2:
        raise BalanceError(NEED_TWO_POSTINGS)

    out, inferred = infer_conversion_factors(postings)

    empty_indexes = [i for i, p in enumerate(out) if p.is_empty]
    if inferred:
        with decimal.localcontext() as ctx:
            ctx.prec = max(ctx.prec, INFERENCE_PRECISION)
            total = common_unit_total(out)
            largest = max(abs(p.contribution()) for p in out)
            if abs(total) <= largest * INFERENCE_RESIDUE:
                return out
    else:
        total = common_unit_total(out)
        if total == 0:
            return out

    num_empty = len(empty_indexes)
    if num_empty == 0:
        raise BalanceError(NO_EMPTY_ACCOUNT)
    if num_empty > 1:
        raise BalanceError(MORE_THAN_ONE_EMPTY)

    # The single empty posting absorbs the rest, in its own currency when it has a rate.
    empty_index = empty_indexes[0]
    empty = out[empty_index]
    amount = -total
    if empty.conversion_factor is not None:
        amount = amount / empty.conversion_factor
    out[empty_index] = empty.model_copy(update={"amount": amount})
    return out


__all__ = [
    "INFERENCE_PRECISION",
    "INFERENCE_RESIDUE",
    "balance_postings",
    "common_unit_total",
    "infer_conversion_factors",
]
