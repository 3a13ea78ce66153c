from decimal import Decimal

import pytest

from ledger_journal.arithmetic import evaluate
from ledger_journal.errors import ExpressionError


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("(123 * 3)", Decimal(369)),
        ("(123*2+3)", Decimal(249)),
        ("(2 + 3 * 4)", Decimal(14)),
        ("((2 + 3) * 4)", Decimal(20)),
        ("(10 / 4)", Decimal("2.5")),
        ("(-5 + 2)", Decimal(-3)),
        ("(0.1 + 0.2)", Decimal("0.3")),
        ("(08 * 2)", Decimal(16)),
        ("(007 + 0.010)", Decimal("7.010")),
        ("(0.05 * 100)", Decimal(5)),
    ],
)
def test_evaluate(expression, expected):
    assert evaluate(expression) == expected


@pytest.mark.parametrize(
    "expression",
    ["(1 / 0)", "(2 ** 8)", "(7 % 2)", "(1 +)", "", "(abc)"],
)
def test_evaluate_rejects(expression):
    with pytest.raises(ExpressionError):
        evaluate(expression)


def test_evaluate_rejects_deeply_nested_signs():
    with pytest.raises(ExpressionError):
        evaluate("(" + "-" * 5000 + "1)")
