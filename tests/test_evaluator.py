"""Test class ShuntingYardEvaluator and calculate."""
import pytest

from arithmetic_evaluator.common.errors import (
    DivisionByZero,
    ErrorKind,
    InsufficientOperands,
    InvalidExpression,
    LexError,
    NumericDomainError,
    UnbalancedParentheses,
)
from arithmetic_evaluator.common.evaluator import ShuntingYardEvaluator, calculate
from arithmetic_evaluator.common.models import OperationError, OperationResult
from arithmetic_evaluator.common.tokenizer import tokenize
from arithmetic_evaluator.common.tokens import LeftParen, Number, Operator, RightParen


def evaluate(text: str) -> float:
    return ShuntingYardEvaluator.evaluate(tokenize(text))


@pytest.mark.parametrize("expr,expected", [
    ("3 + 4", 7.0),
    ("10 - 2", 8.0),
    ("3 * 5", 15.0),
    ("8 / 2", 4.0),
    ("3 + 4 * 2", 11.0),  # tests precedence
    ("7 + 3 * 2 - 4 / 2", 11.0),
    ("(3 + 4) * 2", 14.0),
    ("10 - 4 - 3", 3.0),  # left associative
    ("64 / 4 / 2", 8.0),
    ("2 ^ 3 ^ 2", 512.0),  # right associative
    ("2 * 3 ^ 2", 18.0),
    ("3 E 2", 300.0),
    ("1.5E3", 1500.0),
    ("2 E 3 ^ 2", 2e9),
    ("10 % 3", 1.0),
    ("-7 % 3", -1.0),  # sign of the dividend
    ("7 % -3", 1.0),
    ("5 + 0", 5.0),
    (".5 + 5.", 5.5),
    ("((2))", 2.0),
    ("42", 42.0),
    ("0 E 400", 0.0),  # power of ten alone would overflow
])
def test_evaluate_valid(expr, expected):
    """Evaluate returns correct result for valid expressions."""
    assert evaluate(expr) == expected


@pytest.mark.parametrize("expr,expected", [
    ("-3 + 4", 1.0),
    ("4--3", 7.0),
    ("4 - -3", 7.0),
    ("2 * -3", -6.0),
    ("-(3 + 4) * 2", -14.0),
    ("2 ^ -(1 + 1)", 0.25),
    ("-(-(2))", 2.0),
    ("3 * (-2)", -6.0),
    ("-2 ^ 2", 4.0),  # the sign belongs to the literal
    ("-(2) ^ 2", 4.0),  # the negated group is closed before '^'
])
def test_evaluate_unary_minus(expr, expected):
    """Unary minus is resolved by the tokenizer."""
    assert evaluate(expr) == expected


def test_evaluate_scale_with_negative_exponent():
    assert evaluate("1E-3") == pytest.approx(0.001)


@pytest.mark.parametrize("expr,expected", [
    ("0.001 E 310", 1e307),
    ("1 E 308", 1e308),
    ("-0.05 E 309", -5e307),
])
def test_evaluate_scale_beyond_float_power_of_ten(expr, expected):
    """E only overflows when the product itself does not fit in a float."""
    assert evaluate(expr) == pytest.approx(expected)


def test_numeric_domain_error_names_the_operator():
    outcome = calculate("10 ^ 400")
    assert outcome.kind is ErrorKind.NUMERIC_DOMAIN
    assert "power" in outcome.message


def test_whitespace_insensitive():
    assert evaluate("3+4*2") == evaluate(" 3 + 4 * 2 ")


def test_evaluate_is_deterministic():
    """Repeated evaluations of the same text give bit-identical results."""
    results = {evaluate("1 / 3 + 2 ^ 0.5 * 7 % 3") for _ in range(20)}
    assert len(results) == 1


@pytest.mark.parametrize("expr", ["(3 + 4", "3 + 4)", ")", "((1)", "3 * (", "-(1"])
def test_unbalanced_parentheses(expr):
    with pytest.raises(UnbalancedParentheses):
        evaluate(expr)


@pytest.mark.parametrize("expr", ["5 / 0", "5 % 0", "5 / (2 - 2)", "1 / -0"])
def test_division_by_zero(expr):
    with pytest.raises(DivisionByZero):
        evaluate(expr)


@pytest.mark.parametrize("expr", [
    "3 +",        # Trailing operator
    "+ 3",        # Leading operator
    "- 3",        # Detached minus
    "3 * * 2",
    "(+ 3)",
    "3 * )",
    "()",
    "",           # Empty expression
    "   ",
])
def test_invalid_expression(expr):
    with pytest.raises(InvalidExpression):
        evaluate(expr)


@pytest.mark.parametrize("expr", ["3 4", "3 4 + 5", "2 (3)", "(1)(2)"])
def test_too_many_operands(expr):
    """Values left over without an operator are reported as an arity mismatch."""
    with pytest.raises(InsufficientOperands):
        evaluate(expr)


@pytest.mark.parametrize("expr", ["(-8) ^ 0.5", "10 ^ 400", "1 E 400"])
def test_numeric_domain_errors(expr):
    with pytest.raises(NumericDomainError):
        evaluate(expr)


def test_lex_error_propagates_from_token_stream():
    with pytest.raises(LexError):
        evaluate("3 + 4 # 2")


def test_apply_requires_two_operands():
    """apply refuses to run with fewer than two values on the stack."""
    values = [1.0]
    with pytest.raises(InsufficientOperands):
        ShuntingYardEvaluator.apply(Operator.from_symbol("+", 0), values)


def test_apply_pushes_result():
    values = [2.0, 10.0, 3.0]
    ShuntingYardEvaluator.apply(Operator.from_symbol("-", 0), values)
    assert values == [2.0, 7.0]


def test_evaluate_hand_built_tokens():
    """The evaluator works on any iterable of tokens, not only tokenizer output."""
    tokens = [
        LeftParen(position=0),
        Number(value=1.0, position=1),
        Operator.from_symbol("+", 2),
        Number(value=2.0, position=3),
        RightParen(position=4),
        Operator.from_symbol("*", 5),
        Number(value=3.0, position=6),
    ]
    assert ShuntingYardEvaluator.evaluate(tokens) == 9.0


def test_calculate_returns_result():
    outcome = calculate("3 + 4 * 2")
    assert isinstance(outcome, OperationResult)
    assert outcome.ok
    assert outcome.result == 11.0
    assert outcome.expression == "3 + 4 * 2"


@pytest.mark.parametrize("expr,kind,position", [
    ("5 / 0", ErrorKind.DIVISION_BY_ZERO, 2),
    ("(3 + 4", ErrorKind.UNBALANCED_PARENTHESES, 0),
    ("3 + 4)", ErrorKind.UNBALANCED_PARENTHESES, 5),
    ("3 +", ErrorKind.INVALID_EXPRESSION, 2),
    ("1.2.3", ErrorKind.LEX_ERROR, 3),
    ("3 4", ErrorKind.INSUFFICIENT_OPERANDS, None),
    ("", ErrorKind.INVALID_EXPRESSION, None),
])
def test_calculate_returns_error_values(expr, kind, position):
    """calculate never raises for bad input: errors come back as values."""
    outcome = calculate(expr, line_number=3)
    assert isinstance(outcome, OperationError)
    assert not outcome.ok
    assert outcome.kind is kind
    assert outcome.position == position
    assert outcome.line_number == 3
