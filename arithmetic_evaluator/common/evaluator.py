"""Evaluate arithmetic expressions with the Shunting-yard algorithm."""
import math
from typing import Iterable, List, Optional, Union

from arithmetic_evaluator.common.errors import (
    DivisionByZero,
    EvaluationError,
    InsufficientOperands,
    InvalidExpression,
    NumericDomainError,
    UnbalancedParentheses,
)
from arithmetic_evaluator.common.models import Outcome, OperationError, OperationResult
from arithmetic_evaluator.common.operators import DIVISION_OPERATORS, OPERATORS, Associativity
from arithmetic_evaluator.common.tokenizer import tokenize
from arithmetic_evaluator.common.tokens import LeftParen, Number, Operator, Token


class ShuntingYardEvaluator:
    """
    Evaluate a token stream in a single left-to-right pass.

    Design constraints:
        - No eval(), no dynamic code execution
        - No syntax tree: two explicit stacks owned by one ``evaluate`` call
        - Nothing is shared between calls

    Algorithm:
        1. Numbers go to the value stack
        2. An incoming operator first applies every stacked operator that
           binds tighter (or as tight, when the incoming one is left associative)
        3. ')' applies operators down to the matching '('
        4. At the end, the remaining operators are applied

    Examples:
        - 3 + 4 * 2 -> 11 ('*' is applied before '+')
        - 2 ^ 3 ^ 2 -> 512 ('^' is right associative)
    """

    @staticmethod
    def _should_pop(top: Union[Operator, LeftParen], incoming: Operator) -> bool:
        """
        Decide whether the operator on top of the stack must be applied before ``incoming`` is pushed.

        :param top: Top of the operator stack
        :param Operator incoming: Operator being pushed

        :return: True if ``top`` has to be applied first
        :rtype: bool
        """
        if not isinstance(top, Operator):
            # '(' acts as a barrier
            return False
        if top.precedence > incoming.precedence:
            return True
        return top.precedence == incoming.precedence and incoming.associativity is Associativity.LEFT

    @staticmethod
    def apply(op: Operator, values: List[float]) -> None:
        """
        Pop two operands, apply ``op`` and push the result back.

        :param Operator op: Operator to apply
        :param List[float] values: Value stack, modified in place

        :raises InsufficientOperands: If fewer than two values are available
        :raises DivisionByZero: If the divisor of '/' or '%' is zero
        :raises NumericDomainError: If the result is not a real number
        """
        if len(values) < 2:
            raise InsufficientOperands(
                f"Operator {op.symbol!r} needs two operands, found {len(values)}", op.position
            )
        right = values.pop()
        left = values.pop()

        if op.symbol in DIVISION_OPERATORS and right == 0:
            raise DivisionByZero(f"Division by zero in {left!r} {op.symbol} {right!r}", op.position)

        entry = OPERATORS[op.symbol]
        try:
            result = entry.function(left, right)
        except (OverflowError, ValueError) as exc:
            raise NumericDomainError(
                f"Cannot compute {entry.name} of {left!r} and {right!r}: {exc}", op.position
            ) from exc

        if math.isnan(result):
            raise NumericDomainError(f"{left!r} {op.symbol} {right!r} is not a number", op.position)
        values.append(result)

    @staticmethod
    def evaluate(tokens: Iterable[Token]) -> float:
        """
        Evaluate a token stream.

        :param Iterable[Token] tokens: Tokens in input order, consumed once

        :return: Computed result
        :rtype: float
        :raises EvaluationError: Any of its subclasses, on the first problem found
        """
        operators: List[Union[Operator, LeftParen]] = []
        values: List[float] = []
        previous: Optional[Token] = None

        for token in tokens:
            if isinstance(token, Number):
                values.append(token.value)

            elif isinstance(token, Operator):
                if previous is None or isinstance(previous, (Operator, LeftParen)):
                    raise InvalidExpression(
                        f"Operator {token.symbol!r} has no left operand", token.position
                    )
                while operators and ShuntingYardEvaluator._should_pop(operators[-1], token):
                    ShuntingYardEvaluator.apply(operators.pop(), values)
                operators.append(token)

            elif isinstance(token, LeftParen):
                operators.append(token)

            else:
                if isinstance(previous, Operator):
                    raise InvalidExpression(
                        f"Operator {previous.symbol!r} has no right operand", previous.position
                    )
                if isinstance(previous, LeftParen):
                    raise InvalidExpression("Empty parentheses", previous.position)
                while True:
                    if not operators:
                        raise UnbalancedParentheses(
                            "Closing parenthesis has no matching opening parenthesis", token.position
                        )
                    top = operators.pop()
                    if isinstance(top, LeftParen):
                        break
                    ShuntingYardEvaluator.apply(top, values)

            previous = token

        if isinstance(previous, Operator):
            raise InvalidExpression(
                f"Operator {previous.symbol!r} has no right operand", previous.position
            )

        while operators:
            top = operators.pop()
            if isinstance(top, LeftParen):
                raise UnbalancedParentheses("Opening parenthesis is never closed", top.position)
            ShuntingYardEvaluator.apply(top, values)

        if not values:
            raise InvalidExpression("Empty expression")
        if len(values) > 1:
            raise InsufficientOperands(
                f"Too many operands: {len(values)} values left with no operator between them"
            )
        return values[0]


def calculate(expression: str, line_number: Optional[int] = None) -> Outcome:
    """
    Tokenize and evaluate ``expression``, returning the outcome as a value.

    Evaluation errors never propagate out of this function.

    :param str expression: Arithmetic expression
    :param Optional[int] line_number: Line of the expression in a batch input, if any

    :return: Result on success, error description otherwise
    :rtype: Outcome
    """
    try:
        result = ShuntingYardEvaluator.evaluate(tokenize(expression))
    except EvaluationError as exc:
        return OperationError.from_exception(expression, exc, line_number=line_number)
    return OperationResult(expression=expression, result=result, line_number=line_number)
