"""Turn expression text into a lazy stream of tokens."""
from typing import Iterator, List, Optional, Tuple

from arithmetic_evaluator.common.errors import LexError
from arithmetic_evaluator.common.operators import OPERATORS
from arithmetic_evaluator.common.tokens import LeftParen, Number, Operator, RightParen, Token


DIGITS = frozenset("0123456789")
DECIMAL_POINT = "."


def _is_unary_position(previous: Optional[Token]) -> bool:
    """A minus sign is unary at the start of input, after an operator or after '('."""
    return previous is None or isinstance(previous, (Operator, LeftParen))


def _read_number(text: str, start: int) -> Tuple[Number, int]:
    """
    Read the numeric literal starting at ``start``.

    The literal is a maximal run of digits with at most one decimal point,
    optionally preceded by a unary minus the caller already recognized.

    :param str text: Whole input
    :param int start: Index of the first character of the literal

    :return: Number token and the index right after the literal
    :rtype: Tuple[Number, int]
    :raises LexError: If the literal has two decimal points or no digit
    """
    index = start + 1 if text[start] == "-" else start
    seen_point = False
    seen_digit = False

    while index < len(text):
        char = text[index]
        if char in DIGITS:
            seen_digit = True
        elif char == DECIMAL_POINT:
            if seen_point:
                raise LexError(
                    index, f"Malformed number {text[start:index + 1]!r}: more than one decimal point"
                )
            seen_point = True
        else:
            break
        index += 1

    literal = text[start:index]
    if not seen_digit:
        raise LexError(start, f"Malformed number {literal!r}: no digits")
    return Number(value=float(literal), position=start), index


def tokenize(text: str) -> Iterator[Token]:
    """
    Scan ``text`` left to right and yield its tokens.

    Whitespace separates tokens and is discarded. A '-' in unary position
    (see ``_is_unary_position``) is handled here so that the evaluator only
    ever sees binary operators:
        - "-3" becomes the literal -3
        - "-(...)" becomes "(0 - (...))", the extra ')' being emitted right
          after the one closing the negated group
        - any other unary '-' is emitted as a plain operator and rejected
          by the evaluator

    The result is a generator: it can be consumed once, and lexical errors
    are raised while iterating.

    :param str text: Arithmetic expression

    :return: Iterator over the tokens
    :rtype: Iterator[Token]
    :raises LexError: On an unknown character or a malformed number
    """
    previous: Optional[Token] = None
    # Parentheses currently open, synthetic ones included
    depth = 0
    # Depths at which a synthetic "(0 -" group was opened
    negated_groups: List[int] = []
    index = 0
    length = len(text)

    while index < length:
        char = text[index]

        if char.isspace():
            index += 1
            continue

        following = text[index + 1] if index + 1 < length else ""

        if char == "-" and _is_unary_position(previous):
            if following in DIGITS or following == DECIMAL_POINT:
                previous, index = _read_number(text, index)
                yield previous
                continue
            if following == "(":
                negated_groups.append(depth)
                depth += 1
                yield LeftParen(position=index)
                yield Number(value=0.0, position=index)
                previous = Operator.from_symbol("-", index)
                yield previous
                index += 1
                continue

        if char in DIGITS or char == DECIMAL_POINT:
            previous, index = _read_number(text, index)
            yield previous
            continue

        if char == ")":
            depth -= 1
            previous = RightParen(position=index)
            yield previous
            # Close the synthetic group whose negated operand just ended
            while negated_groups and negated_groups[-1] == depth - 1:
                negated_groups.pop()
                depth -= 1
                yield RightParen(position=index)
            index += 1
            continue

        if char in OPERATORS:
            previous = Operator.from_symbol(char, index)
        elif char == "(":
            depth += 1
            previous = LeftParen(position=index)
        else:
            raise LexError(index, f"Unexpected character {char!r}")

        yield previous
        index += 1
