"""
Waveform Expression Language

Parses and evaluates the small arithmetic language used to define
oscillator waveforms, e.g. ``sin(x) * 0.5 + abs(sin(x * 2)) * 0.25``.

Grammar:
- Infix operators: ``+ - * / %`` (``* / %`` bind tighter than ``+ -``)
- Prefix operators: unary ``-`` and ``+``, ``abs``, ``sgn``, ``sin``, ``cos``
  (bind tighter than any infix operator, to their immediate operand only)
- Parenthesised groups, decimal literals, identifiers
- ``#`` starts a comment running to the end of the line

Parsing is operator-precedence (Pratt) parsing. Errors carry only their
kind, never a source position.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, NamedTuple, Optional, Union

from .utils import MidisynthError


# =============================================================================
# ERRORS
# =============================================================================

class ErrorKind(Enum):
    """Kinds of failure shared by the parser and the evaluator."""
    UNEXPECTED = "unexpected token"
    INCOMPLETE = "incomplete expression"


class ExpressionError(MidisynthError):
    """Base class for expression errors."""

    def __init__(self, kind: ErrorKind):
        super().__init__(kind.value)
        self.kind = kind


class ParseError(ExpressionError):
    """Raised when a formula cannot be parsed."""
    pass


class EvalError(ExpressionError):
    """Raised when a parsed formula cannot be evaluated."""
    pass


# =============================================================================
# TOKENS
# =============================================================================

class TokenType(Enum):
    WORD = "word"
    NUMBER = "number"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    OPEN_BRACKET = "("
    CLOSE_BRACKET = ")"
    UNKNOWN = "unknown"


class Token(NamedTuple):
    type: TokenType
    text: str
    value: Optional[float] = None

    @property
    def lbp(self) -> int:
        """Left binding power used when this token appears in infix position."""
        return LEFT_BINDING_POWER.get(self.type, 0)


LEFT_BINDING_POWER = {
    TokenType.PLUS: 50,
    TokenType.MINUS: 50,
    TokenType.STAR: 60,
    TokenType.SLASH: 60,
    TokenType.PERCENT: 60,
    TokenType.OPEN_BRACKET: 80,
}

# Operand precedence for every prefix operator
PREFIX_BINDING_POWER = 100

_OPERATOR_TOKENS = {t.value: t for t in (
    TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH,
    TokenType.PERCENT, TokenType.OPEN_BRACKET, TokenType.CLOSE_BRACKET,
)}

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<comment>\#[^\n]*)
    |(?P<space>\s+)
    |(?P<number>[0-9][0-9.]*)
    |(?P<word>[^\W\d]\w*)
    |(?P<operator>[-+*/%()])
    |(?P<unknown>.)
    """,
    re.VERBOSE | re.DOTALL,
)


def tokenize(text: str) -> List[Token]:
    """
    Split a formula into tokens, dropping whitespace and comments.

    Unrecognised characters (and malformed numbers such as ``1.2.3``)
    become UNKNOWN tokens; the parser rejects them later.
    """
    tokens: List[Token] = []
    for match in _TOKEN_PATTERN.finditer(text):
        group = match.lastgroup
        lexeme = match.group()
        if group in ("comment", "space"):
            continue
        if group == "number":
            try:
                tokens.append(Token(TokenType.NUMBER, lexeme, float(lexeme)))
            except ValueError:
                tokens.append(Token(TokenType.UNKNOWN, lexeme))
        elif group == "word":
            tokens.append(Token(TokenType.WORD, lexeme))
        elif group == "operator":
            tokens.append(Token(_OPERATOR_TOKENS[lexeme], lexeme))
        else:
            tokens.append(Token(TokenType.UNKNOWN, lexeme))
    return tokens


# =============================================================================
# AST
# =============================================================================

class PrefixOp(Enum):
    NEGATE = "negate"
    ABS = "abs"
    SGN = "sgn"
    SIN = "sin"
    COS = "cos"


class InfixOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"


@dataclass(frozen=True)
class Number:
    """A numeric literal."""
    value: float


@dataclass(frozen=True)
class Identifier:
    """A reference to a named value in the parameter context."""
    name: str


@dataclass(frozen=True)
class Prefix:
    """A prefix operator applied to one operand."""
    op: PrefixOp
    operand: "Expression"


@dataclass(frozen=True)
class Infix:
    """A binary operator applied to two operands."""
    lhs: "Expression"
    op: InfixOp
    rhs: "Expression"


Expression = Union[Number, Identifier, Prefix, Infix]


PREFIX_FUNCTIONS = {
    "abs": PrefixOp.ABS,
    "sgn": PrefixOp.SGN,
    "sin": PrefixOp.SIN,
    "cos": PrefixOp.COS,
}

INFIX_OPERATORS = {
    TokenType.PLUS: InfixOp.ADD,
    TokenType.MINUS: InfixOp.SUB,
    TokenType.STAR: InfixOp.MUL,
    TokenType.SLASH: InfixOp.DIV,
    TokenType.PERCENT: InfixOp.MOD,
}


# =============================================================================
# PARSER
# =============================================================================

class Parser:
    """
    Pratt parser over a token list.

    ``expression(rbp)`` parses a null denotation, then keeps absorbing
    infix operators while the next token binds tighter than ``rbp``.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.pos += 1
        return token

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def expect(self, expected: TokenType) -> None:
        """Consume the next token if it has the expected type."""
        token = self.peek()
        if token is None:
            raise ParseError(ErrorKind.INCOMPLETE)
        if token.type != expected:
            raise ParseError(ErrorKind.UNEXPECTED)
        self.pos += 1

    def expression(self, rbp: int) -> Expression:
        left = self._parse_nud()
        while self._next_binds_tighter_than(rbp):
            left = self._parse_led(left)
        return left

    def single_expression(self) -> Expression:
        return self.expression(0)

    def _next_binds_tighter_than(self, rbp: int) -> bool:
        token = self.peek()
        return token is not None and token.lbp > rbp

    def _prefix_op(self, op: PrefixOp) -> Expression:
        return Prefix(op, self.expression(PREFIX_BINDING_POWER))

    def _parse_nud(self) -> Expression:
        token = self.advance()
        if token is None:
            raise ParseError(ErrorKind.INCOMPLETE)

        if token.type == TokenType.WORD:
            op = PREFIX_FUNCTIONS.get(token.text)
            if op is not None:
                return self._prefix_op(op)
            return Identifier(token.text)
        if token.type == TokenType.NUMBER:
            return Number(token.value)
        if token.type == TokenType.PLUS:
            return self.expression(PREFIX_BINDING_POWER)
        if token.type == TokenType.MINUS:
            return self._prefix_op(PrefixOp.NEGATE)
        if token.type == TokenType.OPEN_BRACKET:
            inner = self.single_expression()
            self.expect(TokenType.CLOSE_BRACKET)
            return inner
        raise ParseError(ErrorKind.UNEXPECTED)

    def _parse_led(self, lhs: Expression) -> Expression:
        token = self.advance()
        if token is None:
            raise ParseError(ErrorKind.INCOMPLETE)

        op = INFIX_OPERATORS.get(token.type)
        if op is None:
            # Only "(" reaches here: it binds but has no infix meaning
            raise ParseError(ErrorKind.INCOMPLETE)
        rhs = self.expression(token.lbp)
        return Infix(lhs, op, rhs)


def parse(text: str) -> Expression:
    """
    Parse a formula string into an expression tree.

    Raises:
        ParseError: UNEXPECTED if a token is invalid where it appears
            (including trailing input), INCOMPLETE if the input ends early
    """
    parser = Parser(tokenize(text))
    expr = parser.single_expression()
    if not parser.at_end:
        raise ParseError(ErrorKind.UNEXPECTED)
    return expr


# =============================================================================
# EVALUATOR
# =============================================================================

def _sgn(value: float) -> float:
    if math.isnan(value):
        return value
    return math.copysign(1.0, value)


def _div(lhs: float, rhs: float) -> float:
    if rhs == 0.0:
        raise EvalError(ErrorKind.UNEXPECTED)
    return lhs / rhs


def _mod(lhs: float, rhs: float) -> float:
    if rhs == 0.0:
        raise EvalError(ErrorKind.UNEXPECTED)
    return math.fmod(lhs, rhs)


_PREFIX_EVAL = {
    PrefixOp.NEGATE: lambda v: -v,
    PrefixOp.ABS: abs,
    PrefixOp.SGN: _sgn,
    PrefixOp.SIN: lambda v: math.sin(v * math.pi),
    PrefixOp.COS: lambda v: math.cos(v * math.pi),
}

_INFIX_EVAL = {
    InfixOp.ADD: lambda a, b: a + b,
    InfixOp.SUB: lambda a, b: a - b,
    InfixOp.MUL: lambda a, b: a * b,
    InfixOp.DIV: _div,
    InfixOp.MOD: _mod,
}


def evaluate(expr: Expression, params: Mapping[str, float]) -> float:
    """
    Evaluate an expression tree against a parameter context.

    Sine and cosine take their operand in half-cycles (scaled by pi).

    Raises:
        EvalError: INCOMPLETE for an identifier missing from ``params``,
            UNEXPECTED for division/modulo by zero, math domain errors,
            or an unknown node
    """
    if isinstance(expr, Number):
        return expr.value

    if isinstance(expr, Identifier):
        try:
            return float(params[expr.name])
        except KeyError:
            raise EvalError(ErrorKind.INCOMPLETE) from None

    if isinstance(expr, Prefix):
        operand = evaluate(expr.operand, params)
        try:
            return _PREFIX_EVAL[expr.op](operand)
        except (ValueError, OverflowError):
            raise EvalError(ErrorKind.UNEXPECTED) from None

    if isinstance(expr, Infix):
        lhs = evaluate(expr.lhs, params)
        rhs = evaluate(expr.rhs, params)
        try:
            return _INFIX_EVAL[expr.op](lhs, rhs)
        except (ValueError, OverflowError):
            raise EvalError(ErrorKind.UNEXPECTED) from None

    raise EvalError(ErrorKind.UNEXPECTED)
