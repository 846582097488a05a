"""
Unit tests for the waveform expression language

Tests tokenizing, Pratt parsing (precedence, associativity, prefix
binding), evaluation and error kinds.
"""

import math
import pytest

from midisynth.expression import (
    ErrorKind,
    EvalError,
    Identifier,
    Infix,
    InfixOp,
    Number,
    ParseError,
    Prefix,
    PrefixOp,
    TokenType,
    evaluate,
    parse,
    tokenize,
)


def _eval(formula, **params):
    return evaluate(parse(formula), params)


class TestTokenizer:
    """Tests for tokenize()."""

    def test_operators_and_brackets(self):
        types = [t.type for t in tokenize("+-*/%()")]
        assert types == [
            TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH,
            TokenType.PERCENT, TokenType.OPEN_BRACKET, TokenType.CLOSE_BRACKET,
        ]

    def test_numbers_and_words(self):
        tokens = tokenize("3.25 * midi_note")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == 3.25
        assert tokens[2].type == TokenType.WORD
        assert tokens[2].text == "midi_note"

    def test_whitespace_and_comments_dropped(self):
        tokens = tokenize("  x  # the phase\n + 1  ")
        assert [t.text for t in tokens] == ["x", "+", "1"]

    def test_unknown_character(self):
        tokens = tokenize("x $ 1")
        assert tokens[1].type == TokenType.UNKNOWN

    def test_malformed_number_is_unknown(self):
        tokens = tokenize("1.2.3")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.UNKNOWN


class TestParser:
    """Tests for parse() tree shapes."""

    def test_literal_and_identifier(self):
        assert parse("2.5") == Number(2.5)
        assert parse("x") == Identifier("x")

    def test_multiplication_binds_tighter(self):
        assert parse("1 + 2 * 3") == Infix(
            Number(1.0), InfixOp.ADD, Infix(Number(2.0), InfixOp.MUL, Number(3.0))
        )

    def test_left_associative(self):
        assert parse("8 - 4 - 2") == Infix(
            Infix(Number(8.0), InfixOp.SUB, Number(4.0)), InfixOp.SUB, Number(2.0)
        )

    def test_negation_binds_to_operand_only(self):
        assert parse("-x * 2") == Infix(
            Prefix(PrefixOp.NEGATE, Identifier("x")), InfixOp.MUL, Number(2.0)
        )

    def test_function_binds_to_operand_only(self):
        assert parse("sin x + 1") == Infix(
            Prefix(PrefixOp.SIN, Identifier("x")), InfixOp.ADD, Number(1.0)
        )

    def test_function_with_group(self):
        assert parse("abs(x - 1)") == Prefix(
            PrefixOp.ABS, Infix(Identifier("x"), InfixOp.SUB, Number(1.0))
        )

    def test_unary_plus_passes_through(self):
        assert parse("+x") == Identifier("x")

    def test_function_keywords(self):
        for word, op in [("abs", PrefixOp.ABS), ("sgn", PrefixOp.SGN),
                         ("sin", PrefixOp.SIN), ("cos", PrefixOp.COS)]:
            assert parse(f"{word} 1") == Prefix(op, Number(1.0))

    @pytest.mark.parametrize("formula", ["", "1 +", "(1 + 2", "sin", "-", "2 (3)"])
    def test_incomplete(self, formula):
        with pytest.raises(ParseError) as exc:
            parse(formula)
        assert exc.value.kind == ErrorKind.INCOMPLETE

    @pytest.mark.parametrize("formula", [")", "* 2", "$", "1 2", "x $ 1", "(1))", "1.2.3"])
    def test_unexpected(self, formula):
        with pytest.raises(ParseError) as exc:
            parse(formula)
        assert exc.value.kind == ErrorKind.UNEXPECTED

    def test_error_message_has_no_position(self):
        with pytest.raises(ParseError) as exc:
            parse("1 +")
        assert str(exc.value) == "incomplete expression"


class TestEvaluate:
    """Tests for evaluate()."""

    @pytest.mark.parametrize("formula,expected", [
        ("1 + 2 * 3", 1 + 2 * 3),
        ("10 - 4 - 3", 10 - 4 - 3),
        ("8 / 4 / 2", 8 / 4 / 2),
        ("2 * 3 % 4", math.fmod(2 * 3, 4)),
        ("(1 + 2) * 3", (1 + 2) * 3),
        ("-2 * 3 + 1", -2 * 3 + 1),
        ("2 * -3", 2 * -3),
        ("abs(0 - 3) + sgn(0 - 2) * 2", abs(0 - 3) + math.copysign(1, 0 - 2) * 2),
        ("1 - 2 + 3 * 4 / 8", 1 - 2 + 3 * 4 / 8),
        ("-7 % 3", math.fmod(-7, 3)),
    ])
    def test_matches_standard_precedence(self, formula, expected):
        assert _eval(formula) == pytest.approx(expected)

    def test_trig_uses_half_cycles(self):
        assert _eval("sin 0.5") == pytest.approx(1.0)
        assert _eval("cos 1") == pytest.approx(-1.0)
        assert _eval("sin 0.5 * 2") == pytest.approx(2.0)

    def test_identifiers_from_context(self):
        assert _eval("x * 2 + rate", x=1.5, rate=10.0) == pytest.approx(13.0)

    @pytest.mark.parametrize("value", [0.0, 1.0, -3.5, 1e-7, 12345.678, -1e30])
    def test_identity_round_trip(self, value):
        assert _eval("x", x=value) == value

    def test_sgn(self):
        assert _eval("sgn x", x=0.0) == 1.0
        assert _eval("sgn x", x=-0.25) == -1.0
        assert _eval("sgn x", x=4.0) == 1.0

    def test_modulo_keeps_dividend_sign(self):
        assert _eval("x % 1", x=-0.25) == pytest.approx(-0.25)
        assert _eval("x % 1", x=2.75) == pytest.approx(0.75)

    def test_unbound_identifier(self):
        with pytest.raises(EvalError) as exc:
            _eval("y + 1", x=1.0)
        assert exc.value.kind == ErrorKind.INCOMPLETE

    @pytest.mark.parametrize("formula", ["1 / x", "1 % x"])
    def test_division_by_zero_is_deterministic(self, formula):
        with pytest.raises(EvalError) as exc:
            _eval(formula, x=0.0)
        assert exc.value.kind == ErrorKind.UNEXPECTED

    def test_trig_of_infinity(self):
        with pytest.raises(EvalError):
            _eval("sin x", x=float("inf"))

    def test_unknown_node(self):
        with pytest.raises(EvalError) as exc:
            evaluate("not a node", {})
        assert exc.value.kind == ErrorKind.UNEXPECTED
