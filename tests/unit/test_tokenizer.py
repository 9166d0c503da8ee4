"""Tests for the tokenizer and the implicit multiplication pass."""

from decimal import Decimal

import pytest

from FeatherCalc import MathEngine as M
from FeatherCalc import ScientificEngine
from FeatherCalc import error as E


def number(value):
    return M.Token(M.NUMBER, Decimal(value))


def operator(value):
    return M.Token(M.OPERATOR, value)


OPEN = M.Token(M.OPEN, "(")
CLOSE = M.Token(M.CLOSE, ")")
PI = M.Token(M.CONSTANT, ScientificEngine.to_decimal(ScientificEngine.PI_VALUE))


class TestTokenize:

    def test_display_glyphs_become_operators(self):
        assert M.tokenize("2×3÷4") == [number(2), operator("*"), number(3), operator("/"), number(4)]

    def test_whitespace_is_ignored(self):
        assert M.tokenize(" 1 + 2 ") == [number(1), operator("+"), number(2)]

    def test_leading_sign_is_folded_into_number(self):
        assert M.tokenize("-3+2") == [number(-3), operator("+"), number(2)]

    def test_sign_after_operator_is_folded(self):
        assert M.tokenize("2×-3") == [number(2), operator("*"), number(-3)]

    def test_sign_before_group_stays_a_sign(self):
        assert M.tokenize("-(2)") == [M.Token(M.SIGN, "-"), OPEN, number(2), CLOSE]

    def test_function_token_includes_its_brace(self):
        assert M.tokenize("sin(30)") == [M.Token(M.FUNCTION, "sin"), number(30), CLOSE]

    def test_square_root_glyph_is_a_function(self):
        assert M.tokenize("√(4)")[0] == M.Token(M.FUNCTION, "√")

    def test_constants(self):
        assert M.tokenize("π") == [PI]
        assert M.tokenize("e")[0].kind == M.CONSTANT

    def test_percent_and_factorial(self):
        assert M.tokenize("5!%") == [number(5), operator("!"), M.Token(M.PERCENT, "%")]

    def test_second_decimal_point_is_rejected(self):
        with pytest.raises(E.SyntaxError) as info:
            M.tokenize("1.2.3")
        assert info.value.code == "3008"

    def test_lone_decimal_point_is_rejected(self):
        with pytest.raises(E.SyntaxError) as info:
            M.tokenize("2+.")
        assert info.value.code == "3011"

    def test_function_without_brace_is_rejected(self):
        with pytest.raises(E.SyntaxError) as info:
            M.tokenize("sin30")
        assert info.value.code == "3010"

    def test_trailing_operator_is_rejected(self):
        with pytest.raises(E.SyntaxError) as info:
            M.tokenize("2+")
        assert info.value.code == "3009"

    def test_unknown_character_is_rejected(self):
        with pytest.raises(E.SyntaxError) as info:
            M.tokenize("2$")
        assert info.value.code == "3011"

    def test_leading_power_is_rejected(self):
        with pytest.raises(E.SyntaxError):
            M.tokenize("^2")


class TestReadNumber:

    def test_plain_literal(self):
        assert M.read_number("12.5+1", 0) == (Decimal("12.5"), 4)

    def test_scientific_exponent(self):
        assert M.read_number("1.5e+20", 0) == (Decimal("1.5e20"), 7)
        assert M.read_number("6.1e-17", 0) == (Decimal("6.1e-17"), 7)

    def test_e_without_digits_is_left_for_the_constant(self):
        assert M.read_number("2e", 0) == (Decimal(2), 1)
        assert M.read_number("2e+", 0) == (Decimal(2), 1)

    def test_e_followed_by_digit_is_the_constant(self):
        assert M.read_number("2e5", 0) == (Decimal(2), 1)
        tokens = M.insert_implicit_multiplication(M.tokenize("2e5"))
        assert [token.kind for token in tokens] == [M.NUMBER, M.OPERATOR, M.CONSTANT, M.OPERATOR, M.NUMBER]


class TestImplicitMultiplication:

    def test_number_before_group(self):
        tokens = M.insert_implicit_multiplication(M.tokenize("2(3)"))
        assert tokens == [number(2), operator("*"), OPEN, number(3), CLOSE]

    def test_group_before_group(self):
        tokens = M.insert_implicit_multiplication(M.tokenize("(2)(3)"))
        assert tokens == [OPEN, number(2), CLOSE, operator("*"), OPEN, number(3), CLOSE]

    def test_group_before_number(self):
        tokens = M.insert_implicit_multiplication(M.tokenize("(2)3"))
        assert tokens == [OPEN, number(2), CLOSE, operator("*"), number(3)]

    def test_number_before_constant(self):
        tokens = M.insert_implicit_multiplication(M.tokenize("2π"))
        assert tokens == [number(2), operator("*"), PI]

    def test_number_before_function(self):
        tokens = M.insert_implicit_multiplication(M.tokenize("2sin(0)"))
        assert tokens[:3] == [number(2), operator("*"), M.Token(M.FUNCTION, "sin")]

    def test_explicit_operator_is_left_alone(self):
        tokens = M.insert_implicit_multiplication(M.tokenize("2+(3)"))
        assert operator("*") not in tokens
