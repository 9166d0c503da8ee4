"""End-to-end tests of the evaluation pipeline (evaluate / calculate)."""

from decimal import Decimal

import pytest

from FeatherCalc import MathEngine
from FeatherCalc import error as E


def value_of(problem, degrees=False):
    result = MathEngine.evaluate(problem, degrees)
    assert not result.is_error, result
    return result.value


def kind_of(problem, degrees=False):
    result = MathEngine.evaluate(problem, degrees)
    assert result.is_error, result
    return result.kind


# ============================================================================
# PRECEDENCE AND GROUPS
# ============================================================================

class TestPrecedence:

    def test_multiplication_before_addition(self):
        assert value_of("2+3×4") == 14

    def test_division_and_subtraction_are_left_associative(self):
        assert value_of("20÷2÷5") == 2
        assert value_of("10-3-2") == 5

    def test_power_before_addition(self):
        assert value_of("2^3+1") == 9

    def test_powers_are_resolved_left_to_right(self):
        assert value_of("2^3^2") == 64

    def test_factorial(self):
        assert value_of("5!") == 120
        assert value_of("3!!") == 720

    def test_factorial_of_group_result(self):
        assert value_of("(1.5×2)!") == 6
        assert value_of("√(16)!") == 24

    def test_nested_parentheses(self):
        assert value_of("2×(3+(4×2))") == 22

    def test_implicit_multiplication(self):
        assert value_of("2(3+1)") == 8
        assert value_of("(2)(3)") == 6

    def test_signed_groups(self):
        assert value_of("-(2+3)") == -5
        assert value_of("2×-3") == -6

    def test_empty_input_and_empty_group_are_zero(self):
        assert value_of("") == 0
        assert value_of("()") == 0

    def test_signed_exponent_literal(self):
        assert value_of("1.5e+20") == Decimal("1.5e20")
        assert value_of("6e-17") == Decimal("6e-17")

    def test_unsigned_e_is_euler_constant(self):
        assert value_of("2e3") == value_of("2×e×3")
        assert MathEngine.calculate("2e5") == "27.182818284590452"

    def test_signed_e_reads_as_exponent(self):
        # The formatter writes exponents this way, so a typed 2e+5 reads the same
        assert MathEngine.calculate("2e+5") == "200000"
        assert MathEngine.calculate("2×e+5") == "10.43656365691809"


class TestPercent:

    def test_percent_of_preceding_base(self):
        assert value_of("100+10%") == 110
        assert value_of("200-10%") == 180

    def test_plain_percent_is_a_fraction(self):
        assert value_of("50%") == Decimal("0.5")
        assert value_of("8×50%") == 4

    def test_percent_without_base_keeps_operator(self):
        assert value_of("+50%") == Decimal("0.5")

    def test_percent_without_number_is_a_syntax_error(self):
        assert kind_of("%5") == "Syntax"


class TestFunctionsAndConstants:

    def test_pi_multiple(self):
        assert MathEngine.calculate("2π") == "6.283185307179586"

    def test_euler_constant_after_number(self):
        assert MathEngine.calculate("2e") == "5.43656365691809"

    def test_sin_in_degrees_and_radians(self):
        assert MathEngine.calculate("sin(90)", degrees=True) == "1"
        assert MathEngine.calculate("sin(90)").startswith("0.89399666")

    def test_angle_mode_applies_to_nested_calls(self):
        assert MathEngine.calculate("sin(sin(90))", degrees=True).startswith("0.0174524064")

    def test_cos_of_right_angle_is_not_exactly_zero(self):
        assert MathEngine.calculate("cos(90)", degrees=True) == "6.123233995736766e-17"

    def test_logarithms_and_root(self):
        assert MathEngine.calculate("ln(e)") == "1"
        assert MathEngine.calculate("log(1000)") == "3"
        assert MathEngine.calculate("√(16)") == "4"

    def test_fractional_power(self):
        assert MathEngine.calculate("2^0.5") == "1.414213562373095"


# ============================================================================
# ERRORS
# ============================================================================

class TestErrors:

    def test_divide_by_zero(self):
        assert kind_of("5÷0") == "DivideByZero"
        assert MathEngine.calculate("5÷0") == "ERROR:Can't divide by zero"

    def test_zero_to_negative_power_overflows(self):
        assert kind_of("0^-1") == "Overflow"

    @pytest.mark.parametrize("problem", ["√(-1)", "(-3)!", "2.5!", "3.0!", "ln(0)", "(-8)^(1÷3)"])
    def test_domain_errors(self, problem):
        assert kind_of(problem) == "MathDomain"

    @pytest.mark.parametrize("problem", ["10^400", "300000!"])
    def test_overflow(self, problem):
        assert kind_of(problem) == "Overflow"
        assert MathEngine.calculate(problem) == "ERROR:Number too big"

    @pytest.mark.parametrize("problem", ["(2+3", "2+3)", "5+*", "2××3", "sin(", "1..2", "-", "2(+)"])
    def test_syntax_errors(self, problem):
        assert kind_of(problem) == "Syntax"

    def test_nesting_limit(self):
        depth = MathEngine.MAX_DEPTH + 1
        assert kind_of("(" * depth + "1" + ")" * depth) == "Syntax"
        assert value_of("(" * 50 + "1" + ")" * 50) == 1

    def test_error_carries_equation_and_code(self):
        result = MathEngine.evaluate("2+3)")
        assert isinstance(result.error, E.SyntaxError)
        assert result.error.code == "3000"
        assert result.error.equation == "2+3)"

    def test_evaluate_never_raises(self):
        result = MathEngine.evaluate("∑")
        assert result.is_error
        assert result.value is None


class TestErrorTags:

    def test_tag_error(self):
        assert E.tag_error("Syntax") == "ERROR:Syntax error"
        assert E.tag_error("MathDomain") == "ERROR:Math domain error"

    def test_unknown_kind_falls_back_to_syntax_message(self):
        assert E.tag_error("Whatever") == "ERROR:Syntax error"

    def test_split_error_tag(self):
        assert E.split_error_tag("ERROR:Number too big") == (True, "Number too big")
        assert E.split_error_tag("42") == (False, "42")

    def test_describe_error(self):
        error = MathEngine.evaluate("5÷0").error
        assert E.describe_error(error) == (
            "Calculator Error\n"
            "Error 3003: Division by Zero\n"
            "Details: Division by zero\n"
            "Equation: 5÷0"
        )

    def test_describe_error_for_scientific_code(self):
        error = MathEngine.evaluate("0^-1").error
        assert E.describe_error(error).startswith("Scientific Calculation Error\nError 2006: Zero to a negative power:")
