"""Tests for the calculation controller: input dispatch, continuation rule and published state."""

import pytest

from FeatherCalc.Controller import (
    CalculationController,
    CalculatorState,
    SavedState,
    CLEAR,
    DELETE,
    EQUALS,
    PARENTHESES,
    TOGGLE_SIGN,
)


def press(controller, *inputs):
    """Press each input with the cursor at the current state's cursor position."""
    for value in inputs:
        cursor = controller.current_state.cursor_position
        controller.handle_input(value, cursor, cursor)
    return controller.current_state


@pytest.fixture
def controller():
    return CalculationController()


class TestInputDispatch:

    def test_initial_state(self, controller):
        assert controller.current_state == CalculatorState("", "", 0, False)

    def test_typing_updates_live_result(self, controller):
        state = press(controller, "2", "+", "3")
        assert state == CalculatorState("2+3", "5", 3, False)

    def test_trailing_operator_preview(self, controller):
        state = press(controller, "1", "2", "+")
        assert state.live_result == "12"

    def test_clear(self, controller):
        state = press(controller, "7", "×", CLEAR)
        assert state == CalculatorState("", "", 0, False)

    def test_delete(self, controller):
        state = press(controller, "7", "×", "3", DELETE)
        assert (state.expression, state.live_result) == ("7×", "7")

    def test_parentheses(self, controller):
        state = press(controller, PARENTHESES)
        assert (state.expression, state.cursor_position) == ("()", 1)

    def test_toggle_sign(self, controller):
        state = press(controller, "4", TOGGLE_SIGN)
        assert (state.expression, state.live_result) == ("-4", "-4")

    def test_update_cursor(self, controller):
        press(controller, "1", "2", "3")
        controller.update_cursor(1)
        assert controller.current_state.cursor_position == 1
        controller.update_cursor(99)
        assert controller.current_state.cursor_position == 3

    def test_input_at_moved_cursor(self, controller):
        press(controller, "1", "3")
        controller.update_cursor(1)
        state = press(controller, "2")
        assert (state.expression, state.cursor_position) == ("123", 2)


class TestFinalize:

    def test_equals_finalizes(self, controller):
        state = press(controller, "2", "+", "3", EQUALS)
        assert state == CalculatorState("5", "5", 1, True)

    def test_operator_continues_with_result(self, controller):
        state = press(controller, "2", "+", "3", EQUALS, "+", "1")
        assert (state.expression, state.live_result, state.is_result_finalized) == ("5+1", "6", False)

    def test_digit_starts_over(self, controller):
        state = press(controller, "2", "+", "3", EQUALS, "7")
        assert (state.expression, state.live_result) == ("7", "7")

    def test_divide_by_zero_stays_editable(self, controller):
        state = press(controller, "5", "÷", "0", EQUALS)
        assert state[:4] == ("5÷0", "ERROR:Can't divide by zero", 3, False)
        assert "Error 3003" in state.error_details

        state = press(controller, DELETE, "2")
        assert (state.expression, state.live_result) == ("5÷2", "2.5")

    def test_syntax_error_clears_and_next_input_starts_over(self, controller):
        controller.load_saved_state(SavedState("5+*", 3, 46, False))
        state = press(controller, EQUALS)
        assert state[:4] == ("", "ERROR:Syntax error", 0, False)
        assert "Error 3009" in state.error_details

        state = press(controller, "-")
        assert state.expression == "-"

    def test_equals_on_empty_expression(self, controller):
        state = press(controller, EQUALS)
        assert state == CalculatorState("", "", 0, False)
        assert controller.result_finalized is False


class TestDegreesMode:

    def test_switching_mode_recomputes_live_result(self, controller):
        state = press(controller, "sin(", "9", "0")
        assert state.live_result.startswith("0.89399666")

        controller.set_degrees_mode(True)
        assert controller.current_state.live_result == "1"

    def test_switching_mode_keeps_finalized_result(self, controller):
        press(controller, "sin(", "9", "0", EQUALS)
        finalized = controller.current_state

        controller.set_degrees_mode(True)
        assert controller.current_state == finalized
        assert controller.is_degrees_mode is True


class TestSavedState:

    def test_load_saved_state_applies_mode_before_evaluating(self, controller):
        controller.load_saved_state(SavedState("sin(90)", 7, 46, True))
        assert controller.current_state == CalculatorState("sin(90)", "1", 7, False)

    def test_saved_state(self, controller):
        press(controller, "1", "+", "2")
        controller.set_degrees_mode(True)
        assert controller.saved_state(40) == SavedState("1+2", 3, 40, True)


class TestErrorDetails:

    def test_live_error_details(self, controller):
        state = press(controller, "√(", "-", "4")
        assert state.live_result == "ERROR:Math domain error"
        assert state.error_details.startswith("Scientific Calculation Error\nError 2001:")

    def test_details_are_cleared_after_a_valid_edit(self, controller):
        press(controller, "5", "÷", "0")
        state = press(controller, DELETE, "2")
        assert (state.live_result, state.error_details) == ("2.5", "")

    def test_zero_to_negative_power_starts_over_after_finalize(self, controller):
        state = press(controller, "0", "^", "-", "1", EQUALS)
        assert state[:4] == ("", "ERROR:Number too big", 0, False)
        assert "Error 2006" in state.error_details
