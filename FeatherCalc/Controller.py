# Controller.py
"""""
Coordinator between the UI and the edit buffer.

Responsibilities
----------------
- Dispatch keypad input (CLR, DEL, =, (), ±, everything else) to the EditBuffer
- Continuation rule after '=': an operator continues with the result, any other input starts over
- Hold the angle mode and pass it to every evaluation
- Publish one CalculatorState per keystroke for the UI
"""""

from collections import namedtuple

from . import error as E
from .EditBuffer import EditBuffer, ALL_OPERATORS

CLEAR = "CLR"
DELETE = "DEL"
EQUALS = "="
PARENTHESES = "()"
TOGGLE_SIGN = "±"

# What the UI renders after every keystroke
CalculatorState = namedtuple(
    "CalculatorState",
    ["expression", "live_result", "cursor_position", "is_result_finalized", "error_details"],
    defaults=("", "", 0, False, ""),
)

# Session record handed to / received from config_manager
SavedState = namedtuple("SavedState", ["expression", "cursor", "text_size", "is_degrees_mode"])


class CalculationController:
    """Owns one EditBuffer; not thread-safe, all calls must come from the owning (GUI) thread."""

    def __init__(self, is_degrees_mode=False):
        self.engine = EditBuffer()
        self.is_degrees_mode = is_degrees_mode
        self.result_finalized = False
        self.finalized_with_error = False
        self.current_state = CalculatorState()

    def load_saved_state(self, saved):
        """Restore a SavedState; the angle mode is set before the first evaluation."""
        self.is_degrees_mode = saved.is_degrees_mode
        self.engine.load_state(saved.expression, saved.cursor)
        self.result_finalized = False
        self.finalized_with_error = False
        self.update_state()

    def saved_state(self, text_size):
        return SavedState(
            expression=self.engine.expression,
            cursor=self.engine.cursor,
            text_size=text_size,
            is_degrees_mode=self.is_degrees_mode,
        )

    def set_degrees_mode(self, is_degrees_mode):
        self.is_degrees_mode = is_degrees_mode
        if not self.result_finalized:
            self.update_state()

    def handle_input(self, value, selection_start, selection_end):
        """Handle one keypad input at the given selection."""

        if value == EQUALS:
            self.finalize_calculation()
            return

        # --- Continuation rule after a finalized result ---
        if self.result_finalized:
            if self.finalized_with_error or value not in ALL_OPERATORS:
                self.engine.clear()
                selection_start = selection_end = 0
            self.result_finalized = False
            self.finalized_with_error = False

        if value == CLEAR:
            self.engine.clear()
        elif value == DELETE:
            self.engine.backspace(selection_start, selection_end)
        elif value == PARENTHESES:
            self.engine.append_parentheses(selection_start, selection_end)
        elif value == TOGGLE_SIGN:
            self.engine.toggle_sign(selection_start, selection_end)
        else:
            self.engine.append_input(value, selection_start, selection_end)

        self.update_state()

    def update_cursor(self, position):
        """Move the cursor, e.g. when the user clicks into the expression."""
        self.engine.set_cursor(position)
        self.current_state = self.current_state._replace(cursor_position=self.engine.cursor)

    def finalize_calculation(self):
        """Compute the final result ('=') and mark the state as finalized."""
        final_result = self.engine.finalize_calculation(self.is_degrees_mode)
        is_error, _ = E.split_error_tag(final_result)

        if is_error and self.engine.expression != "":
            # Division by zero keeps the expression editable
            self.result_finalized = False
            self.finalized_with_error = False
        else:
            # The other errors cleared the buffer; the next input starts over either way
            self.result_finalized = final_result != ""
            self.finalized_with_error = is_error

        self.current_state = CalculatorState(
            expression=self.engine.expression,
            live_result=final_result,
            cursor_position=self.engine.cursor,
            is_result_finalized=self.result_finalized and not is_error,
            error_details=self.error_details(),
        )

    def update_state(self):
        """Recalculate the live result and publish a new CalculatorState."""
        live_result = self.engine.calculate_live_result(self.is_degrees_mode)
        self.current_state = CalculatorState(
            expression=self.engine.expression,
            live_result=live_result,
            cursor_position=self.engine.cursor,
            is_result_finalized=False,
            error_details=self.error_details(),
        )

    def error_details(self):
        """Code and details of the last failed evaluation, for the result tooltip; "" if none."""
        if self.engine.last_error is None:
            return ""
        return E.describe_error(self.engine.last_error)
