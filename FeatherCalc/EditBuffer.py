# EditBuffer.py
"""""
Edit buffer / input state machine for the Feather Calculator.

Owns the live expression text (display glyphs: ×, ÷, √( ...) and the cursor.
Every editing operation keeps the text coherent while the user types:
- '(' after a number gets an implicit '×', ')' only closes an open group
- a new operator replaces the previous one (last operator wins)
- one decimal point per number, no '%%'

The cursor is always clamped into [0, len(expression)].
Live and final results are computed through MathEngine.
"""""

from . import MathEngine
from . import error as E

MULTIPLY = "×"
DIVIDE = "÷"
PLUS = "+"
MINUS = "-"
PERCENT = "%"
OPEN_BRACE = "("
CLOSE_BRACE = ")"
DECIMAL_POINT = "."

ALL_OPERATORS = [PLUS, MINUS, MULTIPLY, DIVIDE]
NON_UNARY_START_OPERATORS = [PLUS, MULTIPLY, DIVIDE, CLOSE_BRACE]
DIGITS_AND_PERCENT = ["0", "1", "2", "3", "4", "5", "6", "7", "8", "9", PERCENT]
BRACES = [OPEN_BRACE, CLOSE_BRACE]
IMPLICIT_MULTIPLY_CHARS = DIGITS_AND_PERCENT + [CLOSE_BRACE]

# Constants are complete numbers of their own
CONSTANT_GLYPHS = ["π", "e"]

# Characters that end the number segment around the cursor
NUMBER_BOUNDARIES = ALL_OPERATORS + BRACES + [PERCENT, "^", "!"] + CONSTANT_GLYPHS

# A decimal point cannot start a number right behind these
NO_DECIMAL_POINT_AFTER = CONSTANT_GLYPHS + [CLOSE_BRACE, PERCENT, "!"]

# Trailing characters the live preview may drop while the user is still typing
TRIMMABLE_TRAILING = ALL_OPERATORS + ["*", "/", DECIMAL_POINT, PERCENT]


def close_braces(expression):
    """Append the ')' needed to balance every open '('."""
    balance = expression.count(OPEN_BRACE) - expression.count(CLOSE_BRACE)
    if balance > 0:
        expression += CLOSE_BRACE * balance
    return expression


class EditBuffer:
    """The expression being edited plus its cursor. One instance per calculator session."""

    def __init__(self, expression="", cursor=None):
        self._expression = ""
        self._cursor = 0
        self.last_error = None  # MathError of the most recent failed evaluation
        self.load_state(expression, len(expression) if cursor is None else cursor)

    @property
    def expression(self):
        return self._expression

    @property
    def cursor(self):
        return self._cursor

    def load_state(self, expression, cursor):
        """Initialize the buffer with a previously saved expression and cursor position."""
        self._expression = expression
        self.set_cursor(cursor)

    def set_cursor(self, position):
        self._cursor = min(max(position, 0), len(self._expression))

    def brace_balance(self):
        """Number of open '(' minus closed ')'."""
        balance = 0
        for char in self._expression:
            if char == OPEN_BRACE:
                balance += 1
            elif char == CLOSE_BRACE:
                balance -= 1
        return balance

    # -----------------------------
    # Helpers
    # -----------------------------

    def _clamp_selection(self, selection_start, selection_end):
        length = len(self._expression)
        start = min(max(selection_start, 0), length)
        end = min(max(selection_end, 0), length)
        if end < start:
            start, end = end, start
        return start, end

    def _char_at(self, index):
        if 0 <= index < len(self._expression):
            return self._expression[index]
        return None

    def _replace(self, start, end, text, cursor):
        self._expression = self._expression[:start] + text + self._expression[end:]
        self.set_cursor(cursor)

    def contains_decimal_point(self, position):
        """True if the number segment touching `position` already has a decimal point."""

        # Search backward from the cursor to the nearest operator/brace
        b = position - 1
        while b >= 0:
            char = self._expression[b]
            if char == DECIMAL_POINT:
                return True
            if char in NUMBER_BOUNDARIES:
                break
            b -= 1

        # Search forward from the cursor to the nearest operator/brace
        b = position
        while b < len(self._expression):
            char = self._expression[b]
            if char == DECIMAL_POINT:
                return True
            if char in NUMBER_BOUNDARIES:
                break
            b += 1

        return False

    # -----------------------------
    # Editing operations
    # -----------------------------

    def insert(self, text, selection_start, selection_end):
        """Replace the selected range with `text` and move the cursor behind it."""
        start, end = self._clamp_selection(selection_start, selection_end)
        self._replace(start, end, text, start + len(text))

    def append_input(self, value, selection_start, selection_end):
        """Apply one keypad input (digit, operator, brace, function prefix, ...) at the selection."""
        start, end = self._clamp_selection(selection_start, selection_end)
        char_before = self._char_at(start - 1)
        char_after = self._char_at(end)

        # --- 1. Initial state: '+', '×', '÷' and ')' cannot start an expression ---
        if self._expression == "" and value in NON_UNARY_START_OPERATORS:
            return

        # --- 2. Braces ---
        if value == OPEN_BRACE:
            prefix = MULTIPLY if char_before in IMPLICIT_MULTIPLY_CHARS else ""
            self.insert(prefix + OPEN_BRACE, start, end)
            return

        if value == CLOSE_BRACE:
            if self.brace_balance() <= 0:
                return
            if char_before in ALL_OPERATORS or char_before == OPEN_BRACE:
                return

            suffix = ""
            if char_after in DIGITS_AND_PERCENT or char_after == OPEN_BRACE:
                suffix = MULTIPLY
            # Cursor stays right behind ')', in front of the implicit '×'
            self._replace(start, end, CLOSE_BRACE + suffix, start + 1)
            return

        # --- 3. Operator replacement: the last operator wins, '-' may follow another operator ---
        if value in ALL_OPERATORS and char_before in ALL_OPERATORS and value != MINUS:
            self._replace(start - 1, end, value, start)
            return

        # --- 4. No '%%' ---
        if value == PERCENT and char_before == PERCENT:
            return

        # --- 5. One decimal point per number ---
        if value == DECIMAL_POINT and (char_before in NO_DECIMAL_POINT_AFTER or self.contains_decimal_point(start)):
            return

        self.insert(value, start, end)

    def append_parentheses(self, selection_start, selection_end):
        """Wrap the selection in '()' or insert '()' with the cursor between them."""
        start, end = self._clamp_selection(selection_start, selection_end)

        if start != end:
            selected = self._expression[start:end]
            self._replace(start, end, OPEN_BRACE + selected + CLOSE_BRACE, end + 2)
        else:
            self._replace(start, end, OPEN_BRACE + CLOSE_BRACE, start + 1)

    def toggle_sign(self, selection_start, selection_end):
        """Add or remove the unary minus of the number under the cursor."""
        if self._expression == "" or selection_start != selection_end:
            return

        position = self._clamp_selection(selection_start, selection_end)[0]

        # 1. Find the start of the number segment
        start = position
        while start > 0 and (self._expression[start - 1].isdigit() or
                             self._expression[start - 1] in (DECIMAL_POINT, PERCENT)):
            start -= 1

        # 2. An existing unary minus: preceded by text start, an operator or '('
        char_before = self._char_at(start - 1)
        char_before_minus = self._char_at(start - 2)
        has_unary_minus = char_before == MINUS and (
            start == 1 or char_before_minus in ALL_OPERATORS or char_before_minus == OPEN_BRACE)

        if has_unary_minus:
            self._replace(start - 1, start, "", position - 1)
        elif char_before is None or char_before in ALL_OPERATORS or char_before == OPEN_BRACE:
            self._replace(start, start, MINUS, position + 1)

    def backspace(self, selection_start, selection_end):
        """Delete the selection, or the character in front of the cursor."""
        if self._expression == "":
            return

        start, end = self._clamp_selection(selection_start, selection_end)
        if start != end:
            self._replace(start, end, "", start)
        elif start > 0:
            self._replace(start - 1, start, "", start - 1)

    def clear(self):
        self._expression = ""
        self._cursor = 0

    # -----------------------------
    # Results
    # -----------------------------

    def calculate_live_result(self, degrees=False):
        """Evaluate the expression while it is being typed.

        Open groups are closed automatically. While the attempt fails with a syntax error and the
        expression ends in a trimmable character (operator, '.', '%'), that character is dropped
        and the evaluation retried, so '12+' previews as 12 instead of an error.

        Returns the formatted result, a tagged error string, or "" for an empty expression.
        """
        candidate = self._expression

        while candidate:
            result = MathEngine.evaluate(close_braces(candidate), degrees)

            if not result.is_error:
                self.last_error = None
                return MathEngine.format_result(result.value)

            self.last_error = result.error
            if result.kind != "Syntax":
                return E.tag_error(result.kind)
            if candidate[-1] not in TRIMMABLE_TRAILING:
                return E.tag_error("Syntax")

            candidate = candidate[:-1]

        self.last_error = None
        return ""

    def finalize_calculation(self, degrees=False):
        """Evaluate once (no trimming) and commit the result into the buffer.

        - success: the buffer becomes the formatted result, cursor at its end
        - division by zero: the buffer is kept so the divisor can be fixed, cursor at its end
        - any other error: the buffer is cleared
        """
        self.last_error = None
        if self._expression == "":
            return ""

        result = MathEngine.evaluate(close_braces(self._expression), degrees)
        self.last_error = result.error

        if not result.is_error:
            formatted = MathEngine.format_result(result.value)
            self._expression = formatted
            self._cursor = len(formatted)
            return formatted

        if result.kind == "DivideByZero":
            self._cursor = len(self._expression)
        else:
            self.clear()
        return E.tag_error(result.kind)
