# MathEngine.py
"""""
Core evaluation engine for the Feather Calculator.

Pipeline
--------
1) Tokenizer: converts the display string into a flat list of typed tokens.
   Constants are substituted here, functions are recognized by their prefix ('sin(', '√(', ...).
2) Implicit multiplication: inserts '*' tokens where the notation omits them, e.g. 2(3), (2)(3), 2π.
3) Parenthesis resolver: every group and every function argument is reduced to a single number,
   innermost first, by re-entering the pipeline with the same angle mode.
4) Per group, on the flat list of numbers and operators:
   power -> factorial -> percentage -> precedence evaluation (AST of Number/BinOp nodes).
5) Formatter: renders the Decimal result for display.

Errors are raised as error.MathError subclasses inside the pipeline.
evaluate() is the boundary that turns them into an EvaluationResult, so callers never see an exception.
"""""

import decimal
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

from . import ScientificEngine
from . import error as E

# Debug toggle for optional prints in this module
debug = False

DIGITS = "0123456789"

# Operators as they appear in the internal (normalized) expression
Operations = ["+", "-", "*", "/", "^", "!"]
Binary_Operations = ["+", "-", "*", "/", "^"]

# Deepest allowed nesting of groups / function calls
MAX_DEPTH = 200


# -----------------------------
# Grammar table
# -----------------------------

Grammar = namedtuple("Grammar", ["glyphs", "functions", "constants", "decimal_point"])

DEFAULT_GRAMMAR = Grammar(
    # display glyph -> internal operator
    glyphs=(("×", "*"), ("÷", "/"), ("−", "-")),
    # function names; each one is written with its opening brace, e.g. 'sin('
    functions=("sin", "cos", "tan", "ln", "log", "√"),
    constants=(("π", ScientificEngine.PI_VALUE), ("e", ScientificEngine.EULER_VALUE)),
    decimal_point=".",
)


# -----------------------------
# Tokens
# -----------------------------

NUMBER = "number"
CONSTANT = "constant"
OPERATOR = "operator"
SIGN = "sign"
PERCENT = "percent"
OPEN = "open"
CLOSE = "close"
FUNCTION = "function"


class Token:
    """A single typed token. Tokens carry no position in the source string."""
    def __init__(self, kind, value=None):
        self.kind = kind
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __repr__(self):
        return f"Token({self.kind}, {self.value!r})"


def is_number(item):
    """True for the Decimal entries of a flat group list."""
    return isinstance(item, Decimal)


# -----------------------------
# Tokenizer
# -----------------------------

def normalize_glyphs(problem, grammar=DEFAULT_GRAMMAR):
    """Rewrite display glyphs (×, ÷, −) to the internal operators."""
    for display, internal in grammar.glyphs:
        problem = problem.replace(display, internal)
    return problem


def read_number(problem, start, grammar=DEFAULT_GRAMMAR):
    """Read an unsigned numeric literal starting at `start`.

    Accepts one decimal point and an optional scientific exponent, so formatted results
    ('1.5e+20', '6e-17') can be evaluated again. Only the signed form written by the formatter
    counts as an exponent: in '2e5' or '2e' the 'e' is left for the tokenizer, where it is
    Euler's constant. Typed by hand, '2e+5' is therefore read as 2×10^5, not 2×e+5.

    Returns:
        (Decimal value, index after the literal)
    """
    b = start
    has_point = False  # Only one dot allowed in a numeric literal

    while b < len(problem) and (problem[b] in DIGITS or problem[b] == grammar.decimal_point):
        if problem[b] == grammar.decimal_point:
            if has_point:
                raise E.SyntaxError("More than one '.' in one number.", code="3008")
            has_point = True
        b += 1

    mantissa = problem[start:b]
    if mantissa == grammar.decimal_point:
        raise E.SyntaxError(f"Unexpected Token: {mantissa}", code="3011")

    exponent = ""
    if problem.startswith("e+", b) or problem.startswith("e-", b):
        e = b + 2
        if e < len(problem) and problem[e] in DIGITS:
            while e < len(problem) and problem[e] in DIGITS:
                e += 1
            exponent = problem[b:e]
            b = e

    literal = mantissa.replace(grammar.decimal_point, ".") + exponent
    return ScientificEngine.to_decimal(literal), b


def is_unary_position(tokens):
    """A '+'/'-' is unary at the start, after an open brace / function, or after a binary operator."""
    if not tokens:
        return True
    last = tokens[-1]
    if last.kind in (OPEN, FUNCTION, SIGN):
        return True
    return last.kind == OPERATOR and last.value in Binary_Operations


def tokenize(problem, grammar=DEFAULT_GRAMMAR):
    """Convert an expression string into a list of Tokens.

    Notes:
    - A unary sign directly in front of a literal is folded into it ('-3' -> Number(-3)).
      In front of a group, function or constant it stays a SIGN token.
    - Functions become a single FUNCTION token that also stands for their opening brace.
    """
    problem = normalize_glyphs(problem, grammar)
    tokens = []
    b = 0

    while b < len(problem):
        current_char = problem[b]

        # --- Whitespace (ignored) ---
        if current_char.isspace():
            b += 1

        # --- Numbers: digits and decimal separator ---
        elif current_char in DIGITS or current_char == grammar.decimal_point:
            value, b = read_number(problem, b, grammar)
            tokens.append(Token(NUMBER, value))

        # --- Signs / binary + and - ---
        elif current_char in ("+", "-"):
            if is_unary_position(tokens):
                following = problem[b + 1] if b + 1 < len(problem) else ""
                if following != "" and (following in DIGITS or following == grammar.decimal_point):
                    value, b = read_number(problem, b + 1, grammar)
                    if current_char == "-":
                        value = value.copy_negate()
                    tokens.append(Token(NUMBER, value))
                else:
                    tokens.append(Token(SIGN, current_char))
                    b += 1
            else:
                tokens.append(Token(OPERATOR, current_char))
                b += 1

        # --- Remaining operators ---
        elif current_char in ("*", "/", "^", "!"):
            if current_char == "^" and not tokens:
                raise E.SyntaxError("Missing operand for operator: ^", code="3002")
            tokens.append(Token(OPERATOR, current_char))
            b += 1

        elif current_char == "%":
            tokens.append(Token(PERCENT, "%"))
            b += 1

        # --- Parentheses ---
        elif current_char == "(":
            tokens.append(Token(OPEN, "("))
            b += 1
        elif current_char == ")":
            tokens.append(Token(CLOSE, ")"))
            b += 1

        else:
            b = read_symbol(problem, b, tokens, grammar)

    # --- Final sanity check ---
    if tokens:
        last = tokens[-1]
        if last.kind == SIGN or (last.kind == OPERATOR and last.value in Binary_Operations):
            raise E.SyntaxError("Expression cannot end with an operator.", code="3009")

    return tokens


def read_symbol(problem, b, tokens, grammar=DEFAULT_GRAMMAR):
    """Match a function prefix or a named constant at position b and append its token."""
    for name in grammar.functions:
        if problem.startswith(name, b):
            end = b + len(name)
            if end >= len(problem) or problem[end] != "(":
                raise E.SyntaxError(f"Missing '(' after function: {name}", code="3010")
            tokens.append(Token(FUNCTION, name))
            return end + 1

    for symbol, value in grammar.constants:
        if problem.startswith(symbol, b):
            tokens.append(Token(CONSTANT, ScientificEngine.to_decimal(value)))
            return b + len(symbol)

    raise E.SyntaxError(f"Unexpected Token: {problem[b]}", code="3011")


# -----------------------------
# Implicit multiplication
# -----------------------------

def needs_multiplication(previous, current):
    """True when an omitted '*' sits between two adjacent tokens."""
    ends_operand = (previous.kind in (NUMBER, CONSTANT, PERCENT, CLOSE) or
                    (previous.kind == OPERATOR and previous.value == "!"))

    if ends_operand and current.kind in (OPEN, FUNCTION):
        return True
    if previous.kind == CLOSE and current.kind in (NUMBER, CONSTANT, PERCENT):
        return True
    # 2π, π2, πe
    if previous.kind == CONSTANT and current.kind in (NUMBER, CONSTANT):
        return True
    if previous.kind == NUMBER and current.kind == CONSTANT:
        return True
    return False


def insert_implicit_multiplication(tokens):
    """Single left-to-right pass returning a new token list with the implicit '*' tokens."""
    result = []
    for token in tokens:
        if result and needs_multiplication(result[-1], token):
            result.append(Token(OPERATOR, "*"))
        result.append(token)
    return result


# -----------------------------
# AST node types
# -----------------------------

class Number:
    """AST node for numeric literal backed by Decimal."""
    def __init__(self, value):
        self.value = value

    def evaluate(self):
        return self.value

    def __repr__(self):
        return f"Number({self.value})"


class BinOp:
    """AST node for a binary operation: left <operator> right."""
    def __init__(self, left, operator, right):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self):
        """Evaluate both subtrees and apply the operator through the numeric engine."""
        left_value = self.left.evaluate()
        right_value = self.right.evaluate()

        if self.operator == '+':
            return ScientificEngine.add(left_value, right_value)
        elif self.operator == '-':
            return ScientificEngine.subtract(left_value, right_value)
        elif self.operator == '*':
            return ScientificEngine.multiply(left_value, right_value)
        elif self.operator == '/':
            return ScientificEngine.divide(left_value, right_value)
        else:
            raise E.SyntaxError(f"Invalid Operator: {self.operator}", code="3004")

    def __repr__(self):
        return f"BinOp({self.operator!r}, left={self.left}, right={self.right})"


# -----------------------------
# Parenthesis resolver
# -----------------------------

def resolve_group(tokens, b, degrees, depth):
    """Reduce every nested group from tokens[b] up to the closing brace of the current group.

    Groups and function arguments are evaluated recursively and replaced by their value,
    so the caller receives a flat list of Decimals and operator strings.

    Returns:
        (flat_list, index of the closing brace, or len(tokens) at the end of input)
    """
    if depth > MAX_DEPTH:
        raise E.SyntaxError("Expression nested too deeply.", code="3015")

    flat = []
    pending_sign = None

    while b < len(tokens):
        token = tokens[b]

        if token.kind == CLOSE:
            break

        if token.kind == SIGN:
            if pending_sign is not None:
                raise E.SyntaxError("Sign without a number.", code="3014")
            pending_sign = token.value
            b += 1
            continue

        if token.kind in (NUMBER, CONSTANT):
            value = token.value
            b += 1

        elif token.kind in (OPEN, FUNCTION):
            inner, end = resolve_group(tokens, b + 1, degrees, depth + 1)
            if end >= len(tokens):
                raise E.SyntaxError("Missing closing parenthesis ')'", code="3001")
            value = reduce_group(inner)
            if token.kind == FUNCTION:
                value = ScientificEngine.apply_function(token.value, value, degrees)
            # A group result acts like a plain literal: 5.0 -> 5
            value = value.normalize(ScientificEngine.WORKING_CONTEXT)
            b = end + 1

        else:
            # Operators and '%' pass through unchanged
            if pending_sign is not None:
                raise E.SyntaxError("Sign without a number.", code="3014")
            flat.append(token.value)
            b += 1
            continue

        if pending_sign == "-":
            value = value.copy_negate()
        pending_sign = None
        flat.append(value)

    if pending_sign is not None:
        raise E.SyntaxError("Sign without a number.", code="3014")

    return flat, b


def reduce_group(flat):
    """Evaluate one flat group: power -> factorial -> percentage -> precedence."""
    if not flat:
        # '()' and the empty expression count as zero
        return Decimal(0)

    flat = resolve_powers(flat)
    flat = resolve_factorials(flat)
    flat = handle_percentage(flat)
    return evaluate_flat(flat)


# -----------------------------
# Power / factorial
# -----------------------------

def resolve_powers(flat):
    """Replace every 'a ^ b' (left to right) with its value."""
    result = list(flat)
    while "^" in result:
        b = result.index("^")
        if b == 0 or b + 1 >= len(result) or not is_number(result[b - 1]) or not is_number(result[b + 1]):
            raise E.SyntaxError("Missing operand for operator: ^", code="3002")
        result[b - 1:b + 2] = [ScientificEngine.power(result[b - 1], result[b + 1])]
    return result


def resolve_factorials(flat):
    """Replace every 'a !' with a! ; the operand must be a non-negative integer."""
    result = list(flat)
    while "!" in result:
        b = result.index("!")
        if b == 0 or not is_number(result[b - 1]):
            raise E.SyntaxError("Missing operand for operator: !", code="3002")
        result[b - 1:b + 1] = [ScientificEngine.factorial(result[b - 1])]
    return result


# -----------------------------
# Percentage normalizer
# -----------------------------

def handle_percentage(flat):
    """Rewrite '%' entries into plain numbers.

    - 50 %          -> 0.5
    - 100 + 10 %    -> 100 + 10      (percent of the number before the operator)
    - + 50 %        -> + 0.5         (no base number, operator is kept)
    """
    result = []

    for item in flat:
        if is_number(item) or item != "%":
            result.append(item)
            continue

        if not result or not is_number(result[-1]):
            raise E.SyntaxError("Percentage must follow a number.", code="3013")

        percent_value = result.pop()

        if result and result[-1] in ("+", "-"):
            operator = result.pop()
            if not result or not is_number(result[-1]):
                result.append(operator)
                result.append(ScientificEngine.percent(percent_value))
            else:
                base = result[-1]
                result.append(operator)
                result.append(ScientificEngine.multiply(base, ScientificEngine.percent(percent_value)))
        else:
            result.append(ScientificEngine.percent(percent_value))

    return result


# -----------------------------
# Precedence evaluator
# -----------------------------

def build_tree(flat):
    """Build the AST for a validated flat list: '*' and '/' bind tighter than '+' and '-'."""
    tokens = list(flat)

    def parse_term(tokens):
        """Multiplication and division."""
        current_tree = Number(tokens.pop(0))
        while tokens and tokens[0] in ("*", "/"):
            operator = tokens.pop(0)
            current_tree = BinOp(current_tree, operator, Number(tokens.pop(0)))
        return current_tree

    def parse_sum(tokens):
        """Addition and subtraction."""
        current_tree = parse_term(tokens)
        while tokens and tokens[0] in ("+", "-"):
            operator = tokens.pop(0)
            current_tree = BinOp(current_tree, operator, parse_term(tokens))
        return current_tree

    return parse_sum(tokens)


def evaluate_flat(flat):
    """Check the operand/operator alternation of a flat group and evaluate it."""
    if len(flat) % 2 == 0:
        raise E.SyntaxError("Invalid expression structure.", code="3012")

    for b, item in enumerate(flat):
        if b % 2 == 0:
            if not is_number(item):
                raise E.SyntaxError(f"Missing operand for operator: {item}", code="3002")
        elif is_number(item):
            raise E.SyntaxError("Invalid expression structure.", code="3012")
        elif item not in ("+", "-", "*", "/"):
            # '^' and '!' are gone by now
            raise E.SyntaxError(f"Invalid Operator: {item}", code="3004")

    final_tree = build_tree(flat)

    if debug == True:
        print("Final AST:")
        print(final_tree)

    return final_tree.evaluate()


# -----------------------------
# Result formatting
# -----------------------------

DISPLAY_DECIMALS = 15
ROUNDING_PATTERN = Decimal("1e-15")
SCIENTIFIC_UPPER = Decimal("1e16")   # 17 integer digits and more
SCIENTIFIC_LOWER = Decimal("1e-16")


def strip_zeros(text):
    """Trim trailing fractional zeros and a dangling decimal point."""
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_scientific(value):
    """Render as '<mantissa>e<+/-exponent>', mantissa rounded to 15 fractional digits."""
    context = ScientificEngine.WORKING_CONTEXT
    exponent = value.adjusted()
    mantissa = value.scaleb(-exponent, context=context)
    mantissa = mantissa.quantize(ROUNDING_PATTERN, rounding=ROUND_HALF_UP, context=context)

    if mantissa.copy_abs() >= 10:
        # 9.9999999999999999 rounded up to 10
        exponent += 1
        mantissa = mantissa.scaleb(-1, context=context).quantize(ROUNDING_PATTERN, rounding=ROUND_HALF_UP, context=context)

    return f"{strip_zeros(format(mantissa, 'f'))}e{exponent:+d}"


def format_result(value):
    """Format a Decimal result for display.

    - 0 -> "0"
    - more than 16 integer digits, or non-zero and below 1e-16 -> scientific notation
    - otherwise at most 15 decimals (round half up), trailing zeros removed
    """
    if value == 0:
        return "0"

    magnitude = value.copy_abs()
    if magnitude >= SCIENTIFIC_UPPER or magnitude < SCIENTIFIC_LOWER:
        return format_scientific(value)

    rounded = value.quantize(ROUNDING_PATTERN, rounding=ROUND_HALF_UP, context=ScientificEngine.WORKING_CONTEXT)
    if rounded == 0:
        return "0"
    return strip_zeros(format(rounded, "f"))


# -----------------------------
# Public entry points
# -----------------------------

class EvaluationResult:
    """Outcome of one evaluation: either a Decimal value or a MathError."""
    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error

    @property
    def is_error(self):
        return self.error is not None

    @property
    def kind(self):
        """Error kind ('Syntax', 'DivideByZero', 'MathDomain', 'Overflow') or None."""
        if self.error is None:
            return None
        return self.error.kind

    def __repr__(self):
        if self.is_error:
            return f"EvaluationResult(error={self.kind}: {self.error.message})"
        return f"EvaluationResult(value={self.value})"


def evaluate_expression(problem, degrees=False, grammar=DEFAULT_GRAMMAR):
    """Run the whole pipeline and return the Decimal value; raises MathError subclasses."""
    tokens = insert_implicit_multiplication(tokenize(problem, grammar))

    if debug == True:
        print(tokens)

    flat, end = resolve_group(tokens, 0, degrees, 0)
    if end < len(tokens):
        raise E.SyntaxError("Missing opening parenthesis '('", code="3000")

    return reduce_group(flat)


def evaluate(problem, degrees=False, grammar=DEFAULT_GRAMMAR):
    """Main API: evaluate an expression string into an EvaluationResult.

    `degrees` selects the angle unit of sin/cos/tan, including nested calls.
    """
    with decimal.localcontext(ScientificEngine.WORKING_CONTEXT):
        try:
            value = evaluate_expression(problem, degrees, grammar)

        # Known numeric overflow
        except decimal.Overflow:
            error = E.NumberOverflowError("Number too large (Arithmetic overflow).", code="3026", equation=problem)
            return EvaluationResult(error=error)
        # Our own errors keep their kind and code; only the source equation is attached
        except E.MathError as e:
            e.equation = problem
            return EvaluationResult(error=e)

    return EvaluationResult(value=value)


def calculate(problem, degrees=False):
    """Evaluate and render: the formatted result, or the tagged error string."""
    result = evaluate(problem, degrees)
    if result.is_error:
        return E.tag_error(result.kind)
    return format_result(result.value)


def test_main():
    """Simple REPL-like runner for manual testing of the engine."""
    print("Enter the problem: ")
    problem = input()
    print(calculate(problem))


if __name__ == "__main__":
    # Allow running this module directly for quick CLI tests:
    #   python -m FeatherCalc.MathEngine
    test_main()
