# ScientificEngine
"""""
Numeric engine for the Feather Calculator.

All arithmetic runs on Decimal at a fixed working precision (50 significant digits, round-half-up).
Only the transcendental functions (sin, cos, tan, ln, log10, sqrt) and power leave Decimal:
they go through float and the native math library, and the float result is wrapped again at full precision.
"""""
import math
from decimal import Decimal, Context, ROUND_HALF_UP

from . import error as E


PRECISION = 50
WORKING_CONTEXT = Context(prec=PRECISION, rounding=ROUND_HALF_UP)

PI_VALUE = "3.1415926535897932384626433832795028841971693993751"
EULER_VALUE = "2.7182818284590452353602874713526624977572470936999"

DEG_TO_RAD = math.pi / 180.0

# log10 of the largest number the working context can hold
MAX_DECIMAL_LOG10 = WORKING_CONTEXT.Emax

# Factorials from roughly 205000! on exceed the Decimal range; larger inputs skip the lgamma check
MAX_FACTORIAL = 250000

# Largest n whose factorial is computed as an exact int before rounding
EXACT_FACTORIAL_LIMIT = 1000


def to_decimal(value):
    """Wrap an int, str, Decimal or float at the working precision.

    Floats are converted from their exact binary value, then rounded to 50 digits.
    """
    if isinstance(value, float):
        return WORKING_CONTEXT.create_decimal_from_float(value)
    return WORKING_CONTEXT.create_decimal(value)


# -----------------------------
# Basic arithmetic
# -----------------------------

def add(left, right):
    return WORKING_CONTEXT.add(left, right)


def subtract(left, right):
    return WORKING_CONTEXT.subtract(left, right)


def multiply(left, right):
    return WORKING_CONTEXT.multiply(left, right)


def divide(left, right):
    if right == 0:
        raise E.DivideByZeroError("Division by zero", code="3003")
    return WORKING_CONTEXT.divide(left, right)


def percent(value):
    """50 -> 0.5"""
    return WORKING_CONTEXT.divide(value, Decimal(100))


# -----------------------------
# Power / Factorial
# -----------------------------

def power(base, exponent):
    """Return base^exponent, computed in double precision (fractional and negative exponents allowed)."""
    float_base = float(base)
    float_exponent = float(exponent)

    if not math.isfinite(float_base) or not math.isfinite(float_exponent):
        raise E.NumberOverflowError(f"Overflow in power calculation: {base}^{exponent}", code="2005")

    # 0^-n has no finite value
    if float_base == 0 and float_exponent < 0:
        raise E.NumberOverflowError(f"Zero to a negative power: {base}^{exponent}", code="2006")

    try:
        result = math.pow(float_base, float_exponent)
    except OverflowError:
        raise E.NumberOverflowError(f"Overflow in power calculation: {base}^{exponent}", code="2005")
    except ValueError:
        # Negative base with a fractional exponent has no real result
        raise E.MathDomainError(f"Power result is not a real number: {base}^{exponent}", code="2003")

    if math.isinf(result):
        raise E.NumberOverflowError(f"Overflow in power calculation: {base}^{exponent}", code="2005")
    if math.isnan(result):
        raise E.MathDomainError(f"Power result is not a real number: {base}^{exponent}", code="2003")

    return to_decimal(result)


def factorial(value):
    """Return value! for a non-negative integer value.

    The operand must have no fractional digits at all: '3.0!' is rejected like '3.5!'.
    Group results reach this function with their trailing zeros dropped, so '(1.5×2)!' is 6.

    Up to EXACT_FACTORIAL_LIMIT the product is an exact int. Above it the product is
    accumulated in the working context, since the result is rounded to 50 digits anyway.
    Results that would not fit the Decimal exponent range are rejected before computing them.
    """
    if value < 0 or value.as_tuple().exponent < 0:
        raise E.MathDomainError(f"Factorial needs a non-negative integer, got {value}", code="2002")

    n = int(value)
    if n > MAX_FACTORIAL or (n > 1 and math.lgamma(n + 1) / math.log(10) > MAX_DECIMAL_LOG10):
        raise E.NumberOverflowError(f"Factorial too large: {n}!", code="2005")

    if n <= EXACT_FACTORIAL_LIMIT:
        return to_decimal(math.factorial(n))

    result = to_decimal(math.factorial(EXACT_FACTORIAL_LIMIT))
    for k in range(EXACT_FACTORIAL_LIMIT + 1, n + 1):
        result = WORKING_CONTEXT.multiply(result, Decimal(k))
    return result


# -----------------------------
# Transcendental functions
# -----------------------------

def degrees_to_radians(value):
    return float(value) * DEG_TO_RAD


def _native(name, function, argument):
    """Call a float math function and wrap the result; non-finite results are domain errors."""
    try:
        result = function(argument)
    except (ValueError, OverflowError):
        raise E.MathDomainError(f"Math domain error: {name} of {argument}", code="2001")

    if not math.isfinite(result):
        raise E.MathDomainError(f"Math domain error: {name} of {argument}", code="2001")

    return to_decimal(result)


def _trig_argument(value, degrees):
    if degrees:
        return degrees_to_radians(value)
    return float(value)


def sin(value, degrees=False):
    return _native("sin", math.sin, _trig_argument(value, degrees))


def cos(value, degrees=False):
    return _native("cos", math.cos, _trig_argument(value, degrees))


def tan(value, degrees=False):
    return _native("tan", math.tan, _trig_argument(value, degrees))


def ln(value):
    return _native("ln", math.log, float(value))


def log10(value):
    return _native("log", math.log10, float(value))


def sqrt(value):
    return _native("√", math.sqrt, float(value))


def apply_function(name, value, degrees=False):
    """Dispatch a scientific function by its display name ('sin', 'cos', 'tan', 'ln', 'log', '√')."""

    if name == "sin":
        return sin(value, degrees)
    elif name == "cos":
        return cos(value, degrees)
    elif name == "tan":
        return tan(value, degrees)
    elif name == "ln":
        return ln(value)
    elif name == "log":
        return log10(value)
    elif name == "√":
        return sqrt(value)
    else:
        raise E.SyntaxError(f"Unknown scientific function: {name}", code="2004")
