

class MathError(Exception):
    kind = "Error"

    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

class SyntaxError(MathError):
    kind = "Syntax"

class DivideByZeroError(MathError):
    kind = "DivideByZero"

class MathDomainError(MathError):
    kind = "MathDomain"

class NumberOverflowError(MathError):
    kind = "Overflow"



# Prefix of every error string handed to the UI. The UI strips it to get the message.
ERROR_TAG = "ERROR:"


Error_Dictionary= {

    "1" : "Missing Files",
    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "4" : "UI Error",
    "5" : "Configuration Error",
    "9" : "Unexpected Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Sub-category
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "2001" : "Math domain error in function: ", # + function name
    "2002" : "Factorial needs a non-negative integer.",
    "2003" : "Power result is not a real number: ", # + base^exponent
    "2004" : "Unknown scientific function: ", # + function name
    "2005" : "Number too big.",
    "2006" : "Zero to a negative power: ", # + base^exponent


    "3000" : "Missing '('. ",
    "3001" : "Missing ')'. ",
    "3002" : "Missing operand for operator: ", # + operator
    "3003" : "Division by Zero",
    "3004" : "Invalid Operator: ", # + operator
    "3008" : "More than one '.' in one number.",
    "3009" : "Expression cannot end with an operator.",
    "3010" : "Missing '(' after function: ", # + function name
    "3011" : "Unexpected Token: ", # + Token
    "3012" : "Invalid expression structure.",
    "3013" : "Percentage must follow a number.",
    "3014" : "Sign without a number.",
    "3015" : "Expression nested too deeply.",
    "3026" : "Number too big.",


    "5001" : "Settings could not be saved: ", # + path


    "9999" : "Unexpected Error: " #+error
}


# Short messages shown in the result line, one per error kind.
DISPLAY_MESSAGES = {
    "DivideByZero" : "Can't divide by zero",
    "Syntax" : "Syntax error",
    "MathDomain" : "Math domain error",
    "Overflow" : "Number too big",
}


def tag_error(kind):
    """Return the tagged display string for an error kind, e.g. 'ERROR:Syntax error'."""
    return ERROR_TAG + DISPLAY_MESSAGES.get(kind, DISPLAY_MESSAGES["Syntax"])


def split_error_tag(result):
    """Return (is_error, text) for a live/final result string."""
    if result.startswith(ERROR_TAG):
        return True, result[len(ERROR_TAG):]
    return False, result


def describe_error(error):
    """Detail text for a MathError: category, code line, details and the source equation."""
    code = error.code
    category = Error_Dictionary.get(code[:1], Error_Dictionary["9"])
    headline = ERROR_MESSAGES.get(code, "Unknown error").strip()
    return f"{category}\nError {code}: {headline}\nDetails: {error.message}\nEquation: {error.equation}"
