"""Error types raised while parsing and evaluating formulas."""
from typing import List, Optional


class FormulaError(ValueError):
    """Base class for all formula-related errors."""


class FormulaSyntaxError(FormulaError):
    """
    Formula string could not be parsed.

    :param str message: Human-readable description
    :param int position: Character position (within ``source``) where the error was detected
    :param str source: The (sub-)formula text being parsed
    """

    def __init__(self, message: str, position: Optional[int] = None, source: Optional[str] = None):
        self.message = message
        self.position = position
        self.source = source
        full = f"Formula syntax error: {message}"
        if position is not None:
            full += f" (at position {position}"
            full += f" in {source!r})" if source is not None else ")"
        super().__init__(full)


class UnbalancedParenthesesError(FormulaSyntaxError):
    """Opening and closing parentheses do not match."""


class InvalidNamedVariableCharacterError(FormulaSyntaxError):
    """A ``[name]`` variable holds a non-word character or no name at all."""


class InvalidFunctionNameCharacterError(FormulaSyntaxError):
    """A function name is interrupted by something other than ``(``."""


class WrongOperatorPositionError(FormulaSyntaxError):
    """An operator starts or ends a sequence, or follows another operator."""


class UnrecognizedCharacterError(FormulaSyntaxError):
    """A character outside the formula grammar."""


class UnterminatedRegionError(FormulaSyntaxError):
    """Input ended inside a function name or a named variable."""


class InvalidNumberError(FormulaSyntaxError):
    """A run of digits and dots is not a valid number, e.g. ``1.2.3``."""


class MissingOperatorError(FormulaSyntaxError):
    """Two operands are adjacent and no implicit multiplication applies, e.g. ``x2``."""


class EmptyExpressionError(FormulaSyntaxError):
    """A formula, parenthesized group or function argument is empty."""


class FormulaEvaluationError(FormulaError):
    """Formula could not be evaluated against the given bindings."""


class UnboundVariableError(FormulaEvaluationError):
    """
    A variable has no value in the binding object.

    :param str name: The unbound variable
    :param list available: Names present in the binding object
    """

    def __init__(self, name: str, available: Optional[List[str]] = None):
        self.name = name
        self.available = available or []
        msg = f"Cannot evaluate {name!r}: no value given"
        if self.available:
            msg += f". Available: {self.available}"
        super().__init__(msg)


class FunctionNotFoundError(FormulaEvaluationError):
    """No lookup strategy could resolve the function name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function not found: {name!r}")


class FormulaInputError(FormulaError):
    """An input file cannot be read as formulas (unsupported format, no text member)."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{message}: {path}" if path is not None else message)
