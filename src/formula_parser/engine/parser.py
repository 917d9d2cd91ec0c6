"""Character-level state machine turning formula text into an expression sequence."""
from enum import Enum
import string
from typing import TYPE_CHECKING, List, Optional

from formula_parser.common.errors import (
    EmptyExpressionError,
    InvalidFunctionNameCharacterError,
    InvalidNamedVariableCharacterError,
    InvalidNumberError,
    MissingOperatorError,
    UnbalancedParenthesesError,
    UnrecognizedCharacterError,
    UnterminatedRegionError,
    WrongOperatorPositionError,
)
from formula_parser.engine.nodes import (
    OPERATOR_SYMBOLS,
    ExpressionNode,
    FunctionCall,
    Number,
    Operator,
    SubFormula,
    VariableRef,
    is_operand,
)

if TYPE_CHECKING:
    from formula_parser.engine.formula import Formula

DIGITS = frozenset(string.digits)
NUMBER_CHARS = DIGITS | frozenset(".")
LETTERS = frozenset(string.ascii_letters)
ALNUM = frozenset(string.ascii_letters + string.digits)
WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")

# Characters after which "(" or "[" starts an implicit product
_PRODUCT_LOOKBEHIND = ALNUM | frozenset(")]-")
# Characters after a closing "]" that start an implicit product
_NAMED_VARIABLE_LOOKAHEAD = ALNUM | frozenset("([")


class ParserState(Enum):
    """States of the formula parser."""

    NONE = "none"
    WITHIN_NUMBER = "within-number"
    WITHIN_FUNCTION_NAME = "within-function-name"
    WITHIN_NAMED_VARIABLE = "within-named-variable"
    WITHIN_PARENTHESES = "within-parentheses"
    WITHIN_FUNCTION_PARENTHESES = "within-function-parentheses"


def split_function_arguments(text: str) -> List[str]:
    """
    Split the text between a function's parentheses on top-level commas.

    Commas inside nested parentheses do not split: ``"x,pow(3,4)"`` gives ``["x", "pow(3,4)"]``.
    An empty text means no arguments.

    :param str text: Argument text, without the enclosing parentheses

    :return: Argument substrings, in order
    :rtype: List[str]
    :raises UnbalancedParenthesesError: If the parentheses inside ``text`` do not match
    """
    if not text:
        return []

    params: List[str] = []
    depth = 0
    current = ""
    for position, char in enumerate(text):
        if char == "," and depth == 0:
            params.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                raise UnbalancedParenthesesError("Too many closing parentheses", position, text)
            depth -= 1
        current += char

    if depth != 0:
        raise UnbalancedParenthesesError("Too many opening parentheses", len(text), text)

    params.append(current)
    return params


class FormulaParser:
    """
    Parse one (sub-)formula text into an ordered list of expression nodes.

    The parser reads the text left to right, one character per step, and the current
    :class:`ParserState` decides how that character is consumed. Parenthesized groups and
    function arguments are handed back to ``owner`` to become nested formulas, so the
    recursion follows the nesting of the text.

    The resulting sequence alternates operands and operators, starts and ends with an
    operand, and spells unary minus as ``-1 *``.

    :param Formula owner: Formula being built; receives variable names and creates nested formulas
    """

    def __init__(self, owner: "Formula"):
        self.owner = owner
        self.text = ""
        self.expressions: List[ExpressionNode] = []

    def parse(self, text: str) -> List[ExpressionNode]:
        """
        Parse ``text`` into expression nodes.

        :param str text: Preprocessed formula text (no whitespace, constants substituted)

        :return: Expression nodes in source order
        :rtype: List[ExpressionNode]
        :raises FormulaSyntaxError: If the text is malformed
        """
        self.text = text
        self.expressions = []

        if not text:
            raise EmptyExpressionError("Empty expression", 0, text)

        state = ParserState.NONE
        buffer = ""
        function_name: Optional[str] = None
        depth = 0
        index = 0
        last = len(text) - 1

        while index <= last:
            char = text[index]

            if state is ParserState.NONE:
                if char in NUMBER_CHARS:
                    # Re-read this char in number state
                    state = ParserState.WITHIN_NUMBER
                    buffer = ""
                    continue

                if char in OPERATOR_SYMBOLS:
                    self._read_operator(char, index)

                elif char == "(":
                    if self._char_at(index - 1) in _PRODUCT_LOOKBEHIND:
                        self._implicit_multiplication()
                    state = ParserState.WITHIN_PARENTHESES
                    buffer = ""
                    depth = 0

                elif char == "[":
                    if self._char_at(index - 1) in _PRODUCT_LOOKBEHIND:
                        self._implicit_multiplication()
                    state = ParserState.WITHIN_NAMED_VARIABLE
                    buffer = ""

                elif char in LETTERS:
                    if index < last and text[index + 1] in LETTERS:
                        # Coefficient before a function name, e.g. 3sin(x)
                        if self._char_at(index - 1) in DIGITS:
                            self._implicit_multiplication()
                        state = ParserState.WITHIN_FUNCTION_NAME
                        buffer = char
                    else:
                        # Single-letter variable, e.g. the x in 3x
                        if self.expressions and isinstance(self.expressions[-1], Number):
                            self._implicit_multiplication()
                        self._emit_operand(VariableRef(name=char), index)
                        self.owner.register_variable(char)

                elif char in ")]":
                    raise UnbalancedParenthesesError(f"Unmatched {char!r}", index, text)

                else:
                    raise UnrecognizedCharacterError(f"Unrecognized character {char!r}", index, text)

            elif state is ParserState.WITHIN_NUMBER:
                if char in NUMBER_CHARS:
                    buffer += char
                else:
                    # Number finished, re-read this char in the default state
                    self._emit_number(buffer, index)
                    state = ParserState.NONE
                    continue

            elif state is ParserState.WITHIN_FUNCTION_NAME:
                if char in ALNUM:
                    buffer += char
                elif char == "(":
                    function_name = buffer
                    buffer = ""
                    depth = 0
                    state = ParserState.WITHIN_FUNCTION_PARENTHESES
                else:
                    raise InvalidFunctionNameCharacterError(
                        f"Wrong character {char!r} for function {buffer!r}", index, text
                    )

            elif state is ParserState.WITHIN_NAMED_VARIABLE:
                if char == "]":
                    if not buffer:
                        raise InvalidNamedVariableCharacterError("Empty named variable", index, text)
                    self._emit_operand(VariableRef(name=buffer), index)
                    self.owner.register_variable(buffer)
                    if self._char_at(index + 1) in _NAMED_VARIABLE_LOOKAHEAD:
                        self._implicit_multiplication()
                    state = ParserState.NONE
                elif char in WORD_CHARS:
                    buffer += char
                else:
                    raise InvalidNamedVariableCharacterError(
                        f"Character not allowed within named variable: {char!r}", index, text
                    )

            else:
                # Inside a parenthesized group or a function's argument list
                if char == ")" and depth == 0:
                    if state is ParserState.WITHIN_PARENTHESES:
                        if not buffer:
                            raise EmptyExpressionError("Empty parentheses", index, text)
                        self._emit_operand(SubFormula(formula=self.owner.subformula(buffer)), index)
                    else:
                        args = tuple(self.owner.subformula(arg) for arg in split_function_arguments(buffer))
                        self._emit_operand(FunctionCall(name=function_name, args=args), index)
                        function_name = None
                    if self._char_at(index + 1) in ALNUM:
                        self._implicit_multiplication()
                    state = ParserState.NONE
                else:
                    if char == "(":
                        depth += 1
                    elif char == ")":
                        depth -= 1
                    buffer += char

            index += 1

        if state is ParserState.WITHIN_NUMBER:
            self._emit_number(buffer, len(text))
        elif state in (ParserState.WITHIN_PARENTHESES, ParserState.WITHIN_FUNCTION_PARENTHESES):
            raise UnbalancedParenthesesError("Missing closing parenthesis", len(text), text)
        elif state is ParserState.WITHIN_NAMED_VARIABLE:
            raise UnterminatedRegionError(f"Named variable {buffer!r} is missing ']'", len(text), text)
        elif state is ParserState.WITHIN_FUNCTION_NAME:
            raise UnterminatedRegionError(f"Function name {buffer!r} is not followed by '('", len(text), text)

        if isinstance(self.expressions[-1], Operator):
            raise WrongOperatorPositionError("Expression cannot end with an operator", len(text), text)

        return self.expressions

    def _char_at(self, index: int) -> str:
        """Return the character at ``index``, or an empty string outside the text."""
        if 0 <= index < len(self.text):
            return self.text[index]
        return ""

    def _read_operator(self, char: str, index: int) -> None:
        """Emit an operator, rewriting a unary minus into ``-1 *``."""
        at_start = not self.expressions
        after_operator = not at_start and isinstance(self.expressions[-1], Operator)

        if char == "-" and (at_start or after_operator):
            self.expressions.append(Number(value=-1))
            self.expressions.append(Operator(symbol="*"))
            return

        if at_start or after_operator or index == len(self.text) - 1:
            raise WrongOperatorPositionError(f"Operator {char!r} in wrong position", index, self.text)

        self.expressions.append(Operator(symbol=char))

    def _implicit_multiplication(self) -> None:
        """Insert ``*`` between two adjacent operands."""
        # Only ever directly after an operand, so two operators never meet
        if self.expressions and is_operand(self.expressions[-1]):
            self.expressions.append(Operator(symbol="*"))

    def _emit_operand(self, node: ExpressionNode, index: int) -> None:
        """Append an operand, refusing two operands in a row."""
        if self.expressions and is_operand(self.expressions[-1]):
            raise MissingOperatorError("Missing operator between operands", index, self.text)
        self.expressions.append(node)

    def _emit_number(self, literal: str, index: int) -> None:
        """Append the number spelled by ``literal``."""
        try:
            value = float(literal)
        except ValueError:
            raise InvalidNumberError(f"Invalid number {literal!r}", index - len(literal), self.text) from None
        self._emit_operand(Number(value=value), index - len(literal))
