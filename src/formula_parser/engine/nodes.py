"""Expression nodes: the tagged variants a parsed formula is made of."""
from typing import TYPE_CHECKING, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from formula_parser.engine.formula import Formula

OperatorSymbol = Literal["+", "-", "*", "/", "^"]

OPERATOR_SYMBOLS: Tuple[str, ...] = ("+", "-", "*", "/", "^")


class Number(BaseModel):
    """A numeric literal."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(..., description="Literal value")


class Operator(BaseModel):
    """A binary operator occupying one slot of an expression sequence."""

    model_config = ConfigDict(frozen=True)

    symbol: OperatorSymbol = Field(..., description="Operator symbol")


class VariableRef(BaseModel):
    """A free variable, resolved from the binding object at evaluation time."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Variable name")


class FunctionCall(BaseModel):
    """A function call whose arguments are full nested formulas."""

    # Formula is a plain class, checked with isinstance
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Function name as written in the formula")
    args: Tuple["Formula", ...] = Field(default=(), description="Argument formulas, in call order")


class SubFormula(BaseModel):
    """A parenthesized group, replaced by its scalar result at evaluation time."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    formula: "Formula" = Field(..., description="The nested formula")


ExpressionNode = Union[Number, Operator, VariableRef, FunctionCall, SubFormula]

# Nodes that can stand on either side of an operator
OPERAND_TYPES = (Number, VariableRef, FunctionCall, SubFormula)


def is_operand(node: ExpressionNode) -> bool:
    """Return True if ``node`` is anything but an operator."""
    return isinstance(node, OPERAND_TYPES)
