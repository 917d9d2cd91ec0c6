"""Pydantic models for batch evaluation requests and results."""
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Separates the formula from its bindings on one input line
BINDINGS_SEPARATOR = "|"
# Separates several binding sets (a batch evaluation)
BINDING_SET_SEPARATOR = ";"


def parse_binding_set(text: str) -> Dict[str, str]:
    """
    Parse ``"x=1, y=2"`` into ``{"x": "1", "y": "2"}``.

    Values are left as text; the request model converts them to floats.

    :param str text: Comma-separated ``name=value`` pairs

    :return: Variable name to value text
    :rtype: Dict[str, str]
    :raises ValueError: If a pair has no ``=`` or an empty name
    """
    bindings: Dict[str, str] = {}
    for pair in text.split(","):
        if not pair.strip():
            continue
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid binding {pair.strip()!r}, expected name=value")
        bindings[name.strip()] = value.strip()
    return bindings


class EvaluationRequest(BaseModel):
    """Represents a single formula to evaluate, with zero or more binding sets."""

    expression: str = Field(..., description="Formula text")
    bindings: List[Dict[str, float]] = Field(default_factory=list, description="Binding sets, evaluated in order")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    @classmethod
    def from_line(cls, line: str) -> "EvaluationRequest":
        """
        Build a request from one input line.

        Format: ``formula`` or ``formula | x=1, y=2; x=3, y=4``.

        :param str line: Input line

        :return: The parsed request
        :rtype: EvaluationRequest
        """
        expression, _, bindings_text = line.partition(BINDINGS_SEPARATOR)
        binding_sets = [
            parse_binding_set(chunk)
            for chunk in bindings_text.split(BINDING_SET_SEPARATOR)
            if chunk.strip()
        ]
        return cls(expression=expression.strip(), bindings=binding_sets)

    @property
    def is_batch(self) -> bool:
        """True when more than one binding set is given."""
        return len(self.bindings) > 1


class InputLine(BaseModel):
    """One formula line read from an input file, with its origin."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="File the line comes from (archive member name for archives)")
    line: int = Field(..., ge=1, description="Line number within the source file")
    text: str = Field(..., description="Stripped line text")


class EvaluationResult(BaseModel):
    """Represents the outcome of one evaluated input line."""

    source: Optional[str] = Field(default=None, description="File the line comes from")
    line: int = Field(..., ge=1, description="Line number in the input file")
    expression: str = Field(..., description="Original input line")
    result: Optional[Union[float, List[float]]] = Field(default=None, description="Evaluated value(s)")
    error: Optional[str] = Field(default=None, description="Error message if evaluation failed")

    @property
    def ok(self) -> bool:
        return self.error is None

    def format(self) -> str:
        """Render the result as one output line (without newline)."""
        if self.ok:
            return f"{self.expression} = {self.result}"
        return f"{self.expression} -> ERROR: {self.error}"
