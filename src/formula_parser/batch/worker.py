"""Evaluate a single input line."""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from formula_parser.common.errors import FormulaError
from formula_parser.common.logger import logger
from formula_parser.common.models import EvaluationRequest, EvaluationResult
from formula_parser.engine.formula import Formula
from formula_parser.engine.functions import AliasTable


class FormulaJob(BaseModel):
    """
    Job responsible for evaluating one line of a formula file.

    Lifecycle:
        - Built by the batch runner for each non-empty input line
        - Parses the line into a formula and its binding sets
        - Returns the computed result, or the error message, as an EvaluationResult
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like AliasTable locks
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    text: str = Field(..., description="Input line: formula, optionally followed by '| bindings'")
    line_number: int = Field(..., ge=1, description="Line number in the input file")
    source: Optional[str] = Field(default=None, description="File the line comes from")
    aliases: Optional[AliasTable] = Field(default=None, description="Function aliases, process-wide table if None")

    @field_validator("text")
    def text_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the line is not empty."""
        if not v.strip():
            raise ValueError("Input line cannot be empty")
        return v

    @property
    def location(self) -> str:
        """``source:line`` when the source is known, else ``line N``."""
        if self.source:
            return f"{self.source}:{self.line_number}"
        return f"line {self.line_number}"

    def run(self) -> EvaluationResult:
        """
        Evaluate the line and return the result or the error.

        Syntax and evaluation errors (unknown names, failing function calls) and
        malformed bindings become error results.

        :return: Outcome of the evaluation
        :rtype: EvaluationResult
        """
        logger.info(f"👷🏁 Job started on {self.location}: {self.text}")

        try:
            request = EvaluationRequest.from_line(self.text)
            formula = Formula(request.expression, aliases=self.aliases)
            result: Union[float, List[float]]
            if request.is_batch:
                result = formula.evaluate(request.bindings)
            else:
                result = formula.evaluate(request.bindings[0] if request.bindings else {})

        except (FormulaError, ValueError) as exc:
            logger.error(
                f"👷❌ Job failed on {self.location}: {exc}\n"
                f"Invalid formula, could not evaluate: {self.text!r}"
            )
            return EvaluationResult(source=self.source, line=self.line_number, expression=self.text, error=str(exc))

        logger.info(f"👷✅ Job finished on {self.location}: {result}")
        return EvaluationResult(source=self.source, line=self.line_number, expression=self.text, result=result)
