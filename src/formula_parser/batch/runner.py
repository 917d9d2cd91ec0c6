"""Evaluate formula lines and write the results to a file."""
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from pydantic import BaseModel, ConfigDict, Field

from formula_parser.batch.worker import FormulaJob
from formula_parser.common.logger import logger
from formula_parser.common.models import EvaluationResult, InputLine
from formula_parser.engine.functions import AliasTable


class BatchRunner(BaseModel):
    """
    Evaluate formula files line by line.

    Features:
        - One FormulaJob per input line.
        - Writes each result to disk as soon as it is computed.
        - A failing line is written as an error and does not stop the run.
    """

    # Allow arbitrary types like AliasTable locks
    model_config = ConfigDict(arbitrary_types_allowed=True)

    output_file: Path = Field(..., description="Path to write evaluation results")
    aliases: Optional[AliasTable] = Field(default=None, description="Function aliases passed to every job")

    def _write_result(self, result: EvaluationResult, f_out: TextIO) -> None:
        """
        Write one result line and flush it immediately.

        :param EvaluationResult result: Outcome of one job
        :param TextIO f_out: Open file handle for writing results
        """
        f_out.write(result.format() + "\n")
        f_out.flush()

    def run(self, lines: Iterable[InputLine]) -> List[EvaluationResult]:
        """
        Evaluate every input line and write the results to ``output_file``.

        :param Iterable lines: Formula lines, as read by the loader

        :return: All results, in input order
        :rtype: List[EvaluationResult]
        """
        lines = list(lines)
        logger.info(f"🧮 Evaluating {len(lines)} formulas into {self.output_file}")

        results: List[EvaluationResult] = []
        with self.output_file.open("w", encoding="utf-8") as f_out:
            for line in lines:
                job = FormulaJob(text=line.text, line_number=line.line, source=line.source, aliases=self.aliases)
                result = job.run()
                self._write_result(result, f_out)
                results.append(result)

        failed = sum(1 for result in results if not result.ok)
        logger.info(f"🧮✅ Done: {len(results) - failed} evaluated, {failed} failed")
        return results
