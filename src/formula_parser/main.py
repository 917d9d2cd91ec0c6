"""
Command-line entrypoint.

This script:
- Reads a formula file (plain text or archive)
- Evaluates every line, with the bindings written on that line
- Writes one result line per formula next to the input file

Input line format::

    x*sin(PI*x/2) | x=1
    2^x | x=2; x=4; x=8
"""

import argparse
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, field_validator

from formula_parser.batch.loader import read_input
from formula_parser.batch.runner import BatchRunner
from formula_parser.common.logger import logger
from formula_parser.engine.functions import AliasTable


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    file_path : FilePath
        Path to the file containing formulas.
    output : Path, optional
        Path of the results file.
    aliases : dict
        Function aliases, given on the command line as ``NAME=NATIVE``.
    """

    file_path: FilePath
    output: Optional[Path] = None
    aliases: Dict[str, str] = Field(default_factory=dict)

    @field_validator("aliases", mode="before")
    def parse_alias_entries(cls, v):
        """Turn ``["ln=log"]`` into ``{"ln": "log"}``."""
        if not isinstance(v, list):
            return v
        aliases: Dict[str, str] = {}
        for entry in v:
            name, sep, native = entry.partition("=")
            if not sep or not name or not native:
                raise ValueError(f"Invalid alias {entry!r}, expected NAME=NATIVE")
            aliases[name] = native
        return aliases


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param list argv: Arguments to parse, ``sys.argv`` if None

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        description="Evaluate a file of algebraic formulas"
    )

    parser.add_argument(
        "file_path",
        help="Path to the file containing formulas (.txt, .zip, .tar.xz or .7z)",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Path of the results file (default: next to the input file)",
    )
    parser.add_argument(
        "--alias",
        action="append",
        default=[],
        metavar="NAME=NATIVE",
        help="Make NAME call the native math function NATIVE, e.g. ln=log (repeatable)",
    )

    args = parser.parse_args(argv)

    try:
        return CliArgs(file_path=args.file_path, output=args.output, aliases=args.alias)
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/formulas.7z
    output: resources/formulas_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffixes = "".join(input_path.suffixes)
    base = input_path.name[: len(input_path.name) - len(suffixes)]
    suffix_safe = suffixes.replace(".", "_")
    return input_path.with_name(f"{base}{suffix_safe}_results.txt")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function of the ``formula-parser`` command.
    """
    cli_args = parse_args(argv)
    input_path: Path = Path(cli_args.file_path)
    output_path: Path = cli_args.output or build_output_path(input_path)

    runner = BatchRunner(output_file=output_path, aliases=AliasTable(mappings=cli_args.aliases))
    results = runner.run(read_input(input_path))

    logger.info(f"📄 Results written to {output_path} ({len(results)} lines)")


if __name__ == "__main__":
    main()
