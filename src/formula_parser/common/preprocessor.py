"""Normalize raw formula text before it reaches the parser."""
from decimal import Decimal
import math
import re
import string
from typing import Dict, Mapping

# Known constant names and their numeric values
CONSTANTS: Dict[str, float] = {
    "PI": math.pi,
    "E": math.e,
    "LN2": math.log(2),
    "LN10": math.log(10),
    "LOG2E": math.log2(math.e),
    "LOG10E": math.log10(math.e),
    "SQRT1_2": math.sqrt(0.5),
    "SQRT2": math.sqrt(2),
}

_WHITESPACE = re.compile(r"\s+")
_NUMBER_CHARS = string.digits + "."


def _constant_pattern(name: str) -> "re.Pattern[str]":
    # Whole token only: "EXP" must not lose its "E", "[PI]" stays a named variable
    return re.compile(rf"(?<![A-Za-z_\[]){re.escape(name)}(?![A-Za-z0-9_])")


def constant_literal(value: float) -> str:
    """
    Spell a constant the way the parser reads numbers.

    Exponent notation is expanded (``1e-09`` -> ``0.000000001``) and negative values are
    parenthesized so that ``NEG^2`` stays ``(NEG)^2``.

    :param float value: Constant value

    :return: Formula text for the value
    :rtype: str
    :raises ValueError: If the value is infinite or NaN
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Constant values must be finite, got {value!r}")
    text = format(Decimal(repr(value)), "f")
    return f"({text})" if text.startswith("-") else text


def _substitute(text: str, name: str, literal: str) -> str:
    """Replace every whole-token ``name`` in ``text`` by ``literal``."""

    def replace(match: "re.Match[str]") -> str:
        start = match.start()
        head = text[:start].rstrip(_NUMBER_CHARS)
        if len(head) == start:
            return literal
        # Digits belonging to an identifier, e.g. the E of log10E
        if head and (head[-1].isalpha() or head[-1] == "_"):
            return match.group(0)
        # Coefficient, e.g. 2PI
        return "*" + literal

    return _constant_pattern(name).sub(replace, text)


def preprocess(text: str, constants: Mapping[str, float] = CONSTANTS) -> str:
    """
    Strip whitespace and substitute known constant names with their numeric literal text.

    Longer names are substituted first so that e.g. ``LN10`` is never seen as ``LN`` followed by ``10``.

    :param str text: Raw formula text
    :param Mapping constants: Constant name to value mapping

    :return: Normalized formula text
    :rtype: str
    """
    text = _WHITESPACE.sub("", text)
    for name in sorted(constants, key=len, reverse=True):
        text = _substitute(text, name, constant_literal(constants[name]))
    return text
