"""Test function preprocess."""
import math

import pytest

from formula_parser.common.preprocessor import CONSTANTS, constant_literal, preprocess


@pytest.mark.parametrize("text,expected", [
    ("2 + 3", "2+3"),
    (" x *\t sin( y )\n", "x*sin(y)"),
    ("", ""),
])
def test_preprocess_strips_whitespace(text, expected):
    """All whitespace runs are removed, not only the first one."""
    assert preprocess(text) == expected


def test_preprocess_substitutes_constants():
    """Known constants become their numeric literal text."""
    assert preprocess("2 * PI") == f"2*{math.pi!r}"
    assert preprocess("exp(E)") == f"exp({math.e!r})"
    assert preprocess("SQRT2+SQRT1_2") == f"{math.sqrt(2)!r}+{math.sqrt(0.5)!r}"


@pytest.mark.parametrize("text", [
    "EXP(1)",   # E inside a longer name
    "PIE",      # PI followed by another letter
    "xPI",      # PI preceded by a letter
    "[PI]",     # named variable keeps its name
    "LN2x",
])
def test_preprocess_only_replaces_whole_tokens(text):
    """Constant names are not replaced inside other identifiers."""
    assert preprocess(text) == text


def test_preprocess_longest_name_first():
    """LN10 is one constant, not LN followed by 10."""
    assert preprocess("LN10") == repr(math.log(10))


def test_preprocess_custom_constants():
    """Callers can supply their own constant table."""
    assert preprocess("2*TAU", {"TAU": 2 * math.pi}) == f"2*{2 * math.pi!r}"
    assert preprocess("2*PI", {}) == "2*PI"


def test_default_constants():
    """The default table holds the usual math constants."""
    assert set(CONSTANTS) == {"PI", "E", "LN2", "LN10", "LOG2E", "LOG10E", "SQRT1_2", "SQRT2"}
    assert CONSTANTS["LOG2E"] == pytest.approx(1 / math.log(2))


@pytest.mark.parametrize("value,expected", [
    (2.0, "2.0"),
    (-1.0, "(-1.0)"),
    (1e-9, "0.000000001"),
    (1e20, "100000000000000000000"),
    (-2.5e-7, "(-0.00000025)"),
])
def test_constant_literal(value, expected):
    """Literals use positional notation; negatives are parenthesized."""
    assert constant_literal(value) == expected


@pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
def test_constant_literal_rejects_non_finite(value):
    with pytest.raises(ValueError):
        constant_literal(value)


def test_preprocess_coefficient_before_constant():
    """A number directly before a constant multiplies it."""
    assert preprocess("2PI") == f"2*{math.pi!r}"
    assert preprocess("1.5 E") == f"1.5*{math.e!r}"
    assert preprocess("(1)2LN2") == f"(1)2*{math.log(2)!r}"


@pytest.mark.parametrize("text", ["atan2E", "log10E", "x2PI", "f_2PI"])
def test_preprocess_keeps_identifier_digits(text):
    """Digits that end an identifier do not make the following name a constant."""
    assert preprocess(text) == text
