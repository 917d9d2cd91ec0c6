"""Test classes EvaluationRequest and EvaluationResult."""
from pydantic import ValidationError
import pytest

from formula_parser.common.models import EvaluationRequest, EvaluationResult, InputLine, parse_binding_set


def test_parse_binding_set() -> None:
    """Comma-separated name=value pairs become a dict of value texts."""
    assert parse_binding_set("x=1, y = 2.5") == {"x": "1", "y": "2.5"}
    assert parse_binding_set("") == {}


@pytest.mark.parametrize("text", ["x", "=1", "x=1, y"])
def test_parse_binding_set_invalid(text) -> None:
    with pytest.raises(ValueError):
        parse_binding_set(text)


def test_request_from_plain_line() -> None:
    """A line without bindings gives an empty bindings list."""
    req = EvaluationRequest.from_line("2 + 2 * 3")
    assert req.expression == "2 + 2 * 3"
    assert req.bindings == []
    assert not req.is_batch


def test_request_from_line_with_bindings() -> None:
    """Binding values are converted to floats, binding sets are split on ';'."""
    req = EvaluationRequest.from_line("2^x | x=2; x=4")
    assert req.expression == "2^x"
    assert req.bindings == [{"x": 2.0}, {"x": 4.0}]
    assert req.is_batch


def test_request_invalid_binding_value() -> None:
    """Non-numeric binding values raise a validation error."""
    with pytest.raises(ValidationError):
        EvaluationRequest.from_line("x | x=abc")


def test_request_empty_expression() -> None:
    with pytest.raises(ValidationError):
        EvaluationRequest(expression="  ")


def test_request_invalid_type() -> None:
    """Test that non-string expressions raise a validation error."""
    with pytest.raises(ValidationError):
        # int instead of str
        EvaluationRequest(expression=123)


def test_result_format() -> None:
    """Results render as 'line = value' or 'line -> ERROR: message'."""
    ok = EvaluationResult(line=1, expression="2+2", result=4.0)
    assert ok.ok
    assert ok.format() == "2+2 = 4.0"

    batch = EvaluationResult(line=2, expression="2^x | x=1; x=2", result=[2.0, 4.0])
    assert batch.format() == "2^x | x=1; x=2 = [2.0, 4.0]"

    failed = EvaluationResult(line=3, expression="2+", error="bad")
    assert not failed.ok
    assert failed.format() == "2+ -> ERROR: bad"


def test_result_invalid_line() -> None:
    """Line numbers start at 1."""
    with pytest.raises(ValidationError):
        EvaluationResult(line=0, expression="1")


def test_input_line_is_frozen() -> None:
    line = InputLine(source="a.txt", line=2, text="1+1")
    with pytest.raises(ValidationError):
        line.text = "2+2"
    with pytest.raises(ValidationError):
        InputLine(source="a.txt", line=0, text="1")
