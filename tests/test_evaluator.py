"""Test the reduction functions of the evaluator."""
import math

import pytest

from formula_parser.common.errors import (
    FormulaEvaluationError,
    UnboundVariableError,
    WrongOperatorPositionError,
)
from formula_parser.engine.evaluator import divide, evaluate_expression, power, reduce_pass, resolve
from formula_parser.engine.formula import Formula
from formula_parser.engine.functions import FunctionResolver
from formula_parser.engine.nodes import Number, Operator, VariableRef


def op(symbol: str) -> Operator:
    return Operator(symbol=symbol)


@pytest.fixture
def resolver() -> FunctionResolver:
    """Resolver with no bindings, formula functions or aliases."""
    return FunctionResolver.for_evaluation({}, {}, {})


def test_reduce_pass_exponent_is_left_to_right():
    """2^3^2 is reduced as (2^3)^2."""
    work = [2.0, op("^"), 3.0, op("^"), 2.0]
    assert reduce_pass(work, ("^",)) == [64.0]


def test_reduce_pass_only_touches_its_operators():
    """A pass leaves operators of other precedence levels alone."""
    work = [1.0, op("+"), 2.0, op("*"), 3.0]
    assert reduce_pass(work, ("*", "/")) == [1.0, op("+"), 6.0]


@pytest.mark.parametrize("work", [
    [op("*"), 2.0],
    [2.0, op("*")],
])
def test_reduce_pass_operator_at_edge(work):
    """An operator at either end of the working list is rejected."""
    with pytest.raises(WrongOperatorPositionError):
        reduce_pass(work, ("*", "/"))


def test_resolve_replaces_operands(resolver):
    """Variables become their bound values, operators stay."""
    expression = (Number(value=2), op("*"), VariableRef(name="x"))
    assert resolve(expression, {"x": 4}, resolver) == [2.0, op("*"), 4.0]


def test_resolve_unbound_variable(resolver):
    """A missing binding lists the names that were available."""
    with pytest.raises(UnboundVariableError) as excinfo:
        resolve((VariableRef(name="x"),), {"y": 1}, resolver)
    assert excinfo.value.name == "x"
    assert excinfo.value.available == ["y"]


def test_resolve_none_value_is_unbound(resolver):
    with pytest.raises(UnboundVariableError):
        resolve((VariableRef(name="x"),), {"x": None}, resolver)


def test_resolve_non_numeric_value(resolver):
    with pytest.raises(FormulaEvaluationError):
        resolve((VariableRef(name="x"),), {"x": "abc"}, resolver)


@pytest.mark.parametrize("source,expected", [
    ("2+3*4", 14.0),
    ("(2+3)*4", 20.0),
    ("2^3^2", 64.0),
    ("10-3-2", 5.0),
    ("100/5/2", 10.0),
    ("2*3^2", 18.0),
    ("-2^2", -4.0),
    ("1+2*3-4/2", 5.0),
])
def test_evaluate_expression_precedence(resolver, source, expected):
    """Exponents first, then products, then sums, each left to right."""
    assert evaluate_expression(Formula(source).expression, {}, resolver) == expected


def test_evaluate_expression_broken_sequence(resolver):
    """A sequence that does not reduce to one number is an evaluation error."""
    with pytest.raises(FormulaEvaluationError):
        evaluate_expression((Number(value=1), Number(value=2)), {}, resolver)


def test_evaluate_expression_does_not_mutate(resolver):
    """Evaluation works on a copy of the expression."""
    formula = Formula("2*x+1")
    before = formula.expression
    evaluate_expression(formula.expression, {"x": 3}, resolver)
    assert formula.expression == before
    assert len(formula.expression) == 5


@pytest.mark.parametrize("left,right,expected", [
    (6.0, 3.0, 2.0),
    (1.0, 0.0, math.inf),
    (-1.0, 0.0, -math.inf),
    (1.0, -0.0, -math.inf),
])
def test_divide(left, right, expected):
    assert divide(left, right) == expected


def test_divide_zero_by_zero():
    assert math.isnan(divide(0.0, 0.0))


@pytest.mark.parametrize("left,right,expected", [
    (2.0, 10.0, 1024.0),
    (0.0, -1.0, math.inf),
    (-0.0, -1.0, -math.inf),
    (-0.0, -2.0, math.inf),
    (10.0, 400.0, math.inf),
    (-10.0, 401.0, -math.inf),
    (-10.0, 400.0, math.inf),
])
def test_power(left, right, expected):
    """Overflow and zero to a negative power give signed infinities."""
    assert power(left, right) == expected


def test_power_negative_base_fractional_exponent():
    assert math.isnan(power(-8.0, 1 / 3))
