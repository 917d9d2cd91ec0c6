"""Reduce an expression sequence to a number."""
import math
import operator
from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Union

from formula_parser.common.errors import (
    FormulaEvaluationError,
    UnboundVariableError,
    WrongOperatorPositionError,
)
from formula_parser.engine.functions import FunctionResolver
from formula_parser.engine.nodes import (
    ExpressionNode,
    FunctionCall,
    Number,
    Operator,
    SubFormula,
    VariableRef,
)

# Type alias for operator functions (taking two floats, returning a float)
OperatorFn = Callable[[float, float], float]


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value.is_integer() and int(value) % 2 == 1


def divide(left: float, right: float) -> float:
    """
    Divide with IEEE 754 results for a zero divisor.

    ``1/0`` is ``inf``, ``-1/0`` is ``-inf`` and ``0/0`` is ``nan``.
    """
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


def power(left: float, right: float) -> float:
    """
    Raise ``left`` to ``right`` with IEEE 754 results where ``math.pow`` raises.

    ``0^-1`` is ``inf``, ``10^400`` is ``inf``, ``(-10)^401`` is ``-inf`` and a negative
    base with a fractional exponent, e.g. ``(-8)^(1/3)``, is ``nan``.
    """
    try:
        return math.pow(left, right)
    except OverflowError:
        negative = left < 0 and _is_odd_integer(right)
        return -math.inf if negative else math.inf
    except ValueError:
        if left == 0:
            # Zero to a negative power
            negative = math.copysign(1.0, left) < 0 and _is_odd_integer(right)
            return -math.inf if negative else math.inf
        return math.nan


OPERATORS: Dict[str, OperatorFn] = {
    "^": power,
    "*": operator.mul,
    "/": divide,
    "+": operator.add,
    "-": operator.sub,
}

# Reduction passes, highest precedence first
PRECEDENCE_PASSES: Tuple[Tuple[str, ...], ...] = (("^",), ("*", "/"), ("+", "-"))

WorkItem = Union[float, Operator]


def _lookup_variable(name: str, bindings: Mapping[str, Any]) -> float:
    """
    Read the value of ``name`` from the binding object.

    :raises UnboundVariableError: If ``name`` has no value
    :raises FormulaEvaluationError: If the value is not a number
    """
    if name not in bindings or bindings[name] is None:
        raise UnboundVariableError(name, sorted(str(key) for key in bindings))
    value = bindings[name]
    try:
        return float(value)
    except (TypeError, ValueError):
        raise FormulaEvaluationError(f"Variable {name!r} is bound to a non-numeric value: {value!r}") from None


def resolve(
    expression: Sequence[ExpressionNode],
    bindings: Mapping[str, Any],
    resolver: FunctionResolver,
) -> List[WorkItem]:
    """
    Replace every operand node by its value, keeping the operators in place.

    Nested formulas (function arguments and parenthesized groups) are evaluated
    recursively with the same bindings and resolver.

    :param Sequence expression: Expression nodes of one formula
    :param Mapping bindings: Variable name to value mapping
    :param FunctionResolver resolver: Function lookup for this evaluation

    :return: Working list of floats and operators
    :rtype: List[WorkItem]
    """
    work: List[WorkItem] = []
    for node in expression:
        if isinstance(node, Operator):
            work.append(node)
        elif isinstance(node, Number):
            work.append(node.value)
        elif isinstance(node, VariableRef):
            work.append(_lookup_variable(node.name, bindings))
        elif isinstance(node, FunctionCall):
            args = [evaluate_expression(arg.expression, bindings, resolver) for arg in node.args]
            work.append(resolver.call(node.name, args))
        elif isinstance(node, SubFormula):
            work.append(evaluate_expression(node.formula.expression, bindings, resolver))
        else:
            raise FormulaEvaluationError(f"Unknown object in expression: {node!r}")
    return work


def reduce_pass(work: List[WorkItem], symbols: Tuple[str, ...]) -> List[WorkItem]:
    """
    Apply the operators in ``symbols``, always the leftmost one first.

    Each match combines its left and right neighbours into one value, then the scan
    restarts; ``2^3^2`` therefore reduces as ``(2^3)^2``.

    :param List work: Working list of floats and operators (modified in place)
    :param Tuple symbols: Operators handled by this pass

    :return: The reduced working list
    :rtype: List[WorkItem]
    :raises WrongOperatorPositionError: If an operator is found at either end of the list
    """
    run_again = True
    while run_again:
        run_again = False
        for i, item in enumerate(work):
            if isinstance(item, Operator) and item.symbol in symbols:
                if i == 0 or i == len(work) - 1:
                    raise WrongOperatorPositionError(f"Operator {item.symbol!r} in wrong position", i)
                left, right = work[i - 1], work[i + 1]
                work[i - 1 : i + 2] = [OPERATORS[item.symbol](left, right)]
                run_again = True
                break
    return work


def evaluate_expression(
    expression: Sequence[ExpressionNode],
    bindings: Mapping[str, Any],
    resolver: FunctionResolver,
) -> float:
    """
    Evaluate one expression sequence against one binding object.

    Steps:
        1. Resolve variables, function calls and nested formulas to numbers
        2. Reduce ``^``
        3. Reduce ``*`` and ``/``
        4. Reduce ``+`` and ``-``

    :param Sequence expression: Expression nodes of one formula
    :param Mapping bindings: Variable name to value mapping
    :param FunctionResolver resolver: Function lookup for this evaluation

    :return: Computed result
    :rtype: float
    :raises FormulaEvaluationError: If the sequence does not reduce to exactly one number
    """
    # Work on a copy: the formula's own sequence is never touched
    work = resolve(expression, bindings, resolver)

    for symbols in PRECEDENCE_PASSES:
        work = reduce_pass(work, symbols)

    if len(work) != 1 or isinstance(work[0], Operator):
        raise FormulaEvaluationError(f"Expression did not reduce to a single number: {work!r}")

    return work[0]
