"""The parsed, evaluable formula."""
from collections.abc import Mapping as ABCMapping
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from formula_parser.common.logger import logger
from formula_parser.common.preprocessor import CONSTANTS, preprocess
from formula_parser.engine.evaluator import evaluate_expression
from formula_parser.engine.functions import DEFAULT_ALIASES, AliasTable, FunctionResolver, MathFunction
from formula_parser.engine.nodes import ExpressionNode, FunctionCall, SubFormula
from formula_parser.engine.parser import FormulaParser
from formula_parser.engine.registry import VariableRegistry

Bindings = Mapping[str, Any]


class Formula:
    """
    An algebraic formula parsed once and evaluated any number of times.

    Example::

        f = Formula("x*sin(PI*x/2)")
        f.evaluate({"x": 1})                 # 1.0
        f.evaluate([{"x": 1}, {"x": 2}])     # [1.0, ~0.0]
        f.get_variables()                    # ["x"]

    Parsing happens in the constructor and raises a
    :class:`~formula_parser.common.errors.FormulaSyntaxError` on malformed input.
    Nested formulas (parenthesized groups and function arguments) are ``Formula``
    objects too; they point back to the top-level formula through ``top``, which
    owns the variable registry, the formula functions and the alias table.

    :param str source: Formula text
    :param Formula top: Top-level formula, only set for nested formulas
    :param Mapping functions: Extra functions callable from this formula
    :param AliasTable aliases: Alias table to use instead of the process-wide one
    :param Mapping constants: Constant names to substitute before parsing
    """

    def __init__(
        self,
        source: str,
        top: Optional["Formula"] = None,
        *,
        functions: Optional[Mapping[str, MathFunction]] = None,
        aliases: Optional[AliasTable] = None,
        constants: Optional[Mapping[str, float]] = None,
    ):
        self.top = top
        self.functions: Dict[str, MathFunction] = dict(functions or {})
        self.aliases: AliasTable = aliases if aliases is not None else DEFAULT_ALIASES
        self._registry: Optional[VariableRegistry] = None

        if top is None:
            self._registry = VariableRegistry()
            # Nested sources are slices of an already preprocessed text
            source = preprocess(source, CONSTANTS if constants is None else constants)

        self.source = source
        self._expression: Tuple[ExpressionNode, ...] = tuple(FormulaParser(self).parse(source))

        if top is None:
            logger.debug(f"Parsed formula {source!r}: {len(self._expression)} nodes, variables {self.get_variables()}")

    @property
    def root(self) -> "Formula":
        """The top-level formula (``self`` when not nested)."""
        return self.top if self.top is not None else self

    @property
    def expression(self) -> Tuple[ExpressionNode, ...]:
        """Parsed expression nodes, in source order."""
        return self._expression

    @property
    def variables(self) -> List[str]:
        """Free variable names of the whole formula tree, in first-seen order."""
        return self.root._registry.names

    def get_variables(self) -> List[str]:
        """
        Return the free variable names used anywhere in the formula.

        :return: Duplicate-free names, in first-seen order
        :rtype: List[str]
        """
        return self.variables

    def register_variable(self, name: str) -> None:
        """
        Record a variable name in the top-level registry.

        :param str name: Variable name found while parsing
        """
        self.root._registry.register(name)

    def subformula(self, source: str) -> "Formula":
        """
        Parse a nested piece of this formula.

        :param str source: Text of a parenthesized group or of one function argument

        :return: Nested formula attached to the same top-level formula
        :rtype: Formula
        """
        return Formula(source, top=self.root)

    def evaluate(self, bindings: Union[Bindings, Sequence[Bindings], None] = None) -> Union[float, List[float]]:
        """
        Evaluate the formula.

        A single binding object gives a single number; a list or tuple of binding objects
        gives one number per object, in order. The first failing item aborts the whole batch.

        :param bindings: Variable name to value mapping, a sequence of such mappings, or None

        :return: Result, or list of results for a sequence of bindings
        :rtype: Union[float, List[float]]
        :raises FormulaEvaluationError: If a variable is unbound or a function cannot be resolved
        :raises TypeError: If ``bindings`` is neither a mapping nor a list/tuple of mappings
        """
        root = self.root
        # One alias snapshot per call, so a batch sees consistent aliases
        aliases = root.aliases.snapshot()

        if bindings is None:
            bindings = {}

        if isinstance(bindings, ABCMapping):
            return self._evaluate_one(bindings, root.functions, aliases)

        if isinstance(bindings, (list, tuple)):
            return [self._evaluate_one(item, root.functions, aliases) for item in bindings]

        raise TypeError(f"Bindings must be a mapping or a list of mappings, got {type(bindings).__name__}")

    def _evaluate_one(self, bindings: Bindings, functions: Mapping[str, MathFunction], aliases: Mapping[str, str]) -> float:
        if not isinstance(bindings, ABCMapping):
            raise TypeError(f"Each binding object must be a mapping, got {type(bindings).__name__}")
        resolver = FunctionResolver.for_evaluation(bindings, functions, aliases)
        return evaluate_expression(self._expression, bindings, resolver)

    def __repr__(self) -> str:
        return f"Formula({self.source!r})"


# Formula is referenced by the nested node types
FunctionCall.model_rebuild()
SubFormula.model_rebuild()


def calc(source: str, bindings: Union[Bindings, Sequence[Bindings], None] = None, **kwargs: Any) -> Union[float, List[float]]:
    """
    Parse and evaluate a formula in one call.

    :param str source: Formula text
    :param bindings: Bindings as accepted by :meth:`Formula.evaluate`
    :param kwargs: Extra keyword arguments for :class:`Formula` (``functions``, ``aliases``, ``constants``)

    :return: Result(s) of the evaluation
    :rtype: Union[float, List[float]]
    """
    return Formula(source, **kwargs).evaluate(bindings)
