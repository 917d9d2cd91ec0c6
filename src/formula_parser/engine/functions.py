"""Resolve function names used in formulas to callables."""
import math
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from formula_parser.common.errors import FormulaError, FormulaEvaluationError, FunctionNotFoundError
from formula_parser.common.logger import logger

MathFunction = Callable[..., Any]

# Functions a formula can call without any registration
NATIVE_FUNCTIONS: Dict[str, MathFunction] = {
    name: member
    for name, member in vars(math).items()
    if not name.startswith("_") and callable(member)
}
NATIVE_FUNCTIONS.update({"abs": abs, "min": min, "max": max, "round": round})


class AliasTable(BaseModel):
    """
    Mapping from user-facing function names to native math function names.

    ``AliasTable(mappings={"ln": "log"})`` lets formulas call ``ln(x)`` for the natural log.
    Registrations are lock-protected; evaluations read a :meth:`snapshot`.
    """

    model_config = ConfigDict(validate_assignment=True)

    mappings: Dict[str, str] = Field(default_factory=dict, description="Alias name to native function name")

    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)

    def register(self, mappings: Mapping[str, str]) -> None:
        """
        Add aliases; a later registration for the same name overwrites the earlier one.

        :param Mapping mappings: Alias name to native function name

        :return: None
        """
        with self._lock:
            self.mappings = {**self.mappings, **dict(mappings)}
        logger.debug(f"Registered function aliases: {dict(mappings)}")

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of the current aliases."""
        with self._lock:
            return dict(self.mappings)


# Process-wide aliases used by formulas that are not given their own table
DEFAULT_ALIASES = AliasTable()


def add_mappings(mappings: Mapping[str, str]) -> None:
    """
    Register aliases in the process-wide table.

    ``add_mappings({"ln": "log", "func": "log10"})`` makes ``func(x)`` the base-10 log.

    :param Mapping mappings: Alias name to native function name
    """
    DEFAULT_ALIASES.register(mappings)


class FunctionLookup:
    """One strategy for turning a function name into a callable."""

    label = "base"

    def try_resolve(self, name: str) -> Optional[MathFunction]:
        raise NotImplementedError


class BindingFunctionLookup(FunctionLookup):
    """Callables passed in the binding object, next to the variable values."""

    label = "binding"

    def __init__(self, bindings: Mapping[str, Any]):
        self.bindings = bindings

    def try_resolve(self, name: str) -> Optional[MathFunction]:
        candidate = self.bindings.get(name)
        return candidate if callable(candidate) else None


class InstanceFunctionLookup(FunctionLookup):
    """Callables registered on the formula itself."""

    label = "instance"

    def __init__(self, functions: Mapping[str, MathFunction]):
        self.functions = functions

    def try_resolve(self, name: str) -> Optional[MathFunction]:
        candidate = self.functions.get(name)
        return candidate if callable(candidate) else None


class AliasedNativeLookup(FunctionLookup):
    """Native math functions reached through the alias table."""

    label = "alias"

    def __init__(self, aliases: Mapping[str, str], natives: Mapping[str, MathFunction] = NATIVE_FUNCTIONS):
        self.aliases = aliases
        self.natives = natives

    def try_resolve(self, name: str) -> Optional[MathFunction]:
        target = self.aliases.get(name)
        if target is None:
            return None
        return self.natives.get(target)


class NativeLookup(FunctionLookup):
    """Native math functions called by their own name."""

    label = "native"

    def __init__(self, natives: Mapping[str, MathFunction] = NATIVE_FUNCTIONS):
        self.natives = natives

    def try_resolve(self, name: str) -> Optional[MathFunction]:
        return self.natives.get(name)


class FunctionResolver:
    """
    Try each lookup strategy in order and call the first callable found.

    :param Sequence strategies: Lookups, highest priority first
    """

    def __init__(self, strategies: Sequence[FunctionLookup]):
        self.strategies: List[FunctionLookup] = list(strategies)

    @classmethod
    def for_evaluation(
        cls,
        bindings: Mapping[str, Any],
        functions: Mapping[str, MathFunction],
        aliases: Mapping[str, str],
    ) -> "FunctionResolver":
        """
        Build the standard resolver: binding functions, formula functions, aliased natives, natives.

        :param Mapping bindings: Binding object of the current evaluation
        :param Mapping functions: Functions registered on the formula
        :param Mapping aliases: Alias snapshot for this evaluation

        :return: Resolver with the four strategies in priority order
        :rtype: FunctionResolver
        """
        return cls(
            [
                BindingFunctionLookup(bindings),
                InstanceFunctionLookup(functions),
                AliasedNativeLookup(aliases),
                NativeLookup(),
            ]
        )

    def resolve(self, name: str) -> MathFunction:
        """
        Return the callable for ``name``.

        :param str name: Function name as written in the formula

        :return: The first callable any strategy yields
        :rtype: Callable
        :raises FunctionNotFoundError: If no strategy knows ``name``
        """
        for strategy in self.strategies:
            function = strategy.try_resolve(name)
            if function is not None:
                logger.debug(f"Function {name!r} resolved by {strategy.label} lookup")
                return function
        raise FunctionNotFoundError(name)

    def call(self, name: str, args: Sequence[float]) -> float:
        """
        Resolve ``name`` and call it with ``args``.

        :param str name: Function name
        :param Sequence args: Evaluated argument values, in call order

        :return: The function result as a float
        :rtype: float
        :raises FormulaEvaluationError: If the call fails (wrong argument count, math domain error,
            overflow) or does not return a real number
        """
        function = self.resolve(name)
        try:
            result = function(*args)
        except FormulaError:
            raise
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise FormulaEvaluationError(f"Function {name!r} failed for arguments {list(args)}: {exc}") from exc

        try:
            return float(result)
        except (TypeError, ValueError):
            raise FormulaEvaluationError(f"Function {name!r} returned a non-numeric value: {result!r}") from None
