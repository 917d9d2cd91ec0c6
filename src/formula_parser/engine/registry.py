"""Ordered record of the free variables used by a formula tree."""
from typing import List


class VariableRegistry:
    """
    Duplicate-free variable names, kept in first-seen order.

    Only the top-level formula owns a registry; nested formulas forward their names to it.
    """

    def __init__(self) -> None:
        self._names: List[str] = []

    def register(self, name: str) -> None:
        """
        Record ``name`` unless it is already known.

        :param str name: Variable name
        """
        if name not in self._names:
            self._names.append(name)

    @property
    def names(self) -> List[str]:
        """Copy of the registered names, in first-seen order."""
        return list(self._names)

    def __repr__(self) -> str:
        return f"VariableRegistry({self._names!r})"
