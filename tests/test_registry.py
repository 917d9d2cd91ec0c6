"""Test class VariableRegistry."""
from formula_parser.engine.registry import VariableRegistry


def test_register_keeps_first_seen_order():
    """Names are kept once, in the order they were first registered."""
    registry = VariableRegistry()
    for name in ["x", "y", "x", "var1", "y"]:
        registry.register(name)
    assert registry.names == ["x", "y", "var1"]


def test_names_is_a_copy():
    """Mutating the returned list does not touch the registry."""
    registry = VariableRegistry()
    registry.register("x")
    registry.names.append("y")
    assert registry.names == ["x"]
