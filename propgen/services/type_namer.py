"""Human-readable type names for runtime values, used in failure messages."""

from typing import Any

from propgen.models.values import Atom, record_view


def infer_type_name(value: Any) -> str:
    """Infer a human-readable type name from a value.

    Args:
        value: Any runtime value

    Returns:
        Name such as "integer", "string" or "record User"
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, Atom):
        return "atom"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "binary"
    if value is None:
        return "null"
    if isinstance(value, list):
        return "list"
    if isinstance(value, tuple):
        return "tuple"

    view = record_view(value)
    if view is not None:
        return f"record {view[0]}"

    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def callable_name(func: Any) -> str:
    """Dotted module.qualname of an implementation, for reports."""
    qualname = getattr(func, "__qualname__", None) or repr(func)
    module = getattr(func, "__module__", None)
    return f"{module}.{qualname}" if module else qualname
