"""
Document helpers shared by the rule functions.

Rules accept either pydantic models or raw store documents (dicts),
so attribute access goes through get_field().
"""

from typing import Any


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def enum_value(value: Any) -> Any:
    """Enum member -> its wire token; anything else unchanged."""
    return getattr(value, "value", value)
