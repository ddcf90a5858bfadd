"""Python value model for descriptor-typed data.

Descriptors are language-agnostic, so a few shapes need an explicit Python
representation: symbolic constants (atoms) and named records.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any

# Reserved key carrying the record name in tagged record dicts
RECORD_TAG = "__struct__"


@dataclass(frozen=True, order=True)
class Atom:
    """A symbolic constant, distinct from strings."""

    name: str

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f":{self.name}"


def make_record(type_name: str, fields: dict[str, Any]) -> dict[str, Any]:
    """Build a tagged record dict."""
    return {RECORD_TAG: type_name, **fields}


def record_view(value: Any) -> tuple[str, dict[Any, Any]] | None:
    """Split a record value into its tag and field entries.

    Accepts tagged dicts and dataclass instances.

    Returns:
        (tag, entries) or None if the value is not a record
    """
    if isinstance(value, dict):
        tag = value.get(RECORD_TAG)
        if not isinstance(tag, str):
            return None
        return tag, {k: v for k, v in value.items() if k != RECORD_TAG}

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        entries = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return type(value).__qualname__, entries

    return None


def is_hashable(value: Any) -> bool:
    """Check whether a value can be used as a dict key."""
    try:
        hash(value)
    except TypeError:
        return False
    return True
