"""Scalar and enum types shared by the variable model.

Option values coming back from a query executor are loosely typed: the
same column can hold strings, numbers or booleans. ``Scalar`` captures
that, and ``Selection`` is what a variable can hold as its current value.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


Scalar = Union[str, int, float, bool]

Selection = Union[Scalar, list[Scalar], None]


class VariableKind(str, Enum):
    """How a variable obtains its selectable values."""

    QUERY = "QUERY"
    CUSTOM = "CUSTOM"
    TEXTBOX = "TEXTBOX"


class SortMode(str, Enum):
    """Declared ordering of a variable's option set."""

    DISABLED = "DISABLED"
    ASC = "ASC"
    DESC = "DESC"
    NUMERIC = "NUMERIC"

    @classmethod
    def _missing_(cls, value: object) -> SortMode | None:
        if isinstance(value, str):
            upper = value.upper()
            if upper in cls.__members__:
                return cls[upper]
            return _SORT_ALIASES.get(upper)
        return None


_SORT_ALIASES = {
    "NONE": SortMode.DISABLED,
    "LEXICAL": SortMode.ASC,
}
