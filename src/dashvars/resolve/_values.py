"""Value handling for variable resolution.

Provides the error taxonomy, selection formatting, custom-list parsing
and option sorting. Everything here is pure.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence

from dashvars.model.types import Scalar, Selection, SortMode


class VariableError(Exception):
    """Base class for variable resolution errors."""


class ExecutionFailure(VariableError):
    """The query executor reported an error for a variable's query."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseFailure(VariableError):
    """An option payload or custom value list could not be interpreted."""


# ---------------------------------------------------------------------------
# Selection formatting
# ---------------------------------------------------------------------------

def _format_scalar(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_selection(value: Selection) -> str:
    """Render a selection as a flat string.

    Lists are comma-joined, booleans lowercase and ``None`` is empty.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(_format_scalar(item) for item in value)
    return _format_scalar(value)


# ---------------------------------------------------------------------------
# Custom comma lists
# ---------------------------------------------------------------------------

# A run of escaped commas or non-comma characters.
_CUSTOM_ITEM_RE = re.compile(r"(?:\\,|[^,])+")


def parse_custom_list(raw: str | None) -> list[Scalar]:
    r"""Split a static ``a, b, c`` list into option values.

    Items are trimmed and empty items dropped. ``\,`` keeps a literal
    comma inside an item. A trailing lone backslash is malformed.
    """
    if not raw:
        return []
    if raw.endswith("\\") and not raw.endswith("\\\\"):
        raise ParseFailure(f"Dangling escape at end of custom values: {raw!r}")

    options: list[Scalar] = []
    for match in _CUSTOM_ITEM_RE.finditer(raw):
        text = match.group(0).replace("\\,", ",").strip()
        if text:
            options.append(text)
    return options


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def _numeric_key(value: Scalar) -> tuple[int, float, str]:
    if isinstance(value, bool):
        return (1, 0.0, _format_scalar(value))
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(value)
        except ValueError:
            return (1, 0.0, value)
    # nan and inf have no place on the number line here
    if not math.isfinite(number):
        return (1, 0.0, _format_scalar(value))
    return (0, number, "")


def sort_values(values: Iterable[Scalar], mode: SortMode) -> list[Scalar]:
    """Return *values* ordered by *mode*.

    ``ASC``/``DESC`` compare the string form of each value. ``NUMERIC``
    puts finite numbers (and numeric strings) first by value, then everything
    else lexically. ``DISABLED`` keeps the incoming order.
    """
    items = list(values)
    if mode == SortMode.ASC:
        return sorted(items, key=_format_scalar)
    if mode == SortMode.DESC:
        return sorted(items, key=_format_scalar, reverse=True)
    if mode == SortMode.NUMERIC:
        return sorted(items, key=_numeric_key)
    return items


def coerce_options(payload: object) -> list[Scalar]:
    """Validate a raw executor payload as a flat sequence of scalars."""
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise ParseFailure(
            f"Expected a sequence of values, got {type(payload).__name__}"
        )
    options: list[Scalar] = []
    for item in payload:
        if not isinstance(item, (str, int, float, bool)):
            raise ParseFailure(
                f"Unexpected option value of type {type(item).__name__}: {item!r}"
            )
        options.append(item)
    return options
