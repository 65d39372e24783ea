"""Cache keys for query variables.

A key identifies "this variable's query given the current values of the
variables it references". It is the only identity used to deduplicate
executions and to recognise stale results.

The dependency signature concatenates each dependency name with its
formatted selection, without a separator. ``ab`` + ``c`` and ``a`` +
``bc`` therefore collide; this is an accepted approximation.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from dashvars.model.types import VariableKind
from dashvars.model.variables import Variable, VariableSet

from ._dependencies import extract_dependencies
from ._values import format_selection

DEFAULT_NAMESPACE = "DASHBOARD_VARIABLES"

_WHITESPACE_RE = re.compile(r"\s")


class VariableKey(NamedTuple):
    namespace: str
    name: str
    signature: str


def dependency_signature(variable: Variable, variable_set: VariableSet) -> str:
    """Concatenate ``name + selection`` for every dependency, whitespace stripped."""
    parts: list[str] = []
    for dep in extract_dependencies(variable.query_template):
        dep_var = variable_set.get(dep)
        value = format_selection(dep_var.selected_value) if dep_var is not None else ""
        parts.append(f"{dep}{value}")
    return _WHITESPACE_RE.sub("", "".join(parts))


def build_key(
    variable: Variable,
    variable_set: VariableSet,
    namespace: str = DEFAULT_NAMESPACE,
) -> VariableKey:
    """Build the cache key for a ``QUERY`` variable."""
    if variable.kind != VariableKind.QUERY:
        raise ValueError(
            f"Variable {variable.name!r} is {variable.kind.value}, "
            f"only QUERY variables have cache keys"
        )
    return VariableKey(namespace, variable.name, dependency_signature(variable, variable_set))
