"""dashvars resolver: dependency-aware resolution of dashboard variables.

Entry point::

    from dashvars.resolve import open_session

    session = await open_session(variables, executor)
    session.change("region", "eu-west")
    await session.settle()
    session.view("host").options
"""

from __future__ import annotations

from collections.abc import Iterable

from dashvars.model.variables import Variable, VariableSet

from ._cascade import CascadeSelection, cascade_selection
from ._commit import CommitGate, Debouncer, normalize_selection
from ._dependencies import extract_dependencies, references
from ._keys import VariableKey, build_key, dependency_signature
from ._protocols import QueryExecutor, SelectionChanged, SelectionListener
from ._reconcile import Reconciliation, reconcile
from ._resolver import VariableResolver
from ._session import DashboardSession
from ._settings import DEFAULT_SETTINGS, ResolverSettings
from ._values import (
    ExecutionFailure,
    ParseFailure,
    VariableError,
    format_selection,
    parse_custom_list,
    sort_values,
)


async def open_session(
    variables: Iterable[Variable] | VariableSet,
    executor: QueryExecutor,
    *,
    settings: ResolverSettings | None = None,
    locked: bool = False,
) -> DashboardSession:
    """Create a session and load every variable's initial options.

    Parameters
    ----------
    variables
        Variable definitions, or a prepared ``VariableSet``.
    executor
        Object implementing ``QueryExecutor``.
    settings
        Resolver settings (defaults to ``DEFAULT_SETTINGS``).
    locked
        Whether user edits are ignored.

    Returns
    -------
    DashboardSession
        The session with its initial refresh completed.
    """
    if not isinstance(executor, QueryExecutor):
        raise TypeError(
            f"open_session() expects an object with an async execute(), "
            f"got {type(executor).__name__}"
        )
    session = DashboardSession(
        variables,
        executor,
        settings=settings or DEFAULT_SETTINGS,
        locked=locked,
    )
    await session.refresh_all()
    return session


__all__ = [
    "CascadeSelection",
    "CommitGate",
    "DEFAULT_SETTINGS",
    "DashboardSession",
    "Debouncer",
    "ExecutionFailure",
    "ParseFailure",
    "QueryExecutor",
    "Reconciliation",
    "ResolverSettings",
    "SelectionChanged",
    "SelectionListener",
    "VariableError",
    "VariableKey",
    "VariableResolver",
    "build_key",
    "cascade_selection",
    "dependency_signature",
    "extract_dependencies",
    "format_selection",
    "normalize_selection",
    "open_session",
    "parse_custom_list",
    "reconcile",
    "references",
    "sort_values",
]
