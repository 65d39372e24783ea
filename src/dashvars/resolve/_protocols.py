"""Protocols for the collaborators a session talks to."""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple, Protocol, runtime_checkable

from dashvars.model.types import Scalar, Selection


@runtime_checkable
class QueryExecutor(Protocol):
    """Runs a variable's query template against the current bindings.

    ``variables`` holds the selection of every variable in the set, not
    only the ones the template references. Failures are reported by
    raising ``ExecutionFailure``.
    """

    async def execute(
        self, query: str, variables: dict[str, Selection],
    ) -> Sequence[Scalar]: ...


class SelectionChanged(NamedTuple):
    """Published to listeners whenever a selection is committed."""

    name: str
    value: Selection
    all_selected: bool


@runtime_checkable
class SelectionListener(Protocol):
    def __call__(self, event: SelectionChanged) -> None: ...
