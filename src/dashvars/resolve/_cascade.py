"""Cascade policy: when a refreshed option set picks a new default.

Every variable whose key changed is re-fetched, but only the *direct*
dependents of the variable that was last updated get a new default
selection. A variable two hops away keeps the user's selection until
its own direct dependency changes, so a chain cascades one hop per
update.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

from dashvars.model.types import Scalar, Selection, VariableKind
from dashvars.model.variables import Variable

from ._dependencies import references

logger = logging.getLogger(__name__)


class CascadeSelection(NamedTuple):
    value: Selection
    all_selected: bool


def cascade_selection(
    variable: Variable,
    options: Sequence[Scalar],
    last_updated: str | None,
) -> CascadeSelection | None:
    """Decide the new default for *variable* after its options changed.

    Returns ``None`` when the variable is not a direct dependent of
    *last_updated*; its selection is then left alone.
    """
    if variable.kind != VariableKind.QUERY or not last_updated:
        return None
    if not references(variable.query_template, last_updated):
        return None

    if variable.multi_select:
        selection = CascadeSelection(list(options), True)
    else:
        selection = CascadeSelection(options[0] if options else None, False)

    logger.debug(
        "Cascading %r after %r changed: %r (all=%s)",
        variable.name, last_updated, selection.value, selection.all_selected,
    )
    return selection
