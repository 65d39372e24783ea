"""Option set reconciliation.

The executor may return the same values in a different order on every
call. Both sides are sorted with the variable's declared mode before a
positional comparison, so only a content change counts as a change.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from dashvars.model.types import Scalar, SortMode

from ._values import sort_values


class Reconciliation(NamedTuple):
    changed: bool
    options: Sequence[Scalar]


def reconcile(
    new_raw: Sequence[Scalar],
    previous: Sequence[Scalar],
    sort_mode: SortMode,
) -> Reconciliation:
    """Compare a fresh option set against the stored one.

    When nothing changed, ``options`` is *previous* itself so callers can
    keep the stored object untouched.
    """
    new_sorted = sort_values(new_raw, sort_mode)
    old_sorted = sort_values(previous, sort_mode)
    if _positional_equal(new_sorted, old_sorted):
        return Reconciliation(False, previous)
    return Reconciliation(True, new_sorted)


def _positional_equal(a: Sequence[Scalar], b: Sequence[Scalar]) -> bool:
    if len(a) != len(b):
        return False
    # 1 == True in Python, but a boolean option is not a numeric one
    return all(
        isinstance(x, bool) == isinstance(y, bool) and x == y
        for x, y in zip(a, b)
    )
