"""Commit gate: how user edits reach the shared variable set.

Discrete picks (``QUERY``/``CUSTOM``) are committed immediately. Free
text (``TEXTBOX``) is coalesced with a trailing-edge debounce so only
the value present after a quiet period is written; intermediate values
are dropped, never queued.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

from dashvars.model.types import Scalar, Selection, VariableKind
from dashvars.model.variables import Variable

from ._cascade import CascadeSelection
from ._settings import DEFAULT_SETTINGS, ResolverSettings

logger = logging.getLogger(__name__)

SelectionWriter = Callable[[str, Selection, bool], None]


def normalize_selection(
    variable: Variable,
    raw: Selection,
    options: Sequence[Scalar],
    all_value: str = DEFAULT_SETTINGS.all_value,
) -> CascadeSelection:
    """Map a raw pick to the selection that gets stored.

    The ALL sentinel, a list containing it, or an empty multi-select list
    all mean "everything": the stored value is the full option set and
    ``all_selected`` is set. The sentinel itself is never stored.
    """
    if raw == all_value:
        return CascadeSelection(list(options), True)
    if isinstance(raw, list):
        if all_value in raw or (variable.multi_select and not raw):
            return CascadeSelection(list(options), True)
    return CascadeSelection(raw, False)


class Debouncer:
    """Trailing-edge debounce on the running event loop.

    Each call replaces the pending arguments and restarts the quiet
    period; *callback* runs once with the last arguments.
    """

    def __init__(self, delay_ms: int, callback: Callable[..., Any]) -> None:
        self._delay = delay_ms / 1000
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._args: tuple[Any, ...] = ()

    def __call__(self, *args: Any) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._args = args
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def _fire(self) -> None:
        self._handle = None
        args, self._args = self._args, ()
        self._callback(*args)

    def flush(self) -> None:
        """Run the pending call now, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._args = ()


class CommitGate:
    """Routes user edits to *writer*, debouncing free-text input.

    Parameters
    ----------
    writer : SelectionWriter
        ``writer(name, value, all_selected)``; the single place that
        updates the shared variable set.
    settings : ResolverSettings
        Supplies the debounce period and the ALL sentinel.
    """

    def __init__(
        self,
        writer: SelectionWriter,
        settings: ResolverSettings = DEFAULT_SETTINGS,
    ) -> None:
        self._writer = writer
        self._settings = settings
        self._debouncers: dict[str, Debouncer] = {}

    def commit(
        self,
        variable: Variable,
        raw: Selection,
        options: Sequence[Scalar] = (),
    ) -> CascadeSelection | None:
        """Commit a user edit.

        Returns the stored selection for immediate commits, ``None`` when
        the edit was deferred by the debounce.
        """
        if variable.kind == VariableKind.TEXTBOX:
            self._debouncer(variable.name)(variable.name, "" if raw is None else raw)
            return None

        selection = normalize_selection(
            variable, raw, options, self._settings.all_value,
        )
        self._writer(variable.name, selection.value, selection.all_selected)
        return selection

    def _debouncer(self, name: str) -> Debouncer:
        debouncer = self._debouncers.get(name)
        if debouncer is None:
            debouncer = Debouncer(self._settings.debounce_ms, self._write_text)
            self._debouncers[name] = debouncer
        return debouncer

    def _write_text(self, name: str, value: Selection) -> None:
        logger.debug("Committing text value for %r: %r", name, value)
        self._writer(name, value, False)

    def pending(self, name: str) -> bool:
        debouncer = self._debouncers.get(name)
        return debouncer is not None and debouncer.pending

    def flush(self) -> None:
        for debouncer in self._debouncers.values():
            debouncer.flush()

    def cancel(self) -> None:
        for debouncer in self._debouncers.values():
            debouncer.cancel()
