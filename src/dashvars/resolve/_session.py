"""Dashboard session: the owner of the shared variable set.

The session is the explicit context object every resolution reads from.
``write_selection`` is the only method that replaces the variable set.
It runs synchronously on the event loop, so two writes to the same
variable can never interleave.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

from dashvars.model.types import Selection
from dashvars.model.variables import Variable, VariableSet, VariableView

from ._cascade import CascadeSelection
from ._commit import CommitGate
from ._protocols import QueryExecutor, SelectionChanged, SelectionListener
from ._resolver import VariableResolver
from ._settings import DEFAULT_SETTINGS, ResolverSettings

logger = logging.getLogger(__name__)


class DashboardSession:
    """Resolves and propagates the variables of one dashboard.

    Parameters
    ----------
    variables : Iterable[Variable] | VariableSet
        The dashboard's variable definitions.
    executor : QueryExecutor
        Runs ``QUERY`` templates.
    settings : ResolverSettings
        Debounce period, ALL sentinel, key namespace, error rewriting.
    locked : bool
        A locked dashboard ignores user edits.
    """

    def __init__(
        self,
        variables: Iterable[Variable] | VariableSet,
        executor: QueryExecutor,
        settings: ResolverSettings = DEFAULT_SETTINGS,
        locked: bool = False,
    ) -> None:
        if not isinstance(variables, VariableSet):
            variables = VariableSet(variables)
        self._variables = variables
        self._settings = settings
        self._resolvers = {
            name: VariableResolver(executor, settings) for name in variables
        }
        self._gate = CommitGate(self.write_selection, settings)
        self._listeners: list[SelectionListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._last_updated: str | None = None
        self._generations: dict[str, int] = {}
        self.locked = locked

    # -----------------------------------------------------------------------
    # State
    # -----------------------------------------------------------------------

    @property
    def variables(self) -> VariableSet:
        return self._variables

    @property
    def last_updated(self) -> str | None:
        """Name of the variable whose selection changed most recently."""
        return self._last_updated

    def resolver(self, name: str) -> VariableResolver:
        return self._resolvers[name]

    def view(self, name: str) -> VariableView:
        """Snapshot of one variable for the presentation layer."""
        var = self._variables[name]
        resolver = self._resolvers[name]
        return VariableView(
            name=var.name,
            kind=var.kind,
            options=list(resolver.options),
            selected_value=var.selected_value,
            all_selected=var.all_selected,
            multi_select=var.multi_select,
            show_all_option=var.show_all_option,
            loading=resolver.loading,
            error_message=resolver.error_message,
            is_locked=self.locked,
        )

    # -----------------------------------------------------------------------
    # Notifications
    # -----------------------------------------------------------------------

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register *listener* for ``SelectionChanged`` events.

        Returns a callable that unsubscribes it.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: SelectionChanged) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Selection listener %r failed", listener)

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def write_selection(self, name: str, value: Selection, all_selected: bool = False) -> None:
        """Commit a selection to the shared variable set.

        Publishes ``SelectionChanged`` and schedules a refresh of the
        other variables so their keys and options catch up.
        """
        self._variables = self._variables.with_selection(name, value, all_selected)
        self._last_updated = name
        self._generations[name] = self._generations.get(name, 0) + 1
        logger.debug("Selection of %r set to %r (all=%s)", name, value, all_selected)
        self._publish(SelectionChanged(name, value, all_selected))
        self._schedule(self.refresh_all(exclude=name, last_updated=name))

    def change(self, name: str, value: Selection) -> CascadeSelection | None:
        """Handle a user edit coming from the presentation layer."""
        if self.locked:
            logger.info("Dashboard is locked, ignoring change to %r", name)
            return None
        return self._gate.commit(
            self._variables[name], value, self._resolvers[name].options,
        )

    def on_user_change(self, name: str) -> Callable[[Selection], None]:
        """Callback the presentation layer wires to a variable's widget."""
        if name not in self._variables:
            raise KeyError(name)

        def callback(value: Selection) -> None:
            self.change(name, value)

        return callback

    # -----------------------------------------------------------------------
    # Resolution
    # -----------------------------------------------------------------------

    async def refresh(self, name: str, last_updated: str | None = None) -> None:
        """Refresh one variable's options and apply any cascade.

        A cascade is dropped when the variable was written while its query
        was in flight; the newer selection wins.
        """
        var = self._variables[name]
        generation = self._generations.get(name, 0)
        selection = await self._resolvers[name].refresh(
            var, self._variables, last_updated,
        )
        if selection is None:
            return
        if self._generations.get(name, 0) != generation:
            logger.debug("Dropping cascade for %r, written since refresh began", name)
            return
        self.write_selection(name, selection.value, selection.all_selected)

    async def refresh_all(
        self, exclude: str | None = None, last_updated: str | None = None,
    ) -> None:
        """Refresh every variable, except *exclude*, concurrently.

        Each variable fails independently: an unexpected error is logged
        and does not stop the others. *last_updated* names the variable
        whose change triggered this round; only its direct dependents
        may pick a new default.
        """
        names = [name for name in self._variables if name != exclude]
        results = await asyncio.gather(
            *(self.refresh(name, last_updated) for name in names),
            return_exceptions=True,
        )
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(
                    "Refreshing %r failed", name, exc_info=result,
                )

    def _schedule(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def settle(self) -> None:
        """Wait until every scheduled refresh and cascade has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def flush(self) -> None:
        """Commit any debounced text edits immediately."""
        self._gate.flush()

    async def aclose(self) -> None:
        """Drop pending edits and cancel outstanding refreshes."""
        self._gate.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        for resolver in self._resolvers.values():
            resolver.cancel()
