"""Per-variable option resolution.

A ``VariableResolver`` owns the transient state of one variable: its
materialised option set, loading flag and error message. Query results
are tracked by cache key. A result whose key is no longer current when
it arrives is discarded rather than cancelled. Executions are only
cancelled when the owning session closes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from dashvars.model.types import Scalar, VariableKind
from dashvars.model.variables import Variable, VariableSet

from ._cascade import CascadeSelection, cascade_selection
from ._keys import VariableKey, build_key
from ._protocols import QueryExecutor
from ._reconcile import reconcile
from ._settings import DEFAULT_SETTINGS, ResolverSettings
from ._values import (
    ExecutionFailure,
    ParseFailure,
    coerce_options,
    parse_custom_list,
)

logger = logging.getLogger(__name__)


class VariableResolver:
    """Resolves the option set of a single variable.

    Parameters
    ----------
    executor : QueryExecutor
        Runs ``QUERY`` templates.
    settings : ResolverSettings
        Key namespace and error message rewriting.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        settings: ResolverSettings = DEFAULT_SETTINGS,
    ) -> None:
        self._executor = executor
        self._settings = settings
        self.options: Sequence[Scalar] = []
        self.loading = False
        self.error_message: str | None = None
        self.current_key: VariableKey | None = None
        self._settled_key: VariableKey | None = None
        self._inflight: dict[VariableKey, asyncio.Future] = {}
        self._triggers: dict[VariableKey, list[str]] = {}

    def key_for(self, variable: Variable, variable_set: VariableSet) -> VariableKey | None:
        if variable.kind != VariableKind.QUERY:
            return None
        return build_key(variable, variable_set, self._settings.key_namespace)

    async def refresh(
        self,
        variable: Variable,
        variable_set: VariableSet,
        last_updated: str | None = None,
    ) -> CascadeSelection | None:
        """Bring the option set up to date.

        Returns the new default selection when the option set changed and
        the cascade policy picked one, otherwise ``None``.
        """
        if variable.kind == VariableKind.CUSTOM:
            self._load_custom(variable)
            return None
        if variable.kind != VariableKind.QUERY:
            return None

        key = self.key_for(variable, variable_set)
        self.current_key = key
        if key == self._settled_key:
            self.loading = False
            return None

        if last_updated and last_updated not in self._triggers.setdefault(key, []):
            self._triggers[key].append(last_updated)

        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(
                self._executor.execute(variable.query_template, variable_set.payload())
            )
            self._inflight[key] = future
            future.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug("Joining in-flight query for %r", variable.name)

        self.loading = True
        try:
            payload = await asyncio.shield(future)
        except ExecutionFailure as exc:
            if self._is_stale(key, variable.name):
                return None
            self.loading = False
            self.error_message = self._settings.display_error(exc.message)
            logger.warning("Query for %r failed: %s", variable.name, exc.message)
            return None
        except Exception:
            if key == self.current_key:
                self.loading = False
            raise

        if self._is_stale(key, variable.name):
            return None
        self.loading = False
        if key == self._settled_key:
            # another awaiter of this execution already reconciled it, with
            # every trigger that joined the key
            return None
        self._settled_key = key
        triggers = self._triggers.pop(key, [])
        self.error_message = None

        try:
            values = coerce_options(payload)
        except ParseFailure as exc:
            logger.warning("Ignoring options for %r: %s", variable.name, exc)
            return None

        result = reconcile(values, self.options, variable.sort_mode)
        if not result.changed:
            return None
        self.options = result.options
        for trigger in triggers:
            selection = cascade_selection(variable, self.options, trigger)
            if selection is not None:
                return selection
        return None

    def cancel(self) -> None:
        """Cancel outstanding executions and clear the loading flag."""
        for future in list(self._inflight.values()):
            future.cancel()
        self._inflight.clear()
        self._triggers.clear()
        self.loading = False

    def _load_custom(self, variable: Variable) -> None:
        try:
            values = parse_custom_list(variable.custom_values)
        except ParseFailure as exc:
            logger.warning("Keeping previous options for %r: %s", variable.name, exc)
            return
        result = reconcile(values, self.options, variable.sort_mode)
        if result.changed:
            self.options = result.options

    def _is_stale(self, key: VariableKey, name: str) -> bool:
        if key != self.current_key:
            logger.debug("Discarding stale result for %r (key %r)", name, key)
            return True
        return False

    def _forget(self, key: VariableKey, done: asyncio.Future) -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]
        # the result is consumed by awaiters; avoid "never retrieved" noise
        if not done.cancelled():
            done.exception()
