"""Shared test helpers for the dashvars test suite."""

import asyncio

from dashvars.model.types import VariableKind
from dashvars.model.variables import Variable
from dashvars.resolve import ExecutionFailure


def query_var(name, template, **kwargs):
    """Build a QUERY variable; id defaults to the name."""
    kwargs.setdefault("id", name)
    return Variable(name=name, kind=VariableKind.QUERY, query_template=template, **kwargs)


def custom_var(name, values, **kwargs):
    kwargs.setdefault("id", name)
    return Variable(name=name, kind=VariableKind.CUSTOM, custom_values=values, **kwargs)


def text_var(name, value="", **kwargs):
    kwargs.setdefault("id", name)
    return Variable(name=name, kind=VariableKind.TEXTBOX, selected_value=value, **kwargs)


class FakeExecutor:
    """In-memory query executor.

    ``responses`` maps a query string to a list of values, an
    ``ExecutionFailure``, or a callable ``(variables) -> list``.
    ``hold(query)`` makes subsequent calls for that query wait until the
    returned event is set.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.cancelled = []
        self._gates = {}

    def hold(self, query):
        gate = asyncio.Event()
        self._gates[query] = gate
        return gate

    def release(self, query):
        self._gates.pop(query, None)

    async def execute(self, query, variables):
        self.calls.append((query, dict(variables)))
        gate = self._gates.get(query)
        response = self.responses.get(query, [])
        if callable(response):
            response = response(variables)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(query)
                raise
        if isinstance(response, Exception):
            raise response
        return response

    def calls_for(self, query):
        return [variables for q, variables in self.calls if q == query]


def failing(message):
    return ExecutionFailure(message)
