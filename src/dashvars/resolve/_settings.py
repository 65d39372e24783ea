"""Resolver configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ._keys import DEFAULT_NAMESPACE


class ResolverSettings(BaseModel):
    """Tunables for a ``DashboardSession``.

    Parameters
    ----------
    debounce_ms
        Quiet period before a free-text edit is committed.
    key_namespace
        First component of every cache key.
    all_value
        Sentinel the presentation layer sends for the ALL choice.
    syntax_error_marker
        Executor messages containing this text are replaced by
        ``syntax_error_message`` before being shown.
    """

    model_config = ConfigDict(frozen=True)

    debounce_ms: int = Field(default=500, ge=0)
    key_namespace: str = DEFAULT_NAMESPACE
    all_value: str = "__ALL__"
    syntax_error_marker: str = "Syntax error:"
    syntax_error_message: str = (
        "Please make sure query is valid and dependent variables are selected"
    )

    def display_error(self, message: str) -> str:
        if self.syntax_error_marker in message:
            return self.syntax_error_message
        return message


DEFAULT_SETTINGS = ResolverSettings()
