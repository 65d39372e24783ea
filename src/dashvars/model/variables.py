"""Variable definitions and the variable set a dashboard resolves against.

A ``Variable`` is an immutable record. Changing a selection never mutates
a variable in place: ``with_selection`` returns a copy, and a
``VariableSet`` is replaced wholesale by the session that owns it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from pydantic import BaseModel, ConfigDict

from .types import Scalar, Selection, SortMode, VariableKind


class DuplicateVariableError(ValueError):
    """Two variables in one set share a name."""


class Variable(BaseModel):
    """A named, typed dashboard parameter.

    ``query_template`` is only meaningful for ``QUERY`` variables and
    ``custom_values`` only for ``CUSTOM`` ones.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: VariableKind
    query_template: str = ""
    custom_values: str = ""
    selected_value: Selection = None
    all_selected: bool = False
    multi_select: bool = False
    show_all_option: bool = False
    sort_mode: SortMode = SortMode.DISABLED
    description: str = ""

    def with_selection(self, value: Selection, all_selected: bool = False) -> Variable:
        return self.model_copy(
            update={"selected_value": value, "all_selected": all_selected},
        )


class VariableSet(Mapping[str, Variable]):
    """Immutable mapping of variable name -> ``Variable``.

    Represents the full variable context of a dashboard at one point in
    time. Readers may look at any variable; writers build a new set.
    """

    __slots__ = ("_variables",)

    def __init__(self, variables: Iterable[Variable] = ()) -> None:
        by_name: dict[str, Variable] = {}
        for var in variables:
            if var.name in by_name:
                raise DuplicateVariableError(
                    f"Duplicate variable name {var.name!r}"
                )
            by_name[var.name] = var
        self._variables = by_name

    def __getitem__(self, name: str) -> Variable:
        return self._variables[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"VariableSet({sorted(self._variables)})"

    def with_variable(self, variable: Variable) -> VariableSet:
        """Return a new set with *variable* added or replaced by name."""
        updated = dict(self._variables)
        updated[variable.name] = variable
        return VariableSet(updated.values())

    def with_selection(
        self, name: str, value: Selection, all_selected: bool = False,
    ) -> VariableSet:
        """Return a new set where *name* holds the given selection."""
        return self.with_variable(self[name].with_selection(value, all_selected))

    def payload(self) -> dict[str, Selection]:
        """Bindings handed to the query executor: every variable's selection."""
        return {name: var.selected_value for name, var in self._variables.items()}


class VariableView(BaseModel):
    """Everything the presentation layer needs to draw one variable."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: VariableKind
    options: list[Scalar] = []
    selected_value: Selection = None
    all_selected: bool = False
    multi_select: bool = False
    show_all_option: bool = False
    loading: bool = False
    error_message: str | None = None
    is_locked: bool = False

    @property
    def display_value(self) -> str | list[str]:
        """``"ALL"`` when the wildcard is selected, else the stringified value."""
        if self.all_selected:
            return "ALL"
        if isinstance(self.selected_value, list):
            return [str(item) for item in self.selected_value]
        if self.selected_value is None:
            return ""
        return str(self.selected_value)

    @property
    def multiple(self) -> bool:
        return self.multi_select and not self.all_selected

    @property
    def show_all_choice(self) -> bool:
        return self.multi_select and self.show_all_option
