"""Template dependency extraction.

Query templates reference other variables as ``{{.name}}``, with any
amount of whitespace inside the braces (``{{ .name }}``). A name is a
run of characters that are neither whitespace nor a closing brace.
"""

from __future__ import annotations

import re

_VARIABLE_RE = re.compile(r"\{\{\s*\.([^\s}]+)\s*\}\}")


def extract_dependencies(template: str | None) -> list[str]:
    """Return the variable names referenced by *template*.

    Names are unique and ordered by first occurrence::

        >>> extract_dependencies("{{ .a }} {{.b}} {{.a}}")
        ['a', 'b']
    """
    if not template:
        return []
    names: list[str] = []
    for match in _VARIABLE_RE.finditer(template):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def references(template: str | None, name: str) -> bool:
    """True if *template* directly references the variable *name*."""
    return name in extract_dependencies(template)
