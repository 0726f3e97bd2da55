"""Field selector expressions.

A field definition string has the form ``"selector|attribute"``:

* ``"h3"`` selects the text of every ``h3`` below the matched node,
* ``"a|href"`` selects the ``href`` attribute of every ``a`` below it,
* ``"|href"`` reads ``href`` from the matched node itself,
* ``""`` is the matched node's own text.

The expression is split on the last ``|`` and both halves are stripped of
surrounding whitespace. A ``|`` inside the CSS part (namespaced attribute
selectors such as ``[xlink|href]``) is not supported.
"""

from __future__ import annotations

from dataclasses import dataclass

ATTRIBUTE_SEPARATOR = "|"


@dataclass(frozen=True)
class SelectorExpr:
    selector: str = ""
    attribute: str = ""

    @property
    def targets_self(self) -> bool:
        return not self.selector


def parse_selector(expr: str) -> SelectorExpr:
    selector, sep, attribute = expr.rpartition(ATTRIBUTE_SEPARATOR)
    if not sep:
        return SelectorExpr(selector=expr.strip())
    return SelectorExpr(selector=selector.strip(), attribute=attribute.strip())
