from __future__ import annotations

from typing import Mapping

from gluestick.collector import HTMLElement
from gluestick.fields import FieldSpec, Leaf, Nested
from gluestick.values import Value, accumulate


def extract_fields(fields: Mapping[str, FieldSpec], element: HTMLElement) -> dict[str, Value]:
    """Resolve a compiled field tree against one matched element.

    Leaf fields that match several nodes come back as lists; a field that
    matches nothing is left out. Nested fields are evaluated against the same
    element, not a narrowed one.
    """
    parsed: dict[str, Value] = {}
    for name, spec in fields.items():
        if isinstance(spec, Nested):
            accumulate(parsed, name, extract_fields(spec.fields, element))
        elif isinstance(spec, Leaf):
            _extract_leaf(parsed, name, spec, element)
    return parsed


def _extract_leaf(parsed: dict[str, Value], name: str, spec: Leaf, element: HTMLElement) -> None:
    selector = spec.expr.selector
    attribute = spec.expr.attribute
    targets = [element] if spec.expr.targets_self else element.select(selector)
    for target in targets:
        if not attribute:
            accumulate(parsed, name, target.text)
            continue
        value = target.attr(attribute)
        if value is not None:
            accumulate(parsed, name, value)


def collect_item(
    results: dict[str, Value],
    item_name: str,
    fields: Mapping[str, FieldSpec],
    element: HTMLElement,
) -> None:
    accumulate(results, item_name, extract_fields(fields, element))
