from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from core.metrics import record_schema_error
from gluestick.selectors import SelectorExpr, parse_selector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Leaf:
    expr: SelectorExpr
    raw: str = ""


@dataclass(frozen=True)
class Nested:
    fields: dict[str, "FieldSpec"] = field(default_factory=dict)


FieldSpec = Union[Leaf, Nested]


def compile_fields(raw: Mapping[str, Any], path: str = "fields") -> dict[str, FieldSpec]:
    """Turn decoded JSON field definitions into ``Leaf``/``Nested`` specs.

    Strings become leaves and objects become nested field trees. Anything
    else is logged and left out so the rest of the tree still scrapes.
    """
    compiled: dict[str, FieldSpec] = {}
    for name, definition in raw.items():
        field_path = f"{path}[{name!r}]"
        if isinstance(definition, str):
            compiled[name] = Leaf(expr=parse_selector(definition), raw=definition)
        elif isinstance(definition, Mapping):
            compiled[name] = Nested(fields=compile_fields(definition, field_path))
        else:
            kind = _json_type(definition)
            logger.error("schema_error: %s expected string or object, got %s", field_path, kind)
            record_schema_error(kind)
    return compiled


def _json_type(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    return type(value).__name__
