from __future__ import annotations

from typing import Union

# Result tree: a scalar string, an object, or a list created by repeat writes.
Value = Union[str, list["Value"], dict[str, "Value"]]


def accumulate(container: dict[str, Value], key: str, value: Value) -> None:
    """Store ``value`` under ``key``, promoting to a list on the second write.

    The first write stores the value as is. The second write replaces it with
    ``[previous, value]`` and later writes append, so N writes leave a scalar
    when N == 1 and an N-element list in call order otherwise.
    """
    if key not in container:
        container[key] = value
        return
    previous = container[key]
    if isinstance(previous, list):
        previous.append(value)
    else:
        container[key] = [previous, value]
