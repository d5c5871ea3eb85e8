"""
Sigil canonical payload encoding.

Data is one of three shapes, each a frozen variant:

- ``Scalar``   a single string, percent-encoded as a whole
- ``Sequence`` an ordered list, encoded positionally as ``0=a&1=b``
- ``Mapping``  string keys to values, ``None`` values dropped, keys sorted

The encoded string is the exact artifact that gets signed, so the same data
must always produce the same bytes regardless of dict insertion order.

There is no type tag on the wire: a payload containing a literal ``=`` is
read back as a mapping, anything else as a scalar. Scalars produced here have
their ``=`` escaped, but a hand-built payload cannot be told apart.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union
from urllib.parse import quote, unquote

# Characters left unescaped, matching JavaScript's encodeURIComponent.
# quote() already keeps ASCII letters, digits and "_.-~".
_SAFE_CHARS = "!*'()"


@dataclass(frozen=True)
class Scalar:
    value: str


@dataclass(frozen=True)
class Sequence:
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class Mapping:
    """Key/value pairs with absent (``None``) values already removed."""

    pairs: Tuple[Tuple[str, Any], ...]


Shape = Union[Scalar, Sequence, Mapping]


def escape(text: str) -> str:
    """Percent-encode ``text`` the way encodeURIComponent does."""
    return quote(text, safe=_SAFE_CHARS)


def unescape(text: str) -> str:
    return unquote(text)


def to_shape(data: Any) -> Shape:
    """
    Classify raw Python data into one of the three payload shapes.

    Raises:
        TypeError: If ``data`` is not a string, list/tuple or dict.
    """
    if isinstance(data, (Scalar, Sequence, Mapping)):
        return data
    if isinstance(data, str):
        return Scalar(data)
    if isinstance(data, (list, tuple)):
        return Sequence(tuple(data))
    if isinstance(data, dict):
        return Mapping(tuple((str(k), v) for k, v in data.items() if v is not None))
    raise TypeError(
        f"Cannot serialize {type(data).__name__}: expected str, list or dict"
    )


def _primitive(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    # None, nested mappings and other objects have no scalar form
    return ""


def _encode_pairs(pairs) -> str:
    fields: List[str] = []
    for key, value in pairs:
        name = escape(key)
        if isinstance(value, (list, tuple)):
            fields.extend(f"{name}={escape(_primitive(item))}" for item in value)
        else:
            fields.append(f"{name}={escape(_primitive(value))}")
    return "&".join(fields)


def serialize(data: Any) -> str:
    """
    Canonically encode ``data`` into the payload string.

    Args:
        data: A ``str``, ``list``/``tuple``, ``dict`` or an already built shape.

    Returns:
        The percent-encoded payload.
    """
    shape = to_shape(data)
    if isinstance(shape, Scalar):
        return escape(shape.value)
    if isinstance(shape, Sequence):
        return _encode_pairs((str(i), item) for i, item in enumerate(shape.items))
    return _encode_pairs(sorted(shape.pairs, key=lambda pair: pair[0].encode("utf-8")))


def _parse_pairs(payload: str) -> Dict[str, Union[str, List[str]]]:
    result: Dict[str, Union[str, List[str]]] = {}
    for field in payload.split("&"):
        if not field:
            continue
        key, _, value = field.partition("=")
        key = unescape(key.replace("+", " "))
        value = unescape(value.replace("+", " "))
        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]
    return result


def _is_positional(mapping: Dict[str, Any]) -> bool:
    return bool(mapping) and list(mapping) == [str(i) for i in range(len(mapping))]


def deserialize(payload: str) -> Union[str, List[Any], Dict[str, Any]]:
    """
    Decode a payload back into data, inferring the shape from its content.

    Mappings whose keys are exactly ``"0"`` .. ``"n-1"`` in order come back
    as lists, so sequences survive the round trip.
    """
    if "=" not in payload:
        return unescape(payload)
    mapping = _parse_pairs(payload)
    if _is_positional(mapping):
        return list(mapping.values())
    return mapping
