"""
JSON value classification helpers.

Shared by the analyzer and both converters: type detection, the
complex/primitive split, input validation and small naming helpers.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from src.convert.errors import InvalidInput

JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class JsonType(str, Enum):
    """Enumeration of JSON data types."""
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def detect_json_type(value: Any) -> JsonType:
    """
    Detect the JSON type of a value.

    Args:
        value: The value to check

    Returns:
        JsonType enum value

    Raises:
        InvalidInput: If the value is not a JSON value
    """
    if value is None:
        return JsonType.NULL
    elif isinstance(value, bool):
        return JsonType.BOOLEAN
    elif isinstance(value, int):
        return JsonType.INTEGER
    elif isinstance(value, float):
        return JsonType.FLOAT
    elif isinstance(value, str):
        return JsonType.STRING
    elif isinstance(value, list):
        return JsonType.ARRAY
    elif isinstance(value, dict):
        return JsonType.OBJECT
    raise InvalidInput(
        f"Value of type {type(value).__name__} is not representable as JSON")


def is_complex(value: Any) -> bool:
    """True for arrays and objects, which never become table cells."""
    return isinstance(value, (list, dict))


# Linked (parent path, segment) pairs
_Path = Optional[Tuple[Any, str]]


def validate_json_value(value: Any) -> None:
    """
    Check that a value is an acyclic JSON tree.

    Containers on the current path are tracked by identity so a cyclic
    structure fails fast. The walk uses an explicit stack, so nesting depth
    is not bounded by the interpreter's recursion limit.

    Raises:
        InvalidInput: On non-JSON values, non-string keys, NaN/Infinity
            or cycles
    """
    path_ids: Set[int] = set()
    # (value, path, leaving): leaving=True pops the container off the path.
    # Paths are (parent path, segment) links, rendered only for errors.
    stack: List[Tuple[Any, _Path, bool]] = [(value, None, False)]

    while stack:
        node, path, leaving = stack.pop()
        if leaving:
            path_ids.discard(id(node))
            continue

        json_type = detect_json_type(node)

        if json_type == JsonType.FLOAT and not math.isfinite(node):
            raise InvalidInput(f"Non-finite number at {_format_path(path)}")

        if json_type not in (JsonType.ARRAY, JsonType.OBJECT):
            continue

        marker = id(node)
        if marker in path_ids:
            raise InvalidInput(f"Cycle detected at {_format_path(path)}")
        path_ids.add(marker)
        stack.append((node, path, True))

        if json_type == JsonType.ARRAY:
            children = [(item, (path, f"[{index}]")) for index, item in enumerate(node)]
        else:
            children = []
            for key, item in node.items():
                if not isinstance(key, str):
                    raise InvalidInput(
                        f"Object key {key!r} at {_format_path(path)} is not a string")
                children.append((item, (path, f".{key}")))

        for item, item_path in reversed(children):
            stack.append((item, item_path, False))


def _format_path(path: _Path) -> str:
    segments = []
    while path is not None:
        path, segment = path
        segments.append(segment)
    return "$" + "".join(reversed(segments))


def type_name(value: Any) -> str:
    """Kind label used in analyses and previews ('array', 'object', 'string', ...)."""
    return detect_json_type(value).value


def validate_name(name: str, what: str = "name") -> str:
    """Reject blank table/collection names."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput(f"A non-empty {what} is required")
    return name


def unique_name(name: str, taken: Set[str]) -> str:
    """
    Return `name`, or `name_2`, `name_3`, ... if already taken.

    The chosen name is added to `taken`.
    """
    candidate = name
    suffix = 2
    while candidate in taken:
        candidate = f"{name}_{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate
