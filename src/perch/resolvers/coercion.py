"""String-to-annotation coercion for resolved request values.

Request data arrives as strings. When an endpoint annotates a parameter
as ``int``, ``float`` or ``bool``, the resolved string is converted.
Conversion failures leave the raw value in place.
"""

from typing import Annotated, Any, get_args, get_origin

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def coerce(value: Any, annotation: Any) -> Any:
    """Convert string *value* to *annotation*, returning it unchanged on failure."""
    if not isinstance(value, str):
        return value

    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]

    if annotation is int:
        try:
            return int(value)
        except ValueError:
            return value

    if annotation is float:
        try:
            return float(value)
        except ValueError:
            return value

    if annotation is bool:
        flag = value.lower()
        if flag in _TRUE:
            return True
        if flag in _FALSE:
            return False
        return value

    return value
