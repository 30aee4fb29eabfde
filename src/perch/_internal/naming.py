"""Name conversions between Python identifiers and HTTP conventions."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_header_name(name: str) -> str:
    """Convert a parameter name to conventional header form.

    ``content_type`` -> ``Content-Type``, ``x_request_id`` -> ``X-Request-Id``.
    """
    return "-".join(part.capitalize() for part in name.split("_") if part)


def to_snake_key(key: str) -> str:
    """Normalize a request parameter key to a Python identifier.

    ``user-id`` -> ``user_id``, ``newPassword`` -> ``new_password``.
    """
    key = _CAMEL_BOUNDARY.sub("_", key)
    return key.replace("-", "_").replace(" ", "_").lower()
