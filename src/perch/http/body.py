"""Request body decoding — JSON, URL-encoded and multipart forms.

Bodies are decoded once by the ASGI adapter before dispatch. Decoded
mappings are merged into the request's parameter mapping; anything
else is kept as the raw decoded body.

``python-multipart`` is an optional dependency (``pip install perch[forms]``).
JSON and URL-encoded bodies use the standard library.
"""

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

from perch.errors import ConfigurationError, HTTPError


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


def parse_body(body: bytes, content_type: str | None) -> Any:
    """Decode *body* according to *content_type*.

    Returns a ``dict`` for JSON objects and forms, the decoded value for
    other JSON documents, and ``None`` for empty or unknown bodies.

    Raises:
        HTTPError: 400 when the body is not valid for its declared type.
    """
    if not body:
        return None

    ct_lower = (content_type or "").lower().split(";")[0].strip()

    if ct_lower == "application/json" or ct_lower.endswith("+json"):
        try:
            return json.loads(body)
        except ValueError as exc:
            raise HTTPError(status=400, detail=f"Malformed JSON body: {exc}") from exc

    if ct_lower == "application/x-www-form-urlencoded":
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HTTPError(status=400, detail=f"Form body is not valid UTF-8: {exc}") from exc
        return _flatten(parse_qs(text, keep_blank_values=True))

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type or "")

    return None


def _flatten(data: dict[str, list[Any]]) -> dict[str, Any]:
    """Collapse single-valued lists; repeated keys keep every value."""
    return {key: values[0] if len(values) == 1 else values for key, values in data.items()}


class _FormParts:
    """Collects multipart fields as the parser reports them."""

    __slots__ = ("_header", "_headers", "_payload", "fields")

    def __init__(self) -> None:
        self.fields: dict[str, list[Any]] = {}
        self._headers: dict[str, str] = {}
        self._header = ""
        self._payload = bytearray()

    def callbacks(self) -> dict[str, Any]:
        return {
            "on_part_begin": self.begin,
            "on_header_field": self.header_name,
            "on_header_value": self.header_value,
            "on_part_data": self.chunk,
            "on_part_end": self.end,
        }

    def begin(self) -> None:
        self._headers = {}
        self._payload = bytearray()

    def header_name(self, data: bytes, start: int, end: int) -> None:
        self._header = data[start:end].decode("latin-1").lower()

    def header_value(self, data: bytes, start: int, end: int) -> None:
        self._headers[self._header] = data[start:end].decode("latin-1")

    def chunk(self, data: bytes, start: int, end: int) -> None:
        self._payload.extend(data[start:end])

    def end(self) -> None:
        from multipart.multipart import parse_options_header

        _, options = parse_options_header(self._headers.get("content-disposition", "").encode("latin-1"))
        name = options.get(b"name")
        if name is None:
            return
        filename = options.get(b"filename")
        if filename is None:
            value: Any = self._payload.decode("utf-8", errors="replace")
        else:
            value = UploadFile(
                filename.decode("utf-8"),
                self._headers.get("content-type", "application/octet-stream"),
                bytes(self._payload),
            )
        self.fields.setdefault(name.decode("utf-8"), []).append(value)


def _parse_multipart(body: bytes, content_type: str) -> dict[str, Any]:
    """Parse multipart form data using python-multipart.

    Raises ``ConfigurationError`` if ``python-multipart`` is not installed.
    """
    try:
        from multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Multipart form parsing requires the 'python-multipart' package. "
            "Install it with: pip install perch[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        raise HTTPError(status=400, detail="Multipart form data missing boundary parameter")

    parts = _FormParts()
    parser = MultipartParser(boundary, parts.callbacks())
    parser.write(body)
    parser.finalize()
    return _flatten(parts.fields)
