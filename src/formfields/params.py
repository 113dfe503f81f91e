"""Submitted parameters — URL-encoded, multipart, or plain mappings.

``Params`` is the read-only set of submitted values keyed by their
flattened dotted names (``user.addresses.0.street``). The path resolver
consults it before the stash, so re-rendering an invalid form shows what
the user typed rather than what the bound object holds.

``python-multipart`` is an optional dependency (``pip install formfields[forms]``).
URL-encoded bodies and query strings use stdlib ``urllib.parse``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

from formfields.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart submission.

    The content is held in memory, which suits typical form uploads.
    """

    filename: str
    content_type: str
    size: int
    _content: bytes

    def read(self) -> bytes:
        """Return the file content as bytes."""
        return self._content

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class Params(Mapping[str, str]):
    """Immutable submitted parameters.

    ``__getitem__`` returns the first value for a name.
    ``get_list`` returns all values (checkbox groups, multi-selects).
    ``files`` provides uploaded files by field name.

    Usage::

        params = Params.from_mapping({"user.name": "sshaw", "user.roles": ["admin", "dev"]})
        params["user.name"]            # "sshaw"
        params.get_list("user.roles")  # ["admin", "dev"]
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        object.__setattr__(self, "_data", data or {})
        object.__setattr__(self, "_files", files or {})

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Params:
        """Build from a plain mapping whose values are scalars or lists."""
        if isinstance(mapping, Params):
            return mapping
        data: dict[str, list[str]] = {}
        for key, value in mapping.items():
            if isinstance(value, (list, tuple)):
                data[key] = [str(v) for v in value]
            elif value is not None:
                data[key] = [str(value)]
        return cls(data)

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by field name."""
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Params({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    def lookup(self, key: str) -> tuple[bool, Any]:
        """Return ``(found, value)`` for a flattened field name.

        A name submitted more than once yields the list of its values;
        an uploaded file yields its ``UploadFile``.
        """
        values = self._data.get(key)
        if values:
            return True, values[0] if len(values) == 1 else list(values)
        if key in self._files:
            return True, self._files[key]
        return False, None


def parse_query(query_string: str) -> Params:
    """Parse a query string (without the leading ``?``)."""
    return Params(parse_qs(query_string, keep_blank_values=True))


def parse_params(body: bytes, content_type: str) -> Params:
    """Parse a form body into Params.

    Supports:
    - ``application/x-www-form-urlencoded`` (stdlib, no extra dependency)
    - ``multipart/form-data`` (requires ``python-multipart``)

    Raises:
        ConfigurationError: If multipart parsing is needed but
            ``python-multipart`` is not installed.
        ValueError: If content type is not a supported form encoding.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        return parse_query(body.decode("utf-8"))

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_multipart(body: bytes, content_type: str) -> Params:
    """Parse multipart form data using python-multipart."""
    try:
        from python_multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Multipart form parsing requires the 'python-multipart' package. "
            "Install it with: pip install formfields[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    # Per-part state, reset on every part boundary
    headers: dict[str, str] = {}
    content = bytearray()
    field_name: str | None = None
    filename: str | None = None
    pending_header = ""

    def on_part_begin() -> None:
        nonlocal headers, content, field_name, filename
        headers = {}
        content = bytearray()
        field_name = None
        filename = None

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        content.extend(chunk[start:end])

    def on_part_end() -> None:
        if field_name is None:
            return
        if filename is not None:
            raw = bytes(content)
            files[field_name] = UploadFile(
                filename=filename,
                content_type=headers.get("content-type", "application/octet-stream"),
                size=len(raw),
                _content=raw,
            )
        else:
            data.setdefault(field_name, []).append(content.decode("utf-8", errors="replace"))

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        nonlocal pending_header
        pending_header = chunk[start:end].decode("latin-1").lower()

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        nonlocal field_name, filename
        value = chunk[start:end].decode("latin-1")
        headers[pending_header] = value
        if pending_header == "content-disposition":
            _, disposition = parse_options_header(value.encode("latin-1"))
            name = disposition.get(b"name")
            if name is not None:
                field_name = name.decode("utf-8")
            fname = disposition.get(b"filename")
            if fname is not None:
                filename = fname.decode("utf-8")

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
    }

    parser = MultipartParser(boundary, callbacks)
    parser.write(body)
    parser.finalize()

    return Params(data, files)
