"""Path and query string serialization for route calls."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from .routes import RouteSchema


def _is_missing(value: Any) -> bool:
    return value is None or value is False or value == ""


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def serialize_params(params: Mapping[str, Any], schema: RouteSchema) -> str:
    """Fill the schema placeholders from ``params``.

    Each entry emits its value immediately followed by its literal suffix; no
    separator is inserted between them. A missing value collapses and only
    the suffix is emitted.
    """

    parts: list[str] = []
    for param in schema:
        value = params.get(param.name)
        if not _is_missing(value):
            parts.append(_stringify(value))
        parts.append(param.suffix)
    return "".join(parts)


def serialize_query(query: Mapping[str, Any]) -> str:
    """Render ``query`` as ``k1=v1&k2=v2`` with every key and value percent-encoded.

    Booleans render as ``true``/``false`` and ``None`` as ``null``.
    """

    return "&".join(
        f"{_encode_component(key)}={_encode_component(value)}" for key, value in query.items()
    )


def _encode_component(value: Any) -> str:
    # Same unreserved set as JavaScript's encodeURIComponent.
    return quote(_stringify(value), safe="!*'()")


__all__ = ["serialize_params", "serialize_query"]
