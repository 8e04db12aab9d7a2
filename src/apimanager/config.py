"""Configuration values for registries and clients."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any

from .exceptions import ConfigurationError

DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "Accept": "application/json",
        "Content-Type": "application/json; charset=utf-8",
        "Origin": "*",
    }
)

VERBS = ("get", "post", "put", "delete")

Hook = Callable[..., Any]


def passthrough_request(request: Any) -> Any:
    return request


def passthrough_response(result: Any, context: Any) -> Any:
    return result


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Immutable configuration shared by a registry and the clients it creates.

    ``headers`` is stored as a read-only mapping; every change produces a new value.
    """

    base_url: str | None = None
    uri: str | None = None
    url: str | None = None
    headers: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    request_interceptor: Hook = passthrough_request
    response_interceptor: Hook = passthrough_response
    response_handler_get: Hook = passthrough_response
    response_handler_post: Hook = passthrough_response
    response_handler_put: Hook = passthrough_response
    response_handler_delete: Hook = passthrough_response

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_options(cls, **options: Any) -> ClientConfig:
        """Build a config from construction options.

        Supplied ``headers`` replace `DEFAULT_HEADERS` instead of extending them.
        """
        headers = options.pop("headers", None)
        base = cls() if headers is None else cls(headers=headers)
        return base.merged(**options)

    @classmethod
    def option_names(cls) -> frozenset[str]:
        return frozenset(item.name for item in fields(cls))

    def merged(self, **patch: Any) -> ClientConfig:
        """Return a copy with ``patch`` applied on top.

        Keys overwrite shallowly, except ``headers`` which is unioned with the
        current headers (patch keys win). ``None`` values for hooks and
        headers are ignored so callers can forward optional arguments.
        """

        unknown = set(patch) - self.option_names()
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration option(s): {', '.join(sorted(unknown))}"
            )
        changes: dict[str, Any] = {}
        for key, value in patch.items():
            if key == "headers":
                if value is not None:
                    changes["headers"] = {**self.headers, **value}
            elif key in {"base_url", "uri", "url"}:
                changes[key] = value
            elif value is not None:
                changes[key] = value
        # A patch that re-addresses the client through one form drops the other.
        if patch.get("url") and "uri" not in patch:
            changes["uri"] = None
        if patch.get("uri") and "url" not in patch:
            changes["url"] = None
        return replace(self, **changes)

    def with_headers(self, headers: Mapping[str, str]) -> ClientConfig:
        return replace(self, headers={**self.headers, **headers})

    def without_header(self, name: str) -> ClientConfig:
        if name not in self.headers:
            return self
        return replace(self, headers={k: v for k, v in self.headers.items() if k != name})

    def response_handler(self, verb: str) -> Hook:
        return getattr(self, f"response_handler_{verb.lower()}")

    def resolved_url(self) -> str:
        """Return ``url`` when set, otherwise ``base_url + uri``."""

        if self.url and self.uri:
            raise ConfigurationError("Provide either 'url' or 'base_url' + 'uri', not both")
        if self.url:
            return self.url
        if self.base_url is None:
            raise ConfigurationError("No URL defined: provide 'url' or 'base_url'")
        return f"{self.base_url}{self.uri or ''}"


@dataclass(slots=True)
class TransportSettings:
    """Typed settings for the default HTTP transport."""

    timeout: float | None = 30.0
    verify_ssl: bool | str = True


__all__ = [
    "ClientConfig",
    "DEFAULT_HEADERS",
    "TransportSettings",
    "VERBS",
    "passthrough_request",
    "passthrough_response",
]
