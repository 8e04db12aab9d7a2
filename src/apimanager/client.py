"""Configured endpoint clients and their request pipeline."""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .config import ClientConfig
from .http import OutgoingRequest, RequestsTransport, Transport, check_status
from .routes import ParsedRoute, RouteSchema, parse_route
from .serializers import serialize_params, serialize_query

logger = logging.getLogger(__name__)

_BODY_VERBS = frozenset({"POST", "PUT"})


@dataclass(frozen=True, slots=True)
class CallContext:
    """Call details passed to response interceptors and handlers."""

    url: str
    headers: Mapping[str, str]
    params: Mapping[str, Any] | None = None
    query: Mapping[str, Any] | None = None


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Client:
    """One configured endpoint: resolved URL, route schema, headers and hooks.

    Verb methods are coroutines; they read the client's config when they are
    dispatched, so a broadcast that lands between two calls is seen by the
    second one.
    """

    def __init__(self, config: ClientConfig, *, transport: Transport | None = None) -> None:
        self._transport: Transport = transport or RequestsTransport()
        self._apply(config)

    # Configuration -----------------------------------------------------------
    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def url(self) -> str:
        return self._static_url

    @property
    def route_schema(self) -> RouteSchema:
        return self._route_schema

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.headers)

    def update_config(self, **patch: Any) -> None:
        self._apply(self._config.merged(**patch))

    def extend_header(self, headers: Mapping[str, str]) -> None:
        self._apply(self._config.with_headers(headers))

    def remove_header_property(self, name: str) -> None:
        self._apply(self._config.without_header(name))

    # Verbs -------------------------------------------------------------------
    async def get(self, **options: Any) -> Any:
        return await self._dispatch("GET", **options)

    async def post(self, *, body: Any = None, **options: Any) -> Any:
        return await self._dispatch("POST", body=body, **options)

    async def put(self, *, body: Any = None, **options: Any) -> Any:
        return await self._dispatch("PUT", body=body, **options)

    async def delete(self, **options: Any) -> Any:
        return await self._dispatch("DELETE", **options)

    # Internal helpers -------------------------------------------------------
    def _apply(self, config: ClientConfig) -> None:
        self._commit(self._prepare(config))

    @staticmethod
    def _prepare(config: ClientConfig) -> tuple[ClientConfig, ParsedRoute]:
        """Resolve and parse the URL of ``config`` without touching the client."""
        return config, parse_route(config.resolved_url())

    def _commit(self, prepared: tuple[ClientConfig, ParsedRoute]) -> None:
        config, route = prepared
        self._config = config
        self._static_url = route.static_url
        self._route_schema = route.schema

    def _build_url(
        self,
        url: str,
        params: Mapping[str, Any] | None,
        query: Mapping[str, Any] | None,
    ) -> str:
        path_suffix = f"/{serialize_params(params, self._route_schema)}" if params else ""
        query_str = f"?{serialize_query(query)}" if query is not None else ""
        return f"{url}{path_suffix}{query_str}"

    async def _dispatch(
        self,
        method: str,
        *,
        url: str | None = None,
        headers: Mapping[str, str] | None = None,
        request_interceptor: Any = None,
        response_interceptor: Any = None,
        response_handler: Any = None,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        config = self._config
        url = url or self._static_url
        headers = dict(headers if headers is not None else config.headers)
        request_interceptor = request_interceptor or config.request_interceptor
        response_interceptor = response_interceptor or config.response_interceptor
        response_handler = response_handler or config.response_handler(method)

        context = CallContext(url=url, headers=headers, params=params, query=query)
        request = OutgoingRequest(
            method=method,
            url=self._build_url(url, params, query),
            headers=headers,
            body=json.dumps(body) if method in _BODY_VERBS and body is not None else None,
        )
        request = await _resolve(request_interceptor(request))
        self._log_request(request)

        response = await self._transport.send(request)
        result = check_status(response)
        result = await _resolve(response_interceptor(result, context))
        return await _resolve(response_handler(result, context))

    @staticmethod
    def _log_request(request: OutgoingRequest) -> None:
        logger.info("API request %s %s", request.method, request.url)


def build_client(
    defaults: ClientConfig,
    overrides: Mapping[str, Any] | None = None,
    *,
    transport: Transport | None = None,
) -> Client:
    """Create a `Client` from registry defaults and per-client overrides."""

    return Client(defaults.merged(**dict(overrides or {})), transport=transport)


__all__ = ["CallContext", "Client", "build_client"]
