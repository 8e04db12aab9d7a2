"""Process-wide configuration registry that tracks every client it creates."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .client import Client, build_client
from .config import ClientConfig
from .http import RequestsTransport, Transport

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .auth.base import AuthStrategy

logger = logging.getLogger(__name__)


class ConfigRegistry:
    """Hold default configuration and broadcast changes to live clients.

    Clients are tracked in creation order and never dropped. Broadcasts patch
    each tracked client's own config; they do not touch `defaults`.
    """

    def __init__(
        self,
        defaults: ClientConfig | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        self._defaults = defaults or ClientConfig()
        self._transport: Transport = transport or RequestsTransport()
        self._clients: list[Client] = []

    @property
    def defaults(self) -> ClientConfig:
        return self._defaults

    @property
    def clients(self) -> tuple[Client, ...]:
        return tuple(self._clients)

    def create(self, **overrides: Any) -> Client:
        client = build_client(self._defaults, overrides, transport=self._transport)
        self._clients.append(client)
        logger.debug("Registered client for %s (%d tracked)", client.url, len(self._clients))
        return client

    def update_defaults(self, **patch: Any) -> None:
        """Patch the defaults inherited by clients created from now on."""
        self._defaults = self._defaults.merged(**patch)

    def update_config(self, **patch: Any) -> None:
        logger.debug("Broadcasting config update %s to %d clients", sorted(patch), len(self._clients))
        self._broadcast(lambda config: config.merged(**patch))

    def extend_header(self, headers: Mapping[str, str]) -> None:
        logger.debug("Broadcasting headers %s to %d clients", sorted(headers), len(self._clients))
        self._broadcast(lambda config: config.with_headers(headers))

    def remove_header_property(self, name: str) -> None:
        logger.debug("Removing header %s from %d clients", name, len(self._clients))
        self._broadcast(lambda config: config.without_header(name))

    def apply_auth(self, strategy: AuthStrategy) -> None:
        """Render ``strategy`` into headers and push them to every tracked client."""
        headers: dict[str, str] = {}
        strategy.apply(headers)
        self.extend_header(headers)

    def close(self) -> None:
        self._transport.close()

    def _broadcast(self, change: Callable[[ClientConfig], ClientConfig]) -> None:
        # All patched configs are resolved before any client is updated, so a
        # failing patch leaves every tracked client as it was.
        prepared = [client._prepare(change(client.config)) for client in self._clients]
        for client, pending in zip(self._clients, prepared):
            client._commit(pending)


_registry: ConfigRegistry | None = None


def get_or_create(
    *,
    transport: Transport | None = None,
    **options: Any,
) -> ConfigRegistry:
    """Return the process-wide registry, creating it on first use.

    Only the first call's arguments are used; later calls get the existing
    instance whatever they pass.
    """

    global _registry
    if _registry is None:
        _registry = ConfigRegistry(ClientConfig.from_options(**options), transport=transport)
    return _registry


def reset_registry() -> None:
    """Forget the process-wide registry. Tracked clients stay usable."""
    global _registry
    _registry = None


__all__ = ["ConfigRegistry", "get_or_create", "reset_registry"]
