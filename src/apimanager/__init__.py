"""Configuration-driven HTTP request builder."""
from .client import CallContext, Client
from .config import ClientConfig
from .exceptions import ApiManagerError
from .registry import ConfigRegistry, get_or_create, reset_registry
from .routes import parse_route

__all__ = [
    "ApiManagerError",
    "CallContext",
    "Client",
    "ClientConfig",
    "ConfigRegistry",
    "get_or_create",
    "parse_route",
    "reset_registry",
]
