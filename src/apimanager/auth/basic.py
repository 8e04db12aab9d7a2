"""HTTP Basic authentication support."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass

from requests.auth import _basic_auth_str

from .base import AuthStrategy


@dataclass(slots=True)
class BasicAuth(AuthStrategy):
    """Apply HTTP Basic auth headers."""

    username: str
    password: str

    def apply(self, headers: MutableMapping[str, str]) -> None:
        headers[self.header_name] = _basic_auth_str(self.username, self.password)
