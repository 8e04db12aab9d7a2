"""Bearer token authentication."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass

from .base import AuthStrategy


@dataclass(slots=True)
class BearerAuth(AuthStrategy):
    """Apply an already issued bearer token."""

    token: str

    def apply(self, headers: MutableMapping[str, str]) -> None:
        headers[self.header_name] = f"Bearer {self.token}"

    def update_token(self, token: str) -> None:
        self.token = token
