"""Base abstractions for auth strategies."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import MutableMapping


class AuthStrategy(ABC):
    """Interface each authentication mechanism must implement."""

    header_name = "Authorization"

    @abstractmethod
    def apply(self, headers: MutableMapping[str, str]) -> None:
        """Mutate headers in-place with the necessary credentials."""
