"""HTTP transport and response status handling."""

from __future__ import annotations

import asyncio
import json
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .config import TransportSettings
from .exceptions import BodyParseFailure, RequestError, TransportFailure


@dataclass(slots=True)
class OutgoingRequest:
    """Fully resolved request handed to the request interceptor and transport."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None


@dataclass(slots=True)
class HttpResponse:
    """Raw response envelope returned by a transport."""

    status_code: int
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """Send a request and return the raw response without status handling."""

    async def send(self, request: OutgoingRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


class RequestsTransport:
    """Transport backed by `requests` sessions.

    The blocking call runs in a worker thread so the event loop stays free.
    Each worker thread gets its own `requests.Session`; an injected
    ``session`` is shared by every thread.
    """

    def __init__(
        self,
        settings: TransportSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings or TransportSettings()
        self._shared_session = session
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()
        self._suppress_insecure_warning_if_needed()

    async def send(self, request: OutgoingRequest) -> HttpResponse:
        return await asyncio.to_thread(self._send_blocking, request)

    def close(self) -> None:
        if self._shared_session is not None:
            self._shared_session.close()
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def _thread_session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _send_blocking(self, request: OutgoingRequest) -> HttpResponse:
        try:
            response = self._thread_session().request(
                method=request.method,
                url=request.url,
                headers=dict(request.headers),
                data=request.body.encode("utf-8") if request.body is not None else None,
                timeout=self.settings.timeout,
                verify=self.settings.verify_ssl,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise RequestError(
                f"Failed to communicate with {request.url}: {reason}", details=reason
            ) from exc
        return HttpResponse(
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
            url=response.url,
        )

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.settings.verify_ssl, bool) and not self.settings.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)


def parse_json(response: HttpResponse) -> Any:
    """Decode the body as JSON; an empty body decodes to ``{}``."""

    return json.loads(response.text) if response.text else {}


def check_status(response: HttpResponse) -> Any:
    """Return the decoded body of a successful response or raise.

    Non-2xx responses raise `TransportFailure` carrying the decoded error body
    and the raw response. Undecodable bodies raise `BodyParseFailure`; the raw
    response is only attached on the failure path.
    """

    if response.ok:
        try:
            return parse_json(response)
        except ValueError as exc:
            raise BodyParseFailure("Response did not contain valid JSON", error=exc) from exc

    try:
        error = parse_json(response)
    except ValueError as exc:
        raise BodyParseFailure(
            f"API error {response.status_code} with an undecodable body",
            error=exc,
            resp=response,
        ) from exc
    raise TransportFailure(
        f"API error {response.status_code}: {response.text[:200]}",
        error=error,
        resp=response,
    )


__all__ = [
    "HttpResponse",
    "OutgoingRequest",
    "RequestsTransport",
    "Transport",
    "check_status",
    "parse_json",
]
