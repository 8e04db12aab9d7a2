"""Command-line interface for inspecting routes and issuing one-off calls."""
from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Sequence
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install apimanager-python[cli]' to enable this command."
    ) from exc

from .auth.base import AuthStrategy
from .auth.basic import BasicAuth
from .auth.bearer import BearerAuth
from .config import VERBS, ClientConfig, TransportSettings
from .exceptions import ApiManagerError, RequestError, ResponseError
from .http import RequestsTransport
from .registry import ConfigRegistry
from .routes import ParsedRoute, parse_route

app = typer.Typer(help="Configuration-driven REST request builder.", no_args_is_help=True)

console = Console(force_terminal=False, color_system=None)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _render_route(template: str, route: ParsedRoute) -> None:
    table = Table(
        title=f"{template} -> {route.static_url}",
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right")
    table.add_column("Parameter")
    table.add_column("Suffix")
    for index, param in enumerate(route.schema, start=1):
        table.add_row(str(index), param.name, param.suffix)
    console.print(table)


def _parse_pairs(values: Sequence[str] | None, option: str) -> dict[str, str]:
    """Turn repeated ``key=value`` options into a mapping."""
    pairs: dict[str, str] = {}
    for item in values or ():
        if "=" not in item:
            raise typer.BadParameter(f"{option} expects key=value, got '{item}'.")
        key, value = item.split("=", 1)
        pairs[key.strip()] = value.strip()
    return pairs


def _build_auth(
    token: str | None, username: str | None, password: str | None
) -> AuthStrategy | None:
    if token:
        if username or password:
            raise typer.BadParameter("Use either --token or --username/--password, not both.")
        return BearerAuth(token=token)
    if username or password:
        if not username or not password:
            raise typer.BadParameter("--username and --password must be given together.")
        return BasicAuth(username=username, password=password)
    return None


def _default_verify() -> bool:
    # Accept common truthy/falsey representations (1/0, true/false, yes/no).
    env_verify = os.getenv("APIMANAGER_VERIFY_SSL")
    if env_verify is None:
        return True
    return env_verify.strip().lower() not in {"0", "false", "no", "off"}


def _handle_api_error(exc: ApiManagerError) -> None:
    message = f"Request failed: {exc}"
    if isinstance(exc, ResponseError) and exc.error is not None:
        message += f"\nDetails: {exc.error}"
    elif isinstance(exc, RequestError) and exc.details:
        message += f"\nDetails: {exc.details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("parse")
def parse_command(
    template: str = typer.Argument(..., help="Route template, e.g. 'offers/:id/extra'."),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Return raw JSON instead of rendering a table.",
    ),
) -> None:
    """Show the static URL and placeholder schema of a route template."""

    try:
        route = parse_route(template)
    except ApiManagerError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if output_json:
        _echo_json(
            {
                "staticUrl": route.static_url,
                "schema": [{"param": p.name, "suffix": p.suffix} for p in route.schema],
            }
        )
        return
    _render_route(template, route)


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="HTTP verb: get, post, put or delete."),
    route: str = typer.Argument(
        "", help="Route template appended to --base-url (or a full URL without it)."
    ),
    base_url: str | None = typer.Option(
        None, "--base-url", envvar="APIMANAGER_BASE_URL", help="API base URL."
    ),
    param: list[str] = typer.Option(
        [], "--param", help="Route parameter in key=value form.", show_default=False
    ),
    query: list[str] = typer.Option(
        [], "--query", "-q", help="Query parameter in key=value form.", show_default=False
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Extra header in key=value form.", show_default=False
    ),
    body: str | None = typer.Option(None, "--body", help="JSON request body (post/put)."),
    token: str | None = typer.Option(
        None, "--token", envvar="APIMANAGER_TOKEN", help="Bearer token."
    ),
    username: str | None = typer.Option(
        None, "--username", "-u", envvar="APIMANAGER_USERNAME", help="Username for basic auth."
    ),
    password: str | None = typer.Option(
        None,
        "--password",
        "-p",
        envvar="APIMANAGER_PASSWORD",
        help="Password for basic auth.",
        hide_input=True,
    ),
    verify_ssl: bool = typer.Option(
        _default_verify(),
        "--verify/--no-verify",
        help="Enable or disable TLS certificate verification.",
        show_default=True,
    ),
    timeout: float = typer.Option(
        30.0, envvar="APIMANAGER_TIMEOUT", help="Request timeout (seconds).", show_default=True
    ),
) -> None:
    """Send one request through a freshly configured client and print the result."""

    verb = method.lower()
    if verb not in VERBS:
        raise typer.BadParameter(f"METHOD must be one of: {', '.join(VERBS)}.")

    payload: Any = None
    if body is not None:
        if verb not in {"post", "put"}:
            raise typer.BadParameter("--body is only accepted for post and put.")
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise typer.BadParameter(f"--body is not valid JSON: {exc}") from exc

    route_params = _parse_pairs(param, "--param")
    query_params = _parse_pairs(query, "--query")
    extra_headers = _parse_pairs(header, "--header")
    strategy = _build_auth(token, username, password)

    registry = ConfigRegistry(
        ClientConfig(base_url=base_url),
        transport=RequestsTransport(TransportSettings(timeout=timeout, verify_ssl=verify_ssl)),
    )
    try:
        client = registry.create(uri=route) if base_url else registry.create(url=route)
        if extra_headers:
            registry.extend_header(extra_headers)
        if strategy is not None:
            registry.apply_auth(strategy)

        options: dict[str, Any] = {}
        if route_params:
            options["params"] = route_params
        if query_params:
            options["query"] = query_params
        if payload is not None:
            options["body"] = payload
        result = asyncio.run(getattr(client, verb)(**options))
    except ApiManagerError as exc:
        _handle_api_error(exc)
        return
    finally:
        registry.close()

    _echo_json(result)
