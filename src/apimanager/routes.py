"""Route template parsing.

A route template is a path with ``:name`` placeholders, for example
``offers/:id/extra/test/:mId``. Parsing splits it into the static part in
front of the first placeholder and an ordered schema describing every
placeholder together with the literal text that follows it.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import MalformedTemplate

PLACEHOLDER_MARKER = "/:"


@dataclass(frozen=True, slots=True)
class RouteParam:
    """One placeholder and the literal path text that trails it."""

    name: str
    suffix: str = ""


RouteSchema = tuple[RouteParam, ...]


@dataclass(frozen=True, slots=True)
class ParsedRoute:
    """Static URL prefix plus the placeholder schema of a route template."""

    static_url: str
    schema: RouteSchema = ()

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(param.name for param in self.schema)


def parse_route(template: str | None) -> ParsedRoute:
    """Split ``template`` into its static URL and placeholder schema.

    ``"offers/:id/extra/test/:mId"`` parses to static URL ``"offers"`` and
    schema ``(RouteParam("id", "/extra/test"), RouteParam("mId", ""))``.
    Any non-empty string parses, including degenerate ones with empty names
    or suffixes.
    """

    if not template:
        raise MalformedTemplate("Route template must be a non-empty string")

    fragments = template.split(PLACEHOLDER_MARKER)
    if len(fragments) == 1:
        return ParsedRoute(static_url=template)

    schema: list[RouteParam] = []
    for fragment in fragments[1:]:
        name, *literals = fragment.split("/")
        suffix = "".join(f"/{literal}" for literal in literals)
        schema.append(RouteParam(name=name, suffix=suffix))
    return ParsedRoute(static_url=fragments[0], schema=tuple(schema))


__all__ = ["ParsedRoute", "RouteParam", "RouteSchema", "parse_route"]
