"""Route compilation and segment-based path matching.

A configuration's routes are compiled once into an immutable
:class:`RouteTable`.  Each request is then resolved with :func:`match`,
which never mutates the table and can be called from any number of
concurrent requests.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote_to_bytes

from mocker.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

    from mocker.config import RouteSpec

logger = logging.getLogger(__name__)

KNOWN_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"})

# RFC 9110 token: methods travel verbatim in the ``Allow`` header.
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


# ------------------------------------------------------------------
# Path segments
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LiteralSegment:
    """Matches one request segment with exactly this text."""

    text: str


@dataclass(frozen=True, slots=True)
class ParamSegment:
    """Matches any single non-empty request segment and captures it."""

    name: str


PathSegment = LiteralSegment | ParamSegment


def split_path(path: str) -> list[str]:
    """Split a URL path on ``/``, ignoring leading and trailing slashes.

    ``"/a/b"`` and ``"/a/b/"`` both give ``["a", "b"]``; ``"/"`` gives ``[]``.
    """
    stripped = path.strip("/")
    if not stripped:
        return []
    return stripped.split("/")


def split_raw_path(raw_path: bytes) -> list[str]:
    """Split an undecoded request path, then percent-decode each segment.

    An encoded slash (``%2F``) stays inside its segment instead of
    starting a new one.
    """
    parts = split_path(raw_path.split(b"?", 1)[0].decode("latin-1"))
    return [unquote_to_bytes(part.encode("latin-1")).decode("utf-8", "replace") for part in parts]


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a path template such as ``/users/{id}`` into segments.

    Raises :class:`ConfigError` for empty (``{}``), unterminated (``{id``)
    or otherwise malformed parameters, and for repeated parameter names.
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()

    for part in split_path(path):
        if "{" not in part and "}" not in part:
            segments.append(LiteralSegment(part))
            continue

        if not (part.startswith("{") and part.endswith("}")):
            msg = f"Unterminated path parameter {part!r} in {path!r}"
            raise ConfigError(msg)

        name = part[1:-1]
        if not name:
            msg = f"Empty path parameter '{{}}' in {path!r}"
            raise ConfigError(msg)
        if "{" in name or "}" in name:
            msg = f"Malformed path parameter {part!r} in {path!r}"
            raise ConfigError(msg)
        if name in seen:
            msg = f"Duplicate path parameter {name!r} in {path!r}"
            raise ConfigError(msg)

        seen.add(name)
        segments.append(ParamSegment(name))

    return tuple(segments)


def normalize_method(method: str) -> str:
    """Trim and uppercase *method*.

    Raises :class:`ConfigError` when the result is empty or not an HTTP
    token.
    """
    normalized = method.strip().upper()
    if not normalized:
        msg = "HTTP method must not be empty"
        raise ConfigError(msg)
    if not _TOKEN_RE.fullmatch(normalized):
        msg = f"HTTP method {method!r} is not a valid token"
        raise ConfigError(msg)
    return normalized


# ------------------------------------------------------------------
# Compiled routes and the route table
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A configured route with its path split into matchable segments."""

    method: str
    path: str
    segments: tuple[PathSegment, ...]
    status: int
    body: Any = field(compare=False)

    @property
    def shape(self) -> tuple[str | None, ...]:
        """Literal text per segment, ``None`` for parameters.

        Two routes with the same method and shape can never be told apart.
        """
        return tuple(seg.text if isinstance(seg, LiteralSegment) else None for seg in self.segments)

    def match_path(self, parts: Sequence[str]) -> dict[str, str] | None:
        """Return captured params if *parts* fit this route's path, else ``None``."""
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for seg, part in zip(self.segments, parts):
            if isinstance(seg, LiteralSegment):
                if seg.text != part:
                    return None
            elif not part:
                return None
            else:
                params[seg.name] = part
        return params

    def __repr__(self) -> str:
        return f"CompiledRoute({self.method!r}, {self.path!r})"


class RouteTable:
    """Immutable, ordered collection of compiled routes.

    Order is configuration order and decides precedence between
    overlapping routes of different shapes.
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Sequence[CompiledRoute] = ()) -> None:
        self._routes: tuple[CompiledRoute, ...] = tuple(routes)

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        return self._routes

    def match(self, method: str, path: str) -> MatchOutcome:
        return match(self, method, path)

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({list(self._routes)!r})"


def compile_route(spec: RouteSpec) -> CompiledRoute:
    """Compile a single :class:`~mocker.config.RouteSpec`."""
    method = normalize_method(spec.method)
    if method not in KNOWN_METHODS:
        logger.warning("Non-standard HTTP method %r for %s", method, spec.path)
    return CompiledRoute(
        method=method,
        path=spec.path,
        segments=parse_path(spec.path),
        status=spec.response.status,
        body=spec.response.body,
    )


def compile_routes(specs: Sequence[RouteSpec]) -> RouteTable:
    """Compile *specs* into a :class:`RouteTable`.

    Raises :class:`ConfigError` on the first invalid spec, in configuration
    order, or when two specs share a method and path shape.
    """
    compiled: list[CompiledRoute] = []
    seen: dict[tuple[str, tuple[str | None, ...]], int] = {}

    for index, spec in enumerate(specs):
        try:
            route = compile_route(spec)
        except ConfigError as exc:
            msg = f"routes[{index}]: {exc}"
            raise ConfigError(msg) from exc

        key = (route.method, route.shape)
        if key in seen:
            first = seen[key]
            msg = (
                f"routes[{index}]: {route.method} {route.path!r} conflicts with "
                f"routes[{first}]: {compiled[first].method} {compiled[first].path!r} "
                f"(same method and path shape)"
            )
            raise ConfigError(msg)

        seen[key] = index
        compiled.append(route)

    return RouteTable(compiled)


# ------------------------------------------------------------------
# Matching
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Matched:
    route: CompiledRoute
    params: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class MethodNotAllowed:
    allowed: frozenset[str]


@dataclass(frozen=True, slots=True)
class NotFound:
    pass


MatchOutcome = Matched | MethodNotAllowed | NotFound


def match(table: RouteTable, method: str, path: str) -> MatchOutcome:
    """Resolve a request against *table*.

    The first route (in configuration order) whose path and method both
    match wins.  When only the path matches, the outcome lists every method
    registered for that path.
    """
    return match_segments(table, method, split_path(path))


def match_segments(table: RouteTable, method: str, parts: Sequence[str]) -> MatchOutcome:
    """Like :func:`match`, for a path already split into decoded segments."""
    method = method.upper()
    allowed: set[str] = set()

    for route in table:
        params = route.match_path(parts)
        if params is None:
            continue
        if route.method == method:
            return Matched(route, params)
        allowed.add(route.method)

    if allowed:
        return MethodNotAllowed(frozenset(allowed))
    return NotFound()
