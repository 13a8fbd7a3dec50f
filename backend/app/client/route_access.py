"""Route Access - central table classifying client navigation paths.

Invariants:
    - Every path classifies to exactly one RouteAccess
    - Rules are checked in table order; the first match wins
    - Auth surfaces are listed before protected ones, so /login never counts as protected
"""

from dataclasses import dataclass
from enum import Enum


class RouteAccess(str, Enum):
    PUBLIC = "public"
    AUTH = "auth"
    PROTECTED = "protected"


class MatchKind(str, Enum):
    EXACT = "exact"        # whole normalized path
    SEGMENT = "segment"    # any single path segment


@dataclass(frozen=True)
class RouteRule:
    pattern: str
    access: RouteAccess
    kind: MatchKind = MatchKind.SEGMENT

    def matches(self, path: str, segments: list[str]) -> bool:
        if self.kind is MatchKind.EXACT:
            return path == self.pattern
        return self.pattern in segments


ROUTE_TABLE: tuple[RouteRule, ...] = (
    RouteRule("/login", RouteAccess.AUTH, MatchKind.EXACT),
    RouteRule("/register", RouteAccess.AUTH, MatchKind.EXACT),
    RouteRule("admin", RouteAccess.PROTECTED),
    RouteRule("profile", RouteAccess.PROTECTED),
    RouteRule("orders", RouteAccess.PROTECTED),
    RouteRule("checkout", RouteAccess.PROTECTED),
)


def normalize_path(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def classify_path(
    path: str, table: tuple[RouteRule, ...] = ROUTE_TABLE,
) -> RouteAccess:
    normalized = normalize_path(path)
    segments = [s for s in normalized.split("/") if s]
    for rule in table:
        if rule.matches(normalized, segments):
            return rule.access
    return RouteAccess.PUBLIC
