"""Route Modules - mount points for the storefront's route-handler groups.

Invariants:
    - Each handler group is mounted wholesale at /api/<group>
    - Only the groups named in ROUTE_GROUPS can be mounted
    - Handler groups are supplied by the caller; this package defines none of them
"""

from collections.abc import Mapping

from fastapi import APIRouter, FastAPI

ROUTE_GROUPS = (
    "auth",
    "products",
    "categories",
    "cart",
    "orders",
    "users",
    "reviews",
    "admin",
)


def group_prefix(name: str) -> str:
    return f"/api/{name}"


def include_route_groups(app: FastAPI, groups: Mapping[str, APIRouter]) -> None:
    """Attach handler groups at their /api/<name> prefixes."""
    unknown = sorted(set(groups) - set(ROUTE_GROUPS))
    if unknown:
        raise ValueError(f"Unknown route group(s): {', '.join(unknown)}")
    for name in ROUTE_GROUPS:
        router = groups.get(name)
        if router is not None:
            app.include_router(router, prefix=group_prefix(name), tags=[name])
