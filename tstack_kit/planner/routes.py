"""Route plan builder.

Resolves, for each of the five CRUD routes, whether it is generated, whether
it is public, and the middleware chain mounted in front of its handler.

Middleware always appears in this order::

    requireAuth -> requireRole -> customCheck -> validate

so later middleware can assume an authenticated, role-checked request.
"""

from __future__ import annotations

import logging

from .models import (
    BODY_ROUTES,
    READ_ROUTES,
    ROUTE_KINDS,
    AuthPlan,
    MiddlewareRef,
    NormalizedConfig,
    RouteDecision,
    RouteKind,
)

logger = logging.getLogger(__name__)

# HTTP verb and path (relative to the entity base path) per route.
ROUTE_ENDPOINTS: dict[RouteKind, tuple[str, str]] = {
    RouteKind.GET_ALL: ("GET", "/"),
    RouteKind.GET_BY_ID: ("GET", "/:id"),
    RouteKind.CREATE: ("POST", "/"),
    RouteKind.UPDATE: ("PUT", "/:id"),
    RouteKind.DELETE: ("DELETE", "/:id"),
}


def decide_route(
    kind: RouteKind, config: NormalizedConfig, auth: AuthPlan
) -> RouteDecision:
    """Resolve a single route."""
    method, path = ROUTE_ENDPOINTS[kind]
    if kind in config.disabled_routes:
        return RouteDecision(kind=kind, emitted=False, method=method, path=path)

    # Mutating routes are never public, whatever publicRoutes says.
    public = kind in READ_ROUTES and kind in config.public_routes

    chain: list[MiddlewareRef] = []
    if not public:
        chain.append(MiddlewareRef.AUTH)
    rule = auth.rule_for(kind)
    if rule is not None and rule.roles:
        chain.append(MiddlewareRef.ROLE)
    if rule is not None and rule.custom_check:
        chain.append(MiddlewareRef.CUSTOM)
    if kind in BODY_ROUTES:
        chain.append(MiddlewareRef.VALIDATE)

    return RouteDecision(
        kind=kind,
        emitted=True,
        public=public,
        middleware_chain=tuple(chain),
        method=method,
        path=path,
    )


def build_route_plan(
    config: NormalizedConfig, auth: AuthPlan
) -> dict[RouteKind, RouteDecision]:
    """Resolve all five routes, keyed in canonical order."""
    decisions = {kind: decide_route(kind, config, auth) for kind in ROUTE_KINDS}
    logger.debug(
        "routes for %s: %s",
        config.entity_name,
        ", ".join(
            f"{d.kind.value}={'public' if d.public else 'auth'}" if d.emitted
            else f"{d.kind.value}=disabled"
            for d in decisions.values()
        ),
    )
    return decisions
