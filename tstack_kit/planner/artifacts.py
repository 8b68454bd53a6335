"""Artifact graph builder.

Assembles the ordered list of files to generate for one entity, the
dependency edges between them, and the template context each one is
rendered with.  The output depends only on its inputs: identical inputs
give identical plans, down to dict ordering.
"""

from __future__ import annotations

import copy
import logging
import posixpath
from typing import Any

from ..config import ScaffoldConfig
from .models import (
    MIDDLEWARE_ORDER,
    ArtifactDescriptor,
    ArtifactKind,
    AuthPlan,
    GenerationPlan,
    MiddlewareRef,
    NormalizedConfig,
    RouteDecision,
    RouteKind,
    TemplateBinding,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Static graph shape
# ---------------------------------------------------------------------------

DEPENDENCIES: dict[ArtifactKind, tuple[ArtifactKind, ...]] = {
    ArtifactKind.MODEL: (),
    ArtifactKind.DTO: (ArtifactKind.MODEL,),
    ArtifactKind.SERVICE: (ArtifactKind.MODEL, ArtifactKind.DTO),
    ArtifactKind.CONTROLLER: (ArtifactKind.SERVICE,),
    ArtifactKind.ROUTE: (ArtifactKind.CONTROLLER, ArtifactKind.DTO),
    ArtifactKind.ADMIN_ROUTE: (ArtifactKind.MODEL,),
    ArtifactKind.TEST: (ArtifactKind.ROUTE,),
    ArtifactKind.MIGRATION: (ArtifactKind.MODEL,),
}

TEMPLATES: dict[ArtifactKind, str] = {
    ArtifactKind.MODEL: "entity/model.ts.j2",
    ArtifactKind.DTO: "entity/dto.ts.j2",
    ArtifactKind.SERVICE: "entity/service.ts.j2",
    ArtifactKind.CONTROLLER: "entity/controller.ts.j2",
    ArtifactKind.ROUTE: "entity/route.ts.j2",
    ArtifactKind.ADMIN_ROUTE: "entity/admin_route.ts.j2",
    ArtifactKind.TEST: "entity/test.ts.j2",
    ArtifactKind.MIGRATION: "entity/migration.sql.j2",
}

_FILE_SUFFIXES: dict[ArtifactKind, str] = {
    ArtifactKind.MODEL: "model.ts",
    ArtifactKind.DTO: "dto.ts",
    ArtifactKind.SERVICE: "service.ts",
    ArtifactKind.CONTROLLER: "controller.ts",
    ArtifactKind.ROUTE: "route.ts",
    ArtifactKind.ADMIN_ROUTE: "admin.route.ts",
    ArtifactKind.TEST: "test.ts",
}

_MIDDLEWARE_MODULES: dict[MiddlewareRef, str] = {
    MiddlewareRef.AUTH: "middleware/requireAuth.ts",
    MiddlewareRef.ROLE: "middleware/requireRole.ts",
    MiddlewareRef.VALIDATE: "middleware/validate.ts",
}


def target_path(kind: ArtifactKind, config: NormalizedConfig, settings: ScaffoldConfig) -> str:
    """Project-relative output path for an artifact."""
    names = config.names
    if kind == ArtifactKind.MIGRATION:
        return posixpath.join(settings.migrations_dir, f"create_{names.table_name}.sql")
    return posixpath.join(
        settings.entities_dir,
        names.table_name,
        f"{names.kebab_name}.{_FILE_SUFFIXES[kind]}",
    )


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------

def _import(names: list[str], source: str) -> dict[str, Any]:
    return {"names": names, "source": source}


def _shared(settings: ScaffoldConfig, entity_dir: str, module: str) -> str:
    return posixpath.relpath(posixpath.join(settings.shared_dir, module), entity_dir)


def _route_entry(decision: RouteDecision) -> dict[str, Any]:
    return {
        "kind": decision.kind.value,
        "method": decision.method,
        "path": decision.path,
        "public": decision.public,
        "middleware": [m.value for m in decision.middleware_chain],
    }


def _role_sets(
    auth: AuthPlan, handlers: list[RouteKind], settings: ScaffoldConfig
) -> dict[str, list[str]]:
    """Roles passed to ``requireRole`` per route.

    The superadmin role is added wherever the rule grants a bypass; the
    middleware runs before the controller's bypass check.
    """
    role_sets: dict[str, list[str]] = {}
    for kind in handlers:
        rule = auth.rules.get(kind)
        if rule is None or not rule.roles:
            continue
        roles = list(rule.roles)
        if rule.superadmin_bypass and settings.superadmin_role not in roles:
            roles.append(settings.superadmin_role)
        role_sets[kind.value] = roles
    return role_sets


def _common_context(config: NormalizedConfig, settings: ScaffoldConfig) -> dict[str, Any]:
    names = config.names
    return {
        "names": names.model_dump(),
        "entity_dir": posixpath.join(settings.entities_dir, names.table_name),
        "base_path": "/" + names.table_name.replace("_", "-"),
        "auth_type": config.auth_type.value,
        "ownership_field": config.ownership_field,
        "ownership_field_snake": config.ownership_field_snake,
    }


def _route_imports(
    config: NormalizedConfig,
    emitted: list[RouteDecision],
    settings: ScaffoldConfig,
    entity_dir: str,
) -> list[dict[str, Any]]:
    names = config.names
    used = {m for d in emitted for m in d.middleware_chain}
    imports = [
        _import(["Hono"], "hono"),
        _import([f"{names.entity_name_pascal}ControllerStatic"], f"./{names.kebab_name}.controller.ts"),
    ]
    schemas = [
        f"{verb}{names.entity_name_pascal}Schema"
        for verb, kind in (("Create", RouteKind.CREATE), ("Update", RouteKind.UPDATE))
        if any(d.kind == kind for d in emitted)
    ]
    if schemas:
        imports.append(_import(schemas, f"./{names.kebab_name}.dto.ts"))
    for middleware in MIDDLEWARE_ORDER:
        if middleware in used and middleware in _MIDDLEWARE_MODULES:
            imports.append(_import(
                [middleware.value],
                _shared(settings, entity_dir, _MIDDLEWARE_MODULES[middleware]),
            ))
    return imports


def _controller_imports(
    config: NormalizedConfig,
    auth: AuthPlan,
    handlers: list[RouteKind],
    settings: ScaffoldConfig,
    entity_dir: str,
) -> list[dict[str, Any]]:
    names = config.names
    imports = []
    custom = any(
        auth.rules[k].custom_check for k in handlers if k in auth.rules
    )
    owner_injected = auth.inject_owner_on_create and RouteKind.CREATE in handlers
    hono_types = []
    if custom or owner_injected:
        hono_types.append("Context")
    if custom:
        hono_types.append("Next")
    if hono_types:
        imports.append(_import(hono_types, "hono"))
    imports.append(_import([f"{names.entity_name_pascal}Service"], f"./{names.kebab_name}.service.ts"))
    if owner_injected:
        imports.append(_import(["ApiResponse"], _shared(settings, entity_dir, "utils/response.ts")))
    imports.append(_import(["BaseController"], _shared(settings, entity_dir, "controllers/base.controller.ts")))
    errors = []
    if owner_injected:
        errors.append("BadRequestError")
    if custom:
        errors.append("ForbiddenError")
    if errors:
        imports.append(_import(errors, _shared(settings, entity_dir, "utils/errors.ts")))
    return imports


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_generation_plan(
    config: NormalizedConfig,
    auth: AuthPlan,
    routes: dict[RouteKind, RouteDecision],
    settings: ScaffoldConfig | None = None,
) -> GenerationPlan:
    """Assemble the ordered artifact list for one entity.

    Model, DTO, service, controller and route are always planned, in that
    order.  The admin route, test and migration follow when requested.
    """
    settings = settings or ScaffoldConfig()
    names = config.names
    common = _common_context(config, settings)
    entity_dir = common["entity_dir"]

    emitted = [d for d in routes.values() if d.emitted]
    handlers = [d.kind for d in emitted]
    emitted_kinds = set(handlers)
    owner_injected = auth.inject_owner_on_create and RouteKind.CREATE in emitted_kinds

    contexts: dict[ArtifactKind, dict[str, Any]] = {}

    contexts[ArtifactKind.MODEL] = copy.deepcopy(common)

    contexts[ArtifactKind.DTO] = {
        **copy.deepcopy(common),
        "create_schema": RouteKind.CREATE in emitted_kinds,
        "update_schema": RouteKind.UPDATE in emitted_kinds,
        "omit_owner": owner_injected,
    }

    contexts[ArtifactKind.SERVICE] = {
        **copy.deepcopy(common),
        "hooks": [h.value for h in config.hooks],
        "inject_owner": owner_injected,
        "imports": [
            _import(["BaseService"], _shared(settings, entity_dir, "services/base.service.ts")),
        ],
    }

    contexts[ArtifactKind.CONTROLLER] = {
        **copy.deepcopy(common),
        "handlers": [k.value for k in handlers],
        "auth_rules": {k.value: rule.model_dump() for k, rule in auth.rules.items()},
        "inject_owner": owner_injected,
        "custom_check": any(
            auth.rules[k].custom_check for k in handlers if k in auth.rules
        ),
        "superadmin_role": settings.superadmin_role,
        "imports": _controller_imports(config, auth, handlers, settings, entity_dir),
    }

    role_sets = _role_sets(auth, handlers, settings)
    contexts[ArtifactKind.ROUTE] = {
        **copy.deepcopy(common),
        "routes": [_route_entry(d) for d in emitted],
        "disabled": [d.kind.value for d in routes.values() if not d.emitted],
        "public_routes": [d.kind.value for d in emitted if d.public],
        "role_sets": copy.deepcopy(role_sets),
        "imports": _route_imports(config, emitted, settings, entity_dir),
    }

    planned = [
        ArtifactKind.MODEL,
        ArtifactKind.DTO,
        ArtifactKind.SERVICE,
        ArtifactKind.CONTROLLER,
        ArtifactKind.ROUTE,
    ]
    if config.with_admin:
        planned.append(ArtifactKind.ADMIN_ROUTE)
        contexts[ArtifactKind.ADMIN_ROUTE] = {
            **copy.deepcopy(common),
            "allowed_roles": list(config.admin_roles),
            "admin_base_url": f"{settings.admin_base_url}/{names.table_name}",
            "imports": [
                _import(["db"], posixpath.relpath(settings.database_module, entity_dir)),
                _import([names.entity_name_plural], f"./{names.kebab_name}.model.ts"),
                _import(["requireAuth"], _shared(settings, entity_dir, "middleware/requireAuth.ts")),
                _import(["AdminRouteFactory"], _shared(settings, entity_dir, "routes/admin-route.factory.ts")),
            ],
        }
    if config.with_tests:
        planned.append(ArtifactKind.TEST)
        contexts[ArtifactKind.TEST] = {
            **copy.deepcopy(common),
            "routes": [_route_entry(d) for d in emitted],
            "disabled_routes": [
                {"kind": d.kind.value, "method": d.method, "path": d.path}
                for d in routes.values()
                if not d.emitted
            ],
            "superadmin_role": settings.superadmin_role,
            "role_sets": copy.deepcopy(role_sets),
            "app_module": posixpath.relpath(settings.app_module, entity_dir),
        }
    if not config.skip_migration:
        planned.append(ArtifactKind.MIGRATION)
        contexts[ArtifactKind.MIGRATION] = copy.deepcopy(common)

    artifacts = tuple(
        ArtifactDescriptor(
            kind=kind,
            target_identifier=target_path(kind, config, settings),
            depends_on=DEPENDENCIES[kind],
            content=TemplateBinding(template=TEMPLATES[kind], context=contexts[kind]),
        )
        for kind in planned
    )
    logger.debug(
        "planned %d artifacts for %s: %s",
        len(artifacts),
        names.entity_name,
        ", ".join(a.kind.value for a in artifacts),
    )
    return GenerationPlan(
        config=config,
        auth=auth,
        routes=routes,
        artifacts=artifacts,
        warnings=config.warnings,
    )
