"""Pydantic v2 models for the scaffold planner.

Defines the raw :class:`EntitySpec` a user supplies, the canonical
:class:`NormalizedConfig` derived from it, the per-route authorization and
routing decisions, and the final :class:`GenerationPlan` handed to the
emitter.  Every model is frozen: a plan is built once per invocation and
never mutated afterwards.

All models serialise with camelCase keys (``authType``, ``publicRoutes``,
``dependsOn``) so spec files and ``tstack-kit plan`` output match the
option names used by the TypeScript project, while Python code keeps using
snake_case attribute names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class RouteKind(str, Enum):
    """The five CRUD operations a route file can expose."""
    GET_ALL = "getAll"
    GET_BY_ID = "getById"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AuthType(str, Enum):
    """Authorization strategy applied to mutating routes."""
    NONE = "none"
    OWNERSHIP = "ownership"
    ROLE = "role"
    CUSTOM = "custom"


class HookKind(str, Enum):
    """Service lifecycle hooks a generated service may override."""
    BEFORE_CREATE = "beforeCreate"
    AFTER_CREATE = "afterCreate"
    BEFORE_UPDATE = "beforeUpdate"
    AFTER_UPDATE = "afterUpdate"
    BEFORE_DELETE = "beforeDelete"
    AFTER_DELETE = "afterDelete"


class MiddlewareRef(str, Enum):
    """Middleware a generated route can mount, named after its TS export."""
    AUTH = "requireAuth"
    ROLE = "requireRole"
    CUSTOM = "customCheck"
    VALIDATE = "validate"


class ArtifactKind(str, Enum):
    """Kinds of source files a plan can emit."""
    MODEL = "model"
    DTO = "dto"
    SERVICE = "service"
    CONTROLLER = "controller"
    ROUTE = "route"
    ADMIN_ROUTE = "admin_route"
    TEST = "test"
    MIGRATION = "migration"


# Canonical orderings.  Everything that iterates route kinds or hooks goes
# through these so plans are reproducible.
ROUTE_KINDS: tuple[RouteKind, ...] = tuple(RouteKind)
READ_ROUTES: tuple[RouteKind, ...] = (RouteKind.GET_ALL, RouteKind.GET_BY_ID)
MUTATING_ROUTES: tuple[RouteKind, ...] = (
    RouteKind.CREATE,
    RouteKind.UPDATE,
    RouteKind.DELETE,
)
BODY_ROUTES: tuple[RouteKind, ...] = (RouteKind.CREATE, RouteKind.UPDATE)
HOOK_KINDS: tuple[HookKind, ...] = tuple(HookKind)
MIDDLEWARE_ORDER: tuple[MiddlewareRef, ...] = tuple(MiddlewareRef)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class EntitySpec(_FrozenModel):
    """Raw generation request for one entity.

    Field values are deliberately loose (plain strings) so that the option
    normalizer, not pydantic, decides what is valid and can report every
    problem at once.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    name: str = Field(..., description="Singular entity name, e.g. 'article'")
    auth_type: str = Field(default="none", description="none | ownership | role | custom")
    ownership_field: Optional[str] = Field(
        default=None, description="Column holding the owner's user id"
    )
    public_routes: list[str] = Field(
        default_factory=list, description="Read routes reachable without auth"
    )
    disabled_routes: list[str] = Field(
        default_factory=list, description="Routes that are not generated at all"
    )
    roles: list[str] = Field(
        default_factory=list, description="Roles allowed to mutate (role auth)"
    )
    hooks: list[str] = Field(
        default_factory=list, description="Lifecycle hook placeholders to generate"
    )
    admin_roles: Optional[list[str]] = Field(
        default=None, description="allowedRoles for the admin route"
    )
    with_admin: bool = Field(default=False, description="Generate an admin route")
    with_tests: bool = Field(default=False, description="Generate an API test file")
    skip_migration: bool = Field(default=False, description="Do not generate a migration")


# ---------------------------------------------------------------------------
# Normalized configuration
# ---------------------------------------------------------------------------

class NamingForms(_FrozenModel):
    """Every spelling of the entity name used by the templates."""
    entity_name: str = Field(..., description="camelCase singular, e.g. 'siteSetting'")
    entity_name_pascal: str = Field(..., alias="EntityName")
    entity_name_plural: str = Field(..., description="camelCase plural")
    entity_name_plural_pascal: str = Field(..., alias="EntityNamePlural")
    table_name: str = Field(..., description="snake_case plural, e.g. 'site_settings'")
    kebab_name: str = Field(..., description="kebab-case singular, used in file names")
    snake_name: str = Field(..., description="snake_case singular")
    ownership_field_snake: Optional[str] = Field(default=None)


class NormalizedConfig(_FrozenModel):
    """Validated, fully defaulted form of an :class:`EntitySpec`."""
    names: NamingForms
    auth_type: AuthType
    ownership_field: Optional[str] = None
    public_routes: tuple[RouteKind, ...] = ()
    disabled_routes: tuple[RouteKind, ...] = ()
    roles: tuple[str, ...] = ()
    hooks: tuple[HookKind, ...] = ()
    admin_roles: tuple[str, ...] = ()
    with_admin: bool = False
    with_tests: bool = False
    skip_migration: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def entity_name(self) -> str:
        return self.names.entity_name

    @property
    def ownership_field_snake(self) -> Optional[str]:
        return self.names.ownership_field_snake


# ---------------------------------------------------------------------------
# Authorization & routing decisions
# ---------------------------------------------------------------------------

class AuthRule(_FrozenModel):
    """Resolved authorization requirement for one mutating route.

    ``superadmin_bypass`` is checked first by the generated controller; the
    remaining checks only run when it does not apply.
    """
    roles: tuple[str, ...] = ()
    ownership_check: bool = False
    custom_check: bool = False
    superadmin_bypass: bool = False

    @property
    def is_open(self) -> bool:
        """True when no authorization beyond authentication is required."""
        return not (self.roles or self.ownership_check or self.custom_check)


class AuthPlan(_FrozenModel):
    """Authorization rules for the mutating routes of one entity."""
    rules: dict[RouteKind, AuthRule]
    inject_owner_on_create: bool = False
    ownership_field: Optional[str] = None

    def rule_for(self, kind: RouteKind) -> Optional[AuthRule]:
        return self.rules.get(kind)


class RouteDecision(_FrozenModel):
    """Emission, visibility, and middleware outcome for one route."""
    kind: RouteKind
    emitted: bool
    public: bool = False
    middleware_chain: tuple[MiddlewareRef, ...] = ()
    method: str = Field(..., description="HTTP verb, e.g. 'POST'")
    path: str = Field(..., description="Path relative to the entity base path")


# ---------------------------------------------------------------------------
# Generation plan
# ---------------------------------------------------------------------------

class TemplateBinding(_FrozenModel):
    """Template to render plus the context it is rendered with."""
    template: str
    context: dict[str, Any] = Field(default_factory=dict)


class ArtifactDescriptor(_FrozenModel):
    """One file the emitter will write."""
    kind: ArtifactKind
    target_identifier: str = Field(..., description="Project-relative output path")
    depends_on: tuple[ArtifactKind, ...] = ()
    content: TemplateBinding


class GenerationPlan(_FrozenModel):
    """Ordered, dependency-linked set of artifacts for one entity."""
    config: NormalizedConfig
    auth: AuthPlan
    routes: dict[RouteKind, RouteDecision]
    artifacts: tuple[ArtifactDescriptor, ...] = ()
    warnings: tuple[str, ...] = ()

    def artifact(self, kind: ArtifactKind) -> Optional[ArtifactDescriptor]:
        """Return the descriptor of *kind*, or ``None`` if not planned."""
        for descriptor in self.artifacts:
            if descriptor.kind == kind:
                return descriptor
        return None

    def dependencies_of(self, descriptor: ArtifactDescriptor) -> list[ArtifactDescriptor]:
        """Resolve ``depends_on`` references to descriptors present in the plan."""
        resolved = []
        for kind in descriptor.depends_on:
            dep = self.artifact(kind)
            if dep is not None:
                resolved.append(dep)
        return resolved

    def emitted_routes(self) -> list[RouteDecision]:
        """Route decisions that produce a handler, in canonical order."""
        return [self.routes[k] for k in ROUTE_KINDS if self.routes[k].emitted]

    def to_json(self) -> str:
        """Serialise the plan deterministically (camelCase keys)."""
        return self.model_dump_json(by_alias=True, indent=2)
