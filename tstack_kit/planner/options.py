"""Option normalization.

Validates a raw :class:`EntitySpec` and resolves every default, producing the
:class:`NormalizedConfig` all downstream builders read.  Validation is
exhaustive: every problem is collected and raised together in one
:class:`PlanningFailed`.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterable, Optional, TypeVar

from ..config import ScaffoldConfig
from .errors import ConfigurationError, InvalidIdentifier, PlanningFailed, ScaffoldError
from .models import (
    HOOK_KINDS,
    MUTATING_ROUTES,
    ROUTE_KINDS,
    AuthType,
    EntitySpec,
    HookKind,
    NormalizedConfig,
    RouteKind,
)
from .naming import derive_names, is_valid_field_name, to_snake_case

logger = logging.getLogger(__name__)

_ROLE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")

# Columns every generated model already has, in snake_case.
_GENERATED_COLUMNS = frozenset({"id", "name", "created_at", "updated_at"})

E = TypeVar("E", bound=Enum)


def _lookup_key(value: str) -> str:
    return re.sub(r"[-_\s]", "", value).lower()


def _parse_members(
    raw_values: Iterable[str],
    members: tuple[E, ...],
    *,
    field: str,
    entity: Optional[str],
    errors: list[ScaffoldError],
) -> tuple[E, ...]:
    """Map raw strings to enum members, tolerating case and separators.

    ``"get-all"``, ``"GETALL"`` and ``"getAll"`` all resolve to
    ``RouteKind.GET_ALL``.  The result is deduplicated and returned in the
    canonical order of *members*.
    """
    by_key = {_lookup_key(m.value): m for m in members}
    found: set[E] = set()
    for raw in raw_values:
        member = by_key.get(_lookup_key(raw or ""))
        if member is None:
            expected = ", ".join(m.value for m in members)
            errors.append(ConfigurationError(
                f"unknown value {raw!r} (expected one of: {expected})",
                entity=entity,
                field=field,
            ))
            continue
        found.add(member)
    return tuple(m for m in members if m in found)


def _clean_roles(
    raw_roles: Iterable[str],
    *,
    field: str,
    entity: Optional[str],
    errors: list[ScaffoldError],
) -> tuple[str, ...]:
    """Strip, validate, and deduplicate role names, keeping their order."""
    roles: list[str] = []
    for raw in raw_roles:
        role = (raw or "").strip()
        if not _ROLE_RE.match(role):
            errors.append(ConfigurationError(
                f"{raw!r} is not a valid role name", entity=entity, field=field,
            ))
            continue
        if role not in roles:
            roles.append(role)
    return tuple(roles)


def normalize_options(
    spec: EntitySpec, config: ScaffoldConfig | None = None
) -> NormalizedConfig:
    """Validate *spec* and resolve its defaults.

    Args:
        spec: Raw entity description.
        config: Tool configuration supplying defaults.  ``None`` uses
            :class:`ScaffoldConfig` defaults.

    Returns:
        The canonical configuration.

    Raises:
        PlanningFailed: Carrying every :class:`InvalidIdentifier` and
            :class:`ConfigurationError` found in *spec*.
    """
    config = config or ScaffoldConfig()
    errors: list[ScaffoldError] = []
    warnings: list[str] = []

    try:
        names = derive_names(spec.name)
    except InvalidIdentifier as exc:
        errors.append(exc)
        names = None
    entity = names.entity_name if names else (spec.name or None)

    # -- auth type ---------------------------------------------------------
    auth_type: Optional[AuthType]
    try:
        auth_type = AuthType((spec.auth_type or "").strip().lower())
    except ValueError:
        expected = ", ".join(a.value for a in AuthType)
        errors.append(ConfigurationError(
            f"unknown auth type {spec.auth_type!r} (expected one of: {expected})",
            entity=entity,
            field="authType",
        ))
        auth_type = None

    # -- ownership field ---------------------------------------------------
    ownership_field: Optional[str] = spec.ownership_field
    if ownership_field is not None:
        ownership_field = ownership_field.strip()
        if not ownership_field:
            if auth_type == AuthType.OWNERSHIP:
                errors.append(ConfigurationError(
                    "ownership auth cannot use an empty ownership field",
                    entity=entity,
                    field="ownershipField",
                ))
            ownership_field = None
        elif not is_valid_field_name(ownership_field):
            errors.append(InvalidIdentifier(
                f"{ownership_field!r} is not a valid field name",
                entity=entity,
                field="ownershipField",
            ))
            ownership_field = None
        elif auth_type != AuthType.OWNERSHIP:
            warnings.append(
                f"ownershipField {ownership_field!r} has no effect unless authType is 'ownership'"
            )
    elif auth_type == AuthType.OWNERSHIP:
        ownership_field = config.default_ownership_field
    if ownership_field and to_snake_case(ownership_field) in _GENERATED_COLUMNS:
        errors.append(ConfigurationError(
            f"ownership field {ownership_field!r} clashes with a generated column "
            f"({', '.join(sorted(_GENERATED_COLUMNS))})",
            entity=entity,
            field="ownershipField",
        ))
        ownership_field = None

    # -- routes ------------------------------------------------------------
    public_routes = _parse_members(
        spec.public_routes, ROUTE_KINDS, field="publicRoutes", entity=entity, errors=errors,
    )
    disabled_routes = _parse_members(
        spec.disabled_routes, ROUTE_KINDS, field="disabledRoutes", entity=entity, errors=errors,
    )
    for kind in ROUTE_KINDS:
        if kind in public_routes and kind in disabled_routes:
            errors.append(ConfigurationError(
                f"route {kind.value!r} is listed as both public and disabled",
                entity=entity,
                field="publicRoutes",
            ))
    for kind in public_routes:
        if kind in MUTATING_ROUTES:
            warnings.append(
                f"{kind.value!r} is a mutating route and is never public; "
                "its publicRoutes entry is ignored"
            )

    # -- roles -------------------------------------------------------------
    roles = _clean_roles(spec.roles, field="roles", entity=entity, errors=errors)
    if auth_type == AuthType.ROLE and not roles and not spec.roles:
        errors.append(ConfigurationError(
            "role auth requires at least one role", entity=entity, field="roles",
        ))
    elif roles and auth_type not in (AuthType.ROLE, None):
        warnings.append("roles have no effect unless authType is 'role'")

    if spec.admin_roles is None:
        admin_roles = tuple(dict.fromkeys(config.default_admin_roles))
    else:
        admin_roles = _clean_roles(
            spec.admin_roles, field="adminRoles", entity=entity, errors=errors,
        )
        if not spec.with_admin:
            warnings.append("adminRoles has no effect without withAdmin")

    # -- hooks -------------------------------------------------------------
    hooks: tuple[HookKind, ...] = _parse_members(
        spec.hooks, HOOK_KINDS, field="hooks", entity=entity, errors=errors,
    )

    if errors or names is None or auth_type is None:
        raise PlanningFailed(errors)

    if ownership_field:
        names = names.model_copy(
            update={"ownership_field_snake": to_snake_case(ownership_field)}
        )

    for warning in warnings:
        logger.warning("%s: %s", names.entity_name, warning)

    normalized = NormalizedConfig(
        names=names,
        auth_type=auth_type,
        ownership_field=ownership_field,
        public_routes=public_routes,
        disabled_routes=disabled_routes,
        roles=roles,
        hooks=hooks,
        admin_roles=admin_roles,
        with_admin=spec.with_admin,
        with_tests=spec.with_tests,
        skip_migration=spec.skip_migration,
        warnings=tuple(warnings),
    )
    logger.debug("normalized %s: %s", names.entity_name, normalized)
    return normalized
