"""Authorization plan builder.

Derives one :class:`AuthRule` per mutating route from the normalized auth
mode.  The builder is total over valid configurations and never raises.
"""

from __future__ import annotations

import logging

from .models import MUTATING_ROUTES, AuthPlan, AuthRule, AuthType, NormalizedConfig, RouteKind

logger = logging.getLogger(__name__)


def _rule_for(config: NormalizedConfig, kind: RouteKind) -> AuthRule:
    if config.auth_type == AuthType.ROLE:
        return AuthRule(roles=config.roles, superadmin_bypass=True)
    if config.auth_type == AuthType.OWNERSHIP:
        # A record being created has no owner yet; the owner is injected
        # from the caller's identity instead.
        if kind == RouteKind.CREATE:
            return AuthRule()
        return AuthRule(ownership_check=True, superadmin_bypass=True)
    if config.auth_type == AuthType.CUSTOM:
        return AuthRule(custom_check=True, superadmin_bypass=True)
    return AuthRule()


def build_auth_plan(config: NormalizedConfig) -> AuthPlan:
    """Build the authorization rules for ``create``, ``update`` and ``delete``."""
    rules = {kind: _rule_for(config, kind) for kind in MUTATING_ROUTES}
    ownership = config.auth_type == AuthType.OWNERSHIP
    plan = AuthPlan(
        rules=rules,
        inject_owner_on_create=ownership,
        ownership_field=config.ownership_field if ownership else None,
    )
    logger.debug("auth plan for %s: %s", config.entity_name, plan)
    return plan
