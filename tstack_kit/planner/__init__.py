"""tstack-kit scaffold planner.

Computes, from a declarative entity description, which files to generate,
how their routes are protected, and how the pieces reference each other.
No files are touched here; see :mod:`tstack_kit.scaffolder` for emission.

Usage::

    from tstack_kit.planner import EntitySpec, plan_entity

    plan = plan_entity(EntitySpec(
        name="article",
        auth_type="ownership",
        ownership_field="authorId",
        public_routes=["getAll", "getById"],
    ))
    print(plan.to_json())
"""

from tstack_kit.planner.engine import plan_entities, plan_entity
from tstack_kit.planner.errors import (
    ConfigurationError,
    EmissionError,
    InvalidIdentifier,
    PlanError,
    PlanningFailed,
    ScaffoldError,
)
from tstack_kit.planner.models import (
    ArtifactDescriptor,
    ArtifactKind,
    AuthPlan,
    AuthRule,
    AuthType,
    EntitySpec,
    GenerationPlan,
    HookKind,
    MiddlewareRef,
    NamingForms,
    NormalizedConfig,
    RouteDecision,
    RouteKind,
)

__all__ = [
    "plan_entity",
    "plan_entities",
    "ArtifactDescriptor",
    "ArtifactKind",
    "AuthPlan",
    "AuthRule",
    "AuthType",
    "EntitySpec",
    "GenerationPlan",
    "HookKind",
    "MiddlewareRef",
    "NamingForms",
    "NormalizedConfig",
    "RouteDecision",
    "RouteKind",
    "ConfigurationError",
    "EmissionError",
    "InvalidIdentifier",
    "PlanError",
    "PlanningFailed",
    "ScaffoldError",
]
