"""Plan validation.

Last consistency pass over an assembled :class:`GenerationPlan` before it is
handed to the emitter.  Some checks duplicate guarantees the normalizer
already gives; they catch regressions in the builders rather than user
mistakes.
"""

from __future__ import annotations

import logging

from .errors import PlanError
from .models import ArtifactKind, GenerationPlan, MiddlewareRef

logger = logging.getLogger(__name__)


def _check_dependencies(plan: GenerationPlan, entity: str) -> list[PlanError]:
    errors: list[PlanError] = []
    seen: set[ArtifactKind] = set()
    paths: set[str] = set()
    for descriptor in plan.artifacts:
        if descriptor.kind in seen:
            errors.append(PlanError(
                "artifact planned more than once",
                entity=entity,
                artifact=descriptor.kind.value,
            ))
        if descriptor.target_identifier in paths:
            errors.append(PlanError(
                f"target {descriptor.target_identifier!r} is written by two artifacts",
                entity=entity,
                artifact=descriptor.kind.value,
            ))
        for dep in descriptor.depends_on:
            if plan.artifact(dep) is None:
                errors.append(PlanError(
                    f"depends on {dep.value!r}, which is not in the plan",
                    entity=entity,
                    artifact=descriptor.kind.value,
                ))
            elif dep not in seen:
                # Dependencies must be emitted first; this also rules out cycles.
                errors.append(PlanError(
                    f"depends on {dep.value!r}, which is planned after it",
                    entity=entity,
                    artifact=descriptor.kind.value,
                ))
        seen.add(descriptor.kind)
        paths.add(descriptor.target_identifier)
    if plan.artifact(ArtifactKind.ROUTE) is None:
        errors.append(PlanError("plan has no route artifact", entity=entity))
    return errors


def _check_auth(plan: GenerationPlan, entity: str) -> list[PlanError]:
    errors: list[PlanError] = []
    for kind, rule in plan.auth.rules.items():
        if rule.ownership_check and not plan.config.ownership_field:
            errors.append(PlanError(
                f"{kind.value!r} requires an ownership check but no ownership field is set",
                entity=entity,
                field="ownershipField",
            ))
    for kind, decision in plan.routes.items():
        if decision.public and MiddlewareRef.AUTH in decision.middleware_chain:
            errors.append(PlanError(
                f"public route {kind.value!r} mounts the auth middleware",
                entity=entity,
            ))
        if not decision.emitted and decision.middleware_chain:
            errors.append(PlanError(
                f"disabled route {kind.value!r} has middleware",
                entity=entity,
            ))
    return errors


def _check_admin(plan: GenerationPlan, entity: str) -> list[PlanError]:
    admin = plan.artifact(ArtifactKind.ADMIN_ROUTE)
    if admin is None:
        return []
    if not admin.content.context.get("allowed_roles"):
        return [PlanError(
            "admin route has no allowedRoles; an unrestricted admin panel is not generated",
            entity=entity,
            field="adminRoles",
            artifact=admin.kind.value,
        )]
    return []


def validate_plan(plan: GenerationPlan) -> list[PlanError]:
    """Check *plan* for internal consistency.

    Returns:
        Every problem found; an empty list means the plan is safe to emit.
    """
    entity = plan.config.entity_name
    errors = [
        *_check_dependencies(plan, entity),
        *_check_auth(plan, entity),
        *_check_admin(plan, entity),
    ]
    if errors:
        logger.debug("plan for %s failed validation with %d errors", entity, len(errors))
    return errors
