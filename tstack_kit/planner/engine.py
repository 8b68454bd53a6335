"""Planning pipeline.

Runs normalizer, auth and route builders, artifact graph builder and
validator in sequence.  A call either returns a complete
:class:`GenerationPlan` or raises :class:`PlanningFailed` listing every
error; it never returns a partially valid plan.

Planning is pure and keeps no shared state, so independent entities can be
planned concurrently with :func:`plan_entities`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from ..config import ScaffoldConfig
from .artifacts import build_generation_plan
from .auth import build_auth_plan
from .errors import ConfigurationError, PlanningFailed, ScaffoldError
from .models import EntitySpec, GenerationPlan
from .options import normalize_options
from .routes import build_route_plan
from .validator import validate_plan

logger = logging.getLogger(__name__)


def plan_entity(spec: EntitySpec, config: ScaffoldConfig | None = None) -> GenerationPlan:
    """Compute the generation plan for one entity.

    Raises:
        PlanningFailed: If *spec* is invalid or the assembled plan fails
            validation.
    """
    config = config or ScaffoldConfig()
    normalized = normalize_options(spec, config)
    auth = build_auth_plan(normalized)
    routes = build_route_plan(normalized, auth)
    plan = build_generation_plan(normalized, auth, routes, config)

    errors = validate_plan(plan)
    if errors:
        raise PlanningFailed(errors)
    logger.info(
        "planned %s: %d artifacts, %d routes",
        normalized.entity_name,
        len(plan.artifacts),
        len(plan.emitted_routes()),
    )
    return plan


async def plan_entities(
    specs: Iterable[EntitySpec], config: ScaffoldConfig | None = None
) -> list[GenerationPlan]:
    """Plan several entities concurrently.

    Each entity is planned in a worker thread.  If any entity fails, a
    single :class:`PlanningFailed` carrying the errors of *every* failing
    entity is raised and no plans are returned.
    """
    config = config or ScaffoldConfig()
    spec_list = list(specs)
    results = await asyncio.gather(
        *(asyncio.to_thread(plan_entity, spec, config) for spec in spec_list),
        return_exceptions=True,
    )

    plans: list[GenerationPlan] = []
    errors: list[ScaffoldError] = []
    for spec, result in zip(spec_list, results):
        if isinstance(result, PlanningFailed):
            errors.extend(result.errors)
        elif isinstance(result, BaseException):
            raise result
        else:
            plans.append(result)

    seen: dict[str, str] = {}
    for plan in plans:
        table = plan.config.names.table_name
        if table in seen:
            errors.append(ConfigurationError(
                f"entity {plan.config.entity_name!r} maps to table {table!r}, "
                f"already used by {seen[table]!r}",
                entity=plan.config.entity_name,
                field="name",
            ))
        else:
            seen[table] = plan.config.entity_name

    if errors:
        raise PlanningFailed(errors)
    return plans
