"""tstack-kit scaffolder -- renders generation plans into source files.

Takes the :class:`~tstack_kit.planner.models.GenerationPlan` produced by the
planner and writes the model, DTO, service, controller, route, admin route,
test and migration files it describes into a tstack project.

Quick usage::

    from tstack_kit.planner import EntitySpec, plan_entity
    from tstack_kit.scaffolder import ScaffoldEmitter

    plan = plan_entity(EntitySpec(name="product", with_tests=True))
    written = await ScaffoldEmitter("/path/to/project").emit(plan)
"""

from tstack_kit.scaffolder.emitter import RenderedArtifact, ScaffoldEmitter
from tstack_kit.scaffolder.templates import TemplateRenderer

__all__ = [
    "RenderedArtifact",
    "ScaffoldEmitter",
    "TemplateRenderer",
]
