"""tstack-kit: scaffold planning and generation for tstack CRUD entities.

Turns a small declarative entity description (name, auth mode, ownership
field, public/disabled routes, lifecycle hooks) into a fully resolved
generation plan, then renders that plan into model, DTO, service,
controller, route, admin route, test, and migration files.

Quick usage::

    from tstack_kit.planner import EntitySpec, plan_entity

    plan = plan_entity(EntitySpec(name="article", auth_type="ownership"))
    for artifact in plan.artifacts:
        print(artifact.kind, artifact.target_identifier)
"""

__version__ = "0.3.0"
