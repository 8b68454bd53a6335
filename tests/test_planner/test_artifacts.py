"""Unit tests for the artifact graph builder (tstack_kit.planner.artifacts).

Tests cover:
- Always-planned artifacts and their order
- Optional admin route / test / migration
- Dependency edges and target paths
- Template bindings: hooks, auth rules, route wiring, imports
"""

from __future__ import annotations

import pytest

from tstack_kit.config import ScaffoldConfig
from tstack_kit.planner.artifacts import DEPENDENCIES, build_generation_plan
from tstack_kit.planner.auth import build_auth_plan
from tstack_kit.planner.models import ArtifactKind, EntitySpec
from tstack_kit.planner.options import normalize_options
from tstack_kit.planner.routes import build_route_plan

CORE = [
    ArtifactKind.MODEL,
    ArtifactKind.DTO,
    ArtifactKind.SERVICE,
    ArtifactKind.CONTROLLER,
    ArtifactKind.ROUTE,
]


def _plan(spec: EntitySpec, settings: ScaffoldConfig | None = None):
    config = normalize_options(spec, settings)
    auth = build_auth_plan(config)
    routes = build_route_plan(config, auth)
    return build_generation_plan(config, auth, routes, settings)


def _context(plan, kind):
    return plan.artifact(kind).content.context


def _import_sources(context) -> list[str]:
    return [imp["source"] for imp in context["imports"]]


def _imported_names(context) -> list[str]:
    return [name for imp in context["imports"] for name in imp["names"]]


# ---------------------------------------------------------------------------
# Artifact list
# ---------------------------------------------------------------------------


class TestArtifactList:
    @pytest.mark.unit
    def test_core_artifacts_and_migration_by_default(self):
        plan = _plan(EntitySpec(name="product"))
        assert [a.kind for a in plan.artifacts] == CORE + [ArtifactKind.MIGRATION]

    @pytest.mark.unit
    def test_skip_migration(self):
        plan = _plan(EntitySpec(name="product", skip_migration=True))
        assert [a.kind for a in plan.artifacts] == CORE

    @pytest.mark.unit
    def test_all_optional_artifacts(self, full_spec):
        plan = _plan(full_spec)
        assert [a.kind for a in plan.artifacts] == CORE + [
            ArtifactKind.ADMIN_ROUTE,
            ArtifactKind.TEST,
            ArtifactKind.MIGRATION,
        ]

    @pytest.mark.unit
    def test_dependencies(self, full_spec):
        plan = _plan(full_spec)
        for artifact in plan.artifacts:
            assert artifact.depends_on == DEPENDENCIES[artifact.kind]
        assert plan.artifact(ArtifactKind.MODEL).depends_on == ()
        assert plan.artifact(ArtifactKind.ROUTE).depends_on == (
            ArtifactKind.CONTROLLER,
            ArtifactKind.DTO,
        )
        assert plan.artifact(ArtifactKind.TEST).depends_on == (ArtifactKind.ROUTE,)

    @pytest.mark.unit
    def test_dependencies_precede_dependents(self, full_spec):
        plan = _plan(full_spec)
        order = [a.kind for a in plan.artifacts]
        for artifact in plan.artifacts:
            for dep in artifact.depends_on:
                assert order.index(dep) < order.index(artifact.kind)

    @pytest.mark.unit
    def test_dependencies_of_resolves_descriptors(self, full_spec):
        plan = _plan(full_spec)
        service = plan.artifact(ArtifactKind.SERVICE)
        deps = plan.dependencies_of(service)
        assert [d.kind for d in deps] == [ArtifactKind.MODEL, ArtifactKind.DTO]


class TestTargetPaths:
    @pytest.mark.unit
    def test_article_paths(self, article_spec):
        plan = _plan(article_spec.model_copy(update={"with_admin": True, "with_tests": True}))
        paths = {a.kind: a.target_identifier for a in plan.artifacts}
        assert paths[ArtifactKind.MODEL] == "src/entities/articles/article.model.ts"
        assert paths[ArtifactKind.DTO] == "src/entities/articles/article.dto.ts"
        assert paths[ArtifactKind.SERVICE] == "src/entities/articles/article.service.ts"
        assert paths[ArtifactKind.CONTROLLER] == "src/entities/articles/article.controller.ts"
        assert paths[ArtifactKind.ROUTE] == "src/entities/articles/article.route.ts"
        assert paths[ArtifactKind.ADMIN_ROUTE] == "src/entities/articles/article.admin.route.ts"
        assert paths[ArtifactKind.TEST] == "src/entities/articles/article.test.ts"
        assert paths[ArtifactKind.MIGRATION] == "migrations/create_articles.sql"

    @pytest.mark.unit
    def test_multi_word_paths(self):
        plan = _plan(EntitySpec(name="SiteSetting"))
        assert plan.artifact(ArtifactKind.MODEL).target_identifier == (
            "src/entities/site_settings/site-setting.model.ts"
        )

    @pytest.mark.unit
    def test_custom_layout(self):
        settings = ScaffoldConfig(entities_dir="app/modules", migrations_dir="db/migrations")
        plan = _plan(EntitySpec(name="product"), settings)
        assert plan.artifact(ArtifactKind.MODEL).target_identifier == (
            "app/modules/products/product.model.ts"
        )
        assert plan.artifact(ArtifactKind.MIGRATION).target_identifier == (
            "db/migrations/create_products.sql"
        )


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------


class TestBindings:
    @pytest.mark.unit
    def test_templates(self, full_spec):
        plan = _plan(full_spec)
        assert plan.artifact(ArtifactKind.ROUTE).content.template == "entity/route.ts.j2"
        assert plan.artifact(ArtifactKind.MIGRATION).content.template == "entity/migration.sql.j2"

    @pytest.mark.unit
    def test_service_hooks_only_requested(self):
        plan = _plan(EntitySpec(name="post", hooks=["afterDelete", "beforeCreate"]))
        assert _context(plan, ArtifactKind.SERVICE)["hooks"] == ["beforeCreate", "afterDelete"]

    @pytest.mark.unit
    def test_service_no_hooks(self):
        plan = _plan(EntitySpec(name="post"))
        assert _context(plan, ArtifactKind.SERVICE)["hooks"] == []

    @pytest.mark.unit
    def test_controller_receives_full_auth_rules(self, user_spec):
        plan = _plan(user_spec)
        rules = _context(plan, ArtifactKind.CONTROLLER)["auth_rules"]
        assert list(rules) == ["create", "update", "delete"]
        assert list(rules["update"]["roles"]) == ["admin", "superadmin"]
        assert rules["update"]["superadmin_bypass"] is True

    @pytest.mark.unit
    def test_route_receives_emitted_decisions(self, article_spec):
        plan = _plan(article_spec)
        context = _context(plan, ArtifactKind.ROUTE)
        assert [r["kind"] for r in context["routes"]] == [
            "getAll", "getById", "create", "update", "delete",
        ]
        assert context["public_routes"] == ["getAll", "getById"]
        assert context["routes"][2]["middleware"] == ["requireAuth", "validate"]
        assert context["base_path"] == "/articles"

    @pytest.mark.unit
    def test_read_only_entity_excludes_disabled_wiring(self, category_spec):
        plan = _plan(category_spec)
        controller = _context(plan, ArtifactKind.CONTROLLER)
        route = _context(plan, ArtifactKind.ROUTE)
        dto = _context(plan, ArtifactKind.DTO)
        assert controller["handlers"] == ["getAll", "getById"]
        assert [r["kind"] for r in route["routes"]] == ["getAll", "getById"]
        assert route["disabled"] == ["create", "update", "delete"]
        assert dto["create_schema"] is False
        assert dto["update_schema"] is False

    @pytest.mark.unit
    def test_owner_injection(self, article_spec):
        plan = _plan(article_spec)
        assert _context(plan, ArtifactKind.CONTROLLER)["inject_owner"] is True
        assert _context(plan, ArtifactKind.SERVICE)["inject_owner"] is True
        assert _context(plan, ArtifactKind.DTO)["omit_owner"] is True

    @pytest.mark.unit
    def test_no_owner_injection_when_create_disabled(self, article_spec):
        plan = _plan(article_spec.model_copy(update={"disabled_routes": ["create"]}))
        assert _context(plan, ArtifactKind.CONTROLLER)["inject_owner"] is False

    @pytest.mark.unit
    def test_admin_binding(self):
        plan = _plan(EntitySpec(name="product", with_admin=True, admin_roles=["superadmin"]))
        context = _context(plan, ArtifactKind.ADMIN_ROUTE)
        assert context["allowed_roles"] == ["superadmin"]
        assert context["admin_base_url"] == "/ts-admin/products"

    @pytest.mark.unit
    def test_test_binding_lists_disabled_routes(self):
        plan = _plan(EntitySpec(name="product", with_tests=True, disabled_routes=["delete"]))
        context = _context(plan, ArtifactKind.TEST)
        assert [r["kind"] for r in context["disabled_routes"]] == ["delete"]
        assert context["app_module"] == "../../main.ts"


    @pytest.mark.unit
    def test_role_sets_include_superadmin_for_bypass(self):
        plan = _plan(EntitySpec(name="post", auth_type="role", roles=["editor"]))
        role_sets = _context(plan, ArtifactKind.ROUTE)["role_sets"]
        assert role_sets == {
            "create": ["editor", "superadmin"],
            "update": ["editor", "superadmin"],
            "delete": ["editor", "superadmin"],
        }
        # The controller keeps the configured roles; the bypass is its own flag.
        rules = _context(plan, ArtifactKind.CONTROLLER)["auth_rules"]
        assert list(rules["create"]["roles"]) == ["editor"]

    @pytest.mark.unit
    def test_role_sets_use_configured_superadmin_role(self):
        settings = ScaffoldConfig(superadmin_role="root")
        plan = _plan(EntitySpec(name="post", auth_type="role", roles=["editor"]), settings)
        assert _context(plan, ArtifactKind.ROUTE)["role_sets"]["delete"] == ["editor", "root"]

    @pytest.mark.unit
    def test_contexts_do_not_share_nested_values(self, full_spec):
        plan = _plan(full_spec.model_copy(update={"auth_type": "role", "roles": ["editor"]}))
        contexts = [a.content.context for a in plan.artifacts]
        names_ids = {id(c["names"]) for c in contexts}
        assert len(names_ids) == len(contexts)
        route = _context(plan, ArtifactKind.ROUTE)
        test = _context(plan, ArtifactKind.TEST)
        assert route["role_sets"] == test["role_sets"]
        assert route["role_sets"] is not test["role_sets"]
        assert route["role_sets"]["create"] is not test["role_sets"]["create"]


class TestImports:
    @pytest.mark.unit
    def test_route_imports_only_used_middleware(self, article_spec):
        plan = _plan(article_spec)
        names = _imported_names(_context(plan, ArtifactKind.ROUTE))
        assert "requireAuth" in names
        assert "validate" in names
        assert "requireRole" not in names

    @pytest.mark.unit
    def test_role_route_imports_require_role(self, user_spec):
        names = _imported_names(_context(_plan(user_spec), ArtifactKind.ROUTE))
        assert "requireRole" in names

    @pytest.mark.unit
    def test_public_read_only_route_imports_no_middleware(self, category_spec):
        context = _context(_plan(category_spec), ArtifactKind.ROUTE)
        names = _imported_names(context)
        assert "requireAuth" not in names
        assert "validate" not in names
        assert not any("Schema" in n for n in names)

    @pytest.mark.unit
    def test_shared_imports_are_relative(self, article_spec):
        sources = _import_sources(_context(_plan(article_spec), ArtifactKind.ROUTE))
        assert "../../shared/middleware/requireAuth.ts" in sources

    @pytest.mark.unit
    def test_controller_imports_for_owner_injection(self, article_spec):
        names = _imported_names(_context(_plan(article_spec), ArtifactKind.CONTROLLER))
        assert "BadRequestError" in names
        assert "ApiResponse" in names
        assert "ForbiddenError" not in names

    @pytest.mark.unit
    def test_controller_imports_for_custom_check(self):
        context = _context(_plan(EntitySpec(name="post", auth_type="custom")), ArtifactKind.CONTROLLER)
        names = _imported_names(context)
        assert context["custom_check"] is True
        assert "ForbiddenError" in names
        assert "Next" in names

    @pytest.mark.unit
    def test_plain_controller_imports(self):
        names = _imported_names(_context(_plan(EntitySpec(name="post")), ArtifactKind.CONTROLLER))
        assert names == ["PostService", "BaseController"]
