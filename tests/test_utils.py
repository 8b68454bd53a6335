"""Unit tests for utility functions (tstack_kit.utils).

Tests cover:
- load_entity_specs (YAML, JSON, camelCase and snake_case keys, errors)
- split_csv
- configure_logging
- Rich output helpers (print_errors, tables, messages)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tstack_kit.planner import plan_entity
from tstack_kit.planner.errors import ConfigurationError, InvalidIdentifier, PlanningFailed
from tstack_kit.utils import (
    configure_logging,
    load_entity_specs,
    print_artifact_table,
    print_error,
    print_errors,
    print_route_table,
    print_success,
    print_summary_table,
    print_warning,
    split_csv,
)


# ---------------------------------------------------------------------------
# load_entity_specs
# ---------------------------------------------------------------------------


class TestLoadEntitySpecs:
    @pytest.mark.unit
    def test_yaml_list(self, tmp_path: Path):
        path = tmp_path / "entities.yaml"
        path.write_text(
            "- name: article\n"
            "  authType: ownership\n"
            "  ownershipField: authorId\n"
            "  publicRoutes: [getAll, getById]\n"
            "- name: category\n"
            "  disabled_routes: [create, update, delete]\n"
        )
        specs = load_entity_specs(path)
        assert [s.name for s in specs] == ["article", "category"]
        assert specs[0].auth_type == "ownership"
        assert specs[0].ownership_field == "authorId"
        assert specs[0].public_routes == ["getAll", "getById"]
        assert specs[1].disabled_routes == ["create", "update", "delete"]

    @pytest.mark.unit
    def test_yaml_entities_key(self, tmp_path: Path):
        path = tmp_path / "entities.yml"
        path.write_text("entities:\n  - name: user\n    authType: role\n    roles: [admin]\n")
        [spec] = load_entity_specs(path)
        assert spec.roles == ["admin"]

    @pytest.mark.unit
    def test_json_single_mapping(self, tmp_path: Path):
        path = tmp_path / "product.json"
        path.write_text(json.dumps({"name": "product", "withAdmin": True, "adminRoles": ["superadmin"]}))
        [spec] = load_entity_specs(path)
        assert spec.with_admin is True
        assert spec.admin_roles == ["superadmin"]

    @pytest.mark.unit
    def test_unknown_key_reported(self, tmp_path: Path):
        path = tmp_path / "entities.yaml"
        path.write_text("- name: article\n  colour: blue\n- authType: role\n")
        with pytest.raises(PlanningFailed) as exc_info:
            load_entity_specs(path)
        errors = exc_info.value.errors
        assert all(isinstance(e, ConfigurationError) for e in errors)
        assert [(e.entity, e.field) for e in errors] == [("article", "colour"), ("#2", "name")]

    @pytest.mark.unit
    def test_unparseable_file(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(PlanningFailed, match="cannot parse"):
            load_entity_specs(path)

    @pytest.mark.unit
    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(PlanningFailed, match="must contain"):
            load_entity_specs(path)

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_entity_specs(tmp_path / "missing.yaml")


# ---------------------------------------------------------------------------
# split_csv / logging
# ---------------------------------------------------------------------------


class TestSplitCsv:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, []),
            ("", []),
            ("getAll", ["getAll"]),
            ("getAll, getById ,", ["getAll", "getById"]),
        ],
    )
    def test_split(self, raw, expected):
        assert split_csv(raw) == expected


class TestConfigureLogging:
    @pytest.mark.unit
    def test_levels(self):
        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG
        configure_logging()
        assert logging.getLogger().level == logging.WARNING


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_errors(self, capsys):
        print_errors([
            InvalidIdentifier("bad name", field="name"),
            ConfigurationError("role auth requires at least one role", entity="user", field="roles"),
        ])
        err = capsys.readouterr().err
        assert "Scaffolding aborted (2 errors):" in err
        assert "InvalidIdentifier" in err
        assert "[user] roles: role auth requires at least one role" in err

    @pytest.mark.unit
    def test_print_errors_singular(self, capsys):
        print_errors([ConfigurationError("boom")])
        assert "(1 error):" in capsys.readouterr().err

    @pytest.mark.unit
    def test_messages(self, capsys):
        print_success("All files written")
        print_error("Something failed")
        print_warning("Check your config")
        captured = capsys.readouterr()
        assert "All files written" in captured.out
        assert "Something failed" in captured.err
        assert "Check your config" in captured.err

    @pytest.mark.unit
    def test_print_summary_table(self, capsys):
        print_summary_table({"Entities": "article"}, title="Scaffold complete")
        out = capsys.readouterr().out
        assert "Scaffold complete" in out
        assert "article" in out

    @pytest.mark.unit
    def test_plan_tables(self, capsys, category_spec):
        plan = plan_entity(category_spec)
        print_route_table(plan)
        print_artifact_table(plan)
        out = capsys.readouterr().out
        assert "Category routes" in out
        assert "disabled" in out
        assert "Category artifacts" in out
        assert "migration" in out
