"""Shared pytest fixtures for the tstack-kit test suite.

Provides reusable fixtures for:
- The reference entity specs (ownership article, role-protected user,
  read-only category)
- A default ``ScaffoldConfig``
- A temporary target project directory
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tstack_kit.config import ScaffoldConfig
from tstack_kit.planner.models import EntitySpec


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def scaffold_config() -> ScaffoldConfig:
    """Default tool configuration."""
    return ScaffoldConfig()


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Empty target project directory (auto-cleanup)."""
    project_dir = tmp_path / "tstack-project"
    project_dir.mkdir()
    yield project_dir


# ---------------------------------------------------------------------------
# Entity specs
# ---------------------------------------------------------------------------

@pytest.fixture
def article_spec() -> EntitySpec:
    """Ownership-protected article with public reads."""
    return EntitySpec(
        name="article",
        auth_type="ownership",
        ownership_field="authorId",
        public_routes=["getAll", "getById"],
    )


@pytest.fixture
def user_spec() -> EntitySpec:
    """Role-protected user entity."""
    return EntitySpec(
        name="user",
        auth_type="role",
        roles=["admin", "superadmin"],
    )


@pytest.fixture
def category_spec() -> EntitySpec:
    """Read-only, fully public category entity."""
    return EntitySpec(
        name="category",
        disabled_routes=["create", "update", "delete"],
        public_routes=["getAll", "getById"],
    )


@pytest.fixture
def full_spec() -> EntitySpec:
    """Entity requesting every optional artifact and every hook."""
    return EntitySpec(
        name="site-setting",
        auth_type="custom",
        hooks=[
            "beforeCreate",
            "afterCreate",
            "beforeUpdate",
            "afterUpdate",
            "beforeDelete",
            "afterDelete",
        ],
        with_admin=True,
        with_tests=True,
    )
