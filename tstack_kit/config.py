"""tstack-kit configuration.

Typed configuration for the planner and the emitter: where the target
TypeScript project keeps its entities and migrations, and the defaults the
planner falls back to (admin roles, superadmin role, ownership field).  Uses
Pydantic v2 so the settings validate at construction time and round-trip
through JSON or environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ScaffoldConfig(BaseModel):
    """Global tstack-kit configuration.

    Instances are typically created once by the CLI entry point and then
    passed to the planner and the emitter.
    """

    project_root: Path = Field(default=Path("."))
    entities_dir: str = Field(default="src/entities")
    migrations_dir: str = Field(default="migrations")
    shared_dir: str = Field(default="src/shared", description="Shared middleware/utils")
    database_module: str = Field(default="src/config/database.ts")
    app_module: str = Field(default="src/main.ts", description="Module exporting the Hono app")
    admin_base_url: str = Field(default="/ts-admin")
    default_admin_roles: list[str] = Field(
        default_factory=lambda: ["superadmin", "admin"],
        description="allowedRoles used for admin routes when a spec names none",
    )
    superadmin_role: str = Field(
        default="superadmin", description="Role that bypasses every authorization check"
    )
    default_ownership_field: str = Field(
        default="userId", description="Ownership column used when none is given"
    )
    templates_dir: str = Field(
        default=".tstack-kit/templates",
        description="Project directory whose templates shadow the packaged ones",
    )

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def entities_path(self) -> Path:
        """Absolute-or-relative directory holding one folder per entity."""
        return self.project_root / self.entities_dir

    @property
    def migrations_path(self) -> Path:
        """Directory for generated SQL migrations."""
        return self.project_root / self.migrations_dir

    @property
    def templates_path(self) -> Path:
        """Template override directory (may not exist)."""
        return self.project_root / self.templates_dir

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<project_root>/.tstack-kit.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.project_root / ".tstack-kit.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            TSTACK_PROJECT_ROOT, TSTACK_ENTITIES_DIR, TSTACK_MIGRATIONS_DIR,
            TSTACK_ADMIN_BASE_URL, TSTACK_ADMIN_ROLES (comma separated),
            TSTACK_SUPERADMIN_ROLE, TSTACK_TEMPLATES_DIR.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("TSTACK_PROJECT_ROOT"):
            kwargs["project_root"] = Path(os.environ["TSTACK_PROJECT_ROOT"])
        if os.environ.get("TSTACK_ENTITIES_DIR"):
            kwargs["entities_dir"] = os.environ["TSTACK_ENTITIES_DIR"]
        if os.environ.get("TSTACK_MIGRATIONS_DIR"):
            kwargs["migrations_dir"] = os.environ["TSTACK_MIGRATIONS_DIR"]
        if os.environ.get("TSTACK_ADMIN_BASE_URL"):
            kwargs["admin_base_url"] = os.environ["TSTACK_ADMIN_BASE_URL"]
        if os.environ.get("TSTACK_ADMIN_ROLES"):
            kwargs["default_admin_roles"] = [
                r.strip() for r in os.environ["TSTACK_ADMIN_ROLES"].split(",") if r.strip()
            ]
        if os.environ.get("TSTACK_SUPERADMIN_ROLE"):
            kwargs["superadmin_role"] = os.environ["TSTACK_SUPERADMIN_ROLE"]
        if os.environ.get("TSTACK_TEMPLATES_DIR"):
            kwargs["templates_dir"] = os.environ["TSTACK_TEMPLATES_DIR"]
        return cls(**kwargs)
