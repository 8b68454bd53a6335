"""Shared utility functions for tstack-kit.

Provides Rich-based console reporting, logging setup, and loading of entity
spec files (YAML or JSON).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from tstack_kit.planner.errors import ConfigurationError, PlanningFailed, ScaffoldError
from tstack_kit.planner.models import EntitySpec, GenerationPlan

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    """Route ``logging`` output through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Spec files
# ---------------------------------------------------------------------------


def _field_label(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "spec"


def load_entity_specs(path: str | Path) -> list[EntitySpec]:
    """Load one or more entity specs from a YAML or JSON file.

    The file holds either a single mapping or a list of mappings; keys may be
    camelCase (``authType``) or snake_case (``auth_type``).  A top-level
    ``entities`` key holding the list is also accepted.

    Raises:
        FileNotFoundError: If *path* does not exist.
        PlanningFailed: Carrying a :class:`ConfigurationError` for every
            malformed entry.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise PlanningFailed([
            ConfigurationError(f"cannot parse {file_path}: {exc}")
        ]) from exc

    if isinstance(data, dict) and "entities" in data:
        data = data["entities"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not data:
        raise PlanningFailed([
            ConfigurationError(f"{file_path} must contain an entity mapping or a list of them")
        ])

    specs: list[EntitySpec] = []
    errors: list[ScaffoldError] = []
    for index, entry in enumerate(data):
        label = entry.get("name") if isinstance(entry, dict) else None
        try:
            specs.append(EntitySpec.model_validate(entry))
        except ValidationError as exc:
            for problem in exc.errors():
                errors.append(ConfigurationError(
                    problem["msg"],
                    entity=label or f"#{index + 1}",
                    field=_field_label(problem["loc"]),
                ))
    if errors:
        raise PlanningFailed(errors)
    return specs


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated CLI value, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    err_console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    err_console.print(f"[bold yellow]{message}[/bold yellow]")


def print_errors(errors: Iterable[ScaffoldError]) -> None:
    """Print every error, one per line, under a header with the count."""
    error_list = list(errors)
    noun = "error" if len(error_list) == 1 else "errors"
    print_error(f"Scaffolding aborted ({len(error_list)} {noun}):")
    for error in error_list:
        kind = type(error).__name__
        err_console.print(f"  [red]-[/red] [dim]{kind}[/dim] {escape(str(error))}", highlight=False)


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_route_table(plan: GenerationPlan) -> None:
    """Print one row per route: emitted, visibility, middleware, authorization."""
    names = plan.config.names
    table = Table(
        title=f"{names.entity_name_pascal} routes",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Route", no_wrap=True)
    table.add_column("Endpoint", no_wrap=True)
    table.add_column("Access")
    table.add_column("Middleware")
    table.add_column("Authorization")

    base = "/" + names.table_name.replace("_", "-")
    for kind, decision in plan.routes.items():
        endpoint = f"{decision.method} {base}{'' if decision.path == '/' else decision.path}"
        if not decision.emitted:
            table.add_row(kind.value, endpoint, "[dim]disabled[/dim]", "", "")
            continue
        rule = plan.auth.rule_for(kind)
        checks = []
        if rule is not None:
            if rule.superadmin_bypass:
                checks.append("superadmin bypass")
            if rule.roles:
                checks.append("roles: " + ", ".join(rule.roles))
            if rule.ownership_check:
                checks.append(f"owner ({plan.config.ownership_field})")
            if rule.custom_check:
                checks.append("custom")
        if kind.value == "create" and plan.auth.inject_owner_on_create:
            checks.append(f"sets {plan.config.ownership_field}")
        table.add_row(
            kind.value,
            endpoint,
            "[green]public[/green]" if decision.public else "authenticated",
            " -> ".join(m.value for m in decision.middleware_chain),
            ", ".join(checks) or "-",
        )

    console.print(table)
    console.print()


def print_artifact_table(plan: GenerationPlan) -> None:
    """Print the planned files with their dependencies."""
    table = Table(
        title=f"{plan.config.names.entity_name_pascal} artifacts",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", no_wrap=True)
    table.add_column("File")
    table.add_column("Depends on")

    for index, artifact in enumerate(plan.artifacts, start=1):
        table.add_row(
            str(index),
            artifact.kind.value,
            artifact.target_identifier,
            ", ".join(dep.value for dep in artifact.depends_on) or "-",
        )

    console.print(table)
    console.print()
