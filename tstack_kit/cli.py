"""tstack-kit command line interface.

Usage::

    tstack-kit scaffold article --auth ownership --ownership-field authorId \\
        --public-routes getAll,getById --with-tests
    tstack-kit scaffold category --disabled-routes create,update,delete --dry-run
    tstack-kit plan user --auth role --roles admin,superadmin
    tstack-kit scaffold --spec-file entities.yaml --with-admin

Every configuration problem is reported at once and the command exits with
status 1 without writing anything.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from tstack_kit import __version__
from tstack_kit.config import ScaffoldConfig
from tstack_kit.planner import EntitySpec, GenerationPlan, plan_entities
from tstack_kit.planner.errors import EmissionError, PlanningFailed
from tstack_kit.scaffolder import ScaffoldEmitter, TemplateRenderer
from tstack_kit.utils import (
    configure_logging,
    console,
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


def _add_entity_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "entity",
        nargs="?",
        help="Singular entity name, e.g. 'article' (omit with --spec-file)",
    )
    parser.add_argument(
        "--spec-file",
        type=Path,
        default=None,
        help="YAML or JSON file with one or more entity specs",
    )
    parser.add_argument(
        "--auth",
        default="none",
        help="Authorization mode: none, ownership, role, custom (default: none)",
    )
    parser.add_argument(
        "--ownership-field",
        default=None,
        help="Ownership column (default: userId with --auth ownership)",
    )
    parser.add_argument(
        "--public-routes",
        default="",
        help="Comma-separated read routes without auth, e.g. getAll,getById",
    )
    parser.add_argument(
        "--disabled-routes",
        default="",
        help="Comma-separated routes not to generate",
    )
    parser.add_argument("--roles", default="", help="Comma-separated roles for --auth role")
    parser.add_argument(
        "--hooks",
        default="",
        help="Comma-separated lifecycle hooks, e.g. beforeCreate,afterDelete",
    )
    parser.add_argument(
        "--admin-roles",
        default=None,
        help="Comma-separated allowedRoles for the admin route",
    )
    parser.add_argument("--with-admin", action="store_true", help="Generate an admin route")
    parser.add_argument("--with-tests", action="store_true", help="Generate an API test")
    parser.add_argument("--skip-migration", action="store_true", help="Do not generate a migration")
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Target project root (default: $TSTACK_PROJECT_ROOT or .)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    """Create the ``tstack-kit`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="tstack-kit",
        description="tstack-kit -- scaffold CRUD entities for a tstack project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  tstack-kit scaffold article --auth ownership --public-routes getAll,getById\n"
            "  tstack-kit scaffold product --with-admin --with-tests --dry-run\n"
            "  tstack-kit plan user --auth role --roles admin,superadmin\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scaffold = subparsers.add_parser("scaffold", help="Plan and write entity files")
    _add_entity_options(scaffold)
    scaffold.add_argument("--dry-run", action="store_true", help="Show the plan, write nothing")
    scaffold.add_argument("--force", action="store_true", help="Overwrite existing files")

    plan = subparsers.add_parser("plan", help="Print the generation plan as JSON")
    _add_entity_options(plan)

    return parser


def specs_from_args(args: argparse.Namespace) -> list[EntitySpec]:
    """Build entity specs from a spec file or from the command line options.

    With ``--spec-file``, boolean flags given on the command line switch the
    corresponding option on for every entity in the file.
    """
    if args.spec_file is not None:
        specs = load_entity_specs(args.spec_file)
        overrides = {
            key: True
            for key in ("with_admin", "with_tests", "skip_migration")
            if getattr(args, key)
        }
        return [spec.model_copy(update=overrides) for spec in specs]

    return [EntitySpec(
        name=args.entity,
        auth_type=args.auth,
        ownership_field=args.ownership_field,
        public_routes=split_csv(args.public_routes),
        disabled_routes=split_csv(args.disabled_routes),
        roles=split_csv(args.roles),
        hooks=split_csv(args.hooks),
        admin_roles=split_csv(args.admin_roles) if args.admin_roles is not None else None,
        with_admin=args.with_admin,
        with_tests=args.with_tests,
        skip_migration=args.skip_migration,
    )]


def _print_plan(plan: GenerationPlan) -> None:
    for warning in plan.warnings:
        print_warning(f"{plan.config.entity_name}: {warning}")
    print_route_table(plan)
    print_artifact_table(plan)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``tstack-kit`` / ``python -m tstack_kit.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.spec_file is not None and args.entity:
        parser.error("give either an entity name or --spec-file, not both")
    if args.spec_file is None and not args.entity:
        parser.error("an entity name or --spec-file is required")
    if args.spec_file is not None and not args.spec_file.exists():
        print_error(f"Error: spec file not found: {args.spec_file}")
        sys.exit(1)

    config = ScaffoldConfig.from_env()
    if args.project_root is not None:
        config.project_root = args.project_root

    try:
        specs = specs_from_args(args)
        plans = asyncio.run(plan_entities(specs, config))
    except PlanningFailed as exc:
        print_errors(exc.errors)
        sys.exit(1)

    if args.command == "plan":
        payload = [json.loads(p.to_json()) for p in plans]
        console.print_json(data=payload[0] if len(payload) == 1 else payload)
        return

    for plan in plans:
        _print_plan(plan)

    total = sum(len(p.artifacts) for p in plans)
    if args.dry_run:
        print_success(f"Dry run: {total} files would be written under {config.project_root}")
        return

    renderer = TemplateRenderer(overrides=[config.templates_path])
    emitter = ScaffoldEmitter(config.project_root, renderer, force=args.force)
    try:
        written = asyncio.run(emitter.emit_all(plans))
    except EmissionError as exc:
        print_errors([exc])
        sys.exit(1)

    print_summary_table(
        {
            "Entities": ", ".join(p.config.entity_name for p in plans),
            "Files written": str(len(written)),
            "Project root": str(config.project_root),
        },
        title="Scaffold complete",
    )
    print_success("Done. Register the new routes in your app and run the migration.")


if __name__ == "__main__":
    main()
