import argparse
import logging
import os
import sys
from datetime import date
from uuid import UUID

from congregation.adapters.clock import SystemClock
from congregation.adapters.locks import InProcessLocks
from congregation.adapters.sqlite.migrator import SQLiteMigrator
from congregation.adapters.sqlite.repos import (
    SQLiteFormConfigRepo,
    SQLitePatternRepo,
    SQLiteServiceRepo,
    SQLiteTemplateRepo,
)
from congregation.api.deps import Settings
from congregation.app_shell.config import validate_ops_rules
from congregation.components.forms import get_template
from congregation.components.service_generation import (
    GenerateDueInput,
    GenerateServicesInput,
    run_generate,
    run_generate_due_patterns,
)
from congregation.rules.loader import generation_config, load_rules
from congregation.rules.models import Rules

logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    rules = load_rules(settings.rules_path)
    validate_ops_rules(rules)
    return rules


def handle_migrate(settings: Settings, args: argparse.Namespace) -> int:
    os.makedirs(settings.data_dir, exist_ok=True)
    migrator = SQLiteMigrator(settings.db_path, settings.migrations_dir)
    if args.dry_run:
        pending = migrator.pending()
        for name in pending:
            print(f"  pending {name}")
        print(f"{len(pending)} pending migration(s).")
        return 0

    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s).")
    return 0


def _generation_ports(settings: Settings, rules: Rules) -> dict:
    return {
        "services": SQLiteServiceRepo(settings.db_path),
        "patterns": SQLitePatternRepo(settings.db_path),
        "templates": SQLiteTemplateRepo(settings.db_path),
        "clock": SystemClock(),
        "locks": InProcessLocks(),
        "config": generation_config(rules),
    }


def handle_generate_due(settings: Settings, args: argparse.Namespace) -> int:
    rules = get_rules(settings)
    result = run_generate_due_patterns(
        GenerateDueInput(horizon_days=args.horizon),
        **_generation_ports(settings, rules),
    )
    for r in result.results:
        if r.error:
            print(f"  {r.pattern_name}: failed ({r.error})")
        else:
            print(f"  {r.pattern_name}: {r.generated} generated")
    print(result.message)
    return 0 if all(r.error is None for r in result.results) else 1


def handle_generate(settings: Settings, args: argparse.Namespace) -> int:
    rules = get_rules(settings)
    inp = GenerateServicesInput(
        template_id=args.template,
        pattern_id=args.pattern,
        start_date=args.start,
        end_date=args.end,
    )
    result = run_generate(inp, **_generation_ports(settings, rules))
    if not result.success:
        for e in result.errors:
            logger.error("%s: %s", e.code, e.message)
        return 1

    for service in result.services:
        print(f"  created {service.date} {service.name}")
    for service in result.skipped:
        print(f"  skipped {service.date} (exists)")
    print(result.message)
    return 0


def handle_seed_form(settings: Settings, args: argparse.Namespace) -> int:
    rules = get_rules(settings)
    if args.form_type not in rules.forms.form_types:
        logger.error("Unknown form type %s.", args.form_type)
        return 1
    template = get_template(args.template)
    if template is None:
        logger.error("Unknown form template %s.", args.template)
        return 1

    config_id = SQLiteFormConfigRepo(settings.db_path).create_from_template(
        args.form_type, template, version=args.version
    )
    print(f"Stored form config {config_id} for {args.form_type}.")
    return 0


def handle_serve(settings: Settings, args: argparse.Namespace) -> int:
    import uvicorn

    print(f"Starting API server on {args.host}:{args.port}")
    uvicorn.run("congregation.api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Congregation CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="List pending migrations without applying them"
    )

    # generate-due
    due_parser = subparsers.add_parser(
        "generate-due", help="Generate services for all active recurring patterns"
    )
    due_parser.add_argument("--horizon", type=int, help="Days ahead to generate")

    # generate
    gen_parser = subparsers.add_parser("generate", help="Generate services from a template")
    gen_parser.add_argument("--template", type=UUID, required=True, help="Service template id")
    gen_parser.add_argument("--pattern", type=UUID, help="Recurring pattern id")
    gen_parser.add_argument("--start", type=date.fromisoformat, help="Window start (YYYY-MM-DD)")
    gen_parser.add_argument("--end", type=date.fromisoformat, help="Window end (YYYY-MM-DD)")

    # seed-form
    seed_parser = subparsers.add_parser(
        "seed-form", help="Store a published form config from a starter template"
    )
    seed_parser.add_argument("form_type", help="Form type (welcome, membership, newcomer)")
    seed_parser.add_argument("--template", required=True, help="Starter template name")
    seed_parser.add_argument("--version", type=int, default=1, help="Config version")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload for development")

    return parser


HANDLERS = {
    "migrate": handle_migrate,
    "generate-due": handle_generate_due,
    "generate": handle_generate,
    "seed-form": handle_seed_form,
    "serve": handle_serve,
}


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    return HANDLERS[args.command](Settings(), args)


if __name__ == "__main__":
    sys.exit(main())
