"""CLI entrypoint for recordgate."""

import argparse
import importlib
import json
from pathlib import Path
from typing import Dict, List

from recordgate.access.models import IdentityContext
from recordgate.api.records_api import RecordAccess
from recordgate.config.loader import get_database_url, load_config
from recordgate.database.introspection import SchemaSnapshot
from recordgate.database.session import get_engine
from recordgate.entities.registry import EntityRegistry
from recordgate.query.params import parse_parameter_with_additional_values
from recordgate.utils.logging import get_logger

logger = get_logger(__name__)


def _load_registry(registry_path: str) -> EntityRegistry:
    """Import ``module:attribute`` and return the registry it names (or builds)."""
    module_name, _, attribute = registry_path.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Registry must be given as module:attribute, got {registry_path!r}")
    target = getattr(importlib.import_module(module_name), attribute)
    registry = target() if callable(target) and not isinstance(target, EntityRegistry) else target
    if not isinstance(registry, EntityRegistry):
        raise ValueError(f"{registry_path} is not an EntityRegistry")
    return registry


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Parameter must be key=value, got {pair!r}")
        params[key] = value
    return params


def cmd_schema(args: argparse.Namespace) -> None:
    """Print tables and columns from the schema snapshot."""
    config = load_config(Path(args.config) if args.config else None)
    database_url = args.database_url or get_database_url(config)
    snapshot = SchemaSnapshot.from_bind(get_engine(database_url))

    tables = [args.table] if args.table else snapshot.tables()
    if not tables:
        print("No tables found.")
        return

    for table in tables:
        if not snapshot.table_exists(table):
            print(f"{table}: (missing)")
            continue
        print(f"{table}: {', '.join(sorted(snapshot.columns(table)))}")


def cmd_parse(args: argparse.Namespace) -> None:
    """Print parsed parameter groups as JSON."""
    parsed = parse_parameter_with_additional_values(args.raw)
    print(json.dumps([{"name": p.name, "values": p.values} for p in parsed], indent=2))


def cmd_plan(args: argparse.Namespace) -> None:
    """Print the query plan and SQL for an entity and request parameters."""
    config = load_config(Path(args.config) if args.config else None)
    registry = _load_registry(args.registry)
    params = _parse_params(args.param)
    if args.language_id is not None:
        params["language_id"] = str(args.language_id)

    identity = IdentityContext(acting_user_id=args.user_id)
    access = RecordAccess(registry, identity=identity, config=config)
    plan = access.plan(args.entity, params)
    summary = access.describe_plan(args.entity, plan)
    print(json.dumps(summary.model_dump(), indent=2, default=str))


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="recordgate",
        description="Inspect schema metadata and query plans for registered entities",
    )
    parser.add_argument("--config", type=str, help="Path to recordgate.config.yaml")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # schema command
    schema_parser = subparsers.add_parser("schema", help="List tables and columns")
    schema_parser.add_argument("--database-url", type=str, help="Override storage.database_url")
    schema_parser.add_argument("--table", type=str, help="Only show this table")
    schema_parser.set_defaults(func=cmd_schema)

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a compound parameter string")
    parse_parser.add_argument("raw", type=str, help='Parameter string, e.g. "rel1:col1,col2|rel2"')
    parse_parser.set_defaults(func=cmd_parse)

    # plan command
    plan_parser = subparsers.add_parser("plan", help="Show the query plan for an entity")
    plan_parser.add_argument("entity", type=str, help="Registered entity name")
    plan_parser.add_argument(
        "--registry",
        type=str,
        required=True,
        help="module:attribute of an EntityRegistry (or a factory returning one)",
    )
    plan_parser.add_argument(
        "--param",
        action="append",
        default=[],
        help="Request parameter as key=value (repeatable)",
    )
    plan_parser.add_argument("--language-id", type=int, help="Active language id")
    plan_parser.add_argument("--user-id", type=int, help="Acting user id")
    plan_parser.set_defaults(func=cmd_plan)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
