from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from dotenv import load_dotenv

from schemascope.config import AppConfig, configure_logging, load_app_config
from schemascope.extractor import read_schema_file, read_schema_text, scan_sql_files
from schemascope.sql_schema import (
    ParsedSchema,
    build_schema_context,
    find_schema_warnings,
    parse_schema,
)


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    # Load environment variables first so config defaults see them
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="schemascope",
        description="schemascope - explore SQL schema files and their RLS policies"
    )
    parser.add_argument("--config", help="Path to configuration YAML file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List schema files in the configured folder")

    parse_cmd = sub.add_parser("parse", help="Parse a schema file and print its tables")
    parse_cmd.add_argument("target", help="Schema name in the folder, or a path to a .sql file")
    parse_cmd.add_argument("--json", action="store_true", help="Print the full model as JSON")

    context_cmd = sub.add_parser("context", help="Print the schema as chat context text")
    context_cmd.add_argument("target", help="Schema name in the folder, or a path to a .sql file")

    warnings_cmd = sub.add_parser("warnings", help="Show schema warnings")
    warnings_cmd.add_argument("target", help="Schema name in the folder, or a path to a .sql file")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (overrides config)")
    serve.add_argument("--port", type=int, help="Bind port (overrides config)")

    args = parser.parse_args(argv)

    try:
        config = load_app_config(args.config)
        configure_logging(config.logging, verbose=args.verbose)

        if args.cmd == "list":
            list_schemas(config)
        elif args.cmd == "parse":
            show_schema(load_target(args.target, config), as_json=args.json)
        elif args.cmd == "context":
            print(build_schema_context(load_target(args.target, config)))
        elif args.cmd == "warnings":
            show_warnings(load_target(args.target, config))
        elif args.cmd == "serve":
            serve_api(config, args.host, args.port)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def load_target(target: str, config: AppConfig) -> ParsedSchema:
    """Parse a schema given as a file path or as a name in the schema folder."""
    sources = config.sources
    path = Path(target)
    if path.is_file():
        content = read_schema_text(path, sources.max_file_bytes)
    else:
        content = read_schema_file(sources.directory, target, sources.max_file_bytes, sources.extension)
    return parse_schema(content)


def list_schemas(config: AppConfig) -> None:
    """Print schema files available for parsing."""
    sources = scan_sql_files(config.sources.directory, config.sources.extension)

    if not sources:
        print(f"No schema files found in {config.sources.directory}")
        return

    print(f"\nSchema files ({len(sources)}):")
    print("=" * 60)
    for source in sources:
        print(f"  {source.name:<30} {source.size:>10} bytes  {source.modified:%Y-%m-%d %H:%M}")


def show_schema(schema: ParsedSchema, as_json: bool = False) -> None:
    """Print a parsed schema as a table summary or JSON."""
    if as_json:
        print(json.dumps(schema.to_dict(), indent=2))
        return

    stats = schema.stats
    print(f"\nTables: {stats.total_tables}  Columns: {stats.total_columns}  "
          f"Relationships: {stats.total_relationships}  "
          f"Policies: {stats.total_rls_policies}  Tables with RLS: {stats.tables_with_rls}")
    print("=" * 80)

    for table in schema.tables:
        rls = "RLS" if table.rls_enabled else "no RLS"
        print(f"\n{table.schema}.{table.name} ({len(table.columns)} columns, {rls})")
        for fk in table.foreign_keys:
            print(f"  {fk.column} -> {fk.referenced_table}({fk.referenced_column})")
        if table.denies_all_access:
            print("  !! RLS enabled with no policies: all access is denied")
        for policy in table.rls_policies:
            print(f"  [{policy.command}] {policy.name}: {policy.plain_english}")


def show_warnings(schema: ParsedSchema) -> None:
    """Print schema warnings, most severe first."""
    warnings = find_schema_warnings(schema)
    if not warnings:
        print("No warnings.")
        return

    order = {"error": 0, "warning": 1, "info": 2}
    for warning in sorted(warnings, key=lambda w: order[w.severity]):
        print(f"[{warning.severity.upper()}] {warning.message}")


def serve_api(config: AppConfig, host: str | None = None, port: int | None = None) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from schemascope.web import create_app

    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
