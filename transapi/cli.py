"""
Command line interface for the translation API.

Usage:
    python run.py [--config FILE] COMMAND [options]

Commands:
    help        Show the available commands. Needs no config file.
    init-db     Create or upgrade the database schema. Safe to run repeatedly.
    remove-db   Remove all translation API tables (requires --force).
    import      Import XLIFF files from the configured xliff.import_path.
    export      Export domains to the configured xliff.export_path.
    serve       Start the HTTP JSON API.
"""

import argparse
import sys
import time
from typing import List, Optional

from transapi.config import DEFAULT_CONFIG_FILE, Config, apply_logging_config, load_config
from transapi.context import AppContext
from transapi.core import sync
from transapi.exceptions import ImportDirectoryError, MigrationError, TransApiError
from transapi.logger import get_logger

logger = get_logger(__name__)


def _fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def cmd_init_db(config: Config, args) -> int:
    """Migrate the database up to the latest schema version."""
    with AppContext.create(config) as context:
        try:
            version = context.datastore.migrate_up()
        except MigrationError as e:
            return _fail(f"{e}\nCould not complete database migration, last applied version was {e.version}")
    print(f"Successfully migrated the database to version {version}")
    return 0


def cmd_remove_db(config: Config, args) -> int:
    """Migrate the database down to version 0, dropping all tables."""
    if not args.force:
        return _fail("The remove-db command requires the '--force' flag")

    with AppContext.create(config) as context:
        try:
            version = context.datastore.migrate_down()
        except MigrationError as e:
            return _fail(f"{e}\nCould not complete database removal, last applied version was {e.version}")
    print(f"Successfully migrated the database to version {version}")
    return 0


def cmd_import(config: Config, args) -> int:
    """Import every XLIFF file in the import directory, printing progress."""
    import_path = args.path or config.xliff.import_path
    start = time.perf_counter()

    with AppContext.create(config) as context:
        try:
            count = sync.import_directory(
                context.datastore,
                import_path,
                notify=lambda name: print(f"Imported domain: {name}"),
            )
        except ImportDirectoryError as e:
            print(context.datastore.stats, file=sys.stderr)
            return _fail(f"{e} ({e.count} file(s) imported before the failure)")

        elapsed = time.perf_counter() - start
        print(f"Imported {count} files in {elapsed:.3f}s\n")
        print(context.datastore.stats, file=sys.stderr)
    return 0


def cmd_export(config: Config, args) -> int:
    """Export one domain or all domains to the export directory."""
    export_path = args.path or config.xliff.export_path

    with AppContext.create(config) as context:
        count = sync.export_directory(
            context.datastore,
            export_path,
            config.xliff.source_language,
            domain_name=args.domain,
        )
    print(f"Exported {count} domain(s) to {export_path}")
    return 0


def cmd_serve(config: Config, args) -> int:
    """Run the HTTP API until interrupted."""
    from transapi.web import create_app

    port = args.port if args.port is not None else config.server.port
    context = AppContext.create(config, start_worker=True)
    try:
        app = create_app(context)
        logger.info("Listening on port %s", port)
        app.run(host=config.server.host, port=port, threaded=True)
    finally:
        context.close()
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "remove-db": cmd_remove_db,
    "import": cmd_import,
    "export": cmd_export,
    "serve": cmd_serve,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transapi",
        description="Manage a database of translations and exchange them as XLIFF files.",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_FILE),
        metavar="PATH",
        help="Path to the TOML config file (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser("help", help="Show this message")
    subparsers.add_parser("init-db", help="Create or upgrade the database schema")

    remove = subparsers.add_parser("remove-db", help="Remove all translation API tables")
    remove.add_argument("--force", action="store_true", help="Allow the destructive change")

    import_ = subparsers.add_parser("import", help="Import XLIFF files")
    import_.add_argument("--path", help="Directory to import from (default: xliff.import_path)")

    export = subparsers.add_parser("export", help="Export domains to XLIFF files")
    export.add_argument("--domain", help="Only export this domain")
    export.add_argument("--path", help="Directory to export to (default: xliff.export_path)")

    serve = subparsers.add_parser("serve", help="Start the HTTP JSON API")
    serve.add_argument("--port", type=int, help="Port to listen on (default: server.port)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2
    if args.command == "help":
        parser.print_help()
        return 0

    try:
        config = load_config(
            args.config,
            require_import_path=args.command == "import" and not args.path,
        )
        apply_logging_config(config)
        return COMMANDS[args.command](config, args)
    except TransApiError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        return _fail(str(e))
