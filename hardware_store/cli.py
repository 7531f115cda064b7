# hardware_store/cli.py
"""Maintenance commands: schema setup, JSON backups and backend migration."""
import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from hardware_store.config import Settings, settings as default_settings
from hardware_store.database import create_database
from hardware_store.errors import StoreError
from hardware_store.main import configure_logging
from hardware_store.schema import init_db
from hardware_store.services import backup

logger = logging.getLogger(__name__)


def _print_results(results) -> None:
    for table, result in results.items():
        line = f"{table:<14} {result['status']:<10} {result['restored']}/{result['total']}"
        if result.get("error"):
            line += f"  ({result['error']})"
        print(line)


def cmd_init_db(args, settings: Settings) -> int:
    db = create_database(settings)
    try:
        init_db(db, settings)
    finally:
        db.close()
    print(f"Database initialized ({db.dialect})")
    return 0


def cmd_backup(args, settings: Settings) -> int:
    db = create_database(settings)
    try:
        data = backup.export_tables(db, include_users=args.include_users)
    finally:
        db.close()
    path = backup.write_backup(data, args.output or settings.BACKUP_DIR)
    print(f"Backup written to {path}")
    return 0


def cmd_restore(args, settings: Settings) -> int:
    data = backup.load_backup(args.file)
    db = create_database(settings)
    try:
        init_db(db, settings)
        results = backup.restore_tables(db, data, include_users=args.include_users)
    finally:
        db.close()
    _print_results(results)
    return 1 if any(r["status"] == "failed" for r in results.values()) else 0


def cmd_migrate(args, settings: Settings) -> int:
    # Source is always the local SQLite file, target the configured hosted database
    source_settings = settings.model_copy(update={"DATABASE_URL": None, "SQLITE_PATH": args.sqlite_path or settings.SQLITE_PATH})
    target_settings = settings.model_copy(update={"DATABASE_URL": args.target_url or settings.DATABASE_URL})
    if not target_settings.database_url:
        print("No target database: pass --target-url or set DATABASE_URL", file=sys.stderr)
        return 2

    source = create_database(source_settings)
    target = create_database(target_settings)
    try:
        init_db(target, target_settings)
        results = backup.migrate(source, target, include_users=args.include_users)
    finally:
        source.close()
        target.close()
    _print_results(results)
    return 1 if any(r["status"] == "failed" for r in results.values()) else 0


def cmd_serve(args, settings: Settings) -> int:
    uvicorn.run("hardware_store.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hardware-store", description="Hardware store maintenance commands")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser("init-db", help="Create tables, apply upgrades and seed defaults")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("backup", help="Export business tables to a JSON file")
    p.add_argument("-o", "--output", help="Directory for the backup file (default: BACKUP_DIR)")
    p.add_argument("--include-users", action="store_true", help="Also export user accounts")
    p.set_defaults(func=cmd_backup)

    p = sub.add_parser("restore", help="Replace business tables with a JSON backup")
    p.add_argument("file", help="Backup file to restore")
    p.add_argument("--include-users", action="store_true", help="Also restore user accounts")
    p.set_defaults(func=cmd_restore)

    p = sub.add_parser("migrate", help="Copy data from the SQLite file into PostgreSQL")
    p.add_argument("--sqlite-path", help="Source SQLite file (default: SQLITE_PATH)")
    p.add_argument("--target-url", help="Target PostgreSQL URL (default: DATABASE_URL)")
    p.add_argument("--include-users", action="store_true", help="Also migrate user accounts")
    p.set_defaults(func=cmd_migrate)
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    settings = settings or default_settings
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL)
    try:
        return args.func(args, settings)
    except StoreError as e:
        logger.error("%s: %s", e.kind, e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
