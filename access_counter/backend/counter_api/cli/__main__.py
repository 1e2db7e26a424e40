# backend/counter_api/cli/__main__.py
from __future__ import annotations

import argparse
import json
import sys

from counter_api.config import settings
from counter_api.db import create_tables, mysql_engine, postgres_engine
from counter_api.logging_config import configure_logging
from counter_api.services.storage_errors import StorageError


def _init_db() -> int:
    create_tables(postgres_engine, mysql_engine)
    print(json.dumps({"ok": True, "tables": ["counter_history"], "stores": ["postgres", "mysql"]}))
    return 0


def _bump(path: str) -> int:
    # imported lazily: building the app wires tracing and the redis client
    from counter_api.main import build_counter_service

    if settings.auto_create_tables:
        create_tables(postgres_engine, mysql_engine)

    service = build_counter_service()
    ops = {
        "ascending": service.increment_and_persist_a,
        "descending": service.decrement_and_persist_b,
        "redis": service.distributed_increment,
    }
    try:
        reading = ops[path]()
    except StorageError as e:
        print(json.dumps({"ok": False, "error": e.kind, "backend": e.backend, "detail": str(e)}))
        return 1
    print(json.dumps({"ok": True, **reading.to_dict()}))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="counter_api.cli")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create counter_history in both relational stores")

    bump = sub.add_parser("bump", help="run one counter operation outside HTTP")
    bump.add_argument("path", choices=["ascending", "descending", "redis"])

    args = p.parse_args(argv)
    configure_logging()

    if args.command == "init-db":
        return _init_db()
    return _bump(args.path)


if __name__ == "__main__":
    sys.exit(main())
