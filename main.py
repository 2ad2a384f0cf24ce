#!/usr/bin/env python3
"""
Beacon -- location-sharing API server.

Usage:
  python main.py init-db                  create the database tables and exit
  python main.py serve                    run the API on HOST:PORT from the environment
  python main.py serve --port 9000 --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY         HMAC key for stored token secrets (>= 32 chars). Required unless DEBUG=true.
  DATABASE_URL       SQLAlchemy URL. Defaults to a local SQLite file.
  POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_HOST, POSTGRES_DATABASE
                     Used to build a PostgreSQL URL when DATABASE_URL is empty.
  PORT               Listen port (default 8080).
"""

import argparse
import sys

from core.config import get_settings
from core.database import Database
from core.errors import StoreUnavailable


def _init_db() -> int:
    settings = get_settings()
    db = Database(settings.database_url, settings.db_connect_timeout)
    try:
        db.create_tables()
    except StoreUnavailable as e:
        print(f"  [!] Could not reach the database: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print("  Database tables are ready.")
    return 0


def _serve(host: str, port: int, reload: bool) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=host, port=port, reload=reload)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Beacon -- share your location with other users, or keep it to yourself.",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init-db", help="Create the database tables and exit")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Listen port (default: PORT or 8080)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")

    args = parser.parse_args()

    if args.command == "init-db":
        sys.exit(_init_db())
    if args.command == "serve":
        settings = get_settings()
        sys.exit(_serve(args.host or settings.host, args.port or settings.port, args.reload))

    parser.print_help()


if __name__ == "__main__":
    main()
