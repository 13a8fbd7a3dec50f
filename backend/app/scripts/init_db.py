"""Standalone database initialization - one-shot maintenance command.

Connects to the database server without selecting a database and runs the
schema and seed scripts verbatim (they create and select the database
themselves). Exit status is the contract for operational tooling:
0 on success, 1 on any failure.

Usage:
    python -m app.scripts.init_db [--schema PATH] [--seed PATH]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from app.config import get_settings
from app.infrastructure.bootstrap import apply_scripts
from app.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    p = argparse.ArgumentParser(description="Create the storefront schema and seed data")
    p.add_argument("--schema", type=Path, default=settings.schema_script)
    p.add_argument("--seed", type=Path, default=settings.seed_script)
    p.add_argument(
        "--server-url",
        default=None,
        help="Server DSN without a database (default: built from DB_* settings)",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        asyncio.run(
            apply_scripts(args.server_url or settings.server_url, args.schema, args.seed),
        )
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        return 1
    logger.info("Database initialization complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
