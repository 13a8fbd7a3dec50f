"""Database Bootstrap - bring an empty database to the schema + seed state exactly once.

Invariants:
    - "Initialized" means the target database has at least one table; nothing else
      is inspected, so a half-applied schema is NOT detected or repaired
    - Once any table exists, schema and seed scripts are never re-applied
    - ensure_initialized() never raises: failures are logged and reported as
      BootstrapOutcome.FAILED so the server keeps starting
    - Schema then seed run on one connection, in one transaction

Design Decisions:
    - Statements are split client-side (core/sql_script.py) instead of relying on
      the driver's multi-statement flag; works the same on aiomysql and aiosqlite
    - Transaction gives full rollback on engines with transactional DDL; MySQL
      commits DDL implicitly, so a failure there needs manual cleanup
    - MySQL: GET_LOCK serializes concurrent bootstraps, table check repeated under it
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.domain_types import BootstrapOutcome
from app.core.errors import BootstrapError
from app.core.sql_script import (
    split_statements, strip_database_directives, strip_use_directives,
)

logger = logging.getLogger(__name__)

BOOTSTRAP_LOCK_NAME = "storefront_bootstrap"
BOOTSTRAP_LOCK_TIMEOUT_SECONDS = 60


async def read_script(path: Path) -> str:
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")


async def list_tables(conn: AsyncConnection) -> list[str]:
    """Table names in the connection's current database."""
    return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


async def execute_script(conn: AsyncConnection, script: str, *, phase: str) -> int:
    """Execute every statement of *script* in order. Returns the statement count."""
    statements = split_statements(script)
    for index, stmt in enumerate(statements, start=1):
        try:
            await conn.exec_driver_sql(
                stmt, execution_options={"no_parameters": True},
            )
        except Exception as e:
            raise BootstrapError(
                phase, f"statement {index}/{len(statements)}: {e}",
            ) from e
    return len(statements)


@asynccontextmanager
async def _bootstrap_lock(conn: AsyncConnection) -> AsyncIterator[None]:
    if conn.dialect.name != "mysql":
        yield
        return
    acquired = await conn.scalar(
        text("SELECT GET_LOCK(:name, :timeout)"),
        {"name": BOOTSTRAP_LOCK_NAME, "timeout": BOOTSTRAP_LOCK_TIMEOUT_SECONDS},
    )
    if acquired != 1:
        raise BootstrapError("lock", f"could not acquire {BOOTSTRAP_LOCK_NAME}")
    try:
        yield
    finally:
        try:
            await conn.execute(
                text("SELECT RELEASE_LOCK(:name)"), {"name": BOOTSTRAP_LOCK_NAME},
            )
        except Exception as e:
            logger.warning(f"Failed to release bootstrap lock: {e}")


async def ensure_initialized(
    database_url: str, schema_path: Path, seed_path: Path,
) -> BootstrapOutcome:
    """Apply schema + seed scripts if, and only if, the database has no tables."""
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            async with _bootstrap_lock(conn):
                tables = await list_tables(conn)
                await conn.commit()
                if tables:
                    logger.info(
                        "Database already initialized",
                        extra={"phase": "check"},
                    )
                    return BootstrapOutcome.ALREADY_INITIALIZED

                logger.info("No tables found. Initializing database...")
                schema = strip_database_directives(await read_script(schema_path))
                seeds = strip_use_directives(await read_script(seed_path))

                async with conn.begin():
                    count = await execute_script(conn, schema, phase="schema")
                    logger.info(
                        f"Schema created ({count} statements)",
                        extra={"phase": "schema"},
                    )
                    count = await execute_script(conn, seeds, phase="seed")
                    logger.info(
                        f"Sample data inserted ({count} statements)",
                        extra={"phase": "seed"},
                    )

        logger.info("Database initialization complete")
        return BootstrapOutcome.INITIALIZED
    except Exception as e:
        phase = e.phase if isinstance(e, BootstrapError) else "check"
        logger.error(
            f"Database initialization check failed: {e}",
            extra={"phase": phase},
        )
        return BootstrapOutcome.FAILED
    finally:
        await engine.dispose()


async def apply_scripts(server_url: str, schema_path: Path, seed_path: Path) -> None:
    """Run both scripts verbatim against a server-level connection.

    Used by the maintenance entry point: the scripts carry their own
    CREATE DATABASE / USE directives, so nothing is stripped. Raises on failure.
    """
    engine = create_async_engine(server_url, poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            logger.info("Connected to database server")
            schema = await read_script(schema_path)
            seeds = await read_script(seed_path)

            logger.info("Executing schema...", extra={"phase": "schema"})
            await execute_script(conn, schema, phase="schema")
            await conn.commit()
            logger.info("Schema created successfully", extra={"phase": "schema"})

            logger.info("Executing seeds...", extra={"phase": "seed"})
            await execute_script(conn, seeds, phase="seed")
            await conn.commit()
            logger.info("Seeds inserted successfully", extra={"phase": "seed"})
    finally:
        await engine.dispose()
