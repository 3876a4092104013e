from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

# schema.sql names its own database; the configured one wins.
_SKIPPED_PREFIXES = ("CREATE DATABASE", "USE ")


def _server(target: DBConfig, *, database: bool = True):
    return mysql.connector.connect(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        database=target.database if database else None,
    )


def sql_statements(text: str) -> Iterator[str]:
    """Split a schema or seed file into statements.

    Statements end with ``;`` at the end of a line. ``--`` comment lines are
    dropped, as are CREATE DATABASE and USE.
    """

    lines: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        lines.append(line)
        if stripped.endswith(";"):
            statement = "\n".join(lines).strip().rstrip(";").strip()
            lines = []
            if not statement.upper().startswith(_SKIPPED_PREFIXES):
                yield statement
    if lines:
        yield "\n".join(lines).strip()


def _run_sql_file(db_config: dict, path: str | Path) -> int:
    statements = list(sql_statements(Path(path).read_text(encoding="utf-8")))
    conn = _server(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()
    return len(statements)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _server(target, database=False)
    try:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_sql_file(db_config, schema_path)
    logger.info("Applied %d schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_sql_file(db_config, seed_path)
    logger.info("Applied %d seed statements from %s", count, seed_path)


def list_tables(db_config: dict) -> list[str]:
    conn = _server(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
